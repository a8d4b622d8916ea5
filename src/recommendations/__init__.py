"""VisiAI recommendations package."""

from recommendations.engine import RecommendationEngine
from recommendations.rules import ALL_RULES, Rule

__all__ = [
    "RecommendationEngine",
    "ALL_RULES",
    "Rule",
]
