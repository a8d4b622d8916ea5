"""Recommendation engine that turns analyzer fragments into advice."""

import dataclasses
import logging

from analyzers.base import ANALYZER_ORDER, AnalyzerResult
from recommendations.rules import ALL_RULES, Rule

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}


class RecommendationEngine:
    """
    Generates recommendations by evaluating rules against analyzer results.

    The engine:
    1. Builds a unified context from all fragments
    2. Evaluates each rule against the context
    3. Deduplicates by rule id (one recommendation per issue category)
    4. Orders by severity, then by analyzer (accessibility first)
    5. Caps the list at `limit`
    """

    def __init__(self, rules: list[Rule] | None = None, limit: int = 8):
        self.rules = ALL_RULES if rules is None else rules
        self.limit = limit

    def generate(self, fragments: list[AnalyzerResult]) -> list[str]:
        context = self.build_context(fragments)
        triggered = self._evaluate_rules(context)
        logger.debug(f"Triggered {len(triggered)} recommendation rules")

        recommendations = []
        seen_ids = set()
        for rule in triggered:
            if rule.id in seen_ids:
                continue
            seen_ids.add(rule.id)
            recommendations.append(rule.render(context))
            if len(recommendations) >= self.limit:
                break

        return recommendations

    @staticmethod
    def build_context(fragments: list[AnalyzerResult]) -> dict:
        """
        Build a unified context keyed by analyzer kind.

        Absent fragments contribute only their (None) score and issues, so
        payload rules never fire on missing data.
        """
        context = {}
        for fragment in fragments:
            data = {"score": fragment.score, "issues": list(fragment.issues)}
            if fragment.score is not None:
                for field in dataclasses.fields(fragment):
                    if field.name not in ("kind", "score", "issues", "error"):
                        data[field.name] = getattr(fragment, field.name)
            context[fragment.kind.value] = data
        return context

    def _evaluate_rules(self, context: dict) -> list[Rule]:
        triggered = []

        for rule in self.rules:
            try:
                if rule.condition(context):
                    triggered.append(rule)
            except (KeyError, TypeError, IndexError) as e:
                logger.warning(f"Error evaluating rule {rule.id}: {e}")

        # Stable sort keeps rule table order within the same bucket
        triggered.sort(
            key=lambda r: (SEVERITY_ORDER.get(r.severity, 99), ANALYZER_ORDER.index(r.analyzer))
        )
        return triggered
