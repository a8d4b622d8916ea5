"""VisiAI analyzers package."""

from analyzers.accessibility import AccessibilityAnalyzer
from analyzers.base import (
    ANALYZER_ORDER,
    AccessibilityResult,
    AnalyzerKind,
    AnalyzerResult,
    BaseAnalyzer,
    FocusResult,
    HeatmapZone,
    ReadabilityResult,
    VisionResult,
    VisualClarityResult,
)
from analyzers.focus import FocusAnalyzer
from analyzers.readability import ReadabilityAnalyzer
from analyzers.vision import BaselineAnalyzer, HttpVisionClient, VisionAnalyzer, VisionClient
from analyzers.visual import VisualClarityAnalyzer
from config import Settings


def build_analyzers(settings: Settings, vision_client: VisionClient | None = None) -> list[BaseAnalyzer]:
    """
    Build one analyzer per variant.

    The vision slot gets the external VisionAnalyzer only when a client is
    given or a service URL is configured; otherwise the BaselineAnalyzer.
    """
    if vision_client is None and settings.vision_api_url:
        vision_client = HttpVisionClient(
            api_url=settings.vision_api_url,
            api_key=settings.vision_api_key,
            timeout=settings.vision_timeout,
        )

    if vision_client is not None:
        vision: BaseAnalyzer = VisionAnalyzer(vision_client, service_timeout=settings.vision_timeout)
    else:
        vision = BaselineAnalyzer()

    return [
        AccessibilityAnalyzer(),
        VisualClarityAnalyzer(),
        ReadabilityAnalyzer(),
        FocusAnalyzer(max_zones=settings.max_zones),
        vision,
    ]


__all__ = [
    "ANALYZER_ORDER",
    "AccessibilityAnalyzer",
    "AccessibilityResult",
    "AnalyzerKind",
    "AnalyzerResult",
    "BaseAnalyzer",
    "BaselineAnalyzer",
    "FocusAnalyzer",
    "FocusResult",
    "HeatmapZone",
    "HttpVisionClient",
    "ReadabilityAnalyzer",
    "ReadabilityResult",
    "VisionAnalyzer",
    "VisionClient",
    "VisionResult",
    "VisualClarityAnalyzer",
    "VisualClarityResult",
    "build_analyzers",
]
