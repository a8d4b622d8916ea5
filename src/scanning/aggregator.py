"""Score aggregation: fragments in, one scored result out."""

import logging
from dataclasses import dataclass

from analyzers.base import (
    AccessibilityResult,
    AnalyzerKind,
    AnalyzerResult,
    FocusResult,
    HeatmapZone,
    ReadabilityResult,
    VisionResult,
    VisualClarityResult,
)
from errors import InsufficientDataError
from recommendations.engine import RecommendationEngine
from scanning.report import (
    AccessibilityMetrics,
    AIAnalysis,
    ColorContrast,
    HeatmapData,
    ReadabilityMetrics,
    ScanMetrics,
    ScanScores,
    VisualClarityMetrics,
    Zone,
)

logger = logging.getLogger(__name__)

# Score component -> analyzer that provides it
COMPONENT_SOURCES = {
    "visual_clarity": AnalyzerKind.VISUAL_CLARITY,
    "accessibility": AnalyzerKind.ACCESSIBILITY,
    "readability": AnalyzerKind.READABILITY,
    "focus_accuracy": AnalyzerKind.FOCUS,
}


@dataclass(frozen=True)
class AggregateResult:
    scores: ScanScores
    metrics: ScanMetrics
    ai_analysis: AIAnalysis
    heatmap_data: HeatmapData
    recommendations: list[str]
    warnings: list[str]


def _zones(zones: list[HeatmapZone]) -> list[Zone]:
    return [Zone(x=z.x, y=z.y, intensity=z.intensity, area=z.area) for z in zones]


class ScoreAggregator:
    """Combines one fragment per analyzer variant into report sections."""

    def __init__(self, engine: RecommendationEngine | None = None):
        self.engine = engine or RecommendationEngine()

    def combine(self, fragments: list[AnalyzerResult]) -> AggregateResult:
        """
        Combine analyzer fragments.

        Raises:
            InsufficientDataError: If no component score is present
        """
        by_kind: dict[AnalyzerKind, AnalyzerResult] = {}
        for fragment in fragments:
            if fragment.kind in by_kind:
                raise ValueError(f"Duplicate fragment for analyzer {fragment.kind.value}")
            by_kind[fragment.kind] = fragment

        components = {}
        for component, kind in COMPONENT_SOURCES.items():
            fragment = by_kind.get(kind)
            components[component] = fragment.score if fragment else None

        if all(score is None for score in components.values()):
            raise InsufficientDataError("No analyzer produced a usable score")

        scores = ScanScores(**components)
        warnings = [
            issue
            for fragment in fragments
            if fragment.score is None
            for issue in fragment.issues
        ]
        missing = [kind.value for kind in AnalyzerKind if kind not in by_kind]
        warnings.extend(f"No result from {name} analyzer" for name in missing)

        logger.info(
            f"Aggregated {len(fragments)} fragments: overall={scores.overall} "
            f"absent={[c for c, s in components.items() if s is None]}"
        )

        return AggregateResult(
            scores=scores,
            metrics=self._metrics(by_kind),
            ai_analysis=self._ai_analysis(by_kind.get(AnalyzerKind.AI_VISION)),
            heatmap_data=self._heatmap(by_kind.get(AnalyzerKind.FOCUS)),
            recommendations=self.engine.generate(list(by_kind.values())),
            warnings=warnings,
        )

    def _metrics(self, by_kind: dict[AnalyzerKind, AnalyzerResult]) -> ScanMetrics:
        metrics = {}

        accessibility = by_kind.get(AnalyzerKind.ACCESSIBILITY)
        if isinstance(accessibility, AccessibilityResult):
            metrics["color_contrast"] = ColorContrast(
                pass_aa=accessibility.pass_aa,
                pass_aaa=accessibility.pass_aaa,
                min_ratio=accessibility.min_contrast_ratio,
            )
            metrics["accessibility"] = AccessibilityMetrics(
                missing_alt=accessibility.missing_alt_count,
                aria_issues=accessibility.aria_issue_count,
                keyboard_nav=accessibility.keyboard_nav,
                issues=accessibility.issues,
            )

        readability = by_kind.get(AnalyzerKind.READABILITY)
        if isinstance(readability, ReadabilityResult):
            metrics["text_readability"] = ReadabilityMetrics(
                flesch_score=readability.flesch_score,
                grade_level=readability.grade_level,
                word_count=readability.word_count,
                sentence_count=readability.sentence_count,
                issues=readability.issues,
            )

        visual = by_kind.get(AnalyzerKind.VISUAL_CLARITY)
        if isinstance(visual, VisualClarityResult):
            metrics["visual_clarity"] = VisualClarityMetrics(
                layout_score=visual.layout_score,
                visual_balance=visual.visual_balance,
                content_hierarchy=visual.content_hierarchy,
                color_consistency=visual.color_consistency,
                typography_score=visual.typography_score,
                navigation_score=visual.navigation_score,
                responsiveness=visual.responsiveness,
                mobile_friendly=visual.mobile_friendly,
                load_time=visual.load_time,
                issues=visual.issues,
            )

        return ScanMetrics(**metrics)

    def _ai_analysis(self, fragment: AnalyzerResult | None) -> AIAnalysis:
        if not isinstance(fragment, VisionResult):
            return AIAnalysis()
        return AIAnalysis(
            visual_issues=fragment.visual_issues,
            layout_problems=fragment.layout_problems,
            attention_zones=_zones(fragment.attention_zones),
            source=fragment.source,
        )

    def _heatmap(self, fragment: AnalyzerResult | None) -> HeatmapData:
        if not isinstance(fragment, FocusResult):
            return HeatmapData()
        return HeatmapData(zones=_zones(fragment.zones))
