"""Scan report models (the persisted aggregate)."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

Score = Annotated[float, Field(ge=0, le=100)]

# Relative weight of each user-facing component in the overall score
COMPONENT_WEIGHTS = {
    "visual_clarity": 1.0,
    "accessibility": 1.0,
    "readability": 1.0,
    "focus_accuracy": 1.0,
}


def weighted_overall(components: dict[str, float | None]) -> float | None:
    """
    Weighted mean of the present components.

    Absent (None) components drop out of numerator and denominator alike,
    so the remaining weights are re-normalized. Returns None when nothing
    is present.
    """
    present = {name: value for name, value in components.items() if value is not None}
    total_weight = sum(COMPONENT_WEIGHTS[name] for name in present)
    if not present or total_weight == 0:
        return None
    weighted = sum(COMPONENT_WEIGHTS[name] * value for name, value in present.items())
    return round(weighted / total_weight, 1)


class ReportModel(BaseModel):
    """Base for report models: camelCase on the wire, immutable in memory."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Zone(ReportModel):
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    intensity: float = Field(ge=0, le=1)
    area: str | None = None


class ScanScores(ReportModel):
    """Component scores; None marks an absent component."""

    visual_clarity: Score | None = None
    accessibility: Score | None = None
    readability: Score | None = None
    focus_accuracy: Score | None = None

    @computed_field
    @property
    def overall(self) -> float | None:
        return weighted_overall(
            {name: getattr(self, name) for name in COMPONENT_WEIGHTS}
        )


class ColorContrast(ReportModel):
    pass_aa: bool = Field(alias="passAA")
    pass_aaa: bool = Field(alias="passAAA")
    min_ratio: float | None = None


class AccessibilityMetrics(ReportModel):
    missing_alt: int = Field(ge=0)
    aria_issues: int = Field(ge=0)
    keyboard_nav: bool
    issues: list[str] = []


class ReadabilityMetrics(ReportModel):
    flesch_score: float
    grade_level: str
    word_count: int = 0
    sentence_count: int = 0
    issues: list[str] = []


class VisualClarityMetrics(ReportModel):
    layout_score: Score
    visual_balance: Score
    content_hierarchy: Score
    color_consistency: Score
    typography_score: Score
    navigation_score: Score
    responsiveness: Score
    mobile_friendly: bool
    load_time: float | None = None  # seconds
    issues: list[str] = []


class ScanMetrics(ReportModel):
    color_contrast: ColorContrast | None = None
    accessibility: AccessibilityMetrics | None = None
    text_readability: ReadabilityMetrics | None = None
    visual_clarity: VisualClarityMetrics | None = None


class AIAnalysis(ReportModel):
    visual_issues: list[str] = []
    layout_problems: list[str] = []
    attention_zones: list[Zone] = []
    source: str | None = None  # "service" or "baseline"; None if the analyzer was absent


class HeatmapData(ReportModel):
    zones: list[Zone] = []


class ScanReport(ReportModel):
    """
    The visual health report for one scan.

    `id` is assigned by the store when the report is saved. `scores.overall`
    is always derived from the component scores.
    """

    id: str | None = None
    url: str
    timestamp: datetime
    screenshot: str | None = None
    scores: ScanScores
    metrics: ScanMetrics = ScanMetrics()
    ai_analysis: AIAnalysis = AIAnalysis()
    heatmap_data: HeatmapData = HeatmapData()
    recommendations: list[str] = []
    warnings: list[str] = []
