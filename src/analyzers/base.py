"""Base analyzer interface."""

import asyncio
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from fetcher.page import FetchedPage


class AnalyzerKind(str, enum.Enum):
    """The closed set of analyzer variants, in recommendation priority order."""

    ACCESSIBILITY = "accessibility"
    VISUAL_CLARITY = "visual_clarity"
    READABILITY = "readability"
    FOCUS = "focus"
    AI_VISION = "ai_vision"


ANALYZER_ORDER = list(AnalyzerKind)


@dataclass(frozen=True)
class HeatmapZone:
    """A page-relative attention zone (x/y in percent, intensity 0-1)."""

    x: float
    y: float
    intensity: float
    area: str | None = None

    def __post_init__(self):
        if not 0 <= self.x <= 100 or not 0 <= self.y <= 100:
            raise ValueError(f"Zone coordinates out of range: ({self.x}, {self.y})")
        if not 0 <= self.intensity <= 1:
            raise ValueError(f"Zone intensity out of range: {self.intensity}")


@dataclass
class AnalyzerResult:
    """
    Common result shape for all analyzers.

    A result with score None is "absent": the analyzer failed or timed out
    and `issues` explains why.
    """

    kind: AnalyzerKind
    score: float | None  # 0-100, None when absent
    issues: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def absent(cls, kind: AnalyzerKind, reason: str) -> "AnalyzerResult":
        """Placeholder fragment for an analyzer that produced nothing."""
        return AnalyzerResult(
            kind=kind,
            score=None,
            issues=[f"{kind.value.replace('_', ' ').capitalize()} analysis unavailable: {reason}"],
            error=reason,
        )


@dataclass
class VisualClarityResult(AnalyzerResult):
    layout_score: float = 0
    visual_balance: float = 0
    content_hierarchy: float = 0
    color_consistency: float = 0
    typography_score: float = 0
    navigation_score: float = 0
    responsiveness: float = 0
    mobile_friendly: bool = False
    load_time: float | None = None


@dataclass
class AccessibilityResult(AnalyzerResult):
    missing_alt_count: int = 0
    aria_issue_count: int = 0
    keyboard_nav: bool = True
    pass_aa: bool = True
    pass_aaa: bool = True
    min_contrast_ratio: float | None = None


@dataclass
class ReadabilityResult(AnalyzerResult):
    flesch_score: float = 0
    grade_level: str = ""
    word_count: int = 0
    sentence_count: int = 0
    syllable_count: int = 0


@dataclass
class FocusResult(AnalyzerResult):
    zones: list[HeatmapZone] = field(default_factory=list)


@dataclass
class VisionResult(AnalyzerResult):
    visual_issues: list[str] = field(default_factory=list)
    layout_problems: list[str] = field(default_factory=list)
    attention_zones: list[HeatmapZone] = field(default_factory=list)
    source: str = "baseline"  # "service" or "baseline"


def clamp_score(value: float) -> float:
    """Clamp to 0-100 and round to one decimal."""
    return round(max(0.0, min(100.0, value)), 1)


class BaseAnalyzer(ABC):
    """Abstract base class for all analyzers."""

    # Per-analyzer deadline in seconds; None means the configured default
    timeout: float | None = None

    @property
    @abstractmethod
    def kind(self) -> AnalyzerKind:
        """Return the analyzer variant."""
        pass

    @property
    def name(self) -> str:
        return self.kind.value

    async def analyze(self, page: FetchedPage) -> AnalyzerResult:
        """
        Run analysis on a fetched page.

        DOM analysis is CPU-bound, so it runs in a worker thread to keep
        sibling analyzers moving. A thread cannot be cancelled: when the
        caller's deadline passes, `evaluate` still runs to completion in
        the background and holds a default-executor slot until then.
        Subclasses keep `evaluate` bounded in the size of the page.

        Raises:
            AnalyzerError: If the page cannot be analyzed
        """
        return await asyncio.to_thread(self.evaluate, page)

    @abstractmethod
    def evaluate(self, page: FetchedPage) -> AnalyzerResult:
        """
        Synchronously analyze the given page.

        Args:
            page: The fetched page (read-only)

        Returns:
            The variant's AnalyzerResult
        """
        pass
