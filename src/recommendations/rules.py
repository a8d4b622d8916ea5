"""Recommendation rules definition."""

from dataclasses import dataclass
from typing import Any, Callable

from analyzers.base import AnalyzerKind


@dataclass
class Rule:
    """
    A single recommendation rule.

    Each rule stands for one issue category; it fires at most once per
    report no matter how many individual issues fall into it.
    """

    id: str
    analyzer: AnalyzerKind
    severity: str  # high, medium, low
    condition: Callable[[dict], bool]
    message: str | Callable[[dict], str]

    def render(self, ctx: dict) -> str:
        return self.message(ctx) if callable(self.message) else self.message


def _get_nested(data: dict, path: str, default: Any = None) -> Any:
    """Get a nested value from a dict using dot notation."""
    keys = path.split(".")
    value = data
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key, default)
        else:
            return default
    return value


def _has_issue(ctx: dict, analyzer: str, fragment: str) -> bool:
    """True if any issue reported by `analyzer` mentions `fragment`."""
    issues = _get_nested(ctx, f"{analyzer}.issues") or []
    return any(fragment.lower() in issue.lower() for issue in issues)


def _below(ctx: dict, path: str, threshold: float) -> bool:
    value = _get_nested(ctx, path)
    return value is not None and value < threshold


# =============================================================================
# Accessibility Rules
# =============================================================================

ACCESSIBILITY_RULES = [
    Rule(
        id="contrast-fails-aa",
        analyzer=AnalyzerKind.ACCESSIBILITY,
        severity="high",
        condition=lambda ctx: _get_nested(ctx, "accessibility.pass_aa") is False,
        message="Increase text contrast to at least 4.5:1 so body text meets WCAG AA",
    ),
    Rule(
        id="missing-alt-text",
        analyzer=AnalyzerKind.ACCESSIBILITY,
        severity="high",
        condition=lambda ctx: (_get_nested(ctx, "accessibility.missing_alt_count") or 0) > 0,
        message=lambda ctx: (
            f"Add descriptive alt text to {_get_nested(ctx, 'accessibility.missing_alt_count')} "
            "images so screen reader users know what they show"
        ),
    ),
    Rule(
        id="keyboard-navigation",
        analyzer=AnalyzerKind.ACCESSIBILITY,
        severity="high",
        condition=lambda ctx: _get_nested(ctx, "accessibility.keyboard_nav") is False,
        message="Make every interactive element reachable by keyboard: drop positive tabindex values "
        "and use real buttons and links for click targets",
    ),
    Rule(
        id="aria-misuse",
        analyzer=AnalyzerKind.ACCESSIBILITY,
        severity="medium",
        condition=lambda ctx: (_get_nested(ctx, "accessibility.aria_issue_count") or 0) > 0,
        message=lambda ctx: (
            f"Fix {_get_nested(ctx, 'accessibility.aria_issue_count')} ARIA issues: use valid roles, "
            "point references at existing ids and give icon controls a label"
        ),
    ),
    Rule(
        id="unlabeled-form-controls",
        analyzer=AnalyzerKind.ACCESSIBILITY,
        severity="medium",
        condition=lambda ctx: _has_issue(ctx, "accessibility", "form controls"),
        message="Associate every form field with a visible <label>",
    ),
    Rule(
        id="missing-document-language",
        analyzer=AnalyzerKind.ACCESSIBILITY,
        severity="low",
        condition=lambda ctx: _has_issue(ctx, "accessibility", "document language"),
        message="Declare the page language with <html lang=\"...\">",
    ),
    Rule(
        id="contrast-fails-aaa",
        analyzer=AnalyzerKind.ACCESSIBILITY,
        severity="low",
        condition=lambda ctx: _get_nested(ctx, "accessibility.pass_aa") is True
        and _get_nested(ctx, "accessibility.pass_aaa") is False,
        message="Consider raising text contrast to 7:1 to reach WCAG AAA",
    ),
]

# =============================================================================
# Visual Clarity Rules
# =============================================================================

VISUAL_CLARITY_RULES = [
    Rule(
        id="not-mobile-friendly",
        analyzer=AnalyzerKind.VISUAL_CLARITY,
        severity="high",
        condition=lambda ctx: _get_nested(ctx, "visual_clarity.mobile_friendly") is False,
        message="Add a responsive viewport meta tag and media queries so the layout adapts to small screens",
    ),
    Rule(
        id="weak-content-hierarchy",
        analyzer=AnalyzerKind.VISUAL_CLARITY,
        severity="medium",
        condition=lambda ctx: _below(ctx, "visual_clarity.content_hierarchy", 70),
        message="Use a single H1 and nest headings in order to clarify the content hierarchy",
    ),
    Rule(
        id="weak-navigation",
        analyzer=AnalyzerKind.VISUAL_CLARITY,
        severity="medium",
        condition=lambda ctx: _below(ctx, "visual_clarity.navigation_score", 70),
        message="Provide a clear navigation menu with three to nine labelled links",
    ),
    Rule(
        id="unbalanced-layout",
        analyzer=AnalyzerKind.VISUAL_CLARITY,
        severity="low",
        condition=lambda ctx: _below(ctx, "visual_clarity.visual_balance", 70),
        message="Balance text and imagery so neither overwhelms the page",
    ),
    Rule(
        id="inconsistent-colors",
        analyzer=AnalyzerKind.VISUAL_CLARITY,
        severity="low",
        condition=lambda ctx: _below(ctx, "visual_clarity.color_consistency", 80),
        message="Consolidate the color palette into a small set of brand colors",
    ),
    Rule(
        id="inconsistent-typography",
        analyzer=AnalyzerKind.VISUAL_CLARITY,
        severity="low",
        condition=lambda ctx: _below(ctx, "visual_clarity.typography_score", 80),
        message="Limit the page to three font families and keep text at 12px or larger",
    ),
]

# =============================================================================
# Readability Rules
# =============================================================================

READABILITY_RULES = [
    Rule(
        id="very-difficult-text",
        analyzer=AnalyzerKind.READABILITY,
        severity="high",
        condition=lambda ctx: _below(ctx, "readability.flesch_score", 30),
        message=lambda ctx: (
            "Simplify the copy with shorter sentences and plainer words "
            f"(currently reads at {_get_nested(ctx, 'readability.grade_level')} level)"
        ),
    ),
    Rule(
        id="difficult-text",
        analyzer=AnalyzerKind.READABILITY,
        severity="medium",
        condition=lambda ctx: not _below(ctx, "readability.flesch_score", 30)
        and _below(ctx, "readability.flesch_score", 50),
        message="Aim for a Flesch score of 60 or more by trimming jargon and long words",
    ),
    Rule(
        id="long-sentences",
        analyzer=AnalyzerKind.READABILITY,
        severity="medium",
        condition=lambda ctx: _has_issue(ctx, "readability", "sentence length"),
        message="Break long sentences into ones of 20 words or fewer",
    ),
    Rule(
        id="thin-content",
        analyzer=AnalyzerKind.READABILITY,
        severity="low",
        condition=lambda ctx: _has_issue(ctx, "readability", "little text"),
        message="Add more descriptive text so visitors understand the page's purpose",
    ),
]

# =============================================================================
# Focus Rules
# =============================================================================

FOCUS_RULES = [
    Rule(
        id="missing-focal-headline",
        analyzer=AnalyzerKind.FOCUS,
        severity="high",
        condition=lambda ctx: _has_issue(ctx, "focus", "no primary headline"),
        message="Add a prominent headline near the top to anchor visitors' attention",
    ),
    Rule(
        id="missing-call-to-action",
        analyzer=AnalyzerKind.FOCUS,
        severity="medium",
        condition=lambda ctx: _has_issue(ctx, "focus", "no clear call to action"),
        message="Add one clear, high-contrast call to action above the fold",
    ),
    Rule(
        id="competing-focal-points",
        analyzer=AnalyzerKind.FOCUS,
        severity="medium",
        condition=lambda ctx: _has_issue(ctx, "focus", "compete for attention")
        or _has_issue(ctx, "focus", "split attention"),
        message="Reduce competing headlines and calls to action to a single primary focus",
    ),
]

# =============================================================================
# AI Vision Rules
# =============================================================================

AI_VISION_RULES = [
    Rule(
        id="vision-layout-problems",
        analyzer=AnalyzerKind.AI_VISION,
        severity="low",
        condition=lambda ctx: bool(_get_nested(ctx, "ai_vision.layout_problems")),
        message=lambda ctx: f"Review layout: {_get_nested(ctx, 'ai_vision.layout_problems')[0]}",
    ),
    Rule(
        id="vision-visual-issues",
        analyzer=AnalyzerKind.AI_VISION,
        severity="low",
        condition=lambda ctx: bool(_get_nested(ctx, "ai_vision.visual_issues")),
        message=lambda ctx: f"Review visuals: {_get_nested(ctx, 'ai_vision.visual_issues')[0]}",
    ),
]

# =============================================================================
# All Rules Combined
# =============================================================================

ALL_RULES = (
    ACCESSIBILITY_RULES
    + VISUAL_CLARITY_RULES
    + READABILITY_RULES
    + FOCUS_RULES
    + AI_VISION_RULES
)
