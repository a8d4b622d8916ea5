from analyzers.base import (
    AccessibilityResult,
    AnalyzerKind,
    AnalyzerResult,
    FocusResult,
    ReadabilityResult,
    VisualClarityResult,
)
from recommendations import ALL_RULES, RecommendationEngine, Rule


def poor_fragments():
    return [
        AccessibilityResult(
            kind=AnalyzerKind.ACCESSIBILITY,
            score=35,
            issues=["Document language (<html lang>) is not declared", "2 form controls have no accessible label"],
            missing_alt_count=4,
            aria_issue_count=2,
            keyboard_nav=False,
            pass_aa=False,
            pass_aaa=False,
        ),
        VisualClarityResult(
            kind=AnalyzerKind.VISUAL_CLARITY,
            score=45,
            layout_score=55,
            visual_balance=40,
            content_hierarchy=30,
            color_consistency=60,
            typography_score=70,
            navigation_score=40,
            responsiveness=0,
            mobile_friendly=False,
        ),
        ReadabilityResult(
            kind=AnalyzerKind.READABILITY,
            score=20,
            issues=["Average sentence length is 31 words (recommend 20 or fewer)"],
            flesch_score=20.0,
            grade_level="college graduate",
        ),
        FocusResult(
            kind=AnalyzerKind.FOCUS,
            score=60,
            issues=["No primary headline to anchor attention", "No clear call to action found"],
        ),
    ]


class TestRecommendationEngine:
    def test_limit(self):
        engine = RecommendationEngine(limit=5)
        assert len(engine.generate(poor_fragments())) == 5

    def test_high_severity_first_in_analyzer_order(self):
        engine = RecommendationEngine(limit=20)

        recommendations = engine.generate(poor_fragments())

        assert recommendations[:3] == [
            "Increase text contrast to at least 4.5:1 so body text meets WCAG AA",
            "Add descriptive alt text to 4 images so screen reader users know what they show",
            "Make every interactive element reachable by keyboard: drop positive tabindex values "
            "and use real buttons and links for click targets",
        ]
        # High severity from later analyzers follows accessibility
        assert recommendations[3].startswith("Add a responsive viewport meta tag")
        assert "college graduate" in recommendations[4]
        assert recommendations[5].startswith("Add a prominent headline")

    def test_one_recommendation_per_rule(self):
        duplicate = Rule(
            id="dup",
            analyzer=AnalyzerKind.FOCUS,
            severity="high",
            condition=lambda ctx: True,
            message="Same advice",
        )
        engine = RecommendationEngine(rules=[duplicate, duplicate])

        assert engine.generate(poor_fragments()) == ["Same advice"]

    def test_absent_fragment_triggers_nothing(self):
        engine = RecommendationEngine(limit=20)
        fragments = [AnalyzerResult.absent(kind, "timed out") for kind in AnalyzerKind]

        assert engine.generate(fragments) == []

    def test_broken_rule_is_skipped(self):
        broken = Rule(
            id="broken",
            analyzer=AnalyzerKind.ACCESSIBILITY,
            severity="high",
            condition=lambda ctx: ctx["missing"]["key"],
            message="never",
        )
        engine = RecommendationEngine(rules=[broken] + ALL_RULES, limit=20)

        recommendations = engine.generate(poor_fragments())

        assert "never" not in recommendations
        assert recommendations

    def test_every_rule_has_unique_id(self):
        ids = [rule.id for rule in ALL_RULES]
        assert len(ids) == len(set(ids))
