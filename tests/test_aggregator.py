from dataclasses import replace

import pytest

from analyzers.base import AccessibilityResult, AnalyzerKind, AnalyzerResult
from conftest import scenario_results
from errors import InsufficientDataError
from recommendations import RecommendationEngine
from scanning.aggregator import ScoreAggregator


@pytest.fixture
def aggregator():
    return ScoreAggregator(RecommendationEngine())


class TestCombine:
    def test_full_set(self, aggregator):
        result = aggregator.combine(list(scenario_results().values()))

        assert result.scores.overall == 84
        assert result.scores.visual_clarity == 88
        assert result.metrics.accessibility.missing_alt == 2
        assert result.metrics.text_readability.grade_level == "6th grade"
        assert result.metrics.visual_clarity.mobile_friendly is True
        assert len(result.heatmap_data.zones) == 3
        assert result.ai_analysis.attention_zones[0].area == "top-left"
        assert result.warnings == []

    def test_absent_component_excluded_from_overall(self, aggregator):
        fragments = scenario_results()
        fragments[AnalyzerKind.ACCESSIBILITY] = AnalyzerResult.absent(AnalyzerKind.ACCESSIBILITY, "boom")

        result = aggregator.combine(list(fragments.values()))

        assert result.scores.accessibility is None
        # (88 + 82 + 88) / 3
        assert result.scores.overall == 86
        assert result.metrics.color_contrast is None
        assert result.metrics.accessibility is None
        assert result.warnings == ["Accessibility analysis unavailable: boom"]

    def test_load_time_reaches_visual_metrics(self, aggregator):
        fragments = scenario_results()
        fragments[AnalyzerKind.VISUAL_CLARITY] = replace(fragments[AnalyzerKind.VISUAL_CLARITY], load_time=1.8)

        result = aggregator.combine(list(fragments.values()))

        assert result.metrics.visual_clarity.load_time == 1.8
        assert result.metrics.model_dump(by_alias=True)["visualClarity"]["loadTime"] == 1.8

    def test_missing_fragment_is_warned(self, aggregator):
        fragments = scenario_results()
        del fragments[AnalyzerKind.AI_VISION]

        result = aggregator.combine(list(fragments.values()))

        assert result.scores.overall == 84
        assert result.ai_analysis.source is None
        assert result.warnings == ["No result from ai_vision analyzer"]

    def test_vision_alone_is_insufficient(self, aggregator):
        fragments = scenario_results()
        absent = [
            AnalyzerResult.absent(kind, "failed")
            for kind in fragments
            if kind != AnalyzerKind.AI_VISION
        ]

        with pytest.raises(InsufficientDataError):
            aggregator.combine(absent + [fragments[AnalyzerKind.AI_VISION]])

    def test_nothing_present(self, aggregator):
        with pytest.raises(InsufficientDataError):
            aggregator.combine([])

    def test_duplicate_kind_rejected(self, aggregator):
        fragment = scenario_results()[AnalyzerKind.FOCUS]
        with pytest.raises(ValueError):
            aggregator.combine([fragment, fragment])

    def test_recommendations_follow_findings(self, aggregator):
        fragments = scenario_results()
        fragments[AnalyzerKind.ACCESSIBILITY] = AccessibilityResult(
            kind=AnalyzerKind.ACCESSIBILITY,
            score=40,
            missing_alt_count=3,
            keyboard_nav=False,
            pass_aa=False,
            pass_aaa=False,
            min_contrast_ratio=2.1,
        )

        result = aggregator.combine(list(fragments.values()))

        assert result.recommendations[0].startswith("Increase text contrast")
        assert any("alt text to 3 images" in r for r in result.recommendations)
