import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from analyzers import build_analyzers
from analyzers.base import AnalyzerKind
from analyzers.vision import BaselineAnalyzer, HttpVisionClient, VisionAnalyzer
from conftest import SAMPLE_HTML, SCREENSHOT, make_settings
from fetcher.page import FetchedPage

SERVICE_RESPONSE = {
    "visualIssues": ["Hero text overlaps the background image"],
    "layoutProblems": [],
    "attentionZones": [
        {"x": 30, "y": 15, "intensity": 0.95, "area": "headline"},
        {"x": 120, "y": 40, "intensity": 1.4},
    ],
}


def page(html: str = SAMPLE_HTML, screenshot: str | None = SCREENSHOT) -> FetchedPage:
    return FetchedPage(url="https://example.com", html=html, screenshot=screenshot)


class TestBaselineAnalyzer:
    def test_clean_page(self):
        result = BaselineAnalyzer().evaluate(page())

        assert result.kind == AnalyzerKind.AI_VISION
        assert result.source == "baseline"
        assert result.score == 100
        assert len(result.attention_zones) == 3

    def test_findings(self):
        html = "<html><body><img src='a.png'><table><tr><td>x</td></tr></table></body></html>"

        result = BaselineAnalyzer().evaluate(page(html))

        assert result.visual_issues == ["1 images lack explicit dimensions and may shift the layout"]
        assert len(result.layout_problems) == 2
        assert result.score == 70

    def test_deterministic(self):
        assert BaselineAnalyzer().evaluate(page()) == BaselineAnalyzer().evaluate(page())


class TestVisionAnalyzer:
    async def test_service_result(self):
        client = AsyncMock()
        client.analyze_image.return_value = SERVICE_RESPONSE

        result = await VisionAnalyzer(client, service_timeout=1).analyze(page())

        client.analyze_image.assert_awaited_once_with(SCREENSHOT)
        assert result.source == "service"
        assert result.visual_issues == ["Hero text overlaps the background image"]
        assert result.score == 90
        # Out-of-range service values are clamped
        assert result.attention_zones[1].x == 100
        assert result.attention_zones[1].intensity == 1

    async def test_no_screenshot_uses_baseline(self):
        client = AsyncMock()

        result = await VisionAnalyzer(client, service_timeout=1).analyze(page(screenshot=None))

        client.analyze_image.assert_not_awaited()
        assert result.source == "baseline"

    async def test_service_error_falls_back(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "overloaded"})

        client = HttpVisionClient("https://vision.test/analyze", transport=httpx.MockTransport(handler))

        result = await VisionAnalyzer(client, service_timeout=1).analyze(page())

        assert result.source == "baseline"
        assert result.score == 100

    async def test_slow_service_falls_back(self):
        async def slow(screenshot):
            await asyncio.sleep(5)

        client = AsyncMock()
        client.analyze_image.side_effect = slow

        result = await VisionAnalyzer(client, service_timeout=0.05).analyze(page())

        assert result.source == "baseline"

    async def test_malformed_response_falls_back(self):
        client = AsyncMock()
        client.analyze_image.return_value = {"attentionZones": [{"x": 10}]}

        result = await VisionAnalyzer(client, service_timeout=1).analyze(page())

        assert result.source == "baseline"

    @pytest.mark.parametrize(
        "error",
        [ConnectionError("vision service unreachable"), OSError("socket closed"), RuntimeError("sdk crashed")],
    )
    async def test_non_http_client_failure_falls_back(self, error, caplog):
        class DownClient:
            async def analyze_image(self, screenshot: str) -> dict:
                raise error

        result = await VisionAnalyzer(DownClient(), service_timeout=1).analyze(page())

        assert result.source == "baseline"
        assert result.score == 100
        assert "using baseline" in caplog.text

    def test_timeout_leaves_room_for_baseline(self):
        assert VisionAnalyzer(AsyncMock(), service_timeout=30).timeout == 35


class TestHttpVisionClient:
    async def test_posts_screenshot(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=SERVICE_RESPONSE)

        client = HttpVisionClient(
            "https://vision.test/analyze",
            api_key="secret",
            transport=httpx.MockTransport(handler),
        )

        data = await client.analyze_image(SCREENSHOT)

        assert data == SERVICE_RESPONSE
        assert seen["auth"] == "Bearer secret"
        assert seen["body"] == {"image": SCREENSHOT, "format": "png"}


class TestBuildAnalyzers:
    def test_one_per_variant(self):
        analyzers = build_analyzers(make_settings())

        assert [a.kind for a in analyzers] == list(AnalyzerKind)
        assert isinstance(analyzers[-1], BaselineAnalyzer)

    def test_service_configured(self):
        analyzers = build_analyzers(make_settings(vision_api_url="https://vision.test/analyze"))

        assert isinstance(analyzers[-1], VisionAnalyzer)
        assert isinstance(analyzers[-1].client, HttpVisionClient)

    @pytest.mark.parametrize("max_zones", [2, 4])
    def test_zone_cap_from_settings(self, max_zones):
        analyzers = build_analyzers(make_settings(max_zones=max_zones))

        focus = next(a for a in analyzers if a.kind == AnalyzerKind.FOCUS)
        assert focus.max_zones == max_zones
