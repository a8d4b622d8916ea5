"""AI vision analyzer and its local baseline."""

import asyncio
import logging
from typing import Any, Protocol

import httpx

from analyzers.base import (
    AnalyzerKind,
    BaseAnalyzer,
    HeatmapZone,
    VisionResult,
    clamp_score,
)
from fetcher.page import FetchedPage

logger = logging.getLogger(__name__)


class VisionClient(Protocol):
    """
    External image analysis capability.

    Returns a dict with `visualIssues`, `layoutProblems` and
    `attentionZones` keys.
    """

    async def analyze_image(self, screenshot: str) -> dict[str, Any]:
        ...


class HttpVisionClient:
    """Posts a base64 screenshot to a configured vision endpoint."""

    def __init__(
        self,
        api_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def analyze_image(self, screenshot: str) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.api_url,
                json={"image": screenshot, "format": "png"},
                headers=headers,
            )
            response.raise_for_status()
            return response.json()


def _zone_from_dict(data: dict) -> HeatmapZone:
    """Build a zone from service output, clamping to the valid ranges."""
    return HeatmapZone(
        x=max(0.0, min(100.0, float(data["x"]))),
        y=max(0.0, min(100.0, float(data["y"]))),
        intensity=max(0.0, min(1.0, float(data["intensity"]))),
        area=data.get("area"),
    )


class BaselineAnalyzer(BaseAnalyzer):
    """
    Local, deterministic stand-in for the vision service.

    Used whenever no service is configured, no screenshot was captured,
    or the service call fails. Findings come from DOM heuristics and the
    attention zones follow the F-shaped scanning pattern.
    """

    BASELINE_ZONES = [
        HeatmapZone(x=20, y=10, intensity=0.9, area="top-left"),
        HeatmapZone(x=50, y=12, intensity=0.7, area="top band"),
        HeatmapZone(x=20, y=45, intensity=0.5, area="left column"),
    ]

    MAX_INLINE_STYLES = 20
    MAX_NESTING = 15

    @property
    def kind(self) -> AnalyzerKind:
        return AnalyzerKind.AI_VISION

    def evaluate(self, page: FetchedPage) -> VisionResult:
        soup = page.soup()
        visual_issues = []
        layout_problems = []

        unsized = [
            img for img in soup.find_all("img")
            if not (img.get("width") and img.get("height"))
        ]
        if unsized:
            visual_issues.append(f"{len(unsized)} images lack explicit dimensions and may shift the layout")

        inline_styles = len(soup.find_all(style=True))
        if inline_styles > self.MAX_INLINE_STYLES:
            visual_issues.append(f"{inline_styles} inline styles suggest inconsistent visual styling")

        if not soup.find("meta", attrs={"name": "viewport"}):
            layout_problems.append("Layout may not adapt to small screens (no viewport meta)")

        layout_tables = [t for t in soup.find_all("table") if not t.find("th")]
        if layout_tables:
            layout_problems.append(f"{len(layout_tables)} tables appear to be used for layout")

        depth = self._max_div_depth(soup)
        if depth > self.MAX_NESTING:
            layout_problems.append(f"Containers nested {depth} levels deep complicate the layout")

        findings = len(visual_issues) + len(layout_problems)
        return VisionResult(
            kind=self.kind,
            score=clamp_score(100 - 10 * findings),
            issues=visual_issues + layout_problems,
            visual_issues=visual_issues,
            layout_problems=layout_problems,
            attention_zones=list(self.BASELINE_ZONES),
            source="baseline",
        )

    def _max_div_depth(self, soup) -> int:
        deepest = 0
        for div in soup.find_all("div"):
            if div.find("div") is None:
                deepest = max(deepest, len(div.find_parents("div")) + 1)
        return deepest


class VisionAnalyzer(BaseAnalyzer):
    """
    Screenshot analysis through an external VisionClient.

    Falls back to the BaselineAnalyzer, explicitly and with a warning,
    when there is no screenshot or the service fails.
    """

    def __init__(self, client: VisionClient, service_timeout: float, baseline: BaselineAnalyzer | None = None):
        self.client = client
        self.service_timeout = service_timeout
        self.baseline = baseline or BaselineAnalyzer()

    @property
    def kind(self) -> AnalyzerKind:
        return AnalyzerKind.AI_VISION

    @property
    def timeout(self) -> float:
        # The service call plus room for the baseline after it
        return self.service_timeout + 5.0

    def evaluate(self, page: FetchedPage) -> VisionResult:
        return self.baseline.evaluate(page)

    async def analyze(self, page: FetchedPage) -> VisionResult:
        if not page.screenshot:
            logger.info(f"No screenshot for {page.url}, using baseline vision analysis")
            return await self.baseline.analyze(page)

        try:
            data = await asyncio.wait_for(
                self.client.analyze_image(page.screenshot),
                timeout=self.service_timeout,
            )
            return self._parse(data)
        except asyncio.TimeoutError:
            logger.warning(f"Vision service timed out for {page.url}, using baseline")
        except httpx.HTTPError as e:
            logger.warning(f"Vision service unreachable for {page.url} ({e}), using baseline")
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Vision service returned malformed data for {page.url} ({e}), using baseline")
        except Exception as e:
            logger.warning(f"Vision client failed for {page.url} ({type(e).__name__}: {e}), using baseline")

        return await self.baseline.analyze(page)

    def _parse(self, data: dict[str, Any]) -> VisionResult:
        visual_issues = [str(issue) for issue in data.get("visualIssues", [])]
        layout_problems = [str(problem) for problem in data.get("layoutProblems", [])]
        zones = [_zone_from_dict(zone) for zone in data.get("attentionZones", [])]

        findings = len(visual_issues) + len(layout_problems)
        return VisionResult(
            kind=self.kind,
            score=clamp_score(100 - 10 * findings),
            issues=visual_issues + layout_problems,
            visual_issues=visual_issues,
            layout_problems=layout_problems,
            attention_zones=zones,
            source="service",
        )
