"""
Test configuration and fixtures for the VisiAI API.

Scans run against a stub fetcher and deterministic stub analyzers, so no
test touches the network or a real browser.
"""

import asyncio
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from analyzers.base import (
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
from config import Settings
from db.store import InMemoryScanStore
from fetcher.page import FetchedPage
from main import create_app
from recommendations import RecommendationEngine
from scanning.aggregator import ScoreAggregator
from scanning.orchestrator import ScanOrchestrator

SAMPLE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Example</title>
  <style>
    body { color: #222222; background-color: #ffffff; }
    @media (max-width: 600px) { nav { display: none; } }
  </style>
</head>
<body>
  <header>
    <nav>
      <a href="/">Home</a>
      <a href="/features">Features</a>
      <a href="/pricing">Pricing</a>
      <a href="/contact">Contact</a>
    </nav>
  </header>
  <main>
    <h1>Build better pages</h1>
    <img src="/hero.png" alt="Product screenshot" width="800" height="400">
    <p>We help teams see their pages the way visitors do. The tool is quick to set up.</p>
    <p>Run a scan and read the report. Fix the top items first.</p>
    <h2>Why it works</h2>
    <ul><li>Clear scores</li><li>Plain advice</li></ul>
    <a class="btn btn-primary" href="/signup">Get started</a>
  </main>
  <footer><p>Example Inc.</p></footer>
</body>
</html>
"""

SCREENSHOT = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


def make_settings(**overrides) -> Settings:
    values = {
        "store_backend": "memory",
        "fetch_timeout": 2.0,
        "analyzer_timeout": 1.0,
        "store_timeout": 1.0,
        "screenshot_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class StubFetcher:
    """Returns a fixed page, or raises a fixed error."""

    screenshotter = None

    def __init__(self, html: str = SAMPLE_HTML, screenshot: str | None = SCREENSHOT, error=None, delay=0.0):
        self.html = html
        self.screenshot = screenshot
        self.error = error
        self.delay = delay
        self.calls = []

    async def fetch(self, url: str) -> FetchedPage:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return FetchedPage(url=url, html=self.html, final_url=url, screenshot=self.screenshot)


class StubAnalyzer(BaseAnalyzer):
    """Returns a canned result, optionally after a delay or with an error."""

    def __init__(self, result: AnalyzerResult, delay: float = 0.0, error: Exception | None = None, timeout=None):
        self.result = result
        self.delay = delay
        self.error = error
        self.timeout = timeout

    @property
    def kind(self) -> AnalyzerKind:
        return self.result.kind

    def evaluate(self, page: FetchedPage) -> AnalyzerResult:
        return self.result

    async def analyze(self, page: FetchedPage) -> AnalyzerResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


def scenario_results() -> dict[AnalyzerKind, AnalyzerResult]:
    """Deterministic fragments: overall (88 + 78 + 82 + 88) / 4 = 84."""
    return {
        AnalyzerKind.ACCESSIBILITY: AccessibilityResult(
            kind=AnalyzerKind.ACCESSIBILITY,
            score=78,
            issues=["2 images missing alt text"],
            missing_alt_count=2,
            aria_issue_count=0,
            keyboard_nav=True,
            pass_aa=True,
            pass_aaa=False,
            min_contrast_ratio=5.2,
        ),
        AnalyzerKind.VISUAL_CLARITY: VisualClarityResult(
            kind=AnalyzerKind.VISUAL_CLARITY,
            score=88,
            layout_score=100,
            visual_balance=85,
            content_hierarchy=100,
            color_consistency=100,
            typography_score=90,
            navigation_score=100,
            responsiveness=80,
            mobile_friendly=True,
        ),
        AnalyzerKind.READABILITY: ReadabilityResult(
            kind=AnalyzerKind.READABILITY,
            score=82,
            flesch_score=82.0,
            grade_level="6th grade",
            word_count=420,
            sentence_count=30,
            syllable_count=560,
        ),
        AnalyzerKind.FOCUS: FocusResult(
            kind=AnalyzerKind.FOCUS,
            score=88,
            zones=[
                HeatmapZone(x=35, y=20, intensity=0.85, area="headline"),
                HeatmapZone(x=65, y=30, intensity=0.74, area="hero image"),
                HeatmapZone(x=35, y=55, intensity=0.7, area="call to action"),
            ],
        ),
        AnalyzerKind.AI_VISION: VisionResult(
            kind=AnalyzerKind.AI_VISION,
            score=90,
            issues=["1 images lack explicit dimensions and may shift the layout"],
            visual_issues=["1 images lack explicit dimensions and may shift the layout"],
            attention_zones=[HeatmapZone(x=20, y=10, intensity=0.9, area="top-left")],
            source="baseline",
        ),
    }


def stub_analyzers(**overrides) -> list[StubAnalyzer]:
    """One stub per variant; keyword overrides replace a variant's stub."""
    analyzers = {kind: StubAnalyzer(result) for kind, result in scenario_results().items()}
    for name, analyzer in overrides.items():
        analyzers[AnalyzerKind(name)] = analyzer
    return list(analyzers.values())


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> InMemoryScanStore:
    return InMemoryScanStore()


@pytest.fixture
def fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def sample_page() -> FetchedPage:
    return FetchedPage(url="https://example.com", html=SAMPLE_HTML)


@pytest.fixture
def make_orchestrator(settings, store, fetcher):
    """Factory so tests can swap analyzers or the fetcher."""

    def _make(analyzers=None, fetcher_override=None, settings_override=None, on_transition=None):
        return ScanOrchestrator(
            settings=settings_override or settings,
            fetcher=fetcher_override or fetcher,
            analyzers=stub_analyzers() if analyzers is None else analyzers,
            aggregator=ScoreAggregator(RecommendationEngine()),
            store=store,
            on_transition=on_transition,
        )

    return _make


@pytest.fixture
def client(settings, store, fetcher) -> Generator[TestClient, None, None]:
    """TestClient over an app wired to the stub pipeline."""
    app = create_app(settings=settings, store=store, fetcher=fetcher, analyzers=stub_analyzers())
    with TestClient(app) as test_client:
        yield test_client
