"""Scan orchestration: fetch, fan out to analyzers, aggregate, store."""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable
from urllib.parse import urlparse

import httpx

from analyzers.base import AnalyzerResult, BaseAnalyzer
from config import Settings
from db.store import ScanStore
from errors import ScanTimeoutError, ValidationError, VisiAIError
from fetcher.client import PageFetcher
from fetcher.page import FetchedPage
from scanning.aggregator import ScoreAggregator
from scanning.report import ScanReport

logger = logging.getLogger(__name__)


class ScanState(str, enum.Enum):
    """Lifecycle of a single scan."""

    PENDING = "pending"
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    AGGREGATING = "aggregating"
    STORED = "stored"
    DONE = "done"
    FAILED = "failed"


# Forward path; FAILED is reachable from any non-terminal state
TRANSITIONS = {
    ScanState.PENDING: {ScanState.FETCHING},
    ScanState.FETCHING: {ScanState.ANALYZING},
    ScanState.ANALYZING: {ScanState.AGGREGATING},
    ScanState.AGGREGATING: {ScanState.STORED},
    ScanState.STORED: {ScanState.DONE},
    ScanState.DONE: set(),
    ScanState.FAILED: set(),
}


@dataclass
class ScanRun:
    """Bookkeeping for one scan; never shared between scans."""

    url: str
    state: ScanState = ScanState.PENDING
    history: list[ScanState] = field(default_factory=lambda: [ScanState.PENDING])
    error: Exception | None = None
    scan_id: str | None = None

    def advance(self, state: ScanState) -> None:
        if self.state in (ScanState.DONE, ScanState.FAILED):
            raise RuntimeError(f"Scan already finished ({self.state.value})")
        if state != ScanState.FAILED and state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid scan transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)


def validate_url(url: str) -> str:
    """
    Check that `url` is an absolute http(s) URL with a host.

    Returns:
        The stripped URL

    Raises:
        ValidationError: If the URL is malformed
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL cannot be empty")

    url = url.strip()
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise ValidationError(f"Invalid URL: {e}")

    if parsed.scheme not in ("http", "https"):
        raise ValidationError(f"Invalid URL scheme: '{parsed.scheme}' (must be http or https)")
    if not parsed.hostname:
        raise ValidationError("Invalid URL format: missing host")
    if port == 0:
        raise ValidationError("Invalid URL: port 0")
    if any(ch.isspace() for ch in url):
        raise ValidationError("Invalid URL: contains whitespace")

    # httpx is stricter than urlparse about control characters and IDNA labels
    try:
        host = httpx.URL(url).host
    except (httpx.InvalidURL, UnicodeError) as e:
        raise ValidationError(f"Invalid URL host: {e}")
    if not host:
        raise ValidationError("Invalid URL format: missing host")
    return url


class ScanOrchestrator:
    """
    Drives one scan end to end.

    1. Validate the URL
    2. Fetch the page (fatal on failure)
    3. Run every analyzer concurrently, each under its own deadline;
       failures and timeouts become absent fragments
    4. Aggregate (fatal if nothing scored)
    5. Save the report

    The whole run is bounded by an outer deadline.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: PageFetcher,
        analyzers: list[BaseAnalyzer],
        aggregator: ScoreAggregator,
        store: ScanStore,
        on_transition: Callable[[ScanRun, ScanState], None] | None = None,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.analyzers = analyzers
        self.aggregator = aggregator
        self.store = store
        self.on_transition = on_transition

    @property
    def scan_deadline(self) -> float:
        """Fetch budget + slowest analyzer + store write budget."""
        fetch_budget = self.settings.fetch_timeout
        if getattr(self.fetcher, "screenshotter", None) is not None:
            fetch_budget += self.settings.screenshot_timeout
        slowest = max((self._timeout_for(a) for a in self.analyzers), default=0.0)
        return fetch_budget + slowest + self.settings.store_timeout

    async def run_scan(self, url: str) -> ScanReport:
        """
        Run a complete scan.

        Raises:
            ValidationError: Malformed URL (before any work starts)
            FetchError: Page could not be fetched
            InsufficientDataError: Every analyzer came back absent
            ScanTimeoutError: The outer deadline passed
            StoreError: The report could not be persisted
        """
        run = ScanRun(url=url)
        try:
            url = validate_url(url)
            run.url = url
            return await asyncio.wait_for(self._run(run), timeout=self.scan_deadline)
        except asyncio.TimeoutError:
            error = ScanTimeoutError(f"Scan of {url} exceeded {self.scan_deadline:.0f}s")
            self._fail(run, error)
            raise error
        except VisiAIError as e:
            self._fail(run, e)
            raise

    async def _run(self, run: ScanRun) -> ScanReport:
        self._advance(run, ScanState.FETCHING)
        page = await self.fetcher.fetch(run.url)

        self._advance(run, ScanState.ANALYZING)
        fragments = await asyncio.gather(
            *(self._run_analyzer(analyzer, page) for analyzer in self.analyzers)
        )

        self._advance(run, ScanState.AGGREGATING)
        aggregate = self.aggregator.combine(list(fragments))
        report = ScanReport(
            url=run.url,
            timestamp=datetime.now(timezone.utc),
            screenshot=page.screenshot,
            scores=aggregate.scores,
            metrics=aggregate.metrics,
            ai_analysis=aggregate.ai_analysis,
            heatmap_data=aggregate.heatmap_data,
            recommendations=aggregate.recommendations,
            warnings=aggregate.warnings,
        )

        run.scan_id = await self.store.save(report)
        report = report.model_copy(update={"id": run.scan_id})
        self._advance(run, ScanState.STORED)

        self._advance(run, ScanState.DONE)
        return report

    async def _run_analyzer(self, analyzer: BaseAnalyzer, page: FetchedPage) -> AnalyzerResult:
        """Run one analyzer; never raises except on cancellation."""
        timeout = self._timeout_for(analyzer)
        try:
            result = await asyncio.wait_for(analyzer.analyze(page), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{analyzer.name} analyzer timed out after {timeout}s for {page.url}")
            return AnalyzerResult.absent(analyzer.kind, f"timed out after {timeout:g}s")
        except Exception as e:
            logger.warning(f"{analyzer.name} analyzer failed for {page.url}: {e}")
            return AnalyzerResult.absent(analyzer.kind, str(e) or type(e).__name__)

        if result.score is not None and not 0 <= result.score <= 100:
            logger.warning(f"{analyzer.name} analyzer returned out-of-range score {result.score}")
            return AnalyzerResult.absent(analyzer.kind, f"score {result.score} out of range")
        return result

    def _timeout_for(self, analyzer: BaseAnalyzer) -> float:
        return analyzer.timeout or self.settings.analyzer_timeout

    def _advance(self, run: ScanRun, state: ScanState) -> None:
        run.advance(state)
        logger.info(f"Scan {run.url}: {state.value}")
        if self.on_transition:
            self.on_transition(run, state)

    def _fail(self, run: ScanRun, error: Exception) -> None:
        run.error = error
        logger.warning(f"Scan {run.url} failed in {run.state.value}: {error}")
        self._advance(run, ScanState.FAILED)
