"""VisiAI API - Visual Health Analysis Engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from analyzers import BaseAnalyzer, build_analyzers
from api.errors import add_exception_handlers
from api.routes import health_router, results_router, scans_router
from config import Settings, settings as default_settings
from db.store import ScanStore, build_store
from fetcher import PageFetcher, PlaywrightScreenshotCapturer
from recommendations import RecommendationEngine
from scanning.aggregator import ScoreAggregator
from scanning.orchestrator import ScanOrchestrator

logger = logging.getLogger(__name__)


def build_fetcher(settings: Settings) -> PageFetcher:
    screenshotter = None
    if settings.screenshot_enabled:
        screenshotter = PlaywrightScreenshotCapturer(
            timeout=settings.screenshot_timeout,
            viewport_width=settings.viewport_width,
            viewport_height=settings.viewport_height,
        )
    return PageFetcher(settings, screenshotter=screenshotter)


def create_app(
    settings: Settings | None = None,
    store: ScanStore | None = None,
    fetcher: PageFetcher | None = None,
    analyzers: list[BaseAnalyzer] | None = None,
) -> FastAPI:
    """
    Build the application.

    Components not passed in are built from settings at startup. Tests
    inject an in-memory store and stub fetcher/analyzers here.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Code before `yield` runs on startup.
        Code after `yield` runs on shutdown.
        """
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logger.info(f"Starting {settings.app_name}...")

        scan_store = store or build_store(settings)
        await scan_store.open()

        engine = RecommendationEngine(limit=settings.max_recommendations)
        app.state.settings = settings
        app.state.store = scan_store
        app.state.orchestrator = ScanOrchestrator(
            settings=settings,
            fetcher=fetcher or build_fetcher(settings),
            analyzers=analyzers if analyzers is not None else build_analyzers(settings),
            aggregator=ScoreAggregator(engine=engine),
            store=scan_store,
        )
        yield

        logger.info(f"Shutting down {settings.app_name}...")
        await scan_store.close()

    app = FastAPI(
        title="VisiAI API",
        description="Visual health analysis for web pages: accessibility, clarity, readability and focus.",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_exception_handlers(app)

    app.include_router(health_router, prefix="/api")
    app.include_router(scans_router, prefix="/api")
    app.include_router(results_router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root():
        """Service info."""
        return {
            "service": "VisiAI API",
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


app = create_app()
