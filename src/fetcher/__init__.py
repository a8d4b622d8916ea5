"""VisiAI page fetching package."""

from fetcher.client import PageFetcher
from fetcher.page import FetchedPage
from fetcher.screenshot import PlaywrightScreenshotCapturer, ScreenshotCapturer

__all__ = [
    "FetchedPage",
    "PageFetcher",
    "PlaywrightScreenshotCapturer",
    "ScreenshotCapturer",
]
