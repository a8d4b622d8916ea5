"""Immutable page snapshot shared by all analyzers of one scan."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class FetchedPage:
    """A fetched page. Never mutated after creation."""

    url: str
    html: str
    final_url: str | None = None
    status_code: int = 200
    screenshot: str | None = None  # base64-encoded PNG
    load_time: float | None = None  # seconds spent on the HTTP fetch
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def soup(self) -> BeautifulSoup:
        """
        Parse the HTML into a fresh DOM tree.

        Every call returns a new tree, so an analyzer may modify its copy
        (e.g. strip scripts) without affecting the others.
        """
        return BeautifulSoup(self.html, "lxml")
