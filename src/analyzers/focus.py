"""Focus / attention heatmap analyzer."""

import logging
import re

from bs4 import BeautifulSoup, Tag

from analyzers.base import AnalyzerKind, BaseAnalyzer, FocusResult, HeatmapZone, clamp_score
from fetcher.page import FetchedPage

logger = logging.getLogger(__name__)

_CTA_CLASS_RE = re.compile(r"\b(btn|button|cta|call-to-action|primary)\b", re.IGNORECASE)
_CTA_TEXT_RE = re.compile(
    r"\b(get started|sign up|start|try|buy|subscribe|contact|book|download|join|learn more)\b",
    re.IGNORECASE,
)

MAX_CTAS = 3
MIN_HERO_WIDTH = 300


class FocusAnalyzer(BaseAnalyzer):
    """
    Predicts where attention lands on the page.

    Zones are derived from salient elements (navigation, headline, hero
    image, calls to action, forms, footer). Vertical position is estimated
    from document order; intensity reflects how strongly each element type
    draws the eye.
    """

    # area label -> (x position, base intensity)
    ZONE_PROFILES = {
        "navigation": (50, 0.55),
        "headline": (35, 0.9),
        "hero image": (65, 0.8),
        "call to action": (35, 0.85),
        "form": (50, 0.6),
        "footer": (50, 0.2),
    }

    def __init__(self, max_zones: int = 6):
        self.max_zones = max_zones

    @property
    def kind(self) -> AnalyzerKind:
        return AnalyzerKind.FOCUS

    def evaluate(self, page: FetchedPage) -> FocusResult:
        soup = page.soup()
        elements = soup.find_all(True)
        positions = {id(el): index for index, el in enumerate(elements)}
        total = max(1, len(elements))

        def y_of(el: Tag) -> float:
            return round(min(100.0, 100.0 * positions.get(id(el), 0) / total), 1)

        h1s = soup.find_all("h1")
        ctas = self._find_ctas(soup)
        zones: list[HeatmapZone] = []

        nav = soup.find("nav") or soup.find("header")
        if nav:
            zones.append(self._zone("navigation", min(y_of(nav), 10.0)))
        if h1s:
            zones.append(self._zone("headline", y_of(h1s[0])))
        hero = self._find_hero(soup)
        if hero:
            zones.append(self._zone("hero image", y_of(hero)))
        if ctas:
            zones.append(self._zone("call to action", y_of(ctas[0])))
        form = soup.find("form")
        if form:
            zones.append(self._zone("form", y_of(form)))
        footer = soup.find("footer")
        if footer:
            zones.append(self._zone("footer", max(y_of(footer), 90.0)))

        zones.sort(key=lambda z: z.intensity, reverse=True)
        zones = zones[: self.max_zones]

        score = 100.0
        issues = []
        if not h1s:
            score -= 25
            issues.append("No primary headline to anchor attention")
        elif len(h1s) > 1:
            score -= 10
            issues.append(f"{len(h1s)} competing H1 headlines split attention")
        if not ctas:
            score -= 15
            issues.append("No clear call to action found")
        elif len(ctas) > MAX_CTAS:
            score -= min(20, 5 * (len(ctas) - MAX_CTAS))
            issues.append(f"{len(ctas)} calls to action compete for attention")
        if not zones:
            score -= 20
            issues.append("No salient elements detected for attention mapping")

        return FocusResult(
            kind=self.kind,
            score=clamp_score(score),
            issues=issues,
            zones=zones,
        )

    def _zone(self, area: str, y: float) -> HeatmapZone:
        x, intensity = self.ZONE_PROFILES[area]
        # Elements further down the page get less attention
        decay = 1 - 0.3 * (y / 100)
        return HeatmapZone(x=x, y=y, intensity=round(intensity * decay, 2), area=area)

    def _find_ctas(self, soup: BeautifulSoup) -> list[Tag]:
        ctas = []
        for el in soup.find_all(["a", "button"]):
            classes = " ".join(el.get("class", []))
            if _CTA_CLASS_RE.search(classes) or _CTA_TEXT_RE.search(el.get_text(" ", strip=True)):
                ctas.append(el)
        return ctas

    def _find_hero(self, soup: BeautifulSoup) -> Tag | None:
        for img in soup.find_all("img"):
            width = str(img.get("width", "")).rstrip("px")
            if width.isdigit() and int(width) >= MIN_HERO_WIDTH:
                return img
            if img.find_parent(["header", "main"]) and not width:
                return img
        return None
