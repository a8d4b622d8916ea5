"""Visual clarity analyzer."""

import logging
import re

from bs4 import BeautifulSoup

from analyzers.accessibility import parse_color
from analyzers.base import AnalyzerKind, BaseAnalyzer, VisualClarityResult, clamp_score
from fetcher.page import FetchedPage

logger = logging.getLogger(__name__)

_MEDIA_QUERY_RE = re.compile(r"@media[^{]*\(\s*(max|min)-width", re.IGNORECASE)
_COLOR_DECL_RE = re.compile(r"(?:^|[;{\s])(color|background-color|background|border-color)\s*:\s*([^;}]+)", re.IGNORECASE)
_FONT_FAMILY_RE = re.compile(r"font-family\s*:\s*([^;}]+)", re.IGNORECASE)
_FONT_SIZE_PX_RE = re.compile(r"font-size\s*:\s*(\d+(?:\.\d+)?)px", re.IGNORECASE)

LANDMARKS = ["header", "nav", "main", "footer"]
IDEAL_MEDIA_RATIO = (0.15, 0.4)
MAX_PALETTE = 6
MAX_FONT_FAMILIES = 3
MIN_FONT_PX = 12


class VisualClarityAnalyzer(BaseAnalyzer):
    """
    Scores structural layout signals.

    Checks:
    - Layout landmarks (header, nav, main, footer)
    - Navigation structure
    - Content hierarchy (heading order)
    - Visual balance between text and media
    - Responsiveness (viewport meta, media queries, responsive images)
    - Color palette size
    - Typography (font families, tiny text)
    """

    @property
    def kind(self) -> AnalyzerKind:
        return AnalyzerKind.VISUAL_CLARITY

    def evaluate(self, page: FetchedPage) -> VisualClarityResult:
        soup = page.soup()
        css = "\n".join(tag.string or "" for tag in soup.find_all("style"))
        inline_css = ";".join(el["style"] for el in soup.find_all(style=True))
        issues: list[str] = []

        checks = {
            "layout_score": self._check_layout(soup, issues),
            "navigation_score": self._check_navigation(soup, issues),
            "content_hierarchy": self._check_hierarchy(soup, issues),
            "visual_balance": self._check_balance(soup, issues),
            "color_consistency": self._check_colors(css, inline_css, issues),
            "typography_score": self._check_typography(css, inline_css, issues),
        }
        responsiveness, mobile_friendly = self._check_responsiveness(soup, css, issues)
        checks["responsiveness"] = responsiveness

        score = sum(checks.values()) / len(checks)

        return VisualClarityResult(
            kind=self.kind,
            score=clamp_score(score),
            issues=issues,
            mobile_friendly=mobile_friendly,
            load_time=page.load_time,
            **{name: clamp_score(value) for name, value in checks.items()},
        )

    def _check_layout(self, soup: BeautifulSoup, issues: list[str]) -> float:
        found = [name for name in LANDMARKS if soup.find(name)]
        missing = [name for name in LANDMARKS if name not in found]
        if missing:
            issues.append(f"Missing layout landmarks: {', '.join(missing)}")
        return 40 + 15 * len(found)

    def _check_navigation(self, soup: BeautifulSoup, issues: list[str]) -> float:
        nav = soup.find("nav")
        if not nav:
            issues.append("No navigation menu found")
            return 40

        links = nav.find_all("a", href=True)
        score = 50
        if 3 <= len(links) <= 9:
            score += 30
        elif links:
            score += 15
            issues.append(f"Navigation has {len(links)} links (3-9 keeps it scannable)")
        if links and all(link.get_text(strip=True) or link.get("aria-label") for link in links):
            score += 20
        return score

    def _check_hierarchy(self, soup: BeautifulSoup, issues: list[str]) -> float:
        levels = [int(h.name[1]) for h in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])]
        if not levels:
            issues.append("Page has no headings to structure content")
            return 30

        score = 100.0
        h1_count = levels.count(1)
        if h1_count == 0:
            score -= 30
            issues.append("Content hierarchy has no H1")
        elif h1_count > 1:
            score -= 15

        skips = sum(1 for prev, cur in zip(levels, levels[1:]) if cur > prev + 1)
        if skips:
            score -= 15 * skips
            issues.append(f"Heading levels skipped {skips} times")
        return score

    def _check_balance(self, soup: BeautifulSoup, issues: list[str]) -> float:
        text_blocks = len(soup.find_all(["p", "li", "blockquote"]))
        media = len(soup.find_all(["img", "video", "picture", "svg", "canvas"]))
        if text_blocks + media == 0:
            issues.append("Page has no visible content blocks")
            return 50

        ratio = media / (text_blocks + media)
        low, high = IDEAL_MEDIA_RATIO
        if low <= ratio <= high:
            return 100
        distance = low - ratio if ratio < low else ratio - high
        if ratio > high:
            issues.append("Media outweighs text content, making the page feel unbalanced")
        else:
            issues.append("Text-heavy layout with little visual relief")
        return 100 - 150 * distance

    def _check_responsiveness(self, soup: BeautifulSoup, css: str, issues: list[str]) -> tuple[float, bool]:
        viewport = soup.find("meta", attrs={"name": "viewport"})
        content = viewport.get("content", "").lower() if viewport else ""
        mobile_friendly = "width=device-width" in content.replace(" ", "")

        score = 0.0
        if mobile_friendly:
            score += 50
        else:
            issues.append("Missing responsive viewport meta tag")
        if _MEDIA_QUERY_RE.search(css):
            score += 30
        if soup.find("img", srcset=True) or soup.find("picture"):
            score += 20
        elif not soup.find("img"):
            score += 20
        return score, mobile_friendly

    def _check_colors(self, css: str, inline_css: str, issues: list[str]) -> float:
        palette = set()
        for _, value in _COLOR_DECL_RE.findall(f"{css};{inline_css}"):
            color = parse_color(value)
            if color:
                palette.add(color)

        if len(palette) > MAX_PALETTE:
            issues.append(f"{len(palette)} distinct colors used; a tighter palette reads more clearly")
            return max(40, 100 - 4 * (len(palette) - MAX_PALETTE))
        return 100

    def _check_typography(self, css: str, inline_css: str, issues: list[str]) -> float:
        combined = f"{css};{inline_css}"
        families = {
            value.split(",")[0].strip().strip("'\"").lower()
            for value in _FONT_FAMILY_RE.findall(combined)
        }
        tiny = [float(size) for size in _FONT_SIZE_PX_RE.findall(combined) if float(size) < MIN_FONT_PX]

        score = 100.0
        if len(families) > MAX_FONT_FAMILIES:
            score -= 15 * (len(families) - MAX_FONT_FAMILIES)
            issues.append(f"{len(families)} font families in use (recommend {MAX_FONT_FAMILIES} or fewer)")
        if tiny:
            score -= min(30, 10 * len(tiny))
            issues.append(f"{len(tiny)} text styles below {MIN_FONT_PX}px")
        return score
