"""Accessibility analyzer: contrast, alt text, ARIA and keyboard checks."""

import logging
import re

from bs4 import BeautifulSoup, Tag

from analyzers.base import (
    AccessibilityResult,
    AnalyzerKind,
    BaseAnalyzer,
    clamp_score,
)
from fetcher.page import FetchedPage

logger = logging.getLogger(__name__)

# WCAG 2.x thresholds for normal-size text
WCAG_AA_RATIO = 4.5
WCAG_AAA_RATIO = 7.0

DEFAULT_FOREGROUND = (0, 0, 0)
DEFAULT_BACKGROUND = (255, 255, 255)

NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "lightgray": (211, 211, 211),
    "lightgrey": (211, 211, 211),
    "darkgray": (169, 169, 169),
    "darkgrey": (169, 169, 169),
    "navy": (0, 0, 128),
    "maroon": (128, 0, 0),
    "teal": (0, 128, 128),
    "olive": (128, 128, 0),
    "lime": (0, 255, 0),
    "aqua": (0, 255, 255),
    "cyan": (0, 255, 255),
    "fuchsia": (255, 0, 255),
    "magenta": (255, 0, 255),
    "pink": (255, 192, 203),
    "brown": (165, 42, 42),
    "whitesmoke": (245, 245, 245),
    "gainsboro": (220, 220, 220),
}

VALID_ROLES = {
    "alert", "alertdialog", "application", "article", "banner", "button",
    "cell", "checkbox", "columnheader", "combobox", "complementary",
    "contentinfo", "definition", "dialog", "directory", "document", "feed",
    "figure", "form", "grid", "gridcell", "group", "heading", "img", "link",
    "list", "listbox", "listitem", "log", "main", "marquee", "math", "menu",
    "menubar", "menuitem", "menuitemcheckbox", "menuitemradio", "meter",
    "navigation", "none", "note", "option", "presentation", "progressbar",
    "radio", "radiogroup", "region", "row", "rowgroup", "rowheader",
    "scrollbar", "search", "searchbox", "separator", "slider", "spinbutton",
    "status", "switch", "tab", "table", "tablist", "tabpanel", "term",
    "textbox", "timer", "toolbar", "tooltip", "tree", "treegrid", "treeitem",
}

INTERACTIVE_TAGS = {"a", "button", "input", "select", "textarea", "summary"}

_CSS_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_HEX_RE = re.compile(r"#([0-9a-fA-F]{3,8})\b")
_RGB_RE = re.compile(r"rgba?\(\s*(\d{1,3})[\s,]+(\d{1,3})[\s,]+(\d{1,3})")


def parse_color(value: str | None) -> tuple[int, int, int] | None:
    """Parse a CSS color value (hex, rgb()/rgba() or a common name)."""
    if not value:
        return None
    value = value.strip().lower()

    match = _HEX_RE.search(value)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits[:3])
        elif len(digits) in (6, 8):
            digits = digits[:6]
        else:
            return None
        return tuple(int(digits[i : i + 2], 16) for i in (0, 2, 4))

    match = _RGB_RE.search(value)
    if match:
        return tuple(min(255, int(channel)) for channel in match.groups())

    for token in re.split(r"[\s,]+", value):
        if token in NAMED_COLORS:
            return NAMED_COLORS[token]
    return None


def relative_luminance(rgb: tuple[int, int, int]) -> float:
    """WCAG relative luminance of an sRGB color."""

    def linearize(channel: int) -> float:
        c = channel / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (linearize(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(fg: tuple[int, int, int], bg: tuple[int, int, int]) -> float:
    """WCAG contrast ratio, from 1:1 to 21:1."""
    lighter, darker = sorted((relative_luminance(fg), relative_luminance(bg)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)


def parse_declarations(style: str) -> dict[str, str]:
    """Parse `a: b; c: d` into a dict."""
    declarations = {}
    for part in style.split(";"):
        if ":" in part:
            prop, value = part.split(":", 1)
            declarations[prop.strip().lower()] = value.strip()
    return declarations


def _background_of(declarations: dict[str, str]) -> tuple[int, int, int] | None:
    return parse_color(declarations.get("background-color")) or parse_color(
        declarations.get("background")
    )


class AccessibilityAnalyzer(BaseAnalyzer):
    """
    Checks a page against common WCAG failures.

    Checks:
    - Text/background contrast (AA 4.5:1, AAA 7:1)
    - Images without alt text
    - ARIA misuse (unknown roles, dangling references, hidden focusables,
      unnamed icon controls)
    - Keyboard reachability (positive tabindex, unfocusable click targets)
    - Document language and form labels
    """

    # Penalties subtracted from 100
    PENALTIES = {
        "missing_alt": (5, 25),  # (per item, cap)
        "aria": (4, 20),
        "unlabeled_control": (5, 15),
        "keyboard": 15,
        "contrast_aa": 20,
        "contrast_aaa": 5,
        "lang": 5,
    }

    @property
    def kind(self) -> AnalyzerKind:
        return AnalyzerKind.ACCESSIBILITY

    def evaluate(self, page: FetchedPage) -> AccessibilityResult:
        soup = page.soup()
        issues: list[str] = []

        missing_alt = self._count_missing_alt(soup)
        if missing_alt:
            issues.append(f"{missing_alt} images missing alt text")

        aria_issues = self._check_aria(soup)
        issues.extend(aria_issues)

        keyboard_issues = self._check_keyboard(soup)
        issues.extend(keyboard_issues)

        min_ratio = self._min_contrast_ratio(soup)
        pass_aa = min_ratio >= WCAG_AA_RATIO
        pass_aaa = min_ratio >= WCAG_AAA_RATIO
        if not pass_aa:
            issues.append(
                f"Text contrast ratio {min_ratio:.2f}:1 fails WCAG AA (needs {WCAG_AA_RATIO}:1)"
            )
        elif not pass_aaa:
            issues.append(
                f"Text contrast ratio {min_ratio:.2f}:1 fails WCAG AAA (needs {WCAG_AAA_RATIO}:1)"
            )

        html_tag = soup.find("html")
        has_lang = isinstance(html_tag, Tag) and bool(html_tag.get("lang", "").strip())
        if not has_lang:
            issues.append("Document language (<html lang>) is not declared")

        unlabeled = self._count_unlabeled_controls(soup)
        if unlabeled:
            issues.append(f"{unlabeled} form controls have no accessible label")

        score = 100.0
        per_item, cap = self.PENALTIES["missing_alt"]
        score -= min(cap, per_item * missing_alt)
        per_item, cap = self.PENALTIES["aria"]
        score -= min(cap, per_item * len(aria_issues))
        per_item, cap = self.PENALTIES["unlabeled_control"]
        score -= min(cap, per_item * unlabeled)
        if keyboard_issues:
            score -= self.PENALTIES["keyboard"]
        if not pass_aa:
            score -= self.PENALTIES["contrast_aa"]
        elif not pass_aaa:
            score -= self.PENALTIES["contrast_aaa"]
        if not has_lang:
            score -= self.PENALTIES["lang"]

        return AccessibilityResult(
            kind=self.kind,
            score=clamp_score(score),
            issues=issues,
            missing_alt_count=missing_alt,
            aria_issue_count=len(aria_issues),
            keyboard_nav=not keyboard_issues,
            pass_aa=pass_aa,
            pass_aaa=pass_aaa,
            min_contrast_ratio=round(min_ratio, 2),
        )

    def _count_missing_alt(self, soup: BeautifulSoup) -> int:
        return sum(1 for img in soup.find_all("img") if img.get("alt") is None)

    def _check_aria(self, soup: BeautifulSoup) -> list[str]:
        """Return one issue per detected ARIA misuse."""
        issues = []
        ids = {el["id"] for el in soup.find_all(id=True)}

        for el in soup.find_all(attrs={"role": True}):
            roles = el.get("role", "").split()
            unknown = [r for r in roles if r.lower() not in VALID_ROLES]
            if unknown and len(unknown) == len(roles):
                issues.append(f"Invalid ARIA role '{' '.join(unknown)}' on <{el.name}>")

        for attr in ("aria-labelledby", "aria-describedby"):
            for el in soup.find_all(attrs={attr: True}):
                missing = [ref for ref in el.get(attr, "").split() if ref not in ids]
                if missing:
                    issues.append(f"{attr} on <{el.name}> references missing id '{missing[0]}'")

        for el in soup.find_all(attrs={"aria-hidden": "true"}):
            if self._is_focusable(el):
                issues.append(f"Focusable <{el.name}> is hidden with aria-hidden")

        for el in soup.find_all(["button", "a"]):
            if el.name == "a" and not el.get("href"):
                continue
            if not self._accessible_name(el):
                issues.append(f"<{el.name}> has no accessible name")

        return issues

    def _check_keyboard(self, soup: BeautifulSoup) -> list[str]:
        """Return issues that break sequential keyboard navigation."""
        issues = []

        positive = [
            el for el in soup.find_all(attrs={"tabindex": True})
            if _int_or_none(el.get("tabindex")) and _int_or_none(el.get("tabindex")) > 0
        ]
        if positive:
            issues.append(f"{len(positive)} elements use a positive tabindex, disrupting focus order")

        unreachable = [
            el for el in soup.find_all(attrs={"onclick": True})
            if el.name not in INTERACTIVE_TAGS and not el.has_attr("tabindex")
        ]
        if unreachable:
            issues.append(f"{len(unreachable)} clickable elements cannot receive keyboard focus")

        removed = [
            el for el in soup.find_all(sorted(INTERACTIVE_TAGS))
            if el.get("tabindex", "").strip() == "-1"
        ]
        if removed:
            issues.append(f"{len(removed)} interactive elements are removed from the tab order")

        return issues

    def _count_unlabeled_controls(self, soup: BeautifulSoup) -> int:
        labelled_ids = {label.get("for") for label in soup.find_all("label") if label.get("for")}
        count = 0
        for el in soup.find_all(["input", "select", "textarea"]):
            if el.get("type", "").lower() in ("hidden", "submit", "button", "reset", "image"):
                continue
            if el.get("id") in labelled_ids or el.find_parent("label"):
                continue
            if el.get("aria-label") or el.get("aria-labelledby") or el.get("title"):
                continue
            count += 1
        return count

    def _min_contrast_ratio(self, soup: BeautifulSoup) -> float:
        """
        Lowest contrast ratio among declared text/background pairs.

        Pairs come from inline styles (background inherited from the nearest
        styled ancestor) and from <style> rules. With nothing declared the
        browser default of black on white applies.
        """
        page_background = DEFAULT_BACKGROUND
        pairs = []

        for style_tag in soup.find_all("style"):
            for selector, body in _CSS_RULE_RE.findall(style_tag.string or ""):
                declarations = parse_declarations(body)
                selectors = {s.strip().lower() for s in selector.split(",")}
                if selectors & {"body", "html"}:
                    page_background = _background_of(declarations) or page_background
                fg = parse_color(declarations.get("color"))
                if fg:
                    pairs.append((fg, _background_of(declarations)))

        for el in soup.find_all(style=True):
            fg = parse_color(parse_declarations(el["style"]).get("color"))
            if fg:
                pairs.append((fg, self._inherited_background(el)))

        if not pairs:
            return contrast_ratio(DEFAULT_FOREGROUND, page_background)

        return min(contrast_ratio(fg, bg or page_background) for fg, bg in pairs)

    def _inherited_background(self, el: Tag) -> tuple[int, int, int] | None:
        node: Tag | None = el
        while isinstance(node, Tag):
            style = node.get("style")
            if style:
                background = _background_of(parse_declarations(style))
                if background:
                    return background
            node = node.parent
        return None

    def _is_focusable(self, el: Tag) -> bool:
        tabindex = _int_or_none(el.get("tabindex"))
        if tabindex is not None:
            return tabindex >= 0
        if el.name == "a":
            return bool(el.get("href"))
        return el.name in INTERACTIVE_TAGS and not el.has_attr("disabled")

    def _accessible_name(self, el: Tag) -> str:
        if el.get_text(strip=True):
            return el.get_text(strip=True)
        for attr in ("aria-label", "aria-labelledby", "title"):
            if el.get(attr, "").strip():
                return el[attr].strip()
        img = el.find("img", alt=True)
        return img["alt"].strip() if img else ""


def _int_or_none(value) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
