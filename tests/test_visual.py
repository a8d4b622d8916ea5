from analyzers.visual import VisualClarityAnalyzer
from fetcher.page import FetchedPage


def evaluate(html: str):
    return VisualClarityAnalyzer().evaluate(FetchedPage(url="https://example.com", html=html))


class TestVisualClarityAnalyzer:
    def test_well_structured_page(self, sample_page):
        result = VisualClarityAnalyzer().evaluate(sample_page)

        assert result.layout_score == 100
        assert result.navigation_score == 100
        assert result.content_hierarchy == 100
        assert result.visual_balance == 100
        assert result.color_consistency == 100
        assert result.typography_score == 100
        # viewport + media query, but the image has no srcset
        assert result.responsiveness == 80
        assert result.mobile_friendly is True
        assert result.score == 97.1

    def test_bare_page(self):
        result = evaluate("<html><body><p>Hello</p></body></html>")

        assert result.layout_score == 40
        assert result.navigation_score == 40
        assert result.content_hierarchy == 30
        assert result.visual_balance == 77.5
        assert result.responsiveness == 20
        assert result.mobile_friendly is False
        assert result.score == 58.2
        assert "Missing responsive viewport meta tag" in result.issues
        assert "No navigation menu found" in result.issues

    def test_skipped_heading_levels(self):
        result = evaluate("<html><body><h1>Title</h1><h3>Jump</h3><h2>Back</h2><h5>Jump</h5></body></html>")

        assert result.content_hierarchy == 70
        assert "Heading levels skipped 2 times" in result.issues

    def test_typography_limits(self):
        css = (
            "h1 { font-family: 'Georgia', serif; }"
            "p { font-family: Arial; font-size: 10px; }"
            "li { font-family: Verdana; }"
            "small { font-family: Courier; font-size: 9px; }"
            "code { font-family: Monaco; }"
        )
        result = evaluate(f"<html><head><style>{css}</style></head><body><p>x</p></body></html>")

        # 5 families (-30), 2 tiny sizes (-20)
        assert result.typography_score == 50

    def test_large_palette(self):
        colors = ["#000000", "#111111", "#222222", "#333333", "#444444", "#555555", "#666666", "#777777"]
        spans = "".join(f"<span style='color: {c}'>x</span>" for c in colors)
        result = evaluate(f"<html><body><p>{spans}</p></body></html>")

        assert result.color_consistency == 92

    def test_media_heavy_page(self):
        images = "".join(f"<img src='{i}.png' alt=''>" for i in range(4))
        result = evaluate(f"<html><body>{images}<p>Caption</p></body></html>")

        # ratio 0.8 is 0.4 past the ideal band
        assert result.visual_balance == 40

    def test_reports_page_load_time(self):
        page = FetchedPage(url="https://example.com", html="<main><p>Hi</p></main>", load_time=1.25)

        assert VisualClarityAnalyzer().evaluate(page).load_time == 1.25
        assert evaluate("<main><p>Hi</p></main>").load_time is None
