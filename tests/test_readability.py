import pytest

from analyzers.readability import MAX_SAMPLE_WORDS, ReadabilityAnalyzer, flesch_reading_ease, grade_level
from errors import AnalyzerError
from fetcher.page import FetchedPage


def page(body: str) -> FetchedPage:
    return FetchedPage(url="https://example.com", html=f"<html><body>{body}</body></html>")


class TestFormula:
    def test_known_inputs(self):
        # 206.835 - 1.015 * 20 - 84.6 * 1.5
        assert flesch_reading_ease(100, 5, 150) == pytest.approx(59.635)

    def test_dense_text_goes_negative(self):
        assert flesch_reading_ease(100, 1, 300) < 0

    @pytest.mark.parametrize("words,sentences", [(0, 1), (10, 0)])
    def test_needs_words_and_sentences(self, words, sentences):
        with pytest.raises(ValueError):
            flesch_reading_ease(words, sentences, 10)

    @pytest.mark.parametrize(
        "score,label",
        [
            (95, "5th grade"),
            (90, "5th grade"),
            (85, "6th grade"),
            (75, "7th grade"),
            (59.635, "10th-12th grade"),
            (60, "8th-9th grade"),
            (50, "10th-12th grade"),
            (45, "college"),
            (30, "college"),
            (10, "college graduate"),
            (-20, "college graduate"),
        ],
    )
    def test_grade_levels(self, score, label):
        assert grade_level(score) == label


class TestReadabilityAnalyzer:
    def test_simple_copy_reads_easily(self):
        text = " ".join(["The cat sat on a mat. It was fun today."] * 10)

        result = ReadabilityAnalyzer().evaluate(page(f"<p>{text}</p>"))

        assert result.kind.value == "readability"
        assert result.score >= 90
        assert result.word_count == 100
        assert result.sentence_count == 20
        assert result.grade_level == "5th grade"
        assert result.issues == []

    def test_long_copy_is_scored_on_a_sample(self):
        text = " ".join(["The cat sat on a mat. It was fun today."] * (MAX_SAMPLE_WORDS // 10 + 100))

        result = ReadabilityAnalyzer().evaluate(page(f"<p>{text}</p>"))

        assert result.word_count == MAX_SAMPLE_WORDS
        assert result.sentence_count == MAX_SAMPLE_WORDS // 5
        assert result.grade_level == "5th grade"

    def test_thin_content_is_flagged(self):
        result = ReadabilityAnalyzer().evaluate(page("<p>Short and sweet.</p>"))

        assert any("Very little text" in issue for issue in result.issues)

    def test_scripts_and_navigation_are_ignored(self):
        html = (
            "<nav>Home About Contact</nav>"
            "<script>var undocumented = 'a very long identifier';</script>"
            "<p>One plain line.</p>"
        )

        result = ReadabilityAnalyzer().evaluate(page(html))

        assert result.word_count == 3

    def test_dense_copy_scores_low_and_clamps(self):
        sentence = (
            "Institutional interoperability necessitates comprehensive organizational "
            "reconfiguration notwithstanding considerable administrative complexity "
            "and unprecedented international regulatory heterogeneity"
        )

        result = ReadabilityAnalyzer().evaluate(page(f"<p>{sentence}.</p>"))

        assert result.flesch_score < 0
        assert result.score == 0
        assert result.grade_level == "college graduate"
        assert any("difficult to read" in issue for issue in result.issues)

    def test_no_text_raises(self):
        with pytest.raises(AnalyzerError):
            ReadabilityAnalyzer().evaluate(page("<img src='a.png'>"))
