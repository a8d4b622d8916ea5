"""Readability analyzer (Flesch Reading Ease)."""

import logging

import textstat

from analyzers.base import AnalyzerKind, BaseAnalyzer, ReadabilityResult, clamp_score
from errors import AnalyzerError
from fetcher.page import FetchedPage

logger = logging.getLogger(__name__)

# Elements whose text never reaches the reader as body copy
NON_CONTENT_TAGS = ["script", "style", "noscript", "template", "svg", "head", "nav", "footer"]

# (minimum Flesch score, grade label), checked top down
GRADE_LEVELS = [
    (90, "5th grade"),
    (80, "6th grade"),
    (70, "7th grade"),
    (60, "8th-9th grade"),
    (50, "10th-12th grade"),
    (30, "college"),
]
FALLBACK_GRADE = "college graduate"

MAX_AVG_SENTENCE_WORDS = 20
MIN_COMFORTABLE_SCORE = 50
MIN_WORDS = 50
# textstat cost grows with the text; long pages are scored on their opening words
MAX_SAMPLE_WORDS = 5000


def flesch_reading_ease(words: int, sentences: int, syllables: int) -> float:
    """
    Flesch Reading Ease.

    Higher is easier. Dense text can go below zero; there is no floor.
    """
    if words <= 0 or sentences <= 0:
        raise ValueError("Flesch Reading Ease needs at least one word and one sentence")
    return 206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)


def grade_level(score: float) -> str:
    """Map a Flesch score to a school grade label."""
    for threshold, label in GRADE_LEVELS:
        if score >= threshold:
            return label
    return FALLBACK_GRADE


def visible_text(page: FetchedPage) -> str:
    soup = page.soup()
    for tag in soup.find_all(NON_CONTENT_TAGS):
        tag.decompose()
    body = soup.body or soup
    return " ".join(body.get_text(separator=" ").split())


class ReadabilityAnalyzer(BaseAnalyzer):
    """Scores how easy the page's visible copy is to read."""

    @property
    def kind(self) -> AnalyzerKind:
        return AnalyzerKind.READABILITY

    def evaluate(self, page: FetchedPage) -> ReadabilityResult:
        text = visible_text(page)
        tokens = text.split(" ")
        if len(tokens) > MAX_SAMPLE_WORDS:
            logger.debug(f"Scoring the first {MAX_SAMPLE_WORDS} of {len(tokens)} words on {page.url}")
            text = " ".join(tokens[:MAX_SAMPLE_WORDS])

        words = textstat.lexicon_count(text, removepunct=True)
        if words == 0:
            raise AnalyzerError("Page has no readable text")
        sentences = max(1, textstat.sentence_count(text))
        syllables = textstat.syllable_count(text)

        score = flesch_reading_ease(words, sentences, syllables)
        label = grade_level(score)
        issues = []

        avg_sentence = words / sentences
        if avg_sentence > MAX_AVG_SENTENCE_WORDS:
            issues.append(
                f"Average sentence length is {avg_sentence:.0f} words "
                f"(recommend {MAX_AVG_SENTENCE_WORDS} or fewer)"
            )
        if score < MIN_COMFORTABLE_SCORE:
            issues.append(f"Text is difficult to read (Flesch {score:.1f}, {label} level)")
        if words < MIN_WORDS:
            issues.append(f"Very little text content ({words} words)")

        logger.debug(f"Readability for {page.url}: {words} words, {sentences} sentences, flesch={score:.1f}")

        return ReadabilityResult(
            kind=self.kind,
            score=clamp_score(score),
            issues=issues,
            flesch_score=round(score, 1),
            grade_level=label,
            word_count=words,
            sentence_count=sentences,
            syllable_count=syllables,
        )
