"""Summaries, reading time and relevance scores for article text."""

import math
import re
from typing import Optional

MIN_SUMMARY_INPUT = 100
MAX_SUMMARY_SENTENCES = 3
MAX_SUMMARY_LENGTH = 300
FALLBACK_SUMMARY_WORDS = 150
WORDS_PER_MINUTE = 200
MAX_SCORE = 10

KEYWORD_WEIGHTS = {
    "wordpress": 3,
    "design": 2,
    "css": 2,
    "javascript": 2,
    "product": 1,
    "management": 1,
    "accessibility": 2,
    "performance": 2,
    "open source": 2,
}

# A sentence ends at a run of terminators followed by whitespace or end of text.
_SENTENCE_RE = re.compile(r"\S.*?[.!?]+(?=\s|$)", re.DOTALL)


def summarize(content: Optional[str]) -> Optional[str]:
    """Create a short summary from article text.

    Short content is returned as is. Otherwise the first few sentences are
    used when they fit in MAX_SUMMARY_LENGTH characters, else the first
    FALLBACK_SUMMARY_WORDS words followed by "...".

    Args:
        content: Extracted article text

    Returns:
        Summary text
    """
    if not content or len(content) < MIN_SUMMARY_INPUT:
        return content

    sentences = _SENTENCE_RE.findall(content)
    if len(sentences) >= 2:
        lead = " ".join(s.strip() for s in sentences[:MAX_SUMMARY_SENTENCES])
        if len(lead) <= MAX_SUMMARY_LENGTH:
            return lead

    words = content.split()[:FALLBACK_SUMMARY_WORDS]
    return " ".join(words) + "..."


def estimate_read_time(content: Optional[str]) -> int:
    """Estimate reading time in whole minutes, rounded up."""
    if not content:
        return 0
    return math.ceil(len(content.split()) / WORDS_PER_MINUTE)


def score_article(article) -> int:
    """Score an article's relevance from weighted keyword counts.

    Each keyword in KEYWORD_WEIGHTS counts once per case-insensitive
    occurrence in the title and content. The sum is capped at MAX_SCORE.

    Args:
        article: Any object with ``title`` and ``content`` attributes

    Returns:
        Score between 0 and MAX_SCORE
    """
    text = f"{article.title or ''} {article.content or ''}".lower()
    score = sum(text.count(keyword) * weight for keyword, weight in KEYWORD_WEIGHTS.items())
    return min(score, MAX_SCORE)
