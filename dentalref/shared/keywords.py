"""
DentalRef - Keyword Extraction
==============================

Tokenizes free clinical text (typically a procedure's diagnosis) into a
short, ordered list of significant words used for overlap comparisons.
"""

import re
from typing import List

# Common English connectives plus "has".
STOP_WORDS = frozenset([
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "a", "an", "has",
])

MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 3

_NON_WORD = re.compile(r"[^\w\s]")


def extract_keywords(text: str) -> List[str]:
    """
    Extract up to ten significant lower-cased words, in original order.

    Punctuation becomes whitespace, tokens of two characters or fewer and
    stop words are dropped. No deduplication, no sorting.

    Args:
        text: Free text, may be empty

    Returns:
        Ordered keyword list (possibly empty)
    """
    if not text:
        return []

    cleaned = _NON_WORD.sub(" ", text.lower())
    keywords = [
        word for word in cleaned.split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    ]
    return keywords[:MAX_KEYWORDS]
