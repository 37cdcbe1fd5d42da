"""
Lexical normalizer.

Splits free text on whitespace and drops the tokens that carry no matching
signal: short tokens, stop words and anything with punctuation attached.
"""

import re
from typing import List

# Fixed stop-word set, compared case-insensitively
STOP_WORDS = frozenset([
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "by", "from", "up", "about", "into", "through", "during", "before",
    "after", "above", "below", "between", "among", "is", "are", "was", "were",
    "be", "been", "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "must", "can", "a", "an",
    "this", "that", "these", "those", "installation",
])

MIN_TOKEN_LENGTH = 3

_ALNUM = re.compile(r"^[a-zA-Z0-9]+$")


def split_words(text: str) -> List[str]:
    """Whitespace split, tolerant of None."""
    return (text or "").split()


def word_count(text: str) -> int:
    """Number of whitespace-separated words."""
    return len(split_words(text))


def is_meaningful(token: str) -> bool:
    return (
        len(token) >= MIN_TOKEN_LENGTH
        and token.lower() not in STOP_WORDS
        and bool(_ALNUM.match(token))
    )


def normalize(text: str) -> List[str]:
    """
    Tokenize text and keep only meaningful tokens.

    Case is preserved; the filter itself is case-insensitive.
    """
    return [token for token in split_words(text) if is_meaningful(token)]


def match_tokens(text: str) -> List[str]:
    """Lowercased whitespace tokens longer than two characters."""
    return [word for word in split_words((text or "").lower().strip()) if len(word) > 2]
