"""
Text utilities: tokenization and technology classification.
"""

from .classifier import TECHNOLOGY_AREAS, classify
from .normalizer import STOP_WORDS, match_tokens, normalize, split_words, word_count

__all__ = [
    "TECHNOLOGY_AREAS",
    "classify",
    "STOP_WORDS",
    "match_tokens",
    "normalize",
    "split_words",
    "word_count",
]
