"""
Tokenizer and morphological/domain biases for query refinement.

Provides:
- Unicode-aware word tokenization (letters, digits and hyphens)
- Part-of-speech style bias from suffix shape
- Domain bias from the color/mood/composition lexicons
"""

import re
from typing import List

from ..version import TOKENIZER_VERSION
from .lexicons import COLOR_WORDS, COMPOSITION_WORDS, MOOD_WORDS

# Tokens shorter than this are tokenized but never scored
MIN_SCORED_LENGTH = 3

# Anything that is not a letter, a digit or a hyphen separates tokens.
# \w also matches "_", which is a separator here.
_SPLIT_PATTERN = re.compile(r"[^\w\-]+|_+")

ADJECTIVAL_SUFFIXES = ("ful", "less", "ous", "ive", "ish", "y", "ly")
NOMINAL_SUFFIXES = ("tion", "ment", "ness", "scape", "graphy")

ADJECTIVAL_BIAS = 1.2
NOMINAL_BIAS = 1.15
COMPOUND_BIAS = 1.1
LONG_WORD_BIAS = 1.05
LONG_WORD_LENGTH = 7

COLOR_BIAS = 1.25
MOOD_BIAS = 1.2
COMPOSITION_BIAS = 1.15

__all__ = [
    "TOKENIZER_VERSION",
    "MIN_SCORED_LENGTH",
    "tokenize",
    "pos_bias",
    "domain_bias",
]


def tokenize(text: str) -> List[str]:
    """
    Split free text into lowercase word tokens.

    Args:
        text: Input text (any case, any script)

    Returns:
        List of non-empty lowercase tokens, in order of appearance

    Examples:
        >>> tokenize("Lonely, dark; single-figure horizon!")
        ['lonely', 'dark', 'single-figure', 'horizon']
        >>> tokenize("Café à Paris 1920")
        ['café', 'à', 'paris', '1920']
    """
    if not text:
        return []
    return [token for token in _SPLIT_PATTERN.split(text.lower()) if token]


def pos_bias(token: str) -> float:
    """
    Multiplier rewarding word shapes suggestive of descriptive content.

    Only the first matching rule applies, in this order: adjectival suffix,
    nominal suffix, hyphenated compound, length >= 7.

    Examples:
        >>> pos_bias("moody")
        1.2
        >>> pos_bias("composition")
        1.15
        >>> pos_bias("black-white")
        1.1
        >>> pos_bias("horizon")
        1.05
        >>> pos_bias("dark")
        1.0
    """
    if token.endswith(ADJECTIVAL_SUFFIXES):
        return ADJECTIVAL_BIAS
    if token.endswith(NOMINAL_SUFFIXES):
        return NOMINAL_BIAS
    if "-" in token:
        return COMPOUND_BIAS
    if len(token) >= LONG_WORD_LENGTH:
        return LONG_WORD_BIAS
    return 1.0


def domain_bias(token: str) -> float:
    """
    Multiplier for lexicon membership. Memberships compose multiplicatively.

    Examples:
        >>> domain_bias("crimson")
        1.25
        >>> domain_bias("lonely")
        1.2
        >>> domain_bias("car")
        1.0
    """
    bias = 1.0
    if token in COLOR_WORDS:
        bias *= COLOR_BIAS
    if token in MOOD_WORDS:
        bias *= MOOD_BIAS
    if token in COMPOSITION_WORDS:
        bias *= COMPOSITION_BIAS
    return bias
