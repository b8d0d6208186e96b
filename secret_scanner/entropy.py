"""
Shannon entropy and a format-agnostic "is this likely a secret?" heuristic.

These helpers are independent of pattern matching: they are meant to catch
credentials that have no known provider format.
"""
import math
import re
from collections import Counter
from typing import List

from .models import Finding

MIN_SECRET_LENGTH = 8
MAX_SECRET_LENGTH = 100

# Exact (case-insensitive) matches are never secrets on their own
GENERIC_WORDS = frozenset({"password", "secret", "key", "token"})

SPECIAL_CHARACTERS = frozenset("!@#$%^&*()_+-=[]{}|;:,.<>?")

HIGH_ENTROPY_KIND = "high_entropy_string"
HIGH_ENTROPY_DESCRIPTION = "Possible high-entropy secret detected"

# Candidate tokens for the entropy sweep: runs between whitespace, quotes
# and assignment punctuation
_TOKEN_RE = re.compile(r"""[^\s'"`=:,;]+""")


def calculate_entropy(text: str) -> float:
    """
    Calculate the Shannon entropy of `text` in bits per character.

    Returns 0.0 for an empty string.
    """
    if not text:
        return 0.0

    length = len(text)
    entropy = 0.0
    for count in Counter(text).values():
        probability = count / length
        entropy -= probability * math.log2(probability)
    return entropy


def count_character_classes(text: str) -> int:
    """Number of classes (upper, lower, digit, special) present in `text`."""
    has_upper = any(c.isascii() and c.isupper() for c in text)
    has_lower = any(c.isascii() and c.islower() for c in text)
    has_digit = any(c in "0123456789" for c in text)
    has_special = any(c in SPECIAL_CHARACTERS for c in text)
    return sum((has_upper, has_lower, has_digit, has_special))


def is_likely_secret(text: str, entropy_threshold: float) -> bool:
    """
    Heuristically decide whether `text` looks like a secret.

    Rejects trivially short or pathologically long candidates, bare generic
    words and low-entropy strings, then requires at least three of the four
    character classes.
    """
    if len(text) < MIN_SECRET_LENGTH or len(text) > MAX_SECRET_LENGTH:
        return False

    if text.lower() in GENERIC_WORDS:
        return False

    if calculate_entropy(text) < entropy_threshold:
        return False

    return count_character_classes(text) >= 3


def find_likely_secrets(text: str, entropy_threshold: float) -> List[Finding]:
    """
    Sweep `text` for tokens that pass `is_likely_secret`.

    Used when no provider patterns are in play. Offsets are absolute in
    `text` and line numbers are 1-based.
    """
    findings: List[Finding] = []
    for match in _TOKEN_RE.finditer(text):
        token = match.group()
        if not is_likely_secret(token, entropy_threshold):
            continue

        findings.append(Finding(
            kind=HIGH_ENTROPY_KIND,
            value=token,
            start=match.start(),
            end=match.end(),
            line=text.count("\n", 0, match.start()) + 1,
            confidence=min(calculate_entropy(token) / math.log2(len(token)), 1.0),
            description=HIGH_ENTROPY_DESCRIPTION,
        ))
    return findings
