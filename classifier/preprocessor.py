"""Text preprocessing shared by the statistical and ML classifiers."""

import re
from typing import Optional

# Cap input length to bound regex work on adversarial input.
MAX_PREPROCESS_LENGTH = 1_000_000

_NON_WORD_PATTERN = re.compile(r'[^\w\s]')
_WHITESPACE_PATTERN = re.compile(r'\s+')


def tokenize(text: Optional[str]) -> list[str]:
    """Lowercase text, turn punctuation into spaces and split on whitespace."""
    if not text:
        return []
    return _NON_WORD_PATTERN.sub(' ', text.lower()).split()


def count_occurrences(text: str, pattern: str) -> int:
    """Count case-insensitive, non-overlapping occurrences of pattern.

    The scan resumes after the end of each match, so overlapping hits are
    undercounted: "aaaa" holds "aa" twice, "aaa" holds it once.
    """
    if not pattern:
        return 0
    text = text.lower()
    pattern = pattern.lower()
    count = 0
    index = text.find(pattern)
    while index != -1:
        count += 1
        index = text.find(pattern, index + len(pattern))
    return count


def contains_pattern(text: str, pattern: str) -> bool:
    """Boolean presence test used for the contingency table."""
    return pattern in text.lower()


def preprocess_text(text: Optional[str]) -> str:
    """Clean and normalize text for vectorization.

    Args:
        text: Raw SWIFT message, may be None

    Returns:
        Cleaned, lowercase text with punctuation removed
    """
    if not text:
        return ""

    if len(text) > MAX_PREPROCESS_LENGTH:
        text = text[:MAX_PREPROCESS_LENGTH]

    # Lowercase
    text = text.lower()

    # SWIFT field tags (":20:", ":32A:") and slashes become separators
    text = _NON_WORD_PATTERN.sub(' ', text)

    # Collapse multiple spaces
    text = _WHITESPACE_PATTERN.sub(' ', text)

    return text.strip()
