"""Pattern mining and phi-correlation scoring."""

import math
from collections import Counter
from typing import Iterable, Sequence

from .models import LabeledSample
from .preprocessor import contains_pattern, tokenize


MIN_OCCURRENCES = 3
MIN_CORRELATION = 0.1
MIN_TOKEN_LENGTH = 3


class PatternMiner:
    """Extracts frequent unigrams and bigrams from a labeled corpus."""

    def __init__(self, min_occurrences: int = MIN_OCCURRENCES,
                 min_token_length: int = MIN_TOKEN_LENGTH):
        self.min_occurrences = min_occurrences
        self.min_token_length = min_token_length

    def count(self, samples: Iterable[LabeledSample]) -> Counter:
        """Count every candidate pattern across the whole corpus."""
        counts: Counter = Counter()
        for sample in samples:
            tokens = tokenize(sample.text)
            long_enough = [len(token) >= self.min_token_length for token in tokens]

            counts.update(token for token, keep in zip(tokens, long_enough) if keep)

            for i in range(len(tokens) - 1):
                if long_enough[i] and long_enough[i + 1]:
                    counts[f"{tokens[i]} {tokens[i + 1]}"] += 1
        return counts

    def extract(self, samples: Iterable[LabeledSample]) -> set[str]:
        """Return the patterns seen at least min_occurrences times."""
        counts = self.count(samples)
        return {pattern for pattern, n in counts.items() if n >= self.min_occurrences}


class CorrelationScorer:
    """Phi coefficient between a pattern's presence and a category label.

    The 2x2 contingency table counts documents, not occurrences:

                    present  absent
        category       a        b
        other          c        d
    """

    def __init__(self, min_correlation: float = MIN_CORRELATION):
        self.min_correlation = min_correlation

    @staticmethod
    def contingency(pattern: str, category_docs: Sequence[LabeledSample],
                    other_docs: Sequence[LabeledSample]) -> tuple[int, int, int, int]:
        a = sum(1 for doc in category_docs if contains_pattern(doc.text, pattern))
        c = sum(1 for doc in other_docs if contains_pattern(doc.text, pattern))
        return a, len(category_docs) - a, c, len(other_docs) - c

    @staticmethod
    def phi(a: int, b: int, c: int, d: int) -> float:
        denominator = math.sqrt((a + b) * (c + d) * (a + c) * (b + d))
        if denominator == 0:
            return 0.0
        return (a * d - b * c) / denominator

    def score(self, pattern: str, category_docs: Sequence[LabeledSample],
              other_docs: Sequence[LabeledSample]) -> float:
        return self.phi(*self.contingency(pattern, category_docs, other_docs))

    def qualifies(self, correlation: float) -> bool:
        return abs(correlation) >= self.min_correlation
