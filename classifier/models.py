"""Shared data types."""

import math
from dataclasses import dataclass
from typing import TypedDict


UNKNOWN_LANGUAGE = 0


@dataclass(frozen=True)
class LabeledSample:
    """One SWIFT message with its ground-truth category and language."""
    text: str
    category: int
    language: int = UNKNOWN_LANGUAGE


class ClassificationResult(TypedDict):
    category: int
    language: int
    probabilities: dict[int, float]


def argmax_category(probabilities: dict[int, float]) -> int:
    """Return the most probable category, ties going to the lowest id.

    NaN probabilities never win against a real number.
    """
    best_category = None
    best_prob = None
    for category in sorted(probabilities):
        prob = probabilities[category]
        if math.isnan(prob):
            continue
        if best_prob is None or prob > best_prob:
            best_category = category
            best_prob = prob
    if best_category is None:
        return min(probabilities)
    return best_category
