"""Statistical pattern classifier with softmax-normalized scores."""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

import numpy as np

from .errors import EmptyTrainingData, NotLearned
from .language import LanguageDetector
from .models import ClassificationResult, LabeledSample, argmax_category
from .patterns import CorrelationScorer, PatternMiner
from .preprocessor import count_occurrences

logger = logging.getLogger(__name__)

LOGGED_PATTERNS_PER_CATEGORY = 10


@dataclass(frozen=True)
class PatternWeightTable:
    """Read-only snapshot of category -> pattern -> signed phi weight."""
    weights: Mapping[int, Mapping[str, float]] = field(default_factory=dict)

    def __post_init__(self):
        frozen = MappingProxyType({
            int(category): MappingProxyType(dict(patterns))
            for category, patterns in self.weights.items()
        })
        object.__setattr__(self, 'weights', frozen)

    def __bool__(self) -> bool:
        return bool(self.weights)

    @property
    def categories(self) -> list[int]:
        return sorted(self.weights)

    def to_dict(self) -> dict[int, dict[str, float]]:
        return {category: dict(patterns) for category, patterns in self.weights.items()}


def softmax(scores: dict[int, float]) -> dict[int, float]:
    """Numerically stable softmax over a category -> score mapping."""
    if not scores:
        return {}
    categories = list(scores)
    values = np.array([scores[c] for c in categories], dtype=np.float64)
    exps = np.exp(values - values.max())
    probabilities = exps / exps.sum()
    return {c: float(p) for c, p in zip(categories, probabilities)}


class StatisticalClassifier:
    """Classifies text using patterns correlated with each category."""

    def __init__(self, detector: Optional[LanguageDetector] = None,
                 miner: Optional[PatternMiner] = None,
                 scorer: Optional[CorrelationScorer] = None):
        self.detector = detector or LanguageDetector()
        self.miner = miner or PatternMiner()
        self.scorer = scorer or CorrelationScorer()
        self.table = PatternWeightTable()

    @property
    def is_learned(self) -> bool:
        return bool(self.table)

    def build_table(self, samples: Sequence[LabeledSample]) -> PatternWeightTable:
        """Mine candidates and keep those correlated with each category."""
        if not samples:
            raise EmptyTrainingData("Training data cannot be empty")

        candidates = sorted(self.miner.extract(samples))
        logger.info("Mined %d candidate patterns from %d samples", len(candidates), len(samples))

        weights: dict[int, dict[str, float]] = {}
        for category in sorted({sample.category for sample in samples}):
            category_docs = [s for s in samples if s.category == category]
            other_docs = [s for s in samples if s.category != category]

            category_patterns = {}
            for pattern in candidates:
                correlation = self.scorer.score(pattern, category_docs, other_docs)
                if self.scorer.qualifies(correlation):
                    category_patterns[pattern] = correlation

            if category_patterns:
                weights[category] = category_patterns

        return PatternWeightTable(weights)

    def learn(self, samples: Sequence[LabeledSample]) -> PatternWeightTable:
        """Learn a new pattern table, replacing the previous one once complete."""
        table = self.build_table(samples)
        self.table = table

        for category, patterns in self.learned_patterns(top=LOGGED_PATTERNS_PER_CATEGORY).items():
            logger.info(
                "Category %d: %d patterns, top: %s",
                category,
                len(table.weights[category]),
                ", ".join(f"'{p}': {w:.3f}" for p, w in patterns),
            )
        return table

    def scores(self, text: str, table: Optional[PatternWeightTable] = None) -> dict[int, float]:
        """Sum weight x occurrences of every learned pattern, per category."""
        table = table if table is not None else self.table
        text = text.lower()
        return {
            category: sum(
                weight * count_occurrences(text, pattern)
                for pattern, weight in patterns.items()
            )
            for category, patterns in table.weights.items()
        }

    def classify(self, text: str) -> ClassificationResult:
        """Classify text and return category, language and softmax probabilities."""
        table = self.table
        if not table:
            raise NotLearned("Patterns must be learned before classifying")

        probabilities = softmax(self.scores(text, table))

        return {
            "category": argmax_category(probabilities),
            "language": self.detector.detect(text),
            "probabilities": probabilities,
        }

    def learned_patterns(self, top: Optional[int] = None) -> dict[int, list[tuple[str, float]]]:
        """Patterns per category, strongest absolute correlation first."""
        result = {}
        for category in self.table.categories:
            ranked = sorted(
                self.table.weights[category].items(),
                key=lambda item: (-abs(item[1]), item[0]),
            )
            result[category] = ranked[:top] if top is not None else ranked
        return result
