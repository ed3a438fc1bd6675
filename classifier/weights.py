"""Calibration of blend weights on a held-out validation split."""

import logging
import math
import warnings
from typing import Protocol, Sequence

from .blend import DEFAULT_ALPHA, BlendWeights, combine
from .errors import EmptyTrainingData, IndeterminateWeight
from .models import ClassificationResult, LabeledSample
from .statistical import StatisticalClassifier

logger = logging.getLogger(__name__)

TRAIN_FRACTION = 0.8
ALPHA_STEPS = 10


class ExternalClassifier(Protocol):
    def train(self, samples: Sequence[LabeledSample]) -> None: ...

    def classify(self, text: str) -> ClassificationResult: ...


def split_samples(samples: Sequence[LabeledSample], train_fraction: float = TRAIN_FRACTION):
    """Split in input order: the first train_fraction for training, the rest for validation."""
    split_index = int(len(samples) * train_fraction)
    return list(samples[:split_index]), list(samples[split_index:])


def alpha_candidates(steps: int = ALPHA_STEPS) -> list[float]:
    """Evenly spaced alphas from 0.0 to 1.0 inclusive (steps + 1 points)."""
    return [i / steps for i in range(steps + 1)]


class WeightLearner:
    """Trains both classifiers and fits global and per-category blend weights."""

    def __init__(self, train_fraction: float = TRAIN_FRACTION, alpha_steps: int = ALPHA_STEPS):
        self.train_fraction = train_fraction
        self.alpha_steps = alpha_steps
        self.alpha_scores: dict[float, float] = {}

    def calibrate(self, labeled_data: Sequence[LabeledSample],
                  statistical: StatisticalClassifier,
                  external: ExternalClassifier) -> BlendWeights:
        if not labeled_data:
            raise EmptyTrainingData("Calibration data cannot be empty")

        train, validation = split_samples(labeled_data, self.train_fraction)
        if not train:
            raise EmptyTrainingData(
                f"{len(labeled_data)} samples leave an empty training split"
            )
        if not validation:
            raise EmptyTrainingData(
                f"{len(labeled_data)} samples leave an empty validation split"
            )
        logger.info("Calibrating on %d training / %d validation samples",
                    len(train), len(validation))

        external.train(train)
        statistical.learn(train)
        if not statistical.is_learned:
            raise EmptyTrainingData(
                "No pattern correlates with any category in the training split"
            )

        # Classification is pure, so each validation sample is scored once.
        predictions = [
            (sample, external.classify(sample.text), statistical.classify(sample.text))
            for sample in validation
        ]

        best_alpha = self.find_optimal_alpha(predictions)
        logger.info("Optimal alpha: %.3f", best_alpha)

        per_category = self.category_weights(predictions)
        for category, weight in sorted(per_category.items()):
            logger.info("Weight for category %d: %.3f", category, weight)

        return BlendWeights(global_alpha=best_alpha, per_category=per_category)

    def find_optimal_alpha(self, predictions) -> float:
        """Grid search alpha on validation accuracy; the first best alpha wins ties."""
        best_alpha = DEFAULT_ALPHA
        best_accuracy = 0.0
        self.alpha_scores = {}

        for alpha in alpha_candidates(self.alpha_steps):
            correct = sum(
                1 for sample, ml_result, stat_result in predictions
                if combine(ml_result, stat_result, BlendWeights(alpha))["category"]
                == sample.category
            )
            accuracy = correct / len(predictions)
            self.alpha_scores[alpha] = accuracy
            logger.debug("alpha=%.1f accuracy=%.3f", alpha, accuracy)

            if accuracy > best_accuracy:
                best_accuracy = accuracy
                best_alpha = alpha

        return best_alpha

    def category_weights(self, predictions) -> dict[int, float]:
        """ML accuracy share per category: ml_acc / (ml_acc + stat_acc)."""
        weights = {}
        categories = sorted({sample.category for sample, _, _ in predictions})

        for category in categories:
            rows = [p for p in predictions if p[0].category == category]
            ml_accuracy = sum(1 for _, ml, _ in rows if ml["category"] == category) / len(rows)
            stat_accuracy = sum(1 for _, _, st in rows if st["category"] == category) / len(rows)

            total = ml_accuracy + stat_accuracy
            if total == 0:
                warnings.warn(
                    f"Neither classifier predicted category {category} correctly; "
                    "its blend weight is undefined (NaN)",
                    IndeterminateWeight,
                    stacklevel=2,
                )
                weights[category] = math.nan
            else:
                weights[category] = ml_accuracy / total

        return weights
