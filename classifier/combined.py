"""Combined classifier: blends the ML and statistical classifiers."""

import logging
from pathlib import Path
from typing import Optional, Sequence

import joblib

from .blend import BlendWeights, combine
from .errors import NotLearned
from .language import LanguageDetector
from .ml import MLClassifier
from .models import ClassificationResult, LabeledSample
from .patterns import CorrelationScorer, PatternMiner
from .statistical import PatternWeightTable, StatisticalClassifier
from .weights import WeightLearner

logger = logging.getLogger(__name__)

LANGUAGE_SOURCES = ('detector', 'ml')


class Combiner:
    """Serves classify(text) from calibrated ML and statistical classifiers.

    language_source picks the reported language. 'detector' (the default)
    reports this combiner's own keyword detection, so text with no keyword
    hits comes back as 0 whatever language the ML collaborator claims; a
    collaborator trained elsewhere may label languages differently. 'ml'
    keeps the ML result's language exactly as combine() returns it. The
    built-in MLClassifier shares the detector, so the two only differ with
    another ML collaborator.
    """

    def __init__(self, statistical: StatisticalClassifier, ml: MLClassifier,
                 detector: Optional[LanguageDetector] = None,
                 learner: Optional[WeightLearner] = None,
                 language_source: str = 'detector'):
        if language_source not in LANGUAGE_SOURCES:
            raise ValueError(f"language_source must be one of {LANGUAGE_SOURCES}")
        self.statistical = statistical
        self.ml = ml
        self.detector = detector or statistical.detector
        self.learner = learner or WeightLearner()
        self.language_source = language_source
        self.weights: Optional[BlendWeights] = None

    @property
    def is_calibrated(self) -> bool:
        return self.weights is not None

    def calibrate(self, corpus: Sequence[LabeledSample]) -> BlendWeights:
        """Train both classifiers and learn blend weights from corpus."""
        try:
            weights = self.learner.calibrate(corpus, self.statistical, self.ml)
        except Exception:
            self.weights = None
            raise
        self.weights = weights
        if weights.indeterminate_categories:
            logger.warning("Blend weight undefined (NaN) for categories %s",
                           weights.indeterminate_categories)
        return weights

    def classify(self, text: str) -> ClassificationResult:
        """Classify text with the blended distribution."""
        weights = self.weights
        if weights is None:
            raise NotLearned("Weights must be calibrated before classifying")

        language = self.detector.detect(text)
        ml_result = self.ml.classify(text)
        stat_result = self.statistical.classify(text)

        result = combine(ml_result, stat_result, weights)
        if self.language_source == 'detector':
            result["language"] = language
        return result

    def save(self, path: str) -> None:
        """Export the calibrated model bundle to a joblib file."""
        if self.weights is None:
            raise NotLearned("Weights must be calibrated before export")
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        joblib.dump({
            'ml': self.ml.export(),
            'patterns': self.statistical.table.to_dict(),
            'weights': self.weights.to_dict(),
            'languages': self.detector.to_dict(),
            'language_source': self.language_source,
            'min_occurrences': self.statistical.miner.min_occurrences,
            'min_correlation': self.statistical.scorer.min_correlation,
        }, path)
        logger.info("Saved combined model to %s", path)

    @classmethod
    def load(cls, path: str, language_source: Optional[str] = None) -> "Combiner":
        """Load a bundle written by save()."""
        data = joblib.load(path)
        detector = LanguageDetector(data['languages'])

        statistical = StatisticalClassifier(
            detector=detector,
            miner=PatternMiner(data.get('min_occurrences', 3)),
            scorer=CorrelationScorer(data.get('min_correlation', 0.1)),
        )
        statistical.table = PatternWeightTable(data['patterns'])

        ml = MLClassifier.from_export(data['ml'], detector=detector)

        combiner = cls(statistical, ml, detector=detector,
                       language_source=language_source or data.get('language_source', 'detector'))
        combiner.weights = BlendWeights.from_dict(data['weights'])
        return combiner
