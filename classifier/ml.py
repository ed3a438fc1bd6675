"""TF-IDF + logistic regression classifier for SWIFT messages."""

import logging
from pathlib import Path
from typing import Optional, Sequence, TypedDict

import joblib
import numpy as np
from sklearn.dummy import DummyClassifier
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score, balanced_accuracy_score, confusion_matrix, log_loss

from .errors import EmptyTrainingData, NotLearned
from .language import LanguageDetector
from .models import ClassificationResult, LabeledSample, argmax_category
from .preprocessor import preprocess_text

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
RANDOM_STATE = 1


class EvaluationReport(TypedDict):
    micro_accuracy: float
    macro_accuracy: float
    log_loss: Optional[float]
    labels: list[int]
    confusion_matrix: list[list[int]]


class MLClassifier:
    """Multi-class ML classifier over normalized message text."""

    def __init__(self, detector: Optional[LanguageDetector] = None,
                 max_iterations: int = MAX_ITERATIONS,
                 ngram_range: tuple[int, int] = (1, 2),
                 max_features: Optional[int] = None,
                 save_model_path: Optional[str] = None):
        self.detector = detector or LanguageDetector()
        self.max_iterations = max_iterations
        self.ngram_range = tuple(ngram_range)
        self.max_features = max_features
        self.save_model_path = save_model_path
        self.model = None
        self.vectorizer = None

    @classmethod
    def load(cls, model_path: str, detector: Optional[LanguageDetector] = None) -> "MLClassifier":
        """Load a trained model from joblib file."""
        return cls.from_export(joblib.load(model_path), detector)

    @classmethod
    def from_export(cls, data: dict, detector: Optional[LanguageDetector] = None) -> "MLClassifier":
        """Rebuild a trained classifier from an export() dict."""
        classifier = cls(detector=detector, max_iterations=data.get('max_iterations', MAX_ITERATIONS),
                         ngram_range=data.get('ngram_range', (1, 2)))
        classifier.model = data['model']
        classifier.vectorizer = data['vectorizer']
        return classifier

    @property
    def is_trained(self) -> bool:
        return self.model is not None and self.vectorizer is not None

    @property
    def classes(self) -> list[int]:
        if not self.is_trained:
            return []
        return [int(c) for c in self.model.classes_]

    def export(self) -> dict:
        if not self.is_trained:
            raise NotLearned("Model must be trained before export")
        return {
            'model': self.model,
            'vectorizer': self.vectorizer,
            'classes': self.classes,
            'max_iterations': self.max_iterations,
            'ngram_range': self.ngram_range,
        }

    def save(self, model_path: str) -> None:
        Path(model_path).parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self.export(), model_path)
        logger.info("Saved ML model to %s", model_path)

    def train(self, samples: Sequence[LabeledSample]) -> None:
        """Fit vectorizer and model on the given samples."""
        if not samples:
            raise EmptyTrainingData("Training data cannot be empty")

        texts = [preprocess_text(s.text) for s in samples]
        labels = [s.category for s in samples]

        vectorizer = TfidfVectorizer(
            ngram_range=self.ngram_range,
            max_features=self.max_features,
            token_pattern=r'(?u)\b\w+\b',
        )
        X = vectorizer.fit_transform(texts)

        if len(set(labels)) < 2:
            # LogisticRegression needs two classes; a single-category split
            # always predicts that category.
            model = DummyClassifier(strategy='prior')
        else:
            model = LogisticRegression(max_iter=self.max_iterations, random_state=RANDOM_STATE)
        model.fit(X, labels)

        self.model = model
        self.vectorizer = vectorizer
        logger.info("Trained %s on %d samples, %d categories",
                    type(model).__name__, len(samples), len(self.classes))

        if self.save_model_path:
            self.save(self.save_model_path)

    def predict_proba(self, texts: Sequence[str]) -> np.ndarray:
        if not self.is_trained:
            raise NotLearned("Model must be trained before making predictions")
        features = self.vectorizer.transform([preprocess_text(t) for t in texts])
        return self.model.predict_proba(features)

    def classify(self, text: str) -> ClassificationResult:
        """Classify text and return category, language and probabilities."""
        probabilities = self.predict_proba([text])[0]
        distribution = {cls: float(p) for cls, p in zip(self.classes, probabilities)}

        return {
            "category": argmax_category(distribution),
            "language": self.detector.detect(text),
            "probabilities": distribution,
        }

    def evaluate(self, samples: Sequence[LabeledSample]) -> EvaluationReport:
        """Micro/macro accuracy, log loss and confusion matrix on samples."""
        if not samples:
            raise EmptyTrainingData("Evaluation data cannot be empty")

        probabilities = self.predict_proba([s.text for s in samples])
        classes = np.array(self.classes)
        y_true = np.array([s.category for s in samples])
        y_pred = classes[np.argmax(probabilities, axis=1)]

        labels = sorted(set(classes.tolist()) | set(y_true.tolist()))
        known = np.isin(y_true, classes)
        loss = None
        if known.any() and len(classes) > 1:
            loss = float(log_loss(y_true[known], probabilities[known], labels=classes))

        report: EvaluationReport = {
            "micro_accuracy": float(accuracy_score(y_true, y_pred)),
            "macro_accuracy": float(balanced_accuracy_score(y_true, y_pred)),
            "log_loss": loss,
            "labels": [int(label) for label in labels],
            "confusion_matrix": confusion_matrix(y_true, y_pred, labels=labels).tolist(),
        }
        logger.info("Macro accuracy: %.2f%%, micro accuracy: %.2f%%, log loss: %s",
                    report["macro_accuracy"] * 100, report["micro_accuracy"] * 100,
                    f"{loss:.4f}" if loss is not None else "n/a")
        return report
