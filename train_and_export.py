#!/usr/bin/env python3
"""
SWIFT Message Classifier - Training and Export
Trains the ML and statistical classifiers, calibrates their blend weights
and exports the combined model to a joblib file.

Usage:
    python train_and_export.py                 # uses config.yaml
    python train_and_export.py --config other.yaml --output models/x.joblib
"""

import argparse
import logging
import sys

from classifier.config import build_combiner, load_settings, setup_logging
from classifier.data_source import create_data_source
from classifier.errors import ClassifierError

logger = logging.getLogger(__name__)


def format_confusion_matrix(labels: list[int], matrix: list[list[int]]) -> str:
    """Render a confusion matrix with true labels as rows."""
    width = max(6, *(len(str(v)) + 1 for row in matrix for v in row))
    header = "true\\pred".ljust(10) + "".join(str(label).rjust(width) for label in labels)
    rows = [
        str(label).ljust(10) + "".join(str(v).rjust(width) for v in row)
        for label, row in zip(labels, matrix)
    ]
    return "\n".join([header, *rows])


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Train and export the SWIFT classifier")
    parser.add_argument("--config", help="Path to config YAML (default: config.yaml)")
    parser.add_argument("--output", help="Output bundle path (default: model.path from config)")
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    setup_logging(settings)
    output_path = args.output or settings.model.path

    try:
        # 1. Load training data
        logger.info("Loading training data...")
        corpus = create_data_source(settings.data).load_all()
        logger.info("Loaded %d records", len(corpus))

        combiner = build_combiner(settings)

        # 2. Train and evaluate the ML model on the whole corpus
        logger.info("Training ML model...")
        combiner.ml.train(corpus)
        report = combiner.ml.evaluate(corpus)
        logger.info("Confusion matrix:\n%s",
                    format_confusion_matrix(report["labels"], report["confusion_matrix"]))

        # 3. Learn optimal weights for the combined approach
        logger.info("Learning optimal weights for combined approach...")
        weights = combiner.calibrate(corpus)

        for alpha, accuracy in combiner.learner.alpha_scores.items():
            logger.info("alpha=%.1f validation accuracy=%.2f%%", alpha, accuracy * 100)
        logger.info("Global alpha: %.3f", weights.global_alpha)

        # 4. Export
        combiner.save(output_path)
    except ClassifierError:
        logger.exception("Training failed")
        return 1

    logger.info("Done - model exported to %s", output_path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
