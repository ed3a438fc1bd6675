"""Configuration loading and logging bootstrap."""

import logging
import os
import sys
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .combined import Combiner
from .errors import ConfigError
from .language import LanguageDetector
from .ml import MLClassifier
from .patterns import CorrelationScorer, PatternMiner
from .statistical import StatisticalClassifier
from .weights import WeightLearner

CONFIG_ENV_VAR = "SWIFT_CLASSIFIER_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None


class ColumnSettings(BaseModel):
    text: str = "SWIFT"
    category: str = "Category"
    language: str = "Language"


class DataSettings(BaseModel):
    source: Literal["csv", "sqlite"] = "csv"
    path: str = "data/swift.csv"
    table: str = "SwiftData"
    columns: ColumnSettings = Field(default_factory=ColumnSettings)


class MLSettings(BaseModel):
    max_iterations: int = 100
    ngram_max: int = Field(default=2, ge=1)
    max_features: Optional[int] = None
    save_model_path: Optional[str] = None


class StatisticalSettings(BaseModel):
    min_occurrences: int = Field(default=3, ge=1)
    min_correlation: float = Field(default=0.1, ge=0.0, le=1.0)


class CalibrationSettings(BaseModel):
    train_fraction: float = Field(default=0.8, gt=0.0, lt=1.0)
    alpha_steps: int = Field(default=10, ge=1)


class CombinerSettings(BaseModel):
    language_source: Literal["detector", "ml"] = "detector"


class ModelSettings(BaseModel):
    path: str = "models/combined.joblib"
    version: str = "1.0.0"


class Settings(BaseModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    ml: MLSettings = Field(default_factory=MLSettings)
    statistical: StatisticalSettings = Field(default_factory=StatisticalSettings)
    calibration: CalibrationSettings = Field(default_factory=CalibrationSettings)
    combiner: CombinerSettings = Field(default_factory=CombinerSettings)
    model: ModelSettings = Field(default_factory=ModelSettings)
    languages: Optional[dict[int, dict[str, float]]] = None


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from YAML; a missing default file yields the defaults.

    The path comes from the argument, then SWIFT_CLASSIFIER_CONFIG, then
    config.yaml. LOG_LEVEL overrides logging.level.
    """
    explicit = path or os.getenv(CONFIG_ENV_VAR)
    config_path = Path(explicit or DEFAULT_CONFIG_PATH)

    data = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping, not {type(data).__name__}")
    # A bare "section:" key loads as None; treat it as absent.
    data = {key: value for key, value in data.items() if value is not None}

    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        logging_section = data.setdefault("logging", {})
        if not isinstance(logging_section, dict):
            raise ConfigError(f"logging in {config_path} must be a mapping")
        logging_section["level"] = env_level.upper()

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def setup_logging(settings: Settings) -> None:
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stdout)]

    if settings.logging.file:
        os.makedirs(os.path.dirname(settings.logging.file) or ".", exist_ok=True)
        handlers.append(logging.FileHandler(settings.logging.file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def build_combiner(settings: Settings) -> Combiner:
    """Wire detector, both classifiers and the weight learner from settings."""
    detector = LanguageDetector(settings.languages)
    statistical = StatisticalClassifier(
        detector=detector,
        miner=PatternMiner(settings.statistical.min_occurrences),
        scorer=CorrelationScorer(settings.statistical.min_correlation),
    )
    ml = MLClassifier(
        detector=detector,
        max_iterations=settings.ml.max_iterations,
        ngram_range=(1, settings.ml.ngram_max),
        max_features=settings.ml.max_features,
        save_model_path=settings.ml.save_model_path,
    )
    learner = WeightLearner(
        train_fraction=settings.calibration.train_fraction,
        alpha_steps=settings.calibration.alpha_steps,
    )
    return Combiner(statistical, ml, detector=detector, learner=learner,
                    language_source=settings.combiner.language_source)
