"""SWIFT Message Classifier - FastAPI Server."""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from classifier.combined import Combiner
from classifier.config import Settings, build_combiner, load_settings, setup_logging
from classifier.data_source import create_data_source
from classifier.errors import NotLearned

logger = logging.getLogger(__name__)


# Application state
class AppState:
    """Application state holding the calibrated combiner."""

    combiner: Optional[Combiner] = None
    settings: Optional[Settings] = None
    startup_time: Optional[float] = None
    model_loaded: bool = False


state = AppState()

ms_per_second = 1000


def load_combiner(settings: Settings) -> Combiner:
    """Load the exported bundle, or calibrate from the corpus when there is none."""
    model_path = Path(settings.model.path)
    if model_path.exists():
        logger.info("Loading combined model from %s", model_path)
        return Combiner.load(str(model_path), settings.combiner.language_source)

    logger.info("No model at %s, calibrating from %s", model_path, settings.data.path)
    corpus = create_data_source(settings.data).load_all()
    combiner = build_combiner(settings)
    combiner.calibrate(corpus)
    return combiner


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load or calibrate the model on startup."""
    state.settings = load_settings()
    setup_logging(state.settings)
    try:
        state.combiner = load_combiner(state.settings)
        state.model_loaded = True
    except Exception:
        logger.exception("Model could not be loaded")
        state.model_loaded = False
    state.startup_time = time.time()
    yield
    # Shutdown (nothing to clean up)


app = FastAPI(
    title="SWIFT Message Classifier",
    description="Blended ML and statistical classification of SWIFT messages",
    version="1.0.0",
    lifespan=lifespan,
)


class ClassifyRequest(BaseModel):
    """Request body for classification."""

    text: str


class ClassifyResponse(BaseModel):
    """Response body for classification.

    Probabilities are keyed by category id.
    """

    category: int
    language: int
    probabilities: dict[int, float]
    processing_time_ms: int
    model_version: str


class HealthResponse(BaseModel):
    """Response body for health check."""

    status: str
    model_version: str
    model_loaded: bool
    uptime_seconds: float


class PatternsResponse(BaseModel):
    """Learned statistical patterns, strongest first."""

    patterns: dict[int, list[tuple[str, float]]]


def _model_version() -> str:
    return state.settings.model.version if state.settings else "unknown"


def _require_combiner() -> Combiner:
    if not state.model_loaded or state.combiner is None:
        raise HTTPException(status_code=503, detail="Model not loaded")
    return state.combiner


@app.post("/classify", response_model=ClassifyResponse)
def classify(request: ClassifyRequest) -> ClassifyResponse:
    """Classify a SWIFT message into a category and language."""
    start_time = time.time()
    combiner = _require_combiner()

    try:
        result = combiner.classify(request.text)
    except NotLearned as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    processing_time_ms = int((time.time() - start_time) * ms_per_second)

    return ClassifyResponse(
        category=result["category"],
        language=result["language"],
        probabilities=result["probabilities"],
        processing_time_ms=processing_time_ms,
        model_version=_model_version(),
    )


@app.get("/patterns", response_model=PatternsResponse)
def patterns(top: int = Query(10, ge=0)) -> PatternsResponse:
    """Top learned patterns per category."""
    combiner = _require_combiner()
    return PatternsResponse(patterns=combiner.statistical.learned_patterns(top=top))


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check endpoint. Returns 200 only if the model is loaded."""
    uptime = time.time() - state.startup_time if state.startup_time else 0
    response = HealthResponse(
        status="healthy" if state.model_loaded else "unhealthy",
        model_version=_model_version(),
        model_loaded=state.model_loaded,
        uptime_seconds=uptime,
    )
    if not state.model_loaded:
        raise HTTPException(status_code=503, detail="Model not loaded")
    return response
