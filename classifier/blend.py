"""Blending of ML and statistical probability distributions."""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .models import ClassificationResult, argmax_category


DEFAULT_ALPHA = 0.5


@dataclass(frozen=True)
class BlendWeights:
    """How much to trust the ML distribution, globally and per category.

    A per-category entry overrides global_alpha for that category. Entries
    may be NaN when neither classifier got a category right on validation.
    """
    global_alpha: float = DEFAULT_ALPHA
    per_category: Mapping[int, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'per_category', MappingProxyType(
            {int(category): float(weight) for category, weight in self.per_category.items()}
        ))

    def alpha_for(self, category: int) -> float:
        return self.per_category.get(category, self.global_alpha)

    @property
    def indeterminate_categories(self) -> list[int]:
        return sorted(c for c, w in self.per_category.items() if math.isnan(w))

    def to_dict(self) -> dict:
        return {'global_alpha': self.global_alpha, 'per_category': dict(self.per_category)}

    @classmethod
    def from_dict(cls, data: dict) -> "BlendWeights":
        return cls(global_alpha=data['global_alpha'], per_category=data.get('per_category', {}))


def combine(ml_result: ClassificationResult, stat_result: ClassificationResult,
            weights: BlendWeights) -> ClassificationResult:
    """Blend two results: p = w * p_ml + (1 - w) * p_stat for every category.

    w is weights.alpha_for(category). A category missing from one side
    counts as probability 0 there. The blend is rescaled to sum to 1 unless
    a weight is NaN. The language is the ML result's.
    """
    ml_probs = ml_result["probabilities"]
    stat_probs = stat_result["probabilities"]

    combined = {}
    for category in sorted(set(ml_probs) | set(stat_probs)):
        weight = weights.alpha_for(category)
        combined[category] = (
            weight * ml_probs.get(category, 0.0)
            + (1 - weight) * stat_probs.get(category, 0.0)
        )

    category = argmax_category(combined)

    # Per-category weights can leave the blend off 1; scaling keeps the argmax.
    total = sum(combined.values())
    if total > 0 and math.isfinite(total):
        combined = {c: prob / total for c, prob in combined.items()}

    return {
        "category": category,
        "language": ml_result["language"],
        "probabilities": combined,
    }
