"""Field-level confidence scoring from token recognition confidences."""

import math
from typing import Iterable, Sequence

from ..config.profile_loader import ExtractionProfile
from ..models.token import TextToken


def geometric_mean(values: Iterable[float]) -> float:
    """Geometric mean of confidences; 1.0 for an empty sequence, 0.0 if any is 0."""
    values = list(values)
    if not values:
        return 1.0
    if any(v <= 0.0 for v in values):
        return 0.0
    return math.exp(sum(math.log(v) for v in values) / len(values))


def rule_factor(rule: str, profile: ExtractionProfile) -> float:
    """Rule-confidence factor: label match vs positional-only inference.

    "label" -> label factor (1.0 by default); "positional", "default" and
    "computed" -> positional factor (0.7 by default).
    """
    if rule == "label":
        return profile.label_factor
    return profile.positional_factor


def score_tokens(tokens: Sequence[TextToken], rule: str, profile: ExtractionProfile) -> float:
    """Field confidence = geometric mean of token confidences x rule factor."""
    score = geometric_mean(t.confidence for t in tokens) * rule_factor(rule, profile)
    return max(0.0, min(1.0, score))
