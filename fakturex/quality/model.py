"""Document confidence model."""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class DocumentConfidence:
    """Document-level confidence (0.0-1.0).

    Attributes:
        score: Final confidence after the inconsistency penalty
        components: Confidence of each weighted group (header,
            issuer_identifier, summary_totals, receiver)
        weights: Weight applied to each group
        penalty: Multiplier applied (1.0 when all buckets are consistent)
    """

    score: float
    components: Dict[str, float] = field(default_factory=dict)
    weights: Dict[str, float] = field(default_factory=dict)
    penalty: float = 1.0

    def __post_init__(self):
        """Validate score range."""
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"score must be between 0.0 and 1.0, got {self.score}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "score": round(self.score, 4),
            "components": {k: round(v, 4) for k, v in self.components.items()},
            "weights": dict(self.weights),
            "penalty": self.penalty,
        }
