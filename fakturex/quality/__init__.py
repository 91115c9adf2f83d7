"""Document confidence aggregation."""

from .model import DocumentConfidence
from .score import aggregate_confidence

__all__ = ["DocumentConfidence", "aggregate_confidence"]
