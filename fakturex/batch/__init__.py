"""Batch processing over many documents."""

from .batch_summary import create_batch_summary
from .runner import run_batch

__all__ = ["create_batch_summary", "run_batch"]
