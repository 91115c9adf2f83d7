"""BatchReport data model: ordered per-document outcomes plus aggregate counts."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .document_outcome import DocumentOutcome


@dataclass
class BatchReport:
    """Outcomes of one batch run in input order.

    Results are written into index-addressed slots, so the report order
    matches the input order regardless of completion order. The report
    grows monotonically and is finalized once when the batch ends.

    Attributes:
        document_ids: Input identifiers, in input order
        outcomes: One slot per input, None until the document completes
        stopped_reason: Why dispatch stopped early (first error, cancellation)
        is_final: True once the batch has finished
    """

    document_ids: List[str]
    outcomes: List[Optional[DocumentOutcome]] = field(default_factory=list)
    stopped_reason: Optional[str] = None
    is_final: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self):
        """Allocate one empty slot per input document."""
        if not self.outcomes:
            self.outcomes = [None] * len(self.document_ids)

        if len(self.outcomes) != len(self.document_ids):
            raise ValueError(
                f"outcomes length ({len(self.outcomes)}) must match "
                f"document_ids length ({len(self.document_ids)})"
            )

    def record(self, index: int, outcome: DocumentOutcome) -> None:
        """Store the outcome for input position index (each slot is written once)."""
        with self._lock:
            if self.is_final:
                raise ValueError("BatchReport is final; no more outcomes can be recorded")
            if self.outcomes[index] is not None:
                raise ValueError(f"Outcome for position {index} already recorded")
            self.outcomes[index] = outcome

    def finalize(self, stopped_reason: Optional[str] = None) -> None:
        """Fill never-dispatched slots with SKIPPED outcomes and freeze the report."""
        with self._lock:
            if self.is_final:
                return
            self.stopped_reason = stopped_reason
            reason = f"not dispatched: {stopped_reason}" if stopped_reason else "not dispatched"
            for i, outcome in enumerate(self.outcomes):
                if outcome is None:
                    self.outcomes[i] = DocumentOutcome.skipped(self.document_ids[i], reason)
            self.is_final = True

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o is not None and o.status == status)

    @property
    def total(self) -> int:
        return len(self.document_ids)

    @property
    def completed(self) -> int:
        return sum(1 for o in self.outcomes if o is not None)

    @property
    def finalized(self) -> int:
        return self._count("FINALIZED")

    @property
    def failed(self) -> int:
        return self._count("FAILED")

    @property
    def cancelled(self) -> int:
        return self._count("CANCELLED")

    @property
    def skipped(self) -> int:
        return self._count("SKIPPED")

    @property
    def mean_confidence(self) -> float:
        """Mean document confidence over finalized outcomes (0.0 if none)."""
        scores = [
            o.record.metadata.confidence
            for o in self.outcomes
            if o is not None and o.record is not None
        ]
        return sum(scores) / len(scores) if scores else 0.0

    def counts(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "finalized": self.finalized,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "skipped": self.skipped,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.counts(),
            "mean_confidence": round(self.mean_confidence, 4),
            "stopped_reason": self.stopped_reason,
            "results": [o.to_dict() for o in self.outcomes if o is not None],
        }

    def summary_frame(self):
        """pandas DataFrame with one row per document, in input order."""
        from ..batch.batch_summary import create_batch_summary

        return create_batch_summary(self)
