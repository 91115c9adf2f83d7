"""DocumentOutcome data model: tagged result of processing one document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .invoice_record import InvoiceRecord

PIPELINE_STAGES = ("ingested", "normalized", "extracted", "validated", "finalized")
OUTCOME_STATUSES = ("FINALIZED", "FAILED", "CANCELLED", "SKIPPED")


@dataclass(frozen=True)
class DocumentOutcome:
    """Result of the per-document state machine.

    Ingested -> Normalized -> Extracted -> Validated -> Finalized, or a
    terminal failure from any stage. Batch code aggregates outcomes
    without exception handling.

    Attributes:
        document_id: Identifier of the processed document
        status: FINALIZED, FAILED, CANCELLED (stopped between stages) or
            SKIPPED (never dispatched by the batch)
        stage: Last stage reached (FINALIZED) or stage that failed
        record: InvoiceRecord when FINALIZED, else None
        reason: Failure/cancel/skip reason, else None
        duration_ms: Wall-clock processing time (not part of the record)
    """

    document_id: str
    status: str
    stage: Optional[str] = None
    record: Optional[InvoiceRecord] = None
    reason: Optional[str] = None
    duration_ms: float = 0.0

    def __post_init__(self):
        """Validate status/stage/record combination."""
        if self.status not in OUTCOME_STATUSES:
            raise ValueError(
                f"status must be one of {', '.join(OUTCOME_STATUSES)}, got '{self.status}'"
            )

        if self.stage is not None and self.stage not in PIPELINE_STAGES:
            raise ValueError(
                f"stage must be one of {', '.join(PIPELINE_STAGES)}, got '{self.stage}'"
            )

        if self.status == "FINALIZED" and self.record is None:
            raise ValueError("FINALIZED outcome requires a record")

        if self.status != "FINALIZED" and self.record is not None:
            raise ValueError(f"{self.status} outcome must not carry a record")

        if self.status != "FINALIZED" and not self.reason:
            raise ValueError(f"{self.status} outcome requires a reason")

    @classmethod
    def finalized(
        cls, document_id: str, record: InvoiceRecord, duration_ms: float = 0.0
    ) -> DocumentOutcome:
        return cls(
            document_id=document_id,
            status="FINALIZED",
            stage="finalized",
            record=record,
            duration_ms=duration_ms,
        )

    @classmethod
    def failed(
        cls, document_id: str, stage: str, reason: str, duration_ms: float = 0.0
    ) -> DocumentOutcome:
        return cls(
            document_id=document_id,
            status="FAILED",
            stage=stage,
            reason=reason,
            duration_ms=duration_ms,
        )

    @classmethod
    def cancelled(
        cls, document_id: str, stage: str, duration_ms: float = 0.0
    ) -> DocumentOutcome:
        return cls(
            document_id=document_id,
            status="CANCELLED",
            stage=stage,
            reason=f"cancelled after stage '{stage}'",
            duration_ms=duration_ms,
        )

    @classmethod
    def skipped(cls, document_id: str, reason: str) -> DocumentOutcome:
        return cls(document_id=document_id, status="SKIPPED", reason=reason)

    @property
    def is_success(self) -> bool:
        return self.status == "FINALIZED"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "status": self.status,
            "stage": self.stage,
            "reason": self.reason,
            "confidence": self.record.metadata.confidence if self.record else 0.0,
            "duration_ms": round(self.duration_ms, 2),
        }
