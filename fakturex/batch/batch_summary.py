"""Batch summary table for downstream CSV writers."""

import pandas as pd

from ..models.batch_report import BatchReport

SUMMARY_COLUMNS = [
    "document_id",
    "status",
    "stage",
    "confidence",
    "invoice_number",
    "issuer_nip",
    "total_gross",
    "warnings",
    "reason",
    "duration_ms",
]


def create_batch_summary(report: BatchReport) -> pd.DataFrame:
    """Build a DataFrame with one row per document, in input order.

    Columns:
    - document_id: Input identifier
    - status: FINALIZED/FAILED/CANCELLED/SKIPPED
    - stage: Last stage reached or failing stage
    - confidence: Document confidence (0.0 unless finalized)
    - invoice_number, issuer_nip, total_gross: Key fields (empty if unset)
    - warnings: Number of data-quality warnings
    - reason: Failure/skip reason (empty if finalized)
    - duration_ms: Processing time
    """
    rows = []
    for outcome in report.outcomes:
        if outcome is None:
            continue
        record = outcome.record
        rows.append({
            "document_id": outcome.document_id,
            "status": outcome.status,
            "stage": outcome.stage or "",
            "confidence": round(record.metadata.confidence, 4) if record else 0.0,
            "invoice_number": (record.header.invoice_number.value or "") if record else "",
            "issuer_nip": (record.issuer.nip.value or "") if record else "",
            "total_gross": record.summary.total_gross.value if record else None,
            "warnings": len(record.metadata.warnings) if record else 0,
            "reason": outcome.reason or "",
            "duration_ms": round(outcome.duration_ms, 2),
        })

    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
