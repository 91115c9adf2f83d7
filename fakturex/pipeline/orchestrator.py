"""Per-document pipeline: Ingested -> Normalized -> Extracted -> Validated -> Finalized."""

import logging
import threading
import time
from typing import Optional

from ..config.profile_loader import ExtractionProfile
from ..config.profile_manager import get_profile
from ..models.document import Document
from ..models.document_outcome import DocumentOutcome
from ..models.invoice_record import ExtractionMetadata, InvoiceRecord
from ..quality.score import aggregate_confidence
from .field_extraction import ExtractionResult, extract_fields
from .layout_normalizer import normalize_layout
from .recognition import RecognitionError, RecognitionProvider
from .validation import validate_extraction

logger = logging.getLogger(__name__)


class PipelineStageError(Exception):
    """Raised inside the pipeline when a stage cannot proceed."""

    def __init__(self, stage: str, reason: str):
        super().__init__(reason)
        self.stage = stage
        self.reason = reason


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


def check_ingested(document: Document) -> None:
    """Reject documents with nothing to extract from.

    Raises:
        PipelineStageError: If the document has no tokens or only blank tokens
    """
    if not document.tokens:
        raise PipelineStageError("ingested", "document has no recognized tokens")
    if not any(token.text.strip() for token in document.tokens):
        raise PipelineStageError("ingested", "document tokens contain no text")


def build_record(
    result: ExtractionResult,
    source_type: str,
    profile: ExtractionProfile,
) -> InvoiceRecord:
    """Assemble the immutable InvoiceRecord from a validated extraction."""
    confidence = aggregate_confidence(
        result.header, result.issuer, result.receiver, result.summary, profile
    )
    return InvoiceRecord(
        header=result.header,
        issuer=result.issuer,
        receiver=result.receiver,
        summary=result.summary,
        line_items=result.line_items,
        metadata=ExtractionMetadata(
            confidence=confidence.score,
            source_type=source_type,
            warnings=result.warnings,
            missing_fields=result.missing_fields,
        ),
    )


def process_recognized(
    document: Document,
    profile: Optional[ExtractionProfile] = None,
    cancel_event: Optional[threading.Event] = None,
    started: Optional[float] = None,
) -> DocumentOutcome:
    """Run normalization, extraction and validation on a recognized document.

    Never raises: any failure becomes a FAILED outcome naming the stage
    that was being entered. A set cancel_event stops the document after its
    current stage with a CANCELLED outcome.
    """
    profile = profile or get_profile()
    started = time.perf_counter() if started is None else started
    document_id = document.document_id
    stage = "ingested"

    def should_stop() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    try:
        check_ingested(document)
        if should_stop():
            return DocumentOutcome.cancelled(document_id, stage, _elapsed_ms(started))

        stage = "normalized"
        layout = normalize_layout(document, profile)
        if should_stop():
            return DocumentOutcome.cancelled(document_id, stage, _elapsed_ms(started))

        stage = "extracted"
        extraction = extract_fields(layout, profile)
        if should_stop():
            return DocumentOutcome.cancelled(document_id, stage, _elapsed_ms(started))

        stage = "validated"
        validated = validate_extraction(extraction, profile)
        if should_stop():
            return DocumentOutcome.cancelled(document_id, stage, _elapsed_ms(started))

        stage = "finalized"
        record = build_record(validated, document.source_type, profile)
    except PipelineStageError as e:
        logger.error("Document %s failed at %s: %s", document_id, e.stage, e.reason)
        return DocumentOutcome.failed(document_id, e.stage, e.reason, _elapsed_ms(started))
    except Exception as e:
        logger.exception("Document %s failed at %s", document_id, stage)
        return DocumentOutcome.failed(
            document_id, stage, f"{type(e).__name__}: {e}", _elapsed_ms(started)
        )

    duration_ms = _elapsed_ms(started)
    logger.info(
        "Document %s finalized: confidence=%.3f, %d warnings (%.1f ms)",
        document_id,
        record.metadata.confidence,
        len(record.metadata.warnings),
        duration_ms,
    )
    return DocumentOutcome.finalized(document_id, record, duration_ms)


def process_document(
    document_id: str,
    provider: RecognitionProvider,
    profile: Optional[ExtractionProfile] = None,
    cancel_event: Optional[threading.Event] = None,
) -> DocumentOutcome:
    """Recognize one document and run it through the pipeline.

    Args:
        document_id: Identifier handed to the provider
        provider: Recognition collaborator
        profile: Extraction profile (active profile if None)
        cancel_event: Batch cancellation signal, checked between stages

    Returns:
        DocumentOutcome (FINALIZED with record, FAILED with stage and
        reason, or CANCELLED); never raises
    """
    started = time.perf_counter()
    try:
        document = provider.recognize(document_id)
    except RecognitionError as e:
        logger.error("Document %s failed at ingested: %s", document_id, e)
        return DocumentOutcome.failed(document_id, "ingested", str(e), _elapsed_ms(started))
    except Exception as e:
        logger.exception("Recognition of %s failed", document_id)
        return DocumentOutcome.failed(
            document_id, "ingested", f"{type(e).__name__}: {e}", _elapsed_ms(started)
        )

    if document.document_id != document_id:
        logger.debug("Provider returned id %r for %r", document.document_id, document_id)
        document = Document(
            document_id=document_id,
            tokens=document.tokens,
            regions=document.regions,
            source_type=document.source_type,
            metadata=document.metadata,
        )

    return process_recognized(document, profile, cancel_event, started)
