"""Batch processing runner with isolated execution per document."""

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, Optional, Sequence

from ..config.profile_loader import ExtractionProfile
from ..config.profile_manager import get_profile
from ..models.batch_report import BatchReport
from ..models.document_outcome import DocumentOutcome
from ..pipeline.orchestrator import process_document
from ..pipeline.recognition import RecognitionProvider

logger = logging.getLogger(__name__)


def process_document_isolated(
    document_id: str,
    provider: RecognitionProvider,
    profile: ExtractionProfile,
    cancel_event: threading.Event,
) -> DocumentOutcome:
    """Process a single document in isolation.

    The worker owns its document's tokens and regions; only the profile is
    shared (read-only). Anything escaping the pipeline becomes a FAILED
    outcome so a worker never takes the batch down.
    """
    try:
        return process_document(document_id, provider, profile, cancel_event)
    except Exception as e:
        logger.exception("Unexpected error processing %s", document_id)
        return DocumentOutcome.failed(document_id, "ingested", f"{type(e).__name__}: {e}")


def run_batch(
    document_ids: Sequence[str],
    provider: RecognitionProvider,
    profile: Optional[ExtractionProfile] = None,
    continue_on_error: Optional[bool] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BatchReport:
    """Run the document pipeline over many documents concurrently.

    Args:
        document_ids: Ordered document identifiers
        provider: Recognition collaborator shared by all workers
        profile: Extraction profile (active profile if None)
        continue_on_error: Keep dispatching after a FAILED outcome
            (profile batch setting if None). When False, the first failure
            stops dispatch; documents already dispatched still finish.
        max_workers: Worker pool size (profile/env/CPU count if None)
        cancel_event: Batch cancellation signal. In-flight documents stop
            after their current stage; nothing new is dispatched.

    Returns:
        Final BatchReport with one outcome per input, in input order.
        Documents never dispatched are recorded as SKIPPED.
    """
    profile = profile or get_profile()
    if continue_on_error is None:
        continue_on_error = bool(profile.batch.get("continue_on_error", True))
    workers = max(1, max_workers or profile.max_workers())
    cancel_event = cancel_event or threading.Event()

    document_ids = list(document_ids)
    report = BatchReport(document_ids=document_ids)
    if not document_ids:
        report.finalize()
        return report

    logger.info(
        "Batch start: %d documents, %d workers, continue_on_error=%s",
        len(document_ids),
        workers,
        continue_on_error,
    )

    stopped_reason: Optional[str] = None
    next_index = 0
    in_flight: Dict[Future, int] = {}

    with ThreadPoolExecutor(max_workers=workers) as executor:

        def dispatch_until_full() -> None:
            nonlocal next_index
            while (
                stopped_reason is None
                and not cancel_event.is_set()
                and next_index < len(document_ids)
                and len(in_flight) < workers
            ):
                future = executor.submit(
                    process_document_isolated,
                    document_ids[next_index],
                    provider,
                    profile,
                    cancel_event,
                )
                in_flight[future] = next_index
                next_index += 1

        dispatch_until_full()
        while in_flight:
            done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
            for future in done:
                index = in_flight.pop(future)
                outcome = future.result()
                report.record(index, outcome)

                if outcome.status == "FAILED":
                    logger.warning(
                        "Document %s failed at %s: %s",
                        outcome.document_id,
                        outcome.stage,
                        outcome.reason,
                    )
                    if not continue_on_error and stopped_reason is None:
                        stopped_reason = f"stopped after failure of {outcome.document_id}"
                        logger.warning("Batch dispatch stopped: %s", stopped_reason)

            if cancel_event.is_set() and stopped_reason is None:
                stopped_reason = "batch cancelled"
                logger.warning("Batch cancelled; %d documents in flight will stop", len(in_flight))

            dispatch_until_full()

    if stopped_reason is None and cancel_event.is_set():
        stopped_reason = "batch cancelled"

    report.finalize(stopped_reason)
    logger.info(
        "Batch finished: %d finalized, %d failed, %d cancelled, %d skipped",
        report.finalized,
        report.failed,
        report.cancelled,
        report.skipped,
    )
    return report
