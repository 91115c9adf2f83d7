"""Document confidence aggregation."""

from statistics import mean
from typing import Dict, Optional

from ..config.profile_loader import ExtractionProfile
from ..config.profile_manager import get_profile
from ..models.extracted_field import ExtractedField
from ..models.invoice_summary import InvoiceSummary
from .model import DocumentConfidence


def identifier_confidence(extracted: ExtractedField, profile: ExtractionProfile) -> float:
    """Identifier confidence, reduced when its checksum failed."""
    if extracted.validation.is_invalid:
        return extracted.confidence * float(profile.penalties["invalid_identifier"])
    return extracted.confidence


def summary_confidence(summary: InvoiceSummary) -> float:
    """Mean bucket confidence; total gross confidence when there are no buckets."""
    if summary.buckets:
        return mean(b.confidence for b in summary.buckets)
    return summary.total_gross.confidence


def aggregate_confidence(
    header,
    issuer,
    receiver,
    summary: InvoiceSummary,
    profile: Optional[ExtractionProfile] = None,
) -> DocumentConfidence:
    """Combine field confidences into the document confidence.

    score = weighted average of the group confidences (header: mean of
    invoice number and issue date; issuer identifier: issuer NIP; summary
    totals: mean bucket confidence; receiver: mean of name and NIP),
    multiplied once by the inconsistency penalty if any VAT bucket is
    inconsistent, however many are.

    Args:
        header: InvoiceHeader
        issuer: Issuer Party (annotated)
        receiver: Receiver Party (annotated)
        summary: Validated InvoiceSummary
        profile: Extraction profile (weights, penalties)

    Returns:
        DocumentConfidence with breakdown
    """
    profile = profile or get_profile()
    weights = profile.weights

    components: Dict[str, float] = {
        "header": mean([header.invoice_number.confidence, header.issue_date.confidence]),
        "issuer_identifier": identifier_confidence(issuer.nip, profile),
        "summary_totals": summary_confidence(summary),
        "receiver": mean([receiver.name.confidence, identifier_confidence(receiver.nip, profile)]),
    }

    total_weight = sum(weights[name] for name in components)
    weighted = sum(components[name] * weights[name] for name in components) / total_weight

    penalty = 1.0
    if summary.inconsistent_rates:
        penalty = float(profile.penalties["inconsistent_bucket"])

    score = max(0.0, min(1.0, weighted * penalty))
    return DocumentConfidence(
        score=score,
        components=components,
        weights={name: weights[name] for name in components},
        penalty=penalty,
    )
