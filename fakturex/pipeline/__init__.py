"""Pipeline stages for invoice processing."""

from .field_extraction import ExtractionResult, extract_fields
from .layout_normalizer import normalize_layout
from .orchestrator import process_document, process_recognized
from .recognition import RecognitionError, RecognitionProvider, StaticRecognitionProvider
from .validation import validate_extraction

__all__ = [
    "ExtractionResult",
    "RecognitionError",
    "RecognitionProvider",
    "StaticRecognitionProvider",
    "extract_fields",
    "normalize_layout",
    "process_document",
    "process_recognized",
    "validate_extraction",
]
