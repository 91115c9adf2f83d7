"""Recognition provider abstraction.

Text recognition and layout analysis (OCR models, PDF text layers) live
outside this package. A provider turns a document identifier into a
Document of tokens and regions; the pipeline only consumes that.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Mapping, Optional, Sequence

from ..models.document import Document
from ..models.layout_region import LayoutRegion
from ..models.token import TextToken


class RecognitionError(Exception):
    """Raised when a provider cannot produce tokens for a document."""
    pass


class RecognitionProvider(ABC):
    """Abstract base class for recognition collaborators."""

    @abstractmethod
    def recognize(self, document_id: str) -> Document:
        """Produce tokens, regions and source type for one document.

        Args:
            document_id: Caller-supplied identifier (e.g. a file path)

        Returns:
            Document with tokens and layout regions

        Raises:
            RecognitionError: If the document cannot be recognized
        """
        pass


class StaticRecognitionProvider(RecognitionProvider):
    """Provider backed by an in-memory mapping of prepared documents.

    Used for fixtures and for replaying recognition output captured
    elsewhere. Unknown identifiers raise RecognitionError.
    """

    def __init__(self, documents: Optional[Mapping[str, Document]] = None):
        self._documents: Dict[str, Document] = dict(documents or {})

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "StaticRecognitionProvider":
        return cls({doc.document_id: doc for doc in documents})

    def add(
        self,
        document_id: str,
        tokens: Sequence[TextToken],
        regions: Sequence[LayoutRegion] = (),
        source_type: str = "scanned_image",
    ) -> Document:
        """Register recognition output for a document identifier."""
        document = Document(
            document_id=document_id,
            tokens=tuple(tokens),
            regions=tuple(regions),
            source_type=source_type,
        )
        self._documents[document_id] = document
        return document

    def recognize(self, document_id: str) -> Document:
        try:
            return self._documents[document_id]
        except KeyError:
            raise RecognitionError(f"No recognition output for document: {document_id}")
