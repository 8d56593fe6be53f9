"""
Document Loader

Turns uploaded document bytes into plain text.
Uses PyMuPDF (fitz) for PDFs; everything else is decoded as UTF-8.
"""

import io
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..common.errors import DocumentExtractionError

logger = logging.getLogger("mem42.ingest.document_loader")

PDF_MIME_TYPE = "application/pdf"

# Lazy import to avoid loading heavy libraries at module load
fitz = None


def _get_fitz():
    """Lazy load PyMuPDF."""
    global fitz
    if fitz is None:
        try:
            import fitz as _fitz
            fitz = _fitz
        except ImportError:
            raise ImportError(
                "PyMuPDF (fitz) is required for PDF extraction. "
                "Install with: pip install pymupdf"
            )
    return fitz


@dataclass
class Document:
    """An uploaded document awaiting ingestion"""
    name: str
    data: bytes
    mime_type: Optional[str] = None

    @classmethod
    def from_path(cls, path) -> "Document":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type)

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE or self.name.lower().endswith(".pdf")


def _extract_pdf_text(data: bytes, name: str, max_pages: Optional[int]) -> str:
    fitz_lib = _get_fitz()
    try:
        doc = fitz_lib.open(stream=io.BytesIO(data), filetype="pdf")
    except Exception as e:
        raise DocumentExtractionError(f"Could not open PDF {name}: {e}") from e

    try:
        page_count = len(doc)
        if max_pages and page_count > max_pages:
            logger.warning("%s has %d pages, truncating to %d", name, page_count, max_pages)
            page_count = max_pages
        return "\n".join(doc[i].get_text("text") for i in range(page_count))
    finally:
        doc.close()


def extract_text(document: Document, max_pdf_pages: Optional[int] = None) -> str:
    """
    Extract plain text from a document.

    Raises:
        DocumentExtractionError: if the document yields no text
    """
    if document.is_pdf:
        text = _extract_pdf_text(document.data, document.name, max_pdf_pages)
    else:
        text = document.data.decode("utf-8", errors="replace")

    if not text.strip():
        raise DocumentExtractionError(f"No text could be extracted from {document.name}")

    return text
