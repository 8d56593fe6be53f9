"""
Document Ingestor

Upload pipeline:
1. Extract text from each document
2. Distill it into an engram (LLM)
3. Embed the engram
4. Upsert into the vector store with the user's tags and the filename

A failing document is recorded and skipped; the rest of the batch continues.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

from ..common.embedding_service import EmbeddingService
from ..common.schemas import StoredEntry, generate_entry_id, normalize_tags
from ..common.vector_store import VectorStore
from .document_loader import Document, extract_text
from .engram import EngramBuilder

logger = logging.getLogger("mem42.ingest.ingestor")


@dataclass
class IngestReport:
    """Outcome of one ingestion batch"""
    total: int
    entries: List[StoredEntry] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return len(self.entries)

    @property
    def message(self) -> str:
        return f"Processed {self.successful}/{self.total} files."


class DocumentIngestor:
    """Turns documents into tagged engrams in the knowledge base."""

    def __init__(
        self,
        engram_builder: EngramBuilder,
        embedding_service: EmbeddingService,
        store: VectorStore,
        max_pdf_pages: Optional[int] = None,
    ):
        self._engrams = engram_builder
        self._embedding = embedding_service
        self._store = store
        self._max_pdf_pages = max_pdf_pages

    def ingest_one(self, document: Document, tags: Sequence[str]) -> StoredEntry:
        """
        Ingest a single document.

        Raises whatever the failing step raised (extraction, generation,
        embedding or upsert).
        """
        text = extract_text(document, max_pdf_pages=self._max_pdf_pages)
        engram = self._engrams.create(text)
        embedding = self._embedding.embed_single(engram)

        entry = StoredEntry(
            id=generate_entry_id(),
            content=engram,
            embedding=embedding,
            tags=list(tags) or None,
            source=document.name,
        )
        self._store.add(entry)
        logger.info("Stored engram %s from %s", entry.id, document.name)
        return entry

    def ingest(
        self,
        documents: Iterable[Document],
        tags: Union[str, Sequence[str], None] = None,
    ) -> IngestReport:
        """
        Ingest a batch of documents.

        Args:
            documents: Documents to process, in order
            tags: Comma-separated string or list; trimmed and lowercased

        Returns:
            IngestReport with stored entries and per-file errors
        """
        documents = list(documents)
        normalized = normalize_tags(tags)
        report = IngestReport(total=len(documents))

        for document in documents:
            try:
                report.entries.append(self.ingest_one(document, normalized))
            except Exception as e:
                logger.warning("Failed to process file %s: %s", document.name, e)
                report.errors.append(f"{document.name}: {e}")

        logger.info(report.message)
        return report
