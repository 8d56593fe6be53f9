"""
Mem42 error taxonomy.

External calls (generation, embedding, vector search) raise their own
failure types; the orchestrator wraps anything raised inside a stage in a
StageFailure that names the stage.
"""

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    """Orchestration stages, in execution order"""
    PLANNING = "Planning"
    QUERY_OPTIMIZATION = "QueryOptimization"
    RETRIEVAL = "Retrieval"
    SYNTHESIS = "Synthesis"
    MEMORY_EXTRACTION = "MemoryExtraction"


class Mem42Error(Exception):
    """Base class for all Mem42 errors"""


class ExternalAPIFailure(Mem42Error):
    """A generation or embedding call was rejected or timed out."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class RetrievalFailure(Mem42Error):
    """The vector store could not complete a search."""


class MalformedMemoryResponse(Mem42Error):
    """A memory-extraction response is missing one or more sections."""

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Memory response missing sections: " + ", ".join(self.missing_fields)
        )


class DimensionMismatchError(Mem42Error, ValueError):
    """Query and candidate vectors have different lengths."""


class DocumentExtractionError(Mem42Error):
    """A document could not be turned into text."""


class StageFailure(Mem42Error):
    """An unrecoverable error inside one orchestration stage."""

    def __init__(self, stage: Stage, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage.value} stage failed: {cause}")
