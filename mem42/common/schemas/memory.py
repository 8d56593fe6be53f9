"""
Memory Schemas

StoredEntry is the retrievable unit in the knowledge base: an engram, its
embedding, and the tags it was uploaded with. MemoryPoint is the durable
distillation of one synthesized answer.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def generate_entry_id() -> str:
    """Generate an id accepted by both the in-process store and Qdrant"""
    return str(uuid.uuid4())


def normalize_tags(tags) -> List[str]:
    """
    Normalize user-supplied tags.

    Accepts a comma-separated string or a list. Tags are trimmed and
    lowercased; empty entries are dropped.
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [t.strip().lower() for t in tags if t and t.strip()]


class StoredEntry(BaseModel):
    """One unit of retrievable knowledge (an engram plus its embedding)"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_entry_id)
    content: str = Field(..., description="The distilled engram text")
    embedding: List[float] = Field(default_factory=list)
    tags: Optional[List[str]] = None  # None means untagged
    source: Optional[str] = Field(default=None, description="Origin label, e.g. filename")

    @field_validator("tags")
    @classmethod
    def _lowercase_tags(cls, tags: Optional[List[str]]) -> Optional[List[str]]:
        if tags is None:
            return None
        return normalize_tags(tags)

    def to_payload(self) -> dict:
        """Payload stored alongside the vector in an external index"""
        return {"content": self.content, "tags": self.tags or [], "source": self.source}


class MemoryDraft(BaseModel):
    """Parsed memory-extraction response (MemoryPoint minus id and original thought)"""
    summary: str
    tags: List[str] = Field(default_factory=list)
    image_prompt: str

    def to_memory_point(self, original_thought: str, id: Optional[str] = None) -> "MemoryPoint":
        return MemoryPoint(
            id=id or generate_entry_id(),
            original_thought=original_thought,
            summary=self.summary,
            tags=list(self.tags),
            image_prompt=self.image_prompt,
        )


class MemoryPoint(BaseModel):
    """Durable summary + tags + image-prompt triple for one synthesized answer"""
    model_config = ConfigDict(frozen=True)

    id: str
    original_thought: str
    summary: str
    tags: List[str] = Field(default_factory=list)
    image_prompt: str


@dataclass(frozen=True)
class AgentPlan:
    """One persona's short reaction to the query"""
    module_name: str
    plan: str
