"""
Mem42 Schemas

Knowledge-base entries, agent plans and memory points.
"""

from .memory import (
    StoredEntry,
    MemoryDraft,
    MemoryPoint,
    AgentPlan,
    generate_entry_id,
    normalize_tags,
)

__all__ = [
    "StoredEntry",
    "MemoryDraft",
    "MemoryPoint",
    "AgentPlan",
    "generate_entry_id",
    "normalize_tags",
]
