"""
Synthesis Events

Caller-facing notifications emitted by the orchestrator, strictly in stage
order: plans, context, synthesis-start, thought, memory (optional), then
done or error.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel


class EventType(str, Enum):
    """Types of synthesis event"""
    PLANS = "plans"
    CONTEXT = "context"
    SYNTHESIS_START = "synthesis-start"
    THOUGHT = "thought"
    MEMORY = "memory"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class SynthesisEvent:
    """One notification in a run's event sequence"""
    type: EventType
    payload: Any = None

    def to_dict(self) -> dict:
        """JSON-ready form (``{"type": ..., "payload": ...}``)"""
        data = {"type": self.type.value}
        if self.payload is not None:
            data["payload"] = _jsonable(self.payload)
        return data


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if hasattr(value, "__dataclass_fields__"):
        return asdict(value)
    return value


EventListener = Callable[[SynthesisEvent], None]


def noop_listener(event: SynthesisEvent) -> None:
    pass


def as_listener(listener: Optional[EventListener]) -> EventListener:
    return listener if listener is not None else noop_listener
