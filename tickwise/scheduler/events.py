"""Tick events: the record of scheduling decisions taken during one tick."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from tickwise.models.task import Priority


class EventType(str, Enum):
    """Kinds of decisions the kernel records."""
    TASK_EXECUTED = "task_executed"
    TASK_FAILED = "task_failed"
    TASK_DENIED = "task_denied"
    TASK_ELEVATED = "task_elevated"
    TASK_PRUNED = "task_pruned"
    TIER_ABANDONED = "tier_abandoned"
    WALK_RESTARTED = "walk_restarted"


@dataclass
class TickEvent:
    """One decision, in the order it was taken within the tick."""
    sequence: int
    event_type: EventType
    tier: Priority
    task_id: Optional[int] = None
    cost: Optional[float] = None
    metadata: dict = field(default_factory=dict)

    def __repr__(self) -> str:
        parts = [f"TickEvent(#{self.sequence}, {self.event_type.value}, tier={self.tier.name}"]
        if self.task_id is not None:
            parts.append(f", task={self.task_id}")
        if self.cost is not None:
            parts.append(f", cost={self.cost:.3f}")
        parts.append(")")
        return "".join(parts)
