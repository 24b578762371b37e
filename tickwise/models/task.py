"""Task model: the unit of schedulable work tracked by the kernel."""

import math
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field


ROOT_TASK_ID = 0
INITIAL_SMOOTHING_FACTOR = 0.5


class Priority(IntEnum):
    """Scheduling tiers. Lower value = more urgent, drained first."""
    CRITICAL = 0
    HIGH = 1
    MEDIUM = 2
    LOW = 3


class Task(BaseModel):
    """A registered unit of work plus its online cost statistics."""

    id: int = Field(ge=1, description="Handle unique among live tasks")
    priority: Priority = Field(description="Tier the task is queued at when (re)enqueued")
    patience: int = Field(gt=0, description="Skipped ticks tolerated before promotion one tier up")
    cost_mean: float = Field(ge=0, description="EMA of measured per-run cost")
    cost_variance: float = Field(default=0.0, ge=0, description="EMA variance of measured per-run cost")
    smoothing_factor: float = Field(
        default=INITIAL_SMOOTHING_FACTOR, gt=0, le=1, description="Current EMA alpha"
    )
    task_key: str = Field(description="Key of the registered work factory")
    task_args: list[Any] = Field(default_factory=list, description="Arguments passed to the work factory")
    parent: Optional[int] = Field(default=None, description="Owning task ID")
    children: set[int] = Field(default_factory=set, description="IDs of owned tasks")
    skip_count: int = Field(default=0, ge=0, description="Consecutive ticks queued without running")
    alive: bool = Field(default=True, description="False once killed")

    @property
    def cost_stddev(self) -> float:
        return math.sqrt(self.cost_variance)

    @property
    def is_root_level(self) -> bool:
        """True when no task owns this one."""
        return self.parent is None

    def __repr__(self) -> str:
        return (
            f"Task(id={self.id}, priority={self.priority.name}, "
            f"cost={self.cost_mean:.3f}±{self.cost_stddev:.3f}, skips={self.skip_count})"
        )
