"""Kernel state: everything persisted between ticks."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tickwise.models.task import INITIAL_SMOOTHING_FACTOR, ROOT_TASK_ID, Priority, Task


PRIORITY_COUNT = len(Priority)


class EmaStat(BaseModel):
    """Running mean/variance of one kernel-level cost. ``mean`` is None until sampled."""

    mean: Optional[float] = None
    variance: float = Field(default=0.0, ge=0)


class KernelStats(BaseModel):
    """Kernel-level cost statistics, all smoothed with one shared alpha."""

    smoothing_factor: float = Field(default=INITIAL_SMOOTHING_FACTOR, gt=0, le=1)
    init: EmaStat = Field(default_factory=EmaStat, description="One-time boot cost")
    startup: EmaStat = Field(default_factory=EmaStat, description="Per-tick startup cost")
    shutdown: EmaStat = Field(default_factory=EmaStat, description="Per-tick shutdown/persistence cost")


class KernelState(BaseModel):
    """The whole scheduler state handed to the state store once per tick."""

    stats: KernelStats = Field(default_factory=KernelStats)
    tasks: dict[int, Task] = Field(default_factory=dict)
    queues: list[list[int]] = Field(default_factory=lambda: [[] for _ in range(PRIORITY_COUNT)])
    max_task_id: int = Field(default=ROOT_TASK_ID, ge=ROOT_TASK_ID)
    free_ids: set[int] = Field(default_factory=set)

    @field_validator("queues")
    @classmethod
    def _one_queue_per_tier(cls, queues: list[list[int]]) -> list[list[int]]:
        """Older or truncated snapshots are padded out to one queue per tier."""
        if len(queues) > PRIORITY_COUNT:
            raise ValueError(f"expected at most {PRIORITY_COUNT} queues, got {len(queues)}")
        return queues + [[] for _ in range(PRIORITY_COUNT - len(queues))]

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "KernelState":
        """Decode a snapshot; empty input yields a fresh state."""
        if not data:
            return cls()
        return cls.model_validate_json(data)
