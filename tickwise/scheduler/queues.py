"""Priority Queues: one FIFO of task IDs per tier, with a membership index."""

from typing import Iterator, Optional

from tickwise.models.task import Priority


class PriorityQueues:
    """Four ordered queues of task IDs, most urgent tier first.

    Operates on the lists held in ``KernelState.queues`` so the queues are
    persisted with the rest of the state. The index maps each queued ID to
    its tier, which keeps any ID in at most one queue.
    """

    def __init__(self, queues: list[list[int]]):
        self._queues = queues
        self._tier_of: dict[int, Priority] = {}
        for tier, queue in zip(Priority, queues):
            deduped: list[int] = []
            for task_id in queue:
                if task_id not in self._tier_of:
                    self._tier_of[task_id] = tier
                    deduped.append(task_id)
            queue[:] = deduped

    def __contains__(self, task_id: int) -> bool:
        return task_id in self._tier_of

    def __len__(self) -> int:
        return len(self._tier_of)

    def __iter__(self) -> Iterator[tuple[Priority, list[int]]]:
        return iter(zip(Priority, self._queues))

    def queue(self, tier: Priority) -> list[int]:
        """The live list for ``tier``. Mutate it only through this class."""
        return self._queues[tier]

    def tier_of(self, task_id: int) -> Optional[Priority]:
        return self._tier_of.get(task_id)

    def push(self, task_id: int, tier: Priority) -> None:
        """Append to the back of ``tier``. Raises if already queued anywhere."""
        if task_id in self._tier_of:
            raise ValueError(
                f"Task {task_id} is already queued at {self._tier_of[task_id].name}"
            )
        self._queues[tier].append(task_id)
        self._tier_of[task_id] = tier

    def head(self, tier: Priority) -> Optional[int]:
        queue = self._queues[tier]
        return queue[0] if queue else None

    def pop_head(self, tier: Priority) -> int:
        task_id = self._queues[tier].pop(0)
        del self._tier_of[task_id]
        return task_id

    def rotate(self, tier: Priority) -> None:
        """Move the head of ``tier`` to its back."""
        queue = self._queues[tier]
        queue.append(queue.pop(0))

    def discard(self, task_id: int) -> bool:
        """Remove ``task_id`` wherever it is queued. Returns whether it was."""
        tier = self._tier_of.pop(task_id, None)
        if tier is None:
            return False
        self._queues[tier].remove(task_id)
        return True

    def move(self, task_id: int, tier: Priority) -> None:
        """Take ``task_id`` out of its current queue and append it to ``tier``."""
        self.discard(task_id)
        self.push(task_id, tier)

    def first_nonempty(self) -> Optional[Priority]:
        for tier, queue in self:
            if queue:
                return tier
        return None

    def snapshot(self) -> dict[Priority, list[int]]:
        return {tier: list(queue) for tier, queue in self}
