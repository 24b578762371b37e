"""Task Registry: task records, the ownership tree, and ID allocation/reuse."""

import logging
from typing import Any, Optional, Sequence

from tickwise.errors import InvalidTaskError, TaskLimitError, UnknownWorkError
from tickwise.models.state import KernelState
from tickwise.models.task import ROOT_TASK_ID, Priority, Task
from tickwise.scheduler.queues import PriorityQueues
from tickwise.scheduler.work import WorkRegistry


MAX_TASKS = 2 ** 16

logger = logging.getLogger(__name__)


class TaskRegistry:
    """Owns every task record in ``KernelState``.

    IDs are drawn from ``1..MAX_TASKS-1``. Freed IDs are reused smallest
    first; freeing the highest allocated ID shrinks ``max_task_id`` instead
    so the free set stays compact.
    """

    def __init__(self, state: KernelState, queues: PriorityQueues, work: WorkRegistry):
        self.state = state
        self.queues = queues
        self.work = work

    # ── Lookup ────────────────────────────────────────────────────────

    def get(self, task_id: int) -> Optional[Task]:
        """The live task with ``task_id``, or None."""
        task = self.state.tasks.get(task_id)
        if task is None or not task.alive:
            return None
        return task

    def require(self, task_id: int) -> Task:
        task = self.get(task_id)
        if task is None:
            raise InvalidTaskError(task_id)
        return task

    def live(self) -> dict[int, Task]:
        return {tid: t for tid, t in self.state.tasks.items() if t.alive}

    # ── Lifecycle ─────────────────────────────────────────────────────

    def create(
        self,
        priority: Priority,
        patience: int,
        cost_estimate: float,
        task_key: str,
        task_args: Sequence[Any] = (),
        parent: Optional[int] = None,
        current: int = ROOT_TASK_ID,
    ) -> Task:
        """Register a new task and link it under its parent.

        With no explicit ``parent``, ``current`` (the executing task) becomes
        the parent if it is still alive; a task that killed itself creates
        root-level tasks. Queueing is left to the caller.
        """
        if parent is not None and self.get(parent) is None:
            raise InvalidTaskError(parent, "parent is not a live task")
        if task_key not in self.work:
            raise UnknownWorkError(task_key)
        if parent is None and self.get(current) is not None:
            parent = current

        # The ID is claimed only once the record has validated.
        task = Task(
            id=self._next_id(),
            priority=Priority(priority),
            patience=patience,
            cost_mean=cost_estimate,
            task_key=task_key,
            task_args=list(task_args),
            parent=parent,
        )
        self._claim_id(task.id)
        self.state.tasks[task.id] = task
        if parent is not None:
            self.state.tasks[parent].children.add(task.id)
        logger.debug("Created task %d (%s) at %s, parent=%s", task.id, task_key, task.priority.name, parent)
        return task

    def kill(self, task_id: int) -> list[int]:
        """Kill ``task_id`` and its whole subtree; return killed IDs deepest first."""
        task = self.require(task_id)
        if task.parent is not None:
            owner = self.state.tasks.get(task.parent)
            if owner is not None:
                owner.children.discard(task_id)
        return self._kill_subtree(task)

    def _kill_subtree(self, task: Task) -> list[int]:
        killed: list[int] = []
        # Highest IDs first so the allocation counter can shrink as we go.
        for child_id in sorted(task.children, reverse=True):
            child = self.state.tasks.get(child_id)
            if child is not None and child.alive:
                killed.extend(self._kill_subtree(child))
        task.children.clear()
        task.alive = False
        self.queues.discard(task.id)
        self.work.forget(task.id)
        del self.state.tasks[task.id]
        self._release_id(task.id)
        killed.append(task.id)
        return killed

    # ── ID allocation ─────────────────────────────────────────────────

    def _next_id(self) -> int:
        """The ID the next task will get: smallest free one, else one past the max."""
        state = self.state
        if state.free_ids:
            return min(state.free_ids)
        if state.max_task_id + 1 >= MAX_TASKS:
            raise TaskLimitError(MAX_TASKS)
        return state.max_task_id + 1

    def _claim_id(self, task_id: int) -> None:
        state = self.state
        if task_id in state.free_ids:
            state.free_ids.remove(task_id)
        else:
            state.max_task_id = task_id

    def _release_id(self, task_id: int) -> None:
        state = self.state
        if task_id != state.max_task_id:
            state.free_ids.add(task_id)
            return
        state.max_task_id -= 1
        while state.max_task_id in state.free_ids:
            state.free_ids.remove(state.max_task_id)
            state.max_task_id -= 1

    def reconcile_free_ids(self) -> None:
        """Purge dead records and make the free set match the allocated range."""
        state = self.state
        for task_id in [tid for tid, t in state.tasks.items() if not t.alive]:
            logger.debug("Purging dead task record %d", task_id)
            self.queues.discard(task_id)
            del state.tasks[task_id]
        for task_id in range(1, state.max_task_id + 1):
            if task_id not in state.tasks:
                state.free_ids.add(task_id)
        state.free_ids = {tid for tid in state.free_ids if tid <= state.max_task_id}
        while state.max_task_id in state.free_ids:
            state.free_ids.remove(state.max_task_id)
            state.max_task_id -= 1
