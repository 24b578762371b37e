"""Starvation Elevator: promotes tasks that have waited too long at their tier."""

from tickwise.log import KernelLogger
from tickwise.models.task import Priority
from tickwise.scheduler.queues import PriorityQueues
from tickwise.scheduler.registry import TaskRegistry


class StarvationElevator:
    """Runs once per tick before admission.

    Every queued task outside CRITICAL gains one skip. When the skip count
    reaches a multiple of the task's patience it moves to the back of the
    next more urgent tier. Tiers are visited most urgent first, so a task
    climbs at most one tier per tick.
    """

    def __init__(self, registry: TaskRegistry, queues: PriorityQueues, log: KernelLogger):
        self.registry = registry
        self.queues = queues
        self.log = log

    def run(self) -> tuple[list[int], list[tuple[int, Priority]]]:
        """Returns (elevated IDs, (dead ID, tier) pairs pruned from the queues)."""
        elevated: list[int] = []
        pruned: list[tuple[int, Priority]] = []
        for tier in Priority:
            if tier == Priority.CRITICAL:
                continue
            for task_id in list(self.queues.queue(tier)):
                task = self.registry.get(task_id)
                if task is None:
                    self.queues.discard(task_id)
                    pruned.append((task_id, tier))
                    continue
                task.skip_count += 1
                if task.skip_count % task.patience == 0:
                    target = Priority(tier - 1)
                    self.queues.move(task_id, target)
                    elevated.append(task_id)
                    self.log.info(f"Elevating task {task_id} from {tier.name} to {target.name}")
        return elevated, pruned
