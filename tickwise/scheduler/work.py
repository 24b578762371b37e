"""Work registry: maps task keys to the factories that build task bodies."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from tickwise.errors import DuplicateRegistrationError, UnknownWorkError
from tickwise.models.task import Priority

if TYPE_CHECKING:
    from tickwise.scheduler.kernel import Kernel


@dataclass(frozen=True)
class ExecutionContext:
    """Handed to a running task body: who is running, and a way back into the kernel.

    Tasks created through the context default to the running task as parent,
    or to the root once that task has killed itself.
    """
    task_id: int
    kernel: "Kernel"

    def create(
        self,
        priority: Priority,
        patience: int,
        cost_estimate: float,
        task_key: str,
        task_args: Sequence[Any] = (),
        parent: Optional[int] = None,
    ) -> int:
        if parent is None and self.kernel.current_task() == self.task_id:
            parent = self.task_id
        return self.kernel.create(
            priority=priority,
            patience=patience,
            cost_estimate=cost_estimate,
            task_key=task_key,
            task_args=task_args,
            parent=parent,
        )

    def kill(self, task_id: Optional[int] = None) -> list[int]:
        """Kill ``task_id``, or the running task itself when omitted."""
        return self.kernel.kill(self.task_id if task_id is None else task_id)


Work = Callable[[ExecutionContext], int]
WorkFactory = Callable[..., Work]


class WorkRegistry:
    """Key -> factory lookup, plus a per-task cache of built work callables.

    A factory is called once per task with the task's arguments and must
    return a callable taking an ``ExecutionContext`` and returning a result
    code (0 for success).
    """

    def __init__(self):
        self._factories: dict[str, WorkFactory] = {}
        self._built: dict[int, Work] = {}

    def register(self, key: str, factory: WorkFactory) -> None:
        existing = self._factories.get(key)
        if existing is not None and existing != factory:
            raise DuplicateRegistrationError(key)
        self._factories[key] = factory

    def __contains__(self, key: str) -> bool:
        return key in self._factories

    def build(self, task_id: int, key: str, args: Sequence[Any]) -> Work:
        """Return the cached work callable for ``task_id``, building it if needed."""
        work = self._built.get(task_id)
        if work is None:
            factory = self._factories.get(key)
            if factory is None:
                raise UnknownWorkError(key)
            work = factory(*args)
            self._built[task_id] = work
        return work

    def forget(self, task_id: int) -> None:
        """Drop the built callable of a killed task so a reused ID starts fresh."""
        self._built.pop(task_id, None)
