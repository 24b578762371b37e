"""Kernel errors: failures surfaced to the caller of a kernel operation."""


class KernelError(Exception):
    """Base class for every error raised by the kernel itself."""


class InvalidTaskError(KernelError, ValueError):
    """A task ID (to kill, or given as parent) does not refer to a live task."""

    def __init__(self, task_id: int, reason: str = "not a live task"):
        self.task_id = task_id
        super().__init__(f"Invalid task ID {task_id}: {reason}")


class TaskLimitError(KernelError, RuntimeError):
    """The task ID space is exhausted."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Cannot create more tasks: ID space of {limit} is exhausted")


class DuplicateRegistrationError(KernelError, ValueError):
    """A work key was registered twice with different callables."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Task key used for multiple work factories: {key!r}")


class UnknownWorkError(KernelError, LookupError):
    """No work factory is registered under the given key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown task key: {key!r}")
