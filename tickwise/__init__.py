from tickwise.config import KernelConfig
from tickwise.errors import (
    DuplicateRegistrationError,
    InvalidTaskError,
    KernelError,
    TaskLimitError,
    UnknownWorkError,
)
from tickwise.log import LogLevel
from tickwise.models.task import ROOT_TASK_ID, Priority, Task
from tickwise.scheduler.kernel import Kernel
from tickwise.scheduler.work import ExecutionContext

__all__ = [
    "Kernel", "KernelConfig", "ExecutionContext", "Priority", "Task", "ROOT_TASK_ID", "LogLevel",
    "KernelError", "InvalidTaskError", "TaskLimitError", "DuplicateRegistrationError", "UnknownWorkError",
]
