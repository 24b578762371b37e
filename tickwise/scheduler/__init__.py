from tickwise.scheduler.admission import AdmissionController, AdmissionDecision, CostForecast
from tickwise.scheduler.elevator import StarvationElevator
from tickwise.scheduler.estimator import CostEstimator
from tickwise.scheduler.events import EventType, TickEvent
from tickwise.scheduler.kernel import Kernel
from tickwise.scheduler.queues import PriorityQueues
from tickwise.scheduler.registry import MAX_TASKS, TaskRegistry
from tickwise.scheduler.work import ExecutionContext, WorkRegistry

__all__ = [
    "AdmissionController", "AdmissionDecision", "CostForecast", "StarvationElevator",
    "CostEstimator", "EventType", "TickEvent", "Kernel", "PriorityQueues", "MAX_TASKS",
    "TaskRegistry", "ExecutionContext", "WorkRegistry",
]
