"""Admission Controller: decides whether a queued task may run this tick."""

import math
from dataclasses import dataclass

from tickwise.host.protocols import BudgetOracle
from tickwise.models.task import Priority, Task


STRIKE_LIMIT = 3


@dataclass(frozen=True)
class CostForecast:
    """Predicted total budget use if the candidate runs now."""
    average_cost: float
    max_likely_cost: float


@dataclass(frozen=True)
class AdmissionDecision:
    """Immutable run/skip decision for one candidate."""
    task_id: int
    tier: Priority
    admitted: bool
    forecast: CostForecast


class AdmissionController:
    """Applies the per-tier admission policy against fresh budget readings.

    ======== ==========================================================
    Tier     Runs when
    ======== ==========================================================
    CRITICAL always
    HIGH     max_likely_cost < tick_limit
    MEDIUM   average_cost < limit, or max_likely_cost < tick_limit
             while the bucket is above ``bucket_threshold``
    LOW      average_cost < limit
    ======== ==========================================================
    """

    def __init__(self, oracle: BudgetOracle, bucket_threshold: float):
        self.oracle = oracle
        self.bucket_threshold = bucket_threshold

    def forecast(
        self,
        task: Task,
        used: float,
        shutdown_mean: float,
        shutdown_variance: float,
    ) -> CostForecast:
        average_cost = task.cost_mean + used + shutdown_mean
        # Two sigma on both the task and the shutdown estimate.
        max_likely_cost = (
            average_cost
            + 2 * math.sqrt(task.cost_variance)
            + 2 * math.sqrt(shutdown_variance)
        )
        return CostForecast(average_cost=average_cost, max_likely_cost=max_likely_cost)

    def decide(
        self,
        task: Task,
        tier: Priority,
        shutdown_mean: float,
        shutdown_variance: float,
    ) -> AdmissionDecision:
        forecast = self.forecast(task, self.oracle.used(), shutdown_mean, shutdown_variance)
        return AdmissionDecision(
            task_id=task.id,
            tier=tier,
            admitted=self._admits(tier, forecast),
            forecast=forecast,
        )

    def _admits(self, tier: Priority, forecast: CostForecast) -> bool:
        match tier:
            case Priority.CRITICAL:
                return True
            case Priority.HIGH:
                return forecast.max_likely_cost < self.oracle.tick_limit()
            case Priority.MEDIUM:
                return forecast.average_cost < self.oracle.limit() or (
                    forecast.max_likely_cost < self.oracle.tick_limit()
                    and self.oracle.bucket() > self.bucket_threshold
                )
            case Priority.LOW:
                return forecast.average_cost < self.oracle.limit()
        raise ValueError(f"Unknown tier: {tier!r}")
