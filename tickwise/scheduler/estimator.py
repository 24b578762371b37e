"""Cost Estimator: exponentially weighted mean/variance of measured costs.

Uses the standard EMA recurrence for a new sample ``x``::

    delta    = x - mean
    mean     = mean + alpha * delta
    variance = (1 - alpha) * (variance + alpha * delta**2)

Each task carries its own alpha, which starts at 0.5 and decays by
``alpha_decay`` after every update until it reaches ``alpha_min``: early
measurements move the estimate quickly, later ones refine it.
"""

import math
from dataclasses import dataclass
from typing import Optional

from tickwise.models.state import EmaStat
from tickwise.models.task import Task


@dataclass(frozen=True)
class EmaStep:
    """Result of folding one sample into a mean/variance pair."""
    mean: float
    variance: float
    delta: float


def ema_step(mean: float, variance: float, alpha: float, sample: float) -> EmaStep:
    delta = sample - mean
    return EmaStep(
        mean=mean + alpha * delta,
        variance=(1 - alpha) * (variance + alpha * delta ** 2),
        delta=delta,
    )


def standard_score(delta: float, variance: float) -> Optional[float]:
    """Z-score of ``delta`` against ``variance``; None when there is no spread yet."""
    if variance <= 0:
        return None
    return delta / math.sqrt(variance)


class CostEstimator:
    """Updates task and kernel cost statistics after each measurement."""

    def __init__(self, alpha_min: float, alpha_decay: float, sigma_range: float):
        self.alpha_min = alpha_min
        self.alpha_decay = alpha_decay
        self.sigma_range = sigma_range

    def decay(self, alpha: float) -> float:
        """Next alpha: shrink by the decay rate while still above the floor."""
        if alpha > self.alpha_min:
            return alpha * self.alpha_decay
        return alpha

    def observe(self, task: Task, cost: float) -> Optional[float]:
        """Fold a measured run cost into ``task`` in place.

        Returns the sample's standard score against the variance held
        before this update, or None if that variance was zero.
        """
        prior_variance = task.cost_variance
        step = ema_step(task.cost_mean, task.cost_variance, task.smoothing_factor, cost)
        task.cost_mean = max(0.0, step.mean)
        task.cost_variance = step.variance
        task.smoothing_factor = self.decay(task.smoothing_factor)
        return standard_score(step.delta, prior_variance)

    def is_anomalous(self, score: Optional[float]) -> bool:
        return score is not None and abs(score) > self.sigma_range

    @staticmethod
    def fold(stat: EmaStat, alpha: float, sample: float) -> None:
        """Fold a kernel-level sample into ``stat``; the first sample seeds the mean."""
        mean = sample if stat.mean is None else stat.mean
        step = ema_step(mean, stat.variance, alpha, sample)
        stat.mean = step.mean
        stat.variance = step.variance
