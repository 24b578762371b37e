"""Scenario generator: reproducible synthetic workloads for kernel simulations."""

import random

from pydantic import BaseModel, Field

from tickwise.models.task import Priority


class WorkloadSpec(BaseModel):
    """A simulated task: what the kernel is told, and what it really costs."""

    name: str = Field(description="Label used in reports")
    priority: Priority = Field(description="Tier the task is created at")
    patience: int = Field(gt=0, description="Skipped ticks before elevation")
    cost_estimate: float = Field(ge=0, description="Initial estimate handed to the kernel")
    true_cost: float = Field(ge=0, description="Mean of the actual per-run cost")
    cost_jitter: float = Field(default=0.0, ge=0, description="Std. deviation of the actual cost")
    failure_probability: float = Field(default=0.0, ge=0.0, le=1.0, description="Chance a run returns an error")
    spawn_count: int = Field(default=0, ge=0, description="Children this task keeps alive, created one per run")


class ScenarioGenerator:
    """Generates deterministic workloads using a seeded RNG."""

    def __init__(self, seed: int = 42):
        self.rng = random.Random(seed)
        self._counter = 0

    def generate(
        self,
        num_tasks: int = 20,
        estimate_error: float = 0.5,
        max_cost: float = 30.0,
        spawner_density: float = 0.1,
        tier_weights: tuple[float, float, float, float] = (0.1, 0.3, 0.3, 0.3),
    ) -> list[WorkloadSpec]:
        """Generate tasks whose initial estimates are off by up to ``estimate_error``."""
        specs: list[WorkloadSpec] = []

        for _ in range(num_tasks):
            name = f"task-{self._counter:04d}"
            self._counter += 1

            priority = self.rng.choices(list(Priority), weights=tier_weights)[0]
            true_cost = round(self.rng.uniform(0.5, max_cost), 2)
            misestimate = self.rng.uniform(1.0 - estimate_error, 1.0 + estimate_error)
            cost_estimate = round(max(0.1, true_cost * misestimate), 2)

            specs.append(WorkloadSpec(
                name=name,
                priority=priority,
                patience=self.rng.randint(2, 20),
                cost_estimate=cost_estimate,
                true_cost=true_cost,
                cost_jitter=round(true_cost * self.rng.uniform(0.0, 0.3), 2),
                failure_probability=round(self.rng.uniform(0.0, 0.05), 3),
                spawn_count=self.rng.randint(1, 3) if self.rng.random() < spawner_density else 0,
            ))

        return specs
