"""Tick simulation: drives a kernel against a simulated host for many ticks."""

from typing import Optional

import numpy as np

from tickwise.config import KernelConfig
from tickwise.host.protocols import StateStore
from tickwise.host.stores import MemoryStateStore
from tickwise.metrics.collector import MetricsCollector
from tickwise.models.task import Priority
from tickwise.scheduler.kernel import Kernel
from tickwise.scheduler.work import ExecutionContext
from tickwise.simulator.generator import WorkloadSpec
from tickwise.simulator.host import SimulatedHost


SIMULATED_WORK = "simulated"
SPAWNER_WORK = "spawner"
CHILD_COST = 1.0


class TickSimulation:
    """Runs ``Kernel.run_tick`` once per simulated tick and collects metrics.

    Every workload becomes a kernel task whose body spends a noisy amount of
    the host budget. Workloads with ``spawn_count`` also create short-lived
    HIGH children from inside their body, exercising reentrant creation.
    """

    def __init__(
        self,
        workloads: list[WorkloadSpec],
        host: Optional[SimulatedHost] = None,
        config: Optional[KernelConfig] = None,
        store: Optional[StateStore] = None,
        seed: int = 42,
    ):
        self.host = host or SimulatedHost()
        self.store = store or MemoryStateStore()
        self.rng = np.random.default_rng(seed)
        self.kernel = Kernel(self.host, self.store, config)
        self.kernel.register_work(SIMULATED_WORK, self._simulated_work)
        self.kernel.register_work(SPAWNER_WORK, self._spawner_work)
        self.metrics = MetricsCollector()

        self.task_names: dict[int, str] = {}
        for workload in workloads:
            key, args = SIMULATED_WORK, [workload.true_cost, workload.cost_jitter, workload.failure_probability]
            if workload.spawn_count:
                key, args = SPAWNER_WORK, [workload.true_cost, workload.spawn_count]
            task_id = self.kernel.create(
                priority=workload.priority,
                patience=workload.patience,
                cost_estimate=workload.cost_estimate,
                task_key=key,
                task_args=args,
            )
            self.task_names[task_id] = workload.name

    def run(self, num_ticks: int) -> MetricsCollector:
        for _ in range(num_ticks):
            self.host.begin_tick()
            events = self.kernel.run_tick()
            self.metrics.record_tick(
                tick=self.host.tick,
                events=events,
                used=self.host.used(),
                limit=self.host.limit(),
                tick_limit=self.host.tick_limit(),
                bucket=self.host.bucket(),
                queued=len(self.kernel.queues),
            )
        self.metrics.calculate(scheduler_name="tickwise")
        return self.metrics

    # ── Work factories ────────────────────────────────────────────────

    def _simulated_work(self, mean: float, jitter: float, failure_probability: float):
        def work(ctx: ExecutionContext) -> int:
            self.host.spend(max(0.0, float(self.rng.normal(mean, jitter))))
            return 1 if self.rng.random() < failure_probability else 0
        return work

    def _spawner_work(self, mean: float, spawn_count: int):
        def work(ctx: ExecutionContext) -> int:
            self.host.spend(mean)
            me = ctx.kernel.get_task(ctx.task_id)
            if me is not None and len(me.children) < spawn_count:
                ctx.create(
                    priority=Priority.HIGH,
                    patience=5,
                    cost_estimate=CHILD_COST,
                    task_key=SIMULATED_WORK,
                    task_args=[CHILD_COST, 0.0, 0.0],
                )
            return 0
        return work
