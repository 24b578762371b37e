"""Kernel: the public scheduler API and the per-tick state machine.

One call to ``run_tick`` walks Startup -> Running -> Shutdown:

* Startup folds the one-time boot cost (first tick only), runs the
  starvation elevator, reconciles the free-ID pool and queues every live
  task that is not already queued.
* Running drains the tiers most urgent first under the admission
  controller, feeding each measured run cost back into the estimator.
* Shutdown folds the tick's startup cost, saves state through the store,
  then measures the shutdown cost itself.
"""

from typing import Any, Mapping, Optional, Sequence, Union

from tickwise.config import KernelConfig
from tickwise.errors import InvalidTaskError
from tickwise.host.protocols import BudgetOracle, StateStore
from tickwise.log import KernelLogger
from tickwise.models.state import KernelState
from tickwise.models.task import ROOT_TASK_ID, Priority, Task
from tickwise.scheduler.admission import STRIKE_LIMIT, AdmissionController
from tickwise.scheduler.elevator import StarvationElevator
from tickwise.scheduler.estimator import CostEstimator
from tickwise.scheduler.events import EventType, TickEvent
from tickwise.scheduler.queues import PriorityQueues
from tickwise.scheduler.registry import TaskRegistry
from tickwise.scheduler.work import ExecutionContext, WorkFactory, WorkRegistry

ConfigLike = Union[KernelConfig, Mapping[str, Any], None]


class Kernel:
    """Cooperative, budget-aware scheduler over a host-reported compute budget.

    State is loaded from ``store`` once, when the kernel is constructed
    (a cold boot), and saved back at the end of every tick.
    """

    def __init__(self, oracle: BudgetOracle, store: StateStore, config: ConfigLike = None):
        self.oracle = oracle
        self.store = store
        self.config = KernelConfig.coerce(config)
        self.log = KernelLogger(__name__, self.config.log_level, self.config.log_sink)

        self.state = KernelState.from_bytes(store.load())
        self.queues = PriorityQueues(self.state.queues)
        self.work = WorkRegistry()
        self.registry = TaskRegistry(self.state, self.queues, self.work)
        self.estimator = CostEstimator(
            self.config.alpha_min, self.config.alpha_decay, self.config.sigma_range
        )
        self.admission = AdmissionController(oracle, self.config.bucket_threshold)
        self.elevator = StarvationElevator(self.registry, self.queues, self.log)

        self.tick_count = 0
        self.last_tick_events: list[TickEvent] = []
        self._current = ROOT_TASK_ID
        self._booting = True
        self._running = False
        self._restart_tier: Optional[Priority] = None
        self._events: list[TickEvent] = []

    # ── Public API ────────────────────────────────────────────────────

    def register_work(self, key: str, factory: WorkFactory) -> None:
        """Bind ``key`` to a factory. Must happen before tasks using the key are created."""
        self.work.register(key, factory)

    def create(
        self,
        priority: Priority,
        patience: int,
        cost_estimate: float,
        task_key: str,
        task_args: Sequence[Any] = (),
        parent: Optional[int] = None,
    ) -> int:
        """Create a task and return its ID.

        Called from inside a running task, the new task is owned by that
        task (unless ``parent`` says otherwise) and is queued at once so
        it can still run this tick.
        """
        task = self.registry.create(
            priority=priority,
            patience=patience,
            cost_estimate=cost_estimate,
            task_key=task_key,
            task_args=task_args,
            parent=parent,
            current=self._current,
        )
        if self._running:
            self.queues.push(task.id, task.priority)
            if self._restart_tier is None or task.priority < self._restart_tier:
                self._restart_tier = task.priority
        return task.id

    def kill(self, task_id: Optional[int] = None) -> list[int]:
        """Kill a task (default: the running one) and all its descendants."""
        if task_id is None:
            task_id = self._current
        if task_id == ROOT_TASK_ID:
            raise InvalidTaskError(task_id, "the root task cannot be killed")
        killed = self.registry.kill(task_id)
        if self._current in killed:
            # The running task is gone; its ID may be reused by the next create.
            self._current = ROOT_TASK_ID
        self.log.debug(f"Killed tasks {killed}")
        return killed

    def current_task(self) -> int:
        """ID of the executing task; ``ROOT_TASK_ID`` outside task bodies or once it killed itself."""
        return self._current

    def get_task(self, task_id: int) -> Optional[Task]:
        return self.registry.get(task_id)

    def list_tasks(self) -> dict[int, Task]:
        return self.registry.live()

    # ── Tick ──────────────────────────────────────────────────────────

    def run_tick(self, config: ConfigLike = None) -> list[TickEvent]:
        """Run one Startup -> Running -> Shutdown cycle; return its decisions."""
        if config is not None:
            self._apply_config(KernelConfig.coerce(config))
        self._events = []
        stats = self.state.stats

        # Startup
        boot_cost = 0.0
        if self._booting:
            boot_cost = self.oracle.used()
            self.estimator.fold(stats.init, stats.smoothing_factor, boot_cost)
            self.log.trace(f"Boot cost: {boot_cost}")
            self._booting = False
        self._run_elevator()
        self.registry.reconcile_free_ids()
        self._enqueue_unqueued()
        last_used = self.oracle.used()
        startup_cost = last_used - boot_cost

        # Running
        self._running = True
        try:
            last_used = self._drain(last_used)
        finally:
            self._running = False
            self._restart_tier = None
            self._current = ROOT_TASK_ID

        # Shutdown
        alpha = stats.smoothing_factor
        self.estimator.fold(stats.startup, alpha, startup_cost)
        stats.smoothing_factor = self.estimator.decay(alpha)
        self.store.save(self.state.to_bytes())
        # Measured after the save, so it is persisted with the next tick.
        shutdown_cost = self.oracle.used() - last_used
        self.estimator.fold(stats.shutdown, alpha, shutdown_cost)
        self.log.trace(f"Shutdown cost: {shutdown_cost}")

        self.tick_count += 1
        self.last_tick_events = self._events
        return self._events

    def _apply_config(self, config: KernelConfig) -> None:
        self.config = config
        self.log.level = config.log_level
        self.log.sink = config.log_sink
        self.estimator = CostEstimator(config.alpha_min, config.alpha_decay, config.sigma_range)
        self.admission = AdmissionController(self.oracle, config.bucket_threshold)

    def _run_elevator(self) -> None:
        elevated, pruned = self.elevator.run()
        for task_id, tier in pruned:
            self._record(EventType.TASK_PRUNED, tier, task_id)
        for task_id in elevated:
            self._record(EventType.TASK_ELEVATED, self.queues.tier_of(task_id), task_id)

    def _enqueue_unqueued(self) -> None:
        for task_id, task in sorted(self.registry.live().items()):
            if task_id not in self.queues:
                self.queues.push(task_id, task.priority)

    def _drain(self, last_used: float) -> float:
        """Walk the tiers under admission control; return the last ``used()`` reading."""
        stats = self.state.stats
        shutdown_mean = (
            self.config.shutdown_cost_estimate
            if stats.shutdown.mean is None else stats.shutdown.mean
        )
        shutdown_variance = stats.shutdown.variance
        strikes = {tier: 0 for tier in Priority}
        abandoned: set[Priority] = set()

        tier_index = 0
        tiers = list(Priority)
        while tier_index < len(tiers):
            tier = tiers[tier_index]
            queue = self.queues.queue(tier)
            restarted = False
            while queue:
                if strikes[tier] >= STRIKE_LIMIT:
                    if tier not in abandoned:
                        abandoned.add(tier)
                        self._record(EventType.TIER_ABANDONED, tier, metadata={"remaining": len(queue)})
                    break
                task_id = queue[0]
                task = self.registry.get(task_id)
                if task is None:
                    self.queues.pop_head(tier)
                    self._record(EventType.TASK_PRUNED, tier, task_id)
                    continue

                decision = self.admission.decide(task, tier, shutdown_mean, shutdown_variance)
                if not decision.admitted:
                    self.queues.rotate(tier)
                    strikes[tier] += 1
                    self._record(
                        EventType.TASK_DENIED, tier, task_id,
                        metadata={
                            "average_cost": decision.forecast.average_cost,
                            "max_likely_cost": decision.forecast.max_likely_cost,
                        },
                    )
                    continue

                self.queues.pop_head(tier)
                strikes[tier] = 0
                last_used = self._execute(task, tier, last_used)

                # A task spawned more urgent work: go back up for it.
                if self._restart_tier is not None and self._restart_tier < tier:
                    tier_index = self._restart_tier
                    strikes[self._restart_tier] = 0
                    self._record(EventType.WALK_RESTARTED, self._restart_tier, task_id)
                    self._restart_tier = None
                    restarted = True
                    break
                self._restart_tier = None
            if not restarted:
                tier_index += 1
        return last_used

    def _execute(self, task: Task, tier: Priority, last_used: float) -> float:
        """Run one task body and fold its measured cost; return the new ``used()``."""
        task.skip_count = 0
        self._current = task.id
        try:
            try:
                work = self.work.build(task.id, task.task_key, task.task_args)
            except Exception as exc:
                self.log.error(f"Task {task.id} could not be initialized: {exc}")
                now = self.oracle.used()
                self._record(EventType.TASK_FAILED, tier, task.id, now - last_used, {"error": str(exc)})
                return now

            result: Any = None
            error: Optional[BaseException] = None
            try:
                result = work(ExecutionContext(task_id=task.id, kernel=self))
            except Exception as exc:
                error = exc
                self.log.error(f"Task {task.id} raised {type(exc).__name__}: {exc}")
        finally:
            self._current = ROOT_TASK_ID

        now = self.oracle.used()
        cost = now - last_used
        if error is None and result != 0:
            self.log.error(f"Task {task.id} returned nonzero result: {result}")

        # The body may have killed its own task.
        if task.alive:
            score = self.estimator.observe(task, cost)
            if self.estimator.is_anomalous(score):
                self.log.warn(f"Task {task.id} had abnormal cost: {cost} (z={score:.2f})")

        failed = error is not None or result != 0
        self._record(
            EventType.TASK_FAILED if failed else EventType.TASK_EXECUTED,
            tier, task.id, cost,
            {"result": result, "error": None if error is None else repr(error)},
        )
        return now

    def _record(
        self,
        event_type: EventType,
        tier: Priority,
        task_id: Optional[int] = None,
        cost: Optional[float] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        self._events.append(TickEvent(
            sequence=len(self._events),
            event_type=event_type,
            tier=tier,
            task_id=task_id,
            cost=cost,
            metadata=metadata or {},
        ))
