"""Simulated host: a budget oracle whose usage is advanced by simulated work."""


class SimulatedHost:
    """In-process stand-in for a host that meters compute per tick.

    Task bodies call ``spend`` to consume budget. ``begin_tick`` starts a new
    tick and banks whatever the previous tick left under ``limit`` into the
    bucket (overspending drains it), capped at ``bucket_max``.
    """

    def __init__(
        self,
        limit: float = 20.0,
        tick_limit: float = 500.0,
        bucket: float = 10000.0,
        bucket_max: float = 10000.0,
        boot_cost: float = 0.0,
    ):
        self._limit = limit
        self._tick_limit = tick_limit
        self._bucket = bucket
        self.bucket_max = bucket_max
        self._used = boot_cost
        self.tick = 0

    # ── BudgetOracle ──────────────────────────────────────────────────

    def used(self) -> float:
        return self._used

    def tick_limit(self) -> float:
        return self._tick_limit

    def limit(self) -> float:
        return self._limit

    def bucket(self) -> float:
        return self._bucket

    # ── Simulation controls ───────────────────────────────────────────

    def spend(self, amount: float) -> None:
        if amount < 0:
            raise ValueError(f"Cannot spend a negative amount: {amount}")
        self._used += amount

    def begin_tick(self) -> None:
        """Settle the finished tick against the bucket and reset usage."""
        if self.tick > 0:
            self._bucket = min(self.bucket_max, max(0.0, self._bucket + self._limit - self._used))
            self._used = 0.0
        self.tick += 1

    def set_limits(
        self,
        limit: float | None = None,
        tick_limit: float | None = None,
        bucket: float | None = None,
    ) -> None:
        if limit is not None:
            self._limit = limit
        if tick_limit is not None:
            self._tick_limit = tick_limit
        if bucket is not None:
            self._bucket = bucket
