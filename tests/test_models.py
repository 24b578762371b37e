"""
Tests for the Task, KernelState and KernelConfig models.

These tests verify:
    1. Task creation with valid/invalid fields
    2. Kernel state defaults and queue padding
    3. State snapshots survive a bytes round trip
    4. Configuration ranges are enforced (pydantic validation)
"""

import pytest
from pydantic import ValidationError

from tickwise.config import KernelConfig
from tickwise.log import LogLevel
from tickwise.models.state import EmaStat, KernelState, PRIORITY_COUNT
from tickwise.models.task import Priority, Task


# ══════════════════════════════════════════════════════════════════════
# TASK MODEL TESTS
# ══════════════════════════════════════════════════════════════════════

class TestTask:
    """Tests for the Task model."""

    def _make_task(self, **overrides) -> Task:
        fields = dict(id=1, priority=Priority.HIGH, patience=5, cost_mean=2.0, task_key="work")
        fields.update(overrides)
        return Task(**fields)

    def test_create_valid_task(self):
        """A task with all required fields should be created with sensible defaults."""
        task = self._make_task()
        assert task.id == 1
        assert task.priority == Priority.HIGH
        assert task.cost_variance == 0.0
        assert task.smoothing_factor == 0.5
        assert task.skip_count == 0
        assert task.alive is True
        assert task.parent is None
        assert task.children == set()
        assert task.task_args == []

    def test_priority_ordering(self):
        """CRITICAL is the most urgent tier and sorts first."""
        assert Priority.CRITICAL < Priority.HIGH < Priority.MEDIUM < Priority.LOW
        assert sorted([Priority.LOW, Priority.CRITICAL, Priority.MEDIUM]) == [
            Priority.CRITICAL, Priority.MEDIUM, Priority.LOW,
        ]

    def test_priority_coerced_from_int(self):
        """Plain ints are accepted for the tier."""
        task = self._make_task(priority=3)
        assert task.priority is Priority.LOW

    def test_cost_stddev(self):
        task = self._make_task(cost_variance=9.0)
        assert task.cost_stddev == 3.0

    def test_is_root_level(self):
        assert self._make_task().is_root_level
        assert not self._make_task(parent=4).is_root_level

    def test_root_id_rejected(self):
        """ID 0 is reserved for the root."""
        with pytest.raises(ValidationError):
            self._make_task(id=0)

    def test_zero_patience_rejected(self):
        with pytest.raises(ValidationError):
            self._make_task(patience=0)

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            self._make_task(cost_mean=-1.0)

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError):
            self._make_task(priority=7)


# ══════════════════════════════════════════════════════════════════════
# KERNEL STATE TESTS
# ══════════════════════════════════════════════════════════════════════

class TestKernelState:
    """Tests for the persisted kernel state."""

    def test_fresh_state(self):
        state = KernelState()
        assert len(state.queues) == PRIORITY_COUNT == 4
        assert all(q == [] for q in state.queues)
        assert state.tasks == {}
        assert state.max_task_id == 0
        assert state.free_ids == set()
        assert state.stats.smoothing_factor == 0.5
        assert state.stats.init.mean is None

    def test_short_queue_list_is_padded(self):
        """Snapshots with fewer queues than tiers are padded out."""
        state = KernelState(queues=[[1, 2]])
        assert len(state.queues) == 4
        assert state.queues[0] == [1, 2]

    def test_too_many_queues_rejected(self):
        with pytest.raises(ValidationError):
            KernelState(queues=[[] for _ in range(5)])

    def test_empty_bytes_yield_fresh_state(self):
        assert KernelState.from_bytes(b"").model_dump() == KernelState().model_dump()

    def test_bytes_round_trip(self):
        """Tasks, queues, IDs and stats should survive serialization."""
        state = KernelState()
        state.tasks[1] = Task(
            id=1, priority=Priority.LOW, patience=3, cost_mean=4.5, cost_variance=0.25,
            task_key="work", task_args=["spawn", 2], children={3, 4}, skip_count=2,
        )
        state.queues[Priority.LOW].append(1)
        state.max_task_id = 5
        state.free_ids = {2, 5}
        state.stats.startup = EmaStat(mean=1.5, variance=0.1)

        restored = KernelState.from_bytes(state.to_bytes())

        assert restored.model_dump() == state.model_dump()
        assert isinstance(next(iter(restored.tasks)), int)
        assert restored.tasks[1].priority is Priority.LOW
        assert restored.tasks[1].children == {3, 4}


# ══════════════════════════════════════════════════════════════════════
# CONFIG TESTS
# ══════════════════════════════════════════════════════════════════════

class TestKernelConfig:
    """Tests for configuration validation."""

    def test_defaults(self):
        config = KernelConfig()
        assert config.alpha_min == 0.02
        assert config.alpha_decay == 0.8
        assert config.bucket_threshold == 9000.0
        assert config.shutdown_cost_estimate == 0.5
        assert config.sigma_range == 3.0
        assert config.log_level == LogLevel.WARN
        assert config.log_sink is None

    @pytest.mark.parametrize("options", [
        {"alpha_min": 0.0},
        {"alpha_min": 0.5},
        {"alpha_decay": 0.0},
        {"alpha_decay": 1.0},
        {"bucket_threshold": 0.0},
        {"sigma_range": -1.0},
        {"shutdown_cost_estimate": -0.1},
    ])
    def test_out_of_range_rejected(self, options):
        with pytest.raises(ValidationError):
            KernelConfig(**options)

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            KernelConfig.coerce({"alpha_minimum": 0.1})

    def test_coerce(self):
        config = KernelConfig(alpha_min=0.1)
        assert KernelConfig.coerce(config) is config
        assert KernelConfig.coerce(None) == KernelConfig()
        assert KernelConfig.coerce({"bucket_threshold": 100}).bucket_threshold == 100.0

    def test_sink_must_be_callable(self):
        with pytest.raises(ValidationError):
            KernelConfig(log_sink="not callable")

    def test_frozen(self):
        config = KernelConfig()
        with pytest.raises(ValidationError):
            config.alpha_min = 0.1
