"""Kernel configuration: tuning knobs accepted by ``Kernel.run_tick``."""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from tickwise.log import LogLevel, LogSink


DEFAULT_ALPHA_MIN = 0.02        # ~last 100 ticks carry most of the EMA weight
DEFAULT_ALPHA_DECAY = 0.8
DEFAULT_BUCKET_THRESHOLD = 9000.0
DEFAULT_SHUTDOWN_COST_ESTIMATE = 0.5
DEFAULT_SIGMA_RANGE = 3.0


class KernelConfig(BaseModel):
    """Validated per-tick configuration. Bad ranges raise ``ValidationError``."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    alpha_min: float = Field(
        default=DEFAULT_ALPHA_MIN, gt=0.0, lt=0.5,
        description="Floor for the EMA smoothing factor",
    )
    alpha_decay: float = Field(
        default=DEFAULT_ALPHA_DECAY, gt=0.0, lt=1.0,
        description="Multiplier applied to alpha after each update until it reaches alpha_min",
    )
    bucket_threshold: float = Field(
        default=DEFAULT_BUCKET_THRESHOLD, gt=0.0,
        description="Bucket level above which MEDIUM tasks may exceed the sustained limit",
    )
    shutdown_cost_estimate: float = Field(
        default=DEFAULT_SHUTDOWN_COST_ESTIMATE, ge=0.0,
        description="Shutdown cost assumed until one has been measured",
    )
    sigma_range: float = Field(
        default=DEFAULT_SIGMA_RANGE, gt=0.0,
        description="Standard score beyond which a task's cost is reported as abnormal",
    )
    log_level: LogLevel = Field(default=LogLevel.WARN, description="Minimum level forwarded to the sink")
    log_sink: Optional[LogSink] = Field(default=None, description="Callable receiving (level, message)")

    @classmethod
    def coerce(cls, config: Union["KernelConfig", Mapping[str, Any], None]) -> "KernelConfig":
        """Accept a config object, a mapping of options, or None for defaults."""
        if config is None:
            return cls()
        if isinstance(config, cls):
            return config
        return cls.model_validate(dict(config))
