"""Metrics Collector: measures how well the kernel kept within budget."""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tickwise.models.task import Priority
from tickwise.scheduler.events import EventType, TickEvent


@dataclass
class TickMetrics:
    """What happened during one tick."""
    tick: int
    used: float
    limit: float
    tick_limit: float
    bucket: float
    queued: int
    executed: int = 0
    failed: int = 0
    denied: int = 0
    elevated: int = 0
    abandoned_tiers: list[Priority] = field(default_factory=list)
    executed_by_tier: dict[Priority, int] = field(default_factory=dict)

    @property
    def over_limit(self) -> bool:
        return self.used > self.limit

    @property
    def overran(self) -> bool:
        """True if the tick blew through the hard ceiling."""
        return self.used > self.tick_limit


@dataclass
class MetricsReport:
    """Container for all computed metrics."""
    scheduler_name: str = ""
    total_ticks: int = 0
    tasks_executed: int = 0
    tasks_failed: int = 0
    tasks_denied: int = 0
    tasks_elevated: int = 0
    tiers_abandoned: int = 0
    avg_used: float = 0.0
    p95_used: float = 0.0
    max_used: float = 0.0
    avg_bucket: float = 0.0
    over_limit_rate: float = 0.0
    overrun_ticks: int = 0
    failure_rate: float = 0.0
    avg_queued: float = 0.0
    executed_by_tier: dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """Accumulates per-tick metrics and summarizes them."""

    def __init__(self):
        self.ticks: list[TickMetrics] = []
        self.report: Optional[MetricsReport] = None

    def record_tick(
        self,
        tick: int,
        events: list[TickEvent],
        used: float,
        limit: float,
        tick_limit: float,
        bucket: float,
        queued: int,
    ) -> TickMetrics:
        metrics = TickMetrics(
            tick=tick, used=used, limit=limit, tick_limit=tick_limit,
            bucket=bucket, queued=queued,
        )
        for event in events:
            match event.event_type:
                case EventType.TASK_EXECUTED | EventType.TASK_FAILED:
                    metrics.executed += 1
                    metrics.executed_by_tier[event.tier] = metrics.executed_by_tier.get(event.tier, 0) + 1
                    if event.event_type == EventType.TASK_FAILED:
                        metrics.failed += 1
                case EventType.TASK_DENIED:
                    metrics.denied += 1
                case EventType.TASK_ELEVATED:
                    metrics.elevated += 1
                case EventType.TIER_ABANDONED:
                    metrics.abandoned_tiers.append(event.tier)
        self.ticks.append(metrics)
        return metrics

    def calculate(self, scheduler_name: str) -> MetricsReport:
        """Summarize all recorded ticks."""
        report = MetricsReport(scheduler_name=scheduler_name, total_ticks=len(self.ticks))
        if not self.ticks:
            self.report = report
            return report

        used = np.array([t.used for t in self.ticks])
        report.avg_used = float(used.mean())
        report.p95_used = float(np.percentile(used, 95))
        report.max_used = float(used.max())
        report.avg_bucket = float(np.mean([t.bucket for t in self.ticks]))
        report.avg_queued = float(np.mean([t.queued for t in self.ticks]))
        report.over_limit_rate = sum(1 for t in self.ticks if t.over_limit) / len(self.ticks)
        report.overrun_ticks = sum(1 for t in self.ticks if t.overran)

        report.tasks_executed = sum(t.executed for t in self.ticks)
        report.tasks_failed = sum(t.failed for t in self.ticks)
        report.tasks_denied = sum(t.denied for t in self.ticks)
        report.tasks_elevated = sum(t.elevated for t in self.ticks)
        report.tiers_abandoned = sum(len(t.abandoned_tiers) for t in self.ticks)
        if report.tasks_executed > 0:
            report.failure_rate = report.tasks_failed / report.tasks_executed

        for tier in Priority:
            report.executed_by_tier[tier.name] = sum(t.executed_by_tier.get(tier, 0) for t in self.ticks)

        self.report = report
        return report

    def print_report(self, console: Optional[Console] = None) -> None:
        """Print a formatted metrics report."""
        console = console or Console()
        if self.report is None:
            console.print("No metrics calculated yet. Run calculate() first.")
            return

        r = self.report
        console.print(Panel(
            f"[bold cyan]Tickwise: Simulation Report[/bold cyan]\n"
            f"Scheduler: [bold yellow]{r.scheduler_name}[/bold yellow]",
            border_style="cyan",
        ))

        task_table = Table(title="Task Summary", border_style="blue")
        task_table.add_column("Metric", style="bold")
        task_table.add_column("Value", justify="right")
        task_table.add_row("Ticks", str(r.total_ticks))
        task_table.add_row("Executed", f"[green]{r.tasks_executed}[/green]")
        task_table.add_row("Failed", f"[red]{r.tasks_failed}[/red]")
        task_table.add_row("Denied", f"[yellow]{r.tasks_denied}[/yellow]")
        task_table.add_row("Elevated", str(r.tasks_elevated))
        task_table.add_row("Tiers Abandoned", str(r.tiers_abandoned))
        console.print(task_table)

        budget_table = Table(title="Budget Usage", border_style="green")
        budget_table.add_column("Metric", style="bold")
        budget_table.add_column("Value", justify="right")
        budget_table.add_row("Avg Used", f"{r.avg_used:.2f}")
        budget_table.add_row("P95 Used", f"{r.p95_used:.2f}")
        budget_table.add_row("Max Used", f"{r.max_used:.2f}")
        budget_table.add_row("Avg Bucket", f"{r.avg_bucket:.0f}")
        budget_table.add_row(
            "Ticks Over Limit",
            f"[{'red' if r.over_limit_rate > 0.5 else 'green'}]{r.over_limit_rate:.1%}[/]",
        )
        budget_table.add_row(
            "Tick Limit Overruns",
            f"[{'red' if r.overrun_ticks else 'green'}]{r.overrun_ticks}[/]",
        )
        budget_table.add_row("Failure Rate", f"{r.failure_rate:.1%}")
        budget_table.add_row("Avg Queued", f"{r.avg_queued:.1f}")
        console.print(budget_table)

        tier_table = Table(title="Executions by Tier", border_style="magenta")
        tier_table.add_column("Tier", style="bold")
        tier_table.add_column("Runs", justify="right")
        for tier_name, count in r.executed_by_tier.items():
            tier_table.add_row(tier_name, str(count))
        console.print(tier_table)
