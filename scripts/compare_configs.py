"""Compare kernel configurations side-by-side on the same scenario.

Usage:
    python scripts/compare_configs.py --tasks 40 --ticks 300 --seed 42
"""

import argparse
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rich.console import Console
from rich.table import Table

from tickwise.config import KernelConfig
from tickwise.metrics.collector import MetricsReport
from tickwise.simulator.engine import TickSimulation
from tickwise.simulator.generator import ScenarioGenerator, WorkloadSpec
from tickwise.simulator.host import SimulatedHost

console = Console()


def run_with_config(
    config: KernelConfig, workloads: list[WorkloadSpec], args: argparse.Namespace,
) -> MetricsReport:
    """Run the scenario on a fresh host under ``config`` and return the report."""
    host = SimulatedHost(limit=args.limit, tick_limit=args.tick_limit, bucket=args.bucket)
    simulation = TickSimulation(workloads, host=host, config=config, seed=args.seed)
    return simulation.run(args.ticks).report


def print_comparison(reports: dict[str, MetricsReport]) -> None:
    """Print side-by-side comparison of configuration runs."""
    names = list(reports.keys())

    def fmt_delta(new, baseline, lower_better=True):
        if baseline == 0:
            return ""
        pct = ((new - baseline) / baseline) * 100
        sign = "+" if pct > 0 else ""
        color = "red" if (pct > 0 and lower_better) or (pct < 0 and not lower_better) else "green"
        return f"[{color}]{sign}{pct:.1f}%[/]"

    metric_defs = [
        ("Tasks Executed", lambda r: r.tasks_executed, False),
        ("Tasks Denied", lambda r: r.tasks_denied, True),
        ("Tasks Elevated", lambda r: r.tasks_elevated, True),
        ("Tiers Abandoned", lambda r: r.tiers_abandoned, True),
        ("Avg Used", lambda r: r.avg_used, True),
        ("P95 Used", lambda r: r.p95_used, True),
        ("Max Used", lambda r: r.max_used, True),
        ("Avg Bucket", lambda r: r.avg_bucket, False),
        ("Ticks Over Limit", lambda r: r.over_limit_rate, True),
        ("Tick Limit Overruns", lambda r: r.overrun_ticks, True),
    ]
    rate_metrics = {"Ticks Over Limit"}

    def fmt_val(val, is_rate=False):
        if isinstance(val, int):
            return str(val)
        if is_rate:
            return f"{val:.1%}"
        return f"{val:.2f}"

    table = Table(title=" vs ".join(names), border_style="cyan")
    table.add_column("Metric", style="bold")
    for name in names:
        table.add_column(name, justify="right")
    for name in names[1:]:
        table.add_column(f"Δ vs {names[0]}", justify="right")

    for metric_name, extract_fn, lower_better in metric_defs:
        is_rate = metric_name in rate_metrics
        vals = {n: extract_fn(reports[n]) for n in names}
        row = [metric_name]
        row.extend(fmt_val(vals[n], is_rate=is_rate) for n in names)
        row.extend(fmt_delta(vals[n], vals[names[0]], lower_better) for n in names[1:])
        table.add_row(*row)

    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Compare kernel configurations on one scenario")
    parser.add_argument("--tasks", type=int, default=40, help="Number of tasks (default: 40)")
    parser.add_argument("--ticks", type=int, default=300, help="Ticks to simulate (default: 300)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--limit", type=float, default=20.0)
    parser.add_argument("--tick-limit", type=float, default=500.0)
    parser.add_argument("--bucket", type=float, default=10000.0)

    args = parser.parse_args()

    workloads = ScenarioGenerator(seed=args.seed).generate(num_tasks=args.tasks)
    console.print(f"[bold]Scenario:[/bold] {len(workloads)} tasks, {args.ticks} ticks, seed={args.seed}\n")

    configs = {
        "Default": KernelConfig(),
        "Fast EMA": KernelConfig(alpha_min=0.2, alpha_decay=0.95),
        "Low Bucket Gate": KernelConfig(bucket_threshold=2000.0),
    }
    reports = {name: run_with_config(cfg, workloads, args) for name, cfg in configs.items()}

    print_comparison(reports)


if __name__ == "__main__":
    main()
