"""Entry point for running Tickwise kernel simulations.

Usage:
    python scripts/run_simulation.py --tasks 30 --ticks 200 --limit 20 --seed 42
"""

import argparse
import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rich.console import Console
from rich.logging import RichHandler

from tickwise.config import KernelConfig
from tickwise.log import LogLevel, stdlib_level
from tickwise.simulator.engine import TickSimulation
from tickwise.simulator.generator import ScenarioGenerator, WorkloadSpec
from tickwise.simulator.host import SimulatedHost

console = Console()


def print_scenario_summary(workloads: list[WorkloadSpec], host: SimulatedHost) -> None:
    """Print a summary of the generated scenario."""
    console.print("\n[bold cyan]Generated Scenario[/bold cyan]")
    console.print(f"  Tasks: {len(workloads)}")
    console.print(f"  Budget: limit={host.limit():.1f}, tick_limit={host.tick_limit():.1f}, bucket={host.bucket():.0f}")

    tier_counts: dict[str, int] = {}
    for w in workloads:
        tier_counts[w.priority.name] = tier_counts.get(w.priority.name, 0) + 1
    console.print(f"  Tiers: {tier_counts}")

    demand = sum(w.true_cost for w in workloads)
    console.print(f"  Demand per tick if everything ran: {demand:.1f}")
    spawners = sum(1 for w in workloads if w.spawn_count)
    console.print(f"  Spawning tasks: {spawners}")
    console.print()


def main():
    parser = argparse.ArgumentParser(
        description="Tickwise: budget-aware cooperative scheduler simulator"
    )
    parser.add_argument("--tasks", type=int, default=30, help="Number of tasks (default: 30)")
    parser.add_argument("--ticks", type=int, default=200, help="Ticks to simulate (default: 200)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--limit", type=float, default=20.0, help="Sustained per-tick limit (default: 20)")
    parser.add_argument("--tick-limit", type=float, default=500.0, help="Hard per-tick ceiling (default: 500)")
    parser.add_argument("--bucket", type=float, default=10000.0, help="Initial bucket level (default: 10000)")
    parser.add_argument("--bucket-threshold", type=float, default=9000.0, help="MEDIUM bucket threshold (default: 9000)")
    parser.add_argument("--estimate-error", type=float, default=0.5, help="Initial estimate error fraction (default: 0.5)")
    parser.add_argument("--log-level", type=str, default="WARN",
                        choices=[level.name for level in LogLevel], help="Kernel log level (default: WARN)")

    args = parser.parse_args()

    level = LogLevel[args.log_level]
    logging.basicConfig(level=stdlib_level(level), format="%(message)s", handlers=[RichHandler(console=console)])
    console.print("[bold]Tickwise[/bold]: starting simulation...\n")

    generator = ScenarioGenerator(seed=args.seed)
    workloads = generator.generate(num_tasks=args.tasks, estimate_error=args.estimate_error)
    host = SimulatedHost(limit=args.limit, tick_limit=args.tick_limit, bucket=args.bucket)

    print_scenario_summary(workloads, host)

    config = KernelConfig(bucket_threshold=args.bucket_threshold, log_level=level)
    simulation = TickSimulation(workloads, host=host, config=config, seed=args.seed)
    metrics = simulation.run(args.ticks)
    metrics.print_report(console)

    console.print(
        f"\n[dim]Simulated {metrics.report.total_ticks} ticks, "
        f"{len(simulation.kernel.list_tasks())} live tasks at the end[/dim]"
    )


if __name__ == "__main__":
    main()
