from __future__ import annotations

import argparse
import json
import logging
import math
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import policy_names, simulate
from .compare import compare
from .errors import SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .models import SimulationResult
from .ready_queue import ready_queue_at, ready_queue_timeline, running_at
from .workload_io import load_workload

DEFAULT_QUANTUM = 2
DEFAULT_STEP_DELAY = 0.3

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    names = ", ".join(policy_names())
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, Priority, Priority preemptive, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduling decisions (DEBUG level).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({names}).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=float,
        default=None,
        help="Time quantum for round-robin (ignored by every other algorithm).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Replay the schedule one time unit at a time, showing the ready queue.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=DEFAULT_STEP_DELAY,
        help=f"Seconds to wait between steps when --step is used (default: {DEFAULT_STEP_DELAY}).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print a plain-text Gantt chart instead of the colored one.",
    )
    run_parser.add_argument("--json", action="store_true", help="Print the result as JSON.")

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(policy_names()),
        help=f"Algorithms to compare (default: all of {names}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=float,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for round-robin when included (default: {DEFAULT_QUANTUM}).",
    )
    compare_parser.add_argument("--json", action="store_true", help="Print the results as JSON.")

    queue_parser = subparsers.add_parser(
        "queue",
        help="Show the ready queue over time for one algorithm.",
    )
    queue_parser.add_argument("--algorithm", "-a", required=True, help=f"Algorithm to use ({names}).")
    queue_parser.add_argument("--workload", "-w", required=True, help="Path to JSON or CSV workload file.")
    queue_parser.add_argument(
        "--quantum",
        "-q",
        type=float,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {DEFAULT_QUANTUM}).",
    )
    queue_parser.add_argument(
        "--time",
        "-t",
        type=float,
        default=None,
        help="Only show the queue at this instant.",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    """
    Route the package's log records through a single RichHandler.
    """
    package_logger = logging.getLogger("schedsim")
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _integral(value: Optional[float]):
    if value is not None and float(value).is_integer():
        return int(value)
    return value


def _fmt(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _print_result(result: SimulationResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.policy.label}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {_fmt(result.quantum)}")

    console.print()

    if plain:
        console.print(render_gantt(result.gantt), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.gantt)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
        "Priority",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.results:
        proc_table.add_row(
            p.process_id,
            _fmt(p.arrival_time),
            _fmt(p.burst_time),
            _fmt(p.start_time),
            _fmt(p.completion_time),
            _fmt(p.waiting_time),
            _fmt(p.turnaround_time),
            _fmt(p.response_time),
            _fmt(p.priority),
        )

    console.print(proc_table)
    console.print()

    sys = result.system
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.avg_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround_time:.2f}")
    sys_table.add_row("Avg response", f"{result.avg_response_time:.2f}")
    sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
    sys_table.add_row("Starvation count", str(sys.starvation_count))

    console.print(sys_table)


def _animate_result(result: SimulationResult, console: Console, delay: float) -> None:
    """
    Time-stepped textual replay of the computed schedule with the ready queue.
    """
    if not result.gantt:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = math.ceil(max(s.end_time for s in result.gantt))
    console.print(f"[bold]Simulating {result.policy.label}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan + 1):
        running = running_at(result.gantt, t)
        queue = ready_queue_at(result.gantt, t, result.policy)
        waiting = [pid for pid in queue if pid != running]
        msg = f"t={t:2d}: " + (f"[green]{running}[/green]" if running else "[dim][idle][/dim]")
        if waiting:
            msg += "  ready: " + " ".join(waiting)
        console.print(msg)
        time.sleep(delay)


def _run(args: argparse.Namespace, console: Console) -> int:
    processes = load_workload(Path(args.workload))
    result = simulate(args.algorithm, processes, quantum=_integral(args.quantum))

    if args.json:
        console.print_json(json.dumps(result.to_dict()))
        return 0

    if args.step:
        try:
            _animate_result(result, console, delay=args.step_delay)
        except KeyboardInterrupt:
            console.print("[yellow]Animation skipped.[/yellow]")
    _print_result(result, console, plain=args.plain)
    return 0


def _compare(args: argparse.Namespace, console: Console) -> int:
    workload_path = Path(args.workload)
    processes = load_workload(workload_path)
    bundle = compare(processes, quantum=_integral(args.quantum), policies=args.algorithms)

    if args.json:
        data = {policy.value: (res.to_dict() if res else None) for policy, res in bundle.items()}
        console.print_json(json.dumps(data))
        return 0

    summary_table = Table(title=f"Algorithm comparison: {workload_path}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for policy, result in bundle.items():
        if result is None:
            summary_table.add_row(policy.label, "", "[red]skipped[/red]", "", "")
            continue
        summary_table.add_row(
            policy.label,
            _fmt(result.quantum),
            f"{result.avg_waiting_time:.2f}",
            f"{result.avg_turnaround_time:.2f}",
            f"{result.avg_response_time:.2f}",
        )

    console.print(summary_table)
    return 0


def _queue(args: argparse.Namespace, console: Console) -> int:
    processes = load_workload(Path(args.workload))
    result = simulate(args.algorithm, processes, quantum=_integral(args.quantum))

    if args.time is not None:
        t = _integral(args.time)
        rows = [(t, ready_queue_at(result.gantt, t, result.policy))]
    else:
        rows = ready_queue_timeline(result.gantt, result.policy)

    table = Table(title=f"Ready queue: {result.policy.label}", box=box.SIMPLE_HEAVY)
    table.add_column("Time", justify="right")
    table.add_column("Running", justify="center")
    table.add_column("Queue")

    for t, queue in rows:
        running = running_at(result.gantt, t)
        table.add_row(_fmt(t), running or "-", " ".join(queue))

    console.print(table)
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    handlers = {"run": _run, "compare": _compare, "queue": _queue}
    handler = handlers.get(args.command)
    if handler is None:
        parser.error(f"Unknown command: {args.command}")
        return 1

    try:
        return handler(args, console)
    except (SchedulerError, OSError) as exc:
        logger.debug("command failed", exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
