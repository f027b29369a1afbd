from __future__ import annotations

from typing import Dict, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ExecutionSegment, Number


def _cells(span: Number) -> int:
    # One character per time unit; fractional spans are rounded.
    return int(round(span))


def _mark(value: Number) -> str:
    return f"{value:>3g}" if isinstance(value, float) else f"{value:>3}"


def render_gantt(segments: Sequence[ExecutionSegment]) -> str:
    """
    Plain-text Gantt chart renderer (no colors, safe for logs and pipes).
    """
    if not segments:
        return "(no execution)"

    segments = sorted(segments, key=lambda s: (s.start_time, s.end_time))

    line = "|"
    labels = ""
    time_marks = "0"
    last_time: Number = 0

    for seg in segments:
        # Gaps too short to draw are folded into the next segment.
        idle_gap = _cells(seg.start_time - last_time)
        if idle_gap > 0:
            line += "." * idle_gap
            labels += " " * idle_gap
            last_time = seg.start_time
            time_marks += _mark(last_time)

        width = max(1, _cells(seg.duration))
        line += "=" * width
        labels += seg.process_id[:width].ljust(width)
        last_time = seg.end_time
        time_marks += _mark(last_time)

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(segments: Sequence[ExecutionSegment]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not segments:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    segments = sorted(segments, key=lambda s: (s.start_time, s.end_time))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"
    last_time: Number = 0

    for seg in segments:
        idle_gap = _cells(seg.start_time - last_time)
        if idle_gap > 0:
            timeline.append(" " * idle_gap)
            labels.append(" " * idle_gap)
            last_time = seg.start_time
            time_marks += _mark(last_time)

        width = max(1, _cells(seg.duration))
        color = pid_color(seg.process_id)

        timeline.append(" " * width, style=f"on {color}")
        labels.append(seg.process_id[:width].ljust(width), style="bold")

        last_time = seg.end_time
        time_marks += _mark(last_time)

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
