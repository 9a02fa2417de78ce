"""
Plain-text rendering of event traces and statistics.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .metrics import SchedulerStats
from .utils import EventLogger


TRACE_HEADER = "Time\tProcess\tPriority\tRemaining\tStatus"


def format_trace(logger: EventLogger, idle_lines: int = 2) -> str:
    """Render the event log as a tab separated table.

    Only the first ``idle_lines`` quanta of each idle stretch are shown.
    """
    lines: List[str] = [TRACE_HEADER]
    idle_run = 0
    for row in logger.process_events:
        if row["event"] == "Idle":
            idle_run += 1
            if idle_run <= idle_lines:
                lines.append(f"{row['time']:.1f}\t-\t-\t\t-\t\tIdle")
            continue
        idle_run = 0
        lines.append(f"{row['time']:.1f}\t{row['name']}\t{row['priority']}\t\t{row['remaining']:.1f}\t\t{row['event']}")
    return "\n".join(lines)


def format_stats(stats: SchedulerStats, title: str) -> str:
    lines = [
        f"=== {title} Statistics ===",
        f"Total Processes Completed: {stats.completed}",
        f"Avg Turnaround Time: {stats.avg_turnaround_time:.2f} quanta",
        f"Avg Waiting Time: {stats.avg_waiting_time:.2f} quanta",
        f"Avg Response Time: {stats.avg_response_time:.2f} quanta",
        f"Throughput: {stats.throughput:.2f} processes/quantum",
    ]
    if stats.cpu_utilization is not None:
        lines.append(f"CPU Utilization: {stats.cpu_utilization:.2f}%")
    if stats.total_preemptions is not None:
        lines.append(f"Total Preemptions: {stats.total_preemptions}")
    return "\n".join(lines)


def format_breakdown(breakdown: Dict[int, Optional[SchedulerStats]]) -> str:
    """Per-priority table; starved levels read "no data"."""
    lines = ["Priority\tCompleted\tTurnaround\tWaiting\tResponse\tThroughput"]
    for level, stats in sorted(breakdown.items()):
        if stats is None:
            lines.append(f"{level}\tno data")
            continue
        lines.append(
            f"{level}\t{stats.completed}\t\t{stats.avg_turnaround_time:.2f}\t\t"
            f"{stats.avg_waiting_time:.2f}\t{stats.avg_response_time:.2f}\t\t{stats.throughput:.3f}"
        )
    return "\n".join(lines)
