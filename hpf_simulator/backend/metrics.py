from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .core import PRIORITY_LEVELS, Process


@dataclass(frozen=True)
class SchedulerStats:
    """Aggregate results over the completed processes of one run."""
    completed: int
    avg_turnaround_time: float
    avg_waiting_time: float
    avg_response_time: float
    throughput: float
    cpu_utilization: Optional[float] = None
    total_preemptions: Optional[int] = None


def compute_avg(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_throughput(processes: Iterable[Process]) -> float:
    """Completed processes per quantum, up to the last completion."""
    finished = [p.finish_time for p in processes if p.finish_time is not None]
    if not finished:
        return 0.0
    last = max(finished)
    return len(finished) / last if last > 0 else 0.0


def compute_cpu_utilization(elapsed: float, idle_time: float) -> float:
    if elapsed <= 0:
        return 0.0
    return (elapsed - idle_time) / elapsed * 100


def compute_statistics(
    processes: Iterable[Process],
    elapsed: Optional[float] = None,
    idle_time: Optional[float] = None,
    total_preemptions: Optional[int] = None,
) -> SchedulerStats:
    """Derive aggregate statistics from a finished population.

    Only processes with a finish time contribute. ``cpu_utilization`` is
    filled in when both ``elapsed`` and ``idle_time`` are given. Nothing on
    the records is modified, so repeated calls give identical results.
    """
    done = [p for p in processes if p.finish_time is not None]
    return SchedulerStats(
        completed=len(done),
        avg_turnaround_time=compute_avg([p.turnaround_time for p in done]),
        avg_waiting_time=compute_avg([p.waiting_time for p in done]),
        avg_response_time=compute_avg([p.start_time - p.arrival_time for p in done]),
        throughput=compute_throughput(done),
        cpu_utilization=compute_cpu_utilization(elapsed, idle_time) if elapsed is not None and idle_time is not None else None,
        total_preemptions=total_preemptions,
    )


def compute_priority_breakdown(processes: Iterable[Process]) -> Dict[int, Optional[SchedulerStats]]:
    """Per-priority statistics; a level with no completions maps to None."""
    processes = list(processes)
    breakdown: Dict[int, Optional[SchedulerStats]] = {}
    for level in PRIORITY_LEVELS:
        subset = [p for p in processes if p.priority == level]
        if not any(p.finish_time is not None for p in subset):
            breakdown[level] = None
            continue
        breakdown[level] = compute_statistics(
            subset,
            total_preemptions=sum(p.times_preempted for p in subset),
        )
    return breakdown
