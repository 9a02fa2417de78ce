from __future__ import annotations

from typing import List, Dict, Optional, Any, Iterable
import json
import csv
import random

import pandas as pd

from .core import Process, PRIORITY_LEVELS
from .schedulers import EventKind, SchedulerEvent


class EventLogger:
    """Records engine events as plain rows for display and export.

    Register an instance with ``HPFScheduler.add_listener``; it is callable.
    """

    def __init__(self) -> None:
        self.process_events: List[Dict[str, Any]] = []
        self.timeline: List[Dict[str, Any]] = []
        self._open_slice: Optional[Dict[str, Any]] = None

    def __call__(self, event: SchedulerEvent) -> None:
        p = event.process
        if event.kind is EventKind.IDLE:
            self.log_process_event(event.time, None, None, None, event.kind.value)
            self.log_idle(event.time)
            return
        self.log_process_event(event.time, p.name, p.priority, p.remaining_time, event.kind.value, pid=p.pid)
        if event.kind is EventKind.STARTED:
            self._open_slice = {"start": event.time, "pid": p.pid, "name": p.name, "priority": p.priority}
        elif event.kind in (EventKind.PREEMPTED, EventKind.COMPLETED):
            self._close_slice(event.time, event.kind.value.lower())

    def log_process_event(self, time_s: float, name: Optional[str], priority: Optional[int],
                          remaining: Optional[float], event: str, pid: Optional[int] = None) -> None:
        self.process_events.append({
            "time": time_s,
            "pid": pid,
            "name": name,
            "priority": priority,
            "remaining": remaining,
            "event": event,
        })

    def log_timeline_slice(self, start: float, end: float, name: Optional[str], priority: Optional[int],
                           reason: Optional[str] = None, pid: Optional[int] = None) -> None:
        self.timeline.append({
            "start": start,
            "end": end,
            "pid": pid,
            "name": name,
            "priority": priority,
            "reason": reason,
        })

    def log_idle(self, time_s: float) -> None:
        # extend the previous idle slice when idle quanta are back to back
        last = self.timeline[-1] if self.timeline else None
        if last and last["name"] is None and last["end"] == time_s:
            last["end"] = time_s + 1.0
            return
        self.log_timeline_slice(time_s, time_s + 1.0, None, None, reason="idle")

    def _close_slice(self, end: float, reason: str) -> None:
        s = self._open_slice
        if s is None:
            return
        self.log_timeline_slice(s["start"], end, s["name"], s["priority"], reason=reason, pid=s["pid"])
        self._open_slice = None

    def events_of(self, event: str) -> List[Dict[str, Any]]:
        return [row for row in self.process_events if row["event"] == event]

    def export_json(self, path: str) -> None:
        data = {
            "process_events": self.process_events,
            "timeline": self.timeline,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def export_csv(self, base_path_no_ext: str) -> None:
        with open(f"{base_path_no_ext}_events.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["time", "pid", "name", "priority", "remaining", "event"])
            writer.writeheader()
            for row in self.process_events:
                writer.writerow(row)
        with open(f"{base_path_no_ext}_timeline.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["start", "end", "pid", "name", "priority", "reason"])
            writer.writeheader()
            for row in self.timeline:
                writer.writerow(row)


def generate_workload(n: int = 167, seed: Optional[int] = None, horizon: float = 100.0) -> List[Process]:
    """Build a random population sorted by arrival time.

    Arrivals are uniform over [0, horizon - 1], run times over [0.1, 10.0]
    quanta and priorities over 1..4. Names are random letters, so they
    repeat; ``pid`` is unique.
    """
    rng = random.Random(seed)
    procs: List[Process] = []
    for i in range(n):
        name = chr(ord("A") + rng.randrange(26))
        arrival = rng.random() * (horizon - 1.0)
        burst = 0.1 + rng.random() * 9.9
        priority = rng.randint(PRIORITY_LEVELS[0], PRIORITY_LEVELS[-1])
        procs.append(Process(name=name, burst_time=burst, priority=priority, arrival_time=arrival, pid=i))
    # sort is stable, so equal arrivals keep generation order
    procs.sort(key=lambda p: p.arrival_time)
    return procs


RESULT_COLUMNS = [
    "pid", "name", "priority", "arrival_time", "burst_time", "start_time", "finish_time",
    "turnaround_time", "waiting_time", "response_time", "times_preempted", "state",
]
TIME_COLUMNS = ["start_time", "finish_time", "turnaround_time", "waiting_time", "response_time"]


def results_frame(processes: Iterable[Process]) -> pd.DataFrame:
    """Per-process results as a DataFrame; unset times are NaN."""
    rows = [{
        "pid": p.pid,
        "name": p.name,
        "priority": p.priority,
        "arrival_time": p.arrival_time,
        "burst_time": p.burst_time,
        "start_time": p.start_time,
        "finish_time": p.finish_time,
        "turnaround_time": p.turnaround_time,
        "waiting_time": p.waiting_time,
        "response_time": p.response_time,
        "times_preempted": p.times_preempted,
        "state": p.state.value,
    } for p in processes]
    df = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    return df.astype({col: float for col in TIME_COLUMNS})


def export_results_csv(processes: Iterable[Process], path: str) -> None:
    results_frame(processes).to_csv(path, index=False)
