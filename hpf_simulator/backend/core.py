"""
Core data structures for the HPF scheduling simulator.
Includes the Process record, the four-level priority queue set and errors.
"""

import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional, Sequence


HIGHEST_PRIORITY = 1
LOWEST_PRIORITY = 4
PRIORITY_LEVELS = tuple(range(HIGHEST_PRIORITY, LOWEST_PRIORITY + 1))


class SchedulerError(Exception):
    """Base class for all scheduling errors."""


class PreconditionError(SchedulerError, ValueError):
    """The population handed to the engine breaks an input contract."""


class QueueCapacityError(SchedulerError):
    """A queue was asked to hold more than the population allows."""


class SimulationCeilingError(SchedulerError):
    """The quantum ceiling was reached with work still outstanding."""

    def __init__(self, ceiling: float, unfinished: Sequence["Process"]):
        names = ", ".join(p.name for p in unfinished)
        super().__init__(f"ceiling of {ceiling:g} quanta reached with {len(unfinished)} unfinished: {names}")
        self.ceiling = ceiling
        self.unfinished = list(unfinished)


class ProcessState(Enum):
    """Process states in the system."""
    NEW = "NEW"
    READY = "READY"
    RUNNING = "RUNNING"
    TERMINATED = "TERMINATED"


@dataclass(eq=False)
class Process:
    """One simulated unit of work.

    Records are compared by identity: two processes may share a display
    name (the workload generator draws names from A-Z).
    """
    name: str
    burst_time: float
    priority: int = HIGHEST_PRIORITY
    arrival_time: float = 0.0
    pid: Optional[int] = None
    remaining_time: Optional[float] = None
    start_time: Optional[float] = None
    finish_time: Optional[float] = None
    turnaround_time: Optional[float] = None
    waiting_time: Optional[float] = None
    times_preempted: int = 0
    state: ProcessState = ProcessState.NEW

    def __post_init__(self):
        self.burst_time = float(self.burst_time)
        self.arrival_time = float(self.arrival_time)
        self.remaining_time = self.burst_time if self.remaining_time is None else float(self.remaining_time)

    @property
    def response_time(self) -> Optional[float]:
        if self.start_time is None:
            return None
        return self.start_time - self.arrival_time

    @property
    def completed(self) -> bool:
        return self.finish_time is not None

    def fresh_copy(self) -> "Process":
        """Return an unrun copy with the same arrival, burst and priority."""
        return Process(self.name, self.burst_time, self.priority, self.arrival_time, pid=self.pid)

    def __repr__(self):
        return f"Process({self.name!r}, burst={self.burst_time:.2f}, priority={self.priority}, arrival={self.arrival_time:.2f})"


def validate_population(processes: Sequence[Process]) -> None:
    """Reject a population the engine cannot schedule correctly.

    The generator is responsible for ordering by arrival time; the engine
    never re-sorts, so an out-of-order population is an error here.
    """
    seen = set()
    previous_arrival = None
    for index, p in enumerate(processes):
        if id(p) in seen:
            raise PreconditionError(f"process {p.name!r} at index {index} is listed twice")
        seen.add(id(p))
        if not math.isfinite(p.arrival_time) or not math.isfinite(p.burst_time):
            raise PreconditionError(
                f"process {p.name!r} has non-finite arrival {p.arrival_time} or run time {p.burst_time}")
        if p.priority not in PRIORITY_LEVELS:
            raise PreconditionError(
                f"process {p.name!r} has priority {p.priority}, expected {HIGHEST_PRIORITY}..{LOWEST_PRIORITY}")
        if p.burst_time <= 0:
            raise PreconditionError(f"process {p.name!r} has non-positive run time {p.burst_time}")
        if p.arrival_time < 0:
            raise PreconditionError(f"process {p.name!r} has negative arrival time {p.arrival_time}")
        if previous_arrival is not None and p.arrival_time < previous_arrival:
            raise PreconditionError(
                f"population is not sorted by arrival time at index {index} ({p.arrival_time} < {previous_arrival})")
        if p.state is not ProcessState.NEW or p.start_time is not None or p.remaining_time != p.burst_time:
            raise PreconditionError(f"process {p.name!r} has already been scheduled")
        previous_arrival = p.arrival_time


class PriorityQueueSet:
    """Four FIFO ready queues, one per priority level (1 = highest).

    Entries are references to Process records. A record may sit in at most
    one queue at a time; enqueueing it twice is a caller defect.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = capacity
        self._levels: Dict[int, Deque[Process]] = {level: deque() for level in PRIORITY_LEVELS}
        self._members = set()

    def enqueue(self, process: Process) -> None:
        """Append a process to the tail of its own priority level."""
        if process.priority not in self._levels:
            raise PreconditionError(f"process {process.name!r} has unknown priority {process.priority}")
        if id(process) in self._members:
            raise QueueCapacityError(f"process {process.name!r} is already queued")
        if len(self._members) >= self.capacity:
            raise QueueCapacityError(f"ready queues are full ({self.capacity} processes)")
        self._levels[process.priority].append(process)
        self._members.add(id(process))

    def _first_eligible(self, level: int, eligible: Optional[Callable[[Process], bool]]) -> Optional[Process]:
        for process in self._levels[level]:
            if eligible is None or eligible(process):
                return process
        return None

    def peek_highest_ready(self, eligible: Optional[Callable[[Process], bool]] = None) -> Optional[Process]:
        """View the next process to dispatch without removing it."""
        for level in PRIORITY_LEVELS:
            process = self._first_eligible(level, eligible)
            if process is not None:
                return process
        return None

    def dequeue_highest_ready(self, eligible: Optional[Callable[[Process], bool]] = None) -> Optional[Process]:
        """Remove and return the front of the highest non-empty level.

        With an ``eligible`` predicate, ineligible entries are skipped and
        keep their positions.
        """
        process = self.peek_highest_ready(eligible)
        if process is None:
            return None
        self._levels[process.priority].remove(process)
        self._members.discard(id(process))
        return process

    def has_ready_above(self, priority: int, eligible: Optional[Callable[[Process], bool]] = None) -> bool:
        """True if a level strictly higher than ``priority`` holds a process."""
        for level in PRIORITY_LEVELS:
            if level >= priority:
                break
            if self._first_eligible(level, eligible) is not None:
                return True
        return False

    def __contains__(self, process: Process) -> bool:
        return id(process) in self._members

    def level(self, priority: int) -> List[Process]:
        return list(self._levels[priority])

    def is_empty(self) -> bool:
        return not self._members

    def __len__(self) -> int:
        return len(self._members)

    def snapshot(self) -> Dict[int, List[str]]:
        return {level: [p.name for p in queue] for level, queue in self._levels.items()}
