"""
Highest-Priority-First scheduler engine.

One quantum-stepped engine serves both policies; the only difference between
non-preemptive and preemptive HPF is the injected PreemptionPolicy.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from .core import (
    PRIORITY_LEVELS, PriorityQueueSet, Process, ProcessState, SchedulerError, validate_population,
)


class Scheduler:
    """Scheduler policy names."""
    HPF = "HPF"                        # non-preemptive
    HPF_PREEMPTIVE = "HPF_PREEMPTIVE"  # preemptive

    ALL = (HPF, HPF_PREEMPTIVE)


class EventKind(Enum):
    ARRIVED = "Arrived"
    STARTED = "Started"
    PREEMPTED = "Preempted"
    COMPLETED = "Completed"
    IDLE = "Idle"


@dataclass(frozen=True)
class SchedulerEvent:
    """Something that happened at a quantum boundary.

    ``process`` is None only for IDLE events.
    """
    kind: EventKind
    time: float
    process: Optional[Process] = None


EventListener = Callable[[SchedulerEvent], None]
Eligibility = Callable[[Process], bool]


class PreemptionPolicy(ABC):
    """Decides whether the running process must give up the CPU."""
    name: str = ""

    @abstractmethod
    def should_preempt(self, running: Process, queues: PriorityQueueSet,
                       eligible: Optional[Eligibility] = None) -> bool:
        pass


class NonPreemptivePolicy(PreemptionPolicy):
    """Once dispatched, a process runs to completion."""
    name = Scheduler.HPF

    def should_preempt(self, running, queues, eligible=None):
        return False


class PriorityPreemptivePolicy(PreemptionPolicy):
    """Preempt when any strictly higher priority level has a ready process."""
    name = Scheduler.HPF_PREEMPTIVE

    def should_preempt(self, running, queues, eligible=None):
        return queues.has_ready_above(running.priority, eligible)


def make_policy(policy: str) -> PreemptionPolicy:
    if policy == Scheduler.HPF:
        return NonPreemptivePolicy()
    if policy == Scheduler.HPF_PREEMPTIVE:
        return PriorityPreemptivePolicy()
    raise ValueError(f"unknown policy {policy!r}, expected one of {', '.join(Scheduler.ALL)}")


@dataclass
class SimulationContext:
    """All mutable state of one simulation run."""
    processes: List[Process]
    queues: PriorityQueueSet
    clock: float = 0.0
    running: Optional[Process] = None
    next_arrival: int = 0
    idle_time: float = 0.0
    total_preemptions: int = 0
    completed: List[Process] = field(default_factory=list)


class HPFScheduler:
    """Quantum-by-quantum Highest-Priority-First engine.

    ``horizon`` is the nominal simulation window; the hard ceiling is
    ``horizon * ceiling_factor`` so that late arrivals can still finish.
    """

    def __init__(
        self,
        processes: List[Process],
        policy: Optional[PreemptionPolicy] = None,
        horizon: float = 100.0,
        ceiling_factor: float = 2.0,
        cap_admission_to_horizon: bool = False,
        no_first_start_after_horizon: bool = False,
    ):
        validate_population(processes)
        if horizon <= 0:
            raise ValueError("horizon must be positive")
        if ceiling_factor < 1:
            raise ValueError("ceiling_factor must be at least 1")
        self.policy = policy or NonPreemptivePolicy()
        self.horizon = float(horizon)
        self.ceiling = self.horizon * ceiling_factor
        self.cap_admission_to_horizon = cap_admission_to_horizon
        self.no_first_start_after_horizon = no_first_start_after_horizon
        self.context = SimulationContext(processes=processes, queues=PriorityQueueSet(len(processes)))
        self._listeners: List[EventListener] = []

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def _emit(self, kind: EventKind, time: float, process: Optional[Process] = None) -> None:
        event = SchedulerEvent(kind, time, process)
        for listener in self._listeners:
            listener(event)

    def is_dispatchable(self, process: Process) -> bool:
        """Whether a queued process may be dispatched at the current clock."""
        if not self.no_first_start_after_horizon:
            return True
        return process.start_time is not None or self.context.clock < self.horizon

    def _eligibility(self) -> Optional[Eligibility]:
        return self.is_dispatchable if self.no_first_start_after_horizon else None

    def _admissible(self, process: Process) -> bool:
        # ticks are whole quanta below the ceiling; a later arrival can never be admitted
        if math.ceil(process.arrival_time) >= self.ceiling:
            return False
        return not self.cap_admission_to_horizon or process.arrival_time < self.horizon

    def has_pending_arrivals(self) -> bool:
        ctx = self.context
        if ctx.next_arrival >= len(ctx.processes):
            return False
        # population is sorted, so the next record decides for all the rest
        return self._admissible(ctx.processes[ctx.next_arrival])

    def has_work(self) -> bool:
        ctx = self.context
        if ctx.running is not None or self.has_pending_arrivals():
            return True
        return ctx.queues.peek_highest_ready(self._eligibility()) is not None

    def admit_arrivals(self) -> None:
        ctx = self.context
        while ctx.next_arrival < len(ctx.processes):
            process = ctx.processes[ctx.next_arrival]
            if process.arrival_time > ctx.clock or not self._admissible(process):
                break
            process.state = ProcessState.READY
            ctx.queues.enqueue(process)
            ctx.next_arrival += 1
            self._emit(EventKind.ARRIVED, ctx.clock, process)

    def check_preemption(self) -> None:
        ctx = self.context
        current = ctx.running
        if current is None:
            return
        if not self.policy.should_preempt(current, ctx.queues, self._eligibility()):
            return
        self._emit(EventKind.PREEMPTED, ctx.clock, current)
        current.times_preempted += 1
        ctx.total_preemptions += 1
        current.state = ProcessState.READY
        ctx.running = None
        ctx.queues.enqueue(current)

    def dispatch(self) -> Optional[Process]:
        ctx = self.context
        if ctx.running is not None:
            return ctx.running
        process = ctx.queues.dequeue_highest_ready(self._eligibility())
        if process is None:
            return None
        if process.start_time is None:
            process.start_time = ctx.clock
        process.state = ProcessState.RUNNING
        ctx.running = process
        self._emit(EventKind.STARTED, ctx.clock, process)
        return process

    def execute(self) -> None:
        """Run the current process for one quantum."""
        ctx = self.context
        current = ctx.running
        if current is None:
            ctx.idle_time += 1.0
            self._emit(EventKind.IDLE, ctx.clock)
            return
        current.remaining_time -= 1.0
        if current.remaining_time <= 0:
            finish = ctx.clock + 1.0
            current.finish_time = finish
            current.turnaround_time = finish - current.arrival_time
            current.waiting_time = current.turnaround_time - current.burst_time
            current.state = ProcessState.TERMINATED
            ctx.completed.append(current)
            ctx.running = None
            self._emit(EventKind.COMPLETED, finish, current)

    def step(self) -> None:
        """Process one quantum: admit, preempt, dispatch, execute."""
        self.admit_arrivals()
        self.check_preemption()
        self.dispatch()
        self.execute()
        self.context.clock += 1.0

    def run(self) -> SimulationContext:
        while self.context.clock < self.ceiling and self.has_work():
            self.step()
        return self.context

    def unfinished(self) -> List[Process]:
        """Admitted processes that have not completed."""
        ctx = self.context
        return [p for p in ctx.processes[:ctx.next_arrival] if not p.completed]

    def locate(self, process: Process) -> str:
        ctx = self.context
        if process is ctx.running:
            return "running"
        if process in ctx.queues:
            return "queued"
        if process.completed:
            return "completed"
        return "pending"

    def verify_placement(self) -> None:
        """Raise if any process is held in more than one place."""
        ctx = self.context
        for process in ctx.processes:
            places = [
                process is ctx.running,
                process in ctx.queues,
                process.completed,
            ]
            if sum(places) > 1:
                raise SchedulerError(f"process {process.name!r} is in {sum(places)} places at t={ctx.clock:g}")
        queued = sum(len(ctx.queues.level(level)) for level in PRIORITY_LEVELS)
        if queued != len(ctx.queues):
            raise SchedulerError("queue membership is out of sync with queue contents")

    def snapshot(self) -> Dict[str, object]:
        """Return current state of all queues for display."""
        ctx = self.context
        return {
            "clock": ctx.clock,
            "running": ctx.running.name if ctx.running else None,
            "ready": ctx.queues.snapshot(),
            "completed": [p.name for p in ctx.completed],
            "preemptive": isinstance(self.policy, PriorityPreemptivePolicy),
        }


class NonPreemptiveHPFScheduler(HPFScheduler):
    """HPF where a dispatched process always runs to completion."""

    def __init__(self, processes: List[Process], **kwargs):
        super().__init__(processes, NonPreemptivePolicy(), **kwargs)


class PreemptiveHPFScheduler(HPFScheduler):
    """HPF where a higher priority arrival displaces the running process."""

    def __init__(self, processes: List[Process], **kwargs):
        super().__init__(processes, PriorityPreemptivePolicy(), **kwargs)
