from __future__ import annotations

from enum import Enum
from typing import List, Optional, Dict, Iterable
from dataclasses import dataclass

from .core import Process, SimulationCeilingError
from .metrics import SchedulerStats, compute_statistics, compute_priority_breakdown
from .schedulers import HPFScheduler, EventListener, Scheduler, make_policy
from .utils import EventLogger


class SimulationStatus(Enum):
    COMPLETED = "COMPLETED"
    CEILING_REACHED = "CEILING_REACHED"


@dataclass
class SimulationResult:
    processes: List[Process]
    policy: str
    status: SimulationStatus
    total_time: float
    idle_time: float
    total_preemptions: int
    ceiling: float
    stats: SchedulerStats
    priority_stats: Dict[int, Optional[SchedulerStats]]
    unfinished: List[Process]
    never_arrived: List[Process]
    logger: EventLogger

    @property
    def never_started(self) -> List[Process]:
        return [p for p in self.unfinished if p.start_time is None]

    @property
    def avg_waiting_time(self) -> float:
        return self.stats.avg_waiting_time

    @property
    def avg_turnaround_time(self) -> float:
        return self.stats.avg_turnaround_time

    @property
    def throughput(self) -> float:
        return self.stats.throughput

    def raise_for_status(self) -> None:
        """Raise SimulationCeilingError if the run was cut off by the ceiling."""
        if self.status is SimulationStatus.CEILING_REACHED:
            raise SimulationCeilingError(self.ceiling, self.unfinished)


def simulate(
    processes: List[Process],
    policy: str = Scheduler.HPF,
    horizon: float = 100.0,
    ceiling_factor: float = 2.0,
    cap_admission_to_horizon: bool = False,
    no_first_start_after_horizon: bool = False,
    listeners: Optional[Iterable[EventListener]] = None,
) -> SimulationResult:
    """Run one policy over ``processes`` and collect statistics.

    ``processes`` must already be sorted by arrival time; the records are
    updated in place.
    """
    engine = HPFScheduler(
        processes,
        make_policy(policy),
        horizon=horizon,
        ceiling_factor=ceiling_factor,
        cap_admission_to_horizon=cap_admission_to_horizon,
        no_first_start_after_horizon=no_first_start_after_horizon,
    )
    logger = EventLogger()
    engine.add_listener(logger)
    for listener in listeners or ():
        engine.add_listener(listener)

    ctx = engine.run()
    status = SimulationStatus.CEILING_REACHED if engine.has_work() else SimulationStatus.COMPLETED

    stats = compute_statistics(
        processes,
        elapsed=ctx.clock,
        idle_time=ctx.idle_time,
        total_preemptions=None if policy == Scheduler.HPF else ctx.total_preemptions,
    )

    return SimulationResult(
        processes=processes,
        policy=policy,
        status=status,
        total_time=ctx.clock,
        idle_time=ctx.idle_time,
        total_preemptions=ctx.total_preemptions,
        ceiling=engine.ceiling,
        stats=stats,
        priority_stats=compute_priority_breakdown(processes),
        unfinished=engine.unfinished(),
        never_arrived=list(processes[ctx.next_arrival:]),
        logger=logger,
    )
