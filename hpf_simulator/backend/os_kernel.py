from __future__ import annotations

from typing import List, Optional, Iterable
from dataclasses import dataclass, replace

from .core import Process
from .schedulers import EventListener
from .simulator import simulate, Scheduler, SimulationResult


@dataclass
class KernelConfig:
    policy: str = Scheduler.HPF
    horizon: float = 100.0
    ceiling_factor: float = 2.0
    cap_admission_to_horizon: bool = False
    no_first_start_after_horizon: bool = False

    def validate(self) -> None:
        if self.policy not in Scheduler.ALL:
            raise ValueError(f"unknown policy {self.policy!r}")
        if self.horizon <= 0:
            raise ValueError("horizon must be positive")
        if self.ceiling_factor < 1:
            raise ValueError("ceiling_factor must be at least 1")


class OSKernel:
    """Thin wrapper that runs `simulate` with a stored configuration.

    The same kernel can be run repeatedly; each run needs its own unrun
    population.
    """

    def __init__(self, config: KernelConfig | None = None):
        self.config = config or KernelConfig()
        self.config.validate()

    def run(self, processes: List[Process], listeners: Optional[Iterable[EventListener]] = None) -> SimulationResult:
        cfg = self.config
        return simulate(
            processes=processes,
            policy=cfg.policy,
            horizon=cfg.horizon,
            ceiling_factor=cfg.ceiling_factor,
            cap_admission_to_horizon=cfg.cap_admission_to_horizon,
            no_first_start_after_horizon=cfg.no_first_start_after_horizon,
            listeners=listeners,
        )

    def compare(self, processes: List[Process]) -> dict:
        """Run every policy on fresh copies of ``processes``."""
        results = {}
        for policy in Scheduler.ALL:
            kernel = OSKernel(replace(self.config, policy=policy))
            results[policy] = kernel.run([p.fresh_copy() for p in processes])
        return results
