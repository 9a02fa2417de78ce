from __future__ import annotations
import os, sys
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from hpf_simulator.backend.schedulers import PreemptiveHPFScheduler, NonPreemptiveHPFScheduler
from hpf_simulator.backend.core import Process


def make_processes():
    return [
        Process("A", 3.0, priority=3, arrival_time=0.0),
        Process("B", 2.0, priority=2, arrival_time=1.0),
        Process("C", 1.5, priority=1, arrival_time=2.0),
        Process("D", 2.0, priority=3, arrival_time=2.0),
        Process("E", 1.0, priority=4, arrival_time=9.0),
    ]


def run(preemptive: bool = True):
    cls = PreemptiveHPFScheduler if preemptive else NonPreemptiveHPFScheduler
    scheduler = cls(make_processes(), horizon=10.0)
    while scheduler.context.clock < scheduler.ceiling and scheduler.has_work():
        scheduler.step()
        snap = scheduler.snapshot()
        ready = ' '.join(f"{level}:{','.join(names) or '-'}" for level, names in snap['ready'].items())
        print(f"t={snap['clock'] - 1:4.0f} running={snap['running'] or '-':<2} ready[{ready}] done={','.join(snap['completed'])}")
    print('Preemptions:', scheduler.context.total_preemptions)
    for p in scheduler.context.processes:
        print(f'{p.name}: start={p.start_time}, finish={p.finish_time}, waiting={p.waiting_time:.2f}, preempted={p.times_preempted}')

if __name__ == '__main__':
    run(preemptive='--non-preemptive' not in sys.argv)
