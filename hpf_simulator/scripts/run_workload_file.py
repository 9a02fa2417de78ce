from __future__ import annotations

import csv
import sys
from pathlib import Path
from typing import List

# Ensure repo root is on sys.path so this script can be executed directly
repo_root = Path(__file__).resolve().parents[2]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from colorama import Fore, init as colorama_init

from hpf_simulator.backend.core import Process, SchedulerError
from hpf_simulator.backend.os_kernel import OSKernel, KernelConfig
from hpf_simulator.backend.simulator import Scheduler
from hpf_simulator.backend.report import format_trace, format_stats, format_breakdown


def load_processes_from_csv(path: str, limit: int | None = None) -> List[Process]:
    """Read ``name,arrival_time,burst_time,priority`` rows.

    Rows are sorted by arrival time (stable) since the engine requires it;
    ``pid`` is the row index in the file.
    """
    procs: List[Process] = []
    with open(path, newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for i, row in enumerate(reader):
            if limit and i >= limit:
                break
            procs.append(Process(
                name=row['name'],
                burst_time=float(row['burst_time']),
                priority=int(row['priority']),
                arrival_time=float(row.get('arrival_time') or 0.0),
                pid=i,
            ))
    procs.sort(key=lambda p: p.arrival_time)
    return procs


def main(argv=None) -> int:
    import argparse

    colorama_init(autoreset=True)
    parser = argparse.ArgumentParser(description='Run HPF on a workload CSV file')
    parser.add_argument('workload', type=str, help='CSV with name,arrival_time,burst_time,priority columns')
    parser.add_argument('--limit', type=int, default=None, help='Max number of rows to load')
    parser.add_argument('--policy', choices=list(Scheduler.ALL), default=Scheduler.HPF)
    parser.add_argument('--horizon', type=float, default=100.0)
    parser.add_argument('--trace', action='store_true')
    parser.add_argument('--outdir', type=str, default=None, help='Output directory for logs')
    args = parser.parse_args(argv)

    if not Path(args.workload).exists():
        print(Fore.RED + f"Workload not found at {args.workload}")
        return 1

    try:
        procs = load_processes_from_csv(args.workload, limit=args.limit)
        kernel = OSKernel(KernelConfig(policy=args.policy, horizon=args.horizon))
        result = kernel.run(procs)
    except (SchedulerError, ValueError, KeyError) as e:
        print(Fore.RED + f"Cannot run: {e}")
        return 1

    if args.trace:
        print(format_trace(result.logger))
    print(format_stats(result.stats, args.policy))
    print(format_breakdown(result.priority_stats))
    print(f"Status: {result.status.value} at t={result.total_time:g}")

    if args.outdir:
        out = Path(args.outdir)
        out.mkdir(parents=True, exist_ok=True)
        base = out / f'{Path(args.workload).stem}_{args.policy.lower()}'
        result.logger.export_json(str(base.with_suffix('.json')))
        result.logger.export_csv(str(base))
        print(f"Logs written to {out} (base: {base.name})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
