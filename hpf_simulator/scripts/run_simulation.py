from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path so this script can be executed directly
repo_root = Path(__file__).resolve().parents[2]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from hpf_simulator.backend.os_kernel import OSKernel, KernelConfig
from hpf_simulator.backend.simulator import Scheduler, SimulationStatus
from hpf_simulator.backend.utils import generate_workload, export_results_csv
from hpf_simulator.backend.report import format_trace, format_stats, format_breakdown


TITLES = {Scheduler.HPF: "HPF Non-Preemptive", Scheduler.HPF_PREEMPTIVE: "HPF Preemptive"}


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Highest-Priority-First scheduling simulator")
    p.add_argument("--policy", choices=list(Scheduler.ALL), default=Scheduler.HPF_PREEMPTIVE)
    p.add_argument("--n", type=int, default=167, help="Number of synthetic processes")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--horizon", type=float, default=100.0, help="Nominal simulation window in quanta")
    p.add_argument("--ceiling-factor", type=float, default=2.0, help="Hard stop at horizon * factor")
    p.add_argument("--cap-admission", action="store_true", help="Never admit processes arriving at or after the horizon")
    p.add_argument("--no-late-start", action="store_true", help="No first dispatch once the horizon has passed")
    p.add_argument("--trace", action="store_true", help="Print the per-quantum event trace")
    p.add_argument("--breakdown", action="store_true", help="Print per-priority statistics")
    p.add_argument("--out", type=str, default=None, help="Save a Gantt chart to this path")
    p.add_argument("--export", type=str, default=None, help="Base path for JSON/CSV logs and results")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = KernelConfig(
        policy=args.policy,
        horizon=args.horizon,
        ceiling_factor=args.ceiling_factor,
        cap_admission_to_horizon=args.cap_admission,
        no_first_start_after_horizon=args.no_late_start,
    )
    procs = generate_workload(args.n, seed=args.seed, horizon=args.horizon)
    print(f"Generated {len(procs)} processes")

    result = OSKernel(config).run(procs)

    if args.trace:
        print(format_trace(result.logger))
    print()
    print(format_stats(result.stats, TITLES[args.policy]))
    if args.breakdown:
        print()
        print(format_breakdown(result.priority_stats))
    if result.status is SimulationStatus.CEILING_REACHED:
        print(f"\nCeiling of {result.ceiling:g} quanta reached with {len(result.unfinished)} unfinished processes")
    elif result.never_started:
        print(f"\n{len(result.never_started)} processes were never started")

    if args.out:
        from hpf_simulator.backend.visualizer import plot_gantt
        plot_gantt(procs, result.logger, args.out, horizon=args.horizon, title=TITLES[args.policy])
        print(f"Saved plot to {args.out}")
    if args.export:
        base = Path(args.export)
        base.parent.mkdir(parents=True, exist_ok=True)
        result.logger.export_json(str(base.with_suffix(".json")))
        result.logger.export_csv(str(base))
        export_results_csv(procs, f"{base}_results.csv")
        print(f"Logs written to {base.parent} (base: {base.name})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
