from __future__ import annotations

import argparse
import sys
from pathlib import Path

repo_root = Path(__file__).resolve().parents[2]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from hpf_simulator.backend.os_kernel import OSKernel, KernelConfig
from hpf_simulator.backend.simulator import Scheduler
from hpf_simulator.backend.utils import generate_workload
from hpf_simulator.backend.report import format_stats, format_breakdown


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Run both HPF variants on the same workload")
    parser.add_argument("--n", type=int, default=167)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--horizon", type=float, default=100.0)
    args = parser.parse_args(argv)

    procs = generate_workload(args.n, seed=args.seed, horizon=args.horizon)
    results = OSKernel(KernelConfig(horizon=args.horizon)).compare(procs)

    for policy, title in ((Scheduler.HPF, "HPF Non-Preemptive"), (Scheduler.HPF_PREEMPTIVE, "HPF Preemptive")):
        result = results[policy]
        print(format_stats(result.stats, title))
        print(format_breakdown(result.priority_stats))
        print()


if __name__ == "__main__":
    main()
