from __future__ import annotations

import shlex
from typing import List, Optional
from colorama import Fore, Style, init as colorama_init

from .core import Process, SchedulerError
from .simulator import simulate, Scheduler, SimulationStatus
from .utils import generate_workload
from .report import format_trace, format_stats, format_breakdown
from .visualizer import plot_gantt


class ManualTerminal:
    def __init__(self) -> None:
        colorama_init(autoreset=True)
        self.processes: List[Process] = []
        self.last_result = None

    def prompt(self) -> None:
        print(Fore.CYAN + "HPF Scheduler Terminal. Type 'help' for commands.")
        while True:
            try:
                raw = input(Fore.GREEN + "> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not raw.strip():
                continue
            self.handle_command(raw)

    def handle_command(self, raw: str) -> None:
        try:
            parts = shlex.split(raw)
        except ValueError as e:
            print(Fore.RED + f"Parse error: {e}")
            return
        if not parts:
            return
        cmd, *args = parts
        cmd = cmd.lower()
        if cmd == "help":
            self._help()
        elif cmd == "add":
            self._add(args)
        elif cmd == "gen":
            self._gen(args)
        elif cmd == "clear":
            self.processes = []
            print(Fore.CYAN + "Process list cleared")
        elif cmd == "list":
            self._list()
        elif cmd == "run":
            self._run(args)
        elif cmd == "stats":
            self._stats()
        elif cmd == "exit" or cmd == "quit":
            raise SystemExit(0)
        else:
            print(Fore.YELLOW + "Unknown command. Type 'help'.")

    def _help(self) -> None:
        print("Commands:")
        print("  add <name> <burst> <priority 1-4> [arrival=0]")
        print("  gen <n> [seed]")
        print("  list")
        print("  clear")
        print("  run [--policy HPF|HPF_PREEMPTIVE] [--horizon H] [--trace] [--no-late-start] [--out path]")
        print("  stats")
        print("  exit")

    def _add(self, args: List[str]) -> None:
        if len(args) < 3:
            print(Fore.RED + "Usage: add <name> <burst> <priority> [arrival]")
            return
        name = args[0]
        try:
            burst = float(args[1])
            priority = int(args[2])
            arrival = float(args[3]) if len(args) >= 4 else 0.0
        except ValueError:
            print(Fore.RED + "Invalid numeric values")
            return
        self.processes.append(Process(name=name, burst_time=burst, priority=priority, arrival_time=arrival,
                                      pid=len(self.processes)))
        print(Fore.CYAN + f"Process {name} added: burst={burst}, priority={priority}, arrival={arrival}")

    def _gen(self, args: List[str]) -> None:
        try:
            n = int(args[0]) if args else 20
            seed = int(args[1]) if len(args) >= 2 else None
        except ValueError:
            print(Fore.RED + "Usage: gen <n> [seed]")
            return
        self.processes = generate_workload(n, seed=seed)
        print(Fore.CYAN + f"Generated {n} processes")

    def _list(self) -> None:
        if not self.processes:
            print("No processes yet")
            return
        for p in self.processes:
            print(f"{p.name}: burst={p.burst_time:.2f}, priority={p.priority}, arrival={p.arrival_time:.2f}")

    def _run(self, args: List[str]) -> None:
        policy = Scheduler.HPF
        horizon = 100.0
        show_trace = False
        no_late_start = False
        out_path: Optional[str] = None
        # Parse simple flags
        it = iter(args)
        for token in it:
            if token == "--policy":
                policy = next(it, policy).upper()
            elif token == "--horizon":
                try:
                    horizon = float(next(it))
                except (TypeError, ValueError):
                    pass
            elif token == "--trace":
                show_trace = True
            elif token == "--no-late-start":
                no_late_start = True
            elif token == "--out":
                out_path = next(it, None)

        # the engine sorts nothing itself, and records are mutated by a run
        procs = sorted((p.fresh_copy() for p in self.processes), key=lambda p: p.arrival_time)
        try:
            result = simulate(procs, policy=policy, horizon=horizon, no_first_start_after_horizon=no_late_start)
        except (SchedulerError, ValueError) as e:
            print(Fore.RED + f"Cannot run: {e}")
            return

        self.last_result = result
        if show_trace:
            print(format_trace(result.logger))
        print(Style.BRIGHT + f"Simulation finished at t={result.total_time:g}. Avg waiting: {result.avg_waiting_time:.2f}, "
              f"Avg turnaround: {result.avg_turnaround_time:.2f}, Throughput: {result.throughput:.3f}")
        if result.status is SimulationStatus.CEILING_REACHED:
            print(Fore.YELLOW + f"Ceiling reached with {len(result.unfinished)} unfinished processes")
        if out_path:
            plot_gantt(procs, result.logger, out_path, horizon=horizon)
            print(Fore.CYAN + f"Saved plot to {out_path}")

    def _stats(self) -> None:
        if not self.last_result:
            print("No simulation yet")
            return
        r = self.last_result
        print(format_stats(r.stats, r.policy))
        print(format_breakdown(r.priority_stats))


def main() -> None:
    ManualTerminal().prompt()


if __name__ == "__main__":
    main()
