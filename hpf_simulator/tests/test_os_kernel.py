from __future__ import annotations

import pytest

from hpf_simulator.backend.core import Process
from hpf_simulator.backend.os_kernel import OSKernel, KernelConfig
from hpf_simulator.backend.simulator import Scheduler, SimulationStatus
from hpf_simulator.backend.utils import generate_workload


def test_kernel_runs_simple():
    procs = [
        Process('p1', burst_time=1.0, priority=1, arrival_time=0.0),
        Process('p2', burst_time=2.0, priority=2, arrival_time=0.5),
        Process('p3', burst_time=0.5, priority=3, arrival_time=1.0),
    ]

    kernel = OSKernel(KernelConfig(policy=Scheduler.HPF_PREEMPTIVE, horizon=10.0))
    result = kernel.run(procs)

    assert result.status is SimulationStatus.COMPLETED
    assert all(p.finish_time is not None for p in result.processes)
    # Every process needs at least one whole quantum
    assert result.total_time >= len(procs)


@pytest.mark.parametrize("config", [
    KernelConfig(policy="RR"),
    KernelConfig(horizon=0),
    KernelConfig(ceiling_factor=0.5),
])
def test_invalid_config_is_rejected(config):
    with pytest.raises(ValueError):
        OSKernel(config)


def test_default_config():
    kernel = OSKernel()
    assert kernel.config.policy == Scheduler.HPF
    assert kernel.config.horizon == 100.0
    assert kernel.config.ceiling_factor == 2.0


def test_compare_uses_fresh_copies():
    procs = generate_workload(30, seed=4)
    results = OSKernel().compare(procs)

    assert set(results) == set(Scheduler.ALL)
    assert all(p.start_time is None for p in procs)
    assert results[Scheduler.HPF].total_preemptions == 0
    np_names = [p.name for p in results[Scheduler.HPF].processes]
    assert np_names == [p.name for p in procs]


def test_run_simulation_script(capsys, tmp_path):
    from hpf_simulator.scripts.run_simulation import main

    base = tmp_path / "logs" / "run"
    assert main(["--n", "15", "--seed", "1", "--breakdown", "--export", str(base)]) == 0
    out = capsys.readouterr().out
    assert "Generated 15 processes" in out
    assert "=== HPF Preemptive Statistics ===" in out
    assert (tmp_path / "logs" / "run.json").exists()
    assert (tmp_path / "logs" / "run_results.csv").exists()


def test_load_processes_from_csv(tmp_path):
    from hpf_simulator.scripts.run_workload_file import load_processes_from_csv

    path = tmp_path / "workload.csv"
    path.write_text("name,arrival_time,burst_time,priority\nB,2.0,1,1\nA,0.5,3,2\nC,2.0,2,4\n", encoding="utf-8")
    procs = load_processes_from_csv(str(path))
    assert [p.name for p in procs] == ["A", "B", "C"]
    assert [p.pid for p in procs] == [1, 0, 2]
    result = OSKernel(KernelConfig(policy=Scheduler.HPF_PREEMPTIVE)).run(procs)
    assert result.status is SimulationStatus.COMPLETED


def test_workload_file_reports_bad_records(capsys, tmp_path):
    from hpf_simulator.scripts.run_workload_file import main

    path = tmp_path / "bad.csv"
    path.write_text("name,arrival_time,burst_time,priority\nX,0,1,9\n", encoding="utf-8")
    assert main([str(path)]) == 1
    out = capsys.readouterr().out
    assert "Cannot run" in out
    assert "Traceback" not in out


def test_workload_file_reports_unparsable_rows(capsys, tmp_path):
    from hpf_simulator.scripts.run_workload_file import main

    path = tmp_path / "bad.csv"
    path.write_text("name,arrival_time,burst_time,priority\nX,soon,1,1\n", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "Cannot run" in capsys.readouterr().out


def test_workload_file_runs(capsys, tmp_path):
    from hpf_simulator.scripts.run_workload_file import main

    path = tmp_path / "ok.csv"
    path.write_text("name,arrival_time,burst_time,priority\nP1,0,3,2\nP2,1,1,1\n", encoding="utf-8")
    assert main([str(path), "--policy", Scheduler.HPF_PREEMPTIVE, "--outdir", str(tmp_path / "out")]) == 0
    out = capsys.readouterr().out
    assert "Status: COMPLETED at t=4" in out
    assert (tmp_path / "out" / "ok_hpf_preemptive.json").exists()
