import pytest

from hpf_simulator.backend.core import Process, SimulationCeilingError
from hpf_simulator.backend.simulator import simulate, Scheduler, SimulationStatus


def test_non_preemptive_scenario_stats(scenario):
    result = simulate(scenario, policy=Scheduler.HPF)
    assert result.status is SimulationStatus.COMPLETED
    assert result.total_time == 4.0
    assert result.idle_time == 0.0
    assert result.stats.completed == 2
    assert result.avg_turnaround_time == pytest.approx(3.0)
    assert result.avg_waiting_time == pytest.approx(1.0)
    assert result.stats.avg_response_time == pytest.approx(1.0)
    assert result.throughput == pytest.approx(0.5)
    assert result.stats.cpu_utilization == pytest.approx(100.0)
    assert result.stats.total_preemptions is None


def test_preemptive_scenario_stats(scenario):
    result = simulate(scenario, policy=Scheduler.HPF_PREEMPTIVE)
    assert result.status is SimulationStatus.COMPLETED
    assert result.total_preemptions == 1
    assert result.stats.total_preemptions == 1
    assert result.stats.cpu_utilization == pytest.approx(100.0)
    assert result.avg_turnaround_time == pytest.approx(2.5)
    assert result.avg_waiting_time == pytest.approx(0.5)
    assert result.stats.avg_response_time == pytest.approx(0.0)


def test_preemption_shortens_high_priority_turnaround():
    procs = [
        Process("A", 8, priority=4, arrival_time=0),
        Process("B", 2, priority=1, arrival_time=1),
    ]
    r1 = simulate([p.fresh_copy() for p in procs], policy=Scheduler.HPF)
    r2 = simulate([p.fresh_copy() for p in procs], policy=Scheduler.HPF_PREEMPTIVE)
    b_np = next(p for p in r1.processes if p.name == "B").finish_time
    b_pre = next(p for p in r2.processes if p.name == "B").finish_time
    assert b_pre < b_np


def test_cpu_utilization_counts_idle_quanta():
    result = simulate([Process("A", 1, arrival_time=2.5)], policy=Scheduler.HPF)
    assert result.idle_time == 3.0
    assert result.stats.cpu_utilization == pytest.approx(25.0)


def test_ceiling_is_reported_distinctly():
    procs = [Process("A", 10, priority=1), Process("B", 3, priority=4, arrival_time=1)]
    result = simulate(procs, policy=Scheduler.HPF_PREEMPTIVE, horizon=5, ceiling_factor=1)
    assert result.status is SimulationStatus.CEILING_REACHED
    assert result.unfinished == procs
    assert result.stats.completed == 0
    assert result.throughput == 0.0
    with pytest.raises(SimulationCeilingError) as info:
        result.raise_for_status()
    assert info.value.unfinished == procs


def test_completed_run_does_not_raise(scenario):
    simulate(scenario).raise_for_status()


def test_never_started_and_never_arrived():
    procs = [
        Process("A", 4, priority=1, arrival_time=0),
        Process("B", 1, priority=2, arrival_time=1),
        Process("C", 1, priority=1, arrival_time=3.5),
    ]
    result = simulate(procs, policy=Scheduler.HPF_PREEMPTIVE, horizon=3, ceiling_factor=4,
                      cap_admission_to_horizon=True, no_first_start_after_horizon=True)
    assert result.status is SimulationStatus.COMPLETED
    assert result.never_started == [procs[1]]
    assert result.never_arrived == [procs[2]]


def test_arrival_past_the_ceiling_never_arrives():
    procs = [Process("A", 1, arrival_time=0), Process("B", 1, arrival_time=500)]
    result = simulate(procs)
    assert result.status is SimulationStatus.COMPLETED
    assert result.total_time == 1.0
    assert result.unfinished == []
    assert result.never_arrived == [procs[1]]
    result.raise_for_status()


def test_arrival_in_the_last_partial_quantum_never_arrives():
    procs = [Process("A", 1, arrival_time=0), Process("B", 1, arrival_time=199.5)]
    result = simulate(procs, horizon=100, ceiling_factor=2)
    assert result.status is SimulationStatus.COMPLETED
    assert result.never_arrived == [procs[1]]
    assert procs[1].start_time is None


def test_starved_level_reports_no_data():
    procs = [Process("A", 10, priority=1), Process("B", 1, priority=4, arrival_time=1)]
    result = simulate(procs, policy=Scheduler.HPF_PREEMPTIVE, horizon=5, ceiling_factor=1)
    assert result.priority_stats[4] is None
    assert result.priority_stats[2] is None


def test_extra_listeners_receive_events(scenario):
    seen = []
    simulate(scenario, listeners=[seen.append])
    assert len(seen) == 6


def test_empty_population():
    result = simulate([], policy=Scheduler.HPF)
    assert result.status is SimulationStatus.COMPLETED
    assert result.total_time == 0.0
    assert result.stats.completed == 0
    assert result.stats.cpu_utilization == 0.0
    assert all(level is None for level in result.priority_stats.values())
