"""
Tests for the statistics engine.
"""

import pytest

from hpf_simulator.backend.core import Process
from hpf_simulator.backend.metrics import (
    compute_statistics, compute_priority_breakdown, compute_throughput,
    compute_cpu_utilization, compute_avg,
)
from hpf_simulator.backend.schedulers import PreemptiveHPFScheduler
from hpf_simulator.backend.utils import generate_workload


def finished(name, priority, arrival, burst, start, finish, preempted=0):
    p = Process(name, burst, priority=priority, arrival_time=arrival)
    p.start_time = start
    p.finish_time = finish
    p.turnaround_time = finish - arrival
    p.waiting_time = p.turnaround_time - burst
    p.times_preempted = preempted
    return p


@pytest.fixture
def population():
    return [
        finished("A", 1, 0, 2, 0, 2),
        finished("B", 1, 1, 1, 2, 3),
        finished("C", 3, 0, 3, 3, 6, preempted=2),
        Process("D", 4, priority=4, arrival_time=2),
    ]


class TestStatistics:

    def test_averages_over_completed_only(self, population):
        stats = compute_statistics(population)
        assert stats.completed == 3
        assert stats.avg_turnaround_time == pytest.approx((2 + 2 + 6) / 3)
        assert stats.avg_waiting_time == pytest.approx((0 + 1 + 3) / 3)
        assert stats.avg_response_time == pytest.approx((0 + 1 + 3) / 3)
        assert stats.throughput == pytest.approx(3 / 6)
        assert stats.cpu_utilization is None

    def test_zero_completions(self):
        stats = compute_statistics([Process("A", 1)])
        assert stats.completed == 0
        assert stats.avg_turnaround_time == 0.0
        assert stats.throughput == 0.0

    def test_cpu_utilization(self, population):
        stats = compute_statistics(population, elapsed=8, idle_time=2)
        assert stats.cpu_utilization == pytest.approx(75.0)
        assert compute_cpu_utilization(0, 0) == 0.0

    def test_statistics_are_idempotent(self):
        procs = generate_workload(50, seed=9)
        ctx = PreemptiveHPFScheduler(procs).run()
        first = compute_statistics(procs, total_preemptions=ctx.total_preemptions)
        second = compute_statistics(procs, total_preemptions=ctx.total_preemptions)
        assert first == second
        assert compute_priority_breakdown(procs) == compute_priority_breakdown(procs)

    def test_helpers(self):
        assert compute_avg([]) == 0.0
        assert compute_avg([1.0, 3.0]) == 2.0
        assert compute_throughput([]) == 0.0


class TestPriorityBreakdown:

    def test_levels_without_completions_have_no_data(self, population):
        breakdown = compute_priority_breakdown(population)
        assert set(breakdown) == {1, 2, 3, 4}
        assert breakdown[2] is None
        assert breakdown[4] is None

    def test_level_statistics_use_same_formulas(self, population):
        breakdown = compute_priority_breakdown(population)
        level1 = breakdown[1]
        assert level1.completed == 2
        assert level1.avg_turnaround_time == pytest.approx(2.0)
        assert level1.avg_waiting_time == pytest.approx(0.5)
        assert level1.throughput == pytest.approx(2 / 3)
        assert breakdown[3].total_preemptions == 2
