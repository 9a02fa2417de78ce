import os
import sys

import pytest

# Ensure project root is on sys.path so 'hpf_simulator' can be imported
here = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(here, os.pardir, os.pardir))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from hpf_simulator.backend.core import Process  # noqa: E402


@pytest.fixture
def scenario():
    """P1 is running when the higher priority P2 arrives."""
    return [
        Process("P1", burst_time=3, priority=2, arrival_time=0),
        Process("P2", burst_time=1, priority=1, arrival_time=1),
    ]


@pytest.fixture
def preemption_case():
    """X (priority 3) is displaced by Y while Z waits at X's level."""
    return [
        Process("X", burst_time=5, priority=3, arrival_time=0),
        Process("Z", burst_time=1, priority=3, arrival_time=1),
        Process("Y", burst_time=1, priority=1, arrival_time=2),
    ]
