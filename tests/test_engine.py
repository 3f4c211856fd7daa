from dataclasses import replace

import pytest

from tick_scheduler.engine import default_params, initialize, reset
from tick_scheduler.errors import InvalidRegistry, SchedulerError
from tick_scheduler.models import PALETTE, MultilevelParams, Process, RoundRobinParams


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1, color="#123456"),
    ]


def test_initialize_builds_empty_state():
    state = initialize(_procs())
    assert state.current_time == 0
    assert state.ready_queue == ()
    assert state.running is None
    assert state.completed == ()
    assert state.timeline == ()
    assert state.context_switches == 0
    assert [p.pid for p in state.pending] == ["P1", "P2"]
    assert not state.is_complete


def test_initialize_assigns_missing_colors():
    state = initialize(_procs())
    assert state.pending[0].color == PALETTE[0]
    assert state.pending[1].color == "#123456"


def test_name_defaults_to_pid():
    assert Process("P9", arrival_time=0, burst_time=1).name == "P9"
    assert Process("P9", arrival_time=0, burst_time=1, name="editor").name == "editor"


@pytest.mark.parametrize(
    "bad",
    [
        Process("X", arrival_time=0, burst_time=0),
        Process("X", arrival_time=-1, burst_time=2),
        Process("X", arrival_time=0, burst_time=2, priority=-3),
        Process("X", arrival_time=0, burst_time=2, queue_class=3),
        Process("X", arrival_time=0, burst_time=1.5),
        Process("X", arrival_time=0.5, burst_time=2),
        Process("X", arrival_time=0, burst_time=True),
        Process("X", arrival_time=0, burst_time=2, priority=1.0),
        Process("X", arrival_time=0, burst_time=2, queue_class="1"),
        Process("X", arrival_time=0, burst_time=2, queue_class=True),
    ],
)
def test_initialize_rejects_malformed_process(bad):
    with pytest.raises(InvalidRegistry):
        initialize(_procs() + [bad])


def test_initialize_rejects_duplicate_ids():
    with pytest.raises(InvalidRegistry, match="Duplicate"):
        initialize(_procs() + [Process("P1", arrival_time=3, burst_time=1)])


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        initialize([Process("X", arrival_time=0, burst_time=0)])
    assert issubclass(InvalidRegistry, SchedulerError)


def test_reset_restores_remaining_time():
    worn = [replace(p, remaining_time=1) for p in _procs()]
    state = reset(worn)
    assert [p.remaining_time for p in state.pending] == [5, 3]


def test_empty_registry_is_complete():
    assert initialize([]).is_complete


def test_default_params():
    assert default_params("fcfs") is None
    assert default_params("RR", time_quantum=4) == RoundRobinParams(time_quantum=4)
    assert default_params("mlq") == MultilevelParams(medium_quantum=3, low_quantum=5)


def test_fractional_burst_names_the_field():
    with pytest.raises(InvalidRegistry, match="non-integer burst_time 1.5"):
        initialize([Process("P1", arrival_time=0, burst_time=1.5)])
