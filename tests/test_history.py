import pytest

from tick_scheduler.errors import InvalidParameter, InvalidRegistry
from tick_scheduler.history import Phase, SimulationController, retreat
from tick_scheduler.models import Process


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=3),
        Process("P2", arrival_time=1, burst_time=2),
    ]


def test_starts_idle():
    controller = SimulationController(_procs())
    assert controller.phase is Phase.IDLE
    assert controller.cursor == -1
    assert controller.history == ()
    assert controller.state.current_time == 0
    assert controller.metrics() is None


def test_advance_appends_history():
    controller = SimulationController(_procs())
    state = controller.advance()
    assert controller.phase is Phase.STEPPED
    assert controller.cursor == 0
    assert controller.history == (state,)
    assert state.current_time == 1


def test_finishes_when_every_process_completed():
    controller = SimulationController(_procs())
    final = controller.run_to_completion()
    assert controller.phase is Phase.FINISHED
    assert len(controller.history) == 5
    assert final.current_time == 5


def test_advance_after_finish_is_a_no_op():
    controller = SimulationController(_procs())
    final = controller.run_to_completion()
    assert controller.advance() is final
    assert len(controller.history) == 5
    assert controller.phase is Phase.FINISHED


def test_retreat_replays_without_recomputing():
    controller = SimulationController(_procs())
    controller.run_to_completion()
    stored = controller.history

    back = controller.retreat()
    assert back is stored[3]
    assert controller.phase is Phase.STEPPED

    assert controller.advance() is stored[4]
    assert controller.history == stored
    assert controller.phase is Phase.FINISHED


def test_retreat_stops_at_first_entry():
    controller = SimulationController(_procs())
    first = controller.advance()
    controller.advance()
    controller.retreat()
    assert controller.retreat() is first
    assert controller.cursor == 0


def test_retreat_while_idle_returns_initial_state():
    controller = SimulationController(_procs())
    assert controller.retreat().current_time == 0
    assert controller.phase is Phase.IDLE


def test_reset_discards_history():
    controller = SimulationController(_procs())
    controller.advance()
    controller.advance()
    state = controller.reset()
    assert controller.phase is Phase.IDLE
    assert controller.history == ()
    assert [p.remaining_time for p in state.pending] == [3, 2]


def test_configure_resets_and_switches_algorithm():
    controller = SimulationController(_procs())
    controller.advance()
    controller.configure(algorithm="RR", time_quantum=1)
    assert controller.phase is Phase.IDLE
    assert controller.algorithm == "rr"
    final = controller.run_to_completion()
    # P1 keeps the CPU at t=1 since P2 has not arrived yet.
    assert [(e.pid, e.start) for e in final.timeline] == [("P1", 0), ("P2", 2), ("P1", 3), ("P2", 4)]


def test_update_registry_resets():
    controller = SimulationController(_procs())
    controller.advance()
    controller.update_registry([Process("Q", arrival_time=0, burst_time=1)])
    assert controller.phase is Phase.IDLE
    assert controller.run_to_completion().completed[0].pid == "Q"


def test_update_registry_rejects_bad_registry_and_keeps_history():
    controller = SimulationController(_procs())
    controller.advance()
    with pytest.raises(InvalidRegistry):
        controller.update_registry([Process("Q", arrival_time=0, burst_time=0)])
    assert len(controller.history) == 1


def test_bad_quantum_refused_at_advance():
    controller = SimulationController(_procs(), algorithm="rr", time_quantum=0)
    with pytest.raises(InvalidParameter):
        controller.advance()
    assert controller.phase is Phase.IDLE


def test_unknown_algorithm_rejected():
    with pytest.raises(InvalidParameter):
        SimulationController(_procs(), algorithm="lottery")


def test_empty_registry_never_ticks():
    controller = SimulationController([])
    assert controller.advance().current_time == 0
    assert controller.run_to_completion().current_time == 0
    assert controller.phase is Phase.IDLE


def test_controller_metrics():
    controller = SimulationController(_procs())
    controller.run_to_completion()
    result = controller.metrics()
    assert result.avg_waiting == pytest.approx(1.0)
    assert result.context_switches == 2


def test_retreat_function():
    history = ["s0", "s1", "s2"]
    assert retreat(history, 2) == ("s1", 1)
    assert retreat(history, 0) == ("s0", 0)
    with pytest.raises(ValueError):
        retreat([], 0)
    with pytest.raises(IndexError):
        retreat(history, 3)
