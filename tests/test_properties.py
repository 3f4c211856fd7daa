import pytest

from tick_scheduler.engine import advance, default_params, initialize
from tick_scheduler.history import SimulationController
from tick_scheduler.models import HIGH, LOW, MEDIUM, Process


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=7, priority=3, queue_class=LOW),
        Process("P2", arrival_time=1, burst_time=4, priority=1, queue_class=MEDIUM),
        Process("P3", arrival_time=2, burst_time=2, priority=2, queue_class=HIGH),
        Process("P4", arrival_time=3, burst_time=5, queue_class=MEDIUM),
        Process("P5", arrival_time=6, burst_time=3, priority=0, queue_class=LOW),
        Process("P6", arrival_time=10, burst_time=1, priority=4, queue_class=HIGH),
        Process("P7", arrival_time=30, burst_time=2, priority=1, queue_class=LOW),
    ]


ALGORITHMS = ["fcfs", "sjf", "rr", "priority", "mlq"]


def _states(algorithm):
    state = initialize(_procs())
    params = default_params(algorithm, time_quantum=3)
    states = [state]
    while not state.is_complete:
        state, params = advance(algorithm, state, params)
        states.append(state)
        assert len(states) < 500
    return states


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_conservation(algorithm):
    total = len(_procs())
    for state in _states(algorithm):
        running = 1 if state.running is not None else 0
        assert len(state.pending) + len(state.ready_queue) + running + len(state.completed) == total
        assert sorted(p.pid for p in state.processes()) == sorted(p.pid for p in _procs())


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_remaining_time_is_monotonic(algorithm):
    last = {p.pid: p.burst_time for p in _procs()}
    for state in _states(algorithm):
        for p in state.processes():
            assert 0 <= p.remaining_time <= last[p.pid]
            last[p.pid] = p.remaining_time
        if state.running is not None:
            assert state.running.remaining_time > 0
    assert all(v == 0 for v in last.values())


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_single_completion(algorithm):
    seen = {}
    for state in _states(algorithm):
        pids = [c.pid for c in state.completed]
        assert len(pids) == len(set(pids))
        for c in state.completed:
            assert seen.setdefault(c.pid, c.completion_time) == c.completion_time
            assert c.process.remaining_time == 0


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_time_grows_and_started_timeline_is_kept(algorithm):
    states = _states(algorithm)
    for before, after in zip(states, states[1:]):
        assert after.current_time == before.current_time + 1
        # An entry opened at the boundary may still be withdrawn by a
        # preemption in the next tick; earlier ones are final.
        started = tuple(e for e in before.timeline if e.start < before.current_time)
        assert after.timeline[: len(started)] == started
        assert after.context_switches - before.context_switches == len(after.timeline) - len(before.timeline)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_determinism(algorithm):
    assert _states(algorithm) == _states(algorithm)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_every_process_runs_for_its_burst(algorithm):
    final = _states(algorithm)[-1]
    assert final.current_time == max(c.completion_time for c in final.completed)
    busy = sum(p.burst_time for p in _procs())
    # P7 arrives after everything else is done, so the CPU idles before it.
    assert final.current_time >= busy


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_rewind_then_replay_returns_same_state(algorithm):
    controller = SimulationController(_procs(), algorithm=algorithm, time_quantum=3)
    for _ in range(12):
        controller.advance()
    before = controller.state
    for _ in range(5):
        controller.retreat()
    for _ in range(5):
        controller.advance()
    assert controller.state == before
    assert len(controller.history) == 12


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_every_timeline_entry_runs(algorithm):
    final = _states(algorithm)[-1]
    assert final.context_switches == len(final.timeline)
    starts = [e.start for e in final.timeline]
    assert starts == sorted(set(starts))
