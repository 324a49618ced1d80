import math

from factories import at
from overhead.services.throttle import AlwaysAllowGate, IntervalGate, ThrottleGuard


def test_gate_consumes_on_allow():
    gate = IntervalGate(30)

    assert gate.allow(at(0)) is True
    assert gate.last_fired == at(0)
    assert gate.allow(at(10)) is False
    assert gate.last_fired == at(0)
    assert gate.allow(at(30)) is True
    assert gate.last_fired == at(30)


def test_gate_stays_closed_when_clock_steps_back():
    gate = IntervalGate(30)
    gate.allow(at(100))

    assert gate.allow(at(90)) is False
    assert gate.allow(at(10)) is True


def test_zero_interval_gate_always_opens():
    gate = IntervalGate(0)

    assert all(gate.allow(at(0)) for _ in range(3))


def test_alert_gate_bounds_alerts_per_window():
    interval = 300
    window = 900
    gate = IntervalGate(interval)

    allowed = sum(gate.allow(at(t)) for t in range(0, window, 30))

    assert allowed <= math.ceil(window / interval)
    assert allowed == 3


def test_gates_are_independent():
    guard = ThrottleGuard(feed_interval_seconds=30, alert_interval_seconds=300)

    assert guard.feed_gate.allow(at(0)) is True
    assert guard.alert_gate.allow(at(5)) is True
    assert guard.feed_gate.allow(at(30)) is True
    assert guard.alert_gate.allow(at(30)) is False

    state = guard.state()
    assert state.feed_last_fired == at(30)
    assert state.alert_last_fired == at(5)


def test_background_feed_gate_is_unthrottled_and_reset_reopens():
    guard = ThrottleGuard(feed_interval_seconds=30, alert_interval_seconds=300)
    guard.feed_gate.allow(at(0))

    assert isinstance(guard.feed_gate_for(background=True), AlwaysAllowGate)
    assert guard.feed_gate_for(background=True).allow(at(1)) is True
    assert guard.feed_gate_for(background=False).allow(at(1)) is False

    guard.reset()
    assert guard.feed_gate.allow(at(1)) is True
