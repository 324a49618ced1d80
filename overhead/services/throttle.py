"""Minimum-interval gates for feed polling and alert delivery."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Optional, Protocol

from overhead.models.positions import ensure_utc

logger = logging.getLogger("overhead.throttle")


class Gate(Protocol):
    def allow(self, now: datetime) -> bool:
        """Return True and consume the gate, or False if it is still closed."""


class IntervalGate:
    """Open at most once per ``interval_seconds``.

    ``allow`` is the act of consuming the gate: a True result records ``now``
    as the last firing. A clock that steps backwards by less than the interval
    keeps the gate closed.
    """

    def __init__(self, interval_seconds: float, *, name: str = "gate") -> None:
        self.interval = timedelta(seconds=max(interval_seconds, 0.0))
        self.name = name
        self.last_fired: Optional[datetime] = None

    def allow(self, now: datetime) -> bool:
        now = ensure_utc(now)
        if self.last_fired is not None and abs(now - self.last_fired) < self.interval:
            logger.debug(
                "%s gate closed: %.1fs since last firing",
                self.name,
                (now - self.last_fired).total_seconds(),
            )
            return False
        self.last_fired = now
        return True

    def reset(self) -> None:
        self.last_fired = None


class AlwaysAllowGate:
    """Gate for timelines that are already spaced by an external scheduler."""

    name = "unthrottled"
    last_fired: Optional[datetime] = None

    def allow(self, now: datetime) -> bool:
        return True

    def reset(self) -> None:
        pass


@dataclass(frozen=True)
class ThrottleState:
    feed_interval_seconds: float
    alert_interval_seconds: float
    feed_last_fired: Optional[datetime]
    alert_last_fired: Optional[datetime]


class ThrottleGuard:
    """The engine's two independent gates."""

    def __init__(self, *, feed_interval_seconds: float, alert_interval_seconds: float) -> None:
        self.feed_gate = IntervalGate(feed_interval_seconds, name="feed")
        self.alert_gate = IntervalGate(alert_interval_seconds, name="alert")
        self.background_feed_gate = AlwaysAllowGate()

    def feed_gate_for(self, background: bool) -> Gate:
        return self.background_feed_gate if background else self.feed_gate

    def state(self) -> ThrottleState:
        return ThrottleState(
            feed_interval_seconds=self.feed_gate.interval.total_seconds(),
            alert_interval_seconds=self.alert_gate.interval.total_seconds(),
            feed_last_fired=self.feed_gate.last_fired,
            alert_last_fired=self.alert_gate.last_fired,
        )

    def reset(self) -> None:
        """Reopen both gates. Intended for tests."""

        self.feed_gate.reset()
        self.alert_gate.reset()


__all__ = [
    "AlwaysAllowGate",
    "Gate",
    "IntervalGate",
    "ThrottleGuard",
    "ThrottleState",
]
