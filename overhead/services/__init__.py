"""Service-layer components of the detection engine."""

from .background import BackgroundChecker, BackgroundStatus
from .change_tracker import ChangeTracker
from .engine import AlertNotifier, DetectionEngine
from .geo_filter import GeoFilter, GeoPartition, RangedTrack, filter_tracks
from .notifier import (
    AlertHistory,
    AlertHistoryNotifier,
    AlertMessage,
    LoggingNotifier,
    format_alert,
)
from .poll_scheduler import FeedSource, PollScheduler
from .positions import PositionStore
from .throttle import AlwaysAllowGate, IntervalGate, ThrottleGuard, ThrottleState
from .track_linker import AnonymousTrackLinker

__all__ = [
    "AlertHistory",
    "AlertHistoryNotifier",
    "AlertMessage",
    "AlertNotifier",
    "AlwaysAllowGate",
    "AnonymousTrackLinker",
    "BackgroundChecker",
    "BackgroundStatus",
    "ChangeTracker",
    "DetectionEngine",
    "FeedSource",
    "GeoFilter",
    "GeoPartition",
    "IntervalGate",
    "LoggingNotifier",
    "PollScheduler",
    "PositionStore",
    "RangedTrack",
    "ThrottleGuard",
    "ThrottleState",
    "filter_tracks",
    "format_alert",
]
