"""Adaptive heartbeat for autonomous agents.

Exports:
    AdaptiveHeartbeat - Scheduling and human-activity fast path
    HeartbeatStateStore - Cached, file-backed state per agent
    HeartbeatState - Per-agent scheduling state
    assess_interest - Interest level and interval for the next cycle
"""

from .assessor import (
    INTERVALS,
    AssessmentContext,
    InterestAssessment,
    assess_interest,
    hours_since_activity,
)
from .scheduler import AdaptiveHeartbeat, should_beat
from .state import (
    HeartbeatState,
    HistoryEntry,
    InterestLevel,
    Watchlist,
    create_initial_state,
    merge_state,
)
from .store import HeartbeatStateStore

__all__ = [
    "INTERVALS",
    "AdaptiveHeartbeat",
    "AssessmentContext",
    "HeartbeatState",
    "HeartbeatStateStore",
    "HistoryEntry",
    "InterestAssessment",
    "InterestLevel",
    "Watchlist",
    "assess_interest",
    "create_initial_state",
    "hours_since_activity",
    "merge_state",
    "should_beat",
]
