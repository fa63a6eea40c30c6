"""Heartbeat state model.

One HeartbeatState exists per canonical agent key. It records when the agent
last checked for activity, when it should check next, how interesting its
situation currently looks, and a short history of scheduling decisions.

Timestamps are integer epoch milliseconds. On disk the state is a JSON
object with camelCase keys (see to_dict/from_dict); older records with
missing fields are upgraded field by field through merge_state().
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_INTERVAL_MINUTES = 60
HISTORY_LIMIT = 50


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class InterestLevel(str, Enum):
    """Urgency of the agent's situation, most urgent first."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass
class Watchlist:
    """Caller-maintained items the scheduler weighs but never modifies."""
    moltbook_post_ids: list[str] = field(default_factory=list)
    pending_tasks: list[str] = field(default_factory=list)
    active_threads: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "moltbookPostIds": list(self.moltbook_post_ids),
            "pendingTasks": list(self.pending_tasks),
            "activeThreads": list(self.active_threads),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Watchlist":
        _check_type("watchlist", d, dict)

        def ids(key: str) -> list[str]:
            value = d.get(key)
            return [] if value is None else _check_str_list(key, value)

        return cls(
            moltbook_post_ids=ids("moltbookPostIds"),
            pending_tasks=ids("pendingTasks"),
            active_threads=ids("activeThreads"),
        )


@dataclass
class HistoryEntry:
    """One recorded scheduling decision."""
    timestamp: int
    trigger: str
    interval_set: int
    interest_level: InterestLevel
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "trigger": self.trigger,
            "intervalSet": self.interval_set,
            "interestLevel": self.interest_level.value,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "HistoryEntry":
        _check_type("history entry", d, dict)
        return cls(
            timestamp=_check_int("timestamp", d["timestamp"]),
            trigger=_check_type("trigger", d.get("trigger", ""), str),
            interval_set=_check_int("intervalSet", d["intervalSet"]),
            interest_level=InterestLevel(d["interestLevel"]),
            reason=_check_type("reason", d.get("reason", ""), str),
        )


@dataclass
class HeartbeatState:
    """Adaptive heartbeat state for a single agent."""

    # Scheduling
    last_beat: int
    next_beat: int
    current_interval: int
    interest_level: InterestLevel
    interest_reason: str
    interest_since: int

    # Activity signals (None = never observed)
    last_human_message: int | None = None
    last_moltbook_check: int | None = None
    last_moltbook_post: int | None = None
    pending_replies: int = 0
    watchlist: Watchlist = field(default_factory=Watchlist)

    # Hibernation; hibernation_started is set exactly while hibernating
    hibernating: bool = False
    hibernation_started: int | None = None

    history: list[HistoryEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted JSON layout."""
        return {
            "lastBeat": self.last_beat,
            "nextBeat": self.next_beat,
            "currentInterval": self.current_interval,
            "interestLevel": self.interest_level.value,
            "interestReason": self.interest_reason,
            "interestSince": self.interest_since,
            "lastHumanMessage": self.last_human_message,
            "lastMoltbookCheck": self.last_moltbook_check,
            "lastMoltbookPost": self.last_moltbook_post,
            "pendingReplies": self.pending_replies,
            "watchlist": self.watchlist.to_dict(),
            "hibernating": self.hibernating,
            "hibernationStarted": self.hibernation_started,
            "history": [entry.to_dict() for entry in self.history],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any], now: int | None = None) -> "HeartbeatState":
        return merge_state(d, now_ms() if now is None else now)


def create_initial_state(now: int) -> HeartbeatState:
    """Baseline state for an agent seen for the first time."""
    return HeartbeatState(
        last_beat=0,
        next_beat=now,
        current_interval=DEFAULT_INTERVAL_MINUTES,
        interest_level=InterestLevel.MEDIUM,
        interest_reason="Just started - establishing baseline",
        interest_since=now,
    )


def _check_int(key: str, value: Any, nullable: bool = False) -> int | None:
    """Reject non-integer timestamps and counts (bools included)."""
    if value is None and nullable:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{key} must be an integer, got {type(value).__name__}")
    return value


def _check_type(key: str, value: Any, expected: type) -> Any:
    if not isinstance(value, expected):
        raise TypeError(f"{key} must be {expected.__name__}, got {type(value).__name__}")
    return value


def _check_str_list(key: str, value: Any) -> list[str]:
    items = _check_type(key, value, list)
    for item in items:
        _check_type(key, item, str)
    return list(items)


def merge_state(raw: dict[str, Any], now: int) -> HeartbeatState:
    """Build a state from a possibly partial persisted record.

    Each missing (or null) field falls back to its default independently.
    A present field of the wrong type raises TypeError; an unknown interest
    level raises ValueError.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"heartbeat record must be an object, got {type(raw).__name__}")

    def pick(key: str, default: Any) -> Any:
        value = raw.get(key)
        return default if value is None else value

    watchlist = raw.get("watchlist")
    history = raw.get("history")
    if history is not None:
        _check_type("history", history, list)

    return HeartbeatState(
        last_beat=_check_int("lastBeat", pick("lastBeat", 0)),
        next_beat=_check_int("nextBeat", pick("nextBeat", now)),
        current_interval=_check_int("currentInterval", pick("currentInterval", DEFAULT_INTERVAL_MINUTES)),
        interest_level=InterestLevel(pick("interestLevel", InterestLevel.MEDIUM.value)),
        interest_reason=_check_type("interestReason", pick("interestReason", "Migrated from old format"), str),
        interest_since=_check_int("interestSince", pick("interestSince", now)),
        last_human_message=_check_int("lastHumanMessage", raw.get("lastHumanMessage"), nullable=True),
        last_moltbook_check=_check_int("lastMoltbookCheck", raw.get("lastMoltbookCheck"), nullable=True),
        last_moltbook_post=_check_int("lastMoltbookPost", raw.get("lastMoltbookPost"), nullable=True),
        pending_replies=_check_int("pendingReplies", pick("pendingReplies", 0)),
        watchlist=Watchlist.from_dict(watchlist) if watchlist is not None else Watchlist(),
        hibernating=_check_type("hibernating", pick("hibernating", False), bool),
        hibernation_started=_check_int("hibernationStarted", raw.get("hibernationStarted"), nullable=True),
        history=[HistoryEntry.from_dict(e) for e in history] if history else [],
    )
