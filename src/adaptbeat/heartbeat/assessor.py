"""Interest assessment - how often should the agent wake up?

The assessor looks at the current heartbeat state plus what the last cycle
found, and picks an interest level and polling interval. Rules are checked
in order and the first match wins:

1. Replies or something interesting this cycle   -> high,   5 min
2. Tracked post made under 2h ago                 -> high,   30 min
3. Human message under 2h ago                     -> medium, 30 min
4. Pending tasks on the watchlist                 -> medium, 120 min
5. Quiet cycle, human seen within 24h             -> low,    120 min
6. No activity at all for over 48h                -> none,   1440 min (hibernate)
7. Anything else                                  -> low,    480 min

Each level has a band of intervals; which end of the band a rule picks
tunes urgency within the level.
"""

from dataclasses import dataclass, field

from adaptbeat.heartbeat.state import HeartbeatState, InterestLevel, now_ms

# Interval bands per level, in minutes
INTERVALS: dict[InterestLevel, tuple[int, int]] = {
    InterestLevel.HIGH: (5, 30),
    InterestLevel.MEDIUM: (30, 120),
    InterestLevel.LOW: (120, 480),
    InterestLevel.NONE: (480, 1440),
}

HIBERNATION_THRESHOLD_HOURS = 48
WAKE_UP_BOOST_MINUTES = 15
RECENT_POST_HOURS = 2
RECENT_HUMAN_HOURS = 2
QUIET_DAY_HOURS = 24

# Hours reported when no activity timestamp exists at all
NO_ACTIVITY_HOURS = 999

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE


@dataclass
class AssessmentContext:
    """What a heartbeat cycle found."""
    found_replies: int = 0
    found_interesting: bool = False
    found_nothing: bool = False
    error: bool = False  # Informational; no rule consults it
    actions: list[str] = field(default_factory=list)


@dataclass
class InterestAssessment:
    """Assessor output: the level to adopt and the next interval."""
    level: InterestLevel
    reason: str
    interval: int
    should_hibernate: bool = False


def hours_since(timestamp: int, now: int) -> float:
    return (now - timestamp) / MS_PER_HOUR


def hours_since_activity(state: HeartbeatState, now: int) -> float:
    """Hours since the most recent human message, check, post or beat."""
    activities = [
        t for t in (
            state.last_human_message,
            state.last_moltbook_check,
            state.last_moltbook_post,
            state.last_beat,
        )
        if t is not None
    ]
    if not activities:
        return NO_ACTIVITY_HOURS
    return hours_since(max(activities), now)


def assess_interest(
    state: HeartbeatState,
    context: AssessmentContext,
    now: int | None = None,
) -> InterestAssessment:
    """Decide the interest level and polling interval for the next cycle."""
    now = now_ms() if now is None else now

    if context.found_replies > 0 or context.found_interesting:
        if context.found_replies > 0:
            reason = f"Got {context.found_replies} new replies - watching for conversation"
        else:
            reason = "Found something interesting"
        return InterestAssessment(
            level=InterestLevel.HIGH,
            reason=reason,
            interval=INTERVALS[InterestLevel.HIGH][0],
        )

    if state.watchlist.moltbook_post_ids:
        hours_since_post = (
            hours_since(state.last_moltbook_post, now)
            if state.last_moltbook_post is not None
            else NO_ACTIVITY_HOURS
        )
        if hours_since_post < RECENT_POST_HOURS:
            return InterestAssessment(
                level=InterestLevel.HIGH,
                reason=f"Posted {round(hours_since_post * 60)}min ago - watching for engagement",
                interval=INTERVALS[InterestLevel.HIGH][1],
            )

    if state.last_human_message is not None:
        if hours_since(state.last_human_message, now) < RECENT_HUMAN_HOURS:
            return InterestAssessment(
                level=InterestLevel.MEDIUM,
                reason="Human was recently active",
                interval=INTERVALS[InterestLevel.MEDIUM][0],
            )

    if state.watchlist.pending_tasks:
        return InterestAssessment(
            level=InterestLevel.MEDIUM,
            reason=f"{len(state.watchlist.pending_tasks)} pending tasks",
            interval=INTERVALS[InterestLevel.MEDIUM][1],
        )

    if context.found_nothing and state.last_human_message is not None:
        if hours_since(state.last_human_message, now) < QUIET_DAY_HOURS:
            return InterestAssessment(
                level=InterestLevel.LOW,
                reason="Quiet day, staying available",
                interval=INTERVALS[InterestLevel.LOW][0],
            )

    idle_hours = hours_since_activity(state, now)
    if idle_hours > HIBERNATION_THRESHOLD_HOURS:
        return InterestAssessment(
            level=InterestLevel.NONE,
            reason=f"No activity for {round(idle_hours)}h - consider hibernating",
            interval=INTERVALS[InterestLevel.NONE][1],
            should_hibernate=True,
        )

    return InterestAssessment(
        level=InterestLevel.LOW,
        reason="Nothing specific to watch for",
        interval=INTERVALS[InterestLevel.LOW][1],
    )
