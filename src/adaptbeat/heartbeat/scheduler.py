"""Adaptive heartbeat scheduler.

Decides whether an agent should run a check cycle now, applies interest
assessments to its state, and reacts to human activity.

One cycle, driven by the caller:

    heartbeat = AdaptiveHeartbeat(HeartbeatStateStore())
    state = heartbeat.load("main")
    if heartbeat.should_beat(state):
        ...check inboxes, replies, posts...
        assessment = assess_interest(state, context)
        state = heartbeat.record_beat("main", state, assessment, "schedule")

Callers should keep using the state returned by the previous call rather
than re-loading, so a single caller always sees monotonic updates.
"""

import logging
from dataclasses import replace

from adaptbeat.heartbeat.assessor import (
    MS_PER_MINUTE,
    WAKE_UP_BOOST_MINUTES,
    AssessmentContext,
    InterestAssessment,
    assess_interest,
)
from adaptbeat.heartbeat.state import (
    HISTORY_LIMIT,
    HeartbeatState,
    HistoryEntry,
    InterestLevel,
    now_ms,
)
from adaptbeat.heartbeat.store import HeartbeatStateStore

logger = logging.getLogger(__name__)

# Only pull a beat forward for a fresh human message if it is this far out
EARLY_BEAT_MIN_WAIT_MINUTES = 30


def should_beat(state: HeartbeatState, now: int | None = None) -> bool:
    """Check whether the agent should run a check cycle now.

    Hibernating agents only wake for a human message newer than the start
    of hibernation. Otherwise the scheduled next_beat decides, except that
    a human message within the wake-up window overrides a wait of more
    than 30 minutes.
    """
    now = now_ms() if now is None else now

    if state.hibernating:
        if state.last_human_message is not None and state.hibernation_started is not None:
            return state.last_human_message > state.hibernation_started
        return False

    if now >= state.next_beat:
        return True

    if state.last_human_message is not None:
        minutes_since_human = (now - state.last_human_message) / MS_PER_MINUTE
        minutes_until_beat = (state.next_beat - now) / MS_PER_MINUTE
        if (
            minutes_since_human < WAKE_UP_BOOST_MINUTES
            and minutes_until_beat > EARLY_BEAT_MIN_WAIT_MINUTES
        ):
            return True

    return False


class AdaptiveHeartbeat:
    """Heartbeat scheduling on top of an injected state store."""

    def __init__(self, store: HeartbeatStateStore):
        self.store = store

    def load(self, agent_id: str | None, now: int | None = None) -> HeartbeatState:
        return self.store.load(agent_id, now)

    def should_beat(self, state: HeartbeatState, now: int | None = None) -> bool:
        return should_beat(state, now)

    def record_beat(
        self,
        agent_id: str | None,
        state: HeartbeatState,
        assessment: InterestAssessment,
        trigger: str,
        now: int | None = None,
    ) -> HeartbeatState:
        """Apply an assessment to the state, persist it, and return it."""
        now = now_ms() if now is None else now
        level_changed = state.interest_level != assessment.level
        hibernate = bool(assessment.should_hibernate)

        entry = HistoryEntry(
            timestamp=now,
            trigger=trigger,
            interval_set=assessment.interval,
            interest_level=assessment.level,
            reason=assessment.reason,
        )
        history = [*state.history, entry][-HISTORY_LIMIT:]

        next_state = replace(
            state,
            last_beat=now,
            next_beat=now + assessment.interval * MS_PER_MINUTE,
            current_interval=assessment.interval,
            interest_level=assessment.level,
            interest_reason=assessment.reason,
            interest_since=now if level_changed else state.interest_since,
            hibernating=hibernate,
            hibernation_started=now if hibernate else None,
            history=history,
        )

        if hibernate and not state.hibernating:
            logger.info(f"Agent {agent_id!r} entering hibernation: {assessment.reason}")
        logger.debug(
            f"Beat for {agent_id!r} ({trigger}): {assessment.level.value}, "
            f"next in {assessment.interval}min"
        )

        self.store.save(agent_id, next_state)
        return next_state

    def run_cycle(
        self,
        agent_id: str | None,
        context: AssessmentContext,
        trigger: str = "schedule",
        now: int | None = None,
    ) -> tuple[HeartbeatState, InterestAssessment]:
        """Assess the agent's cached state against a cycle and record it."""
        now = now_ms() if now is None else now
        state = self.store.load(agent_id, now)
        assessment = assess_interest(state, context, now)
        return self.record_beat(agent_id, state, assessment, trigger, now), assessment

    def record_human_activity(self, agent_id: str | None, now: int | None = None) -> None:
        """Note a human message: wake from hibernation and check soon.

        Bypasses assessment and history. Never raises.
        """
        try:
            now = now_ms() if now is None else now
            state = self.store.load(agent_id, now)
            state.last_human_message = now

            if state.hibernating:
                state.hibernating = False
                state.hibernation_started = None
                state.interest_level = InterestLevel.MEDIUM
                state.interest_reason = "Woke from hibernation - human is back"
                logger.info(f"Agent {agent_id!r} woke from hibernation")

            minutes_until_beat = (state.next_beat - now) / MS_PER_MINUTE
            if minutes_until_beat > WAKE_UP_BOOST_MINUTES:
                state.next_beat = now + WAKE_UP_BOOST_MINUTES * MS_PER_MINUTE
                state.current_interval = WAKE_UP_BOOST_MINUTES

            self.store.save(agent_id, state)
        except Exception as e:
            logger.warning(f"Failed to record human activity for {agent_id!r}: {e}")
