"""
timer_engine.py — Wall-clock study timer.

Elapsed time is always recomputed from absolute timestamps (epoch ms from the
injected clock), never counted in ticks, so a process that was suspended or
restarted reports the right value the next time it is asked. The full state
is written to local storage on every transition and restored when an engine
is built for the same user.

    idle --start--> running --pause--> paused --resume--> running
    running|paused --finish--> idle (after one successful store write)
    any --reset--> idle (nothing written)
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError, field_validator

from studytracker.auth import UserIdentity
from studytracker.clock import now_ms, ms_to_iso, fmt_hms, format_duration
from studytracker.errors import PersistenceFailure
from studytracker.models.study_session import normalize_study_type
from studytracker.services.event_bus import SessionEvents, SessionFinished
from studytracker.services.session_writer import FinishedSession, SessionWriter

logger = logging.getLogger(__name__)

STORAGE_KEY_PREFIX = "timer-state"


class TimerPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class SessionDraft(BaseModel):
    course_id: str
    study_type: str = "other"
    notes: Optional[str] = None
    module_id: Optional[str] = None
    resume_from_session_id: Optional[str] = None
    resume_from_duration_seconds: Optional[int] = None
    resume_from_start_time: Optional[datetime] = None

    @field_validator("study_type", mode="before")
    @classmethod
    def _study_type(cls, v):
        return normalize_study_type(v)


class TimerState(BaseModel):
    phase: TimerPhase = TimerPhase.IDLE
    draft: Optional[SessionDraft] = None
    last_resume_ms: Optional[int] = None
    accumulated_ms: int = 0
    original_start_ms: Optional[int] = None


class FinishResult(BaseModel):
    record: dict
    duration_seconds: int
    resumed: bool
    message: str


def _round_seconds(ms: int) -> int:
    """Milliseconds to whole seconds, rounding half up."""
    return (ms + 500) // 1000


class TimerEngine:
    """One user's study timer."""

    def __init__(
        self,
        user: UserIdentity | None,
        storage,
        writer: SessionWriter,
        events: SessionEvents | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.user = user
        self.storage = storage
        self.writer = writer
        self.events = events
        self.clock = clock
        self.state = TimerState()
        # Bumped whenever the current draft is discarded or completed
        self._generation = 0
        self._restore()

    # ------------------------------------------------------------------
    @property
    def storage_key(self) -> str | None:
        if self.user is None:
            return None
        return f"{STORAGE_KEY_PREFIX}:{self.user.id}"

    @property
    def phase(self) -> TimerPhase:
        return self.state.phase

    @property
    def draft(self) -> SessionDraft | None:
        return self.state.draft

    def _authenticated(self, op: str) -> bool:
        if self.user is None:
            logger.info(f"Timer {op} skipped: no authenticated user")
            return False
        return True

    # ------------------------------------------------------------------
    def _restore(self):
        """Rehydrate a saved state so a running timer keeps accruing after a restart."""
        if self.user is None:
            return
        raw = self.storage.get(self.storage_key)
        if not raw:
            return
        try:
            saved = TimerState.model_validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.error(f"Discarding unreadable timer state for user {self.user.id}: {e}")
            self.storage.remove(self.storage_key)
            return
        if saved.phase == TimerPhase.IDLE or saved.draft is None:
            self.storage.remove(self.storage_key)
            return
        self.state = saved
        logger.info(f"Restored {saved.phase.value} timer for user {self.user.id}")

    def _save(self):
        if self.state.phase == TimerPhase.IDLE:
            self.storage.remove(self.storage_key)
        else:
            self.storage.set(self.storage_key, self.state.model_dump_json())

    # ------------------------------------------------------------------
    def elapsed_ms(self) -> int:
        state = self.state
        total = state.accumulated_ms
        if state.phase == TimerPhase.RUNNING and state.last_resume_ms is not None:
            total += max(0, self.clock() - state.last_resume_ms)
        return total

    def elapsed_seconds(self) -> int:
        """Whole seconds studied so far, recomputed from timestamps on every call."""
        return self.elapsed_ms() // 1000

    # ------------------------------------------------------------------
    def start(self, draft: SessionDraft) -> bool:
        """idle -> running. Returns False (and changes nothing) from any other phase."""
        if not self._authenticated("start"):
            return False
        if self.state.phase != TimerPhase.IDLE:
            return False

        now = self.clock()
        original_start = now
        if draft.resume_from_session_id and draft.resume_from_start_time is not None:
            original_start = int(draft.resume_from_start_time.timestamp() * 1000)

        self.state = TimerState(
            phase=TimerPhase.RUNNING,
            draft=draft,
            last_resume_ms=now,
            accumulated_ms=(draft.resume_from_duration_seconds or 0) * 1000,
            original_start_ms=original_start,
        )
        self._save()
        logger.info(
            f"Timer started for user {self.user.id} on course {draft.course_id}"
            + (f" (resuming {draft.resume_from_session_id})" if draft.resume_from_session_id else "")
        )
        return True

    def pause(self) -> bool:
        """running -> paused, banking the current interval."""
        if not self._authenticated("pause"):
            return False
        if self.state.phase != TimerPhase.RUNNING:
            return False
        now = self.clock()
        self.state.accumulated_ms += max(0, now - self.state.last_resume_ms)
        self.state.last_resume_ms = now
        self.state.phase = TimerPhase.PAUSED
        self._save()
        return True

    def resume(self) -> bool:
        """paused -> running."""
        if not self._authenticated("resume"):
            return False
        if self.state.phase != TimerPhase.PAUSED:
            return False
        self.state.last_resume_ms = self.clock()
        self.state.phase = TimerPhase.RUNNING
        self._save()
        return True

    def reset(self):
        """Discard the current session without saving anything."""
        if not self._authenticated("reset"):
            return
        self.state = TimerState()
        self._generation += 1
        self._save()

    def finish(self, as_new: bool = False) -> FinishResult | None:
        """
        Write the session to the store and go back to idle.

        On PersistenceFailure the timer keeps its state (still running or
        paused) so the user can retry, and the error propagates. That includes
        a resumed session whose record has since been deleted; `as_new=True`
        then saves the whole time as a new record instead. Returns None when
        there is nothing to finish, or when the draft was reset while the
        write was in flight.
        """
        if not self._authenticated("finish"):
            return None
        state = self.state
        if state.phase == TimerPhase.IDLE or state.draft is None:
            return None

        now = self.clock()
        running_ms = max(0, now - state.last_resume_ms) if state.phase == TimerPhase.RUNNING else 0
        total_seconds = _round_seconds(state.accumulated_ms) + _round_seconds(running_ms)
        draft = state.draft
        generation = self._generation

        finished = FinishedSession(
            user_id=self.user.id,
            course_id=draft.course_id,
            study_type=draft.study_type,
            notes=draft.notes,
            module_id=draft.module_id,
            original_start_ms=state.original_start_ms if state.original_start_ms is not None else now,
            end_ms=now,
            total_seconds=total_seconds,
            resume_from_session_id=None if as_new else draft.resume_from_session_id,
        )

        try:
            record = self.writer.write(finished)
        except PersistenceFailure:
            if generation != self._generation:
                logger.warning(f"Ignoring failed save for a timer that was already reset (user {self.user.id})")
                return None
            logger.error(f"Could not save session for user {self.user.id}; timer kept for retry")
            raise

        if generation != self._generation:
            logger.warning(f"Timer was reset while saving; leaving new state alone (user {self.user.id})")
            return None

        self.state = TimerState()
        self._generation += 1

        resumed = bool(finished.resume_from_session_id)
        session_id = record.get("id") if isinstance(record, dict) else None
        if self.events is not None:
            self.events.publish(SessionFinished(
                user_id=self.user.id,
                session_id=str(session_id) if session_id is not None else None,
                duration_seconds=total_seconds,
                resumed=resumed,
            ))

        result = FinishResult(
            record=record or {},
            duration_seconds=total_seconds,
            resumed=resumed,
            message=f"You studied for {format_duration(total_seconds)}.",
        )

        # The session is already in the store; a failed local cleanup must not undo that
        try:
            self._save()
        except Exception:
            logger.exception(f"Could not clear saved timer state for user {self.user.id}")
        return result

    # ------------------------------------------------------------------
    def snapshot(self) -> dict:
        """What a client needs to render the timer."""
        state = self.state
        elapsed = self.elapsed_seconds()
        return {
            "phase": state.phase.value,
            "elapsed_seconds": elapsed,
            "display": fmt_hms(elapsed),
            "draft": state.draft.model_dump(mode="json") if state.draft else None,
            "started_at": ms_to_iso(state.original_start_ms) if state.original_start_ms is not None else None,
        }


class TimerRegistry:
    """Keeps one TimerEngine per user so every client of that user shares the same timer."""

    def __init__(self, storage, writer: SessionWriter, events: SessionEvents | None = None,
                 clock: Callable[[], int] = now_ms):
        self.storage = storage
        self.writer = writer
        self.events = events
        self.clock = clock
        self._engines: dict[str, TimerEngine] = {}

    def for_user(self, user: UserIdentity) -> TimerEngine:
        engine = self._engines.get(user.id)
        if engine is None:
            engine = TimerEngine(user, self.storage, self.writer, self.events, clock=self.clock)
            self._engines[user.id] = engine
        return engine

    def forget(self, user_id: str):
        """Drop the in-memory engine; its saved state stays in storage."""
        self._engines.pop(user_id, None)
