"""Controller for a single subject's attempt at a quiz.

States run NOT_STARTED -> IN_PROGRESS -> COMPLETED. Only ``close`` leaves
COMPLETED, and it discards the attempt entirely. The countdown handle is
cancelled on every path out of IN_PROGRESS, so a late tick can never touch a
discarded attempt. Ticks from a superseded countdown are ignored by
generation number.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
import logging
from threading import RLock
from typing import Callable

from ges_annex.constants.quiz_constants import ANONYMOUS_EMAIL, COUNTDOWN_INTERVAL_SECONDS
from ges_annex.core.errors import PersistenceError, Unauthenticated
from ges_annex.core.models import (
    AttemptStatus,
    Question,
    QuizAttemptState,
    QuizDefinition,
    QuizResult,
    Subject,
)
from ges_annex.core.services.content_store import ContentStore
from ges_annex.core.services.countdown import Countdown, CountdownFactory, ThreadCountdown
from ges_annex.core.services.identity_provider import IdentityProvider
from ges_annex.core.services.subscription import Subscription

logger = logging.getLogger(__name__)

_PendingWrite = tuple[QuizAttemptState, QuizResult]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizSessionController:
    """Runs one quiz attempt at a time: sequencing, countdown, scoring, submission."""

    def __init__(
        self,
        content_store: ContentStore,
        identity: IdentityProvider,
        countdown_factory: CountdownFactory = ThreadCountdown,
        *,
        allow_anonymous_attempts: bool = False,
        tick_interval_seconds: float = COUNTDOWN_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = content_store
        self._identity = identity
        self._countdown_factory = countdown_factory
        self._allow_anonymous = allow_anonymous_attempts
        self._tick_interval = tick_interval_seconds
        self._clock = clock

        self._lock = RLock()
        self._state: QuizAttemptState | None = None
        self._countdown: Countdown | None = None
        self._generation: int = 0
        self._listeners: dict[int, Callable[[], None]] = {}
        self._listener_counter: int = 0

    # --- Lifecycle ---

    def start(self, quiz: QuizDefinition) -> None:
        with self._lock:
            if self._state is not None:
                raise RuntimeError("Close the current attempt before starting another quiz.")
            subject = self._identity.current_subject()
            if not self.is_authenticated(subject):
                raise Unauthenticated("Please sign in to take a quiz.")
            if not quiz.questions:
                raise ValueError("Quiz has no questions.")
            self._state = QuizAttemptState(
                quiz=quiz, time_remaining_seconds=quiz.timer_seconds, subject=subject
            )
            self._generation += 1
            generation = self._generation
            self._countdown = self._countdown_factory(
                self._tick_interval, lambda: self._on_countdown_tick(generation)
            )
            self._countdown.start()
        logger.info("Started attempt on quiz %s (%s)", quiz.id, quiz.title)
        self._notify()

    def select_answer(self, option: str) -> None:
        with self._lock:
            if not self._in_progress():
                return
            self._state.selected_answer = option
        self._notify()

    def advance(self) -> bool:
        """Score the selected answer and move on; False when nothing is selected."""
        with self._lock:
            if not self._in_progress():
                return False
            state = self._state
            if not state.selected_answer:
                return False
            if state.selected_answer == state.current_question.correct_answer:
                state.score += 1
            state.selected_answer = None
            pending = None
            if state.is_last_question:
                pending = self._submit_locked()
            else:
                state.current_question_index += 1
        self._persist(pending)
        self._notify()
        return True

    def submit(self) -> None:
        with self._lock:
            pending = self._submit_locked()
        self._persist(pending)
        self._notify()

    def tick(self) -> None:
        with self._lock:
            changed, pending = self._tick_locked()
        self._persist(pending)
        if changed:
            self._notify()

    def close(self) -> None:
        with self._lock:
            self._stop_countdown()
            had_attempt = self._state is not None
            self._state = None
            self._generation += 1
        if had_attempt:
            logger.info("Closed quiz attempt")
            self._notify()

    def __enter__(self) -> "QuizSessionController":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- Read access ---

    @property
    def status(self) -> AttemptStatus:
        with self._lock:
            if self._state is None:
                return AttemptStatus.NOT_STARTED
            if self._state.completed:
                return AttemptStatus.COMPLETED
            return AttemptStatus.IN_PROGRESS

    def snapshot(self) -> QuizAttemptState | None:
        """Copy of the attempt state, or None when no attempt exists."""
        with self._lock:
            return replace(self._state) if self._state is not None else None

    def get_quiz(self) -> QuizDefinition | None:
        with self._lock:
            return self._state.quiz if self._state else None

    def get_current_question(self) -> Question | None:
        with self._lock:
            return self._state.current_question if self._state else None

    def get_selected_answer(self) -> str | None:
        with self._lock:
            return self._state.selected_answer if self._state else None

    def get_score(self) -> int:
        with self._lock:
            return self._state.score if self._state else 0

    def get_time_remaining(self) -> int:
        with self._lock:
            return self._state.time_remaining_seconds if self._state else 0

    def get_result(self) -> QuizResult | None:
        with self._lock:
            return self._state.result if self._state else None

    def is_countdown_active(self) -> bool:
        with self._lock:
            return self._countdown is not None and self._countdown.is_active

    def is_authenticated(self, subject: Subject | None) -> bool:
        if subject is None:
            return False
        return self._allow_anonymous or not subject.is_anonymous

    # --- Change notifications ---

    def add_listener(self, callback: Callable[[], None]) -> Subscription:
        with self._lock:
            self._listener_counter += 1
            token = self._listener_counter
            self._listeners[token] = callback
        return Subscription(lambda: self._drop_listener(token))

    # --- Internals ---

    def _in_progress(self) -> bool:
        return self._state is not None and not self._state.completed

    def _on_countdown_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            changed, pending = self._tick_locked()
        self._persist(pending)
        if changed:
            self._notify()

    def _tick_locked(self) -> tuple[bool, _PendingWrite | None]:
        if not self._in_progress():
            return False, None
        state = self._state
        state.time_remaining_seconds = max(0, state.time_remaining_seconds - 1)
        if state.time_remaining_seconds > 0:
            return True, None
        logger.warning(
            "Time expired on quiz %s at question %d; submitting",
            state.quiz.id,
            state.current_question_index + 1,
        )
        return True, self._submit_locked()

    def _submit_locked(self) -> _PendingWrite | None:
        """Complete the attempt and return the result still to be stored, if any."""
        state = self._state
        if state is None or state.completed:
            return None
        self._stop_countdown()
        state.completed = True
        # Credit the subject who started the attempt, whoever is signed in now.
        subject = state.subject
        result = QuizResult(
            quiz_id=state.quiz.id,
            quiz_title=state.quiz.title,
            student_id=subject.id if subject else "",
            student_email=subject.display_email if subject else ANONYMOUS_EMAIL,
            score=state.score,
            total_questions=state.quiz.question_count,
            time_taken=state.time_taken,
            completed_at=self._clock(),
        )
        state.result = result
        logger.info(
            "Submitted quiz %s: %d/%d in %ds",
            state.quiz.id,
            result.score,
            result.total_questions,
            result.time_taken,
        )
        if not self.is_authenticated(subject):
            logger.info("Result for quiz %s kept locally; no signed-in subject", state.quiz.id)
            return None
        return state, result

    def _persist(self, pending: _PendingWrite | None) -> None:
        """Write a submitted result outside the controller lock."""
        if pending is None:
            return
        state, result = pending
        try:
            result_id = self._store.append_result(result)
        except PersistenceError as exc:
            logger.error("Could not save result for quiz %s: %s", result.quiz_id, exc)
            return
        with self._lock:
            if state.result is result:
                state.result = replace(result, id=result_id)

    def _stop_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for callback in listeners:
            callback()

    def _drop_listener(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)
