"""Shared pytest fixtures for the portal tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from ges_annex.core.errors import PersistenceError
from ges_annex.core.models import Question, QuizDefinition, QuizResult
from ges_annex.core.services.content_store import InMemoryContentStore
from ges_annex.core.services.countdown import Countdown
from ges_annex.core.services.identity_provider import AccountDirectory, IdentityProvider

AUTHOR_EMAIL = "ama.mensah@school.edu.gh"
STUDENT_EMAIL = "kofi@school.edu.gh"
PASSWORD = "secret123"


class ManualCountdown(Countdown):
    """Countdown that only ticks when a test calls ``fire``."""

    def __init__(self, interval_seconds: float, on_tick: Callable[[], None]) -> None:
        self.interval_seconds = interval_seconds
        self.on_tick = on_tick
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def is_active(self) -> bool:
        return self.started and not self.cancelled

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            self.on_tick()


class ManualCountdownFactory:
    """Records every countdown the controller creates."""

    def __init__(self) -> None:
        self.created: list[ManualCountdown] = []

    def __call__(self, interval_seconds: float, on_tick: Callable[[], None]) -> ManualCountdown:
        countdown = ManualCountdown(interval_seconds, on_tick)
        self.created.append(countdown)
        return countdown

    @property
    def latest(self) -> ManualCountdown:
        return self.created[-1]


class FailingResultStore(InMemoryContentStore):
    """Store whose result writes always fail."""

    def append_result(self, result: QuizResult) -> str:
        raise PersistenceError("results collection is read-only")


def make_quiz(
    answers: list[str],
    timer_seconds: int = 30,
    creator_id: str = "author-1",
    title: str = "Sample quiz",
) -> QuizDefinition:
    """Build a quiz whose questions have options A-D and the given correct answers."""
    questions = tuple(
        Question(
            question_text=f"Question {index + 1}",
            options=("A", "B", "C", "D"),
            correct_answer=answer,
        )
        for index, answer in enumerate(answers)
    )
    return QuizDefinition(
        id="",
        title=title,
        timer_seconds=timer_seconds,
        questions=questions,
        creator_id=creator_id,
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def store() -> InMemoryContentStore:
    return InMemoryContentStore(app_id="test-app")


@pytest.fixture
def directory() -> AccountDirectory:
    return AccountDirectory(bcrypt_rounds=4, author_emails=[AUTHOR_EMAIL])


@pytest.fixture
def countdowns() -> ManualCountdownFactory:
    return ManualCountdownFactory()


@pytest.fixture
def student_identity(directory: AccountDirectory) -> IdentityProvider:
    identity = IdentityProvider(directory)
    identity.sign_up(STUDENT_EMAIL, PASSWORD)
    return identity


@pytest.fixture
def author_identity(directory: AccountDirectory) -> IdentityProvider:
    identity = IdentityProvider(directory)
    identity.sign_up(AUTHOR_EMAIL, PASSWORD)
    return identity


@pytest.fixture
def stored_quiz(store: InMemoryContentStore, author_identity: IdentityProvider) -> Callable[..., QuizDefinition]:
    """Store a quiz credited to the signed-in author and return it with its id."""
    author_id = author_identity.current_subject().id

    def _store(answers: list[str], timer_seconds: int = 30) -> QuizDefinition:
        quiz_id = store.create_quiz(make_quiz(answers, timer_seconds, creator_id=author_id))
        return store.get_quiz(quiz_id)

    return _store
