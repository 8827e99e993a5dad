"""Read-only view of the results for quizzes the current author wrote."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Iterator

from ges_annex.constants.quiz_constants import DEFAULT_AUTHOR_ROLE
from ges_annex.core.errors import PersistenceError
from ges_annex.core.models import QuizDefinition, QuizResult
from ges_annex.core.services.content_store import ContentStore
from ges_annex.core.services.identity_provider import IdentityProvider, require_role
from ges_annex.core.services.subscription import Subscription

logger = logging.getLogger(__name__)


class ResultRows:
    """Restartable iterable of results, highest score first.

    Each iteration sorts the latest snapshot, so rows arriving between two
    passes are picked up. Equal scores keep their arrival order.
    """

    def __init__(self, source: Callable[[], list[QuizResult]]) -> None:
        self._source = source

    def __iter__(self) -> Iterator[QuizResult]:
        yield from sorted(self._source(), key=lambda result: -result.score)

    def __len__(self) -> int:
        return len(self._source())


class QuizResultsViewer:
    """Subscribes to one quiz's results at a time."""

    def __init__(
        self,
        content_store: ContentStore,
        identity: IdentityProvider,
        author_role: str = DEFAULT_AUTHOR_ROLE,
    ) -> None:
        self._store = content_store
        self._identity = identity
        self._author_role = author_role
        self._lock = Lock()
        self._selected_quiz_id: str | None = None
        self._results: list[QuizResult] = []
        self._subscription: Subscription | None = None
        self._listeners: dict[int, Callable[[], None]] = {}
        self._listener_counter = 0

    def authored_quizzes(self) -> list[QuizDefinition]:
        subject = require_role(self._identity, self._author_role, "view quiz results")
        try:
            quizzes = self._store.list_quizzes()
        except PersistenceError as exc:
            logger.error("Could not load quizzes for results: %s", exc)
            return []
        return [quiz for quiz in quizzes if quiz.creator_id == subject.id]

    def select_quiz(self, quiz_id: str) -> None:
        subject = require_role(self._identity, self._author_role, "view quiz results")
        self._unsubscribe()
        with self._lock:
            self._selected_quiz_id = quiz_id
            self._results = []
        try:
            subscription = self._store.subscribe_results(
                quiz_id, subject.id, lambda results: self._on_results(quiz_id, results)
            )
        except PersistenceError as exc:
            logger.error("Could not subscribe to results for quiz %s: %s", quiz_id, exc)
            self._notify()
            return
        with self._lock:
            self._subscription = subscription

    @property
    def selected_quiz_id(self) -> str | None:
        with self._lock:
            return self._selected_quiz_id

    def rows(self) -> ResultRows:
        return ResultRows(self._snapshot)

    def add_listener(self, callback: Callable[[], None]) -> Subscription:
        with self._lock:
            self._listener_counter += 1
            token = self._listener_counter
            self._listeners[token] = callback
        return Subscription(lambda: self._drop_listener(token))

    def close(self) -> None:
        self._unsubscribe()
        with self._lock:
            self._selected_quiz_id = None
            self._results = []

    def _snapshot(self) -> list[QuizResult]:
        with self._lock:
            return list(self._results)

    def _on_results(self, quiz_id: str, results: list[QuizResult]) -> None:
        with self._lock:
            if quiz_id != self._selected_quiz_id:
                return
            self._results = list(results)
        self._notify()

    def _unsubscribe(self) -> None:
        with self._lock:
            subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for callback in listeners:
            callback()

    def _drop_listener(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)
