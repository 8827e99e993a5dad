"""Live list of published quizzes."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable

from ges_annex.core.errors import PersistenceError
from ges_annex.core.models import QuizDefinition
from ges_annex.core.services.content_store import ContentStore
from ges_annex.core.services.subscription import Subscription

logger = logging.getLogger(__name__)


class QuizCatalog:
    """Mirrors the store's quiz list; a failed read leaves it empty."""

    def __init__(self, content_store: ContentStore) -> None:
        self._lock = Lock()
        self._quizzes: list[QuizDefinition] = []
        self._listeners: dict[int, Callable[[], None]] = {}
        self._listener_counter = 0
        self._subscription: Subscription | None = None
        try:
            self._subscription = content_store.subscribe_quizzes(self._on_quizzes)
        except PersistenceError as exc:
            logger.error("Could not load quiz list: %s", exc)

    def get_quizzes(self) -> list[QuizDefinition]:
        with self._lock:
            return list(self._quizzes)

    def find(self, quiz_id: str) -> QuizDefinition | None:
        with self._lock:
            return next((quiz for quiz in self._quizzes if quiz.id == quiz_id), None)

    def add_listener(self, callback: Callable[[], None]) -> Subscription:
        with self._lock:
            self._listener_counter += 1
            token = self._listener_counter
            self._listeners[token] = callback
        return Subscription(lambda: self._drop_listener(token))

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_quizzes(self, quizzes: list[QuizDefinition]) -> None:
        with self._lock:
            self._quizzes = list(quizzes)
            listeners = list(self._listeners.values())
        for callback in listeners:
            callback()

    def _drop_listener(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)
