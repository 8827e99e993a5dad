"""Content store contract plus in-memory and JSON-file implementations.

The store is the portal's document database: quiz definitions and quiz
results are appended to it and read back as live-updating lists. Listeners
receive a full snapshot immediately on subscription and again after each
relevant write. They are always invoked outside the store lock so they can
call back into the store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Callable
from uuid import uuid4

from ges_annex.core.errors import PersistenceError
from ges_annex.core.models import Question, QuizDefinition, QuizResult
from ges_annex.core.services.subscription import Subscription

logger = logging.getLogger(__name__)

QuizListener = Callable[[list[QuizDefinition]], None]
ResultListener = Callable[[list[QuizResult]], None]


class ContentStore(ABC):
    """Abstract document store for quizzes and results."""

    @abstractmethod
    def list_quizzes(self) -> list[QuizDefinition]: ...

    @abstractmethod
    def subscribe_quizzes(self, listener: QuizListener) -> Subscription: ...

    @abstractmethod
    def create_quiz(self, definition: QuizDefinition) -> str:
        """Store ``definition`` under a fresh id and return that id."""

    @abstractmethod
    def append_result(self, result: QuizResult) -> str: ...

    @abstractmethod
    def list_results(self, quiz_id: str, author_id: str) -> list[QuizResult]:
        """Results for ``quiz_id``, empty unless ``author_id`` created the quiz."""

    @abstractmethod
    def subscribe_results(
        self, quiz_id: str, author_id: str, listener: ResultListener
    ) -> Subscription: ...

    def get_quiz(self, quiz_id: str) -> QuizDefinition | None:
        return next((quiz for quiz in self.list_quizzes() if quiz.id == quiz_id), None)


class InMemoryContentStore(ContentStore):
    """Thread-safe store keeping documents in process memory."""

    def __init__(self, app_id: str = "default-app-id") -> None:
        self.app_id = app_id
        self._lock = Lock()
        self._quizzes: dict[str, QuizDefinition] = {}
        self._results: list[QuizResult] = []
        self._quiz_listeners: dict[int, QuizListener] = {}
        self._result_listeners: dict[int, tuple[str, str, ResultListener]] = {}
        self._listener_counter: int = 0

    # --- Quizzes ---

    def list_quizzes(self) -> list[QuizDefinition]:
        with self._lock:
            return list(self._quizzes.values())

    def get_quiz(self, quiz_id: str) -> QuizDefinition | None:
        with self._lock:
            return self._quizzes.get(quiz_id)

    def subscribe_quizzes(self, listener: QuizListener) -> Subscription:
        with self._lock:
            token = self._next_token()
            self._quiz_listeners[token] = listener
            snapshot = list(self._quizzes.values())
        _notify(listener, snapshot)
        return Subscription(lambda: self._drop_quiz_listener(token))

    def create_quiz(self, definition: QuizDefinition) -> str:
        with self._lock:
            quiz_id = uuid4().hex
            stored = replace(definition, id=quiz_id)
            quizzes = dict(self._quizzes)
            quizzes[quiz_id] = stored
            self._persist(quizzes, self._results)
            self._quizzes = quizzes
            snapshot = list(quizzes.values())
            listeners = list(self._quiz_listeners.values())
        logger.info("Stored quiz %s (%s)", quiz_id, stored.title)
        for listener in listeners:
            _notify(listener, snapshot)
        return quiz_id

    # --- Results ---

    def append_result(self, result: QuizResult) -> str:
        with self._lock:
            result_id = uuid4().hex
            stored = replace(result, id=result_id)
            results = [*self._results, stored]
            self._persist(self._quizzes, results)
            self._results = results
            pending = [
                (listener, self._results_for(quiz_id, author_id))
                for quiz_id, author_id, listener in self._result_listeners.values()
                if quiz_id == stored.quiz_id
            ]
        logger.info("Stored result %s for quiz %s", result_id, stored.quiz_id)
        for listener, snapshot in pending:
            _notify(listener, snapshot)
        return result_id

    def list_results(self, quiz_id: str, author_id: str) -> list[QuizResult]:
        with self._lock:
            return self._results_for(quiz_id, author_id)

    def subscribe_results(
        self, quiz_id: str, author_id: str, listener: ResultListener
    ) -> Subscription:
        with self._lock:
            token = self._next_token()
            self._result_listeners[token] = (quiz_id, author_id, listener)
            snapshot = self._results_for(quiz_id, author_id)
        _notify(listener, snapshot)
        return Subscription(lambda: self._drop_result_listener(token))

    # --- Internals ---

    def _results_for(self, quiz_id: str, author_id: str) -> list[QuizResult]:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None or quiz.creator_id != author_id:
            return []
        return [result for result in self._results if result.quiz_id == quiz_id]

    def _persist(
        self, quizzes: dict[str, QuizDefinition], results: list[QuizResult]
    ) -> None:
        """Hook for durable subclasses; raising aborts the write."""

    def _load(self, quizzes: list[QuizDefinition], results: list[QuizResult]) -> None:
        with self._lock:
            self._quizzes = {quiz.id: quiz for quiz in quizzes}
            self._results = list(results)

    def _next_token(self) -> int:
        self._listener_counter += 1
        return self._listener_counter

    def _drop_quiz_listener(self, token: int) -> None:
        with self._lock:
            self._quiz_listeners.pop(token, None)

    def _drop_result_listener(self, token: int) -> None:
        with self._lock:
            self._result_listeners.pop(token, None)


class JsonFileContentStore(InMemoryContentStore):
    """In-memory store mirrored to a JSON document, partitioned by app id.

    Other apps' partitions in the same file are preserved on every write.
    """

    def __init__(self, path: Path, app_id: str = "default-app-id") -> None:
        super().__init__(app_id=app_id)
        self.path = Path(path)
        self._document: dict[str, Any] = {"apps": {}}
        if self.path.exists():
            self._read_document()

    def _read_document(self) -> None:
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            partition = document.get("apps", {}).get(self.app_id, {})
            quizzes = [_quiz_from_dict(item) for item in partition.get("quizzes", [])]
            results = [_result_from_dict(item) for item in partition.get("results", [])]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise PersistenceError(f"Could not read content store at {self.path}: {exc}") from exc
        self._document = document
        self._load(quizzes, results)
        logger.info(
            "Loaded %d quizzes and %d results from %s", len(quizzes), len(results), self.path
        )

    def _persist(
        self, quizzes: dict[str, QuizDefinition], results: list[QuizResult]
    ) -> None:
        apps = dict(self._document.get("apps", {}))
        apps[self.app_id] = {
            "quizzes": [_quiz_to_dict(quiz) for quiz in quizzes.values()],
            "results": [_result_to_dict(result) for result in results],
        }
        document = {**self._document, "apps": apps}
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as exc:
            raise PersistenceError(f"Could not write content store at {self.path}: {exc}") from exc
        self._document = document


def _notify(listener: Callable[[list[Any]], None], snapshot: list[Any]) -> None:
    try:
        listener(snapshot)
    except Exception:
        logger.exception("Content store listener %r failed", listener)


def _quiz_to_dict(quiz: QuizDefinition) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "timerSeconds": quiz.timer_seconds,
        "questions": [
            {
                "questionText": question.question_text,
                "options": list(question.options),
                "correctAnswer": question.correct_answer,
            }
            for question in quiz.questions
        ],
        "creatorId": quiz.creator_id,
        "createdAt": quiz.created_at.isoformat(),
    }


def _quiz_from_dict(data: dict[str, Any]) -> QuizDefinition:
    return QuizDefinition(
        id=data["id"],
        title=data["title"],
        timer_seconds=int(data["timerSeconds"]),
        questions=tuple(
            Question(
                question_text=item["questionText"],
                options=tuple(item["options"]),
                correct_answer=item["correctAnswer"],
            )
            for item in data["questions"]
        ),
        creator_id=data["creatorId"],
        created_at=datetime.fromisoformat(data["createdAt"]),
    )


def _result_to_dict(result: QuizResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "quizId": result.quiz_id,
        "quizTitle": result.quiz_title,
        "studentId": result.student_id,
        "studentEmail": result.student_email,
        "score": result.score,
        "totalQuestions": result.total_questions,
        "timeTaken": result.time_taken,
        "completedAt": result.completed_at.isoformat(),
    }


def _result_from_dict(data: dict[str, Any]) -> QuizResult:
    return QuizResult(
        id=data.get("id"),
        quiz_id=data["quizId"],
        quiz_title=data["quizTitle"],
        student_id=data["studentId"],
        student_email=data["studentEmail"],
        score=int(data["score"]),
        total_questions=int(data["totalQuestions"]),
        time_taken=int(data["timeTaken"]),
        completed_at=datetime.fromisoformat(data["completedAt"]),
    )
