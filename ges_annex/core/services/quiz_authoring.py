"""Workflow for drafting, validating, and publishing quiz definitions."""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
import logging
from threading import Lock
from typing import Callable

from ges_annex.constants.quiz_constants import DEFAULT_AUTHOR_ROLE, OPTION_COUNT
from ges_annex.core.errors import PermissionDenied, Unauthenticated, ValidationError
from ges_annex.core.models import Question, QuestionDraft, QuizDefinition, QuizDraft, Subject
from ges_annex.core.services.content_store import ContentStore
from ges_annex.core.services.identity_provider import IdentityProvider, require_role

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizAuthoringWorkflow:
    """Holds one in-memory draft and publishes it to the content store."""

    def __init__(
        self,
        content_store: ContentStore,
        identity: IdentityProvider,
        author_role: str = DEFAULT_AUTHOR_ROLE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = content_store
        self._identity = identity
        self._author_role = author_role
        self._clock = clock
        self._lock = Lock()
        self._draft = QuizDraft()

    # --- Access gating ---

    def require_author(self) -> Subject:
        """Return the current subject if it may author quizzes, else raise."""
        return require_role(self._identity, self._author_role, "author quizzes")

    def can_author(self) -> bool:
        try:
            self.require_author()
        except (Unauthenticated, PermissionDenied):
            return False
        return True

    # --- Draft editing ---

    def get_draft(self) -> QuizDraft:
        with self._lock:
            return deepcopy(self._draft)

    def get_question_count(self) -> int:
        with self._lock:
            return len(self._draft.questions)

    def get_question(self, index: int) -> QuestionDraft:
        with self._lock:
            self._check_index(index)
            return deepcopy(self._draft.questions[index])

    def set_title(self, title: str) -> None:
        with self._lock:
            self._draft.title = title

    def set_timer_seconds(self, seconds: int) -> None:
        with self._lock:
            self._draft.timer_seconds = seconds

    def add_question(self) -> int:
        """Append a blank question and return its index."""
        with self._lock:
            self._draft.questions.append(QuestionDraft())
            return len(self._draft.questions) - 1

    def remove_question(self, index: int) -> None:
        with self._lock:
            self._check_index(index)
            if len(self._draft.questions) == 1:
                raise ValidationError("A quiz must keep at least one question.", field="questions")
            self._draft.questions.pop(index)

    def update_question(
        self,
        index: int,
        *,
        question_text: str | None = None,
        options: list[str] | None = None,
        correct_answer: str | None = None,
    ) -> None:
        with self._lock:
            self._check_index(index)
            question = self._draft.questions[index]
            if question_text is not None:
                question.question_text = question_text
            if options is not None:
                if len(options) != OPTION_COUNT:
                    raise ValidationError(
                        f"Each question must have exactly {OPTION_COUNT} options.",
                        field=f"questions[{index}].options",
                    )
                question.options = list(options)
            if correct_answer is not None:
                question.correct_answer = correct_answer

    def load_draft(self, draft: QuizDraft) -> None:
        """Replace the draft, e.g. with one parsed from a quiz file."""
        if not draft.questions:
            raise ValidationError("A quiz must contain at least one question.", field="questions")
        with self._lock:
            self._draft = deepcopy(draft)

    def reset(self) -> None:
        with self._lock:
            self._draft = QuizDraft()

    # --- Validation and publishing ---

    def validate(self) -> tuple[str, int, tuple[Question, ...]]:
        """Check the draft and return its cleaned title, timer, and questions."""
        with self._lock:
            return _validate_draft(self._draft)

    def save(self) -> str:
        """Publish the draft for the current author and clear it; returns the new quiz id."""
        subject = self.require_author()
        with self._lock:
            draft = self._draft
            definition = build_definition(draft, subject.id, self._clock())
        quiz_id = self._store.create_quiz(definition)
        with self._lock:
            # A draft loaded while the quiz was being written is kept.
            if self._draft is draft:
                self._draft = QuizDraft()
        logger.info("Author %s published quiz %s (%s)", subject.id, quiz_id, definition.title)
        return quiz_id

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._draft.questions):
            raise IndexError(f"Question index {index} out of range")


def build_definition(draft: QuizDraft, creator_id: str, created_at: datetime) -> QuizDefinition:
    """Validate ``draft`` and turn it into an unsaved quiz definition."""
    title, timer_seconds, questions = _validate_draft(draft)
    return QuizDefinition(
        id="",
        title=title,
        timer_seconds=timer_seconds,
        questions=questions,
        creator_id=creator_id,
        created_at=created_at,
    )


def _validate_draft(draft: QuizDraft) -> tuple[str, int, tuple[Question, ...]]:
    title = draft.title.strip()
    if not title:
        raise ValidationError("Quiz title must not be empty.", field="title")
    if isinstance(draft.timer_seconds, bool) or not isinstance(draft.timer_seconds, int):
        raise ValidationError("Timer must be a whole number of seconds.", field="timer_seconds")
    if draft.timer_seconds <= 0:
        raise ValidationError("Timer must be a positive number of seconds.", field="timer_seconds")
    if not draft.questions:
        raise ValidationError("A quiz must contain at least one question.", field="questions")
    questions = tuple(
        _validate_question(index, question) for index, question in enumerate(draft.questions)
    )
    return title, draft.timer_seconds, questions


def _validate_question(index: int, question: QuestionDraft) -> Question:
    prefix = f"questions[{index}]"
    number = index + 1
    text = question.question_text.strip()
    if not text:
        raise ValidationError(f"Question {number} needs question text.", field=f"{prefix}.question_text")
    if len(question.options) != OPTION_COUNT:
        raise ValidationError(
            f"Question {number} must have exactly {OPTION_COUNT} options.", field=f"{prefix}.options"
        )
    options = tuple(option.strip() for option in question.options)
    for option_index, option in enumerate(options):
        if not option:
            raise ValidationError(
                f"Question {number}: option {option_index + 1} must not be empty.",
                field=f"{prefix}.options[{option_index}]",
            )
    correct_answer = question.correct_answer.strip()
    if not correct_answer:
        raise ValidationError(
            f"Question {number} needs a correct answer.", field=f"{prefix}.correct_answer"
        )
    if correct_answer not in options:
        raise ValidationError(
            f"Question {number}: the correct answer must match one of the options.",
            field=f"{prefix}.correct_answer",
        )
    return Question(question_text=text, options=options, correct_answer=correct_answer)
