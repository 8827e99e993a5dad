"""Domain models for the GES Annex portal."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ges_annex.constants.quiz_constants import ANONYMOUS_EMAIL, OPTION_COUNT


@dataclass(slots=True, frozen=True)
class Question:
    """Multiple-choice question; correct_answer holds the text of one option."""

    question_text: str
    options: tuple[str, ...]
    correct_answer: str


@dataclass(slots=True, frozen=True)
class QuizDefinition:
    """A published quiz as stored in the content store."""

    id: str
    title: str
    timer_seconds: int
    questions: tuple[Question, ...]
    creator_id: str
    created_at: datetime

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass(slots=True, frozen=True)
class QuizResult:
    """Outcome of one completed attempt."""

    quiz_id: str
    quiz_title: str
    student_id: str
    student_email: str
    score: int
    total_questions: int
    time_taken: int
    completed_at: datetime
    id: str | None = None  # assigned by the content store


@dataclass(slots=True, frozen=True)
class Subject:
    """Identity of whoever is currently using the portal."""

    id: str
    email: str | None = None
    is_anonymous: bool = False
    roles: frozenset[str] = frozenset()

    @property
    def display_email(self) -> str:
        return self.email or ANONYMOUS_EMAIL

    def has_role(self, role: str) -> bool:
        return role in self.roles


class AttemptStatus(Enum):
    """Lifecycle of a quiz attempt."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(slots=True)
class QuizAttemptState:
    """Mutable state of the attempt owned by a session controller."""

    quiz: QuizDefinition
    time_remaining_seconds: int
    current_question_index: int = 0
    selected_answer: str | None = None
    score: int = 0
    completed: bool = False
    result: QuizResult | None = None
    subject: Subject | None = None

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self.current_question_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index == len(self.quiz.questions) - 1

    @property
    def time_taken(self) -> int:
        return self.quiz.timer_seconds - self.time_remaining_seconds


@dataclass(slots=True)
class QuestionDraft:
    """Editable question inside a quiz draft."""

    question_text: str = ""
    options: list[str] = field(default_factory=lambda: [""] * OPTION_COUNT)
    correct_answer: str = ""


@dataclass(slots=True)
class QuizDraft:
    """Quiz being written by an author; always holds at least one question."""

    title: str = ""
    timer_seconds: int = 0
    questions: list[QuestionDraft] = field(default_factory=lambda: [QuestionDraft()])


@dataclass(slots=True, frozen=True)
class NewsArticle:
    """News post published through the CMS as a markdown file."""

    slug: str
    title: str
    published_at: datetime
    body: str
    image: str | None = None
    image_alt: str | None = None


@dataclass(slots=True, frozen=True)
class LearningMaterial:
    """Entry in the static learning-material listings."""

    level: str
    subject: str
    title: str
    description: str
