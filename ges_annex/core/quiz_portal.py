"""Facade tying the quiz services to one client's identity session."""

from __future__ import annotations

import logging

from ges_annex.constants.quiz_constants import DEFAULT_AUTHOR_ROLE
from ges_annex.core.models import (
    AttemptStatus,
    QuizAttemptState,
    QuizDefinition,
    QuizResult,
    Subject,
)
from ges_annex.core.services.content_store import ContentStore
from ges_annex.core.services.countdown import CountdownFactory, ThreadCountdown
from ges_annex.core.services.identity_provider import IdentityProvider
from ges_annex.core.services.quiz_authoring import QuizAuthoringWorkflow
from ges_annex.core.services.quiz_catalog import QuizCatalog
from ges_annex.core.services.quiz_session import QuizSessionController
from ges_annex.core.services.results_viewer import QuizResultsViewer

logger = logging.getLogger(__name__)


class QuizPortal:
    """Facade for quiz services: Catalog, Session, Authoring, and Results."""

    def __init__(
        self,
        content_store: ContentStore,
        identity: IdentityProvider,
        countdown_factory: CountdownFactory = ThreadCountdown,
        *,
        allow_anonymous_attempts: bool = False,
        author_role: str = DEFAULT_AUTHOR_ROLE,
        catalog: QuizCatalog | None = None,
    ) -> None:
        self.identity = identity
        # A catalog passed in is shared with other portals and outlives this one.
        self._owns_catalog = catalog is None
        self.catalog = catalog if catalog is not None else QuizCatalog(content_store)
        self.session = QuizSessionController(
            content_store,
            identity,
            countdown_factory,
            allow_anonymous_attempts=allow_anonymous_attempts,
        )
        self.authoring = QuizAuthoringWorkflow(content_store, identity, author_role=author_role)
        self.results = QuizResultsViewer(content_store, identity, author_role=author_role)
        self._last_subject_id: str | None = None
        self._identity_subscription = identity.subscribe(self._on_subject_changed)

    # --- Identity Delegation ---

    def current_subject(self) -> Subject | None:
        return self.identity.current_subject()

    def sign_in(self, email: str, password: str) -> Subject:
        return self.identity.sign_in(email, password)

    def sign_up(self, email: str, password: str) -> Subject:
        return self.identity.sign_up(email, password)

    def sign_out(self) -> None:
        self.identity.sign_out()

    def can_author(self) -> bool:
        return self.authoring.can_author()

    # --- Catalog Delegation ---

    def list_quizzes(self) -> list[QuizDefinition]:
        return self.catalog.get_quizzes()

    def get_quiz(self, quiz_id: str) -> QuizDefinition:
        quiz = self.catalog.find(quiz_id)
        if quiz is None:
            raise KeyError(f"Unknown quiz {quiz_id}")
        return quiz

    # --- Session Delegation ---

    def start_quiz(self, quiz_id: str) -> QuizDefinition:
        quiz = self.get_quiz(quiz_id)
        self.session.start(quiz)
        return quiz

    def select_answer(self, option: str) -> None:
        self.session.select_answer(option)

    def advance(self) -> bool:
        return self.session.advance()

    def submit_attempt(self) -> None:
        self.session.submit()

    def close_attempt(self) -> None:
        self.session.close()

    def get_attempt(self) -> QuizAttemptState | None:
        return self.session.snapshot()

    def get_attempt_status(self) -> AttemptStatus:
        return self.session.status

    # --- Results Delegation ---

    def results_for(self, quiz_id: str) -> list[QuizResult]:
        self.results.select_quiz(quiz_id)
        return list(self.results.rows())

    # --- Teardown ---

    def close(self) -> None:
        self._identity_subscription.unsubscribe()
        self.session.close()
        self.results.close()
        if self._owns_catalog:
            self.catalog.close()

    def _on_subject_changed(self, subject: Subject | None) -> None:
        subject_id = subject.id if subject else None
        if subject_id == self._last_subject_id:
            return
        if self._last_subject_id is not None:
            # Attempts and results belong to the subject who opened them.
            self.session.close()
            self.results.close()
        self._last_subject_id = subject_id
        logger.info("Portal subject is now %s", subject.display_email if subject else "nobody")
