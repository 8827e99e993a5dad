"""Tests for the quiz results viewer."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ges_annex.core.errors import PermissionDenied, Unauthenticated
from ges_annex.core.models import QuizResult
from ges_annex.core.services.identity_provider import IdentityProvider
from ges_annex.core.services.results_viewer import QuizResultsViewer

from conftest import make_quiz


def _result(quiz_id: str, email: str, score: int) -> QuizResult:
    return QuizResult(
        quiz_id=quiz_id,
        quiz_title="Sample quiz",
        student_id=email,
        student_email=email,
        score=score,
        total_questions=5,
        time_taken=12,
        completed_at=datetime(2025, 3, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def viewer(store, author_identity):
    viewer = QuizResultsViewer(store, author_identity)
    yield viewer
    viewer.close()


def test_rows_sorted_by_score_with_stable_ties(viewer, store, stored_quiz):
    quiz = stored_quiz(["A"])
    for email, score in (("ama", 2), ("kwame", 5), ("esi", 2), ("yaw", 4)):
        store.append_result(_result(quiz.id, email, score))

    viewer.select_quiz(quiz.id)

    assert [row.student_email for row in viewer.rows()] == ["kwame", "yaw", "ama", "esi"]


def test_rows_are_restartable_and_live(viewer, store, stored_quiz):
    quiz = stored_quiz(["A"])
    store.append_result(_result(quiz.id, "ama", 1))
    viewer.select_quiz(quiz.id)
    rows = viewer.rows()

    assert [row.score for row in rows] == [1]
    store.append_result(_result(quiz.id, "kwame", 3))

    assert [row.score for row in rows] == [3, 1]
    assert len(rows) == 2


def test_authored_quizzes_only_lists_own(viewer, store, stored_quiz):
    own = stored_quiz(["A"])
    store.create_quiz(make_quiz(["A"], creator_id="someone-else"))

    assert [quiz.id for quiz in viewer.authored_quizzes()] == [own.id]


def test_results_of_other_authors_are_hidden(viewer, store):
    foreign_id = store.create_quiz(make_quiz(["A"], creator_id="someone-else"))
    store.append_result(_result(foreign_id, "ama", 1))

    viewer.select_quiz(foreign_id)

    assert list(viewer.rows()) == []


def test_listener_fires_on_new_results(viewer, store, stored_quiz):
    quiz = stored_quiz(["A"])
    calls = []
    viewer.add_listener(lambda: calls.append(len(viewer.rows())))
    viewer.select_quiz(quiz.id)

    store.append_result(_result(quiz.id, "ama", 1))

    assert calls == [0, 1]


def test_close_cancels_subscription(viewer, store, stored_quiz):
    quiz = stored_quiz(["A"])
    viewer.select_quiz(quiz.id)
    viewer.close()

    store.append_result(_result(quiz.id, "ama", 1))

    assert viewer.selected_quiz_id is None
    assert list(viewer.rows()) == []


def test_viewing_requires_author_role(store, directory, student_identity):
    with pytest.raises(Unauthenticated):
        QuizResultsViewer(store, IdentityProvider(directory)).authored_quizzes()
    with pytest.raises(PermissionDenied):
        QuizResultsViewer(store, student_identity).select_quiz("anything")
