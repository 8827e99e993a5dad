"""Tests for the per-client portal facade."""

from __future__ import annotations

from pathlib import Path

import pytest

from ges_annex.core.errors import PersistenceError
from ges_annex.core.models import AttemptStatus
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.core.sample_content import SEED_CREATOR_ID, seed_sample_quiz
from ges_annex.core.services.content_store import InMemoryContentStore
from ges_annex.core.services.identity_provider import IdentityProvider
from ges_annex.core.services.quiz_catalog import QuizCatalog

from conftest import AUTHOR_EMAIL, PASSWORD, STUDENT_EMAIL

SAMPLE_QUIZ = Path(__file__).resolve().parents[1] / "ges_annex" / "data" / "quizzes" / "sample_quiz.txt"


@pytest.fixture
def portal(store, directory, countdowns):
    portal = QuizPortal(store, IdentityProvider(directory), countdowns)
    yield portal
    portal.close()


def _publish(portal: QuizPortal, answers: list[str]) -> str:
    portal.authoring.set_title("Portal quiz")
    portal.authoring.set_timer_seconds(30)
    for index, answer in enumerate(answers):
        if index:
            portal.authoring.add_question()
        portal.authoring.update_question(
            index, question_text=f"Q{index + 1}", options=["A", "B", "C", "D"], correct_answer=answer
        )
    return portal.authoring.save()


def test_author_publishes_and_student_takes_quiz(portal, store, directory, countdowns):
    portal.sign_up(AUTHOR_EMAIL, PASSWORD)
    quiz_id = _publish(portal, ["A", "B"])
    assert [quiz.id for quiz in portal.list_quizzes()] == [quiz_id]

    student = QuizPortal(store, IdentityProvider(directory), countdowns)
    student.sign_up(STUDENT_EMAIL, PASSWORD)
    student.start_quiz(quiz_id)
    student.select_answer("A")
    student.advance()
    student.select_answer("C")
    student.advance()
    student.close()

    rows = portal.results_for(quiz_id)
    assert [(row.student_email, row.score) for row in rows] == [(STUDENT_EMAIL, 1)]


def test_unknown_quiz_raises_key_error(portal):
    with pytest.raises(KeyError):
        portal.start_quiz("missing")


def test_attempt_status_follows_session(portal, store, countdowns):
    portal.sign_up(AUTHOR_EMAIL, PASSWORD)
    quiz_id = _publish(portal, ["A"])

    assert portal.get_attempt_status() is AttemptStatus.NOT_STARTED
    portal.start_quiz(quiz_id)
    assert portal.get_attempt_status() is AttemptStatus.IN_PROGRESS
    portal.submit_attempt()
    assert portal.get_attempt_status() is AttemptStatus.COMPLETED
    portal.close_attempt()
    assert portal.get_attempt() is None


def test_sign_out_drops_results_selection(portal):
    portal.sign_up(AUTHOR_EMAIL, PASSWORD)
    quiz_id = _publish(portal, ["A"])
    portal.results_for(quiz_id)

    portal.sign_out()

    assert portal.results.selected_quiz_id is None
    assert not portal.can_author()


def test_close_cancels_running_countdown(portal, countdowns):
    portal.sign_up(AUTHOR_EMAIL, PASSWORD)
    portal.start_quiz(_publish(portal, ["A"]))

    portal.close()

    assert countdowns.latest.cancelled


def test_catalog_degrades_to_empty_on_read_failure():
    class BrokenStore(InMemoryContentStore):
        def subscribe_quizzes(self, listener):
            raise PersistenceError("offline")

    catalog = QuizCatalog(BrokenStore())

    assert catalog.get_quizzes() == []
    assert catalog.find("anything") is None


def test_seed_sample_quiz_only_when_empty(store):
    quiz_id = seed_sample_quiz(store, SAMPLE_QUIZ)

    assert store.get_quiz(quiz_id).creator_id == SEED_CREATOR_ID
    assert seed_sample_quiz(store, SAMPLE_QUIZ) is None
    assert len(store.list_quizzes()) == 1


def test_seed_sample_quiz_tolerates_missing_file(store, tmp_path):
    assert seed_sample_quiz(store, tmp_path / "missing.txt") is None
    assert seed_sample_quiz(store, None) is None
    assert store.list_quizzes() == []


def test_changing_subject_closes_running_attempt(portal, store, directory, countdowns):
    author = QuizPortal(store, IdentityProvider(directory), countdowns)
    author.sign_up(AUTHOR_EMAIL, PASSWORD)
    quiz_id = _publish(author, ["A"])
    directory.register("yaa@school.edu.gh", "another-secret")

    portal.sign_up(STUDENT_EMAIL, PASSWORD)
    portal.start_quiz(quiz_id)
    portal.sign_in("yaa@school.edu.gh", "another-secret")

    assert portal.get_attempt_status() is AttemptStatus.NOT_STARTED
    assert countdowns.latest.cancelled
    assert author.results_for(quiz_id) == []
    author.close()
