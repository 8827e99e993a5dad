"""Tests for the quiz authoring workflow."""

from __future__ import annotations

from threading import Thread

import pytest

from ges_annex.core.errors import PermissionDenied, Unauthenticated, ValidationError
from ges_annex.core.models import QuestionDraft, QuizDraft
from ges_annex.core.services.content_store import InMemoryContentStore
from ges_annex.core.services.identity_provider import IdentityProvider
from ges_annex.core.services.quiz_authoring import QuizAuthoringWorkflow


@pytest.fixture
def workflow(store, author_identity):
    return QuizAuthoringWorkflow(store, author_identity)


def _fill_valid_draft(workflow: QuizAuthoringWorkflow) -> None:
    workflow.set_title("Fractions")
    workflow.set_timer_seconds(60)
    workflow.update_question(
        0,
        question_text="What is $1/2 + 1/4$?",
        options=["3/4", "2/6", "1/8", "1"],
        correct_answer="3/4",
    )


def test_save_publishes_definition_for_author(workflow, store, author_identity):
    _fill_valid_draft(workflow)

    quiz_id = workflow.save()

    quiz = store.get_quiz(quiz_id)
    assert quiz.title == "Fractions"
    assert quiz.timer_seconds == 60
    assert quiz.creator_id == author_identity.current_subject().id
    assert quiz.questions[0].correct_answer == "3/4"
    assert quiz.created_at.tzinfo is not None


def test_save_resets_draft(workflow):
    _fill_valid_draft(workflow)
    workflow.add_question()
    workflow.update_question(1, question_text="Q2", options=["a", "b", "c", "d"], correct_answer="d")

    workflow.save()

    draft = workflow.get_draft()
    assert draft.title == ""
    assert len(draft.questions) == 1


def test_empty_option_is_rejected_and_nothing_written(workflow, store):
    _fill_valid_draft(workflow)
    workflow.update_question(0, options=["3/4", "2/6", "", "1"])

    with pytest.raises(ValidationError) as excinfo:
        workflow.save()

    assert excinfo.value.field == "questions[0].options[2]"
    assert store.list_quizzes() == []
    assert workflow.get_draft().title == "Fractions"


@pytest.mark.parametrize(
    ("mutate", "field"),
    [
        (lambda wf: wf.set_title("   "), "title"),
        (lambda wf: wf.set_timer_seconds(0), "timer_seconds"),
        (lambda wf: wf.update_question(0, question_text=""), "questions[0].question_text"),
        (lambda wf: wf.update_question(0, correct_answer=""), "questions[0].correct_answer"),
        (lambda wf: wf.update_question(0, correct_answer="5/4"), "questions[0].correct_answer"),
    ],
)
def test_invalid_drafts_report_field(workflow, store, mutate, field):
    _fill_valid_draft(workflow)
    mutate(workflow)

    with pytest.raises(ValidationError) as excinfo:
        workflow.save()

    assert excinfo.value.field == field
    assert store.list_quizzes() == []


def test_update_question_requires_four_options(workflow):
    with pytest.raises(ValidationError):
        workflow.update_question(0, options=["a", "b", "c"])


def test_add_and_remove_questions(workflow):
    assert workflow.add_question() == 1
    assert workflow.add_question() == 2

    workflow.remove_question(1)

    assert workflow.get_question_count() == 2


def test_removing_last_question_raises(workflow):
    with pytest.raises(ValidationError):
        workflow.remove_question(0)
    assert workflow.get_question_count() == 1


def test_removing_out_of_range_index_raises(workflow):
    with pytest.raises(IndexError):
        workflow.remove_question(3)


def test_load_draft_replaces_draft_with_copy(workflow):
    draft = QuizDraft(
        title="Imported",
        timer_seconds=90,
        questions=[QuestionDraft("Q", ["a", "b", "c", "d"], "a")],
    )
    workflow.load_draft(draft)
    draft.title = "changed afterwards"

    assert workflow.get_draft().title == "Imported"


def test_save_requires_signed_in_subject(store, directory):
    workflow = QuizAuthoringWorkflow(store, IdentityProvider(directory))
    _fill_valid_draft(workflow)

    with pytest.raises(Unauthenticated):
        workflow.save()
    assert store.list_quizzes() == []


def test_save_requires_author_role(store, student_identity):
    workflow = QuizAuthoringWorkflow(store, student_identity)
    _fill_valid_draft(workflow)

    with pytest.raises(PermissionDenied):
        workflow.save()
    assert not workflow.can_author()


def test_granted_role_takes_effect_without_new_sign_in(store, directory, student_identity):
    workflow = QuizAuthoringWorkflow(store, student_identity)
    directory.grant_role(student_identity.current_subject().id, "author")

    assert workflow.can_author()


def test_quiz_write_does_not_block_draft_reads(store, author_identity):
    readable_during_write = []

    class ObservingStore(InMemoryContentStore):
        def create_quiz(self, definition):
            reader = Thread(target=workflow.get_question_count)
            reader.start()
            reader.join(timeout=2)
            readable_during_write.append(not reader.is_alive())
            return super().create_quiz(definition)

    workflow = QuizAuthoringWorkflow(ObservingStore(), author_identity)
    _fill_valid_draft(workflow)

    workflow.save()

    assert readable_during_write == [True]
    assert workflow.get_draft().title == ""
