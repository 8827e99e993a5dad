"""Utilities for exporting quiz drafts to the plain-text import format."""

from __future__ import annotations

from pathlib import Path

from ges_annex.constants.quiz_constants import OPTION_LETTERS
from ges_annex.core.models import QuestionDraft, QuizDraft


def save_quiz_to_file(file_path: Path, draft: QuizDraft) -> None:
    """Persist the draft to disk in the text import format."""

    if not draft.questions:
        raise ValueError("Cannot export an empty quiz.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_draft(draft), encoding="utf-8")


def serialize_draft(draft: QuizDraft) -> str:
    header: list[str] = []
    if draft.title.strip():
        header.append(f"TITLE: {draft.title.strip()}")
    if draft.timer_seconds > 0:
        header.append(f"TIMER: {draft.timer_seconds}")
    blocks = [_serialize_question(question) for question in draft.questions]
    if header:
        blocks.insert(0, "\n".join(header))
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_question(question: QuestionDraft) -> str:
    lines: list[str] = []

    question_lines = question.question_text.splitlines() or [question.question_text]
    lines.append(f"Q: {question_lines[0] if question_lines else ''}")
    lines.extend(question_lines[1:])

    for idx, letter in enumerate(OPTION_LETTERS):
        option_text = question.options[idx] if idx < len(question.options) else ""
        option_lines = option_text.splitlines() or [option_text]
        lines.append(f"{letter}: {option_lines[0] if option_lines else ''}")
        lines.extend(option_lines[1:])

    if question.correct_answer and question.correct_answer in question.options:
        correct_letter = OPTION_LETTERS[question.options.index(question.correct_answer)]
        lines.append(f"CORRECT: {correct_letter}")

    return "\n".join(lines)
