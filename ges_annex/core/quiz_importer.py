"""Utilities for importing quiz drafts from a human-friendly text file.

File format (a header, then question blocks separated by blank lines or '---'):

    TITLE: Quiz title
    TIMER: seconds for the whole quiz

    Q: Question text (supports markdown + LaTeX). Additional lines until the
       next marker are treated as part of the question.
    A: First option text
    B: Second option text
    C: Third option text
    D: Fourth option text
    CORRECT: A|B|C|D   (optional; omit if not decided yet)

Example:

    TITLE: Mental maths
    TIMER: 60

    Q: What is $2 + 2$?
    A: 3
    B: 4
    C: 5
    D: 22
    CORRECT: B

The importer produces a draft, not a published quiz. Missing titles or
answers are left empty for the authoring workflow to report on save.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ges_annex.constants.quiz_constants import OPTION_LETTERS
from ges_annex.core.models import QuestionDraft, QuizDraft


class QuizImportError(Exception):
    """Raised when a quiz file cannot be parsed."""


@dataclass(slots=True)
class ImportedQuiz:
    """Container for an imported draft and where it came from."""

    source_path: Path
    draft: QuizDraft


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    return ImportedQuiz(source_path=file_path, draft=parse_quiz_text(text))


def parse_quiz_text(text: str) -> QuizDraft:
    draft = QuizDraft(questions=[])
    for block in _split_blocks(text):
        question = _parse_block(block, draft)
        if question is not None:
            draft.questions.append(question)
    if not draft.questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return draft


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            # Blank line encountered after content - finalize current block
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _parse_block(block: str, draft: QuizDraft) -> QuestionDraft | None:
    """Parse one block, applying header lines to ``draft``.

    Returns None for blocks that only carry header lines.
    """
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    current_section: str | None = None
    saw_question_content = False

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("TITLE:"):
            draft.title = line.split(":", 1)[1].strip()
            current_section = None
            continue

        if upper.startswith("TIMER:"):
            draft.timer_seconds = _parse_timer(line.split(":", 1)[1].strip())
            current_section = None
            continue

        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            saw_question_content = True
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            saw_question_content = True
            continue

        if len(line) > 2 and line[0].upper() in OPTION_LETTERS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            saw_question_content = True
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in OPTION_LETTERS:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    if not saw_question_content:
        return None
    if not question_lines:
        raise QuizImportError("Question text missing (Q: ...)")
    if len(options) != len(OPTION_LETTERS):
        raise QuizImportError("Each question must define exactly four options (A-D).")

    option_list = [options.get(letter, "").strip() for letter in OPTION_LETTERS]
    if any(not opt for opt in option_list):
        raise QuizImportError("Option text cannot be empty.")

    correct_answer = ""
    if correct_letter is not None:
        if correct_letter not in OPTION_LETTERS:
            raise QuizImportError("CORRECT must be one of A, B, C, or D.")
        correct_answer = option_list[OPTION_LETTERS.index(correct_letter)]

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError("Question text cannot be empty.")

    return QuestionDraft(
        question_text=question_text,
        options=option_list,
        correct_answer=correct_answer,
    )


def _parse_timer(raw_value: str) -> int:
    if not raw_value:
        raise QuizImportError("TIMER must include an integer value.")
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:
        raise QuizImportError("TIMER must be an integer number of seconds.") from exc
    if parsed_value <= 0:
        raise QuizImportError("TIMER must be a positive integer.")
    return parsed_value
