"""Question rendering utilities for displaying quiz questions."""

from __future__ import annotations

from typing import Sequence

from ges_annex.constants.quiz_constants import OPTION_LETTERS
from ges_annex.core.markdown_math_renderer import renderer


def render_question_with_options(
    question_text: str,
    options: Sequence[str],
    font_size: int = 14,
    title: str | None = None,
) -> str:
    """Render a quiz question with its options as HTML.

    Args:
        question_text: The question text (supports Markdown and LaTeX)
        options: The four option strings
        font_size: Font size in points for the question text (default 14)
        title: Optional heading shown above the question

    Returns:
        HTML string ready for display in QWebEngineView
    """
    markdown_lines = []
    if title:
        markdown_lines.append(f"### {title}")
    markdown_lines.extend([question_text.strip() or "(No question text)", ""])
    for letter, option in zip(OPTION_LETTERS, options):
        markdown_lines.append(f"**{letter}.** {option or '(empty)'}")
    markdown = "\n\n".join(markdown_lines)
    return renderer.render_full_document(markdown, font_size=font_size)
