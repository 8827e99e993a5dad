"""Helper functions for common dialog patterns in the portal client."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget

from ges_annex.core.errors import PermissionDenied, Unauthenticated, ValidationError


def _ask(parent: QWidget, title: str, message: str) -> bool:
    reply = QMessageBox.question(
        parent,
        title,
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def confirm_remove_question(parent: QWidget, question_number: int) -> bool:
    """Ask before removing a question from the draft.

    Args:
        parent: Parent widget for the dialog
        question_number: The question number to display (1-indexed)

    Returns:
        True if user confirmed, False otherwise
    """
    return _ask(
        parent,
        "Confirm Remove",
        f"Are you sure you want to remove question {question_number}?",
    )


def confirm_replace_draft(parent: QWidget) -> bool:
    """Ask before an imported file replaces the draft being edited."""
    return _ask(
        parent,
        "Confirm Import",
        "Importing a quiz will replace the draft you are editing. Continue?",
    )


def confirm_abandon_attempt(parent: QWidget) -> bool:
    """Ask before leaving a quiz that is still running."""
    return _ask(
        parent,
        "Leave Quiz",
        "Your quiz is still running and will not be submitted. Leave anyway?",
    )


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)


def show_portal_error(parent: QWidget, exc: Exception) -> None:
    """Show a portal error with a title matching its kind."""
    if isinstance(exc, Unauthenticated):
        show_warning(parent, "Sign in required", str(exc))
    elif isinstance(exc, PermissionDenied):
        show_warning(parent, "Not allowed", str(exc))
    elif isinstance(exc, ValidationError):
        show_warning(parent, "Check your quiz", str(exc))
    else:
        show_error(parent, "Something went wrong", str(exc))
