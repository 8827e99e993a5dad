"""Qt UI components for the GES Annex desktop client."""

from .dialog_helpers import (
    confirm_abandon_attempt,
    confirm_remove_question,
    confirm_replace_draft,
    show_error,
    show_info,
    show_portal_error,
    show_warning,
)
from .main_window import PortalMainWindow
from .qt_countdown import QtCountdown
from .question_renderer import render_question_with_options

__all__ = [
    "PortalMainWindow",
    "QtCountdown",
    "confirm_abandon_attempt",
    "confirm_remove_question",
    "confirm_replace_draft",
    "show_error",
    "show_info",
    "show_portal_error",
    "show_warning",
    "render_question_with_options",
]
