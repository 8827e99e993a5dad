"""Component listing the published quizzes."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ges_annex.constants.ui_constants import LIST_EMPTY_STATE, LIST_START_BUTTON
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.styling.styles import Styles
from ges_annex.ui.dialog_helpers import show_warning


class QuizListPanel(QWidget):
    """Shows the catalog and hands the chosen quiz id to ``on_start_quiz``."""

    def __init__(
        self,
        portal: QuizPortal,
        on_start_quiz: Callable[[str], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.portal = portal
        self.on_start_quiz = on_start_quiz
        self._snapshot_ids: list[str] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        heading = QLabel("Available quizzes", self)
        heading.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(heading)

        self.quiz_list = QListWidget(self)
        self.quiz_list.setAlternatingRowColors(True)
        self.quiz_list.itemDoubleClicked.connect(lambda _: self._handle_start_click())
        layout.addWidget(self.quiz_list, stretch=1)

        self.empty_label = QLabel(LIST_EMPTY_STATE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

        self.start_button = QPushButton(LIST_START_BUTTON, self)
        self.start_button.clicked.connect(self._handle_start_click)
        layout.addWidget(self.start_button)

    def _handle_start_click(self) -> None:
        item = self.quiz_list.currentItem()
        if item is None:
            show_warning(self, "No quiz selected", "Choose a quiz from the list first.")
            return
        self.on_start_quiz(item.data(Qt.UserRole))

    def refresh(self) -> None:
        quizzes = self.portal.list_quizzes()
        snapshot = [quiz.id for quiz in quizzes]
        if snapshot == self._snapshot_ids:
            return
        self._snapshot_ids = snapshot
        self.quiz_list.clear()
        for quiz in quizzes:
            minutes, seconds = divmod(quiz.timer_seconds, 60)
            item = QListWidgetItem(
                f"{quiz.title}  ({quiz.question_count} questions, {minutes}:{seconds:02d})",
                self.quiz_list,
            )
            item.setData(Qt.UserRole, quiz.id)
        self.empty_label.setVisible(not quizzes)
        self.start_button.setEnabled(bool(quizzes))
