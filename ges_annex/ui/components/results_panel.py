"""Component showing results for the quizzes the signed-in author wrote."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ges_annex.constants.ui_constants import RESULTS_EMPTY_STATE
from ges_annex.core.errors import GesAnnexError
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.ui.dialog_helpers import show_portal_error

_COLUMNS = ("Student", "Score", "Time taken", "Completed")


class ResultsPanel(QWidget):
    """Quiz picker plus a live, score-sorted results table."""

    def __init__(self, portal: QuizPortal, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.portal = portal
        self.viewer = portal.results
        self._quiz_ids: list[str] = []
        self._rows_snapshot: list[str | None] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        picker_row = QHBoxLayout()
        picker_row.addWidget(QLabel("Quiz:", self))
        self.quiz_combo = QComboBox(self)
        self.quiz_combo.currentIndexChanged.connect(self._handle_quiz_changed)
        picker_row.addWidget(self.quiz_combo, stretch=1)
        layout.addLayout(picker_row)

        self.results_table = QTableWidget(0, len(_COLUMNS), self)
        self.results_table.setHorizontalHeaderLabels(list(_COLUMNS))
        self.results_table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.results_table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.results_table.setAlternatingRowColors(True)
        layout.addWidget(self.results_table, stretch=1)

        self.empty_label = QLabel(RESULTS_EMPTY_STATE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

    def load_quizzes(self) -> bool:
        """Fill the picker with the author's quizzes; False when not allowed."""
        try:
            quizzes = self.viewer.authored_quizzes()
        except GesAnnexError as exc:
            show_portal_error(self, exc)
            return False
        ids = [quiz.id for quiz in quizzes]
        if ids != self._quiz_ids:
            self._quiz_ids = ids
            self.quiz_combo.blockSignals(True)
            self.quiz_combo.clear()
            for quiz in quizzes:
                self.quiz_combo.addItem(f"{quiz.title} ({quiz.question_count} questions)", userData=quiz.id)
            self.quiz_combo.blockSignals(False)
            self._handle_quiz_changed()
        return True

    def _handle_quiz_changed(self) -> None:
        quiz_id = self.quiz_combo.currentData()
        self._rows_snapshot = []
        if quiz_id is None:
            self.viewer.close()
            self.refresh()
            return
        try:
            self.viewer.select_quiz(quiz_id)
        except GesAnnexError as exc:
            show_portal_error(self, exc)
            return
        self.refresh()

    def refresh(self) -> None:
        rows = list(self.viewer.rows())
        snapshot = [result.id for result in rows]
        if snapshot == self._rows_snapshot and rows:
            return
        self._rows_snapshot = snapshot
        self.results_table.setRowCount(len(rows))
        for row_index, result in enumerate(rows):
            values = (
                result.student_email,
                f"{result.score} / {result.total_questions}",
                f"{result.time_taken} s",
                result.completed_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            )
            for column, value in enumerate(values):
                self.results_table.setItem(row_index, column, QTableWidgetItem(value))
        self.empty_label.setVisible(not rows)

    def clear(self) -> None:
        self.viewer.close()
        self._quiz_ids = []
        self._rows_snapshot = []
        self.quiz_combo.blockSignals(True)
        self.quiz_combo.clear()
        self.quiz_combo.blockSignals(False)
        self.results_table.setRowCount(0)
        self.empty_label.setVisible(True)
