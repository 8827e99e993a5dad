"""Component for taking a timed quiz."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from ges_annex.constants.quiz_constants import OPTION_LETTERS, TIMER_WARNING_WINDOW_SECONDS
from ges_annex.constants.ui_constants import (
    SELECT_ANSWER_MESSAGE,
    TAKE_BACK_BUTTON,
    TAKE_NEXT_BUTTON,
    TAKE_SUBMIT_BUTTON,
    TIME_UP_MESSAGE,
)
from ges_annex.core.models import AttemptStatus, QuizAttemptState
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.styling.styles import Styles
from ges_annex.ui.dialog_helpers import confirm_abandon_attempt
from ges_annex.ui.question_renderer import render_question_with_options


class QuizTakingPanel(QWidget):
    """Shows the current question, the countdown and the final score."""

    def __init__(
        self,
        portal: QuizPortal,
        on_finished: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.portal = portal
        self.on_finished = on_finished
        self._game_font_size: int = 14
        self._rendered_key: tuple[str, int] | None = None

        self._build_ui()
        self._session_subscription = portal.session.add_listener(self.refresh)

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.progress_label = QLabel("", self)
        header_row.addWidget(self.progress_label)
        header_row.addStretch()
        self.timer_label = QLabel("", self)
        self.timer_label.setStyleSheet(Styles.get_timer_style(warning=False))
        header_row.addWidget(self.timer_label)
        layout.addLayout(header_row)

        self.timer_progress = QProgressBar(self)
        self.timer_progress.setTextVisible(False)
        layout.addWidget(self.timer_progress)

        self.preview_view = QWebEngineView(self)
        layout.addWidget(self.preview_view, stretch=1)

        self.option_group = QButtonGroup(self)
        self.option_buttons: list[QRadioButton] = []
        for index, letter in enumerate(OPTION_LETTERS):
            button = QRadioButton(letter, self)
            self.option_group.addButton(button, index)
            self.option_buttons.append(button)
            layout.addWidget(button)
        self.option_group.idClicked.connect(self._handle_option_clicked)

        self.status_label = QLabel("", self)
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        button_row = QHBoxLayout()
        self.back_button = QPushButton(TAKE_BACK_BUTTON, self)
        self.back_button.clicked.connect(self._handle_back)
        button_row.addWidget(self.back_button)
        button_row.addStretch()
        self.next_button = QPushButton(TAKE_NEXT_BUTTON, self)
        self.next_button.clicked.connect(self._handle_next)
        button_row.addWidget(self.next_button)
        layout.addLayout(button_row)

    # --- Actions ---

    def _handle_option_clicked(self, index: int) -> None:
        state = self.portal.get_attempt()
        if state is None or state.completed:
            return
        self.status_label.clear()
        self.portal.select_answer(state.current_question.options[index])

    def _handle_next(self) -> None:
        if not self.portal.advance():
            self.status_label.setStyleSheet(Styles.get_status_style(is_error=True))
            self.status_label.setText(SELECT_ANSWER_MESSAGE)

    def _handle_back(self) -> None:
        if self.portal.get_attempt_status() is AttemptStatus.IN_PROGRESS:
            if not confirm_abandon_attempt(self):
                return
        self.portal.close_attempt()
        self._rendered_key = None
        self.on_finished()

    # --- Rendering ---

    def refresh(self) -> None:
        state = self.portal.get_attempt()
        if state is None:
            return
        self._render_timer(state)
        if state.completed:
            self._render_completed(state)
        else:
            self._render_question(state)

    def _render_timer(self, state: QuizAttemptState) -> None:
        remaining = state.time_remaining_seconds
        minutes, seconds = divmod(remaining, 60)
        self.timer_label.setText(f"{minutes}:{seconds:02d}")
        self.timer_label.setStyleSheet(
            Styles.get_timer_style(warning=remaining <= TIMER_WARNING_WINDOW_SECONDS)
        )
        self.timer_progress.setRange(0, state.quiz.timer_seconds)
        self.timer_progress.setValue(remaining)

    def _render_question(self, state: QuizAttemptState) -> None:
        question = state.current_question
        self.progress_label.setText(
            f"{state.quiz.title}: question {state.current_question_index + 1} of {state.quiz.question_count}"
        )
        key = (state.quiz.id, state.current_question_index)
        if key != self._rendered_key:
            self._rendered_key = key
            self.preview_view.setHtml(
                render_question_with_options(
                    question.question_text, question.options, font_size=self._game_font_size
                )
            )
            self.option_group.setExclusive(False)
            for button, letter, option in zip(self.option_buttons, OPTION_LETTERS, question.options):
                button.setChecked(False)
                button.setText(f"{letter}. {option}")
            self.option_group.setExclusive(True)
            self.status_label.clear()
        for button, option in zip(self.option_buttons, question.options):
            button.setEnabled(True)
            button.setVisible(True)
            if option == state.selected_answer:
                button.setChecked(True)
        self.next_button.setText(TAKE_SUBMIT_BUTTON if state.is_last_question else TAKE_NEXT_BUTTON)
        self.next_button.setEnabled(True)

    def _render_completed(self, state: QuizAttemptState) -> None:
        total = state.quiz.question_count
        self.progress_label.setText(f"{state.quiz.title}: finished")
        summary = f"You scored {state.score} out of {total} in {state.time_taken} seconds."
        if state.time_remaining_seconds == 0:
            summary = f"{TIME_UP_MESSAGE}\n{summary}"
        self.preview_view.setHtml(
            render_question_with_options(summary, [], font_size=self._game_font_size)
        )
        self._rendered_key = None
        for button in self.option_buttons:
            button.setVisible(False)
        self.status_label.setStyleSheet(Styles.get_status_style(is_error=False))
        if state.result is not None and state.result.id is None:
            self.status_label.setText("Your result could not be saved, but your score is shown above.")
        else:
            self.status_label.setText("Your result has been saved.")
        self.next_button.setEnabled(False)

    def set_game_font_size(self, font_size: int) -> None:
        self._game_font_size = font_size
        self._rendered_key = None
        self.refresh()

    def shutdown(self) -> None:
        self._session_subscription.unsubscribe()
