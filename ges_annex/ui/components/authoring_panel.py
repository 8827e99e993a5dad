"""Component for writing, importing, and publishing quizzes."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ges_annex.constants.quiz_constants import DEFAULT_TIMER_SECONDS, OPTION_LETTERS
from ges_annex.constants.ui_constants import (
    AUTHOR_ADD_BUTTON,
    AUTHOR_EXPORT_BUTTON,
    AUTHOR_IMPORT_BUTTON,
    AUTHOR_NEXT_BUTTON,
    AUTHOR_PREV_BUTTON,
    AUTHOR_REMOVE_BUTTON,
    AUTHOR_SAVE_BUTTON,
    EXPORT_DIALOG_TITLE,
    EXPORT_FILE_FILTER,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    PLACEHOLDER_QUESTION,
    PLACEHOLDER_TITLE,
    QUIZ_SAVED_MESSAGE,
)
from ges_annex.core.errors import GesAnnexError, ValidationError
from ges_annex.core.models import QuestionDraft
from ges_annex.core.quiz_exporter import save_quiz_to_file
from ges_annex.core.quiz_importer import QuizImportError, load_quiz_from_file
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.ui.dialog_helpers import (
    confirm_remove_question,
    confirm_replace_draft,
    show_error,
    show_info,
    show_portal_error,
)
from ges_annex.ui.question_renderer import render_question_with_options


class AuthoringPanel(QWidget):
    """Edits the portal's authoring draft one question at a time."""

    def __init__(self, portal: QuizPortal, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.workflow = portal.authoring
        self._current_index: int = 0
        self._loading: bool = False
        self._last_export_path: Path | None = None

        self._build_ui()
        self.reset_state()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        # File actions
        file_row = QHBoxLayout()
        self.import_button = QPushButton(AUTHOR_IMPORT_BUTTON, self)
        self.import_button.clicked.connect(self._handle_import)
        file_row.addWidget(self.import_button)

        self.export_button = QPushButton(AUTHOR_EXPORT_BUTTON, self)
        self.export_button.clicked.connect(self._handle_export)
        file_row.addWidget(self.export_button)
        file_row.addStretch()

        self.save_button = QPushButton(AUTHOR_SAVE_BUTTON, self)
        self.save_button.clicked.connect(self._handle_save)
        file_row.addWidget(self.save_button)
        layout.addLayout(file_row)

        # Quiz header
        header_row = QHBoxLayout()
        self.title_input = QLineEdit(self)
        self.title_input.setPlaceholderText(PLACEHOLDER_TITLE)
        self.title_input.textChanged.connect(self._on_header_changed)
        header_row.addWidget(self.title_input, stretch=1)

        header_row.addWidget(QLabel("Timer:", self))
        self.timer_spinbox = QSpinBox(self)
        self.timer_spinbox.setRange(10, 4 * 3600)
        self.timer_spinbox.setSingleStep(30)
        self.timer_spinbox.setSuffix(" s")
        self.timer_spinbox.valueChanged.connect(lambda _: self._on_header_changed())
        header_row.addWidget(self.timer_spinbox)
        layout.addLayout(header_row)

        # Question navigation
        nav_row = QHBoxLayout()
        self.prev_button = QPushButton(AUTHOR_PREV_BUTTON, self)
        self.prev_button.clicked.connect(lambda: self._navigate(-1))
        nav_row.addWidget(self.prev_button)

        self.next_button = QPushButton(AUTHOR_NEXT_BUTTON, self)
        self.next_button.clicked.connect(lambda: self._navigate(1))
        nav_row.addWidget(self.next_button)

        self.add_button = QPushButton(AUTHOR_ADD_BUTTON, self)
        self.add_button.clicked.connect(self._handle_add)
        nav_row.addWidget(self.add_button)

        self.remove_button = QPushButton(AUTHOR_REMOVE_BUTTON, self)
        self.remove_button.clicked.connect(self._handle_remove)
        nav_row.addWidget(self.remove_button)
        layout.addLayout(nav_row)

        # Question editor
        self.question_input = QPlainTextEdit(self)
        self.question_input.setPlaceholderText(PLACEHOLDER_QUESTION)
        self.question_input.textChanged.connect(self._on_question_changed)
        layout.addWidget(self.question_input)

        options_row = QHBoxLayout()
        self.option_inputs: list[QLineEdit] = []
        for letter in OPTION_LETTERS:
            option_input = QLineEdit(self)
            option_input.setPlaceholderText(f"Option {letter}")
            option_input.textChanged.connect(self._on_question_changed)
            options_row.addWidget(option_input)
            self.option_inputs.append(option_input)
        layout.addLayout(options_row)

        selector_row = QHBoxLayout()
        selector_row.addWidget(QLabel("Correct option:", self))
        self.correct_option_combo = QComboBox(self)
        self.correct_option_combo.addItem("Select…", userData=None)
        for index, letter in enumerate(OPTION_LETTERS):
            self.correct_option_combo.addItem(letter, userData=index)
        self.correct_option_combo.currentIndexChanged.connect(self._on_question_changed)
        selector_row.addWidget(self.correct_option_combo)
        selector_row.addStretch()
        layout.addLayout(selector_row)

        self.preview_view = QWebEngineView(self)
        layout.addWidget(self.preview_view, stretch=1)

        self.status_label = QLabel("", self)
        layout.addWidget(self.status_label)

    # --- Draft synchronisation ---

    def _on_header_changed(self) -> None:
        if self._loading:
            return
        self.workflow.set_title(self.title_input.text())
        self.workflow.set_timer_seconds(int(self.timer_spinbox.value()))

    def _on_question_changed(self) -> None:
        if self._loading:
            return
        options = [field.text() for field in self.option_inputs]
        correct_index = self.correct_option_combo.currentData()
        correct_answer = options[correct_index].strip() if correct_index is not None else ""
        self.workflow.update_question(
            self._current_index,
            question_text=self.question_input.toPlainText(),
            options=options,
            correct_answer=correct_answer,
        )
        self._refresh_preview()

    def _show_question(self, index: int) -> None:
        question = self.workflow.get_question(index)
        self._current_index = index
        self._loading = True
        try:
            self.question_input.setPlainText(question.question_text)
            for field, text in zip(self.option_inputs, question.options):
                field.setText(text)
            self.correct_option_combo.setCurrentIndex(_combo_index_for(question))
        finally:
            self._loading = False
        self._refresh_preview()
        self._update_position_label()

    def _refresh_preview(self) -> None:
        html = render_question_with_options(
            self.question_input.toPlainText(),
            [field.text() for field in self.option_inputs],
        )
        self.preview_view.setHtml(html)

    def _update_position_label(self) -> None:
        count = self.workflow.get_question_count()
        self.status_label.setText(f"Editing question {self._current_index + 1} of {count}.")
        self.prev_button.setEnabled(self._current_index > 0)
        self.next_button.setEnabled(self._current_index < count - 1)
        self.remove_button.setEnabled(count > 1)

    # --- Actions ---

    def _navigate(self, step: int) -> None:
        target = self._current_index + step
        if 0 <= target < self.workflow.get_question_count():
            self._show_question(target)

    def _handle_add(self) -> None:
        self._show_question(self.workflow.add_question())

    def _handle_remove(self) -> None:
        if not confirm_remove_question(self, self._current_index + 1):
            return
        try:
            self.workflow.remove_question(self._current_index)
        except (ValidationError, IndexError) as exc:
            show_error(self, "Remove failed", str(exc))
            return
        self._show_question(min(self._current_index, self.workflow.get_question_count() - 1))

    def _handle_save(self) -> None:
        try:
            quiz_id = self.workflow.save()
        except GesAnnexError as exc:
            show_portal_error(self, exc)
            return
        show_info(self, "Quiz saved", f"{QUIZ_SAVED_MESSAGE} (id {quiz_id})")
        self.reset_state()

    def _handle_import(self) -> None:
        if not confirm_replace_draft(self):
            return
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            IMPORT_DIALOG_TITLE,
            str(Path.home()),
            IMPORT_FILE_FILTER,
        )
        if not file_path:
            return
        try:
            imported = load_quiz_from_file(Path(file_path))
            self.workflow.load_draft(imported.draft)
        except (OSError, QuizImportError, ValidationError) as exc:
            show_error(self, "Import failed", str(exc))
            return
        self._load_from_draft()
        self.status_label.setText(
            f"Imported {self.workflow.get_question_count()} questions from {imported.source_path.name}."
        )

    def _handle_export(self) -> None:
        default_path = self._last_export_path or (Path.cwd() / "quiz_export.txt")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            EXPORT_DIALOG_TITLE,
            str(default_path),
            EXPORT_FILE_FILTER,
        )
        if not file_path:
            return
        try:
            save_quiz_to_file(Path(file_path), self.workflow.get_draft())
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return
        self._last_export_path = Path(file_path)
        show_info(self, "Quiz exported", f"Quiz exported to {file_path}.")

    # --- State ---

    def reset_state(self) -> None:
        self.workflow.reset()
        self.workflow.set_timer_seconds(DEFAULT_TIMER_SECONDS)
        self._load_from_draft()

    def _load_from_draft(self) -> None:
        draft = self.workflow.get_draft()
        self._loading = True
        try:
            self.title_input.setText(draft.title)
            self.timer_spinbox.setValue(draft.timer_seconds or DEFAULT_TIMER_SECONDS)
        finally:
            self._loading = False
        self._on_header_changed()
        self._show_question(0)

    def set_enabled_for_author(self, allowed: bool) -> None:
        for widget in (self.save_button, self.import_button):
            widget.setEnabled(allowed)


def _combo_index_for(question: QuestionDraft) -> int:
    options = [option.strip() for option in question.options]
    if question.correct_answer and question.correct_answer in options:
        return options.index(question.correct_answer) + 1
    return 0
