"""Sign-in / sign-up dialog backed by the identity provider."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from ges_annex.core.errors import GesAnnexError
from ges_annex.core.models import Subject
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.styling.styles import Styles


class AuthDialog(QDialog):
    """Modal dialog collecting an email and password."""

    def __init__(self, portal: QuizPortal, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Sign In")
        self.setModal(True)
        self.setMinimumWidth(360)

        self.portal = portal
        self.subject: Subject | None = None

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.email_input = QLineEdit(self)
        self.email_input.setPlaceholderText("you@example.com")
        form.addRow("Email:", self.email_input)

        self.password_input = QLineEdit(self)
        self.password_input.setEchoMode(QLineEdit.Password)
        form.addRow("Password:", self.password_input)
        layout.addLayout(form)

        self.error_label = QLabel("", self)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(Styles.get_status_style(is_error=True))
        layout.addWidget(self.error_label)

        button_row = QHBoxLayout()
        self.sign_in_button = QPushButton("Sign In", self)
        self.sign_in_button.setDefault(True)
        self.sign_in_button.clicked.connect(self._handle_sign_in)
        button_row.addWidget(self.sign_in_button)

        self.sign_up_button = QPushButton("Create Account", self)
        self.sign_up_button.clicked.connect(self._handle_sign_up)
        button_row.addWidget(self.sign_up_button)

        cancel_button = QPushButton("Cancel", self)
        cancel_button.clicked.connect(self.reject)
        button_row.addWidget(cancel_button)
        layout.addLayout(button_row)

    def _handle_sign_in(self) -> None:
        self._attempt(self.portal.sign_in)

    def _handle_sign_up(self) -> None:
        self._attempt(self.portal.sign_up)

    def _attempt(self, action) -> None:
        try:
            self.subject = action(self.email_input.text(), self.password_input.text())
        except GesAnnexError as exc:
            self.error_label.setText(str(exc))
            self.password_input.clear()
            return
        self.accept()
