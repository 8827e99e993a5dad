"""Qt main window switching between the portal's modes."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from ges_annex.constants.about import (
    APP_ABOUT_TEXT,
    APP_CONTACT_EMAIL,
    APP_LICENSE,
    APP_NAME,
    APP_VERSION,
    HELP_TEXT,
)
from ges_annex.constants.ui_constants import (
    AUTHOR_REQUIRED_MESSAGE,
    MODE_BUTTON_CREATE,
    MODE_BUTTON_MATERIALS,
    MODE_BUTTON_NEWS,
    MODE_BUTTON_QUIZZES,
    MODE_BUTTON_RESULTS,
    MODE_BUTTON_SIGN_IN,
    MODE_BUTTON_SIGN_OUT,
    REFRESH_INTERVAL_MS,
    SIGN_IN_REQUIRED_MESSAGE,
    WINDOW_TITLE,
)
from ges_annex.core.errors import GesAnnexError, Unauthenticated
from ges_annex.core.materials import MaterialsCatalog
from ges_annex.core.models import AttemptStatus, Subject
from ges_annex.core.news_feed import NewsFeed
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.styling.styles import FOOTER_LABEL_NAME, NAV_BUTTON_NAME, Styles
from ges_annex.ui.auth_dialog import AuthDialog
from ges_annex.ui.components.authoring_panel import AuthoringPanel
from ges_annex.ui.components.materials_panel import MaterialsPanel
from ges_annex.ui.components.news_panel import NewsPanel
from ges_annex.ui.components.quiz_list_panel import QuizListPanel
from ges_annex.ui.components.quiz_taking_panel import QuizTakingPanel
from ges_annex.ui.components.results_panel import ResultsPanel
from ges_annex.ui.dialog_helpers import (
    confirm_abandon_attempt,
    show_info,
    show_portal_error,
    show_warning,
)


class PortalMode(Enum):
    """High-level UI mode for the portal window."""

    QUIZ_LIST = auto()
    QUIZ_TAKING = auto()
    AUTHORING = auto()
    RESULTS = auto()
    NEWS = auto()
    MATERIALS = auto()


class PortalMainWindow(QMainWindow):
    """Main Qt window hosting one client's portal session."""

    def __init__(
        self,
        portal: QuizPortal,
        news_feed: NewsFeed,
        materials: MaterialsCatalog,
        portal_url: str | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(1100, 760)

        self.portal = portal
        self.news_feed = news_feed
        self.materials = materials
        self.portal_url = portal_url

        self._mode = PortalMode.QUIZ_LIST

        self._build_ui()
        self._configure_refresh_timer()
        self.setStyleSheet(Styles.get_main_window_style())
        self._identity_subscription = portal.identity.subscribe(self._on_subject_changed)
        self._set_mode(PortalMode.QUIZ_LIST)

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_mode_buttons(root_layout)

        self.mode_stack = QStackedWidget(self)
        self.quiz_list_panel = QuizListPanel(self.portal, on_start_quiz=self._handle_start_quiz, parent=self)
        self.quiz_taking_panel = QuizTakingPanel(
            self.portal, on_finished=lambda: self._set_mode(PortalMode.QUIZ_LIST), parent=self
        )
        self.authoring_panel = AuthoringPanel(self.portal, self)
        self.results_panel = ResultsPanel(self.portal, self)
        self.news_panel = NewsPanel(self.news_feed, self)
        self.materials_panel = MaterialsPanel(self.materials, self)

        self._panels = {
            PortalMode.QUIZ_LIST: self.quiz_list_panel,
            PortalMode.QUIZ_TAKING: self.quiz_taking_panel,
            PortalMode.AUTHORING: self.authoring_panel,
            PortalMode.RESULTS: self.results_panel,
            PortalMode.NEWS: self.news_panel,
            PortalMode.MATERIALS: self.materials_panel,
        }
        for panel in self._panels.values():
            self.mode_stack.addWidget(panel)
        root_layout.addWidget(self.mode_stack, stretch=1)

        footer_row = QHBoxLayout()
        self.identity_label = QLabel("", self)
        self.identity_label.setObjectName(FOOTER_LABEL_NAME)
        footer_row.addWidget(self.identity_label)
        footer_row.addStretch()
        if self.portal_url:
            url_label = QLabel(f"Browser portal: {self.portal_url}", self)
            url_label.setObjectName(FOOTER_LABEL_NAME)
            footer_row.addWidget(url_label)
        root_layout.addLayout(footer_row)

    def _build_mode_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()
        self._mode_buttons: dict[PortalMode, QPushButton] = {}
        for mode, label in (
            (PortalMode.QUIZ_LIST, MODE_BUTTON_QUIZZES),
            (PortalMode.AUTHORING, MODE_BUTTON_CREATE),
            (PortalMode.RESULTS, MODE_BUTTON_RESULTS),
            (PortalMode.NEWS, MODE_BUTTON_NEWS),
            (PortalMode.MATERIALS, MODE_BUTTON_MATERIALS),
        ):
            button = QPushButton(label, self)
            button.setObjectName(NAV_BUTTON_NAME)
            button.setCheckable(True)
            button.clicked.connect(lambda _checked=False, target=mode: self._handle_mode_button(target))
            button_row.addWidget(button)
            self._mode_buttons[mode] = button

        button_row.addStretch()

        self.auth_button = QPushButton(MODE_BUTTON_SIGN_IN, self)
        self.auth_button.clicked.connect(self._handle_auth_button)
        button_row.addWidget(self.auth_button)

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(lambda: show_info(self, f"{APP_NAME} Help", HELP_TEXT))
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        # Store listeners may fire on the API thread, so widgets poll instead.
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_state)
        self.refresh_timer.start()

    def _refresh_state(self) -> None:
        if self._mode == PortalMode.QUIZ_LIST:
            self.quiz_list_panel.refresh()
        elif self._mode == PortalMode.RESULTS:
            self.results_panel.refresh()

    # --- Mode switching ---

    def _set_mode(self, mode: PortalMode) -> None:
        self._mode = mode
        for button_mode, button in self._mode_buttons.items():
            button.setChecked(button_mode == mode)
            button.setEnabled(mode != PortalMode.QUIZ_TAKING)
        self.mode_stack.setCurrentWidget(self._panels[mode])
        if mode == PortalMode.QUIZ_LIST:
            self.quiz_list_panel.refresh()
        elif mode == PortalMode.NEWS:
            self.news_panel.refresh()

    def _handle_mode_button(self, mode: PortalMode) -> None:
        if mode in (PortalMode.AUTHORING, PortalMode.RESULTS) and not self._ensure_author():
            self._mode_buttons[mode].setChecked(False)
            return
        if mode == PortalMode.RESULTS and not self.results_panel.load_quizzes():
            self._mode_buttons[mode].setChecked(False)
            return
        self._set_mode(mode)

    def _ensure_author(self) -> bool:
        subject = self.portal.current_subject()
        if subject is None or subject.is_anonymous:
            if not self._prompt_sign_in():
                return False
        if not self.portal.can_author():
            show_warning(self, "Not allowed", AUTHOR_REQUIRED_MESSAGE)
            return False
        return True

    # --- Quiz attempts ---

    def _handle_start_quiz(self, quiz_id: str) -> None:
        if self.portal.get_attempt_status() is AttemptStatus.COMPLETED:
            self.portal.close_attempt()
        try:
            self.portal.start_quiz(quiz_id)
        except Unauthenticated:
            if not self._prompt_sign_in(SIGN_IN_REQUIRED_MESSAGE):
                return
            self._handle_start_quiz(quiz_id)
            return
        except (GesAnnexError, KeyError, RuntimeError, ValueError) as exc:
            show_portal_error(self, exc)
            return
        self._set_mode(PortalMode.QUIZ_TAKING)
        self.quiz_taking_panel.refresh()

    # --- Identity ---

    def _prompt_sign_in(self, reason: str | None = None) -> bool:
        dialog = AuthDialog(self.portal, self)
        if reason:
            dialog.error_label.setText(reason)
        return bool(dialog.exec())

    def _handle_auth_button(self) -> None:
        subject = self.portal.current_subject()
        if subject is None or subject.is_anonymous:
            self._prompt_sign_in()
            return
        if self.portal.get_attempt_status() is AttemptStatus.IN_PROGRESS:
            if not confirm_abandon_attempt(self):
                return
        self.portal.close_attempt()
        self.portal.sign_out()
        self._set_mode(PortalMode.QUIZ_LIST)

    def _on_subject_changed(self, subject: Subject | None) -> None:
        signed_in = subject is not None and not subject.is_anonymous
        self.auth_button.setText(MODE_BUTTON_SIGN_OUT if signed_in else MODE_BUTTON_SIGN_IN)
        self.identity_label.setText(f"Signed in as {subject.email}" if signed_in else "Not signed in")
        self.results_panel.clear()
        if (
            self._mode == PortalMode.QUIZ_TAKING
            and self.portal.get_attempt_status() is AttemptStatus.NOT_STARTED
        ):
            self._set_mode(PortalMode.QUIZ_LIST)

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n"
            f"Contact: {APP_CONTACT_EMAIL}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def closeEvent(self, event) -> None:
        self.refresh_timer.stop()
        self._identity_subscription.unsubscribe()
        self.quiz_taking_panel.shutdown()
        self.portal.close()
        super().closeEvent(event)
