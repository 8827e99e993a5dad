"""Application entry point for GES Annex."""

from __future__ import annotations

import socket
import sys

import uvicorn

from ges_annex.config import Settings, get_settings
from ges_annex.core.materials import MaterialsCatalog
from ges_annex.core.news_feed import NewsFeed
from ges_annex.core.sample_content import seed_sample_quiz
from ges_annex.core.services.content_store import (
    ContentStore,
    InMemoryContentStore,
    JsonFileContentStore,
)
from ges_annex.core.services.identity_provider import AccountDirectory
from ges_annex.server.api_server import SessionRegistry, create_api_app, start_api_server
from ges_annex.utils.logging_config import configure_logging


def _determine_portal_url(port: int) -> str:
    """Best-effort determination of the local IP for the browser-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def build_content_store(settings: Settings) -> ContentStore:
    if settings.data_path is not None:
        return JsonFileContentStore(settings.data_path, app_id=settings.APP_ID)
    return InMemoryContentStore(app_id=settings.APP_ID)


def _run_desktop(
    settings: Settings,
    store: ContentStore,
    directory: AccountDirectory,
    news_feed: NewsFeed,
    portal_url: str,
) -> int:
    from PySide6.QtWidgets import QApplication

    from ges_annex.core.quiz_portal import QuizPortal
    from ges_annex.core.services.identity_provider import IdentityProvider
    from ges_annex.ui import PortalMainWindow, QtCountdown

    app = QApplication(sys.argv)
    portal = QuizPortal(
        store,
        IdentityProvider(directory),
        QtCountdown,
        allow_anonymous_attempts=settings.ALLOW_ANONYMOUS_ATTEMPTS,
        author_role=settings.AUTHOR_ROLE,
    )
    window = PortalMainWindow(portal, news_feed, MaterialsCatalog(), portal_url=portal_url)
    window.show()
    return app.exec()


def main() -> None:
    """Initialize logging, start the API server, and launch the Qt UI."""
    settings = get_settings()
    logger = configure_logging(settings.LOG_LEVEL)
    logger.info("Starting GES Annex…")

    store = build_content_store(settings)
    seed_sample_quiz(store, settings.SEED_QUIZ_FILE)
    directory = AccountDirectory(
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        author_emails=settings.author_emails,
        author_role=settings.AUTHOR_ROLE,
    )
    registry = SessionRegistry(
        store,
        directory,
        allow_anonymous_attempts=settings.ALLOW_ANONYMOUS_ATTEMPTS,
        author_role=settings.AUTHOR_ROLE,
        max_sessions=settings.MAX_SESSIONS,
        idle_seconds=settings.SESSION_IDLE_SECONDS,
    )
    news_feed = NewsFeed(settings.NEWS_DIR)

    if settings.HEADLESS:
        app = create_api_app(registry, news_feed)
        try:
            uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
        finally:
            registry.close_all()
        return

    start_api_server(
        registry,
        news_feed,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
    )
    portal_url = _determine_portal_url(settings.PORT)
    logger.info("Browser portal available at %s", portal_url)
    exit_code = _run_desktop(settings, store, directory, news_feed, portal_url)
    registry.close_all()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
