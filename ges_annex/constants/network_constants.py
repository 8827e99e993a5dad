"""Network configuration constants for the portal API."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
SESSION_COOKIE: str = "ges_annex_session"
SESSION_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 30
DEFAULT_MAX_SESSIONS: int = 500
DEFAULT_SESSION_IDLE_SECONDS: int = 60 * 60 * 2
