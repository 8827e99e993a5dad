"""Quiz-related constants shared across UI, server, and core layers."""

OPTION_COUNT: int = 4
OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D")
DEFAULT_TIMER_SECONDS: int = 300
COUNTDOWN_INTERVAL_SECONDS: float = 1.0
TIMER_WARNING_WINDOW_SECONDS: int = 10
ANONYMOUS_EMAIL: str = "anonymous"
DEFAULT_AUTHOR_ROLE: str = "author"
EDUCATION_LEVELS: tuple[str, ...] = ("Basic", "JHS", "SHS")
