"""Countdown handle driven by a QTimer on the GUI thread."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QTimer

from ges_annex.constants.quiz_constants import COUNTDOWN_INTERVAL_SECONDS
from ges_annex.core.services.countdown import Countdown


class QtCountdown(Countdown):
    """Ticks from the Qt event loop, so listeners may touch widgets directly."""

    def __init__(
        self,
        interval_seconds: float = COUNTDOWN_INTERVAL_SECONDS,
        on_tick: Callable[[], None] | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("Countdown interval must be positive.")
        self._on_tick = on_tick or (lambda: None)
        self._started = False
        self._timer = QTimer()
        self._timer.setInterval(int(interval_seconds * 1000))
        self._timer.timeout.connect(self._handle_timeout)

    def start(self) -> None:
        if self._started:
            raise RuntimeError("Countdown has already been started.")
        self._started = True
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def _handle_timeout(self) -> None:
        self._on_tick()
