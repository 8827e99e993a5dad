"""Cancellable countdown handles that drive quiz timers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Event, Lock, Thread
from typing import Callable

from ges_annex.constants.quiz_constants import COUNTDOWN_INTERVAL_SECONDS


class Countdown(ABC):
    """Repeating timer owned by exactly one attempt.

    Implementations call ``on_tick`` every interval until ``cancel`` is called.
    ``cancel`` is idempotent and may be called from inside ``on_tick``.
    """

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def cancel(self) -> None: ...

    @property
    @abstractmethod
    def is_active(self) -> bool: ...

    def __enter__(self) -> "Countdown":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


CountdownFactory = Callable[[float, Callable[[], None]], Countdown]


class ThreadCountdown(Countdown):
    """Countdown backed by a daemon thread waiting on an Event."""

    def __init__(
        self,
        interval_seconds: float = COUNTDOWN_INTERVAL_SECONDS,
        on_tick: Callable[[], None] | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("Countdown interval must be positive.")
        self._interval = interval_seconds
        self._on_tick = on_tick or (lambda: None)
        self._cancelled = Event()
        self._lock = Lock()
        self._thread: Thread | None = None

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("Countdown has already been started.")
            self._thread = Thread(target=self._run, name="QuizCountdown", daemon=True)
            self._thread.start()

    def cancel(self) -> None:
        # No join: the tick callback may be waiting on a lock held by the caller.
        self._cancelled.set()

    @property
    def is_active(self) -> bool:
        return self._thread is not None and not self._cancelled.is_set()

    def _run(self) -> None:
        while not self._cancelled.wait(self._interval):
            self._on_tick()
