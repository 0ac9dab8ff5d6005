"""SIGINT (Ctrl+C) handling for in-flight runs."""

from __future__ import annotations

import logging
import signal
import threading
import time
from collections.abc import Callable
from contextlib import AbstractContextManager
from types import FrameType
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Pressing Ctrl+C on a keyboard can deliver more than one SIGINT.
DEBOUNCE_THRESHOLD = 0.05


class InterruptSource(AbstractContextManager["InterruptSource"]):
    """Turns raw SIGINT deliveries into debounced abort signals.

    While entered, the source owns the process SIGINT handler and calls
    ``on_abort`` once per logical interrupt. Raw signals arriving within
    ``threshold`` seconds of the last emitted one are dropped. The previous
    handler is restored on exit, whatever the exit path.
    """

    def __init__(
        self,
        on_abort: Callable[[], None],
        *,
        threshold: float = DEBOUNCE_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
        signum: int = signal.SIGINT,
    ) -> None:
        self._on_abort = on_abort
        self._threshold = threshold
        self._clock = clock
        self._signum = signum
        self._last_emitted: Optional[float] = None
        self._prev_handler: Any = None
        self._installed = False
        self._active = False

    def __enter__(self) -> "InterruptSource":
        if self._active:
            raise RuntimeError("interrupt source is already active")
        self._active = True
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread; SIGINT handler not installed")
            return self
        self._prev_handler = signal.getsignal(self._signum)
        signal.signal(self._signum, self._handle_signal)  # type: ignore[arg-type]
        self._installed = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._active = False
        if not self._installed:
            return
        self._installed = False
        prev = self._prev_handler if self._prev_handler is not None else signal.SIG_DFL
        signal.signal(self._signum, prev)  # type: ignore[arg-type]
        self._prev_handler = None

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        self.deliver()

    def deliver(self) -> bool:
        """Feed one raw interrupt; return True when an abort was emitted."""
        if not self._active:
            return False
        now = self._clock()
        if self._last_emitted is not None and now - self._last_emitted < self._threshold:
            logger.debug("Dropped duplicate interrupt")
            return False
        self._last_emitted = now
        self._on_abort()
        return True
