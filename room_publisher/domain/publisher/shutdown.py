"""Interrupt-driven shutdown flag."""

from __future__ import annotations

import signal
from types import FrameType

from loguru import logger


class ShutdownSignal:
    """Flag flipped once by SIGINT/SIGTERM and polled by the controller.

    The installed handler performs a single attribute write. It does no I/O,
    takes no locks and never runs teardown itself.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self) -> None:
        self._keep_running = True
        self._previous: dict[int, object] = {}

    @property
    def keep_running(self) -> bool:
        return self._keep_running

    @property
    def requested(self) -> bool:
        return not self._keep_running

    def request(self) -> None:
        self._keep_running = False

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        self._keep_running = False

    def install(self) -> None:
        """Register the handler, remembering what it replaces. Main thread only."""
        for sig in self.SIGNALS:
            self._previous[sig] = signal.signal(sig, self._handle)
        logger.debug("Shutdown signal handlers installed (SIGINT, SIGTERM)")

    def restore(self) -> None:
        for sig, previous in self._previous.items():
            signal.signal(sig, previous)  # type: ignore[arg-type]
        self._previous.clear()
