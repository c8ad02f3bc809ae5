"""Capture loops: one dedicated thread per synthetic generator."""

from __future__ import annotations

import threading
import time

from loguru import logger

from room_publisher.domain.publisher.generators import MediaGenerator
from room_publisher.domain.publisher.sinks import MediaSink
from room_publisher.schemas import MediaKind


class CancellationFlag:
    """Stop flag shared by the controller (writer) and one capture loop (reader).

    Starts in the running state. `cancel()` is one-way: there is no way to put
    the flag back into the running state.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    @property
    def is_running(self) -> bool:
        return not self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; returns True as soon as the flag is cancelled."""
        return self._cancelled.wait(timeout)


class CaptureLoopRunner:
    """Drives one generator on its own thread until its flag is cancelled.

    Each cycle produces one frame, pushes it into the sink and waits for the
    next frame deadline. Errors raised while producing or pushing a frame are
    logged and the loop carries on with the next frame.
    """

    # Only the first few failures are logged in full, then one line per N
    ERROR_LOG_HEAD = 3
    ERROR_LOG_EVERY = 100

    def __init__(
        self,
        generator: MediaGenerator,
        sink: MediaSink,
        flag: CancellationFlag | None = None,
        *,
        name: str | None = None,
    ) -> None:
        self._generator = generator
        self._sink = sink
        self._flag = flag or CancellationFlag()
        self._thread = threading.Thread(
            target=self._run,
            name=name or f"capture-{generator.kind}",
            daemon=True,
        )
        self.frames_produced = 0
        self.errors = 0

    @property
    def kind(self) -> MediaKind:
        return self._generator.kind

    @property
    def flag(self) -> CancellationFlag:
        return self._flag

    @property
    def started(self) -> bool:
        return self._thread.ident is not None

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._flag.cancel()

    def join(self, timeout: float | None = None) -> None:
        if self.started:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        interval = self._generator.frame_interval
        logger.info(f"Capture loop started: kind={self.kind} interval={interval * 1000:.0f}ms")

        deadline = time.monotonic()
        while self._flag.is_running:
            try:
                frame = self._generator.next_frame()
                self._sink.push(frame)
                self.frames_produced += 1
            except Exception as exc:
                self.errors += 1
                self._log_frame_error(exc)

            deadline += interval
            delay = deadline - time.monotonic()
            if delay < -interval:
                # Fell more than a frame behind: re-anchor rather than burst
                deadline = time.monotonic()
                continue
            if delay > 0 and self._flag.wait(delay):
                break

        logger.info(
            f"Capture loop stopped: kind={self.kind} "
            f"frames={self.frames_produced} errors={self.errors}"
        )

    def _log_frame_error(self, exc: Exception) -> None:
        if self.errors <= self.ERROR_LOG_HEAD or self.errors % self.ERROR_LOG_EVERY == 0:
            logger.warning(
                f"Capture loop frame error: kind={self.kind} count={self.errors} "
                f"error={type(exc).__name__}: {exc}"
            )
