"""Thread-safe hand-off from capture threads into LiveKit media sources.

`rtc.AudioSource` and `rtc.VideoSource` belong to the event loop that created
them. Capture loops run on their own threads, so every frame is marshalled
onto that loop here.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Protocol

from livekit import rtc
from loguru import logger

from room_publisher.utils.app_errors import AppError, AppErrorCode


class MediaSink(Protocol):
    def push(self, frame: Any) -> None: ...

    async def aclose(self) -> None: ...


def _ensure_loop_open(loop: asyncio.AbstractEventLoop) -> None:
    if loop.is_closed():
        raise AppError(
            errcode=AppErrorCode.E_INVALID_STATE,
            errmesg="Event loop is closed; dropping frame",
        )


class AudioSink:
    """Pushes audio frames and blocks until the source accepted them.

    Waiting on the capture keeps the producer paced by the source's queue
    instead of piling up pending coroutines on the loop.
    """

    def __init__(
        self,
        source: rtc.AudioSource,
        loop: asyncio.AbstractEventLoop,
        *,
        capture_timeout: float = 1.0,
    ) -> None:
        self._source = source
        self._loop = loop
        self._capture_timeout = capture_timeout

    @property
    def source(self) -> rtc.AudioSource:
        return self._source

    def push(self, frame: rtc.AudioFrame) -> None:
        _ensure_loop_open(self._loop)
        future = asyncio.run_coroutine_threadsafe(self._source.capture_frame(frame), self._loop)
        try:
            future.result(timeout=self._capture_timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise

    async def aclose(self) -> None:
        await self._source.aclose()


class VideoSink:
    """Schedules video frames on the loop without waiting for them.

    At most `max_pending` frames may be queued on the loop at once. Frames
    pushed beyond that are dropped, so a stalled loop cannot accumulate
    full-size frame buffers.
    """

    def __init__(
        self,
        source: rtc.VideoSource,
        loop: asyncio.AbstractEventLoop,
        *,
        max_pending: int = 2,
    ) -> None:
        self._source = source
        self._loop = loop
        self._max_pending = max_pending
        self._pending = 0
        self._dropped = 0
        self._lock = threading.Lock()

    @property
    def source(self) -> rtc.VideoSource:
        return self._source

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    def push(self, frame: rtc.VideoFrame) -> None:
        _ensure_loop_open(self._loop)
        with self._lock:
            accepted = self._pending < self._max_pending
            if accepted:
                self._pending += 1
            else:
                self._dropped += 1
                dropped = self._dropped

        if not accepted:
            if dropped == 1 or dropped % 100 == 0:
                logger.warning(f"Event loop is behind; dropped {dropped} video frame(s)")
            return

        self._loop.call_soon_threadsafe(self._capture, frame)

    def _capture(self, frame: rtc.VideoFrame) -> None:
        try:
            self._source.capture_frame(frame)
        finally:
            with self._lock:
                self._pending -= 1

    async def aclose(self) -> None:
        await self._source.aclose()
