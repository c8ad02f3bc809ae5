"""LiveKit session layer.

This module provides a thin wrapper around the `livekit` realtime SDK
(`livekit.rtc`).

Based on the official LiveKit Python SDK:
https://github.com/livekit/python-sdks

Usage:
    from room_publisher.services.integrations.livekit_service import (
        LivekitSession,
        LogSink,
        livekit_runtime,
    )

    livekit_runtime.initialize(LogSink.CONSOLE)
    session = LivekitSession()
    if await session.connect(url, token, build_room_options(settings)):
        publication = await session.publish_track(track, options)
        ...
        await session.unpublish_track(publication.sid)
    await session.close()
    livekit_runtime.shutdown()
"""

from __future__ import annotations

import logging
from enum import Enum

from livekit import rtc
from loguru import logger

from room_publisher.schemas import PublisherSettings, SessionState
from room_publisher.shared.logger import InterceptHandler, format_error
from room_publisher.utils.app_errors import AppError, AppErrorCode

LIVEKIT_LOGGER_NAME = "livekit"


class LogSink(str, Enum):
    """Where the SDK's own log records end up."""

    CONSOLE = "console"
    SILENT = "silent"


class LivekitRuntime:
    """Process-wide setup and teardown of the SDK logging bridge.

    `initialize()` attaches a handler to the stdlib `livekit` logger so SDK
    records are forwarded to loguru (CONSOLE) or dropped (SILENT).
    `shutdown()` detaches it. Both are idempotent.
    """

    def __init__(self) -> None:
        self._handler: logging.Handler | None = None
        self._previous_propagate = True

    @property
    def is_initialized(self) -> bool:
        return self._handler is not None

    def initialize(self, log_sink: LogSink = LogSink.CONSOLE) -> None:
        if self._handler is not None:
            logger.debug("LiveKit runtime already initialized")
            return

        sdk_logger = logging.getLogger(LIVEKIT_LOGGER_NAME)
        if log_sink == LogSink.CONSOLE:
            self._handler = InterceptHandler()
            if sdk_logger.level == logging.NOTSET:
                sdk_logger.setLevel(logging.INFO)
        else:
            self._handler = logging.NullHandler()

        self._previous_propagate = sdk_logger.propagate
        sdk_logger.addHandler(self._handler)
        sdk_logger.propagate = False
        logger.debug(f"LiveKit runtime initialized: log_sink={log_sink.value}")

    def shutdown(self) -> None:
        if self._handler is None:
            return

        sdk_logger = logging.getLogger(LIVEKIT_LOGGER_NAME)
        sdk_logger.removeHandler(self._handler)
        sdk_logger.propagate = self._previous_propagate
        self._handler = None
        logger.debug("LiveKit runtime shut down")


livekit_runtime = LivekitRuntime()


def build_room_options(settings: PublisherSettings | None = None) -> rtc.RoomOptions:
    settings = settings or PublisherSettings()
    return rtc.RoomOptions(auto_subscribe=settings.auto_subscribe, dynacast=settings.dynacast)


class LivekitSession:
    """Owns one `rtc.Room` for the lifetime of the publisher.

    All methods must be called from the event loop thread that created the room.
    """

    def __init__(self, room: rtc.Room | None = None) -> None:
        self._room = room
        self._state = SessionState.DISCONNECTED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def room(self) -> rtc.Room | None:
        return self._room

    async def connect(self, url: str, token: str, options: rtc.RoomOptions | None = None) -> bool:
        """Connect to the room.

        Returns:
            True when connected, False on any connection failure
        """
        if self._state != SessionState.DISCONNECTED:
            raise AppError(
                errcode=AppErrorCode.E_INVALID_STATE,
                errmesg=f"Cannot connect a session in state {self._state}",
            )

        if self._room is None:
            self._room = rtc.Room()

        try:
            await self._room.connect(url, token, options=options or build_room_options())
        except rtc.ConnectError as exc:
            logger.error(f"Room connection failed: url={url} error={exc.message}")
            return False
        except Exception as exc:
            logger.error(f"Room connection failed: url={url} error={type(exc).__name__}: {exc}")
            logger.debug(format_error(exc))
            return False

        self._state = SessionState.CONNECTED
        logger.info(f"Connected to room={self._room.name}")
        return True

    async def publish_track(
        self, track: rtc.LocalTrack, options: rtc.TrackPublishOptions
    ) -> rtc.LocalTrackPublication:
        """Publish a local track.

        Raises:
            AppError: If the session is not connected or the SDK rejects the track
        """
        room = self._require_connected()
        try:
            return await room.local_participant.publish_track(track, options)
        except Exception as exc:
            raise AppError(
                errcode=AppErrorCode.E_PUBLISH_FAILED,
                errmesg=f"{type(exc).__name__}: {exc}",
            ) from exc

    async def unpublish_track(self, track_sid: str) -> None:
        """Unpublish a previously published track.

        Raises:
            AppError: If the session is not connected or the SDK call fails
        """
        room = self._require_connected()
        try:
            await room.local_participant.unpublish_track(track_sid)
        except Exception as exc:
            raise AppError(
                errcode=AppErrorCode.E_UNPUBLISH_FAILED,
                errmesg=f"{type(exc).__name__}: {exc}",
            ) from exc

    async def close(self) -> None:
        """Release the room. Safe to call more than once."""
        if self._state == SessionState.CLOSED:
            return

        was_connected = self._state == SessionState.CONNECTED
        self._state = SessionState.CLOSED

        if was_connected and self._room is not None:
            try:
                await self._room.disconnect()
            except Exception as exc:
                logger.warning(f"Room disconnect failed: {type(exc).__name__}: {exc}")
                return
        logger.info("Session closed")

    def _require_connected(self) -> rtc.Room:
        if self._state != SessionState.CONNECTED or self._room is None:
            raise AppError(
                errcode=AppErrorCode.E_INVALID_STATE,
                errmesg=f"Session is not connected (state={self._state})",
            )
        return self._room
