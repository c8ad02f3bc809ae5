"""Lifecycle controller for the synthetic publisher.

Sequences the whole run on the event loop thread:

    connect → publish (per kind, independently) → start capture loops
    → poll the shutdown signal → cancel loops → join loops
    → unpublish → close sinks → release the session

The ordering of the last four steps is the controller's main guarantee: a
track is never unpublished while its capture loop may still be running, and
the session is never released before every loop has joined.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Protocol, TextIO

from loguru import logger

from room_publisher.domain.publisher.capture import CancellationFlag, CaptureLoopRunner
from room_publisher.domain.publisher.channels import (
    ChannelBuilder,
    MediaChannel,
    build_media_channels,
)
from room_publisher.domain.publisher.ledger import PublicationLedger
from room_publisher.domain.publisher.shutdown import ShutdownSignal
from room_publisher.domain.publisher.state_machine import LifecycleStateMachine
from room_publisher.schemas import LifecycleState, PublisherSettings
from room_publisher.services.integrations.livekit_service import build_room_options
from room_publisher.utils.app_errors import AppError, AppErrorCode


class MediaSession(Protocol):
    async def connect(self, url: str, token: str, options: Any = None) -> bool: ...

    async def publish_track(self, track: Any, options: Any) -> Any: ...

    async def unpublish_track(self, track_sid: str) -> None: ...

    async def close(self) -> None: ...


class LifecycleController:
    """Owns the session, the publications and the capture threads for one run."""

    def __init__(
        self,
        session: MediaSession,
        shutdown: ShutdownSignal,
        *,
        settings: PublisherSettings | None = None,
        channel_builder: ChannelBuilder = build_media_channels,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self._session = session
        self._shutdown = shutdown
        self._settings = settings or PublisherSettings()
        self._channel_builder = channel_builder
        self._stdout = stdout
        self._stderr = stderr

        self._ledger = PublicationLedger(session)
        self._channels: list[MediaChannel] = []
        self._runners: list[CaptureLoopRunner] = []

        self._state = LifecycleState.INIT
        self._history: list[LifecycleState] = [LifecycleState.INIT]

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def history(self) -> list[LifecycleState]:
        return list(self._history)

    @property
    def ledger(self) -> PublicationLedger:
        return self._ledger

    @property
    def runners(self) -> list[CaptureLoopRunner]:
        return list(self._runners)

    async def run(self, url: str, token: str) -> int:
        """Run until the shutdown signal fires.

        Returns:
            Process exit status: 0 after an orderly shutdown, 1 if the
            connection failed
        """
        self._transition(LifecycleState.CONNECTING)
        self._notify(f"Connecting to: {url}")

        connected = await self._session.connect(url, token, build_room_options(self._settings))
        if not connected:
            self._notify("Failed to connect", error=True)
            await self._session.close()
            self._transition(LifecycleState.CLOSED)
            return 1

        self._notify("Connected.")

        try:
            if self._shutdown.requested:
                logger.info("Shutdown requested while connecting; skipping publish")
            else:
                await self._start()
                self._transition(LifecycleState.RUNNING)
                await self._wait_for_shutdown()
        finally:
            self._transition(LifecycleState.DRAINING)
            await self._drain()
            self._transition(LifecycleState.CLOSED)

        self._notify("Exiting.")
        return 0

    async def _start(self) -> None:
        loop = asyncio.get_running_loop()
        self._channels = self._channel_builder(loop, self._settings)

        # Each kind is attempted regardless of how the previous one went
        for channel in self._channels:
            outcome = await self._ledger.publish(channel.kind, channel.track, channel.options)
            if outcome.ok:
                self._notify(f"Published {channel.kind}: sid={outcome.sid}")
            else:
                self._notify(f"Failed to publish {channel.kind}: {outcome.error}", error=True)

        for channel in self._channels:
            if not self._ledger.is_published(channel.kind):
                logger.info(f"Skipping {channel.kind} capture loop: track not published")
                continue
            runner = CaptureLoopRunner(channel.generator, channel.sink, CancellationFlag())
            self._runners.append(runner)
            runner.start()

    async def _wait_for_shutdown(self) -> None:
        poll_interval = self._settings.shutdown_poll_ms / 1000
        while self._shutdown.keep_running:
            await asyncio.sleep(poll_interval)
        logger.info("Shutdown signal received")

    async def _drain(self) -> None:
        for runner in self._runners:
            runner.stop()

        # Joined off the loop so frames already handed to it can still complete
        for runner in self._runners:
            await asyncio.to_thread(runner.join)

        await self._ledger.unpublish_all()

        for channel in self._channels:
            try:
                await channel.sink.aclose()
            except Exception as exc:
                logger.debug(f"Ignoring sink close failure: kind={channel.kind} error={exc}")

        await self._session.close()

    def _transition(self, new: LifecycleState) -> None:
        if not LifecycleStateMachine.can_transition(self._state, new):
            raise AppError(
                errcode=AppErrorCode.E_INVALID_STATE,
                errmesg=f"Invalid lifecycle transition {self._state} -> {new}",
            )
        logger.debug(f"Lifecycle transition: {self._state} -> {new}")
        self._state = new
        self._history.append(new)

    def _notify(self, message: str, *, error: bool = False) -> None:
        stream = (self._stderr or sys.stderr) if error else (self._stdout or sys.stdout)
        print(message, file=stream, flush=True)
