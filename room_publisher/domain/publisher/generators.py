"""Synthetic media generators.

A generator produces exactly one frame per call and knows its own cadence.
It holds no external resources; it is only ever touched by the capture
thread that drives it.
"""

from __future__ import annotations

from typing import Any, Protocol

import numpy as np
from livekit import rtc

from room_publisher.schemas import MediaKind, PublisherSettings


class MediaGenerator(Protocol):
    kind: MediaKind

    @property
    def frame_interval(self) -> float: ...

    def next_frame(self) -> Any: ...


class NoiseAudioGenerator:
    """Uniform int16 white noise, `frame_ms` per frame."""

    kind = MediaKind.AUDIO

    def __init__(
        self,
        *,
        sample_rate: int = 48000,
        num_channels: int = 1,
        frame_ms: int = 10,
        amplitude: int = 3000,
        seed: int | None = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._num_channels = num_channels
        self._frame_ms = frame_ms
        self._samples_per_channel = sample_rate * frame_ms // 1000
        self._amplitude = amplitude
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_settings(cls, settings: PublisherSettings) -> NoiseAudioGenerator:
        return cls(
            sample_rate=settings.audio_sample_rate,
            num_channels=settings.audio_num_channels,
            frame_ms=settings.audio_frame_ms,
        )

    @property
    def frame_interval(self) -> float:
        return self._frame_ms / 1000

    @property
    def samples_per_channel(self) -> int:
        return self._samples_per_channel

    def next_frame(self) -> rtc.AudioFrame:
        samples = self._rng.integers(
            -self._amplitude,
            self._amplitude + 1,
            size=self._samples_per_channel * self._num_channels,
            dtype=np.int16,
        )
        return rtc.AudioFrame(
            data=samples.tobytes(),
            sample_rate=self._sample_rate,
            num_channels=self._num_channels,
            samples_per_channel=self._samples_per_channel,
        )


class ColorFillVideoGenerator:
    """Solid BGRA frames whose colour drifts a little on every frame."""

    kind = MediaKind.VIDEO

    # Per-frame increments of the B, G and R channels
    COLOR_STEP = (1, 2, 3)

    def __init__(self, *, width: int = 1280, height: int = 720, frame_ms: int = 33) -> None:
        self._width = width
        self._height = height
        self._frame_ms = frame_ms
        self._frame_index = 0
        self._buffer = np.empty((height, width, 4), dtype=np.uint8)

    @classmethod
    def from_settings(cls, settings: PublisherSettings) -> ColorFillVideoGenerator:
        return cls(
            width=settings.video_width,
            height=settings.video_height,
            frame_ms=settings.video_frame_ms,
        )

    @property
    def frame_interval(self) -> float:
        return self._frame_ms / 1000

    def color_at(self, frame_index: int) -> tuple[int, int, int, int]:
        blue, green, red = (frame_index * step % 256 for step in self.COLOR_STEP)
        return blue, green, red, 255

    def next_frame(self) -> rtc.VideoFrame:
        self._buffer[:, :] = self.color_at(self._frame_index)
        self._frame_index += 1
        return rtc.VideoFrame(
            self._width,
            self._height,
            rtc.VideoBufferType.BGRA,
            self._buffer.tobytes(),
        )
