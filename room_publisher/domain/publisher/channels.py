"""Wiring of generator, sink, local track and publish options per media kind."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from livekit import rtc

from room_publisher.domain.publisher.generators import (
    ColorFillVideoGenerator,
    MediaGenerator,
    NoiseAudioGenerator,
)
from room_publisher.domain.publisher.sinks import AudioSink, MediaSink, VideoSink
from room_publisher.schemas import MediaKind, PublisherSettings


@dataclass
class MediaChannel:
    """Everything needed to publish and feed one track."""

    kind: MediaKind
    generator: MediaGenerator
    sink: MediaSink
    track: Any
    options: Any


ChannelBuilder = Callable[[asyncio.AbstractEventLoop, PublisherSettings], list[MediaChannel]]


def _publish_options(source: rtc.TrackSource.ValueType) -> rtc.TrackPublishOptions:
    return rtc.TrackPublishOptions(source=source, dtx=False, simulcast=False)


def build_audio_channel(
    loop: asyncio.AbstractEventLoop, settings: PublisherSettings
) -> MediaChannel:
    source = rtc.AudioSource(settings.audio_sample_rate, settings.audio_num_channels, loop=loop)
    track = rtc.LocalAudioTrack.create_audio_track(settings.audio_track_name, source)
    return MediaChannel(
        kind=MediaKind.AUDIO,
        generator=NoiseAudioGenerator.from_settings(settings),
        sink=AudioSink(source, loop),
        track=track,
        options=_publish_options(rtc.TrackSource.SOURCE_MICROPHONE),
    )


def build_video_channel(
    loop: asyncio.AbstractEventLoop, settings: PublisherSettings
) -> MediaChannel:
    source = rtc.VideoSource(settings.video_width, settings.video_height)
    track = rtc.LocalVideoTrack.create_video_track(settings.video_track_name, source)
    return MediaChannel(
        kind=MediaKind.VIDEO,
        generator=ColorFillVideoGenerator.from_settings(settings),
        sink=VideoSink(source, loop),
        track=track,
        options=_publish_options(rtc.TrackSource.SOURCE_CAMERA),
    )


def build_media_channels(
    loop: asyncio.AbstractEventLoop, settings: PublisherSettings
) -> list[MediaChannel]:
    return [build_audio_channel(loop, settings), build_video_channel(loop, settings)]
