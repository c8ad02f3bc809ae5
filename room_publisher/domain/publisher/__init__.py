"""Synthetic media publisher.

Top-level API:
- `LifecycleController`: connect, publish, capture and ordered teardown
- `ShutdownSignal`: interrupt flag polled by the controller

Internals:
- `generators`: synthetic audio/video frame producers
- `sinks`: thread-safe hand-off into LiveKit media sources
- `channels`: per-kind wiring of generator, sink, track and options
- `capture`: capture loop threads and their cancellation flags
- `ledger`: best-effort publish/unpublish bookkeeping
"""

from room_publisher.domain.publisher.capture import CancellationFlag, CaptureLoopRunner
from room_publisher.domain.publisher.channels import (
    MediaChannel,
    build_audio_channel,
    build_media_channels,
    build_video_channel,
)
from room_publisher.domain.publisher.controller import LifecycleController
from room_publisher.domain.publisher.generators import (
    ColorFillVideoGenerator,
    MediaGenerator,
    NoiseAudioGenerator,
)
from room_publisher.domain.publisher.ledger import PublicationLedger, PublishOutcome
from room_publisher.domain.publisher.shutdown import ShutdownSignal
from room_publisher.domain.publisher.sinks import AudioSink, MediaSink, VideoSink
from room_publisher.domain.publisher.state_machine import LifecycleStateMachine

__all__ = [
    "AudioSink",
    "CancellationFlag",
    "CaptureLoopRunner",
    "ColorFillVideoGenerator",
    "LifecycleController",
    "LifecycleStateMachine",
    "MediaChannel",
    "MediaGenerator",
    "MediaSink",
    "NoiseAudioGenerator",
    "PublicationLedger",
    "PublishOutcome",
    "ShutdownSignal",
    "VideoSink",
    "build_audio_channel",
    "build_media_channels",
    "build_video_channel",
]
