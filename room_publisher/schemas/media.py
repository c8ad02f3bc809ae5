"""Media kinds and the fixed parameters of the synthetic publisher."""

from enum import Enum

from pydantic import BaseModel, Field


class MediaKind(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"

    def __str__(self) -> str:
        return self.value


class PublisherSettings(BaseModel):
    """Media format, cadence and polling parameters.

    Attributes:
        audio_sample_rate: Audio sample rate in Hz
        audio_num_channels: Number of interleaved audio channels
        audio_frame_ms: Duration of one audio frame
        video_width: Video frame width in pixels
        video_height: Video frame height in pixels
        video_frame_ms: Interval between two video frames
        shutdown_poll_ms: Interval of the controller's shutdown poll
    """

    audio_sample_rate: int = Field(default=48000, gt=0)
    audio_num_channels: int = Field(default=1, gt=0)
    audio_frame_ms: int = Field(default=10, gt=0)
    audio_track_name: str = "noise"

    video_width: int = Field(default=1280, gt=0)
    video_height: int = Field(default=720, gt=0)
    video_frame_ms: int = Field(default=33, gt=0)
    video_track_name: str = "rgb"

    shutdown_poll_ms: int = Field(default=50, gt=0)

    auto_subscribe: bool = True
    dynacast: bool = False

    @property
    def audio_samples_per_frame(self) -> int:
        return self.audio_sample_rate * self.audio_frame_ms // 1000


__all__ = ["MediaKind", "PublisherSettings"]
