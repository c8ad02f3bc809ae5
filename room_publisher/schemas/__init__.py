"""Enums and settings models shared across the publisher."""

from .lifecycle_state import LifecycleState, SessionState
from .media import MediaKind, PublisherSettings

__all__ = [
    "LifecycleState",
    "MediaKind",
    "PublisherSettings",
    "SessionState",
]
