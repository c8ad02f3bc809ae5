"""Synthetic audio/video publisher for LiveKit rooms."""

__version__ = "0.1.0"
