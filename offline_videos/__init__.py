"""Offline playback of catalog videos from a persistent local store."""

__version__ = "0.1.0"
