"""Utility helpers for the transcription gateway."""

from .time import utc_timestamp

__all__ = ["utc_timestamp"]
