"""Exceptions raised by astroview."""

from __future__ import annotations


class AstroViewError(Exception):
    """Base class for astroview errors."""


class DecodeFailure(AstroViewError):
    """Image source is missing, unreadable, or not a decodable image.

    Attributes:
        source: Description of the source (path, or byte count for buffers)
        reason: Short description of what went wrong
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Failed to decode {source}: {reason}")
        self.source = source
        self.reason = reason
