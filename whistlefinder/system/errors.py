"""Error taxonomy for capability boundaries.

Capabilities raise these; the listener and alarm dispatcher absorb them,
log them and keep running with whatever channels still work.
"""
from __future__ import annotations


class WhistleFinderError(Exception):
    """Base class for all WhistleFinder errors."""


class PermissionDenied(WhistleFinderError):
    """Microphone or notification access was refused by the host."""


class ResourceUnavailable(WhistleFinderError):
    """A sound file, strobe LED or other device is missing."""


class EngineStartFailure(WhistleFinderError):
    """The audio backend could not open or start a stream."""
