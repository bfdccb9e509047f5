"""
Error types raised by the VibeSync services.
"""

from typing import Optional


class VibeSyncError(Exception):
    """Base class for all application errors."""


class ConfigurationError(VibeSyncError):
    """A required provider credential is missing."""


class GenerationError(VibeSyncError):
    """The AI model failed to produce a usable playlist."""


class ExportError(VibeSyncError):
    """Exporting a playlist to Spotify failed."""


class NoTracksFoundError(ExportError):
    """None of the recommended tracks could be matched on Spotify."""

    def __init__(self, message: str = "No tracks found on Spotify."):
        super().__init__(message)


class SpotifyAPIError(ExportError):
    """The Spotify Web API rejected a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
