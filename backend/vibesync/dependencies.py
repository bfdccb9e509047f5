"""
Dependency injection functions for the API.
"""

from typing import Optional

from fastapi import Request

from vibesync.core.storage import KeyValueStore, create_store
from vibesync.services.gemini import GeminiClient
from vibesync.services.history import HistoryStore
from vibesync.services.session import PlaylistSession
from vibesync.services.spotify.auth import SpotifyAuthService


def build_session(store: Optional[KeyValueStore] = None) -> PlaylistSession:
    """Wire a playlist session from the configured collaborators."""
    store = store or create_store()
    return PlaylistSession(
        store=store,
        gemini=GeminiClient(),
        auth=SpotifyAuthService(store),
        history=HistoryStore(store),
    )


async def get_playlist_session(request: Request) -> PlaylistSession:
    """Return the session created at application startup."""
    return request.app.state.playlist_session


async def get_page_url(request: Request) -> str:
    """
    URL of the application page.

    The page root doubles as the Spotify redirect target, so login and
    callback handling must agree on it.
    """
    return str(request.base_url)
