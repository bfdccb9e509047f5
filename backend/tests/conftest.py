"""
Test configuration and fixtures for pytest.
"""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from vibesync.core.storage import MemoryStore
from vibesync.dependencies import get_playlist_session
from vibesync.main import app
from vibesync.schemas.playlist import GenerationResult, PlaylistPreferences
from vibesync.schemas.spotify import SpotifyUserProfile
from vibesync.services.gemini import GeminiClient
from vibesync.services.history import HistoryStore
from vibesync.services.session import PlaylistSession
from vibesync.services.spotify.auth import SpotifyAuthService


@pytest.fixture
def memory_store():
    """Create an empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def preferences():
    """Return a non-default preference vector."""
    return PlaylistPreferences(
        mood=12,
        energy=34,
        popularity=56,
        danceability=78,
        acousticness=90,
        instrumentalness=89,
        genre="Jazz Fusion",
        prompt="rainy night drive, neon reflections",
    )


@pytest.fixture
def playlist_payload():
    """Return a structured playlist as the model would produce it."""
    return {
        "playlistName": "Neon Rainfall",
        "playlistDescription": "Slow-burning fusion for wet city streets.",
        "tracks": [
            {
                "id": "t1",
                "title": "Nightcall",
                "artist": "Kavinsky",
                "album": "OutRun",
                "popularityScore": 82,
                "reason": "Brooding synth pulse.",
                "genre": "Synthwave",
            },
            {
                "id": "t2",
                "title": "Birdland",
                "artist": "Weather Report",
                "popularityScore": 64,
                "reason": "Fusion classic with a driving groove.",
                "genre": "Jazz Fusion",
            },
            {
                "id": "t3",
                "title": "Unfindable Song",
                "artist": "Nobody Known",
                "popularityScore": 3,
                "reason": "Deep cut.",
                "genre": "Ambient",
            },
            {
                "id": "t4",
                "title": "Resonance",
                "artist": "HOME",
                "album": "Odyssey",
                "popularityScore": 77,
                "reason": "Warm lo-fi haze.",
                "genre": "Synthwave",
            },
        ],
    }


@pytest.fixture
def generation_result(playlist_payload):
    """Return a parsed generation result without a cover."""
    return GenerationResult(**playlist_payload, timestamp=1700000000000)


@pytest.fixture
def gemini_text_response(playlist_payload):
    """Wrap the playlist payload in a Gemini generateContent response."""
    return {
        "candidates": [
            {"content": {"parts": [{"text": json.dumps(playlist_payload)}]}}
        ]
    }


@pytest.fixture
def spotify_profile():
    """Return a Spotify profile."""
    return SpotifyUserProfile(
        id="user123",
        display_name="Test User",
        images=[{"url": "https://i.scdn.co/image/avatar"}],
        uri="spotify:user:user123",
    )


@pytest.fixture
def mock_gemini(generation_result):
    """Create a Gemini client mock that succeeds without a cover."""
    gemini = AsyncMock(spec=GeminiClient)
    gemini.generate_recommendations.return_value = generation_result
    gemini.generate_cover_image.return_value = ""
    return gemini


@pytest.fixture
def mock_spotify_client(spotify_profile):
    """Create a Spotify client mock returned by the session's factory."""
    client = AsyncMock()
    client.get_user_profile.return_value = spotify_profile
    client.last_export_tracks = []
    return client


@pytest.fixture
def playlist_session(memory_store, mock_gemini, mock_spotify_client):
    """Create a playlist session wired to mocks and an in-memory store."""
    return PlaylistSession(
        store=memory_store,
        gemini=mock_gemini,
        auth=SpotifyAuthService(memory_store, client_id="test_client_id"),
        history=HistoryStore(memory_store),
        spotify_client_factory=lambda token: mock_spotify_client,
    )


@pytest.fixture
def client(playlist_session):
    """Create a test client with the session override."""

    async def override_get_playlist_session():
        return playlist_session

    app.dependency_overrides[get_playlist_session] = override_get_playlist_session

    yield TestClient(app)

    app.dependency_overrides.clear()
