"""
Client for the Gemini generative API: track curation and cover artwork.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from vibesync.core.config import (
    GEMINI_API_BASE,
    GEMINI_API_KEY,
    GEMINI_IMAGE_MODEL,
    GEMINI_TEXT_MODEL,
    HTTP_TIMEOUT,
    TRACK_COUNT,
)
from vibesync.core.exceptions import ConfigurationError, GenerationError
from vibesync.schemas.playlist import GenerationResult, PlaylistPreferences
from vibesync.utils.datetime_helper import timestamp_ms

logger = logging.getLogger(__name__)

USER_MESSAGE = "Generate my personalized sonic journey."

# Structured output contract for the curation request
PLAYLIST_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "playlistName": {"type": "STRING"},
        "playlistDescription": {"type": "STRING"},
        "tracks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "title": {"type": "STRING"},
                    "artist": {"type": "STRING"},
                    "album": {"type": "STRING"},
                    "popularityScore": {"type": "NUMBER"},
                    "reason": {"type": "STRING"},
                    "genre": {"type": "STRING"},
                },
                "required": [
                    "id",
                    "title",
                    "artist",
                    "reason",
                    "genre",
                    "popularityScore",
                ],
            },
        },
    },
    "required": ["playlistName", "playlistDescription", "tracks"],
}


def build_system_prompt(prefs: PlaylistPreferences, track_count: int = TRACK_COUNT) -> str:
    """Describe the taste vector as a curation instruction."""
    return (
        f"You are an expert music curator. Curate exactly {track_count} tracks "
        "matching these criteria:\n"
        f"Mood: {prefs.mood}/100, Energy: {prefs.energy}/100, "
        f"Popularity: {prefs.popularity}/100, Danceability: {prefs.danceability}/100, "
        f"Acousticness: {prefs.acousticness}/100, "
        f"Instrumentalness: {prefs.instrumentalness}/100, "
        f"Genre: {prefs.genre}, Context: {prefs.prompt}.\n"
        "Generate a creative playlist name and thematic description."
    )


def build_cover_prompt(name: str, description: str) -> str:
    return (
        "Create a high-quality abstract minimalist music playlist cover titled "
        f'"{name}". Description: {description}. '
        "Geometric shapes, cinematic gradients, no text."
    )


class GeminiClient:
    """Client for interacting with the Gemini REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        text_model: str = GEMINI_TEXT_MODEL,
        image_model: str = GEMINI_IMAGE_MODEL,
        base_url: str = GEMINI_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = GEMINI_API_KEY if api_key is None else api_key
        self.text_model = text_model
        self.image_model = image_model
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def _generate_content(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Send a generateContent request and return the decoded body."""
        url = f"{self.base_url}/models/{model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                url, headers=headers, json=payload, timeout=HTTP_TIMEOUT
            )
            response.raise_for_status()
            return response.json()

    async def generate_recommendations(
        self, prefs: PlaylistPreferences
    ) -> GenerationResult:
        """
        Ask the model for a curated playlist matching the preferences.

        Args:
            prefs: Taste vector, genre and free-text context

        Returns:
            Parsed generation result stamped with the response time

        Raises:
            ConfigurationError: If no API key is configured
            GenerationError: If the request fails or the response is unusable
        """
        if not self.api_key:
            raise ConfigurationError("Missing Gemini API Key.")

        payload = {
            "systemInstruction": {"parts": [{"text": build_system_prompt(prefs)}]},
            "contents": [{"role": "user", "parts": [{"text": USER_MESSAGE}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": PLAYLIST_SCHEMA,
            },
        }

        try:
            data = await self._generate_content(self.text_model, payload)
        except (httpx.HTTPError, ValueError) as e:
            # ValueError: the body was not JSON
            logger.error(f"Gemini track generation request failed: {e}")
            raise GenerationError(f"Track generation failed: {e}") from e

        try:
            text = _first_text(data)
        except (AttributeError, TypeError) as e:
            logger.error(f"Gemini track generation response had no usable content: {e}")
            raise GenerationError("The model returned a malformed playlist.") from e

        if not text:
            logger.error("Gemini returned an empty track generation response")
            raise GenerationError("The model returned an empty response.")

        try:
            result = json.loads(text)
            return GenerationResult(**result, timestamp=timestamp_ms())
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.error(f"Gemini track generation response was malformed: {e}")
            raise GenerationError("The model returned a malformed playlist.") from e

    async def generate_cover_image(self, name: str, description: str) -> str:
        """
        Synthesize a square cover image for a playlist.

        Best-effort: returns base64 image data, or an empty string on any failure.
        """
        if not self.api_key:
            logger.warning("Cover image generation skipped: missing Gemini API Key")
            return ""

        payload = {
            "contents": [{"parts": [{"text": build_cover_prompt(name, description)}]}],
            "generationConfig": {
                "responseModalities": ["IMAGE"],
                "imageConfig": {"aspectRatio": "1:1"},
            },
        }

        try:
            data = await self._generate_content(self.image_model, payload)
        except Exception as e:
            logger.warning(
                f"Cover image generation skipped or failed due to quota/error: {e}"
            )
            return ""

        try:
            for part in _first_parts(data):
                inline = part.get("inlineData") or part.get("inline_data")
                if inline and inline.get("data"):
                    return inline["data"]
        except (AttributeError, TypeError) as e:
            logger.warning(f"Cover image response was malformed: {e}")
            return ""

        logger.warning("Cover image generation returned no image data")
        return ""


def _first_parts(data: Dict[str, Any]) -> list:
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return content.get("parts") or []


def _first_text(data: Dict[str, Any]) -> str:
    return "".join(part.get("text") or "" for part in _first_parts(data)).strip()
