import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from vibesync.core.config import HTTP_TIMEOUT
from vibesync.core.exceptions import NoTracksFoundError, SpotifyAPIError
from vibesync.schemas.playlist import GenerationResult
from vibesync.schemas.spotify import SpotifyPlaylist, SpotifyUserProfile

logger = logging.getLogger(__name__)

BASE_URL = "https://api.spotify.com/v1"

DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")

ProgressCallback = Callable[[int], None]


def progress_percent(completed: int, total: int) -> int:
    """Integer percentage, rounding halves up."""
    return math.floor(completed * 100 / total + 0.5)


class SpotifyClient:
    """Client for interacting with Spotify Web API."""

    def __init__(
        self,
        access_token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self._transport = transport
        self.last_export_tracks = []

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Dict[str, Any] = None,
        data: Dict[str, Any] = None,
        content: bytes = None,
        headers: Dict[str, str] = None,
    ) -> Dict[str, Any]:
        """Send a request to the Spotify API."""
        url = f"{BASE_URL}{endpoint}"

        default_headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

        if headers:
            default_headers.update(headers)

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=data,
                    content=content,
                    headers=default_headers,
                    timeout=HTTP_TIMEOUT,
                )
            except httpx.HTTPError as e:
                raise SpotifyAPIError(f"{method} {endpoint} failed: {e}") from e

            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After", "1")
                raise SpotifyAPIError(
                    f"Rate limited. Try again in {retry_after} seconds.",
                    status_code=429,
                )

            if response.is_error:
                raise SpotifyAPIError(
                    f"{method} {endpoint} -> {response.status_code}: {_error_message(response)}",
                    status_code=response.status_code,
                )

            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError:
                # Image uploads answer with an empty or non-JSON body
                return {}

    async def get_user_profile(self) -> SpotifyUserProfile:
        """Get the current user's Spotify profile."""
        data = await self._request("GET", "/me")
        try:
            return SpotifyUserProfile(**data)
        except (TypeError, ValidationError) as e:
            raise SpotifyAPIError(f"GET /me returned an invalid profile: {e}") from e

    async def search_track(self, title: str, artist: str) -> Optional[str]:
        """Return the URI of the best match for ``title`` by ``artist``, if any."""
        params = {
            "q": f"track:{title} artist:{artist}",
            "type": "track",
            "limit": 1,
        }

        data = await self._request("GET", "/search", params=params)
        items = (data.get("tracks") or {}).get("items") or []
        if not items:
            return None
        return items[0].get("uri")

    async def create_playlist(
        self, user_id: str, name: str, description: str = "", public: bool = False
    ) -> SpotifyPlaylist:
        """Create a new playlist for a user."""
        endpoint = f"/users/{user_id}/playlists"
        data = {
            "name": name,
            "description": description,
            "public": public,
        }

        response = await self._request("POST", endpoint, data=data)
        return SpotifyPlaylist(**response)

    async def add_tracks_to_playlist(
        self, playlist_id: str, track_uris: List[str]
    ) -> Dict[str, Any]:
        """Add tracks to a playlist."""
        endpoint = f"/playlists/{playlist_id}/tracks"
        data = {
            "uris": track_uris,
        }

        return await self._request("POST", endpoint, data=data)

    async def upload_playlist_cover(self, playlist_id: str, image: str) -> None:
        """Set a playlist cover from base64 JPEG data (data URL prefix allowed)."""
        clean = DATA_URL_PREFIX.sub("", image)
        await self._request(
            "PUT",
            f"/playlists/{playlist_id}/images",
            content=clean.encode("ascii"),
            headers={"Content-Type": "image/jpeg"},
        )

    async def export_playlist(
        self,
        user_id: str,
        result: GenerationResult,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Recreate a generated playlist on Spotify.

        Tracks are searched one at a time, reporting the completed percentage
        after each. Unmatched tracks are skipped. The cover upload is
        best-effort.

        Returns:
            The playlist's Spotify web URL

        Raises:
            NoTracksFoundError: If no track could be matched
            SpotifyAPIError: If a search, the creation or the population fails
        """
        total = len(result.tracks)
        track_uris = []
        annotated = []

        for index, track in enumerate(result.tracks):
            uri = await self.search_track(track.title, track.artist)
            if uri:
                track_uris.append(uri)
                annotated.append(track.model_copy(update={"spotify_uri": uri}))
            else:
                logger.debug(f"No Spotify match for {track.title} by {track.artist}")
                annotated.append(track)
            if on_progress:
                on_progress(progress_percent(index + 1, total))

        self.last_export_tracks = annotated

        if not track_uris:
            raise NoTracksFoundError()

        logger.info(f"Matched {len(track_uris)}/{total} tracks on Spotify")

        playlist = await self.create_playlist(
            user_id, result.playlist_name, result.playlist_description, public=False
        )
        await self.add_tracks_to_playlist(playlist.id, track_uris)

        if result.cover_image:
            try:
                await self.upload_playlist_cover(playlist.id, result.cover_image)
            except Exception as e:
                logger.error(f"Cover upload failed for playlist {playlist.id}: {e}")

        return playlist.external_urls.get("spotify", "")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message", str(error))
    return str(error or body)
