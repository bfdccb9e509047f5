"""
Playlist session: sequences generation, history and Spotify export.

A single ``PlaylistSession`` holds the state a user sees (status, current
playlist, history, Spotify identity and sync progress) and is shared by the
HTTP routes through dependency injection.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from vibesync.core.exceptions import (
    ConfigurationError,
    ExportError,
    GenerationError,
    SpotifyAPIError,
)
from vibesync.core.storage import KeyValueStore
from vibesync.schemas.playlist import AppStatus, GenerationResult, PlaylistPreferences
from vibesync.schemas.spotify import SpotifyUserProfile
from vibesync.services.gemini import GeminiClient
from vibesync.services.history import HistoryStore
from vibesync.services.spotify.auth import SpotifyAuthService
from vibesync.services.spotify.client import SpotifyClient

logger = logging.getLogger(__name__)

SpotifyClientFactory = Callable[[str], SpotifyClient]


@dataclass
class ExportOutcome:
    """Result of an export request: either a login redirect or a playlist URL."""

    login_url: Optional[str] = None
    playlist_url: Optional[str] = None
    progress: List[int] = field(default_factory=list)
    matched: int = 0

    @property
    def login_required(self) -> bool:
        return self.login_url is not None


class PlaylistSession:
    """Session context driving the generate and export flows."""

    def __init__(
        self,
        store: KeyValueStore,
        gemini: GeminiClient,
        auth: SpotifyAuthService,
        history: Optional[HistoryStore] = None,
        spotify_client_factory: SpotifyClientFactory = SpotifyClient,
    ):
        self.store = store
        self.gemini = gemini
        self.auth = auth
        self.history = history or HistoryStore(store)
        self.spotify_client_factory = spotify_client_factory

        self.status = AppStatus.IDLE
        self.error_message: Optional[str] = None
        self.preferences = PlaylistPreferences()
        self.current_playlist: Optional[GenerationResult] = None
        self.spotify_user: Optional[SpotifyUserProfile] = None
        self.sync_progress = 0
        self.progress_log: List[int] = []

    async def initialize(self, page_url: Optional[str] = None) -> Optional[str]:
        """
        Restore persisted state and complete a pending Spotify login.

        Args:
            page_url: URL the app was loaded from, possibly carrying an
                authorization code

        Returns:
            The cleaned page URL when callback parameters were consumed,
            otherwise None
        """
        await self.history.load()

        cleaned_url = await self.complete_login(page_url) if page_url else None
        if self.spotify_user is None:
            await self.refresh_user()

        return cleaned_url

    async def complete_login(self, page_url: str) -> Optional[str]:
        """
        Consume Spotify callback parameters on a page load.

        Exchanges the authorization code when no token is stored yet. Returns
        the page URL without the callback parameters, or None when there
        were none.
        """
        if not SpotifyAuthService.has_callback_params(page_url):
            return None

        token = await self.auth.get_access_token()
        if SpotifyAuthService.get_callback_code(page_url) and not token:
            token = await self.auth.handle_callback(page_url)
            if token:
                await self.refresh_user(token)

        return SpotifyAuthService.strip_authorization_code(page_url)

    async def refresh_user(self, token: Optional[str] = None) -> Optional[SpotifyUserProfile]:
        """Fetch the Spotify profile for the stored token, if any."""
        token = token or await self.auth.get_access_token()
        if not token:
            self.spotify_user = None
            return None

        try:
            self.spotify_user = await self.spotify_client_factory(token).get_user_profile()
            logger.info(f"Connected Spotify user {self.spotify_user.id}")
        except SpotifyAPIError as e:
            logger.warning(f"Could not fetch Spotify profile: {e}")
            self.spotify_user = None
        return self.spotify_user

    async def generate(self, prefs: PlaylistPreferences) -> GenerationResult:
        """
        Generate a playlist and its cover, then record it in the history.

        Raises:
            ConfigurationError: If the Gemini key is missing
            GenerationError: If track generation fails
        """
        self.preferences = prefs
        self.status = AppStatus.GENERATING
        self.error_message = None

        try:
            result = await self.gemini.generate_recommendations(prefs)
        except (ConfigurationError, GenerationError) as e:
            logger.error(f"Playlist generation failed: {e}")
            self.error_message = str(e) or "The sonic flow was interrupted."
            self.status = AppStatus.ERROR
            raise

        self.status = AppStatus.GENERATING_IMAGE
        try:
            cover = await self.gemini.generate_cover_image(
                result.playlist_name, result.playlist_description
            )
        except Exception as e:
            logger.warning(f"Continuing without AI cover image: {e}")
            cover = ""

        final = result.model_copy(update={"cover_image": cover or ""})
        self.current_playlist = final
        await self.history.add(final)

        self.status = AppStatus.SUCCESS
        logger.info(
            f"Generated playlist '{final.playlist_name}' with {len(final.tracks)} tracks"
        )
        return final

    def load_from_history(self, index: int) -> Optional[GenerationResult]:
        """Make a history entry the current playlist."""
        item = self.history.get(index)
        if item is None:
            return None
        self.current_playlist = item
        self.status = AppStatus.SUCCESS
        self.error_message = None
        return item

    def _record_progress(self, percent: int) -> None:
        self.sync_progress = percent
        self.progress_log.append(percent)

    async def sync_to_spotify(self, page_url: str) -> ExportOutcome:
        """
        Export the current playlist, starting a login first if needed.

        Raises:
            ConfigurationError: If login is needed but no client id is set
            ExportError: If there is nothing to export or the export fails
        """
        if self.spotify_user is None:
            await self.refresh_user()
        if self.spotify_user is None:
            return ExportOutcome(login_url=await self.auth.login(page_url))

        if self.current_playlist is None:
            raise ExportError("Generate a playlist before exporting.")

        token = await self.auth.get_access_token()
        if not token:
            self.spotify_user = None
            return ExportOutcome(login_url=await self.auth.login(page_url))

        self.status = AppStatus.SYNCING_SPOTIFY
        self.error_message = None
        self.sync_progress = 0
        self.progress_log = []

        client = self.spotify_client_factory(token)
        try:
            url = await client.export_playlist(
                self.spotify_user.id,
                self.current_playlist,
                on_progress=self._record_progress,
            )
        except ExportError as e:
            logger.error(f"Spotify export failed: {e}")
            self.error_message = str(e)
            self.status = AppStatus.ERROR
            raise

        matched = sum(1 for track in client.last_export_tracks if track.spotify_uri)
        self.current_playlist = self.current_playlist.model_copy(
            update={"tracks": client.last_export_tracks}
        )
        self.status = AppStatus.SUCCESS
        logger.info(f"Exported playlist to {url}")
        return ExportOutcome(
            playlist_url=url, progress=list(self.progress_log), matched=matched
        )

    async def logout(self) -> None:
        await self.auth.logout()
        self.spotify_user = None
