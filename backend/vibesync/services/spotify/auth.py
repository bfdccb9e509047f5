"""
Spotify authorization using the Authorization Code flow with PKCE.
"""

import base64
import hashlib
import logging
import secrets
import string
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx
from pydantic import ValidationError

from vibesync.core.config import (
    HTTP_TIMEOUT,
    SPOTIFY_CLIENT_ID,
    SPOTIFY_CLIENT_ID_PLACEHOLDER,
)
from vibesync.core.exceptions import ConfigurationError
from vibesync.core.storage import ACCESS_TOKEN_KEY, CODE_VERIFIER_KEY, KeyValueStore
from vibesync.schemas.spotify import SpotifyTokenSchema

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"

SPOTIFY_SCOPES = [
    "playlist-modify-public",
    "playlist-modify-private",
    "user-read-private",
    "user-read-email",
    "ugc-image-upload",
]

VERIFIER_LENGTH = 128
VERIFIER_ALPHABET = string.ascii_letters + string.digits

# Query parameters Spotify appends to the redirect URI
CALLBACK_PARAMS = ("code", "state", "error")


class SpotifyAuthService:
    """Service for the Spotify PKCE login flow and token persistence."""

    def __init__(
        self,
        store: KeyValueStore,
        client_id: Optional[str] = None,
        scopes: Optional[List[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store = store
        self.client_id = SPOTIFY_CLIENT_ID if client_id is None else client_id
        self.scopes = scopes or SPOTIFY_SCOPES
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id) and self.client_id != SPOTIFY_CLIENT_ID_PLACEHOLDER

    @staticmethod
    def get_redirect_uri(page_url: str) -> str:
        """
        Compute the redirect URI from the page's origin and path.

        Spotify rejects ``localhost`` redirect URIs, so the loopback address is
        used instead. A trailing slash is dropped.
        """
        parts = urlsplit(page_url)
        uri = f"{parts.scheme}://{parts.netloc}{parts.path}"
        if "localhost" in uri:
            uri = uri.replace("localhost", "127.0.0.1", 1)
        return uri[:-1] if uri.endswith("/") else uri

    @staticmethod
    def generate_random_string(length: int = VERIFIER_LENGTH) -> str:
        """Generate a random alphanumeric code verifier."""
        return "".join(secrets.choice(VERIFIER_ALPHABET) for _ in range(length))

    @staticmethod
    def generate_code_challenge(verifier: str) -> str:
        """Derive the S256 code challenge: unpadded base64url of SHA-256."""
        digest = hashlib.sha256(verifier.encode()).digest()
        return base64.urlsafe_b64encode(digest).decode().rstrip("=")

    @staticmethod
    def strip_authorization_code(page_url: str) -> str:
        """Return ``page_url`` without the OAuth callback query parameters."""
        parts = urlsplit(page_url)
        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key not in CALLBACK_PARAMS
        ]
        return urlunsplit(
            (parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment)
        )

    @staticmethod
    def has_callback_params(page_url: str) -> bool:
        params = dict(parse_qsl(urlsplit(page_url).query, keep_blank_values=True))
        return any(key in params for key in CALLBACK_PARAMS)

    @staticmethod
    def get_callback_code(page_url: str) -> Optional[str]:
        """Return the authorization code carried by ``page_url``, if any."""
        params = dict(parse_qsl(urlsplit(page_url).query))
        return params.get("code") or None

    async def login(self, page_url: str) -> str:
        """
        Start a login attempt and return the authorization URL to navigate to.

        A fresh verifier is generated and persisted for every attempt.

        Raises:
            ConfigurationError: If no Spotify client id is configured
        """
        if not self.is_configured:
            raise ConfigurationError(
                "Configuration Missing: Please set your Spotify Client ID."
            )

        code_verifier = self.generate_random_string(VERIFIER_LENGTH)
        code_challenge = self.generate_code_challenge(code_verifier)

        # Store verifier for the exchange after the redirect
        await self.store.set(CODE_VERIFIER_KEY, code_verifier)

        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.get_redirect_uri(page_url),
            "code_challenge_method": "S256",
            "code_challenge": code_challenge,
            "scope": " ".join(self.scopes),
        }

        logger.info("Redirecting to Spotify authorization")
        return f"{AUTH_URL}?{urlencode(params)}"

    async def handle_callback(self, page_url: str) -> Optional[str]:
        """
        Exchange the authorization code on ``page_url`` for an access token.

        Returns None when there is nothing to exchange or the exchange fails.
        The stored verifier is deleted after every exchange attempt.
        """
        code = self.get_callback_code(page_url)
        code_verifier = await self.store.get(CODE_VERIFIER_KEY)

        if not code or not code_verifier:
            return None

        data = {
            "client_id": self.client_id,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.get_redirect_uri(page_url),
            "code_verifier": code_verifier,
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    TOKEN_URL, headers=headers, data=data, timeout=HTTP_TIMEOUT
                )
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Spotify token request failed: {e}")
            return None
        finally:
            await self.store.delete(CODE_VERIFIER_KEY)

        try:
            token = SpotifyTokenSchema(**body)
        except (TypeError, ValidationError):
            logger.error(
                f"Spotify token error ({response.status_code}): "
                f"{body.get('error', body) if isinstance(body, dict) else body}"
            )
            return None

        await self.store.set(ACCESS_TOKEN_KEY, token.access_token)
        logger.info("Spotify access token stored")
        return token.access_token

    async def get_access_token(self) -> Optional[str]:
        return await self.store.get(ACCESS_TOKEN_KEY)

    async def logout(self) -> None:
        """Forget the access token and any leftover verifier."""
        await self.store.delete(ACCESS_TOKEN_KEY)
        await self.store.delete(CODE_VERIFIER_KEY)
        logger.info("Spotify session cleared")
