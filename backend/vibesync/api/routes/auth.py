"""
Authentication routes for the Spotify PKCE login.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse

from vibesync.core.exceptions import ConfigurationError
from vibesync.dependencies import get_page_url, get_playlist_session
from vibesync.schemas.spotify import SpotifyAuthSchema, SpotifyUserProfile
from vibesync.services.session import PlaylistSession

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def _start_login(session: PlaylistSession, page_url: str) -> str:
    try:
        return await session.auth.login(page_url)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/spotify/login")
async def spotify_login(
    session: PlaylistSession = Depends(get_playlist_session),
    page_url: str = Depends(get_page_url),
):
    """
    Start the Spotify login.

    Stores a fresh PKCE verifier and navigates the browser to Spotify.
    """
    auth_url = await _start_login(session, page_url)
    return RedirectResponse(url=auth_url, status_code=307)


@router.get("/spotify/login-url", response_model=SpotifyAuthSchema)
async def spotify_login_url(
    session: PlaylistSession = Depends(get_playlist_session),
    page_url: str = Depends(get_page_url),
):
    """Start the Spotify login and return the authorization URL instead of redirecting."""
    return {"auth_url": await _start_login(session, page_url)}


@router.get("/me", response_model=Optional[SpotifyUserProfile])
async def get_current_user(session: PlaylistSession = Depends(get_playlist_session)):
    """The connected Spotify user, or null when not logged in."""
    if session.spotify_user is None:
        await session.refresh_user()
    return session.spotify_user


@router.post("/logout")
async def logout(session: PlaylistSession = Depends(get_playlist_session)):
    """
    Log out of Spotify.

    Clears the stored access token and any pending verifier.
    """
    await session.logout()
    return {"message": "Logged out successfully"}
