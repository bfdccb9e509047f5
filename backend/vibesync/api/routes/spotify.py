from fastapi import APIRouter, Depends, HTTPException, status

from vibesync.core.exceptions import ConfigurationError, ExportError
from vibesync.dependencies import get_page_url, get_playlist_session
from vibesync.schemas.spotify import ExportResponse, SessionStatus
from vibesync.services.session import PlaylistSession

router = APIRouter(prefix="/api/spotify", tags=["spotify"])


@router.post("/export", response_model=ExportResponse)
async def export_playlist(
    session: PlaylistSession = Depends(get_playlist_session),
    page_url: str = Depends(get_page_url),
):
    """Export the current playlist, or ask the client to log in first."""
    try:
        outcome = await session.sync_to_spotify(page_url)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ExportError as e:
        if session.current_playlist is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if outcome.login_required:
        return ExportResponse(status="login_required", auth_url=outcome.login_url)

    return ExportResponse(
        status="success",
        playlist_url=outcome.playlist_url,
        progress=outcome.progress,
        matched=outcome.matched,
    )


@router.get("/status", response_model=SessionStatus)
async def get_status(session: PlaylistSession = Depends(get_playlist_session)):
    """Current session status, including export progress."""
    return SessionStatus(
        status=session.status.value,
        error=session.error_message,
        sync_progress=session.sync_progress,
        authenticated=session.spotify_user is not None,
        user=session.spotify_user,
        has_playlist=session.current_playlist is not None,
    )
