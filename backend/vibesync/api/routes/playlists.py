from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from vibesync.core.config import GENRES
from vibesync.core.exceptions import ConfigurationError, GenerationError
from vibesync.dependencies import get_playlist_session
from vibesync.schemas.playlist import (
    GenerationResult,
    PlaylistOptions,
    PlaylistPreferences,
    RadarChart,
)
from vibesync.services.radar import compute_radar_chart
from vibesync.services.session import PlaylistSession

router = APIRouter(prefix="/api/playlists", tags=["playlists"])


@router.get("/options", response_model=PlaylistOptions)
async def get_options():
    """Genres and default preferences for the preference form."""
    return PlaylistOptions(genres=GENRES, defaults=PlaylistPreferences())


@router.post("/generate", response_model=GenerationResult)
async def generate_playlist(
    prefs: PlaylistPreferences,
    session: PlaylistSession = Depends(get_playlist_session),
):
    """Generate a playlist and cover for the given preferences."""
    try:
        return await session.generate(prefs)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/current", response_model=Optional[GenerationResult])
async def get_current_playlist(
    session: PlaylistSession = Depends(get_playlist_session),
):
    return session.current_playlist


@router.get("/history", response_model=List[GenerationResult])
async def get_history(session: PlaylistSession = Depends(get_playlist_session)):
    """Recent generations, most recent first."""
    return session.history.entries


@router.post("/history/{index}/load", response_model=GenerationResult)
async def load_from_history(
    index: int,
    session: PlaylistSession = Depends(get_playlist_session),
):
    """Replay a playlist from the history."""
    item = session.load_from_history(index)
    if item is None:
        raise HTTPException(status_code=404, detail="History entry not found")
    return item


@router.post("/radar", response_model=RadarChart)
async def get_radar_chart(prefs: PlaylistPreferences, size: int = Query(200, gt=0)):
    """Radar chart geometry for a preference vector."""
    return compute_radar_chart(prefs, size=size)
