"""
Pydantic models for preferences, tracks and generation results.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class AppStatus(str, Enum):
    """Lifecycle of the playlist session."""

    IDLE = "IDLE"
    GENERATING = "GENERATING"
    GENERATING_IMAGE = "GENERATING_IMAGE"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    SYNCING_SPOTIFY = "SYNCING_SPOTIFY"


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PlaylistPreferences(CamelModel):
    """User-tunable taste vector."""

    mood: int = Field(default=65, ge=0, le=100)
    energy: int = Field(default=40, ge=0, le=100)
    popularity: int = Field(default=75, ge=0, le=100)
    danceability: int = Field(default=30, ge=0, le=100)
    acousticness: int = Field(default=20, ge=0, le=100)
    instrumentalness: int = Field(default=10, ge=0, le=100)
    genre: str = "Synthwave"
    prompt: str = ""


class Track(CamelModel):
    """One recommended song."""

    id: str
    title: str
    artist: str
    album: Optional[str] = None
    popularity_score: float
    reason: str
    genre: str
    duration: Optional[str] = None
    spotify_uri: Optional[str] = None

    @field_validator("popularity_score", mode="before")
    @classmethod
    def clamp_popularity(cls, value: Any) -> Any:
        # Model output is not trusted to stay within the percentage range
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return min(max(value, 0), 100)
        return value


class GenerationResult(CamelModel):
    """One completed generation."""

    tracks: List[Track]
    playlist_name: str
    playlist_description: str
    cover_image: str = ""
    timestamp: int


class PlaylistOptions(CamelModel):
    """Choices offered to the preference form."""

    genres: List[str]
    defaults: PlaylistPreferences


class RadarPoint(BaseModel):
    x: float
    y: float


class RadarAxis(BaseModel):
    label: str
    value: int
    end: RadarPoint
    label_anchor: RadarPoint


class RadarChart(BaseModel):
    """Geometry of the six-axis preference radar chart."""

    size: int
    center: RadarPoint
    radius: float
    axes: List[RadarAxis]
    shape: List[RadarPoint]
    grid: List[List[RadarPoint]]
