from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any


class SpotifyTokenSchema(BaseModel):
    access_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None


class SpotifyAuthSchema(BaseModel):
    auth_url: str


class SpotifyUserProfile(BaseModel):
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    images: List[Dict[str, Any]] = Field(default_factory=list)
    uri: Optional[str] = None


class SpotifyPlaylist(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    public: Optional[bool] = None
    uri: Optional[str] = None
    external_urls: Dict[str, str] = Field(default_factory=dict)


class ExportResponse(BaseModel):
    status: str
    auth_url: Optional[str] = None
    playlist_url: Optional[str] = None
    progress: List[int] = Field(default_factory=list)
    matched: Optional[int] = None


class SessionStatus(BaseModel):
    status: str
    error: Optional[str] = None
    sync_progress: int = 0
    authenticated: bool = False
    user: Optional[SpotifyUserProfile] = None
    has_playlist: bool = False
