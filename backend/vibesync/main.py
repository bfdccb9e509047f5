"""
Main application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from vibesync.api.routes import auth, playlists, spotify
from vibesync.core.config import CORS_ORIGINS, LOG_LEVEL
from vibesync.core.redis import close_redis_connections
from vibesync.dependencies import build_session, get_playlist_session
from vibesync.services.session import PlaylistSession

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "playlist_session", None) is None:
        app.state.playlist_session = build_session()
    await app.state.playlist_session.initialize()
    logger.info("VibeSync session initialized")
    yield
    await close_redis_connections()


# Initialize FastAPI application
app = FastAPI(title="VibeSync API", lifespan=lifespan)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(playlists.router)
app.include_router(spotify.router)


@app.get("/")
async def read_root(
    request: Request, session: PlaylistSession = Depends(get_playlist_session)
):
    """
    Application page.

    Spotify redirects back here with ``code`` (or ``error``). The callback is
    consumed and the browser is sent to the same page without those
    parameters, so a reload cannot replay the exchange.
    """
    cleaned_url = await session.complete_login(str(request.url))
    if cleaned_url is not None:
        return RedirectResponse(url=cleaned_url, status_code=303)
    return {"message": "Welcome to VibeSync API"}


@app.get("/api")
@app.get("/api/")
def read_api_root():
    """Return a message with available API endpoints."""
    return {
        "message": "VibeSync API - Available endpoints: /api/playlists/*, /api/auth/*, /api/spotify/*"
    }


@app.get("/api/health")
async def health_check(session: PlaylistSession = Depends(get_playlist_session)):
    """Health check endpoint to verify the API is running."""
    storage_status = await session.store.health()

    return {
        "status": "healthy",
        "services": {
            "api": "online",
            "storage": storage_status,
        },
    }
