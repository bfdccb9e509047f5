"""
Application configuration read from the environment.
"""

import os

# Gemini
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_TEXT_MODEL = os.getenv("GEMINI_TEXT_MODEL", "gemini-3-flash-preview")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")

# Spotify
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_ID_PLACEHOLDER = "YOUR_SPOTIFY_CLIENT_ID"

# Storage
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "vibesync:")

# HTTP
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    ).split(",")
    if origin.strip()
]
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Generation
TRACK_COUNT = 25
HISTORY_LIMIT = 10

GENRES = [
    "Synthwave",
    "Dark Techno",
    "Ambient",
    "Jazz Fusion",
    "Hyperpop",
    "K-Pop",
    "Metal",
    "Lo-fi",
    "Indie Sleaze",
]
