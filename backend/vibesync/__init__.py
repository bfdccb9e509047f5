"""
VibeSync: AI-curated playlists with Spotify export.
"""

__version__ = "0.1.0"
