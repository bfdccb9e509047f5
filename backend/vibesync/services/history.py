"""
Capped, most-recent-first log of generated playlists.
"""

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from vibesync.core.config import HISTORY_LIMIT
from vibesync.core.storage import HISTORY_KEY, KeyValueStore
from vibesync.schemas.playlist import GenerationResult

logger = logging.getLogger(__name__)


class HistoryStore:
    """History of generation results persisted in a key-value store."""

    def __init__(
        self, store: KeyValueStore, key: str = HISTORY_KEY, limit: int = HISTORY_LIMIT
    ):
        self.store = store
        self.key = key
        self.limit = limit
        self._entries: List[GenerationResult] = []

    @property
    def entries(self) -> List[GenerationResult]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    async def load(self) -> List[GenerationResult]:
        """
        Read the persisted history.

        Unreadable data is logged and treated as an empty history.
        """
        raw = await self.store.get(self.key)
        if not raw:
            self._entries = []
            return self.entries

        try:
            items = json.loads(raw)
            self._entries = [GenerationResult(**item) for item in items][: self.limit]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable playlist history: {e}")
            self._entries = []

        logger.info(f"Loaded {len(self._entries)} history entries")
        return self.entries

    async def add(self, result: GenerationResult) -> List[GenerationResult]:
        """Prepend ``result``, drop the oldest entries beyond the limit and persist."""
        self._entries = [result, *self._entries][: self.limit]
        await self._persist()
        return self.entries

    def get(self, index: int) -> Optional[GenerationResult]:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    async def clear(self) -> None:
        self._entries = []
        await self.store.delete(self.key)

    async def _persist(self) -> None:
        payload = [entry.model_dump(by_alias=True) for entry in self._entries]
        await self.store.set(self.key, json.dumps(payload))
