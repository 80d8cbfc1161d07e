"""Redis-backed world-state cache.

Keeps the serialized ``WorldState`` under a fixed key so a restart does not
need a full store read.
"""

import json
import logging
from typing import Optional

from redis import asyncio as aioredis

from .config import REDIS_URL, WORLD_STATE_KEY
from .models import WorldState


logger = logging.getLogger(__name__)


class WorldStateCache:
    """Thin wrapper around redis.asyncio for the world-state record."""

    def __init__(self, url: Optional[str] = None, key: str = WORLD_STATE_KEY, client=None):
        self.key = key
        # decode_responses=True so we deal with str, not bytes
        self._redis = client or aioredis.from_url(url or REDIS_URL, decode_responses=True)

    @property
    def client(self):
        return self._redis

    async def close(self) -> None:
        await self._redis.close()

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(key, value)

    async def load_state(self) -> Optional[WorldState]:
        """Read the cached world state. Corrupt or partial data counts as empty."""
        raw = await self.get(self.key)
        return parse_world_state(raw)

    async def save_state(self, state: WorldState) -> None:
        await self.set(self.key, json.dumps(state.to_dict()))


def parse_world_state(raw: Optional[str]) -> Optional[WorldState]:
    if not raw:
        return None
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        return WorldState.from_dict(data)
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Ignoring unreadable cached world state: {e}")
        return None
