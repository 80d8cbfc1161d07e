"""Zombie presence on the world map."""

import logging
import random
from enum import Enum
from typing import List, Optional, Tuple

from .config import CENTER_X, CENTER_Y, GRID_SIZE
from .storage import GameStorage


logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]

# (tile count, min zombies, max zombies, excluded radius around the center)
SPAWN_WAVES = [
    (20, 1, 2, 1),
    (10, 2, 3, 3),
    (5, 5, 5, 4),
]

SAME_TILE_SPAWN_CHANCE = 0.2

NEIGHBOR_OFFSETS = [
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
]


class ThreatLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def threat_level(zombie_count: int) -> ThreatLevel:
    if zombie_count <= 0:
        return ThreatLevel.NONE
    if zombie_count <= 2:
        return ThreatLevel.LOW
    if zombie_count <= 4:
        return ThreatLevel.MEDIUM
    return ThreatLevel.HIGH


class ZombieService:
    """Spawns, spreads and clears zombie groups."""

    def __init__(self, storage: GameStorage, rng: Optional[random.Random] = None,
                 size: int = GRID_SIZE, center: Coordinate = (CENTER_X, CENTER_Y)):
        self.storage = storage
        self.rng = rng or random.Random()
        self.size = size
        self.center = center

    def _within(self, x: int, y: int, radius: int) -> bool:
        cx, cy = self.center
        return abs(x - cx) <= radius and abs(y - cy) <= radius

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    async def zombies_at(self, x: int, y: int) -> int:
        group = await self.storage.get_zombies_at(x, y)
        return group.count if group else 0

    async def add_zombies_at(self, x: int, y: int, count: int):
        current = await self.zombies_at(x, y)
        await self.storage.set_zombies_at(x, y, current + count)

    async def remove_zombies_at(self, x: int, y: int, count: int):
        current = await self.zombies_at(x, y)
        if current > 0:
            await self.storage.set_zombies_at(x, y, max(0, current - count))

    async def threat_level_at(self, x: int, y: int) -> ThreatLevel:
        return threat_level(await self.zombies_at(x, y))

    async def clear_all(self):
        await self.storage.clear_zombies()
        logger.info("All zombies cleared")

    async def initialize_for_new_world(self):
        """Populate a fresh map in waves, each further from the town."""
        await self.clear_all()

        all_coords = [(x, y) for x in range(self.size) for y in range(self.size)]
        used: List[Coordinate] = []
        for tiles, low, high, radius in SPAWN_WAVES:
            available = [c for c in all_coords if not self._within(*c, radius) and c not in used]
            self.rng.shuffle(available)
            chosen = available[:tiles]
            for x, y in chosen:
                await self.storage.set_zombies_at(x, y, self.rng.randint(low, high))
            used.extend(chosen)

        logger.info(f"World zombies initialized: {len(used)} locations with zombies")

    async def grow_after_attack(self) -> int:
        """Every group spawns one zombie, on its own tile or a neighbor."""
        spawns: List[Coordinate] = []
        for group in await self.storage.get_all_zombies():
            if self.rng.random() < SAME_TILE_SPAWN_CHANCE:
                spawns.append((group.x, group.y))
                continue
            dx, dy = self.rng.choice(NEIGHBOR_OFFSETS)
            x, y = group.x + dx, group.y + dy
            if self._in_bounds(x, y):
                spawns.append((x, y))

        for x, y in spawns:
            await self.add_zombies_at(x, y, 1)

        logger.info(f"Zombie spread complete: {len(spawns)} new zombies spawned")
        return len(spawns)
