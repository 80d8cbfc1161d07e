"""World map: the exploration grid around the settlement."""

import asyncio
import logging
import random
from typing import Dict, Optional, Set, Tuple

from .config import CENTER_X, CENTER_Y, GRID_SIZE, MAX_POI_PLACEMENT_ATTEMPTS
from .errors import OutOfBoundsError
from .models import POI_ZONES, Direction, TileState, Zone


logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]

DIRECTION_VECTORS: Dict[Direction, Coordinate] = {
    Direction.NORTH: (0, -1),
    Direction.NORTHEAST: (1, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTHEAST: (1, 1),
    Direction.SOUTH: (0, 1),
    Direction.SOUTHWEST: (-1, 1),
    Direction.WEST: (-1, 0),
    Direction.NORTHWEST: (-1, -1),
}


class WorldMap:
    """Square grid with the town at its center.

    Discovery state lives in memory; every newly explored tile is also written
    to the explored-tile store in a detached background task.
    """

    def __init__(self, store, hostiles=None, rng: Optional[random.Random] = None,
                 size: int = GRID_SIZE, center: Coordinate = (CENTER_X, CENTER_Y)):
        self.store = store
        self.hostiles = hostiles
        self.rng = rng or random.Random()
        self.size = size
        self.center = center
        self._explored: Set[Coordinate] = set()
        self._pending: Set[asyncio.Task] = set()
        self._seed_starting_area()
        self._pois = self._generate_pois()

    # --- Geometry ---

    def is_valid_coordinate(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def _check_bounds(self, x: int, y: int):
        if not self.is_valid_coordinate(x, y):
            raise OutOfBoundsError(x, y)

    def gate_coordinates(self) -> Coordinate:
        return self.center

    def is_center_area(self, x: int, y: int) -> bool:
        """True for the town and its 8 neighbors."""
        cx, cy = self.center
        return abs(x - cx) <= 1 and abs(y - cy) <= 1

    @staticmethod
    def direction_vector(direction: Direction) -> Coordinate:
        return DIRECTION_VECTORS[Direction(direction)]

    def coordinate_in_direction(self, x: int, y: int, direction: Direction) -> Coordinate:
        """Target cell of a move. The result may be off the map; callers check it."""
        dx, dy = self.direction_vector(direction)
        return x + dx, y + dy

    def location_at(self, x: int, y: int) -> Zone:
        """Get the zone tag of a cell."""
        self._check_bounds(x, y)

        if (x, y) == self.center:
            return Zone.GATE

        poi = self._pois.get((x, y))
        if poi is not None:
            return poi

        if x == 0 or y == 0 or x == self.size - 1 or y == self.size - 1:
            return Zone.GREATER_WASTE
        return Zone.WASTE

    # --- Points of interest ---

    def _generate_pois(self) -> Dict[Coordinate, Zone]:
        """Place every POI tag once on a random cell outside the center area."""
        placed: Dict[Coordinate, Zone] = {}
        for poi in POI_ZONES:
            for _ in range(MAX_POI_PLACEMENT_ATTEMPTS):
                x = self.rng.randrange(self.size)
                y = self.rng.randrange(self.size)
                if self.is_center_area(x, y) or (x, y) in placed:
                    continue
                placed[(x, y)] = poi
                break
            else:
                logger.warning(f"Could not place {poi.value} after {MAX_POI_PLACEMENT_ATTEMPTS} attempts")
        return placed

    @property
    def poi_locations(self) -> Dict[Coordinate, Zone]:
        return dict(self._pois)

    def poi_at(self, x: int, y: int) -> Optional[Zone]:
        self._check_bounds(x, y)
        return self._pois.get((x, y))

    # --- Discovery state ---

    def _starting_area(self) -> Set[Coordinate]:
        cx, cy = self.center
        return {
            (cx + dx, cy + dy)
            for dx in (-1, 0, 1)
            for dy in (-1, 0, 1)
            if self.is_valid_coordinate(cx + dx, cy + dy)
        }

    def _seed_starting_area(self):
        self._explored = self._starting_area()

    def tile_state(self, x: int, y: int) -> TileState:
        self._check_bounds(x, y)
        if (x, y) == self.center:
            return TileState.TOWN
        if (x, y) not in self._explored:
            return TileState.HIDDEN
        if (x, y) in self._pois:
            return TileState.POI
        return TileState.EXPLORED

    def is_explored(self, x: int, y: int) -> bool:
        return self.tile_state(x, y) != TileState.HIDDEN

    def mark_explored(self, x: int, y: int) -> bool:
        """Reveal a tile. Returns True if it was hidden before.

        The store write is not awaited; a failure there is only logged.
        """
        self._check_bounds(x, y)
        if (x, y) in self._explored:
            return False
        self._explored.add((x, y))
        self._persist_in_background(x, y)
        return True

    def _persist_in_background(self, x: int, y: int):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, tile ({x}, {y}) was not persisted")
            return
        task = loop.create_task(self._persist_tile(x, y))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist_tile(self, x: int, y: int):
        try:
            await self.store.insert_explored_tile(x, y)
        except Exception as e:
            logger.error(f"Failed to persist explored tile ({x}, {y}): {e}")

    async def drain(self):
        """Wait for every in-flight tile write to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def load(self):
        """Restore exploration history from the store, seeding it when empty."""
        try:
            tiles = await self.store.load_explored_tiles()
        except Exception as e:
            logger.error(f"Failed to load explored tiles, using starting area: {e}")
            self._seed_starting_area()
            return

        if tiles:
            self._explored = {t for t in tiles if self.is_valid_coordinate(*t)} | self._starting_area()
            logger.info(f"Loaded {len(self._explored)} explored tiles")
            return

        self._seed_starting_area()
        for x, y in sorted(self._explored):
            await self._persist_tile(x, y)
        logger.info("Initialized starting area on the world map")

    async def reset_map(self):
        """Forget all exploration, re-roll POIs and respawn hostile presence."""
        await self.drain()
        await self.store.clear_explored_tiles()
        self._seed_starting_area()
        for x, y in sorted(self._explored):
            await self._persist_tile(x, y)
        self._pois = self._generate_pois()

        if self.hostiles is not None:
            await self.hostiles.clear_all()
            await self.hostiles.initialize_for_new_world()

        logger.info(f"World map reset, {len(self._pois)} points of interest placed")
