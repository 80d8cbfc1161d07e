"""World façade: the single owner of the world state."""

import asyncio
import logging
from typing import Optional, Tuple

from .config import INITIAL_HORDE_SIZE
from .models import GamePhase, HordeAttackReport, WorldState
from .phases import PhaseCycle, next_phase_change
from .storage import GameStorage
from .timeutils import now
from .worldmap import WorldMap


logger = logging.getLogger(__name__)


class GameEngine:
    """Owns the ``WorldState`` and serializes every mutation of it.

    Phase transitions, the contested-zone sweep and admin operations all run
    under one lock, so two triggers firing together never interleave writes.
    """

    def __init__(self, storage: GameStorage, cache, cycle: PhaseCycle,
                 world_map: Optional[WorldMap] = None, zones=None,
                 initial_horde_size: int = INITIAL_HORDE_SIZE):
        self.storage = storage
        self.cache = cache
        self.cycle = cycle
        self.world_map = world_map
        self.zones = zones
        self.initial_horde_size = initial_horde_size
        self.game_state: Optional[WorldState] = None
        self._lock = asyncio.Lock()

    async def load_game_state(self) -> Optional[WorldState]:
        """Build the world state from the settlement row and the cache."""
        async with self._lock:
            settlement = await self.storage.get_default_settlement()

            horde_size = self.initial_horde_size
            last_attack = None
            try:
                cached = await self.cache.load_state()
            except Exception as e:
                logger.error(f"World-state cache unavailable, rebuilding from the store: {e}")
                cached = None
            if cached is not None:
                horde_size = cached.horde_size
                last_attack = cached.last_horde_attack

            self.game_state = WorldState(
                settlement_id=settlement.settlement_id,
                current_day=settlement.day,
                current_phase=settlement.game_phase,
                next_phase_change=next_phase_change(settlement.game_phase),
                horde_size=horde_size,
                last_horde_attack=last_attack,
            )
            await self.cycle.persist(self.game_state)

        if self.world_map is not None:
            await self.world_map.load()

        logger.info(f"Game state loaded: day {self.game_state.current_day}, "
                    f"{self.game_state.current_phase.value}, horde size {horde_size}")
        return self.game_state

    async def get_current_game_state(self) -> Optional[WorldState]:
        if self.game_state is not None:
            return self.game_state
        try:
            self.game_state = await self.cache.load_state()
        except Exception as e:
            logger.error(f"Error getting game state: {e}")
            return None
        return self.game_state

    async def can_act(self, player_id: str, required_action_points: int = 1) -> Tuple[bool, str]:
        """Check whether a player may take an action right now."""
        game_state = await self.get_current_game_state()
        if not game_state:
            return False, "Game not initialized"

        if game_state.current_phase == GamePhase.HORDE_MODE:
            return False, "Cannot act during Horde Mode"

        player = await self.storage.get_player(player_id)
        if not player:
            return False, "Player not found"

        if not player.is_alive:
            return False, "Player is dead"

        # Free actions (using a held item) stay available at zero AP.
        if required_action_points > 0 and player.action_points < required_action_points:
            return False, "Not enough action points"

        return True, ""

    # --- Phase transitions ---

    async def start_horde_mode(self) -> Optional[HordeAttackReport]:
        async with self._lock:
            if not self.game_state:
                logger.warning("Horde Mode trigger fired before the game state was loaded")
                return None
            return await self.cycle.transition_to_horde_mode(self.game_state)

    async def start_play_mode(self):
        async with self._lock:
            if not self.game_state:
                logger.warning("Play Mode trigger fired before the game state was loaded")
                return
            await self.cycle.transition_to_play_mode(self.game_state)

    async def sweep_contested_zones(self) -> int:
        if self.zones is None:
            return 0
        async with self._lock:
            return await self.zones.expire_temporary_zones()

    # --- Admin ---

    async def reset_town(self) -> bool:
        """Back to day 1, play mode, initial horde, every player restored."""
        async with self._lock:
            if not self.game_state:
                logger.error("Game state not initialized")
                return False
            try:
                await self.storage.reset_all_players()
                await self.storage.reset_settlement(self.game_state.settlement_id)

                self.game_state.current_day = 1
                self.game_state.current_phase = GamePhase.PLAY_MODE
                self.game_state.last_horde_attack = now()
                self.game_state.horde_size = self.initial_horde_size
                self.game_state.next_phase_change = next_phase_change(GamePhase.PLAY_MODE)
                await self.cycle.persist(self.game_state)
            except Exception as e:
                logger.error(f"Error resetting town: {e}")
                return False

        logger.info("Town has been reset to initial state")
        return True

    async def reset_map(self) -> bool:
        if self.world_map is None:
            return False
        async with self._lock:
            try:
                await self.world_map.reset_map()
                if self.zones is not None:
                    await self.zones.clear_all()
            except Exception as e:
                logger.error(f"Error resetting map: {e}")
                return False
        return True

    async def trigger_horde_results(self) -> Optional[HordeAttackReport]:
        """Resolve an attack right now and advance the day by one."""
        async with self._lock:
            if not self.game_state:
                logger.error("Game state not initialized")
                return None
            logger.info("Manually triggering horde attack results...")
            report = await self.cycle.process_horde_attack(self.game_state)
            await self.storage.advance_day(self.game_state.settlement_id)
            self.game_state.current_day += 1
            self.game_state.last_horde_attack = now()
            await self.cycle.persist(self.game_state)

        if report is not None:
            await self.cycle.notify(report)
        logger.info(f"Day advanced to {self.game_state.current_day}")
        return report

    async def set_horde_size(self, size: int) -> bool:
        async with self._lock:
            if not self.game_state:
                logger.error("Game state not initialized")
                return False
            self.game_state.horde_size = max(1, size)
            await self.cycle.persist(self.game_state)
        logger.info(f"Horde size set to {self.game_state.horde_size}")
        return True

    async def revive_player(self, player_id: str) -> bool:
        success = await self.storage.revive_player(player_id)
        if success:
            logger.info(f"Player {player_id} has been revived")
        return success

    async def refresh_player_action_points(self, player_id: str) -> bool:
        success = await self.storage.reset_action_points(player_id)
        if success:
            logger.info(f"Action points refreshed for player {player_id}")
        return success

    async def close(self):
        """Let in-flight work finish before the process exits."""
        async with self._lock:
            if self.world_map is not None:
                await self.world_map.drain()
