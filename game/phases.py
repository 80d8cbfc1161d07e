"""Day/night phase transitions.

Play mode is the interactive period; horde mode resolves the nightly attack.
The methods here mutate the ``WorldState`` they are given and persist it.
They assume the caller serializes access (see ``GameEngine``).
"""

import logging
import math
import random
from typing import List, Optional

from .combat import resolve_horde_attack
from .config import (GAME_START_TIME, HORDE_SCALING_FACTOR, HORDE_SCALING_RANDOMNESS,
                     HORDE_START_TIME)
from .models import GamePhase, HordeAttackReport, Player, WorldState
from .status import add_status, decay_conditions
from .storage import GameStorage
from .timeutils import next_occurrence, now


logger = logging.getLogger(__name__)


def next_phase_change(phase: GamePhase):
    """When the phase after ``phase`` begins."""
    if phase == GamePhase.PLAY_MODE:
        return next_occurrence(HORDE_START_TIME)
    return next_occurrence(GAME_START_TIME)


class PhaseCycle:
    """Runs the two phase transitions against the stores."""

    def __init__(self, storage: GameStorage, cache, hostiles=None, notifier=None,
                 rng: Optional[random.Random] = None,
                 scaling_factor: float = HORDE_SCALING_FACTOR,
                 scaling_randomness: float = HORDE_SCALING_RANDOMNESS):
        self.storage = storage
        self.cache = cache
        self.hostiles = hostiles
        self.notifier = notifier
        self.rng = rng or random.Random()
        self.scaling_factor = scaling_factor
        self.scaling_randomness = scaling_randomness

    async def persist(self, state: WorldState):
        try:
            await self.cache.save_state(state)
        except Exception as e:
            logger.error(f"Failed to cache world state, in-memory state stays authoritative: {e}")

    def scale_horde(self, horde_size: int) -> int:
        """Grow the horde by the scaling factor, perturbed by bounded noise."""
        multiplier = 1 + (self.rng.random() - 0.5) * self.scaling_randomness
        return max(1, math.floor(horde_size * self.scaling_factor * multiplier))

    # --- Horde mode ---

    async def transition_to_horde_mode(self, state: WorldState) -> Optional[HordeAttackReport]:
        logger.info("Transitioning to Horde Mode...")

        await self.storage.update_game_phase(state.settlement_id, GamePhase.HORDE_MODE)
        state.current_phase = GamePhase.HORDE_MODE

        report = await self.process_horde_attack(state)

        state.last_horde_attack = now()
        state.next_phase_change = next_phase_change(GamePhase.HORDE_MODE)
        await self.persist(state)

        if report is not None:
            await self.notify(report)

        logger.info("Horde attack completed")
        return report

    async def process_horde_attack(self, state: WorldState) -> Optional[HordeAttackReport]:
        """Resolve the attack against the living roster and apply the results."""
        settlement = await self.storage.get_settlement(state.settlement_id)
        if settlement is None:
            logger.warning(f"Settlement {state.settlement_id} not found - skipping horde attack")
            return None

        players = await self.storage.get_alive_players()
        outside = [p for p in players if not p.position.is_safe]
        inside = [p for p in players if p.position.is_safe]

        defense = settlement.defense_total
        logger.info(f"Horde Attack - Day {state.current_day}: horde {state.horde_size} vs defense {defense}")

        # A ResolutionInvariantError here aborts the cycle before anything is written.
        report = resolve_horde_attack(state.current_day, state.horde_size, defense, outside, inside, self.rng)

        await self.apply_report(report, players)
        population = await self.storage.update_population(settlement.settlement_id)
        logger.info(
            f"Breach {report.breach_size}, {len(report.casualties)} killed, "
            f"{len(report.wounded)} wounded, population now {population}"
        )

        if self.hostiles is not None:
            try:
                await self.hostiles.grow_after_attack()
            except Exception as e:
                logger.error(f"Failed to spread zombies after the attack: {e}")

        return report

    async def apply_report(self, report: HordeAttackReport, players: List[Player]) -> int:
        """Write every status change in the report. Returns how many were written."""
        by_id = {p.player_id: p for p in players}
        applied = 0
        for outcome in report.outside_outcomes + report.inside_outcomes:
            if not outcome.changed:
                continue
            try:
                await self.storage.save_vitals(add_status(by_id[outcome.player_id], outcome.status_after))
                applied += 1
            except Exception as e:
                logger.error(f"Failed to apply horde outcome to player {outcome.player_id}: {e}")
        return applied

    async def notify(self, report: HordeAttackReport):
        if self.notifier is None:
            return
        try:
            await self.notifier.send_horde_report(report)
        except Exception as e:
            logger.error(f"Failed to deliver horde report: {e}")

    # --- Play mode ---

    async def transition_to_play_mode(self, state: WorldState):
        logger.info("Transitioning to Play Mode...")

        await self.storage.update_game_phase(state.settlement_id, GamePhase.PLAY_MODE)
        await self.storage.reset_daily_action_points()
        await self.storage.advance_day(state.settlement_id)

        state.current_phase = GamePhase.PLAY_MODE
        state.current_day += 1
        state.horde_size = self.scale_horde(state.horde_size)
        state.next_phase_change = next_phase_change(GamePhase.PLAY_MODE)

        await self.apply_decay()
        await self.persist(state)

        logger.info(f"Day {state.current_day} - Play Mode started. Horde size: {state.horde_size}")

    async def apply_decay(self) -> int:
        """Run the condition decay step once for every living player."""
        visited = 0
        for player in await self.storage.get_alive_players():
            visited += 1
            try:
                decayed = decay_conditions(player)
                if decayed.status != player.status or decayed.conditions != player.conditions:
                    await self.storage.save_vitals(decayed)
            except Exception as e:
                logger.error(f"Failed to decay conditions for player {player.player_id}: {e}")
        return visited
