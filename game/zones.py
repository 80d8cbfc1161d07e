"""Contested zones: who controls a grid cell, players or zombies."""

import datetime
import logging
from typing import Optional, Tuple

from .config import TEMP_UNCONTESTED_MINUTES
from .hostiles import ZombieService
from .models import ZoneContest, ZoneStatus
from .storage import GameStorage
from .timeutils import now


logger = logging.getLogger(__name__)

HUMAN_CP_PER_PLAYER = 2
ZOMBIE_CP_PER_ZOMBIE = 1


class ZoneContestService:
    """Tracks control points per cell and the temporary grace period.

    When zombies come to outweigh the players on an uncontested cell, the cell
    stays passable for a short grace period before it turns contested.
    """

    def __init__(self, storage: GameStorage, hostiles: ZombieService):
        self.storage = storage
        self.hostiles = hostiles

    async def calculate_control_points(self, x: int, y: int) -> Tuple[int, int]:
        players = await self.storage.get_players_at(x, y)
        zombies = await self.hostiles.zombies_at(x, y)
        return len(players) * HUMAN_CP_PER_PLAYER, zombies * ZOMBIE_CP_PER_ZOMBIE

    async def get_zone_contest(self, x: int, y: int) -> ZoneContest:
        """Get the contest record for a cell, creating it on first access."""
        contest = await self.storage.get_zone_contest(x, y)
        if contest:
            return contest

        human_cp, zombie_cp = await self.calculate_control_points(x, y)
        status = ZoneStatus.UNCONTESTED if human_cp >= zombie_cp else ZoneStatus.CONTESTED
        contest = ZoneContest(x, y, status, human_cp, zombie_cp)
        await self.storage.save_zone_contest(contest)
        return contest

    async def update_zone_contest(self, x: int, y: int, at: Optional[datetime.datetime] = None) -> ZoneContest:
        """Recompute the status of a cell from its current control points."""
        at = at or now()
        human_cp, zombie_cp = await self.calculate_control_points(x, y)
        current = await self.get_zone_contest(x, y)

        until = None
        if human_cp >= zombie_cp:
            status = ZoneStatus.UNCONTESTED
        elif current.status == ZoneStatus.UNCONTESTED:
            status = ZoneStatus.TEMPORARILY_UNCONTESTED
            until = at + datetime.timedelta(minutes=TEMP_UNCONTESTED_MINUTES)
        elif current.status == ZoneStatus.TEMPORARILY_UNCONTESTED:
            if current.temp_uncontested_until and at > current.temp_uncontested_until:
                status = ZoneStatus.CONTESTED
            else:
                status = ZoneStatus.TEMPORARILY_UNCONTESTED
                until = current.temp_uncontested_until
        else:
            status = ZoneStatus.CONTESTED

        contest = ZoneContest(x, y, status, human_cp, zombie_cp, until)
        await self.storage.save_zone_contest(contest)
        return contest

    async def can_player_move_out(self, x: int, y: int) -> Tuple[bool, str]:
        contest = await self.get_zone_contest(x, y)
        if contest.status == ZoneStatus.CONTESTED:
            return False, "You cannot leave this zone - it is contested by zombies!"
        return True, ""

    async def on_player_enter_zone(self, x: int, y: int) -> ZoneContest:
        return await self.update_zone_contest(x, y)

    async def on_player_leave_zone(self, x: int, y: int) -> ZoneContest:
        current = await self.get_zone_contest(x, y)
        if current.status == ZoneStatus.CONTESTED:
            return current
        return await self.update_zone_contest(x, y)

    async def expire_temporary_zones(self, at: Optional[datetime.datetime] = None) -> int:
        """Turn every temporarily uncontested zone whose grace ran out contested."""
        expired = await self.storage.expire_temporary_zones(at or now())
        if expired:
            logger.info(f"{expired} temporarily uncontested zone(s) are now contested")
        return expired

    async def clear_all(self):
        await self.storage.clear_zone_contests()
