"""Timed triggers for the day/night cycle."""

import logging

from discord.ext import commands, tasks

from .config import CONTEST_SWEEP_MINUTES, GAME_START_TIME, HORDE_START_TIME
from .engine import GameEngine
from .timeutils import check_phase_times, parse_clock


logger = logging.getLogger(__name__)


class PhaseScheduler(commands.Cog):
    """Fires phase transitions at fixed times of day, plus the zone sweep.

    The loops only decide *when*; everything they do goes through the engine.
    """

    def __init__(self, bot: commands.Bot, engine: GameEngine):
        self.bot = bot
        self.engine = engine

        self.horde_mode_start.start()
        self.play_mode_start.start()
        self.contested_zone_sweep.start()

    def cog_unload(self):
        """Stop accepting triggers; an iteration already running finishes."""
        self.horde_mode_start.stop()
        self.play_mode_start.stop()
        self.contested_zone_sweep.stop()

    @tasks.loop(time=parse_clock(HORDE_START_TIME))
    async def horde_mode_start(self):
        try:
            await self.engine.start_horde_mode()
        except Exception as e:
            logger.critical(f"Horde resolution aborted: {e}", exc_info=True)
            await self._notify_owner("Horde resolution aborted", e)

    @tasks.loop(time=parse_clock(GAME_START_TIME))
    async def play_mode_start(self):
        try:
            await self.engine.start_play_mode()
        except Exception as e:
            logger.error(f"Error transitioning to play mode: {e}", exc_info=True)
            await self._notify_owner("Play mode transition failed", e)

    @tasks.loop(minutes=CONTEST_SWEEP_MINUTES)
    async def contested_zone_sweep(self):
        try:
            await self.engine.sweep_contested_zones()
        except Exception as e:
            logger.error(f"Error processing expired temporary zones: {e}")

    @horde_mode_start.before_loop
    @play_mode_start.before_loop
    @contested_zone_sweep.before_loop
    async def before_triggers(self):
        """Wait for bot to be ready before firing any trigger."""
        await self.bot.wait_until_ready()

    async def _notify_owner(self, title: str, error: Exception):
        handler = getattr(self.bot, "error_handler", None)
        if handler is not None:
            await handler.notify_owner(title, "The phase scheduler hit an error", error)


async def setup(bot: commands.Bot):
    """Setup function to add the scheduler to the bot."""
    check_phase_times(GAME_START_TIME, HORDE_START_TIME)
    await bot.add_cog(PhaseScheduler(bot, bot.engine))
    logger.info(f"Phase transitions scheduled: Horde Mode at {HORDE_START_TIME}, Play Mode at {GAME_START_TIME}")
