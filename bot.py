"""Main entry point for the Horde Night Discord bot."""

import asyncio
import logging
import os
import random
import sys

import discord
from discord.ext import commands

from error_handler import ErrorHandler
from game.cache import WorldStateCache
from game.config import DATABASE_PATH, REDIS_URL
from game.engine import GameEngine
from game.hostiles import ZombieService
from game.notifications import NotificationManager
from game.phases import PhaseCycle
from game.storage import GameStorage
from game.worldmap import WorldMap
from game.zones import ZoneContestService

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('horde_night.log')
    ]
)
logger = logging.getLogger(__name__)

# (module, required): the world does not advance without the scheduler
EXTENSIONS = [
    ('game.scheduler', True),
    ('game.admin_commands', False),
]


class HordeNightBot(commands.Bot):
    """The bot process: builds the simulation and hosts its cogs."""

    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = False  # We only use slash commands

        super().__init__(
            command_prefix='!',  # Unused but required
            intents=intents,
            description="Survive the nightly horde"
        )

        owner_id = int(os.getenv('BOT_OWNER_ID', '0'))
        self.error_handler = ErrorHandler(self, owner_id)

        rng = random.Random()
        self.storage = GameStorage(DATABASE_PATH)
        self.cache = WorldStateCache(REDIS_URL)
        self.hostiles = ZombieService(self.storage, rng)
        self.zones = ZoneContestService(self.storage, self.hostiles)
        self.world_map = WorldMap(self.storage, self.hostiles, rng)
        self.notifications = NotificationManager(self)
        cycle = PhaseCycle(self.storage, self.cache, self.hostiles, self.notifications, rng)
        self.engine = GameEngine(self.storage, self.cache, cycle, self.world_map, self.zones)

    async def setup_hook(self):
        """Setup hook called before the bot connects."""
        logger.info("Setting up Horde Night bot...")

        await self.storage.initialize()
        await self.engine.load_game_state()

        for extension, required in EXTENSIONS:
            try:
                await self.load_extension(extension)
                logger.info(f"Loaded extension {extension}")
            except Exception as e:
                await self.error_handler.notify_owner(f"Failed to load {extension}", str(e), e)
                logger.error(f"Failed to load extension {extension}: {e}")
                if required:
                    raise

        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} command(s)")
        except Exception as e:
            await self.error_handler.notify_owner("Failed to sync commands", str(e), e)
            logger.error(f"Failed to sync commands: {e}")

    async def on_ready(self):
        logger.info(f"Horde Night bot is ready! Logged in as {self.user}")
        try:
            await self.change_presence(activity=discord.Game(name="Surviving the horde"))

            state = self.engine.game_state
            if state:
                await self.error_handler.send_startup_notification(
                    f"Day {state.current_day}, {state.current_phase.value}, horde size {state.horde_size}"
                )
        except Exception as e:
            logger.error(f"Error in on_ready: {e}")

    async def on_app_command_error(self, interaction, error):
        await self.error_handler.handle_interaction_error(interaction, error)

    async def on_error(self, event, *args, **kwargs):
        exc_value = sys.exc_info()[1]
        logger.error(f"Bot error in event {event}", exc_info=True)
        if exc_value:
            await self.error_handler.notify_owner(f"Bot Error in {event}", str(args)[:500], exc_value)

    async def close(self):
        """Clean shutdown: stop triggers, let in-flight work finish."""
        logger.info("Shutting down Horde Night bot...")
        try:
            await self.unload_extension('game.scheduler')
        except commands.ExtensionNotLoaded:
            pass
        await self.engine.close()
        try:
            await self.cache.close()
        except Exception as e:
            logger.error(f"Error closing cache connection: {e}")
        await super().close()


async def main():
    token = os.getenv('DISCORD_TOKEN')
    if not token:
        logger.error("DISCORD_TOKEN is not set. Exiting.")
        sys.exit(1)

    bot = HordeNightBot()
    async with bot:
        await bot.start(token)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
