"""Admin commands for testing and game management."""

import os

import discord
from discord import app_commands
from discord.ext import commands

from .engine import GameEngine
from .notifications import format_horde_report


def _error_embed(message: str) -> discord.Embed:
    return discord.Embed(title="❌ Error", description=message, color=0xff0000)


class AdminCommands(commands.Cog):
    """Admin-only commands for testing and management."""

    def __init__(self, bot: commands.Bot, engine: GameEngine):
        self.bot = bot
        self.engine = engine

        # Get owner ID from environment or set a default for testing
        self.owner_id = int(os.getenv('BOT_OWNER_ID', '0'))

    def is_owner(self, user_id: int) -> bool:
        """Check if user is the bot owner."""
        if user_id == self.owner_id:
            return True

        application = getattr(self.bot, "application", None)
        owner = getattr(application, "owner", None)
        return owner is not None and user_id == owner.id

    async def _deny_non_owner(self, interaction: discord.Interaction) -> bool:
        if self.is_owner(interaction.user.id):
            return False
        await interaction.response.send_message("❌ This command is restricted to bot owners.", ephemeral=True)
        return True

    @app_commands.command(name="admin_reset_town", description="[ADMIN] Reset the town, players and horde")
    async def reset_town(self, interaction: discord.Interaction):
        if await self._deny_non_owner(interaction):
            return

        if await self.engine.reset_town():
            embed = discord.Embed(
                title="🔄 Town Reset Complete",
                description="Day 1 begins. Every player is back in the city at full strength.",
                color=0x00ff00
            )
            await interaction.response.send_message(embed=embed)
        else:
            await interaction.response.send_message(
                embed=_error_embed("Failed to reset town. Check logs for details."), ephemeral=True
            )

    @app_commands.command(name="admin_reset_map", description="[ADMIN] Hide the map again and re-roll points of interest")
    async def reset_map(self, interaction: discord.Interaction):
        if await self._deny_non_owner(interaction):
            return

        await interaction.response.defer(ephemeral=True)
        if await self.engine.reset_map():
            await interaction.followup.send("🗺️ The map has been reset.", ephemeral=True)
        else:
            await interaction.followup.send(embed=_error_embed("Failed to reset the map."), ephemeral=True)

    @app_commands.command(name="admin_horde_size", description="[ADMIN] Set the size of the next horde")
    @app_commands.describe(size="Number of zombies in the next attack")
    async def horde_size(self, interaction: discord.Interaction, size: int):
        if await self._deny_non_owner(interaction):
            return

        if await self.engine.set_horde_size(size):
            await interaction.response.send_message(f"🧟 Horde size set to {max(1, size)}.", ephemeral=True)
        else:
            await interaction.response.send_message(
                embed=_error_embed("The game is not initialized yet."), ephemeral=True
            )

    @app_commands.command(name="admin_trigger_horde", description="[ADMIN] Resolve a horde attack now and advance the day")
    async def trigger_horde(self, interaction: discord.Interaction):
        if await self._deny_non_owner(interaction):
            return

        await interaction.response.defer(ephemeral=True)
        try:
            report = await self.engine.trigger_horde_results()
        except Exception as e:
            await interaction.followup.send(embed=_error_embed(f"Horde resolution failed: {e}"), ephemeral=True)
            return

        if report is None:
            await interaction.followup.send(embed=_error_embed("No attack could be resolved."), ephemeral=True)
            return
        await interaction.followup.send(embed=format_horde_report(report), ephemeral=True)

    @app_commands.command(name="admin_revive", description="[ADMIN] Revive a dead player")
    @app_commands.describe(player="The player to revive")
    async def revive(self, interaction: discord.Interaction, player: discord.Member):
        if await self._deny_non_owner(interaction):
            return

        if await self.engine.revive_player(str(player.id)):
            await interaction.response.send_message(f"⚕️ {player.mention} has been revived.", ephemeral=True)
        else:
            await interaction.response.send_message(embed=_error_embed("Player not found."), ephemeral=True)

    @app_commands.command(name="admin_refresh_ap", description="[ADMIN] Refill a player's action points")
    @app_commands.describe(player="The player whose action points to refill")
    async def refresh_ap(self, interaction: discord.Interaction, player: discord.Member):
        if await self._deny_non_owner(interaction):
            return

        if await self.engine.refresh_player_action_points(str(player.id)):
            await interaction.response.send_message(f"⚡ Action points refreshed for {player.mention}.", ephemeral=True)
        else:
            await interaction.response.send_message(embed=_error_embed("Player not found."), ephemeral=True)


async def setup(bot: commands.Bot):
    """Setup function to add the admin cog to the bot."""
    await bot.add_cog(AdminCommands(bot, bot.engine))
