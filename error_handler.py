"""Owner notifications for failures the bot cannot handle on its own."""

import logging
import traceback
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import discord
from discord.ext import commands


logger = logging.getLogger(__name__)

NOTIFICATION_COOLDOWN = timedelta(minutes=5)


class ErrorHandler:
    """Reports errors to the bot owner by DM, rate limited per error type."""

    def __init__(self, bot: commands.Bot, owner_id: int):
        self.bot = bot
        self.owner_id = owner_id
        self.error_counts: Dict[str, int] = {}
        self.last_notification: Dict[str, datetime] = {}

    async def _get_owner(self):
        return self.bot.get_user(self.owner_id) or await self.bot.fetch_user(self.owner_id)

    async def notify_owner(self, title: str, description: str, error: Optional[Exception] = None):
        """Send a DM notification to the bot owner."""
        try:
            owner = await self._get_owner()

            embed = discord.Embed(
                title=f"🚨 {title}",
                description=description,
                color=0xff0000,
                timestamp=datetime.now(timezone.utc)
            )

            if error:
                embed.add_field(name="Error Details", value=f"```{str(error)[:1000]}```", inline=False)
                tb = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
                embed.add_field(name="Traceback", value=f"```{tb[-1000:]}```", inline=False)

            embed.set_footer(text="Horde Night Error Handler")

            await owner.send(embed=embed)
            logger.info(f"Sent error notification to owner: {title}")

        except Exception as e:
            logger.error(f"Failed to send error notification: {e}")

    def should_notify(self, error_type: str, at: Optional[datetime] = None) -> bool:
        """Count the error and decide whether the cooldown allows another DM."""
        at = at or datetime.now(timezone.utc)
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

        last = self.last_notification.get(error_type)
        if last is not None and at - last <= NOTIFICATION_COOLDOWN:
            return False
        self.last_notification[error_type] = at
        return True

    async def handle_interaction_error(self, interaction: discord.Interaction, error: Exception):
        """Handle slash command interaction errors."""
        error_type = type(error).__name__
        command_name = interaction.command.name if interaction.command else "unknown"

        if self.should_notify(error_type):
            description = (
                f"**Command:** /{command_name}\n"
                f"**User:** {interaction.user.display_name} ({interaction.user.id})\n"
                f"**Error Count:** {self.error_counts[error_type]} (since restart)"
            )
            await self.notify_owner(f"Slash Command Error: {error_type}", description, error)

        logger.error(f"Interaction error in {command_name}: {error}")

        try:
            error_embed = discord.Embed(
                title="❌ Command Error",
                description="Something went wrong. The bot owner has been notified.",
                color=0xff0000
            )
            if not interaction.response.is_done():
                await interaction.response.send_message(embed=error_embed, ephemeral=True)
            else:
                await interaction.followup.send(embed=error_embed, ephemeral=True)
        except Exception as followup_error:
            logger.error(f"Failed to send error message to user: {followup_error}")

    async def send_startup_notification(self, state_summary: str):
        """Tell the owner the bot is up and what the world looks like."""
        try:
            owner = await self._get_owner()
            embed = discord.Embed(
                title="✅ Horde Night Started",
                description=state_summary,
                color=0x00ff00,
                timestamp=datetime.now(timezone.utc)
            )
            await owner.send(embed=embed)
            logger.info("Sent startup notification to owner")
        except Exception as e:
            logger.error(f"Failed to send startup notification: {e}")
