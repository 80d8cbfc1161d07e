"""Notification system for Horde Night."""

import logging

import discord

from .config import HORDE_CHANNEL_ID
from .models import HordeAttackReport, PlayerAttackOutcome


logger = logging.getLogger(__name__)

MAX_LISTED = 15


def _describe(outcome: PlayerAttackOutcome) -> str:
    if outcome.killed_by_infection:
        return f"💀 **{outcome.name}** succumbed to infection"
    if outcome.killed:
        return f"💀 **{outcome.name}** was killed"
    if outcome.changed:
        wound = outcome.status_after.value.replace("_", " ")
        return f"🩸 **{outcome.name}** was {wound}"
    return f"🛡️ **{outcome.name}** fought off {outcome.attacks_received} attack(s)"


def _field_value(lines) -> str:
    if len(lines) > MAX_LISTED:
        lines = lines[:MAX_LISTED] + [f"...and {len(lines) - MAX_LISTED} more"]
    return "\n".join(lines)


def format_horde_report(report: HordeAttackReport) -> discord.Embed:
    """Render an attack report as an embed."""
    if report.breached:
        description = f"💥 The defenses were breached by **{report.breach_size}** zombies!"
        color = 0x8b0000
    else:
        description = "🛡️ The town defenses held!"
        color = 0x2e8b57

    embed = discord.Embed(
        title=f"🧟 Horde Attack - Day {report.day}",
        description=description,
        color=color,
    )
    embed.add_field(name="Horde Size", value=str(report.horde_size), inline=True)
    embed.add_field(name="Defense", value=str(report.defense_total), inline=True)

    if report.outside_outcomes:
        embed.add_field(
            name="Caught Outside",
            value=_field_value([_describe(o) for o in report.outside_outcomes]),
            inline=False,
        )

    if report.inside_outcomes:
        embed.add_field(
            name="In Town",
            value=_field_value([_describe(o) for o in report.inside_outcomes]),
            inline=False,
        )

    if not report.outside_outcomes and not report.inside_outcomes:
        embed.add_field(name="Survivors", value="✅ Nobody was hurt tonight.", inline=False)

    embed.set_footer(text="A new day begins soon...")
    return embed


class NotificationManager:
    """Delivers attack reports to the configured channel."""

    def __init__(self, bot, channel_id: int = HORDE_CHANNEL_ID):
        self.bot = bot
        self.channel_id = channel_id

    async def send_horde_report(self, report: HordeAttackReport):
        if not self.channel_id:
            logger.info("No horde report channel configured, skipping report")
            return

        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            logger.warning(f"Horde report channel {self.channel_id} not accessible")
            return

        await channel.send(embed=format_horde_report(report))
        logger.info(f"Sent horde report for day {report.day}")
