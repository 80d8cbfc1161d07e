"""Tests for horde report rendering and delivery."""

import asyncio

from game.models import HordeAttackReport, PlayerAttackOutcome, PlayerStatus
from game.notifications import MAX_LISTED, NotificationManager, format_horde_report


class FakeChannel:
    def __init__(self):
        self.sent = []

    async def send(self, embed=None):
        self.sent.append(embed)


class FakeBot:
    def __init__(self, channels):
        self.channels = channels

    def get_channel(self, channel_id):
        return self.channels.get(channel_id)


def _report(**overrides):
    values = dict(day=3, horde_size=20, defense_total=5, breached=True, breach_size=15)
    values.update(overrides)
    return HordeAttackReport(**values)


def _field(embed, name):
    return next(f for f in embed.fields if f.name == name)


class TestFormat:
    def test_quiet_night(self):
        embed = format_horde_report(_report(horde_size=5, defense_total=10, breached=False, breach_size=0))
        assert embed.title == "🧟 Horde Attack - Day 3"
        assert "held" in embed.description
        assert _field(embed, "Survivors")

    def test_lists_casualties_and_wounds(self):
        report = _report(
            outside_outcomes=[
                PlayerAttackOutcome("1", "Alice", PlayerStatus.ALIVE, PlayerStatus.DEAD, killed=True),
            ],
            inside_outcomes=[
                PlayerAttackOutcome("2", "Bob", PlayerStatus.ALIVE, PlayerStatus.WOUNDED_LEG, 3, 1),
                PlayerAttackOutcome("3", "Cy", PlayerStatus.ALIVE, PlayerStatus.DEAD, 1, 0,
                                    killed=True, killed_by_infection=True),
            ],
        )
        embed = format_horde_report(report)

        assert "15" in embed.description
        assert "Alice** was killed" in _field(embed, "Caught Outside").value
        in_town = _field(embed, "In Town").value
        assert "Bob** was wounded leg" in in_town
        assert "Cy** succumbed to infection" in in_town

    def test_long_lists_are_truncated(self):
        outcomes = [
            PlayerAttackOutcome(str(i), f"P{i}", PlayerStatus.ALIVE, PlayerStatus.ALIVE, 1)
            for i in range(MAX_LISTED + 5)
        ]
        embed = format_horde_report(_report(inside_outcomes=outcomes))
        assert "...and 5 more" in _field(embed, "In Town").value


class TestDelivery:
    def test_sends_to_configured_channel(self):
        channel = FakeChannel()
        manager = NotificationManager(FakeBot({42: channel}), channel_id=42)
        asyncio.run(manager.send_horde_report(_report()))
        assert len(channel.sent) == 1

    def test_no_channel_configured(self):
        channel = FakeChannel()
        manager = NotificationManager(FakeBot({42: channel}), channel_id=0)
        asyncio.run(manager.send_horde_report(_report()))
        assert channel.sent == []

    def test_missing_channel_is_skipped(self):
        manager = NotificationManager(FakeBot({}), channel_id=42)
        asyncio.run(manager.send_horde_report(_report()))
