"""Tests for zombie presence on the map."""

import asyncio
import random

import pytest

from game.hostiles import SPAWN_WAVES, ThreatLevel, ZombieService, threat_level


@pytest.fixture
def hostiles(storage):
    return ZombieService(storage, random.Random(11))


class TestThreat:
    @pytest.mark.parametrize("count,level", [
        (0, ThreatLevel.NONE),
        (2, ThreatLevel.LOW),
        (4, ThreatLevel.MEDIUM),
        (9, ThreatLevel.HIGH),
    ])
    def test_threat_level(self, count, level):
        assert threat_level(count) == level


class TestCounts:
    def test_add_and_remove(self, hostiles):
        async def run():
            await hostiles.add_zombies_at(2, 2, 3)
            await hostiles.remove_zombies_at(2, 2, 1)
            middle = await hostiles.zombies_at(2, 2)
            await hostiles.remove_zombies_at(2, 2, 10)
            return middle, await hostiles.zombies_at(2, 2)

        assert asyncio.run(run()) == (2, 0)


class TestWorldGeneration:
    def test_waves_fill_distinct_cells(self, hostiles, storage):
        asyncio.run(hostiles.initialize_for_new_world())
        groups = asyncio.run(storage.get_all_zombies())

        assert len(groups) == sum(wave[0] for wave in SPAWN_WAVES)
        assert len({(g.x, g.y) for g in groups}) == len(groups)
        for g in groups:
            assert max(abs(g.x - 6), abs(g.y - 6)) > 1

    def test_clear_all(self, hostiles, storage):
        async def run():
            await hostiles.initialize_for_new_world()
            await hostiles.clear_all()
            return await storage.get_all_zombies()

        assert asyncio.run(run()) == []


class TestGrowth:
    def test_each_group_spawns_at_most_one(self, hostiles, storage):
        async def run():
            await storage.set_zombies_at(5, 5, 2)
            await storage.set_zombies_at(0, 0, 1)
            spawned = await hostiles.grow_after_attack()
            total = sum(g.count for g in await storage.get_all_zombies())
            return spawned, total

        spawned, total = asyncio.run(run())
        assert spawned <= 2
        assert total == 3 + spawned

    def test_threat_at_cell(self, hostiles):
        async def run():
            await hostiles.add_zombies_at(1, 1, 5)
            return await hostiles.threat_level_at(1, 1), await hostiles.threat_level_at(2, 2)

        assert asyncio.run(run()) == (ThreatLevel.HIGH, ThreatLevel.NONE)
