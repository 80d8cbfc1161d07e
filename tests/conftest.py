"""Shared fixtures: a throwaway SQLite store and in-memory collaborators."""

import asyncio
import random

import pytest

from game.models import Player, PlayerStatus, Position, Zone
from game.storage import GameStorage


class FakeCache:
    """Dict-backed stand-in for the Redis world-state cache."""

    def __init__(self, fail=False):
        self.states = {}
        self.fail = fail
        self.saves = 0

    async def load_state(self):
        if self.fail:
            raise ConnectionError("cache down")
        return self.states.get("game_state")

    async def save_state(self, state):
        if self.fail:
            raise ConnectionError("cache down")
        self.saves += 1
        self.states["game_state"] = state


class FakeHostiles:
    def __init__(self):
        self.calls = []

    async def grow_after_attack(self):
        self.calls.append("grow")
        return 0

    async def clear_all(self):
        self.calls.append("clear")

    async def initialize_for_new_world(self):
        self.calls.append("init")


class FakeNotifier:
    def __init__(self, fail=False):
        self.reports = []
        self.fail = fail

    async def send_horde_report(self, report):
        if self.fail:
            raise RuntimeError("channel gone")
        self.reports.append(report)


class FakeTileStore:
    """In-memory explored-tile store."""

    def __init__(self, tiles=None, fail_inserts=False):
        self.tiles = set(tiles or ())
        self.fail_inserts = fail_inserts

    async def load_explored_tiles(self):
        return set(self.tiles)

    async def insert_explored_tile(self, x, y):
        await asyncio.sleep(0)
        if self.fail_inserts:
            raise OSError("disk full")
        self.tiles.add((x, y))

    async def clear_explored_tiles(self):
        self.tiles.clear()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def storage(tmp_path):
    store = GameStorage(str(tmp_path / "test.db"))
    asyncio.run(store.initialize())
    return store


@pytest.fixture
def make_player():
    def _make(player_id="p1", status=PlayerStatus.ALIVE, conditions=(), zone=Zone.CITY,
              action_points=10, is_alive=True, health=100, x=None, y=None):
        return Player(
            player_id=player_id,
            name=f"Player {player_id}",
            health=health,
            max_health=100,
            status=status,
            conditions=set(conditions),
            action_points=action_points,
            max_action_points=10,
            is_alive=is_alive,
            position=Position(zone, x, y),
        )
    return _make


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def fake_hostiles():
    return FakeHostiles()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def tile_store():
    return FakeTileStore()
