"""Tests for the exploration grid."""

import asyncio
import random

import pytest

from game.errors import OutOfBoundsError
from game.models import POI_ZONES, Direction, TileState, Zone
from game.worldmap import WorldMap


NEIGHBORS = [(5, 5), (6, 5), (7, 5), (5, 6), (7, 6), (5, 7), (6, 7), (7, 7)]


@pytest.fixture
def world(tile_store):
    return WorldMap(tile_store, rng=random.Random(7))


def _hidden_non_poi(world):
    for x in range(world.size):
        for y in range(world.size):
            if not world.is_center_area(x, y) and (x, y) not in world.poi_locations:
                return x, y
    raise AssertionError("no plain tile available")


class TestGeometry:
    def test_center_is_town(self, world):
        assert world.tile_state(6, 6) == TileState.TOWN
        assert world.location_at(6, 6) == Zone.GATE
        assert world.gate_coordinates() == (6, 6)

    def test_center_stays_town_after_marking(self, world):
        world.mark_explored(6, 6)
        assert world.tile_state(6, 6) == TileState.TOWN

    def test_neighbors_start_explored(self, world):
        for x, y in NEIGHBORS:
            assert world.tile_state(x, y) in (TileState.EXPLORED, TileState.POI)

    def test_border_is_greater_waste(self, world):
        for x, y in [(0, 3), (12, 3), (3, 0), (3, 12)]:
            if (x, y) not in world.poi_locations:
                assert world.location_at(x, y) == Zone.GREATER_WASTE

    def test_out_of_bounds_raises(self, world):
        with pytest.raises(OutOfBoundsError):
            world.tile_state(13, 0)
        with pytest.raises(OutOfBoundsError):
            world.location_at(-1, 4)
        with pytest.raises(OutOfBoundsError):
            world.mark_explored(0, 13)

    def test_direction_moves(self, world):
        assert world.coordinate_in_direction(6, 6, Direction.NORTH) == (6, 5)
        assert world.coordinate_in_direction(6, 6, Direction.SOUTHWEST) == (5, 7)

    def test_move_off_edge_is_not_clamped(self, world):
        assert world.coordinate_in_direction(0, 0, Direction.NORTHWEST) == (-1, -1)
        assert not world.is_valid_coordinate(-1, -1)


class TestPointsOfInterest:
    def test_every_poi_placed_once(self, world):
        assert sorted(world.poi_locations.values()) == sorted(POI_ZONES)

    def test_pois_avoid_center_area(self, world):
        for x, y in world.poi_locations:
            assert not world.is_center_area(x, y)

    def test_explored_poi_keeps_its_tag(self, world):
        (x, y), poi = next(iter(world.poi_locations.items()))
        assert world.tile_state(x, y) == TileState.HIDDEN

        async def explore():
            world.mark_explored(x, y)
            world.mark_explored(x, y)
            await world.drain()

        asyncio.run(explore())
        assert world.tile_state(x, y) == TileState.POI
        assert world.location_at(x, y) == poi


class TestDiscovery:
    def test_mark_explored_is_idempotent(self, world, tile_store):
        x, y = _hidden_non_poi(world)

        async def explore():
            first = world.mark_explored(x, y)
            second = world.mark_explored(x, y)
            await world.drain()
            return first, second

        assert asyncio.run(explore()) == (True, False)
        assert world.tile_state(x, y) == TileState.EXPLORED
        assert (x, y) in tile_store.tiles

    def test_persist_failure_is_logged_not_raised(self, world, tile_store, caplog):
        tile_store.fail_inserts = True
        x, y = _hidden_non_poi(world)

        async def explore():
            assert world.mark_explored(x, y)
            await world.drain()

        asyncio.run(explore())
        assert world.is_explored(x, y)
        assert "Failed to persist explored tile" in caplog.text

    def test_mark_without_event_loop_keeps_memory_state(self, world, tile_store):
        x, y = _hidden_non_poi(world)
        assert world.mark_explored(x, y)
        assert world.is_explored(x, y)
        assert (x, y) not in tile_store.tiles

    def test_load_seeds_empty_store(self, world, tile_store):
        asyncio.run(world.load())
        assert tile_store.tiles == set(NEIGHBORS) | {(6, 6)}

    def test_load_restores_history(self, tile_store):
        tile_store.tiles.update({(0, 0), (20, 20)})
        world = WorldMap(tile_store, rng=random.Random(7))
        asyncio.run(world.load())
        assert world.is_explored(0, 0)
        assert world.is_explored(5, 5)

    def test_reset_hides_everything_but_start(self, world, tile_store, fake_hostiles):
        world.hostiles = fake_hostiles
        x, y = _hidden_non_poi(world)

        async def explore_then_reset():
            world.mark_explored(x, y)
            await world.drain()
            await world.reset_map()

        asyncio.run(explore_then_reset())

        assert world.tile_state(6, 6) == TileState.TOWN
        for nx, ny in NEIGHBORS:
            assert world.is_explored(nx, ny)
        assert world.tile_state(x, y) == TileState.HIDDEN
        assert (x, y) not in tile_store.tiles
        assert fake_hostiles.calls == ["clear", "init"]

    def test_poi_lookup(self, world):
        (x, y), poi = next(iter(world.poi_locations.items()))
        assert world.poi_at(x, y) == poi
        assert world.poi_at(6, 6) is None
