"""Tests for vital status and condition rules."""

import pytest

from game.errors import UnknownStatusError
from game.models import PlayerStatus
from game.status import (WOUNDS, add_status, decay_conditions, derive_vital_status, is_hurt,
                         is_temporary_condition, is_vital_status, parse_status, remove_status)


class TestCategories:
    def test_every_status_is_exactly_one_category(self):
        for status in PlayerStatus:
            assert is_vital_status(status) != is_temporary_condition(status)

    def test_wounds_are_vital(self):
        for wound in WOUNDS:
            assert is_vital_status(wound)

    def test_unknown_tag_fails_fast(self):
        with pytest.raises(UnknownStatusError):
            parse_status("zombified")

    def test_parse_accepts_raw_value(self):
        assert parse_status("thirsty") is PlayerStatus.THIRSTY


class TestAddStatus:
    def test_condition_stacks(self, make_player):
        player = make_player(conditions={PlayerStatus.FED})
        updated = add_status(player, PlayerStatus.THIRSTY)
        assert updated.conditions == {PlayerStatus.FED, PlayerStatus.THIRSTY}
        assert updated.status == PlayerStatus.ALIVE

    def test_vital_replaces_slot(self, make_player):
        player = make_player()
        updated = add_status(player, PlayerStatus.WOUNDED_LEG)
        assert updated.status == PlayerStatus.WOUNDED_LEG
        assert player.status == PlayerStatus.ALIVE

    def test_dead_clears_life(self, make_player):
        updated = add_status(make_player(), PlayerStatus.DEAD)
        assert updated.is_alive is False
        assert updated.health == 0

    def test_existing_status_is_noop(self, make_player):
        player = make_player(status=PlayerStatus.WOUNDED_ARM, conditions={PlayerStatus.FED})
        assert add_status(player, PlayerStatus.WOUNDED_ARM) is player
        assert add_status(player, PlayerStatus.FED) is player


class TestRemoveStatus:
    def test_removing_fed_keeps_wound(self, make_player):
        player = make_player(status=PlayerStatus.WOUNDED_HEAD, conditions={PlayerStatus.FED})
        updated = remove_status(player, PlayerStatus.FED)
        assert updated.status == PlayerStatus.WOUNDED_HEAD
        assert PlayerStatus.FED not in updated.conditions

    def test_removing_dead_revives(self, make_player):
        player = add_status(make_player(), PlayerStatus.DEAD)
        updated = remove_status(player, PlayerStatus.DEAD)
        assert updated.status == PlayerStatus.ALIVE
        assert updated.is_alive
        assert updated.health == updated.max_health

    def test_removing_wound_restores_baseline(self, make_player):
        player = make_player(status=PlayerStatus.WOUNDED_EYE)
        assert remove_status(player, PlayerStatus.WOUNDED_EYE).status == PlayerStatus.ALIVE

    def test_removing_wound_from_conditions(self, make_player):
        player = make_player(conditions={PlayerStatus.WOUNDED_FOOT, PlayerStatus.FED})
        updated = remove_status(player, PlayerStatus.WOUNDED_FOOT)
        assert updated.conditions == {PlayerStatus.FED}

    def test_removing_stored_wound_keeps_other_wound_in_slot(self, make_player):
        player = make_player(status=PlayerStatus.WOUNDED_ARM, conditions={PlayerStatus.WOUNDED_LEG})
        updated = remove_status(player, PlayerStatus.WOUNDED_LEG)
        assert updated.status == PlayerStatus.WOUNDED_ARM
        assert updated.conditions == set()

    def test_removing_absent_condition_is_silent(self, make_player):
        player = make_player()
        assert remove_status(player, PlayerStatus.THIRSTY) is player

    def test_alive_cannot_be_removed(self, make_player):
        player = make_player()
        assert remove_status(player, PlayerStatus.ALIVE) is player


class TestHurt:
    def test_wound_in_slot(self, make_player):
        assert is_hurt(make_player(status=PlayerStatus.WOUNDED_HAND))

    def test_wound_in_conditions(self, make_player):
        assert is_hurt(make_player(conditions={PlayerStatus.WOUNDED_HAND}))

    def test_healthy(self, make_player):
        assert not is_hurt(make_player(conditions={PlayerStatus.INFECTED}))

    def test_derive_vital_for_zero_health(self, make_player):
        assert derive_vital_status(make_player(health=0)) == PlayerStatus.DEAD


class TestDecay:
    def test_thirsty_becomes_dehydrated(self, make_player):
        updated = decay_conditions(make_player(conditions={PlayerStatus.THIRSTY}))
        assert PlayerStatus.DEHYDRATED in updated.conditions
        assert PlayerStatus.THIRSTY not in updated.conditions

    def test_short_lived_conditions_clear(self, make_player):
        player = make_player(conditions={PlayerStatus.FED, PlayerStatus.REFRESHED,
                                         PlayerStatus.HEALED, PlayerStatus.EXHAUSTED})
        assert decay_conditions(player).conditions == set()

    def test_persistent_conditions_stay(self, make_player):
        player = make_player(conditions={PlayerStatus.DEHYDRATED, PlayerStatus.INFECTED,
                                         PlayerStatus.SCAVENGING})
        assert decay_conditions(player).conditions == player.conditions

    def test_wound_in_slot_becomes_infection(self, make_player):
        updated = decay_conditions(make_player(status=PlayerStatus.WOUNDED_LEG))
        assert updated.status == PlayerStatus.ALIVE
        assert updated.conditions == {PlayerStatus.INFECTED}

    def test_wound_in_conditions_becomes_infection(self, make_player):
        updated = decay_conditions(make_player(conditions={PlayerStatus.WOUNDED_ARM}))
        assert updated.conditions == {PlayerStatus.INFECTED}

    def test_dead_player_stays_dead(self, make_player):
        player = add_status(make_player(), PlayerStatus.DEAD)
        assert decay_conditions(player).status == PlayerStatus.DEAD
