"""Vital status and condition rules.

Every ``PlayerStatus`` belongs to exactly one category: a vital status
(mutually exclusive life state, wounds included) or a temporary condition
(stackable). Wounds are vital but may also be folded into a player's
conditions after being claimed, so "is this player hurt" checks both places.

All functions here are pure: they return updated copies and never touch I/O.
"""

from dataclasses import replace
from typing import Dict, Optional, Set

from .errors import UnknownStatusError
from .models import Player, PlayerStatus

VITAL = "vital"
CONDITION = "condition"

_CATEGORY: Dict[PlayerStatus, str] = {
    PlayerStatus.ALIVE: VITAL,
    PlayerStatus.DEAD: VITAL,
    PlayerStatus.WOUNDED_ARM: VITAL,
    PlayerStatus.WOUNDED_EYE: VITAL,
    PlayerStatus.WOUNDED_FOOT: VITAL,
    PlayerStatus.WOUNDED_HAND: VITAL,
    PlayerStatus.WOUNDED_HEAD: VITAL,
    PlayerStatus.WOUNDED_LEG: VITAL,
    PlayerStatus.REFRESHED: CONDITION,
    PlayerStatus.FED: CONDITION,
    PlayerStatus.THIRSTY: CONDITION,
    PlayerStatus.DEHYDRATED: CONDITION,
    PlayerStatus.EXHAUSTED: CONDITION,
    PlayerStatus.HEALED: CONDITION,
    PlayerStatus.INFECTED: CONDITION,
    PlayerStatus.SCAVENGING: CONDITION,
}

WOUNDS = (
    PlayerStatus.WOUNDED_ARM,
    PlayerStatus.WOUNDED_EYE,
    PlayerStatus.WOUNDED_FOOT,
    PlayerStatus.WOUNDED_HAND,
    PlayerStatus.WOUNDED_HEAD,
    PlayerStatus.WOUNDED_LEG,
)

# Day-boundary decay. A condition mapped to None is cleared; one missing from
# the table persists unchanged.
DECAY_TABLE: Dict[PlayerStatus, Optional[PlayerStatus]] = {
    PlayerStatus.THIRSTY: PlayerStatus.DEHYDRATED,
    PlayerStatus.REFRESHED: None,
    PlayerStatus.FED: None,
    PlayerStatus.HEALED: None,
    PlayerStatus.EXHAUSTED: None,
}


def parse_status(value) -> PlayerStatus:
    """Turn a raw tag into a PlayerStatus, failing fast on unknown tags."""
    if isinstance(value, PlayerStatus):
        return value
    try:
        return PlayerStatus(value)
    except ValueError:
        raise UnknownStatusError(value) from None


def is_vital_status(status: PlayerStatus) -> bool:
    return _CATEGORY[parse_status(status)] == VITAL


def is_temporary_condition(status: PlayerStatus) -> bool:
    return _CATEGORY[parse_status(status)] == CONDITION


def is_wound(status: PlayerStatus) -> bool:
    return parse_status(status) in WOUNDS


def is_hurt(player: Player) -> bool:
    """True if the player carries a wound in the status slot or the conditions."""
    return is_wound(player.status) or any(is_wound(c) for c in player.conditions)


def derive_vital_status(player: Player) -> PlayerStatus:
    """Vital status as the player's own health dictates."""
    if not player.is_alive or player.health <= 0:
        return PlayerStatus.DEAD
    if is_wound(player.status):
        return player.status
    return PlayerStatus.ALIVE


def add_status(player: Player, status) -> Player:
    """Apply a status. Vital statuses replace the slot; conditions stack."""
    status = parse_status(status)

    if is_temporary_condition(status):
        if status in player.conditions:
            return player
        return replace(player, conditions=player.conditions | {status})

    if player.status == status:
        return player

    if status == PlayerStatus.DEAD:
        return replace(player, status=status, is_alive=False, health=0)
    return replace(player, status=status)


def remove_status(player: Player, status) -> Player:
    """Remove a status, keeping vital status and conditions independent."""
    status = parse_status(status)

    if is_wound(status):
        if player.status != status and status not in player.conditions:
            return player
        new_status = player.status
        if player.status == status:
            new_status = PlayerStatus.ALIVE if player.is_alive else PlayerStatus.DEAD
        return replace(player, status=new_status, conditions=player.conditions - {status})

    if status == PlayerStatus.DEAD:
        if player.status != PlayerStatus.DEAD and player.is_alive:
            return player
        return replace(
            player,
            status=PlayerStatus.ALIVE,
            is_alive=True,
            health=player.max_health,
        )

    if status == PlayerStatus.ALIVE:
        # The baseline cannot be removed, only replaced.
        return player

    if status not in player.conditions:
        return player
    updated = replace(player, conditions=player.conditions - {status})
    return replace(updated, status=derive_vital_status(updated))


def decay_conditions(player: Player) -> Player:
    """Advance every condition one step along the decay table.

    Wounds, wherever stored, turn into a persistent infection.
    """
    conditions: Set[PlayerStatus] = set()
    infected = False
    for condition in player.conditions:
        if is_wound(condition):
            infected = True
        elif condition in DECAY_TABLE:
            successor = DECAY_TABLE[condition]
            if successor is not None:
                conditions.add(successor)
        else:
            conditions.add(condition)

    status = player.status
    if is_wound(status):
        infected = True
        status = PlayerStatus.ALIVE
    if infected:
        conditions.add(PlayerStatus.INFECTED)

    return replace(player, status=status, conditions=conditions)
