"""Horde attack resolution.

Turns horde size against settlement defense into per-player outcomes. This
module does no I/O and never suspends; the random source is injected so a
seeded ``random.Random`` reproduces a night exactly.
"""

import random
from collections import Counter
from typing import List, Sequence

from .config import HIT_CHANCE, INFECTION_DEATH_CHANCE
from .errors import ResolutionInvariantError
from .models import HordeAttackReport, Player, PlayerAttackOutcome, PlayerStatus
from .status import WOUNDS, is_hurt, is_vital_status


def breach_size(horde_size: int, defense_total: int) -> int:
    """Number of attackers that get past the defenses."""
    return max(0, horde_size - defense_total)


def _check_vitality(player: Player):
    if not is_vital_status(player.status):
        raise ResolutionInvariantError(
            f"Player {player.player_id} has non-vital status {player.status.value!r} in the status slot"
        )
    if not player.is_alive or player.status == PlayerStatus.DEAD:
        raise ResolutionInvariantError(f"Player {player.player_id} is dead but was passed in as a living combatant")


def _kill_outside(players: Sequence[Player]) -> List[PlayerAttackOutcome]:
    # Being caught outside during an attack is always fatal.
    return [
        PlayerAttackOutcome(
            player_id=p.player_id,
            name=p.name,
            status_before=p.status,
            status_after=PlayerStatus.DEAD,
            killed=True,
        )
        for p in players
    ]


def _attack_player(player: Player, attempts: int, rng: random.Random,
                   hit_chance: float, infection_death_chance: float) -> PlayerAttackOutcome:
    outcome = PlayerAttackOutcome(
        player_id=player.player_id,
        name=player.name,
        status_before=player.status,
        status_after=player.status,
        attacks_received=attempts,
    )

    if PlayerStatus.INFECTED in player.conditions and rng.random() < infection_death_chance:
        outcome.status_after = PlayerStatus.DEAD
        outcome.killed = True
        outcome.killed_by_infection = True
        return outcome

    wounded = is_hurt(player)
    for _ in range(attempts):
        if rng.random() >= hit_chance:
            continue
        outcome.hits += 1
        if wounded:
            outcome.status_after = PlayerStatus.DEAD
            outcome.killed = True
            break
        outcome.status_after = rng.choice(WOUNDS)
        wounded = True

    return outcome


def resolve_horde_attack(day: int, horde_size: int, defense_total: int,
                         outside: Sequence[Player], inside: Sequence[Player],
                         rng: random.Random,
                         hit_chance: float = HIT_CHANCE,
                         infection_death_chance: float = INFECTION_DEATH_CHANCE) -> HordeAttackReport:
    """Resolve one night's attack.

    Args:
        day: Day number the attack belongs to.
        horde_size: Attacker count.
        defense_total: Sum of settlement defense.
        outside: Living players outside the safe zones.
        inside: Living players inside the safe zones.
        rng: Random source used for every roll.

    Returns:
        The attack report. Inputs are not modified.

    Raises:
        ResolutionInvariantError: A player's status slot holds a condition, or a
            dead player is in the roster.
    """
    for player in list(outside) + list(inside):
        _check_vitality(player)

    breach = breach_size(horde_size, defense_total)
    report = HordeAttackReport(
        day=day,
        horde_size=horde_size,
        defense_total=defense_total,
        breached=breach > 0,
        breach_size=breach,
        outside_outcomes=_kill_outside(outside),
    )

    if breach == 0 or not inside:
        return report

    targets = Counter(rng.randrange(len(inside)) for _ in range(breach))
    for index in sorted(targets):
        report.inside_outcomes.append(
            _attack_player(inside[index], targets[index], rng, hit_chance, infection_death_chance)
        )

    return report
