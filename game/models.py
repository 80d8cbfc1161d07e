"""Data models for the Horde Night game."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class PlayerStatus(str, Enum):
    """Every status tag a player can carry, vital or condition."""
    # Vital statuses
    ALIVE = "alive"
    DEAD = "dead"

    # Wounds (vital, may also be stored among conditions)
    WOUNDED_ARM = "wounded_arm"
    WOUNDED_EYE = "wounded_eye"
    WOUNDED_FOOT = "wounded_foot"
    WOUNDED_HAND = "wounded_hand"
    WOUNDED_HEAD = "wounded_head"
    WOUNDED_LEG = "wounded_leg"

    # Temporary conditions
    REFRESHED = "refreshed"
    FED = "fed"
    THIRSTY = "thirsty"
    DEHYDRATED = "dehydrated"
    EXHAUSTED = "exhausted"
    HEALED = "healed"
    INFECTED = "infected"
    SCAVENGING = "scavenging"


class GamePhase(str, Enum):
    PLAY_MODE = "play_mode"
    HORDE_MODE = "horde_mode"


class Zone(str, Enum):
    """Coarse location tag. Points of interest are zones too."""
    CITY = "city"
    HOME = "home"
    GATE = "gate"
    WASTE = "waste"
    GREATER_WASTE = "greater_waste"

    ABANDONED_BUNKER = "abandoned_bunker"
    ABANDONED_HOSPITAL = "abandoned_hospital"
    ABANDONED_WELL = "abandoned_well"
    ARMY_OUTPOST = "army_outpost"
    CAVE = "cave"
    DISUSED_WAREHOUSE = "disused_warehouse"
    LOOTED_SUPERMARKET = "looted_supermarket"
    MOTORWAY_SERVICES = "motorway_services"
    OLD_POLICE_STATION = "old_police_station"
    PLANE_CRASH_SITE = "plane_crash_site"
    TOWN_LIBRARY = "town_library"
    WATER_PROCESSING_PLANT = "water_processing_plant"


SAFE_ZONES = frozenset({Zone.CITY, Zone.HOME})

POI_ZONES = (
    Zone.ABANDONED_BUNKER,
    Zone.ABANDONED_HOSPITAL,
    Zone.ABANDONED_WELL,
    Zone.ARMY_OUTPOST,
    Zone.CAVE,
    Zone.DISUSED_WAREHOUSE,
    Zone.LOOTED_SUPERMARKET,
    Zone.MOTORWAY_SERVICES,
    Zone.OLD_POLICE_STATION,
    Zone.PLANE_CRASH_SITE,
    Zone.TOWN_LIBRARY,
    Zone.WATER_PROCESSING_PLANT,
)


class TileState(str, Enum):
    HIDDEN = "hidden"
    EXPLORED = "explored"
    TOWN = "town"
    POI = "poi"


class Direction(str, Enum):
    NORTH = "north"
    NORTHEAST = "northeast"
    EAST = "east"
    SOUTHEAST = "southeast"
    SOUTH = "south"
    SOUTHWEST = "southwest"
    WEST = "west"
    NORTHWEST = "northwest"


class ZoneStatus(str, Enum):
    UNCONTESTED = "uncontested"
    CONTESTED = "contested"
    TEMPORARILY_UNCONTESTED = "temporarily_uncontested"


class BuildingType(str, Enum):
    WATCHTOWER = "watchtower"
    WALL = "wall"
    WORKSHOP = "workshop"
    WELL = "well"
    HOSPITAL = "hospital"


@dataclass(frozen=True)
class Position:
    """Where a player is: always a coarse zone, optionally a grid cell.

    Horde resolution reads ``zone``; exploration reads ``x``/``y``.
    """
    zone: Zone
    x: Optional[int] = None
    y: Optional[int] = None

    @property
    def is_safe(self) -> bool:
        return self.zone in SAFE_ZONES

    @property
    def has_coordinates(self) -> bool:
        return self.x is not None and self.y is not None


@dataclass
class Player:
    """Represents a player in the game."""
    player_id: str
    name: str
    health: int
    max_health: int
    status: PlayerStatus
    conditions: Set[PlayerStatus]
    action_points: int
    max_action_points: int
    is_alive: bool
    position: Position


@dataclass
class Building:
    """A settlement building and the defense it contributes."""
    building_id: int
    building_type: BuildingType
    level: int
    defense: int


@dataclass
class Settlement:
    """The town the players defend."""
    settlement_id: int
    name: str
    defense_level: int
    population: int
    day: int
    game_phase: GamePhase
    gate_open: bool
    buildings: List[Building] = field(default_factory=list)

    @property
    def defense_total(self) -> int:
        return self.defense_level + sum(b.defense for b in self.buildings)


@dataclass
class WorldState:
    """The shared world record mutated by phase transitions."""
    settlement_id: int
    current_day: int
    current_phase: GamePhase
    next_phase_change: datetime
    horde_size: int
    last_horde_attack: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "settlementId": self.settlement_id,
            "currentDay": self.current_day,
            "currentPhase": self.current_phase.value,
            "nextPhaseChange": self.next_phase_change.isoformat(),
            "hordeSize": self.horde_size,
            "lastHordeAttack": self.last_horde_attack.isoformat() if self.last_horde_attack else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorldState":
        last_attack = data.get("lastHordeAttack")
        return cls(
            settlement_id=int(data["settlementId"]),
            current_day=int(data["currentDay"]),
            current_phase=GamePhase(data["currentPhase"]),
            next_phase_change=datetime.fromisoformat(data["nextPhaseChange"]),
            horde_size=int(data["hordeSize"]),
            last_horde_attack=datetime.fromisoformat(last_attack) if last_attack else None,
        )


@dataclass
class PlayerAttackOutcome:
    """What the horde did to one player."""
    player_id: str
    name: str
    status_before: PlayerStatus
    status_after: PlayerStatus
    attacks_received: int = 0
    hits: int = 0
    killed: bool = False
    killed_by_infection: bool = False

    @property
    def changed(self) -> bool:
        return self.status_before != self.status_after


@dataclass
class HordeAttackReport:
    """Result of one horde resolution cycle. Built, reported, discarded."""
    day: int
    horde_size: int
    defense_total: int
    breached: bool
    breach_size: int
    outside_outcomes: List[PlayerAttackOutcome] = field(default_factory=list)
    inside_outcomes: List[PlayerAttackOutcome] = field(default_factory=list)

    @property
    def total_attacks(self) -> int:
        return sum(o.attacks_received for o in self.inside_outcomes)

    @property
    def casualties(self) -> List[PlayerAttackOutcome]:
        return [o for o in self.outside_outcomes + self.inside_outcomes if o.killed]

    @property
    def wounded(self) -> List[PlayerAttackOutcome]:
        return [o for o in self.inside_outcomes if o.changed and not o.killed]


@dataclass
class ZombieGroup:
    x: int
    y: int
    count: int


@dataclass
class ZoneContest:
    """Control state of one grid cell."""
    x: int
    y: int
    status: ZoneStatus
    human_cp: int
    zombie_cp: int
    temp_uncontested_until: Optional[datetime] = None
