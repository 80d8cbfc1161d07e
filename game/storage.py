"""Database storage layer for Horde Night."""

import json
from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

import aiosqlite

from .config import DATABASE_PATH, DEFAULT_ACTION_POINTS, DEFAULT_HEALTH, DEFAULT_SETTLEMENT_NAME
from .models import (Building, BuildingType, GamePhase, Player, PlayerStatus, Position,
                     Settlement, Zone, ZombieGroup, ZoneContest, ZoneStatus)
from .status import add_status, parse_status, remove_status


def _utc_iso(moment: datetime) -> str:
    # Stored in UTC so string comparison in SQL orders correctly.
    return moment.astimezone(timezone.utc).isoformat()


class GameStorage:
    """Handles all database operations for the game."""

    def __init__(self, db_path: str = DATABASE_PATH):
        self.db_path = db_path

    async def initialize(self):
        """Initialize the database with required tables."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(f"""
                CREATE TABLE IF NOT EXISTS players (
                    player_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    health INTEGER NOT NULL DEFAULT {DEFAULT_HEALTH},
                    max_health INTEGER NOT NULL DEFAULT {DEFAULT_HEALTH},
                    status TEXT NOT NULL DEFAULT 'alive',
                    conditions TEXT NOT NULL DEFAULT '[]',
                    action_points INTEGER NOT NULL DEFAULT {DEFAULT_ACTION_POINTS},
                    max_action_points INTEGER NOT NULL DEFAULT {DEFAULT_ACTION_POINTS},
                    is_alive INTEGER NOT NULL DEFAULT 1,
                    zone TEXT NOT NULL DEFAULT 'city',
                    x INTEGER,
                    y INTEGER
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS settlements (
                    settlement_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    defense_level INTEGER NOT NULL DEFAULT 0,
                    population INTEGER NOT NULL DEFAULT 0,
                    day INTEGER NOT NULL DEFAULT 1,
                    game_phase TEXT NOT NULL DEFAULT 'play_mode',
                    gate_open INTEGER NOT NULL DEFAULT 1
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS buildings (
                    building_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    settlement_id INTEGER NOT NULL REFERENCES settlements(settlement_id) ON DELETE CASCADE,
                    type TEXT NOT NULL,
                    level INTEGER NOT NULL DEFAULT 1,
                    defense INTEGER NOT NULL DEFAULT 0
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS explored_tiles (
                    x INTEGER NOT NULL,
                    y INTEGER NOT NULL,
                    PRIMARY KEY(x, y)
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS zombies (
                    x INTEGER NOT NULL,
                    y INTEGER NOT NULL,
                    count INTEGER NOT NULL,
                    PRIMARY KEY(x, y)
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS zone_contests (
                    x INTEGER NOT NULL,
                    y INTEGER NOT NULL,
                    status TEXT NOT NULL,
                    human_cp INTEGER NOT NULL DEFAULT 0,
                    zombie_cp INTEGER NOT NULL DEFAULT 0,
                    temp_uncontested_until TEXT,
                    PRIMARY KEY(x, y)
                )
            """)

            await db.commit()

    # --- Players ---

    @staticmethod
    def _row_to_player(row) -> Player:
        return Player(
            player_id=row["player_id"],
            name=row["name"],
            health=row["health"],
            max_health=row["max_health"],
            status=parse_status(row["status"]),
            conditions={parse_status(c) for c in json.loads(row["conditions"])},
            action_points=row["action_points"],
            max_action_points=row["max_action_points"],
            is_alive=bool(row["is_alive"]),
            position=Position(Zone(row["zone"]), row["x"], row["y"]),
        )

    async def _fetch_players(self, query: str, params: tuple = ()) -> List[Player]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(query, params) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_player(row) for row in rows]

    async def _save_vitals(self, player: Player):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                UPDATE players
                SET health = ?, status = ?, conditions = ?, is_alive = ?
                WHERE player_id = ?
            """, (
                player.health,
                player.status.value,
                json.dumps(sorted(c.value for c in player.conditions)),
                int(player.is_alive),
                player.player_id,
            ))
            await db.commit()

    async def create_player(self, player_id: str, name: str) -> Player:
        """Create a new player in the city."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("INSERT INTO players (player_id, name) VALUES (?, ?)", (player_id, name))
            await db.commit()
        return await self.get_player(player_id)

    async def get_player(self, player_id: str) -> Optional[Player]:
        """Get a player by ID."""
        players = await self._fetch_players("SELECT * FROM players WHERE player_id = ?", (player_id,))
        return players[0] if players else None

    async def get_alive_players(self) -> List[Player]:
        return await self._fetch_players("SELECT * FROM players WHERE is_alive = 1")

    async def get_players_by_zone(self, zone: Zone) -> List[Player]:
        """Get living players in a coarse zone."""
        return await self._fetch_players(
            "SELECT * FROM players WHERE zone = ? AND is_alive = 1", (Zone(zone).value,)
        )

    async def get_players_at(self, x: int, y: int) -> List[Player]:
        """Get living players standing on a grid cell."""
        return await self._fetch_players(
            "SELECT * FROM players WHERE x = ? AND y = ? AND is_alive = 1", (x, y)
        )

    async def update_status(self, player_id: str, status) -> bool:
        """Set a player's vital status (or add a condition)."""
        player = await self.get_player(player_id)
        if not player:
            return False
        await self._save_vitals(add_status(player, status))
        return True

    async def add_condition(self, player_id: str, condition) -> bool:
        return await self.update_status(player_id, condition)

    async def remove_condition(self, player_id: str, condition) -> bool:
        """Remove a status; absent statuses are a silent success."""
        player = await self.get_player(player_id)
        if not player:
            return False
        updated = remove_status(player, condition)
        if updated is not player:
            await self._save_vitals(updated)
        return True

    async def save_vitals(self, player: Player):
        """Write status, conditions, health and life flag in one update."""
        await self._save_vitals(player)

    async def update_position(self, player_id: str, position: Position) -> bool:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE players SET zone = ?, x = ?, y = ? WHERE player_id = ?",
                (position.zone.value, position.x, position.y, player_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def spend_action_points(self, player_id: str, points: int) -> bool:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("""
                UPDATE players SET action_points = action_points - ?
                WHERE player_id = ? AND action_points >= ?
            """, (points, player_id, points))
            await db.commit()
            return cursor.rowcount > 0

    async def reset_action_points(self, player_id: str) -> bool:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE players SET action_points = max_action_points WHERE player_id = ?", (player_id,)
            )
            await db.commit()
            return cursor.rowcount > 0

    async def reset_daily_action_points(self) -> int:
        """Refill action points of living players. Dead players stay dead."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE players SET action_points = max_action_points WHERE is_alive = 1"
            )
            await db.commit()
            return cursor.rowcount

    async def revive_player(self, player_id: str) -> bool:
        """Bring a player back to life in the city."""
        player = await self.get_player(player_id)
        if not player:
            return False
        await self._save_vitals(remove_status(player, PlayerStatus.DEAD))
        await self.update_position(player_id, Position(Zone.CITY))
        return True

    async def reset_all_players(self):
        """Reset every player to alive, full health and AP, at home in the city."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                UPDATE players
                SET health = max_health,
                    action_points = max_action_points,
                    status = 'alive',
                    conditions = '[]',
                    is_alive = 1,
                    zone = 'city',
                    x = NULL,
                    y = NULL
            """)
            await db.commit()

    # --- Settlements ---

    @staticmethod
    def _row_to_settlement(row) -> Settlement:
        return Settlement(
            settlement_id=row["settlement_id"],
            name=row["name"],
            defense_level=row["defense_level"],
            population=row["population"],
            day=row["day"],
            game_phase=GamePhase(row["game_phase"]),
            gate_open=bool(row["gate_open"]),
        )

    async def get_settlement(self, settlement_id: int) -> Optional[Settlement]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM settlements WHERE settlement_id = ?", (settlement_id,)) as cursor:
                row = await cursor.fetchone()
        if not row:
            return None
        settlement = self._row_to_settlement(row)
        settlement.buildings = await self.get_buildings(settlement_id)
        return settlement

    async def get_default_settlement(self) -> Settlement:
        """Get the first settlement, creating it if none exists."""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT settlement_id FROM settlements ORDER BY settlement_id LIMIT 1") as cursor:
                row = await cursor.fetchone()
            if row:
                settlement_id = row[0]
            else:
                cursor = await db.execute("INSERT INTO settlements (name) VALUES (?)", (DEFAULT_SETTLEMENT_NAME,))
                await db.commit()
                settlement_id = cursor.lastrowid
        return await self.get_settlement(settlement_id)

    async def update_game_phase(self, settlement_id: int, phase: GamePhase):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE settlements SET game_phase = ? WHERE settlement_id = ?",
                (GamePhase(phase).value, settlement_id),
            )
            await db.commit()

    async def advance_day(self, settlement_id: int):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("UPDATE settlements SET day = day + 1 WHERE settlement_id = ?", (settlement_id,))
            await db.commit()

    async def update_defense_total(self, settlement_id: int, defense_level: int):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE settlements SET defense_level = ? WHERE settlement_id = ?",
                (defense_level, settlement_id),
            )
            await db.commit()

    async def update_population(self, settlement_id: int) -> int:
        """Recount living players into the settlement population."""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT COUNT(*) FROM players WHERE is_alive = 1") as cursor:
                population = (await cursor.fetchone())[0]
            await db.execute(
                "UPDATE settlements SET population = ? WHERE settlement_id = ?",
                (population, settlement_id),
            )
            await db.commit()
        return population

    async def reset_settlement(self, settlement_id: int):
        """Back to day 1, play mode, no defenses, no buildings."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                UPDATE settlements
                SET day = 1, game_phase = 'play_mode', defense_level = 0, gate_open = 1
                WHERE settlement_id = ?
            """, (settlement_id,))
            await db.execute("DELETE FROM buildings WHERE settlement_id = ?", (settlement_id,))
            await db.commit()

    async def get_buildings(self, settlement_id: int) -> List[Building]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM buildings WHERE settlement_id = ?", (settlement_id,)) as cursor:
                rows = await cursor.fetchall()
        return [
            Building(
                building_id=row["building_id"],
                building_type=BuildingType(row["type"]),
                level=row["level"],
                defense=row["defense"],
            )
            for row in rows
        ]

    async def add_building(self, settlement_id: int, building_type: BuildingType, defense: int = 0) -> Building:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO buildings (settlement_id, type, defense) VALUES (?, ?, ?)",
                (settlement_id, BuildingType(building_type).value, defense),
            )
            await db.commit()
            return Building(cursor.lastrowid, BuildingType(building_type), 1, defense)

    # --- Explored tiles ---

    async def load_explored_tiles(self) -> Set[Tuple[int, int]]:
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT x, y FROM explored_tiles") as cursor:
                rows = await cursor.fetchall()
                return {(x, y) for x, y in rows}

    async def insert_explored_tile(self, x: int, y: int):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("INSERT OR IGNORE INTO explored_tiles (x, y) VALUES (?, ?)", (x, y))
            await db.commit()

    async def clear_explored_tiles(self):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM explored_tiles")
            await db.commit()

    # --- Hostile presence ---

    async def get_zombies_at(self, x: int, y: int) -> Optional[ZombieGroup]:
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT x, y, count FROM zombies WHERE x = ? AND y = ?", (x, y)) as cursor:
                row = await cursor.fetchone()
                return ZombieGroup(*row) if row else None

    async def get_all_zombies(self) -> List[ZombieGroup]:
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT x, y, count FROM zombies WHERE count > 0") as cursor:
                rows = await cursor.fetchall()
                return [ZombieGroup(*row) for row in rows]

    async def set_zombies_at(self, x: int, y: int, count: int):
        """Store the zombie count on a cell; zero or less removes the group."""
        async with aiosqlite.connect(self.db_path) as db:
            if count <= 0:
                await db.execute("DELETE FROM zombies WHERE x = ? AND y = ?", (x, y))
            else:
                await db.execute(
                    "INSERT OR REPLACE INTO zombies (x, y, count) VALUES (?, ?, ?)", (x, y, count)
                )
            await db.commit()

    async def clear_zombies(self):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM zombies")
            await db.commit()

    # --- Zone contests ---

    async def get_zone_contest(self, x: int, y: int) -> Optional[ZoneContest]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM zone_contests WHERE x = ? AND y = ?", (x, y)) as cursor:
                row = await cursor.fetchone()
        if not row:
            return None
        until = row["temp_uncontested_until"]
        return ZoneContest(
            x=row["x"],
            y=row["y"],
            status=ZoneStatus(row["status"]),
            human_cp=row["human_cp"],
            zombie_cp=row["zombie_cp"],
            temp_uncontested_until=datetime.fromisoformat(until) if until else None,
        )

    async def save_zone_contest(self, contest: ZoneContest):
        until = _utc_iso(contest.temp_uncontested_until) if contest.temp_uncontested_until else None
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                INSERT OR REPLACE INTO zone_contests (x, y, status, human_cp, zombie_cp, temp_uncontested_until)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (contest.x, contest.y, contest.status.value, contest.human_cp, contest.zombie_cp, until))
            await db.commit()

    async def expire_temporary_zones(self, at: datetime) -> int:
        """Flip temporarily uncontested zones whose timer ran out to contested."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("""
                UPDATE zone_contests
                SET status = ?, temp_uncontested_until = NULL
                WHERE status = ? AND temp_uncontested_until <= ?
            """, (ZoneStatus.CONTESTED.value, ZoneStatus.TEMPORARILY_UNCONTESTED.value, _utc_iso(at)))
            await db.commit()
            return cursor.rowcount

    async def clear_zone_contests(self):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM zone_contests")
            await db.commit()
