"""Game configuration constants and settings."""

import os

from dotenv import load_dotenv

load_dotenv()

TIMEZONE = os.getenv("TIMEZONE", "America/Los_Angeles")

DATABASE_PATH = os.getenv("DATABASE_PATH", "horde_night.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
WORLD_STATE_KEY = "game_state"

# Daily phase boundaries, HH:MM in the game timezone
GAME_START_TIME = os.getenv("GAME_START_TIME", "21:00")
HORDE_START_TIME = os.getenv("HORDE_START_TIME", "20:00")

INITIAL_HORDE_SIZE = int(os.getenv("INITIAL_HORDE_SIZE", "10"))
HORDE_SCALING_FACTOR = float(os.getenv("HORDE_SCALING_FACTOR", "1.2"))
HORDE_SCALING_RANDOMNESS = float(os.getenv("HORDE_SCALING_RANDOMNESS", "0.3"))

# Horde combat
HIT_CHANCE = 0.5
INFECTION_DEATH_CHANCE = 0.5

# World map
GRID_SIZE = 13
CENTER_X = 6
CENTER_Y = 6
MAX_POI_PLACEMENT_ATTEMPTS = 100

# Contested zones
CONTEST_SWEEP_MINUTES = 5
TEMP_UNCONTESTED_MINUTES = 30

# Player defaults
DEFAULT_HEALTH = 100
DEFAULT_ACTION_POINTS = 10

DEFAULT_SETTLEMENT_NAME = "Sanctuary"

# Channel configuration
HORDE_CHANNEL_ID = int(os.getenv("HORDE_CHANNEL_ID", "0"))  # 0 = no report channel
