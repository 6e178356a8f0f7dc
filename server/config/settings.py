# server/config/settings.py
"""Game configuration constants and settings."""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


# Server settings
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = _env_int("PORT", 3000)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# World settings
WORLD_WIDTH = _env_int("WORLD_WIDTH", 1600)
WORLD_HEIGHT = _env_int("WORLD_HEIGHT", 1200)

# Room settings
MAX_PLAYERS_PER_ROOM = _env_int("MAX_PLAYERS_PER_ROOM", 4)
MIN_PLAYERS_FOR_AUTO_START = 2
ROOM_ID_LENGTH = 6
ROOM_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ROOM_ID_MAX_ATTEMPTS = 100
DEFAULT_BOT_COUNT = 8
MAX_BOT_COUNT = 20
DIFFICULTY_MULTIPLIERS = {"easy": 1, "medium": 2, "hard": 3}

# Timing settings
TICK_INTERVAL_MS = _env_float("TICK_INTERVAL_MS", 1000 / 60)
AUTO_START_DELAY_S = _env_int("AUTO_START_DELAY_S", 10)
RESTART_DELAY_S = _env_float("RESTART_DELAY_S", 10.0)
INPUT_MIN_INTERVAL_MS = _env_float("INPUT_MIN_INTERVAL_MS", 16)

# Player settings
PLAYER_SIZE = 20
PLAYER_MAX_HEALTH = 100
PLAYER_SPEED = 4
PLAYER_COLORS = ["#ff6b6b", "#4ecdc4", "#45b7d1", "#f9ca24", "#f0932b", "#eb4d4b"]
SPAWN_MARGIN = 100

# Shooting settings
SHOOT_COOLDOWN_MS = _env_int("SHOOT_COOLDOWN_MS", 150)
SHOOT_STALENESS_MS = _env_int("SHOOT_STALENESS_MS", 100)
PLAYER_BULLET_SPEED = 10
PLAYER_BULLET_LIFE = 90
PLAYER_BULLET_DAMAGE = 15
BOT_BULLET_SPEED = 8
BOT_BULLET_LIFE = 60
BOT_BULLET_DAMAGE = 10
BULLET_SIZE = 4
BULLET_MAX_AGE_MS = _env_int("BULLET_MAX_AGE_MS", 1500)

# Bot settings
BOT_SIZE = 20
BOT_MAX_HEALTH = 100
BOT_COLOR = "#00cc00"
BOT_FIRE_COOLDOWN_MS = 1000
BOT_FIRE_RANGE = 200
BOT_MELEE_DAMAGE = 10
BOT_WANDER_INTERVAL_MS = 2000
BOT_ZONE_MARGIN = 50
BOT_SPAWN_ATTEMPTS = 50

# Zombie settings
ZOMBIE_SIZE = 15
ZOMBIE_BASE_HEALTH = 50
ZOMBIE_DAMAGE = 1
SUPER_ZOMBIE_SIZE = 30
SUPER_ZOMBIE_BASE_HEALTH = 200
SUPER_ZOMBIE_DAMAGE = 2
SUPER_ZOMBIE_COLOR = "#ff0000"
INITIAL_HORDE_SIZE = 5
MIN_HORDE_SIZE = 3
HORDE_INTERVAL_MS = _env_int("HORDE_INTERVAL_MS", 12000)
ZOMBIE_SPAWN_ATTEMPTS = 50

# Score settings
ZOMBIE_KILL_SCORE = 10
SUPER_ZOMBIE_SPAWN_SCORE = 5

# Terrain settings
OBSTACLE_COUNT = 40
OBSTACLE_MIN_SIZE = 20
OBSTACLE_MAX_EXTRA_SIZE = 60
OBSTACLE_HEALTH = 150
OBSTACLE_COLOR = "#8B4513"
BUNKER_COUNT = 4
BUNKER_SIZE = 80
BUNKER_COLOR = "#808080"
PLACEMENT_ATTEMPTS = 20

# Safe zone settings
ZONE_START_RADIUS = 600
ZONE_MIN_RADIUS = _env_int("ZONE_MIN_RADIUS", 100)
ZONE_SHRINK_STEP = 20
ZONE_SHRINK_INTERVAL_MS = _env_int("ZONE_SHRINK_INTERVAL_MS", 10000)
ZONE_DAMAGE_PER_SECOND = 2

# Particle settings
EXPLOSION_PARTICLES = 12
PARTICLE_LIFE = 30
PARTICLE_GRAVITY = 0.2
MAX_SNAPSHOT_PARTICLES = 50

# Helicopter settings
HELICOPTER_SIZE = 60
HELICOPTER_MARGIN = 50


def get_game_config():
    """Get the complete game configuration as a dictionary."""
    return {
        "worldWidth": WORLD_WIDTH,
        "worldHeight": WORLD_HEIGHT,
        "maxPlayersPerRoom": MAX_PLAYERS_PER_ROOM,
        "tickIntervalMs": TICK_INTERVAL_MS,
        "autoStartDelay": AUTO_START_DELAY_S,
        "restartDelay": RESTART_DELAY_S,
        "playerSize": PLAYER_SIZE,
        "playerSpeed": PLAYER_SPEED,
        "playerMaxHealth": PLAYER_MAX_HEALTH,
        "shootCooldownMs": SHOOT_COOLDOWN_MS,
        "shootStalenessMs": SHOOT_STALENESS_MS,
        "bulletMaxAgeMs": BULLET_MAX_AGE_MS,
        "maxBotCount": MAX_BOT_COUNT,
        "difficulties": list(DIFFICULTY_MULTIPLIERS),
        "hordeIntervalMs": HORDE_INTERVAL_MS,
        "zoneStartRadius": ZONE_START_RADIUS,
        "zoneMinRadius": ZONE_MIN_RADIUS,
        "zoneShrinkIntervalMs": ZONE_SHRINK_INTERVAL_MS,
        "zoneDamagePerSecond": ZONE_DAMAGE_PER_SECOND,
        "helicopterSize": HELICOPTER_SIZE,
    }
