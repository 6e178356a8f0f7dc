# server/models/entities.py
"""Game entity models and data classes."""

from dataclasses import dataclass, field
from typing import Dict

from config.settings import (
    BOT_COLOR,
    BOT_MAX_HEALTH,
    BOT_SIZE,
    BULLET_SIZE,
    BUNKER_COLOR,
    BUNKER_SIZE,
    HELICOPTER_SIZE,
    OBSTACLE_COLOR,
    OBSTACLE_HEALTH,
    PLAYER_MAX_HEALTH,
    PLAYER_SIZE,
    PLAYER_SPEED,
    WORLD_HEIGHT,
    WORLD_WIDTH,
    ZONE_DAMAGE_PER_SECOND,
    ZONE_START_RADIUS,
    ZOMBIE_DAMAGE,
    ZOMBIE_SIZE,
)


@dataclass
class Player:
    """Represents a human-controlled player in a room."""

    id: str
    name: str
    x: float
    y: float
    color: str
    width: float = PLAYER_SIZE
    height: float = PLAYER_SIZE
    health: float = PLAYER_MAX_HEALTH
    maxHealth: float = PLAYER_MAX_HEALTH
    speed: float = PLAYER_SPEED
    alive: bool = True
    lastShot: float = 0
    lastInputTime: float = 0


@dataclass
class Bot:
    """Represents a server-driven ally soldier."""

    id: str
    name: str
    x: float
    y: float
    speed: float
    wanderDirection: Dict[str, float] = field(
        default_factory=lambda: {"x": 0.0, "y": 0.0}
    )
    wanderTimer: float = 0
    width: float = BOT_SIZE
    height: float = BOT_SIZE
    health: float = BOT_MAX_HEALTH
    maxHealth: float = BOT_MAX_HEALTH
    color: str = BOT_COLOR
    alive: bool = True
    lastShot: float = 0


@dataclass
class Zombie:
    """Represents a hostile zombie; super zombies are bigger and hit harder."""

    id: str
    x: float
    y: float
    speed: float
    health: float
    maxHealth: float
    color: str
    damage: float = ZOMBIE_DAMAGE
    width: float = ZOMBIE_SIZE
    height: float = ZOMBIE_SIZE
    isSuper: bool = False


@dataclass
class Bullet:
    """Represents a projectile fired by a player or a bot."""

    id: str
    x: float
    y: float
    vx: float
    vy: float
    life: int
    damage: float
    ownerId: str
    createdAt: float
    width: float = BULLET_SIZE
    height: float = BULLET_SIZE


@dataclass
class Particle:
    """Cosmetic explosion debris."""

    x: float
    y: float
    vx: float
    vy: float
    life: int
    size: float
    color: str


@dataclass
class Obstacle:
    """Destructible cover that blocks movement and bullets while standing."""

    id: str
    x: float
    y: float
    width: float
    height: float
    health: float = OBSTACLE_HEALTH
    maxHealth: float = OBSTACLE_HEALTH
    color: str = OBSTACLE_COLOR


@dataclass
class Bunker:
    """Decorative structure with no gameplay effect."""

    id: str
    x: float
    y: float
    width: float = BUNKER_SIZE
    height: float = BUNKER_SIZE
    color: str = BUNKER_COLOR


@dataclass
class SafeZone:
    """Shrinking circle; anyone outside takes damage over time."""

    x: float = WORLD_WIDTH / 2
    y: float = WORLD_HEIGHT / 2
    radius: float = ZONE_START_RADIUS
    damage: float = ZONE_DAMAGE_PER_SECOND


@dataclass
class Helicopter:
    """Extraction point; the first survivor to touch it wins."""

    x: float
    y: float
    width: float = HELICOPTER_SIZE
    height: float = HELICOPTER_SIZE
