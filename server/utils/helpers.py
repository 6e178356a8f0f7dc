# server/utils/helpers.py
"""Utility functions and helpers."""

import math
import random
import time
from dataclasses import dataclass
from typing import Iterable, Tuple

from config.settings import (
    BULLET_SIZE,
    PLAYER_COLORS,
    ROOM_ID_ALPHABET,
    ROOM_ID_LENGTH,
    WORLD_HEIGHT,
    WORLD_WIDTH,
)


@dataclass
class Rect:
    """Axis-aligned box used for proposed positions."""

    x: float
    y: float
    width: float
    height: float


def now_ms() -> float:
    """Wall-clock time in milliseconds, comparable with client timestamps."""
    return time.time() * 1000


def calculate_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Calculate distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def box_size(entity) -> Tuple[float, float]:
    """Width and height of an entity; entities without a box count as bullets."""
    width = getattr(entity, "width", None) or BULLET_SIZE
    height = getattr(entity, "height", None) or BULLET_SIZE
    return width, height


def box_center(entity) -> Tuple[float, float]:
    width, height = box_size(entity)
    return entity.x + width / 2, entity.y + height / 2


def rects_overlap(a, b) -> bool:
    """Check if two axis-aligned boxes intersect (touching edges do not count)."""
    aw, ah = box_size(a)
    bw, bh = box_size(b)
    return a.x < b.x + bw and a.x + aw > b.x and a.y < b.y + bh and a.y + ah > b.y


def collides_with_obstacles(rect, obstacles: Iterable) -> bool:
    """Check a box against every obstacle that is still standing."""
    return any(obstacle.health > 0 and rects_overlap(rect, obstacle) for obstacle in obstacles)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_to_world(
    x: float, y: float, width: float, height: float
) -> Tuple[float, float]:
    """Clamp a box's top-left corner so the whole box stays in the world."""
    return (
        clamp(x, 0, WORLD_WIDTH - width),
        clamp(y, 0, WORLD_HEIGHT - height),
    )


def in_world(x: float, y: float) -> bool:
    return 0 < x < WORLD_WIDTH and 0 < y < WORLD_HEIGHT


def generate_room_id(rng=random) -> str:
    return "".join(rng.choice(ROOM_ID_ALPHABET) for _ in range(ROOM_ID_LENGTH))


def pick_player_color(rng=random) -> str:
    return rng.choice(PLAYER_COLORS)
