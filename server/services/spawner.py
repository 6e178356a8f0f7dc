# server/services/spawner.py
"""Timed and event-driven introduction of bots, zombies and the helicopter."""

import random
from typing import List

from loguru import logger

from config.settings import (
    BOT_SIZE,
    BOT_SPAWN_ATTEMPTS,
    HELICOPTER_MARGIN,
    HELICOPTER_SIZE,
    MIN_HORDE_SIZE,
    SUPER_ZOMBIE_BASE_HEALTH,
    SUPER_ZOMBIE_COLOR,
    SUPER_ZOMBIE_DAMAGE,
    SUPER_ZOMBIE_SIZE,
    SUPER_ZOMBIE_SPAWN_SCORE,
    WORLD_HEIGHT,
    WORLD_WIDTH,
    ZOMBIE_BASE_HEALTH,
    ZOMBIE_DAMAGE,
    ZOMBIE_SIZE,
    ZOMBIE_SPAWN_ATTEMPTS,
)
from models.entities import Bot, Helicopter, Zombie
from models.room import Room
from utils.helpers import Rect, clamp_to_world, collides_with_obstacles


class Spawner:
    """Creates new combatants and the extraction helicopter in a room."""

    def __init__(self, rng=None):
        self.rng = rng or random

    def spawn_bots(self, room: Room, count: int) -> List[Bot]:
        """Replace the room's bots with a fresh roster of up to ``count`` bots.

        A bot whose spawn keeps landing inside cover is skipped, so the
        roster can come out short on a very crowded map.
        """
        room.bots = []
        for _ in range(count):
            for _ in range(BOT_SPAWN_ATTEMPTS):
                x = 50 + self.rng.random() * (WORLD_WIDTH - 100)
                y = 50 + self.rng.random() * (WORLD_HEIGHT - 100)
                if not collides_with_obstacles(Rect(x, y, BOT_SIZE, BOT_SIZE), room.obstacles):
                    break
            else:
                continue

            room.bots.append(
                Bot(
                    id=room.next_id("bot"),
                    name=f"Soldier {len(room.bots) + 1}",
                    x=x,
                    y=y,
                    speed=2 + self.rng.random(),
                    wanderDirection={
                        "x": self.rng.random() - 0.5,
                        "y": self.rng.random() - 0.5,
                    },
                    wanderTimer=self.rng.random() * 2000,
                )
            )

        logger.debug(f"Room {room.id}: spawned {len(room.bots)}/{count} bots")
        return room.bots

    def _edge_position(self, size: float):
        side = self.rng.randint(0, 3)
        if side == 0:
            return self.rng.random() * (WORLD_WIDTH - size), 0
        if side == 1:
            return self.rng.random() * (WORLD_WIDTH - size), WORLD_HEIGHT - size
        if side == 2:
            return 0, self.rng.random() * (WORLD_HEIGHT - size)
        return WORLD_WIDTH - size, self.rng.random() * (WORLD_HEIGHT - size)

    def spawn_zombie_horde(self, room: Room, count: int) -> List[Zombie]:
        """Add up to ``count`` zombies along random world edges, clear of cover."""
        horde = []
        health = ZOMBIE_BASE_HEALTH * room.zombie_health_multiplier
        for _ in range(count):
            for _ in range(ZOMBIE_SPAWN_ATTEMPTS):
                x, y = self._edge_position(ZOMBIE_SIZE)
                if not collides_with_obstacles(Rect(x, y, ZOMBIE_SIZE, ZOMBIE_SIZE), room.obstacles):
                    break
            else:
                continue

            horde.append(
                Zombie(
                    id=room.next_id("zombie"),
                    x=x,
                    y=y,
                    speed=0.8 + self.rng.random() * 0.6,
                    health=health,
                    maxHealth=health,
                    color=f"hsl({int(self.rng.random() * 30 + 180)}, 70%, 40%)",
                    damage=ZOMBIE_DAMAGE,
                )
            )
        room.zombies.extend(horde)
        logger.debug(
            f"Room {room.id}: spawned {len(horde)}/{count} zombies "
            f"(multiplier {room.zombie_health_multiplier})"
        )
        return horde

    @staticmethod
    def horde_size(room: Room) -> int:
        return max(MIN_HORDE_SIZE, room.target_bot_count - len(room.bots))

    def spawn_super_zombie(self, room: Room, x: float, y: float) -> Zombie:
        """Raise a fallen bot as a super zombie and award the bonus score.

        The larger body is anchored on whichever corner of the bot keeps it
        clear of cover. When every anchor is blocked the zombie keeps the
        bot's own footprint.
        """
        size = SUPER_ZOMBIE_SIZE
        slack = SUPER_ZOMBIE_SIZE - BOT_SIZE
        for dx, dy in ((0, 0), (-slack, 0), (0, -slack), (-slack, -slack)):
            cx, cy = clamp_to_world(x + dx, y + dy, size, size)
            if not collides_with_obstacles(Rect(cx, cy, size, size), room.obstacles):
                x, y = cx, cy
                break
        else:
            size = BOT_SIZE
            x, y = clamp_to_world(x, y, size, size)

        health = SUPER_ZOMBIE_BASE_HEALTH * room.zombie_health_multiplier
        zombie = Zombie(
            id=room.next_id("zombie"),
            x=x,
            y=y,
            speed=1.5 + self.rng.random() * 0.5,
            health=health,
            maxHealth=health,
            color=SUPER_ZOMBIE_COLOR,
            damage=SUPER_ZOMBIE_DAMAGE,
            width=size,
            height=size,
            isSuper=True,
        )
        room.zombies.append(zombie)
        room.score += SUPER_ZOMBIE_SPAWN_SCORE
        logger.debug(f"Room {room.id}: super zombie spawned at ({x:.0f}, {y:.0f})")
        return zombie

    def spawn_helicopter(self, room: Room) -> Helicopter:
        far_x = WORLD_WIDTH - HELICOPTER_MARGIN - HELICOPTER_SIZE
        far_y = WORLD_HEIGHT - HELICOPTER_MARGIN - HELICOPTER_SIZE
        corners = [
            (HELICOPTER_MARGIN, HELICOPTER_MARGIN),
            (far_x, HELICOPTER_MARGIN),
            (HELICOPTER_MARGIN, far_y),
            (far_x, far_y),
        ]
        x, y = self.rng.choice(corners)
        room.helicopter = Helicopter(x=x, y=y)
        logger.info(f"Room {room.id}: helicopter arrived at ({x}, {y})")
        return room.helicopter
