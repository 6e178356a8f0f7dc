# server/services/ai_service.py
"""Bot and zombie behaviour."""

import math
import random
from typing import Optional, Union

from config.settings import (
    BOT_FIRE_RANGE,
    BOT_WANDER_INTERVAL_MS,
    BOT_ZONE_MARGIN,
    TICK_INTERVAL_MS,
)
from models.entities import Bot, Player, Zombie
from models.room import Room
from utils.helpers import Rect, calculate_distance, clamp_to_world, collides_with_obstacles


def try_move(entity, new_x: float, new_y: float, obstacles) -> bool:
    """Move an entity unless the new box overlaps standing cover, then clamp.

    Returns whether the proposed position was accepted.
    """
    accepted = not collides_with_obstacles(
        Rect(new_x, new_y, entity.width, entity.height), obstacles
    )
    if accepted:
        entity.x = new_x
        entity.y = new_y
    entity.x, entity.y = clamp_to_world(entity.x, entity.y, entity.width, entity.height)
    return accepted


class AIService:
    """Per-tick decisions for server-driven entities."""

    def __init__(self, rng=None):
        self.rng = rng or random

    def move_bot(self, room: Room, bot: Bot):
        """Head back into the safe zone if far outside it, otherwise wander."""
        bot.wanderTimer += TICK_INTERVAL_MS
        zone = room.safe_zone
        dx = zone.x - bot.x
        dy = zone.y - bot.y
        distance = math.hypot(dx, dy)

        if distance > zone.radius + BOT_ZONE_MARGIN:
            new_x = bot.x + (dx / distance) * bot.speed * 2
            new_y = bot.y + (dy / distance) * bot.speed * 2
        else:
            if bot.wanderTimer > BOT_WANDER_INTERVAL_MS:
                bot.wanderDirection = {
                    "x": self.rng.random() - 0.5,
                    "y": self.rng.random() - 0.5,
                }
                bot.wanderTimer = 0
            new_x = bot.x + bot.wanderDirection["x"] * bot.speed * 1.5
            new_y = bot.y + bot.wanderDirection["y"] * bot.speed * 1.5

        try_move(bot, new_x, new_y, room.obstacles)

    @staticmethod
    def find_nearest_zombie(bot: Bot, room: Room) -> Optional[Zombie]:
        """Closest living zombie within firing range, first-seen on ties."""
        nearest = None
        min_dist = math.inf
        for zombie in room.zombies:
            if zombie.health <= 0:
                continue
            dist = calculate_distance(bot.x, bot.y, zombie.x, zombie.y)
            if dist < min_dist and dist < BOT_FIRE_RANGE:
                min_dist = dist
                nearest = zombie
        return nearest

    @staticmethod
    def find_nearest_target(zombie: Zombie, room: Room) -> Optional[Union[Player, Bot]]:
        """Closest living player or bot; players are scanned before bots."""
        nearest = None
        min_dist = math.inf
        for target in [*room.players.values(), *room.bots]:
            if not target.alive:
                continue
            dist = calculate_distance(zombie.x, zombie.y, target.x, target.y)
            if dist < min_dist:
                min_dist = dist
                nearest = target
        return nearest

    def move_zombie(self, room: Room, zombie: Zombie):
        target = self.find_nearest_target(zombie, room)
        if target is None:
            return

        dx = target.x - zombie.x
        dy = target.y - zombie.y
        distance = math.hypot(dx, dy)
        if distance > 0:
            try_move(
                zombie,
                zombie.x + (dx / distance) * zombie.speed,
                zombie.y + (dy / distance) * zombie.speed,
                room.obstacles,
            )
