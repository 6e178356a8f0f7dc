# server/services/combat_service.py
"""Bullets, melee contact, explosions and zone damage."""

import math
import random
from typing import Dict, List, Tuple

from loguru import logger

from config.settings import (
    BOT_MELEE_DAMAGE,
    BULLET_MAX_AGE_MS,
    EXPLOSION_PARTICLES,
    PARTICLE_GRAVITY,
    PARTICLE_LIFE,
    ZOMBIE_KILL_SCORE,
)
from models.entities import Bot, Bullet, Particle, Player, Zombie
from models.events import ServerEvent
from models.room import Room
from services.spawner import Spawner
from utils.helpers import box_center, in_world, rects_overlap

TickEvents = List[Tuple[ServerEvent, Dict]]


def apply_damage(entity, amount: float) -> bool:
    """Subtract health, clamped at zero. Returns True if this hit was lethal."""
    was_alive = entity.health > 0
    entity.health = max(0, entity.health - amount)
    return was_alive and entity.health <= 0


class CombatService:
    """Resolves every health-changing interaction inside a room."""

    def __init__(self, spawner: Spawner, rng=None):
        self.spawner = spawner
        self.rng = rng or random

    def create_explosion(self, room: Room, x: float, y: float, color: str):
        for _ in range(EXPLOSION_PARTICLES):
            room.particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=(self.rng.random() - 0.5) * 8,
                    vy=(self.rng.random() - 0.5) * 8 - 2,
                    life=PARTICLE_LIFE,
                    size=self.rng.random() * 4 + 2,
                    color=color,
                )
            )

    # Damage helpers
    def damage_player(self, player: Player, amount: float, events: TickEvents):
        if not player.alive:
            return
        apply_damage(player, amount)
        if player.health <= 0:
            player.alive = False
            events.append((ServerEvent.PLAYER_DIED, {"playerId": player.id}))

    def damage_bot(self, bot: Bot, amount: float) -> bool:
        """Returns True if the bot died from this damage."""
        if not bot.alive:
            return False
        apply_damage(bot, amount)
        if bot.health <= 0:
            bot.alive = False
            return True
        return False

    def kill_bot_by_zombie(self, room: Room, bot: Bot):
        self.spawner.spawn_super_zombie(room, bot.x, bot.y)
        logger.debug(f"Room {room.id}: {bot.name} fell to zombies")

    def fire_bullet(
        self,
        room: Room,
        shooter,
        target_x: float,
        target_y: float,
        speed: float,
        life: int,
        damage: float,
        now: float,
    ) -> Bullet:
        """Spawn a bullet at the shooter's center heading toward the target."""
        origin_x, origin_y = box_center(shooter)
        angle = math.atan2(target_y - origin_y, target_x - origin_x)
        bullet = Bullet(
            id=room.next_id("bullet"),
            x=origin_x,
            y=origin_y,
            vx=math.cos(angle) * speed,
            vy=math.sin(angle) * speed,
            life=life,
            damage=damage,
            ownerId=shooter.id,
            createdAt=now,
        )
        room.bullets.append(bullet)
        return bullet

    # Tick steps
    def apply_zone_damage(self, room: Room, events: TickEvents):
        """Damage every living combatant whose box center is outside the zone."""
        zone = room.safe_zone
        per_tick = zone.damage / 60

        def outside(entity) -> bool:
            cx, cy = box_center(entity)
            return math.hypot(cx - zone.x, cy - zone.y) > zone.radius

        for player in room.players.values():
            if player.alive and outside(player):
                self.damage_player(player, per_tick, events)
        for bot in room.bots:
            if bot.alive and outside(bot):
                self.damage_bot(bot, per_tick)
        for zombie in room.zombies:
            if zombie.health > 0 and outside(zombie):
                apply_damage(zombie, per_tick)

        room.bots = room.alive_bots()
        room.zombies = [z for z in room.zombies if z.health > 0]

    def resolve_bot_melee(self, room: Room, bot: Bot):
        """A bot touching a zombie loses health; dying this way raises a super zombie."""
        for zombie in room.zombies:
            if zombie.health > 0 and rects_overlap(bot, zombie):
                self.create_explosion(room, bot.x, bot.y, "#00ff00")
                if self.damage_bot(bot, BOT_MELEE_DAMAGE):
                    self.kill_bot_by_zombie(room, bot)
                break

    def resolve_zombie_contact(self, room: Room, zombie: Zombie, events: TickEvents):
        """Continuous contact damage to every living player and bot the zombie overlaps."""
        for player in room.players.values():
            if player.alive and rects_overlap(player, zombie):
                self.damage_player(player, zombie.damage, events)
                self.create_explosion(room, player.x, player.y, "#00ff00")

        for bot in room.bots:
            if bot.alive and rects_overlap(bot, zombie):
                self.create_explosion(room, bot.x, bot.y, "#00ff00")
                if self.damage_bot(bot, zombie.damage):
                    self.kill_bot_by_zombie(room, bot)

    def update_bullets(self, room: Room, now: float, events: TickEvents):
        """Advance bullets and resolve their first hit.

        Targets are tested in a fixed order: obstacles, zombies, bots, then
        players other than the shooter. A bullet is consumed by whatever it
        hits first.
        """
        surviving = []
        for bullet in room.bullets:
            if now - bullet.createdAt > BULLET_MAX_AGE_MS:
                continue

            bullet.x += bullet.vx
            bullet.y += bullet.vy
            bullet.life -= 1
            if bullet.life <= 0 or not in_world(bullet.x, bullet.y):
                continue

            if not self._resolve_hit(room, bullet, events):
                surviving.append(bullet)

        room.bullets = surviving
        room.obstacles = [o for o in room.obstacles if o.health > 0]
        room.zombies = [z for z in room.zombies if z.health > 0]
        room.bots = room.alive_bots()

    def _resolve_hit(self, room: Room, bullet: Bullet, events: TickEvents) -> bool:
        for obstacle in room.obstacles:
            if obstacle.health > 0 and rects_overlap(bullet, obstacle):
                apply_damage(obstacle, bullet.damage)
                self.create_explosion(room, bullet.x, bullet.y, "#ffff00")
                return True

        for zombie in room.zombies:
            if zombie.health > 0 and rects_overlap(bullet, zombie):
                if apply_damage(zombie, bullet.damage):
                    room.score += ZOMBIE_KILL_SCORE
                self.create_explosion(room, zombie.x, zombie.y, "#ff0000")
                return True

        for bot in room.bots:
            if bot.alive and bot.id != bullet.ownerId and rects_overlap(bullet, bot):
                self.damage_bot(bot, bullet.damage)
                self.create_explosion(room, bot.x, bot.y, "#00ff00")
                return True

        for player_id, player in room.players.items():
            if player.alive and player_id != bullet.ownerId and rects_overlap(bullet, player):
                self.damage_player(player, bullet.damage, events)
                self.create_explosion(room, player.x, player.y, "#ff6b6b")
                return True

        return False

    @staticmethod
    def update_particles(room: Room):
        for particle in room.particles:
            particle.x += particle.vx
            particle.y += particle.vy
            particle.life -= 1
            particle.vy += PARTICLE_GRAVITY
        room.particles = [p for p in room.particles if p.life > 0]
