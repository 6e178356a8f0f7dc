# server/services/game_service.py
"""Core game logic: the per-room simulation pipeline and state snapshots."""

import random
from dataclasses import asdict
from typing import Dict, Mapping

from loguru import logger

from config.settings import *
from models.entities import Player, SafeZone
from models.events import ServerEvent
from models.room import Phase, Room
from services.ai_service import AIService, try_move
from services.combat_service import CombatService, TickEvents
from services.spawner import Spawner
from services.world_generator import WorldGenerator
from utils.helpers import pick_player_color, rects_overlap

# Movement deltas per held key; aliases cover WASD and arrow-key clients.
KEY_DIRECTIONS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
    "w": (0, -1),
    "s": (0, 1),
    "a": (-1, 0),
    "d": (1, 0),
    "ArrowUp": (0, -1),
    "ArrowDown": (0, 1),
    "ArrowLeft": (-1, 0),
    "ArrowRight": (1, 0),
}


class GameService:
    """Main game service that runs room simulations.

    Everything here is synchronous and assumes the caller holds the
    room's lock. ``now`` is always passed in (milliseconds) so a tick is a
    pure function of room state, time and the random source.
    """

    def __init__(self, rng=None):
        self.rng = rng or random
        self.world = WorldGenerator(self.rng)
        self.spawner = Spawner(self.rng)
        self.ai = AIService(self.rng)
        self.combat = CombatService(self.spawner, self.rng)

    # Roster
    def create_player(self, room: Room, player_id: str, name: str) -> Player:
        """Add a player at the next spawn corner (by current player count)."""
        x, y = self.world.spawn_point(len(room.players))
        player = Player(
            id=player_id,
            name=name,
            x=x,
            y=y,
            color=pick_player_color(self.rng),
        )
        room.players[player_id] = player
        return player

    def reset_players(self, room: Room):
        for index, player in enumerate(room.players.values()):
            player.x, player.y = self.world.spawn_point(index)
            player.health = player.maxHealth
            player.alive = True
            player.lastShot = 0
            player.lastInputTime = 0

    # Match lifecycle
    def start_match(self, room: Room, now: float):
        """Populate terrain, bots and the opening horde and start the clocks."""
        room.phase = Phase.RUNNING
        room.score = 0
        room.clear_entities()
        room.safe_zone = SafeZone()
        room.last_zombie_horde = now
        room.last_zone_shrink = now
        self.world.generate(room)
        self.spawner.spawn_bots(room, room.target_bot_count)
        self.spawner.spawn_zombie_horde(room, INITIAL_HORDE_SIZE)

    def reset_match(self, room: Room, now: float):
        """Restart in place: fresh terrain and bots, players healed at their corners."""
        room.phase = Phase.RUNNING
        room.score = 0
        room.clear_entities()
        room.safe_zone = SafeZone()
        room.last_zombie_horde = now
        room.last_zone_shrink = now
        self.world.generate(room)
        self.spawner.spawn_bots(room, room.target_bot_count)
        self.reset_players(room)

    # Player actions
    def apply_input(self, room: Room, player: Player, keys: Mapping[str, bool], now: float) -> bool:
        """Move a player by the held keys; diagonals are intentionally not normalized.

        Moves arriving faster than once per ``INPUT_MIN_INTERVAL_MS`` are dropped.
        """
        if now - player.lastInputTime < INPUT_MIN_INTERVAL_MS:
            return False
        player.lastInputTime = now

        dx = dy = 0
        for key, pressed in keys.items():
            if pressed and key in KEY_DIRECTIONS:
                kx, ky = KEY_DIRECTIONS[key]
                dx += kx
                dy += ky
        # A key and its alias held together count once per axis direction.
        dx = max(-1, min(1, dx))
        dy = max(-1, min(1, dy))

        return try_move(
            player,
            player.x + dx * player.speed,
            player.y + dy * player.speed,
            room.obstacles,
        )

    def fire_player_bullet(self, room: Room, player: Player, target_x: float, target_y: float, now: float):
        bullet = self.combat.fire_bullet(
            room,
            player,
            target_x,
            target_y,
            PLAYER_BULLET_SPEED,
            PLAYER_BULLET_LIFE,
            PLAYER_BULLET_DAMAGE,
            now,
        )
        player.lastShot = now
        return bullet

    # Tick pipeline
    def tick(self, room: Room, now: float) -> TickEvents:
        """Run one simulation step and return the events it produced.

        The last event is always the ``gameUpdate`` snapshot.
        """
        events: TickEvents = []
        if room.phase != Phase.RUNNING:
            return events

        self.combat.apply_zone_damage(room, events)
        self.update_bots(room, now)
        self.combat.update_bullets(room, now, events)
        self.update_horde(room, now)
        self.update_safe_zone(room, now)
        self.update_zombies(room, events)
        self.combat.update_particles(room)
        self.evaluate_win_condition(room, events)

        events.append((ServerEvent.GAME_UPDATE, self.build_snapshot(room)))
        return events

    def update_bots(self, room: Room, now: float):
        for bot in room.bots:
            if not bot.alive:
                continue
            self.ai.move_bot(room, bot)

            if now - bot.lastShot >= BOT_FIRE_COOLDOWN_MS:
                target = self.ai.find_nearest_zombie(bot, room)
                if target is not None:
                    self.combat.fire_bullet(
                        room,
                        bot,
                        target.x,
                        target.y,
                        BOT_BULLET_SPEED,
                        BOT_BULLET_LIFE,
                        BOT_BULLET_DAMAGE,
                        now,
                    )
                    bot.lastShot = now

            self.combat.resolve_bot_melee(room, bot)

        room.bots = room.alive_bots()

    def update_horde(self, room: Room, now: float):
        if now - room.last_zombie_horde >= HORDE_INTERVAL_MS:
            self.spawner.spawn_zombie_horde(room, self.spawner.horde_size(room))
            room.last_zombie_horde = now

    @staticmethod
    def update_safe_zone(room: Room, now: float):
        if now - room.last_zone_shrink >= ZONE_SHRINK_INTERVAL_MS:
            zone = room.safe_zone
            zone.radius = max(zone.radius - ZONE_SHRINK_STEP, ZONE_MIN_RADIUS)
            room.last_zone_shrink = now

    def update_zombies(self, room: Room, events: TickEvents):
        # Super zombies raised this step join the chase next tick.
        for zombie in list(room.zombies):
            if zombie.health <= 0:
                continue
            self.ai.move_zombie(room, zombie)
            self.combat.resolve_zombie_contact(room, zombie, events)

        room.zombies = [z for z in room.zombies if z.health > 0]
        room.bots = room.alive_bots()

    def evaluate_win_condition(self, room: Room, events: TickEvents):
        alive_players = room.alive_players()
        alive_bots = room.alive_bots()
        alive_count = len(alive_players) + len(alive_bots)

        if alive_count == 0:
            self.end_match(room, "Everyone is dead! The match ends in a draw.", None, events)
            return

        if alive_count == 1 and room.helicopter is None:
            self.spawner.spawn_helicopter(room)
            events.append(
                (
                    ServerEvent.MESSAGE,
                    {"text": "The helicopter has arrived! Reach it to win!"},
                )
            )

        if room.helicopter is None:
            return
        for survivor in [*alive_players, *alive_bots]:
            if rects_overlap(survivor, room.helicopter):
                self.end_match(
                    room,
                    f"{survivor.name} reached the helicopter! Victory!",
                    survivor.id,
                    events,
                )
                return

    @staticmethod
    def end_match(room: Room, message: str, winner_id, events: TickEvents):
        room.phase = Phase.ENDED
        logger.info(f"Room {room.id}: match over - {message}")
        events.append((ServerEvent.GAME_OVER, {"message": message, "winner": winner_id}))

    # Getter methods for game state
    @staticmethod
    def serialize_players(room: Room) -> Dict[str, dict]:
        return {player_id: asdict(player) for player_id, player in room.players.items()}

    def build_snapshot(self, room: Room) -> dict:
        """Per-tick state broadcast; particles are capped for bandwidth."""
        return {
            "players": self.serialize_players(room),
            "bots": [asdict(bot) for bot in room.bots],
            "bullets": [asdict(bullet) for bullet in room.bullets],
            "zombies": [asdict(zombie) for zombie in room.zombies],
            "particles": [asdict(p) for p in room.particles[:MAX_SNAPSHOT_PARTICLES]],
            "obstacles": [asdict(obstacle) for obstacle in room.obstacles],
            "safeZone": asdict(room.safe_zone),
            "helicopter": asdict(room.helicopter) if room.helicopter else None,
            "score": room.score,
        }

    def build_full_state(self, room: Room) -> dict:
        """Everything a client needs to render a match from scratch."""
        state = self.build_snapshot(room)
        state.update(
            {
                "roomId": room.id,
                "phase": room.phase.value,
                "hostId": room.host_id,
                "particles": [asdict(p) for p in room.particles],
                "bunkers": [asdict(bunker) for bunker in room.bunkers],
                "zoneDamage": room.safe_zone.damage,
                "zombieHealthMultiplier": room.zombie_health_multiplier,
                "lastZombieHorde": room.last_zombie_horde,
                "lastZoneShrink": room.last_zone_shrink,
            }
        )
        return state

    def room_summary(self, room: Room) -> dict:
        return {
            "roomId": room.id,
            "phase": room.phase.value,
            "hostId": room.host_id,
            "difficulty": room.difficulty,
            "players": len(room.players),
            "maxPlayers": MAX_PLAYERS_PER_ROOM,
            "bots": len(room.bots),
            "zombies": len(room.zombies),
            "score": room.score,
        }
