# server/models/room.py
"""Room state: one isolated match with its roster, entities and timers."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from models.entities import (
    Bot,
    Bullet,
    Bunker,
    Helicopter,
    Obstacle,
    Particle,
    Player,
    SafeZone,
    Zombie,
)


class Phase(str, Enum):
    LOBBY = "lobby"
    COUNTDOWN = "countdown"
    RUNNING = "running"
    ENDED = "ended"


@dataclass
class Room:
    """Canonical state of a single room.

    ``players`` keeps join order, which decides spawn corners, host
    succession and tie-breaks. ``tasks`` holds the room's scheduled
    handles (tick loop, auto-start, countdown, restart); ``epoch`` is bumped
    whenever those handles are invalidated so a late callback can tell it
    belongs to a previous schedule.
    """

    id: str
    host_id: str
    difficulty: str
    zombie_health_multiplier: int
    target_bot_count: int
    players: Dict[str, Player] = field(default_factory=dict)
    bots: List[Bot] = field(default_factory=list)
    zombies: List[Zombie] = field(default_factory=list)
    bullets: List[Bullet] = field(default_factory=list)
    particles: List[Particle] = field(default_factory=list)
    obstacles: List[Obstacle] = field(default_factory=list)
    bunkers: List[Bunker] = field(default_factory=list)
    helicopter: Optional[Helicopter] = None
    safe_zone: SafeZone = field(default_factory=SafeZone)
    score: int = 0
    phase: Phase = Phase.LOBBY
    last_zombie_horde: float = 0
    last_zone_shrink: float = 0
    created_at: float = 0
    epoch: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)
    tasks: Dict[str, asyncio.Task] = field(default_factory=dict, repr=False, compare=False)
    _next_entity_id: int = 0

    def next_id(self, prefix: str) -> str:
        self._next_entity_id += 1
        return f"{prefix}-{self._next_entity_id}"

    def alive_players(self) -> List[Player]:
        return [p for p in self.players.values() if p.alive]

    def alive_bots(self) -> List[Bot]:
        return [b for b in self.bots if b.alive]

    def clear_entities(self):
        self.bots = []
        self.zombies = []
        self.bullets = []
        self.particles = []
        self.helicopter = None
