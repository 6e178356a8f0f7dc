# server/services/world_generator.py
"""Procedural terrain: obstacles, bunkers and player spawn corners."""

import random
from typing import List, Optional, Tuple

from loguru import logger

from config.settings import (
    BUNKER_COUNT,
    BUNKER_SIZE,
    OBSTACLE_COUNT,
    OBSTACLE_MAX_EXTRA_SIZE,
    OBSTACLE_MIN_SIZE,
    PLACEMENT_ATTEMPTS,
    PLAYER_SIZE,
    SPAWN_MARGIN,
    WORLD_HEIGHT,
    WORLD_WIDTH,
)
from models.entities import Bunker, Obstacle
from models.room import Room
from utils.helpers import Rect, rects_overlap

# Free space kept around each spawn corner so nobody starts inside cover.
SPAWN_CLEARANCE = 20


class WorldGenerator:
    """Places terrain for a room without overlaps."""

    def __init__(self, rng=None):
        self.rng = rng or random

    @staticmethod
    def spawn_points() -> List[Tuple[float, float]]:
        return [
            (SPAWN_MARGIN, SPAWN_MARGIN),
            (WORLD_WIDTH - SPAWN_MARGIN, SPAWN_MARGIN),
            (SPAWN_MARGIN, WORLD_HEIGHT - SPAWN_MARGIN),
            (WORLD_WIDTH - SPAWN_MARGIN, WORLD_HEIGHT - SPAWN_MARGIN),
        ]

    def spawn_point(self, index: int) -> Tuple[float, float]:
        """Spawn corner for the index-th player, cycling through the corners."""
        points = self.spawn_points()
        return points[index % len(points)]

    def _spawn_zones(self) -> List[Rect]:
        return [
            Rect(
                x - SPAWN_CLEARANCE,
                y - SPAWN_CLEARANCE,
                PLAYER_SIZE + 2 * SPAWN_CLEARANCE,
                PLAYER_SIZE + 2 * SPAWN_CLEARANCE,
            )
            for x, y in self.spawn_points()
        ]

    def _find_free_spot(self, width: float, height: float, blockers: List) -> Optional[Rect]:
        """Try a bounded number of random placements; None if all collide."""
        for _ in range(PLACEMENT_ATTEMPTS):
            candidate = Rect(
                self.rng.uniform(0, WORLD_WIDTH - width),
                self.rng.uniform(0, WORLD_HEIGHT - height),
                width,
                height,
            )
            if not any(rects_overlap(candidate, other) for other in blockers):
                return candidate
        return None

    def generate_obstacles(self, room: Room) -> List[Obstacle]:
        obstacles: List[Obstacle] = []
        spawn_zones = self._spawn_zones()

        for _ in range(OBSTACLE_COUNT):
            width = OBSTACLE_MIN_SIZE + self.rng.random() * OBSTACLE_MAX_EXTRA_SIZE
            height = OBSTACLE_MIN_SIZE + self.rng.random() * OBSTACLE_MAX_EXTRA_SIZE
            spot = self._find_free_spot(width, height, obstacles + spawn_zones)
            if spot is None:
                continue
            obstacles.append(
                Obstacle(
                    id=room.next_id("obstacle"),
                    x=spot.x,
                    y=spot.y,
                    width=width,
                    height=height,
                )
            )
        return obstacles

    def generate_bunkers(self, room: Room, obstacles: List[Obstacle]) -> List[Bunker]:
        bunkers: List[Bunker] = []
        for _ in range(BUNKER_COUNT):
            spot = self._find_free_spot(BUNKER_SIZE, BUNKER_SIZE, obstacles + bunkers)
            if spot is None:
                continue
            bunkers.append(Bunker(id=room.next_id("bunker"), x=spot.x, y=spot.y))
        return bunkers

    def generate(self, room: Room):
        """Replace the room's terrain with a fresh layout."""
        room.obstacles = self.generate_obstacles(room)
        room.bunkers = self.generate_bunkers(room, room.obstacles)
        logger.debug(
            f"Room {room.id}: generated {len(room.obstacles)} obstacles, "
            f"{len(room.bunkers)} bunkers"
        )
