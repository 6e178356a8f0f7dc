"""Unit tests for geometry and id helpers."""

import random
from types import SimpleNamespace

import pytest

from config.settings import ROOM_ID_ALPHABET, WORLD_HEIGHT, WORLD_WIDTH
from models.entities import Obstacle
from utils.helpers import (
    Rect,
    box_center,
    clamp_to_world,
    collides_with_obstacles,
    generate_room_id,
    in_world,
    rects_overlap,
)


@pytest.mark.unit
class TestCollision:
    def test_overlapping_boxes(self):
        assert rects_overlap(Rect(0, 0, 20, 20), Rect(10, 10, 20, 20))

    def test_touching_edges_do_not_overlap(self):
        assert not rects_overlap(Rect(0, 0, 20, 20), Rect(20, 0, 20, 20))
        assert not rects_overlap(Rect(0, 0, 20, 20), Rect(0, 20, 20, 20))

    def test_entities_without_a_box_use_bullet_size(self):
        point = SimpleNamespace(x=10, y=10)
        assert rects_overlap(point, Rect(13, 13, 5, 5))
        assert not rects_overlap(point, Rect(14, 14, 5, 5))
        assert box_center(point) == (12, 12)

    def test_destroyed_obstacles_do_not_block(self):
        obstacle = Obstacle(id="o", x=0, y=0, width=50, height=50)
        box = Rect(10, 10, 20, 20)
        assert collides_with_obstacles(box, [obstacle])
        obstacle.health = 0
        assert not collides_with_obstacles(box, [obstacle])


@pytest.mark.unit
class TestBounds:
    def test_clamp_keeps_whole_box_inside(self):
        assert clamp_to_world(-5, -5, 20, 20) == (0, 0)
        assert clamp_to_world(WORLD_WIDTH, WORLD_HEIGHT, 20, 20) == (
            WORLD_WIDTH - 20,
            WORLD_HEIGHT - 20,
        )

    def test_in_world_is_strict(self):
        assert in_world(1, 1)
        assert not in_world(0, 100)
        assert not in_world(100, WORLD_HEIGHT)


@pytest.mark.unit
class TestRoomIds:
    def test_room_id_shape(self):
        room_id = generate_room_id(random.Random(3))
        assert len(room_id) == 6
        assert all(ch in ROOM_ID_ALPHABET for ch in room_id)

    def test_room_id_is_seedable(self):
        assert generate_room_id(random.Random(9)) == generate_room_id(random.Random(9))
