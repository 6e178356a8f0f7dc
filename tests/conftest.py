"""Shared fixtures for the game server tests.

Async code is driven with asyncio.run() rather than pytest-asyncio.
"""

import random

import pytest

from config.settings import DIFFICULTY_MULTIPLIERS
from models.entities import Player
from models.room import Phase, Room
from services.game_service import GameService
from services.room_service import RoomManager, RoomRegistry


class RecordingTransport:
    """Transport double that records every frame per connection."""

    def __init__(self):
        self.sent = []

    async def send(self, conn_id, event, payload):
        self.sent.append((conn_id, event.value, payload))
        return True

    async def broadcast(self, conn_ids, event, payload):
        for conn_id in conn_ids:
            self.sent.append((conn_id, event.value, payload))

    def events_for(self, conn_id):
        return [(event, payload) for conn, event, payload in self.sent if conn == conn_id]

    def names_for(self, conn_id):
        return [event for event, _ in self.events_for(conn_id)]

    def last(self, conn_id, event):
        matches = [payload for name, payload in self.events_for(conn_id) if name == event]
        return matches[-1] if matches else None


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start=10_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


def make_room(room_id="TEST01", difficulty="easy", bots=0, phase=Phase.RUNNING):
    return Room(
        id=room_id,
        host_id="p1",
        difficulty=difficulty,
        zombie_health_multiplier=DIFFICULTY_MULTIPLIERS[difficulty],
        target_bot_count=bots,
        phase=phase,
    )


def add_player(room, player_id="p1", x=800.0, y=600.0, name=None):
    player = Player(id=player_id, name=name or player_id, x=x, y=y, color="#ff6b6b")
    room.players[player_id] = player
    return player


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def game_service(rng):
    return GameService(rng)


@pytest.fixture
def room():
    return make_room()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_manager(game_service, transport, clock):
    """Build a RoomManager with fast timers; ticking is effectively off by default."""

    def _make(**options):
        options.setdefault("tick_interval_ms", 10**7)
        options.setdefault("second", 0.001)
        options.setdefault("restart_delay", 60.0)
        return RoomManager(RoomRegistry(), game_service, transport, clock=clock, **options)

    return _make
