# server/services/room_service.py
"""Room registry and lifecycle management.

All room mutations happen under the room's ``asyncio.Lock``. Handlers
collect outbound messages while holding the lock and hand them to the
transport only after releasing it, so a slow socket never stalls a room.
Scheduled work (countdown, tick loop, restart) lives in ``room.tasks`` and
checks ``room.epoch`` before touching state.
"""

import asyncio
import random
from typing import Dict, List, Optional

from loguru import logger

from config.settings import (
    AUTO_START_DELAY_S,
    DEFAULT_BOT_COUNT,
    DIFFICULTY_MULTIPLIERS,
    MAX_BOT_COUNT,
    MAX_PLAYERS_PER_ROOM,
    MIN_PLAYERS_FOR_AUTO_START,
    RESTART_DELAY_S,
    ROOM_ID_MAX_ATTEMPTS,
    SHOOT_COOLDOWN_MS,
    SHOOT_STALENESS_MS,
    TICK_INTERVAL_MS,
)
from models.errors import (
    DuplicateRoomId,
    GameError,
    InvalidInput,
    RoomFull,
    RoomNotFound,
    StaleEvent,
    Unauthorized,
)
from models.events import (
    BEST_EFFORT_EVENTS,
    OutboundMessage,
    ServerEvent,
    message_kind,
    parse_client_message,
)
from models.room import Phase, Room
from services.game_service import GameService
from utils.helpers import clamp, generate_room_id, now_ms


class RoomRegistry:
    """Owns every live room and the connection-to-room index."""

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._connections: Dict[str, str] = {}

    def register(self, room: Room):
        if room.id in self._rooms:
            raise DuplicateRoomId(f"Room id {room.id} already in use")
        self._rooms[room.id] = room

    def lookup(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def unregister(self, room_id: str) -> Optional[Room]:
        room = self._rooms.pop(room_id, None)
        if room is not None:
            self._connections = {
                conn_id: bound
                for conn_id, bound in self._connections.items()
                if bound != room_id
            }
        return room

    def bind(self, conn_id: str, room_id: str):
        self._connections[conn_id] = room_id

    def unbind(self, conn_id: str):
        self._connections.pop(conn_id, None)

    def room_of(self, conn_id: str) -> Optional[Room]:
        room_id = self._connections.get(conn_id)
        return self._rooms.get(room_id) if room_id else None

    def all_rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms


class RoomManager:
    """Drives rooms through lobby, countdown, running and ended.

    ``transport`` must provide ``send(conn_id, event, payload)`` and
    ``broadcast(conn_ids, event, payload)`` coroutines. ``second`` scales
    the countdown ticker and lets tests run it quickly.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        game_service: GameService,
        transport,
        clock=now_ms,
        tick_interval_ms: float = TICK_INTERVAL_MS,
        auto_start_seconds: int = AUTO_START_DELAY_S,
        second: float = 1.0,
        restart_delay: float = RESTART_DELAY_S,
        rng=None,
    ):
        self.registry = registry
        self.game_service = game_service
        self.transport = transport
        self.clock = clock
        self.tick_interval_ms = tick_interval_ms
        self.auto_start_seconds = auto_start_seconds
        self.second = second
        self.restart_delay = restart_delay
        self.rng = rng or random

    # Event boundary
    async def dispatch(self, conn_id: str, message: dict):
        """Route one client frame. Rejections become ``error`` replies."""
        kind = message_kind(message)
        try:
            kind, event = parse_client_message(message)

            if kind == "createRoom":
                await self.create_room(conn_id, event.playerName, event.difficulty, event.numBots)
            elif kind == "joinRoom":
                await self.join_room(conn_id, event.roomId, event.playerName)
            elif kind == "playerInput":
                await self.handle_input(conn_id, event.keys)
            elif kind == "shoot":
                await self.handle_shoot(
                    conn_id, event.targetWorldX, event.targetWorldY, event.timestamp
                )
            elif kind == "startGame":
                await self.start_game(conn_id)
            elif kind == "restartGame":
                await self.restart_game(conn_id)

        except GameError as e:
            if kind in BEST_EFFORT_EVENTS:
                logger.debug(f"Dropped {kind} from {conn_id}: {e.message}")
                return
            await self.transport.send(conn_id, ServerEvent.ERROR, {"message": e.message})

    # Room creation and membership
    async def create_room(
        self,
        conn_id: str,
        name: Optional[str] = None,
        difficulty: Optional[str] = "easy",
        bot_count: Optional[int] = None,
    ) -> str:
        await self._leave_current_room(conn_id)
        room = self._allocate_room(conn_id, difficulty, bot_count)

        outbox: List[OutboundMessage] = []
        async with room.lock:
            self.game_service.create_player(room, conn_id, name or "Host")
            self.registry.bind(conn_id, room.id)
            players = self.game_service.serialize_players(room)
            outbox.append(
                OutboundMessage(
                    [conn_id],
                    ServerEvent.ROOM_CREATED,
                    {"roomId": room.id, "playerId": conn_id, "players": players},
                )
            )
            outbox.append(
                OutboundMessage(list(room.players), ServerEvent.PLAYER_JOINED, {"players": players})
            )

        logger.info(
            f"Room {room.id} created by {conn_id} "
            f"(difficulty={room.difficulty}, bots={room.target_bot_count})"
        )
        await self._flush(outbox)
        return room.id

    def _allocate_room(self, conn_id: str, difficulty: Optional[str], bot_count: Optional[int]) -> Room:
        if difficulty not in DIFFICULTY_MULTIPLIERS:
            difficulty = "easy"
        if bot_count is None:
            bot_count = DEFAULT_BOT_COUNT

        for _ in range(ROOM_ID_MAX_ATTEMPTS):
            room = Room(
                id=generate_room_id(self.rng),
                host_id=conn_id,
                difficulty=difficulty,
                zombie_health_multiplier=DIFFICULTY_MULTIPLIERS[difficulty],
                target_bot_count=int(clamp(bot_count, 0, MAX_BOT_COUNT)),
                created_at=self.clock(),
            )
            try:
                self.registry.register(room)
                return room
            except DuplicateRoomId as e:
                logger.debug(f"{e.message}, retrying")

        raise GameError("Could not allocate a room, try again")

    async def join_room(self, conn_id: str, room_id: str, name: Optional[str] = None) -> Room:
        room_id = room_id.strip().upper()
        room = self.registry.lookup(room_id)
        if room is None:
            raise RoomNotFound()
        if self.registry.room_of(conn_id) is room:
            raise InvalidInput("You are already in this room!")
        if len(room.players) >= MAX_PLAYERS_PER_ROOM:
            raise RoomFull()

        await self._leave_current_room(conn_id)

        outbox: List[OutboundMessage] = []
        async with room.lock:
            if self.registry.lookup(room_id) is not room:
                raise RoomNotFound()
            if len(room.players) >= MAX_PLAYERS_PER_ROOM:
                raise RoomFull()

            self.game_service.create_player(room, conn_id, name or f"Player {conn_id[:4]}")
            self.registry.bind(conn_id, room.id)
            players = self.game_service.serialize_players(room)

            joined = {
                "roomId": room.id,
                "playerId": conn_id,
                "hostId": room.host_id,
                "phase": room.phase.value,
                "players": players,
            }
            if room.phase in (Phase.RUNNING, Phase.ENDED):
                joined["state"] = self.game_service.build_full_state(room)
            outbox.append(OutboundMessage([conn_id], ServerEvent.ROOM_JOINED, joined))
            outbox.append(
                OutboundMessage(
                    list(room.players),
                    ServerEvent.PLAYER_JOINED,
                    {"playerId": conn_id, "players": players},
                )
            )

            if room.phase == Phase.LOBBY and len(room.players) >= MIN_PLAYERS_FOR_AUTO_START:
                self._arm_countdown(room)

        logger.info(f"{conn_id} joined room {room.id} ({len(room.players)}/{MAX_PLAYERS_PER_ROOM})")
        await self._flush(outbox)
        return room

    async def _leave_current_room(self, conn_id: str):
        room = self.registry.room_of(conn_id)
        if room is None:
            return
        outbox: List[OutboundMessage] = []
        async with room.lock:
            if self.registry.lookup(room.id) is room:
                self._remove_player(room, conn_id, outbox)
        await self._flush(outbox)

    async def disconnect(self, conn_id: str):
        room = self.registry.room_of(conn_id)
        self.registry.unbind(conn_id)
        if room is None:
            return

        outbox: List[OutboundMessage] = []
        async with room.lock:
            if self.registry.lookup(room.id) is not room:
                return
            self._remove_player(room, conn_id, outbox)
        await self._flush(outbox)

    def _remove_player(self, room: Room, conn_id: str, outbox: List[OutboundMessage]):
        player = room.players.pop(conn_id, None)
        self.registry.unbind(conn_id)
        if player is None:
            return
        logger.info(f"{player.name} ({conn_id}) left room {room.id}")

        if not room.players:
            self._teardown(room, "room is empty")
            return

        remaining = list(room.players)
        if room.host_id == conn_id and room.phase == Phase.RUNNING:
            outbox.append(
                OutboundMessage(
                    remaining,
                    ServerEvent.GAME_OVER,
                    {"message": "The host left the game. Match over!", "winner": None},
                )
            )
            self._teardown(room, "host left a running match")
            return

        if room.host_id == conn_id:
            room.host_id = remaining[0]
            logger.info(f"Room {room.id}: host passed to {room.host_id}")

        if room.phase == Phase.COUNTDOWN and len(room.players) < MIN_PLAYERS_FOR_AUTO_START:
            self._cancel_tasks(room)
            room.phase = Phase.LOBBY
            logger.info(f"Room {room.id}: auto-start cancelled, back to lobby")

        outbox.append(
            OutboundMessage(
                remaining,
                ServerEvent.PLAYER_LEFT,
                {
                    "playerId": conn_id,
                    "hostId": room.host_id,
                    "players": self.game_service.serialize_players(room),
                },
            )
        )

    # Match control
    async def start_game(self, conn_id: str):
        room = self._room_for(conn_id)
        outbox: List[OutboundMessage] = []
        async with room.lock:
            if self.registry.lookup(room.id) is not room:
                return
            if room.host_id != conn_id:
                logger.warning(f"Room {room.id}: {conn_id} tried to start without being host")
                raise Unauthorized("Only the host can start the game!")
            if room.phase in (Phase.RUNNING, Phase.ENDED):
                return
            self._begin_match(room, outbox)
        await self._flush(outbox)

    async def restart_game(self, conn_id: str):
        room = self._room_for(conn_id)
        outbox: List[OutboundMessage] = []
        async with room.lock:
            if self.registry.lookup(room.id) is not room:
                return
            if room.host_id != conn_id:
                logger.warning(f"Room {room.id}: {conn_id} tried to restart without being host")
                raise Unauthorized("Only the host can restart the game!")
            if room.phase not in (Phase.RUNNING, Phase.ENDED):
                return
            self._reset_match(room, outbox)
        await self._flush(outbox)

    async def handle_input(self, conn_id: str, keys: Dict[str, bool]) -> bool:
        room = self.registry.room_of(conn_id)
        if room is None:
            return False
        async with room.lock:
            if self.registry.lookup(room.id) is not room or room.phase != Phase.RUNNING:
                return False
            player = room.players.get(conn_id)
            if player is None or not player.alive:
                return False
            return self.game_service.apply_input(room, player, keys, self.clock())

    async def handle_shoot(self, conn_id: str, target_x: float, target_y: float, timestamp: float) -> bool:
        """Fire a player's weapon. Returns False when the shot is on cooldown.

        Raises ``StaleEvent`` when the client timestamp is too far from the
        server clock.
        """
        room = self.registry.room_of(conn_id)
        if room is None:
            return False
        async with room.lock:
            if self.registry.lookup(room.id) is not room or room.phase != Phase.RUNNING:
                return False
            player = room.players.get(conn_id)
            if player is None or not player.alive:
                return False

            now = self.clock()
            if now - player.lastShot < SHOOT_COOLDOWN_MS:
                return False
            if abs(now - timestamp) > SHOOT_STALENESS_MS:
                raise StaleEvent()

            self.game_service.fire_player_bullet(room, player, target_x, target_y, now)
            return True

    # Teardown
    async def cleanup_room(self, room_id: str) -> bool:
        """Tear a room down, telling anyone still inside that the match is over."""
        room = self.registry.lookup(room_id)
        if room is None:
            return False
        async with room.lock:
            if self.registry.lookup(room_id) is not room:
                return False
            outbox = [
                OutboundMessage(
                    list(room.players),
                    ServerEvent.GAME_OVER,
                    {"message": "The room was closed by the server.", "winner": None},
                )
            ]
            tasks = self._teardown(room, "cleanup requested")
        await self._flush(outbox)
        await asyncio.gather(*tasks, return_exceptions=True)
        return True

    async def shutdown(self):
        for room in self.registry.all_rooms():
            await self.cleanup_room(room.id)
        logger.info("All rooms shut down")

    def _teardown(self, room: Room, reason: str) -> List[asyncio.Task]:
        tasks = self._cancel_tasks(room)
        self.registry.unregister(room.id)
        logger.info(f"Room {room.id} torn down: {reason}")
        return tasks

    # Scheduling
    def _room_for(self, conn_id: str) -> Room:
        room = self.registry.room_of(conn_id)
        if room is None:
            raise RoomNotFound("You are not in a room!")
        return room

    def _is_current(self, room: Room, epoch: int) -> bool:
        return self.registry.lookup(room.id) is room and room.epoch == epoch

    def _cancel_tasks(self, room: Room) -> List[asyncio.Task]:
        """Cancel every scheduled handle except the caller's own and bump the epoch."""
        current = asyncio.current_task()
        cancelled = []
        for task in room.tasks.values():
            if task is not current and not task.done():
                task.cancel()
                cancelled.append(task)
        room.tasks.clear()
        room.epoch += 1
        return cancelled

    def _arm_countdown(self, room: Room):
        room.phase = Phase.COUNTDOWN
        room.tasks["countdown"] = asyncio.create_task(self._run_countdown(room, room.epoch))
        logger.info(f"Room {room.id}: auto-start in {self.auto_start_seconds}s")

    async def _run_countdown(self, room: Room, epoch: int):
        for remaining in range(self.auto_start_seconds, 0, -1):
            async with room.lock:
                if not self._is_current(room, epoch) or room.phase != Phase.COUNTDOWN:
                    return
                outbox = [
                    OutboundMessage(
                        list(room.players),
                        ServerEvent.AUTO_START_COUNTDOWN,
                        {"countdown": remaining},
                    )
                ]
            await self._flush(outbox)
            await asyncio.sleep(self.second)

        outbox = []
        async with room.lock:
            if not self._is_current(room, epoch) or room.phase != Phase.COUNTDOWN:
                return
            if len(room.players) < MIN_PLAYERS_FOR_AUTO_START:
                return
            self._begin_match(room, outbox)
        await self._flush(outbox)

    def _begin_match(self, room: Room, outbox: List[OutboundMessage]):
        self._cancel_tasks(room)
        self.game_service.start_match(room, self.clock())
        outbox.append(
            OutboundMessage(
                list(room.players),
                ServerEvent.GAME_START,
                self.game_service.build_full_state(room),
            )
        )
        self._start_ticking(room)
        logger.info(
            f"Room {room.id}: match started with {len(room.players)} players, "
            f"{len(room.bots)} bots"
        )

    def _reset_match(self, room: Room, outbox: List[OutboundMessage]):
        self._cancel_tasks(room)
        self.game_service.reset_match(room, self.clock())
        outbox.append(
            OutboundMessage(
                list(room.players),
                ServerEvent.GAME_RESTARTED,
                self.game_service.build_full_state(room),
            )
        )
        self._start_ticking(room)
        logger.info(f"Room {room.id}: match restarted")

    def _start_ticking(self, room: Room):
        room.tasks["tick"] = asyncio.create_task(self._run_ticks(room, room.epoch))

    async def _run_ticks(self, room: Room, epoch: int):
        interval = self.tick_interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            async with room.lock:
                if not self._is_current(room, epoch) or room.phase != Phase.RUNNING:
                    return
                try:
                    events = self.game_service.tick(room, self.clock())
                except Exception:
                    logger.exception(f"Room {room.id}: tick failed")
                    continue

                recipients = list(room.players)
                outbox = [OutboundMessage(recipients, event, payload) for event, payload in events]
                ended = room.phase == Phase.ENDED
                if ended:
                    room.tasks.pop("tick", None)
                    room.tasks["restart"] = asyncio.create_task(self._restart_later(room, epoch))

            await self._flush(outbox)
            if ended:
                return

    async def _restart_later(self, room: Room, epoch: int):
        await asyncio.sleep(self.restart_delay)
        outbox: List[OutboundMessage] = []
        async with room.lock:
            if not self._is_current(room, epoch) or room.phase != Phase.ENDED:
                return
            self._reset_match(room, outbox)
        await self._flush(outbox)

    async def _flush(self, outbox: List[OutboundMessage]):
        for message in outbox:
            if message.recipients:
                await self.transport.broadcast(message.recipients, message.event, message.payload)
