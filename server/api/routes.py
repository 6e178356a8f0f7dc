# server/api/routes.py
"""API routes for the game server."""

from fastapi import APIRouter, HTTPException

from config.settings import get_game_config
from models.room import Phase
from services.game_service import GameService
from services.room_service import RoomManager


class GameAPI:
    """API routes for game-related endpoints."""

    def __init__(self, game_service: GameService, room_manager: RoomManager):
        self.game_service = game_service
        self.room_manager = room_manager
        self.router = APIRouter()
        self._setup_routes()

    def _setup_routes(self):
        """Set up all API routes."""

        @self.router.get("/")
        async def root():
            """Root endpoint."""
            return {"message": "Extraction Royale Server Running"}

        @self.router.get("/api/game/config")
        async def get_game_config_endpoint():
            """Get game configuration including world size, timings and limits."""
            return get_game_config()

        @self.router.get("/api/rooms")
        async def list_rooms():
            """Get a summary of every live room."""
            rooms = self.room_manager.registry.all_rooms()
            return {"rooms": [self.game_service.room_summary(room) for room in rooms]}

        @self.router.get("/api/game/stats")
        async def get_game_stats():
            """Get game statistics."""
            rooms = self.room_manager.registry.all_rooms()
            return {
                "totalRooms": len(rooms),
                "runningRooms": sum(1 for room in rooms if room.phase == Phase.RUNNING),
                "totalPlayers": sum(len(room.players) for room in rooms),
                "totalBots": sum(len(room.bots) for room in rooms),
                "totalZombies": sum(len(room.zombies) for room in rooms),
                "totalBullets": sum(len(room.bullets) for room in rooms),
            }

        @self.router.delete("/api/rooms/{room_id}")
        async def delete_room(room_id: str):
            """Tear down a room and cancel its scheduled work."""
            if not await self.room_manager.cleanup_room(room_id.upper()):
                raise HTTPException(status_code=404, detail="Room does not exist!")
            return {"roomId": room_id.upper(), "removed": True}
