# server/main.py
"""Extraction Royale game server entry point."""

import sys

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from api.routes import GameAPI
from config.settings import HOST, LOG_LEVEL, PORT
from services.game_service import GameService
from services.room_service import RoomRegistry
from services.websocket_service import WebSocketService

logger.remove()
logger.add(sys.stderr, level=LOG_LEVEL)

# Initialize FastAPI app
app = FastAPI()

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your client URL
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services
game_service = GameService()
registry = RoomRegistry()
websocket_service = WebSocketService(registry, game_service)
room_manager = websocket_service.room_manager

# Include API routes
game_api = GameAPI(game_service, room_manager)
app.include_router(game_api.router)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Server listening on {HOST}:{PORT}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cancel every room's scheduled work."""
    await room_manager.shutdown()


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket_service.handle_connection(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
