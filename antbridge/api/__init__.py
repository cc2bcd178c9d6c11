"""
API Module - Client interface to authoritative game sessions.

Exposes the engine via REST and WebSocket. A client:
1. Creates or joins a game lobby
2. Marks itself ready, then the game starts
3. Submits commands on behalf of its own player
4. Receives a snapshot after every accepted command

FastAPI is optional; APIService works without it.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    JoinGameRequest,
    ReadyRequest,
    StartGameRequest,
    CommandRequest,
    # Responses
    GameResponse,
    CommandResponse,
    StateResponse,
    LegalActionsResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    PlayerSummary,
    PendingEventInfo,
    # Enums
    CommandType,
    ErrorCode,
)
from .service import APIService, command_to_action, action_to_command
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "JoinGameRequest",
    "ReadyRequest",
    "StartGameRequest",
    "CommandRequest",
    # Responses
    "GameResponse",
    "CommandResponse",
    "StateResponse",
    "LegalActionsResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "PlayerSummary",
    "PendingEventInfo",
    # Enums
    "CommandType",
    "ErrorCode",
    # Service
    "APIService",
    "command_to_action",
    "action_to_command",
    "create_app",
]
