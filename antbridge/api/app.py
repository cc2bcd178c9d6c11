"""
FastAPI Application - REST API for game clients.

Endpoints:
    POST   /api/v1/games                      Create game lobby
    GET    /api/v1/games                      List active games
    GET    /api/v1/games/{id}                 Get lobby/board summary
    DELETE /api/v1/games/{id}                 Remove a game
    POST   /api/v1/games/{id}/join            Take a seat
    POST   /api/v1/games/{id}/ready           Toggle ready flag
    POST   /api/v1/games/{id}/start           Start once everyone is ready
    POST   /api/v1/games/{id}/commands        Submit a player command
    GET    /api/v1/games/{id}/state           Full state snapshot
    GET    /api/v1/games/{id}/legal-actions   Commands available to a player
    WS     /api/v1/games/{id}/ws              Snapshot after every accepted command

The server is the single authority: clients send commands, never state.
Request and response bodies are the Pydantic models in `schemas`.

Run with: uvicorn antbridge.api.app:create_app --factory
"""

from typing import Optional, Union
import json
import logging

from ..config import Settings, load_catalog_from_settings

logger = logging.getLogger(__name__)


def create_app(service=None, settings: Optional[Settings] = None):
    """
    Build the FastAPI app around an APIService.

    Args:
        service: APIService to route to. A fresh one over the configured
            catalog is created when omitted.
        settings: Settings for CORS and the catalog path. Read from the
            environment when omitted.
    """
    try:
        from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install 'antbridge[api]'"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateGameRequest,
        JoinGameRequest,
        ReadyRequest,
        StartGameRequest,
        CommandRequest,
        # Response models
        GameResponse,
        CommandResponse,
        StateResponse,
        LegalActionsResponse,
        ErrorResponse,
        GameListResponse,
        EndGameResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )
    from ..session import SessionManager
    from .. import __version__

    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Ant Bridge API",
        description="""
Authoritative rules server for the Ant Bridge card game.

## Flow

1. `POST /games` creates a lobby, `POST /join` seats players
2. Every player `POST /ready`, then `POST /start`
3. Players `POST /commands`; the server validates and applies them in order
4. Clients follow `WS /ws` for a fresh snapshot after every accepted command

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist |
| `LOBBY_ERROR` | Join/ready/start not allowed now |
| `COMMAND_REJECTED` | The engine refused the command |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    if service is None:
        service = APIService(session_manager=SessionManager(load_catalog_from_settings(settings)))
    api_service = service

    # game_id -> open snapshot sockets
    subscribers: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Helpers
    # =========================================================================

    def error_json(error: ErrorResponse) -> JSONResponse:
        """404 for unknown games, 400 for everything else."""
        status_code = 404 if error.error_code == ErrorCode.GAME_NOT_FOUND else 400
        return JSONResponse(status_code=status_code, content=error.model_dump(mode="json"))

    def prune_sessions():
        removed = api_service.session_manager.cleanup_stale_sessions(settings.session_ttl)
        for game_id in removed:
            subscribers.pop(game_id, None)
        if removed:
            logger.info("Pruned %d stale game(s)", len(removed))

    def snapshot_message(game_id: str) -> dict:
        state = api_service.get_state(game_id)
        if isinstance(state, ErrorResponse):
            return {"type": "error", "payload": {"message": state.error}}
        return {"type": "state_update", "version": state.version, "payload": state.state}

    async def broadcast_state(game_id: str):
        """Push the current snapshot to every subscriber, dropping closed sockets."""
        message = snapshot_message(game_id)
        if message["type"] != "state_update":
            return
        for socket in list(subscribers.get(game_id, [])):
            try:
                await socket.send_json(message)
            except Exception:
                logger.debug("Dropping closed socket for game %s", game_id)
                if socket in subscribers.get(game_id, []):
                    subscribers[game_id].remove(socket)

    # =========================================================================
    # Lobby Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Create a game lobby",
    )
    async def create_game(request: CreateGameRequest) -> Union[GameResponse, JSONResponse]:
        """Create a lobby, optionally seating players in order."""
        prune_sessions()
        response = api_service.create_game(request)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        return response

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List active games",
    )
    async def list_games() -> GameListResponse:
        """List all games in the lobby or in progress."""
        prune_sessions()
        games = api_service.list_games()
        return GameListResponse(games=games, count=len(games))

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game summary",
    )
    async def get_game(game_id: str) -> Union[GameResponse, JSONResponse]:
        response = api_service.get_game(game_id)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        return response

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="Remove a game",
    )
    async def end_game(
        game_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndGameResponse:
        success = api_service.end_game(game_id, reason)
        subscribers.pop(game_id, None)
        return EndGameResponse(success=success, game_id=game_id)

    @app.post(
        "/api/v1/games/{game_id}/join",
        response_model=GameResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Take a seat",
    )
    async def join_game(game_id: str, request: JoinGameRequest) -> Union[GameResponse, JSONResponse]:
        response = api_service.join_game(game_id, request)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        return response

    @app.post(
        "/api/v1/games/{game_id}/ready",
        response_model=GameResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Set ready flag",
    )
    async def set_ready(game_id: str, request: ReadyRequest) -> Union[GameResponse, JSONResponse]:
        response = api_service.set_ready(game_id, request)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        return response

    @app.post(
        "/api/v1/games/{game_id}/start",
        response_model=GameResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Start the game",
    )
    async def start_game(
        game_id: str, request: Optional[StartGameRequest] = None,
    ) -> Union[GameResponse, JSONResponse]:
        """Run setup once every seated player is ready."""
        response = api_service.start_game(game_id, request)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        await broadcast_state(game_id)
        return response

    # =========================================================================
    # Play Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/commands",
        response_model=CommandResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Submit a player command",
    )
    async def submit_command(game_id: str, request: CommandRequest) -> Union[CommandResponse, JSONResponse]:
        """
        Validate and apply one command.

        Rejected commands return 400 with the engine's reason; the state
        is unchanged.
        """
        response = api_service.submit_command(game_id, request)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        if not response.success:
            return error_json(ErrorResponse(
                error=response.error or "Command rejected",
                error_code=ErrorCode.COMMAND_REJECTED,
                details={"command": request.command.value, "engine_error_code": response.error_code},
            ))
        await broadcast_state(game_id)
        return response

    @app.get(
        "/api/v1/games/{game_id}/state",
        response_model=StateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Full state snapshot",
    )
    async def get_state(game_id: str) -> Union[StateResponse, JSONResponse]:
        response = api_service.get_state(game_id)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        return response

    @app.get(
        "/api/v1/games/{game_id}/legal-actions",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Commands available to a player",
    )
    async def get_legal_actions(
        game_id: str,
        player_id: str = Query(..., description="Player to list commands for"),
    ) -> Union[LegalActionsResponse, JSONResponse]:
        response = api_service.legal_actions(game_id, player_id)
        if isinstance(response, ErrorResponse):
            return error_json(response)
        return response

    # =========================================================================
    # Snapshot stream
    # =========================================================================

    @app.websocket("/api/v1/games/{game_id}/ws")
    async def snapshot_stream(websocket: WebSocket, game_id: str):
        """
        Stream board snapshots for one game.

        The server sends the current snapshot on connect and a fresh
        `state_update` after every accepted command. Clients may send
        `{"type": "ping"}` and get `{"type": "pong"}` back; anything that
        is not JSON is answered with an `error` message.
        """
        await websocket.accept()
        subscribers.setdefault(game_id, []).append(websocket)

        try:
            await websocket.send_json(snapshot_message(game_id))
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    await websocket.send_json({"type": "error", "payload": {"message": "Invalid JSON"}})
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})
        except WebSocketDisconnect:
            logger.debug("Snapshot stream for game %s closed", game_id)
        finally:
            if websocket in subscribers.get(game_id, []):
                subscribers[game_id].remove(websocket)

    # =========================================================================
    # System
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Liveness probe",
    )
    async def health() -> HealthResponse:
        return HealthResponse(status="healthy", service="antbridge", version=__version__)

    @app.get("/", tags=["System"], summary="Service info")
    async def index():
        return {
            "name": "Ant Bridge API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
