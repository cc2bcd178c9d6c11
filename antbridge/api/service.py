"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session and engine calls
2. Manages game sessions
3. Formats responses for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

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
    # Shared
    PlayerSummary,
    PendingEventInfo,
    # Enums
    CommandType,
    ErrorCode,
    GameStatus,
)
from ..catalog import default_catalog
from ..engine_core.action import Action, ActionPayload, ActionType
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.state import PendingEvent
from ..session import GameSession, SessionManager, SessionError, LobbyError

logger = logging.getLogger(__name__)


def command_to_action(request: CommandRequest) -> Action:
    """Translate an API command into an engine Action."""
    return Action(
        action_type=ActionType(request.command.value),
        payload=ActionPayload(
            player_id=request.player_id,
            card_id=request.card_id,
            card_ids=request.card_ids,
            target_player_id=request.target_player_id,
            objective_id=request.objective_id,
            hand_indices=request.hand_indices,
            trade_indices=request.trade_indices,
            power=request.power,
            selection=request.selection,
            event_id=request.event_id,
        ),
    )


def action_to_command(action: Action) -> CommandRequest:
    """Translate an engine Action back into an API command."""
    payload = action.payload
    return CommandRequest(
        command=CommandType(action.action_type.value),
        player_id=payload.player_id,
        card_id=payload.card_id,
        card_ids=payload.card_ids,
        target_player_id=payload.target_player_id,
        objective_id=payload.objective_id,
        hand_indices=payload.hand_indices,
        trade_indices=payload.trade_indices,
        power=payload.power,
        selection=payload.selection,
        event_id=payload.event_id,
    )


def _event_info(event: PendingEvent) -> PendingEventInfo:
    return PendingEventInfo(
        event_id=event.event_id,
        kind=event.kind.value,
        player_id=event.player_id,
        source_player_id=event.source_player_id,
        count=event.count,
        candidates=list(event.candidates),
    )


def _not_found(game_id: str) -> ErrorResponse:
    return ErrorResponse(error=f"Game {game_id} not found", error_code=ErrorCode.GAME_NOT_FOUND)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        game = service.create_game(CreateGameRequest(players=[...]))
        service.set_ready(game.game_id, ReadyRequest(player_id="p1"))
        service.start_game(game.game_id, StartGameRequest(seed=7))
        response = service.submit_command(game.game_id, CommandRequest(...))
    """
    session_manager: SessionManager = field(
        default_factory=lambda: SessionManager(default_catalog())
    )

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------

    def create_game(self, request: CreateGameRequest) -> GameResponse | ErrorResponse:
        """Create a lobby and seat any players given up front."""
        try:
            session = self.session_manager.create_session(request.game_id)
        except SessionError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.LOBBY_ERROR)

        try:
            for player in request.players:
                session.join(player.player_id, player.name)
        except LobbyError as e:
            self.session_manager.end_session(session.session_id, reason="invalid_lobby")
            return ErrorResponse(error=str(e), error_code=ErrorCode.LOBBY_ERROR)
        return self._game_response(session)

    def get_game(self, game_id: str) -> GameResponse | ErrorResponse:
        """Get lobby or board summary."""
        session = self.session_manager.get_session(game_id)
        if not session:
            return _not_found(game_id)
        return self._game_response(session)

    def join_game(self, game_id: str, request: JoinGameRequest) -> GameResponse | ErrorResponse:
        return self._lobby_call(game_id, lambda s: s.join(request.player_id, request.name))

    def set_ready(self, game_id: str, request: ReadyRequest) -> GameResponse | ErrorResponse:
        return self._lobby_call(game_id, lambda s: s.set_ready(request.player_id, request.ready))

    def start_game(self, game_id: str, request: StartGameRequest | None = None) -> GameResponse | ErrorResponse:
        """Start the game once every seated player is ready."""
        seed = request.seed if request else None
        return self._lobby_call(game_id, lambda s: s.start(seed=seed))

    def _lobby_call(self, game_id: str, call) -> GameResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return _not_found(game_id)
        try:
            call(session)
        except LobbyError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.LOBBY_ERROR)
        return self._game_response(session)

    def end_game(self, game_id: str, reason: str = "user_ended") -> bool:
        """Remove a game from memory."""
        return self.session_manager.end_session(game_id, reason)

    def list_games(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    def submit_command(self, game_id: str, request: CommandRequest) -> CommandResponse | ErrorResponse:
        """Apply a command through the game's authoritative session."""
        session = self.session_manager.get_session(game_id)
        if not session:
            return _not_found(game_id)

        result = session.submit(command_to_action(request))
        return CommandResponse(
            success=result.success,
            game_id=game_id,
            version=session.version,
            command=request.command,
            error=result.error,
            error_code=result.error_code.value if result.error_code else None,
            state_changes=result.state_changes,
            summary=result.summary,
            pending_events=[_event_info(e) for e in result.pending_events],
        )

    def get_state(self, game_id: str) -> StateResponse | ErrorResponse:
        """Full snapshot in the wire format."""
        session = self.session_manager.get_session(game_id)
        if not session:
            return _not_found(game_id)
        return StateResponse(game_id=game_id, version=session.version, state=session.snapshot())

    def legal_actions(self, game_id: str, player_id: str) -> LegalActionsResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return _not_found(game_id)
        generator = ActionGenerator(catalog=session.catalog, config=session.config)
        actions = generator.generate(session.state, player_id)
        return LegalActionsResponse(
            game_id=game_id,
            player_id=player_id,
            actions=[action_to_command(a) for a in actions],
        )

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _game_response(self, session: GameSession) -> GameResponse:
        state = session.state
        rules = session.reducer.rules
        players = [
            PlayerSummary(
                player_id=player.id,
                name=player.name,
                ready=player.ready,
                is_current_turn=(
                    state.status.value == "active" and player.id == state.current_player
                ),
                hand_count=len(player.hand),
                deck_count=len(player.deck),
                discard_count=len(player.discard),
                resources=player.resources,
                attack_power=player.attack_power,
                vp=player.vp,
                score=rules.calculate_vp(player),
                defense=rules.calculate_defense(player),
                construction_zone={oid: list(ants) for oid, ants in player.construction_zone.items()},
                completed_objectives=list(player.completed_objectives),
            )
            for player in state.players.values()
        ]
        return GameResponse(
            game_id=session.session_id,
            status=GameStatus(state.status.value),
            version=session.version,
            players=players,
            current_player_id=state.current_player,
            turn_number=state.turn_number,
            current_tier=state.current_tier,
            trade_row=list(state.trade_row),
            construction_row=list(state.construction_row),
            market_deck_count=len(state.market_deck),
            construction_deck_count=len(state.construction_deck),
            pending_events=[_event_info(e) for e in state.pending_events],
            winner=state.winner,
            final_scores=dict(state.final_scores),
            created_at=session.created_at,
        )
