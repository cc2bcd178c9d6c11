"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between game clients and the
authoritative session server. Game state snapshots use the camelCase
wire format from engine_core.serialization; everything else is
snake_case.

Error Codes:
- GAME_NOT_FOUND: Game does not exist or has been cleaned up
- LOBBY_ERROR: Join/ready/start not allowed right now
- COMMAND_REJECTED: The engine refused the command (see details)
- INVALID_COMMAND: Command is missing required fields
- VALIDATION_ERROR: Request body failed validation
- INTERNAL_ERROR: Unexpected server error
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class CommandType(str, Enum):
    """Commands a client can submit."""
    PLAY_CARD = "play_card"
    PLAY_CARDS = "play_cards"
    PLAY_FOR_ATTACK = "play_for_attack"
    PLACE_ANT = "place_ant"
    PLACE_ANTS = "place_ants"
    BUY_CARD = "buy_card"
    BUY_CARDS = "buy_cards"
    ATTACK_PLAYER = "attack_player"
    ATTACK_WITH_POWER = "attack_with_power"
    END_TURN = "end_turn"
    COMPLETE_SCOUT = "complete_scout"
    COMPLETE_SABOTAGE = "complete_sabotage"
    COMPLETE_DISCARD = "complete_discard"
    COMPLETE_TRASH = "complete_trash"
    CANCEL_SCOUT = "cancel_scout"
    RESOLVE_PENDING_DEFAULT = "resolve_pending_default"


class GameStatus(str, Enum):
    """Game status values."""
    WAITING = "waiting"
    ACTIVE = "active"
    FINISHED = "finished"


class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    LOBBY_ERROR = "LOBBY_ERROR"
    COMMAND_REJECTED = "COMMAND_REJECTED"
    INVALID_COMMAND = "INVALID_COMMAND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PendingEventInfo(BaseModel):
    """A choice a player still has to make."""
    event_id: str
    kind: str = Field(description="scout, discard, sabotage, trash")
    player_id: str
    source_player_id: str
    count: int = 1
    candidates: list[str] = Field(default_factory=list)


class PlayerSummary(BaseModel):
    """Public view of one player."""
    player_id: str
    name: str
    ready: bool = False
    is_current_turn: bool = False
    hand_count: int = 0
    deck_count: int = 0
    discard_count: int = 0
    resources: int = 0
    attack_power: int = 0
    vp: int = 0
    score: int = Field(0, description="vp times the vp multiplier")
    defense: int = 0
    construction_zone: dict[str, list[str]] = Field(default_factory=dict)
    completed_objectives: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


# =============================================================================
# Request Models
# =============================================================================

class JoinGameRequest(BaseModel):
    """Request to take a seat in the lobby."""
    player_id: str = Field(..., min_length=1, description="Caller's own player id")
    name: str = Field(..., min_length=1, description="Display name")


class CreateGameRequest(BaseModel):
    """Request to create a new game lobby."""
    game_id: Optional[str] = Field(None, description="Custom id (generated when omitted)")
    players: list[JoinGameRequest] = Field(
        default_factory=list, description="Players to seat immediately, in seating order"
    )


class ReadyRequest(BaseModel):
    """Request to toggle a player's ready flag."""
    player_id: str
    ready: bool = True


class StartGameRequest(BaseModel):
    """Request to start a lobby once everyone is ready."""
    seed: Optional[int] = Field(None, description="Seed for a reproducible game")


class CommandRequest(BaseModel):
    """
    One player command.

    Only the fields the command needs are read.
    """
    command: CommandType
    player_id: str = Field(..., description="Caller's own player id")
    card_id: Optional[str] = None
    card_ids: Optional[list[str]] = None
    target_player_id: Optional[str] = None
    objective_id: Optional[str] = None
    hand_indices: Optional[list[int]] = None
    trade_indices: Optional[list[int]] = None
    power: Optional[int] = None
    selection: Optional[list[str]] = None
    event_id: Optional[str] = None


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameResponse(BaseModel):
    """Lobby and board summary."""
    game_id: str
    status: GameStatus
    version: int = 0
    players: list[PlayerSummary] = Field(default_factory=list)
    current_player_id: Optional[str] = None
    turn_number: int = 0
    current_tier: int = 1
    trade_row: list[str] = Field(default_factory=list)
    construction_row: list[str] = Field(default_factory=list)
    market_deck_count: int = 0
    construction_deck_count: int = 0
    pending_events: list[PendingEventInfo] = Field(default_factory=list)
    winner: Optional[str] = None
    final_scores: dict[str, int] = Field(default_factory=dict)
    created_at: float = 0.0
    api_version: str = "v1"


class CommandResponse(BaseModel):
    """Outcome of a command."""
    success: bool
    game_id: str
    version: int
    command: CommandType
    error: Optional[str] = None
    error_code: Optional[str] = Field(None, description="Engine error code on failure")
    state_changes: list[str] = Field(default_factory=list)
    summary: dict[str, Any] = Field(default_factory=dict)
    pending_events: list[PendingEventInfo] = Field(default_factory=list)
    api_version: str = "v1"


class StateResponse(BaseModel):
    """Full serialized state snapshot."""
    game_id: str
    version: int
    state: dict[str, Any]
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    """Commands the player may submit right now."""
    game_id: str
    player_id: str
    actions: list[CommandRequest] = Field(default_factory=list)
    api_version: str = "v1"


class GameListResponse(BaseModel):
    """Response listing active games."""
    games: list[str]
    count: int


class EndGameResponse(BaseModel):
    """Response after removing a game."""
    success: bool
    game_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
