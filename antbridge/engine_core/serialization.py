"""
Serialization - Transport-safe snapshots of GameState.

The wire document is camelCase and mirrors GameState. Key-value stores
used for replication cannot tell an empty list from an absent value and
may turn lists into objects with numeric keys, so loading normalizes:

- ordered collections: null / absent -> [], {"0": a, "1": b} -> [a, b]
- constructionZone entries: null -> dropped, numeric-keyed object -> list,
  anything else unrecoverable -> []
- constructionZone itself arriving as an array has lost its objective ids:
  ConstructionZoneDataLossError, never a guess

Legacy single-slot pending keys (pendingScout, pendingDiscard,
pendingSabotage, pendingTrash) are accepted and become queue entries.
"""

from __future__ import annotations
from typing import Annotated, Any, Optional
import json
import logging
import uuid

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from .state import (
    FeedEvent,
    GameState,
    GameStatus,
    PendingEvent,
    PendingEventKind,
    PlayerBonuses,
    PlayerState,
    TurnPhase,
)

logger = logging.getLogger(__name__)


class StateLoadError(Exception):
    """Raised when a serialized state cannot be loaded."""


class ConstructionZoneDataLossError(StateLoadError):
    """A constructionZone arrived as an array; its objective ids are gone."""

    def __init__(self, player_id: str | None = None):
        self.player_id = player_id
        super().__init__(
            f"constructionZone for player {player_id} degraded into an array - "
            "objective ids lost"
        )


def coerce_list(value: Any) -> list:
    """Turn null / numeric-keyed objects back into ordered lists."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [item for item in value if item is not None]
    if isinstance(value, dict):
        try:
            keys = sorted(value, key=int)
        except (TypeError, ValueError):
            raise ValueError("expected a list or an object with numeric keys") from None
        return [value[k] for k in keys if value[k] is not None]
    raise ValueError(f"expected a list, got {type(value).__name__}")


IdList = Annotated[list[str], BeforeValidator(coerce_list)]


def _coerce_zone_entry(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [item for item in value if item is not None]
    if isinstance(value, dict):
        try:
            return coerce_list(value)
        except ValueError:
            return []
    return []


# =============================================================================
# Wire Models
# =============================================================================

class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BonusesWire(WireModel):
    resources_per_turn: int = Field(0, alias="resourcesPerTurn")
    defense_bonus: int = Field(0, alias="defenseBonus")
    vp_multiplier: int = Field(1, alias="vpMultiplier")


class PlayerWire(WireModel):
    id: str
    name: str = ""
    deck: IdList = Field(default_factory=list)
    hand: IdList = Field(default_factory=list)
    discard: IdList = Field(default_factory=list)
    construction_zone: dict[str, list[str]] = Field(default_factory=dict, alias="constructionZone")
    completed_objectives: IdList = Field(default_factory=list, alias="completedObjectives")
    resources: int = 0
    attack_power: int = Field(0, alias="attackPower")
    vp: int = 0
    bonuses: BonusesWire = Field(default_factory=BonusesWire)
    ready: bool = False

    @field_validator("construction_zone", mode="before")
    @classmethod
    def _normalize_zone(cls, value: Any, info) -> dict[str, list[str]]:
        if value is None:
            return {}
        if isinstance(value, (list, tuple)):
            raise ConstructionZoneDataLossError((info.data or {}).get("id"))
        if not isinstance(value, dict):
            return {}
        return {
            str(objective_id): _coerce_zone_entry(ants)
            for objective_id, ants in value.items()
            if ants is not None
        }

    @field_validator("bonuses", mode="before")
    @classmethod
    def _default_bonuses(cls, value: Any) -> Any:
        return value if value is not None else {}


class PendingEventWire(WireModel):
    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex, alias="eventId")
    kind: PendingEventKind
    player_id: str = Field(alias="playerId")
    source_player_id: Optional[str] = Field(None, alias="sourcePlayerId")
    count: int = 1
    candidates: IdList = Field(default_factory=list)
    source_card_id: Optional[str] = Field(None, alias="sourceCardId")


class FeedEventWire(WireModel):
    event_type: str = Field(alias="type")
    player_id: Optional[str] = Field(None, alias="playerId")
    player_name: Optional[str] = Field(None, alias="playerName")
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: float = 0.0

    @field_validator("data", mode="before")
    @classmethod
    def _default_data(cls, value: Any) -> Any:
        return value if value is not None else {}


LEGACY_PENDING_KEYS = {
    "pendingScout": PendingEventKind.SCOUT,
    "pendingDiscard": PendingEventKind.DISCARD,
    "pendingSabotage": PendingEventKind.SABOTAGE,
    "pendingTrash": PendingEventKind.TRASH,
}


class GameStateWire(WireModel):
    id: str
    players: dict[str, PlayerWire] = Field(default_factory=dict)
    current_player: Optional[str] = Field(None, alias="currentPlayer")
    turn_phase: TurnPhase = Field(TurnPhase.ACTION, alias="turnPhase")
    turn_number: int = Field(0, alias="turnNumber")
    trade_row: IdList = Field(default_factory=list, alias="tradeRow")
    market_deck: IdList = Field(default_factory=list, alias="marketDeck")
    construction_row: IdList = Field(default_factory=list, alias="constructionRow")
    construction_deck: IdList = Field(default_factory=list, alias="constructionDeck")
    objectives_by_tier: dict[int, IdList] = Field(default_factory=dict, alias="objectivesByTier")
    current_tier: int = Field(1, alias="currentTier")
    status: GameStatus = GameStatus.WAITING
    winner: Optional[str] = None
    started_at: Optional[float] = Field(None, alias="startedAt")
    final_scores: dict[str, int] = Field(default_factory=dict, alias="finalScores")
    pending_events: list[PendingEventWire] = Field(default_factory=list, alias="pendingEvents")
    feed: list[FeedEventWire] = Field(default_factory=list)
    random_seed: Optional[int] = Field(None, alias="randomSeed")

    @field_validator("players", "final_scores", mode="before")
    @classmethod
    def _null_mapping(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("objectives_by_tier", mode="before")
    @classmethod
    def _tiers(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, (list, tuple)):
            # A tier object stored as an array keeps a null at index 0
            offset = 0 if value and value[0] is None else 1
            return {index + offset: ids for index, ids in enumerate(value) if ids is not None}
        return value

    @field_validator("pending_events", "feed", mode="before")
    @classmethod
    def _event_lists(cls, value: Any) -> Any:
        return coerce_list(value)


# =============================================================================
# Serialize
# =============================================================================

def serialize_state(state: GameState) -> dict[str, Any]:
    """Convert a GameState to its camelCase wire document."""
    return {
        "id": state.game_id,
        "players": {pid: _serialize_player(p) for pid, p in state.players.items()},
        "currentPlayer": state.current_player,
        "turnPhase": state.turn_phase.value,
        "turnNumber": state.turn_number,
        "tradeRow": list(state.trade_row),
        "marketDeck": list(state.market_deck),
        "constructionRow": list(state.construction_row),
        "constructionDeck": list(state.construction_deck),
        "objectivesByTier": {str(tier): list(ids) for tier, ids in state.objectives_by_tier.items()},
        "currentTier": state.current_tier,
        "status": state.status.value,
        "winner": state.winner,
        "startedAt": state.started_at,
        "finalScores": dict(state.final_scores),
        "pendingEvents": [_serialize_event(e) for e in state.pending_events],
        "feed": [_serialize_feed_event(e) for e in state.feed],
        "randomSeed": state.random_seed,
    }


def _serialize_player(player: PlayerState) -> dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "deck": list(player.deck),
        "hand": list(player.hand),
        "discard": list(player.discard),
        "constructionZone": {oid: list(ants) for oid, ants in player.construction_zone.items()},
        "completedObjectives": list(player.completed_objectives),
        "resources": player.resources,
        "attackPower": player.attack_power,
        "vp": player.vp,
        "bonuses": {
            "resourcesPerTurn": player.bonuses.resources_per_turn,
            "defenseBonus": player.bonuses.defense_bonus,
            "vpMultiplier": player.bonuses.vp_multiplier,
        },
        "ready": player.ready,
    }


def _serialize_event(event: PendingEvent) -> dict[str, Any]:
    return {
        "eventId": event.event_id,
        "kind": event.kind.value,
        "playerId": event.player_id,
        "sourcePlayerId": event.source_player_id,
        "count": event.count,
        "candidates": list(event.candidates),
        "sourceCardId": event.source_card_id,
    }


def _serialize_feed_event(event: FeedEvent) -> dict[str, Any]:
    return {
        "type": event.event_type,
        "playerId": event.player_id,
        "playerName": event.player_name,
        "data": dict(event.data),
        "timestamp": event.timestamp,
    }


# =============================================================================
# Load
# =============================================================================

def load_state(data: dict[str, Any]) -> GameState:
    """
    Rebuild a GameState from a wire document.

    Raises ConstructionZoneDataLossError when a constructionZone arrived
    as an array, StateLoadError for any other malformed document.
    """
    if not isinstance(data, dict):
        raise StateLoadError(f"State document must be an object, got {type(data).__name__}")

    document = dict(data)
    legacy = _legacy_pending(document)

    try:
        wire = GameStateWire.model_validate(document)
    except ValidationError as e:
        logger.error("Rejected state document: %s", e)
        raise StateLoadError(str(e)) from e

    state = GameState(
        game_id=wire.id,
        players={pid: _load_player(pid, p) for pid, p in wire.players.items()},
        current_player=wire.current_player,
        turn_phase=wire.turn_phase,
        turn_number=wire.turn_number,
        trade_row=list(wire.trade_row),
        market_deck=list(wire.market_deck),
        construction_row=list(wire.construction_row),
        construction_deck=list(wire.construction_deck),
        objectives_by_tier={tier: list(ids) for tier, ids in sorted(wire.objectives_by_tier.items())},
        current_tier=wire.current_tier,
        status=wire.status,
        winner=wire.winner,
        started_at=wire.started_at,
        final_scores=dict(wire.final_scores),
        pending_events=[_load_event(e) for e in wire.pending_events + legacy],
        feed=[
            FeedEvent(
                event_type=e.event_type,
                player_id=e.player_id,
                player_name=e.player_name,
                data=dict(e.data),
                timestamp=e.timestamp,
            )
            for e in wire.feed
        ],
        random_seed=wire.random_seed,
    )

    if state.current_player is not None and state.current_player not in state.players:
        raise StateLoadError(f"currentPlayer {state.current_player} is not a player")
    return state


def _load_player(player_id: str, wire: PlayerWire) -> PlayerState:
    return PlayerState(
        id=wire.id or player_id,
        name=wire.name,
        deck=list(wire.deck),
        hand=list(wire.hand),
        discard=list(wire.discard),
        construction_zone={oid: list(ants) for oid, ants in wire.construction_zone.items()},
        completed_objectives=list(wire.completed_objectives),
        resources=wire.resources,
        attack_power=wire.attack_power,
        vp=wire.vp,
        bonuses=PlayerBonuses(
            resources_per_turn=wire.bonuses.resources_per_turn,
            defense_bonus=wire.bonuses.defense_bonus,
            vp_multiplier=wire.bonuses.vp_multiplier,
        ),
        ready=wire.ready,
    )


def _load_event(wire: PendingEventWire) -> PendingEvent:
    return PendingEvent(
        kind=wire.kind,
        player_id=wire.player_id,
        source_player_id=wire.source_player_id or wire.player_id,
        count=wire.count,
        candidates=list(wire.candidates),
        source_card_id=wire.source_card_id,
        event_id=wire.event_id,
    )


def _legacy_pending(document: dict[str, Any]) -> list[PendingEventWire]:
    """Pop the old single-slot pending keys and convert them to queue entries."""
    events = []
    for key, kind in LEGACY_PENDING_KEYS.items():
        slot = document.pop(key, None)
        if not slot:
            continue
        try:
            events.append(PendingEventWire.model_validate({
                "eventId": slot.get("eventId") or uuid.uuid4().hex,
                "kind": kind.value,
                "playerId": slot.get("playerId"),
                "sourcePlayerId": slot.get("sourcePlayerId") or slot.get("attackerId"),
                "count": slot.get("count", 1),
                "candidates": slot.get("candidates", slot.get("cards")),
                "sourceCardId": slot.get("sourceCardId"),
            }))
        except (AttributeError, ValidationError) as e:
            raise StateLoadError(f"Malformed {key}: {e}") from e
    return events


def dumps_state(state: GameState, **kwargs) -> str:
    """Serialize a GameState to JSON text."""
    return json.dumps(serialize_state(state), **kwargs)


def loads_state(text: str | bytes) -> GameState:
    """Load a GameState from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StateLoadError(f"Invalid JSON: {e}") from e
    return load_state(data)
