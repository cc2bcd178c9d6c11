"""
Engine Core - Game state management, rules and command processing.

The engine is the runtime that:
1. Holds the GameState
2. Applies turn mechanics via Rules
3. Applies player commands via the reducer
4. Suspends and resumes interactive abilities as pending events
5. Serializes state for replication
"""

from .state import (
    GameState,
    GameStatus,
    TurnPhase,
    PlayerState,
    PlayerBonuses,
    PendingEvent,
    PendingEventKind,
    FeedEvent,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .rules import Rules
from .abilities import AbilityResolver, AbilityContext, CARD_OVERRIDES
from .reducer import Reducer, apply_action
from .action_generator import ActionGenerator, legal_actions, is_legal
from .serialization import (
    serialize_state,
    load_state,
    dumps_state,
    loads_state,
    StateLoadError,
    ConstructionZoneDataLossError,
)

__all__ = [
    "GameState",
    "GameStatus",
    "TurnPhase",
    "PlayerState",
    "PlayerBonuses",
    "PendingEvent",
    "PendingEventKind",
    "FeedEvent",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "Rules",
    "AbilityResolver",
    "AbilityContext",
    "CARD_OVERRIDES",
    "Reducer",
    "apply_action",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "serialize_state",
    "load_state",
    "dumps_state",
    "loads_state",
    "StateLoadError",
    "ConstructionZoneDataLossError",
]
