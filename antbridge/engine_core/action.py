"""
Action System - Actions, payloads, and results.

Actions represent:
1. Turn commands (play, place, buy, attack, end turn)
2. Pending event resolutions (scout, sabotage, discard, trash)

All state changes flow through actions. Every action carries the acting
player's id; the reducer enforces turn and event ownership.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Turn commands
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

    # Pending event resolution
    COMPLETE_SCOUT = "complete_scout"
    COMPLETE_SABOTAGE = "complete_sabotage"
    COMPLETE_DISCARD = "complete_discard"
    COMPLETE_TRASH = "complete_trash"
    CANCEL_SCOUT = "cancel_scout"
    RESOLVE_PENDING_DEFAULT = "resolve_pending_default"


# Commands that only the current player may issue
TURN_ACTIONS = frozenset({
    ActionType.PLAY_CARD,
    ActionType.PLAY_CARDS,
    ActionType.PLAY_FOR_ATTACK,
    ActionType.PLACE_ANT,
    ActionType.PLACE_ANTS,
    ActionType.BUY_CARD,
    ActionType.BUY_CARDS,
    ActionType.ATTACK_PLAYER,
    ActionType.ATTACK_WITH_POWER,
    ActionType.END_TURN,
})

RESOLUTION_ACTIONS = frozenset({
    ActionType.COMPLETE_SCOUT,
    ActionType.COMPLETE_SABOTAGE,
    ActionType.COMPLETE_DISCARD,
    ActionType.COMPLETE_TRASH,
    ActionType.CANCEL_SCOUT,
    ActionType.RESOLVE_PENDING_DEFAULT,
})


class ErrorCode(str, Enum):
    """Machine-readable failure reasons."""
    INVALID_ACTION = "INVALID_ACTION"
    GAME_NOT_ACTIVE = "GAME_NOT_ACTIVE"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    CARD_NOT_IN_TRADE_ROW = "CARD_NOT_IN_TRADE_ROW"
    INVALID_INDEX = "INVALID_INDEX"
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"
    INSUFFICIENT_ATTACK = "INSUFFICIENT_ATTACK"
    OBJECTIVE_NOT_AVAILABLE = "OBJECTIVE_NOT_AVAILABLE"
    OBJECTIVE_CLAIMED = "OBJECTIVE_CLAIMED"
    OBJECTIVE_FULL = "OBJECTIVE_FULL"
    SELF_ATTACK = "SELF_ATTACK"
    ATTACK_TOO_WEAK = "ATTACK_TOO_WEAK"
    NO_TARGET_OBJECTIVE = "NO_TARGET_OBJECTIVE"
    NO_PENDING_EVENT = "NO_PENDING_EVENT"
    INVALID_SELECTION = "INVALID_SELECTION"
    PENDING_EVENT_BLOCKING = "PENDING_EVENT_BLOCKING"
    UNKNOWN_CARD = "UNKNOWN_CARD"
    UNKNOWN_OBJECTIVE = "UNKNOWN_OBJECTIVE"
    NO_HANDLER = "NO_HANDLER"
    HANDLER_ERROR = "HANDLER_ERROR"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types have different payload shapes.
    This is a generic container; validation happens in the reducer.
    """
    player_id: str | None = None
    card_id: str | None = None
    target_player_id: str | None = None
    objective_id: str | None = None

    # Batch commands
    card_ids: list[str] | None = None
    hand_indices: list[int] | None = None
    trade_indices: list[int] | None = None

    # attack_with_power
    power: int | None = None

    # Pending event resolution
    selection: list[str] | None = None
    event_id: str | None = None

    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are validated before application and applied atomically
    by the reducer.
    """
    action_type: ActionType
    payload: ActionPayload
    timestamp: float | None = None
    action_id: str | None = None

    @property
    def player_id(self) -> str | None:
        return self.payload.player_id

    @classmethod
    def play_card(cls, player_id: str, card_id: str) -> Action:
        """Factory for playing a card for resources."""
        return cls(ActionType.PLAY_CARD, ActionPayload(player_id=player_id, card_id=card_id))

    @classmethod
    def play_cards(cls, player_id: str, hand_indices: list[int]) -> Action:
        return cls(
            ActionType.PLAY_CARDS,
            ActionPayload(player_id=player_id, hand_indices=list(hand_indices)),
        )

    @classmethod
    def play_for_attack(cls, player_id: str, card_id: str) -> Action:
        """Factory for playing a card into the attack pool."""
        return cls(ActionType.PLAY_FOR_ATTACK, ActionPayload(player_id=player_id, card_id=card_id))

    @classmethod
    def place_ant(cls, player_id: str, card_id: str, objective_id: str) -> Action:
        return cls(
            ActionType.PLACE_ANT,
            ActionPayload(player_id=player_id, card_id=card_id, objective_id=objective_id),
        )

    @classmethod
    def place_ants(cls, player_id: str, hand_indices: list[int], objective_id: str) -> Action:
        return cls(
            ActionType.PLACE_ANTS,
            ActionPayload(
                player_id=player_id,
                hand_indices=list(hand_indices),
                objective_id=objective_id,
            ),
        )

    @classmethod
    def buy_card(cls, player_id: str, card_id: str) -> Action:
        """Factory for buying from the trade row."""
        return cls(ActionType.BUY_CARD, ActionPayload(player_id=player_id, card_id=card_id))

    @classmethod
    def buy_cards(
        cls, player_id: str, trade_indices: list[int], play_indices: list[int] | None = None,
    ) -> Action:
        """Factory for a batch buy that first plays hand cards for resources."""
        return cls(
            ActionType.BUY_CARDS,
            ActionPayload(
                player_id=player_id,
                trade_indices=list(trade_indices),
                hand_indices=list(play_indices or []),
            ),
        )

    @classmethod
    def attack_player(cls, player_id: str, target_player_id: str, card_ids: list[str]) -> Action:
        return cls(
            ActionType.ATTACK_PLAYER,
            ActionPayload(
                player_id=player_id,
                target_player_id=target_player_id,
                card_ids=list(card_ids),
            ),
        )

    @classmethod
    def attack_with_power(cls, player_id: str, target_player_id: str, power: int) -> Action:
        return cls(
            ActionType.ATTACK_WITH_POWER,
            ActionPayload(player_id=player_id, target_player_id=target_player_id, power=power),
        )

    @classmethod
    def end_turn(cls, player_id: str) -> Action:
        return cls(ActionType.END_TURN, ActionPayload(player_id=player_id))

    @classmethod
    def complete_scout(cls, player_id: str, selection: list[str], event_id: str | None = None) -> Action:
        return cls(
            ActionType.COMPLETE_SCOUT,
            ActionPayload(player_id=player_id, selection=list(selection), event_id=event_id),
        )

    @classmethod
    def complete_sabotage(cls, player_id: str, selection: list[str], event_id: str | None = None) -> Action:
        return cls(
            ActionType.COMPLETE_SABOTAGE,
            ActionPayload(player_id=player_id, selection=list(selection), event_id=event_id),
        )

    @classmethod
    def complete_discard(cls, player_id: str, selection: list[str], event_id: str | None = None) -> Action:
        return cls(
            ActionType.COMPLETE_DISCARD,
            ActionPayload(player_id=player_id, selection=list(selection), event_id=event_id),
        )

    @classmethod
    def complete_trash(cls, player_id: str, selection: list[str], event_id: str | None = None) -> Action:
        return cls(
            ActionType.COMPLETE_TRASH,
            ActionPayload(player_id=player_id, selection=list(selection), event_id=event_id),
        )

    @classmethod
    def cancel_scout(cls, player_id: str, event_id: str | None = None) -> Action:
        return cls(ActionType.CANCEL_SCOUT, ActionPayload(player_id=player_id, event_id=event_id))

    @classmethod
    def resolve_pending_default(cls, player_id: str) -> Action:
        """Factory for the stall-breaking fallback (disconnects, timeouts)."""
        return cls(ActionType.RESOLVE_PENDING_DEFAULT, ActionPayload(player_id=player_id))


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - The mutated state (if succeeded)
    - Error message and code (if failed)
    - Human-readable changes and a confirmation summary for the UI
    - Pending events the action created
    """
    success: bool
    state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)  # Human-readable changes
    summary: dict[str, Any] = field(default_factory=dict)  # resources_gained, vp_gained, ...

    pending_events: list[Any] = field(default_factory=list)  # PendingEvent

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code or ErrorCode.INVALID_ACTION)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        summary: dict[str, Any] | None = None,
        pending_events: list[Any] | None = None,
    ) -> ActionResult:
        """Create a success result with the state."""
        return cls(
            success=True,
            state=state,
            state_changes=changes or [],
            summary=summary or {},
            pending_events=pending_events or [],
        )
