"""
Game State - The authoritative mutable snapshot of one game.

Design principles:
- Owned, not global: each process holds its own GameState and passes it
  explicitly into Rules and the Reducer
- Ids only: cards and objectives are referenced by catalog id
- Serializable: see serialization.py for the wire format
- Inspectable after the game: status FINISHED is terminal but the
  structure stays valid (final scoreboard)

Zone orientation: the top of every deck (player deck, market deck,
construction deck) is the END of the list.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
from typing import Any
import time
import uuid


class GameStatus(Enum):
    """Lifecycle of a game; transitions are one-way."""
    WAITING = "waiting"
    ACTIVE = "active"
    FINISHED = "finished"


class TurnPhase(Enum):
    """Informational turn phase."""
    ACTION = "action"
    BUY = "buy"
    CLEANUP = "cleanup"


class PendingEventKind(Enum):
    """Interactive abilities that wait for a player's choice."""
    SCOUT = "scout"
    DISCARD = "discard"
    SABOTAGE = "sabotage"
    TRASH = "trash"


@dataclass
class PlayerBonuses:
    """Permanent bonuses from scored objectives. Accumulate only."""
    resources_per_turn: int = 0
    defense_bonus: int = 0
    vp_multiplier: int = 1


@dataclass
class PlayerState:
    """
    State for a single player.

    construction_zone maps objective id -> ant card ids placed there by
    this player, in placement order.
    """
    id: str
    name: str
    deck: list[str] = field(default_factory=list)
    hand: list[str] = field(default_factory=list)
    discard: list[str] = field(default_factory=list)
    construction_zone: dict[str, list[str]] = field(default_factory=dict)
    completed_objectives: list[str] = field(default_factory=list)

    # Turn-scoped, zero outside the owner's turn
    resources: int = 0
    attack_power: int = 0

    vp: int = 0
    bonuses: PlayerBonuses = field(default_factory=PlayerBonuses)
    ready: bool = False

    @property
    def ant_count(self) -> int:
        """Total ants across every objective in progress."""
        return sum(len(ants) for ants in self.construction_zone.values())

    def all_ants(self) -> list[str]:
        """Every ant in the construction zone, objective by objective."""
        return [ant for ants in self.construction_zone.values() for ant in ants]


@dataclass
class PendingEvent:
    """
    A suspended interactive ability.

    player_id is the player who must choose; source_player_id is the
    player whose card created the event. For scout, candidates are the
    revealed cards (held outside the deck until resolved). For the other
    kinds, candidates are a snapshot taken at creation; resolution
    re-reads the live zones.
    """
    kind: PendingEventKind
    player_id: str
    source_player_id: str
    count: int = 1
    candidates: list[str] = field(default_factory=list)
    source_card_id: str | None = None
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class FeedEvent:
    """One activity-feed entry for a human-readable audit trail."""
    event_type: str
    player_id: str | None
    player_name: str | None
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through Rules and the Reducer.
    """
    game_id: str

    # Players, insertion order = seating order, fixed for the game
    players: dict[str, PlayerState] = field(default_factory=dict)
    current_player: str | None = None
    turn_phase: TurnPhase = TurnPhase.ACTION
    turn_number: int = 0

    # Shared zones
    trade_row: list[str] = field(default_factory=list)
    market_deck: list[str] = field(default_factory=list)
    construction_row: list[str] = field(default_factory=list)
    construction_deck: list[str] = field(default_factory=list)
    objectives_by_tier: dict[int, list[str]] = field(default_factory=dict)
    current_tier: int = 1

    status: GameStatus = GameStatus.WAITING
    winner: str | None = None
    started_at: float | None = None
    final_scores: dict[str, int] = field(default_factory=dict)

    # Per-player FIFO queues, kept in one list in creation order
    pending_events: list[PendingEvent] = field(default_factory=list)

    feed: list[FeedEvent] = field(default_factory=list)
    random_seed: int | None = None

    @classmethod
    def create(cls, game_id: str, players: list[tuple[str, str]]) -> GameState:
        """
        Create a game in WAITING status.

        players is a list of (player_id, name) in seating order; the first
        player moves first.
        """
        state = cls(game_id=game_id)
        for player_id, name in players:
            state.add_player(player_id, name)
        return state

    def add_player(self, player_id: str, name: str) -> PlayerState:
        """Seat a new player (lobby only)."""
        if player_id in self.players:
            raise ValueError(f"Player {player_id} already seated")
        player = PlayerState(id=player_id, name=name)
        self.players[player_id] = player
        if self.current_player is None:
            self.current_player = player_id
        return player

    @property
    def current(self) -> PlayerState | None:
        """Get the current player."""
        if self.current_player is None:
            return None
        return self.players.get(self.current_player)

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def seat_order(self) -> list[str]:
        return list(self.players)

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get player by ID."""
        return self.players.get(player_id)

    def next_player_id(self, player_id: str) -> str:
        """The next seat in fixed rotation order."""
        order = self.seat_order
        index = order.index(player_id)
        return order[(index + 1) % len(order)]

    def opponents_of(self, player_id: str) -> list[PlayerState]:
        """Every other player, in seating order."""
        return [p for pid, p in self.players.items() if pid != player_id]

    def objective_owner(self, objective_id: str) -> str | None:
        """The player whose construction zone holds this objective, if any."""
        for player_id, player in self.players.items():
            if objective_id in player.construction_zone:
                return player_id
        return None

    # ------------------------------------------------------------------
    # Pending events
    # ------------------------------------------------------------------

    def pending_for(self, player_id: str) -> list[PendingEvent]:
        """The player's pending events, oldest first."""
        return [e for e in self.pending_events if e.player_id == player_id]

    def next_pending(self, player_id: str) -> PendingEvent | None:
        """Head of the player's queue."""
        for event in self.pending_events:
            if event.player_id == player_id:
                return event
        return None

    def find_pending(self, event_id: str) -> PendingEvent | None:
        for event in self.pending_events:
            if event.event_id == event_id:
                return event
        return None

    def remove_pending(self, event: PendingEvent) -> None:
        self.pending_events = [e for e in self.pending_events if e.event_id != event.event_id]

    @property
    def has_pending(self) -> bool:
        return bool(self.pending_events)

    # ------------------------------------------------------------------
    # Feed
    # ------------------------------------------------------------------

    def add_feed_event(
        self,
        event_type: str,
        player_id: str | None,
        data: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> FeedEvent:
        """Append an activity-feed entry, dropping the oldest past limit."""
        player = self.players.get(player_id) if player_id else None
        event = FeedEvent(
            event_type=event_type,
            player_id=player_id,
            player_name=player.name if player else None,
            data=data or {},
        )
        self.feed.append(event)
        if limit is not None and len(self.feed) > limit:
            del self.feed[: len(self.feed) - limit]
        return event

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
