"""
Action Generator - Generates legal actions from a game state.

The action generator is used by:
1. UI to show available commands
2. Validation (is this action in legal_actions?)

Design: Generates Action objects, not just action types.
This ensures all generated actions are fully specified. Batch commands
are not enumerated; their single-card forms are.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from itertools import combinations

from ..catalog import Catalog
from ..config import RulesConfig, DEFAULT_RULES
from .action import Action
from .rules import Rules
from .state import GameState, GameStatus, PendingEvent, PendingEventKind


@dataclass
class ActionGenerator:
    """
    Generates legal actions for one player.

    Uses Rules predicates, so anything generated here passes the
    reducer's checks.
    """
    catalog: Catalog
    config: RulesConfig = DEFAULT_RULES
    rules: Rules = field(init=False)

    def __post_init__(self):
        self.rules = Rules(self.catalog, self.config)

    def generate(self, state: GameState, player_id: str) -> list[Action]:
        """
        Generate all legal actions for the player.

        A player with a pending event may only resolve it; otherwise turn
        commands are offered to the current player.
        """
        if state.status != GameStatus.ACTIVE or player_id not in state.players:
            return []

        event = state.next_pending(player_id)
        if event is not None:
            return self._generate_resolution_actions(state, event)

        if player_id != state.current_player:
            return []

        actions = []
        actions.extend(self._generate_play_actions(state, player_id))
        actions.extend(self._generate_place_actions(state, player_id))
        actions.extend(self._generate_buy_actions(state, player_id))
        actions.extend(self._generate_attack_actions(state, player_id))

        # End turn is always available
        actions.append(Action.end_turn(player_id))
        return actions

    def _generate_resolution_actions(self, state: GameState, event: PendingEvent) -> list[Action]:
        """One action per distinct valid selection for the head event."""
        player = state.players[event.player_id]
        if event.kind == PendingEventKind.SCOUT:
            candidates = list(event.candidates)
        elif event.kind == PendingEventKind.SABOTAGE:
            candidates = player.all_ants()
        elif event.kind == PendingEventKind.DISCARD:
            candidates = list(player.hand)
        else:
            candidates = player.hand + player.discard

        if event.kind == PendingEventKind.TRASH:
            sizes = range(0, min(event.count, len(candidates)) + 1)
        else:
            sizes = [min(event.count, len(candidates))]

        factory = {
            PendingEventKind.SCOUT: Action.complete_scout,
            PendingEventKind.SABOTAGE: Action.complete_sabotage,
            PendingEventKind.DISCARD: Action.complete_discard,
            PendingEventKind.TRASH: Action.complete_trash,
        }[event.kind]

        actions = []
        seen: set[tuple[str, ...]] = set()
        for size in sizes:
            for combo in combinations(candidates, size):
                key = tuple(sorted(combo))
                if key in seen:
                    continue
                seen.add(key)
                actions.append(factory(event.player_id, list(combo), event.event_id))

        if event.kind == PendingEventKind.SCOUT:
            actions.append(Action.cancel_scout(event.player_id, event.event_id))
        return actions

    def _generate_play_actions(self, state: GameState, player_id: str) -> list[Action]:
        """Play for resources, and for attack where the card has attack."""
        player = state.players[player_id]
        actions = []
        for card_id in dict.fromkeys(player.hand):
            card = self.catalog.get_card(card_id)
            if card is None:
                continue
            actions.append(Action.play_card(player_id, card_id))
            if card.attack > 0:
                actions.append(Action.play_for_attack(player_id, card_id))
        return actions

    def _generate_place_actions(self, state: GameState, player_id: str) -> list[Action]:
        player = state.players[player_id]
        actions = []
        for objective_id in state.construction_row:
            ok, _ = self.rules.can_place_on_construction(state, player_id, objective_id)
            if not ok:
                continue
            for card_id in dict.fromkeys(player.hand):
                if self.catalog.get_card(card_id) is not None:
                    actions.append(Action.place_ant(player_id, card_id, objective_id))
        return actions

    def _generate_buy_actions(self, state: GameState, player_id: str) -> list[Action]:
        player = state.players[player_id]
        actions = []
        for card_id in dict.fromkeys(state.trade_row):
            card = self.catalog.get_card(card_id)
            if card is not None and self.rules.can_afford_card(player, card):
                actions.append(Action.buy_card(player_id, card_id))
        return actions

    def _generate_attack_actions(self, state: GameState, player_id: str) -> list[Action]:
        """Pool attacks, and one card attack using every attack card in hand."""
        player = state.players[player_id]
        attack_cards = []
        hand_power = 0
        for card_id in player.hand:
            card = self.catalog.get_card(card_id)
            if card is not None and card.attack > 0:
                attack_cards.append(card_id)
                hand_power += card.attack

        actions = []
        for target in state.opponents_of(player_id):
            if not target.construction_zone:
                continue
            if player.attack_power > 0:
                ok, _ = self.rules.can_attack(state, player_id, target.id, player.attack_power)
                if ok:
                    actions.append(Action.attack_with_power(player_id, target.id, player.attack_power))
            if attack_cards:
                ok, _ = self.rules.can_attack(state, player_id, target.id, hand_power)
                if ok:
                    actions.append(Action.attack_player(player_id, target.id, attack_cards))
        return actions


def legal_actions(catalog: Catalog, state: GameState, player_id: str) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    generator = ActionGenerator(catalog=catalog)
    return generator.generate(state, player_id)


def is_legal(catalog: Catalog, state: GameState, action: Action) -> bool:
    """Check if a specific action is legal."""
    for candidate in legal_actions(catalog, state, action.payload.player_id):
        if (
            candidate.action_type == action.action_type
            and candidate.payload.card_id == action.payload.card_id
            and candidate.payload.objective_id == action.payload.objective_id
            and candidate.payload.target_player_id == action.payload.target_player_id
        ):
            return True
    return False
