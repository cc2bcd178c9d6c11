"""
Reducer - Applies actions to game state.

The reducer is the single point of player-driven state mutation.
All commands go through Reducer.apply() (or apply_action()).

Design principles:
- Validate, then commit: a failed command leaves the state untouched
- Expected failures are returned, never raised
- Batch commands resolve indices to card ids before removing anything
- Delegates turn mechanics to Rules and card abilities to AbilityResolver
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
import logging
import random

from ..catalog import AbilityKind, Catalog, CardDef, RewardType
from ..config import RulesConfig, DEFAULT_RULES
from .abilities import AbilityContext, AbilityResolver, CARD_OVERRIDES
from .action import Action, ActionType, ActionResult, ErrorCode, TURN_ACTIONS, RESOLUTION_ACTIONS
from .rules import Rules
from .state import GameState, GameStatus, PendingEventKind, PlayerState

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all game state is in GameState.
    The catalog provides card and objective definitions.
    """
    catalog: Catalog
    config: RulesConfig = DEFAULT_RULES
    rng: random.Random | None = None
    rules: Rules = field(init=False)
    abilities: AbilityResolver = field(init=False)

    def __post_init__(self):
        self.rules = Rules(self.catalog, self.config, self.rng or random.Random())
        self.abilities = AbilityResolver(self.rules)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the state or an error.
        """
        failure = self._validate_action(state, action)
        if failure:
            logger.warning(
                "Rejected %s from %s: %s",
                action.action_type.value, action.player_id, failure.error,
            )
            return failure

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                ErrorCode.NO_HANDLER,
            )

        try:
            result = handler(state, action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), ErrorCode.HANDLER_ERROR)

        if result.success:
            logger.info("%s: %s", action.action_type.value, "; ".join(result.state_changes) or "ok")
        elif result.error_code in (ErrorCode.UNKNOWN_CARD, ErrorCode.UNKNOWN_OBJECTIVE):
            logger.error("Catalog/state mismatch on %s: %s", action.action_type.value, result.error)
        else:
            logger.warning(
                "Rejected %s from %s: %s",
                action.action_type.value, action.player_id, result.error,
            )
        return result

    def _validate_action(self, state: GameState, action: Action) -> ActionResult | None:
        """
        Validate preconditions shared by every command.

        Returns a failure result if invalid, None if valid.
        """
        if state.status != GameStatus.ACTIVE:
            return ActionResult.failure(
                f"Game is {state.status.value} - no actions allowed",
                ErrorCode.GAME_NOT_ACTIVE,
            )

        player_id = action.payload.player_id
        if player_id is None or state.get_player(player_id) is None:
            return ActionResult.failure(f"Player {player_id} not found", ErrorCode.PLAYER_NOT_FOUND)

        if action.action_type in TURN_ACTIONS:
            if player_id != state.current_player:
                return ActionResult.failure(f"Not {player_id}'s turn", ErrorCode.NOT_YOUR_TURN)
            if self.config.strict_pending and state.pending_for(player_id):
                return ActionResult.failure(
                    "Resolve your pending choice first",
                    ErrorCode.PENDING_EVENT_BLOCKING,
                )

        if action.action_type in RESOLUTION_ACTIONS and not state.pending_for(player_id):
            return ActionResult.failure(
                f"{player_id} has nothing to resolve",
                ErrorCode.NO_PENDING_EVENT,
            )

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLAY_CARD: self._handle_play_card,
            ActionType.PLAY_CARDS: self._handle_play_cards,
            ActionType.PLAY_FOR_ATTACK: self._handle_play_for_attack,
            ActionType.PLACE_ANT: self._handle_place_ant,
            ActionType.PLACE_ANTS: self._handle_place_ants,
            ActionType.BUY_CARD: self._handle_buy_card,
            ActionType.BUY_CARDS: self._handle_buy_cards,
            ActionType.ATTACK_PLAYER: self._handle_attack_player,
            ActionType.ATTACK_WITH_POWER: self._handle_attack_with_power,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.COMPLETE_SCOUT: self._handle_complete,
            ActionType.COMPLETE_SABOTAGE: self._handle_complete,
            ActionType.COMPLETE_DISCARD: self._handle_complete,
            ActionType.COMPLETE_TRASH: self._handle_complete,
            ActionType.CANCEL_SCOUT: self._handle_cancel_scout,
            ActionType.RESOLVE_PENDING_DEFAULT: self._handle_resolve_default,
        }
        return handlers.get(action_type)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _card_in_hand(
        self, player: PlayerState, card_id: str | None,
    ) -> tuple[CardDef | None, ActionResult | None]:
        """Look up a hand card. Returns (card, failure)."""
        if not card_id or card_id not in player.hand:
            return None, ActionResult.failure(f"Card {card_id} not in hand", ErrorCode.CARD_NOT_IN_HAND)
        card = self.catalog.get_card(card_id)
        if card is None:
            return None, ActionResult.failure(f"Unknown card {card_id}", ErrorCode.UNKNOWN_CARD)
        return card, None

    def _resolve_indices(
        self, zone: list[str], indices: list[int] | None, label: str,
    ) -> tuple[list[str], ActionResult | None]:
        """Snapshot the card ids at the given indices before anything moves."""
        if not indices:
            return [], ActionResult.failure(f"No {label} cards selected", ErrorCode.INVALID_INDEX)
        if len(set(indices)) != len(indices):
            return [], ActionResult.failure(f"Duplicate {label} index", ErrorCode.INVALID_INDEX)
        for index in indices:
            if not isinstance(index, int) or index < 0 or index >= len(zone):
                return [], ActionResult.failure(f"Invalid {label} index {index}", ErrorCode.INVALID_INDEX)
        return [zone[i] for i in indices], None

    def _lookup_cards(self, card_ids: list[str]) -> tuple[list[CardDef], ActionResult | None]:
        cards = []
        for card_id in card_ids:
            card = self.catalog.get_card(card_id)
            if card is None:
                return [], ActionResult.failure(f"Unknown card {card_id}", ErrorCode.UNKNOWN_CARD)
            cards.append(card)
        return cards, None

    def _projected_resources(self, card: CardDef) -> int:
        """Resources a card yields when played."""
        override = CARD_OVERRIDES.get(card.id)
        return (
            card.resources
            + card.ability_count(AbilityKind.RESOURCES)
            + (override.resources if override else 0)
        )

    def _feed(self, state: GameState, event_type: str, player_id: str | None, data: dict) -> None:
        state.add_feed_event(event_type, player_id, data, limit=self.config.feed_limit)

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    def _play_for_resources(self, state: GameState, player: PlayerState, card: CardDef):
        """Commit one card played for resources. Card must be in hand."""
        player.hand.remove(card.id)
        player.resources += card.resources
        outcome = self.abilities.execute(state, player.id, card, AbilityContext.PLAY)
        player.discard.append(card.id)
        gained = card.resources + outcome.resources_gained
        self._feed(state, "card_played", player.id, {"card": card.id, "resources": gained})
        return gained, outcome

    def _handle_play_card(self, state: GameState, action: Action) -> ActionResult:
        """Handle playing a card for resources."""
        player = state.get_player(action.payload.player_id)
        card, failure = self._card_in_hand(player, action.payload.card_id)
        if failure:
            return failure

        gained, outcome = self._play_for_resources(state, player, card)
        return ActionResult.success_with_state(
            state,
            changes=[f"{player.name} played {card.name} for {gained} resource(s)", *outcome.changes],
            summary={"resources_gained": gained, "cards_drawn": len(outcome.cards_drawn)},
            pending_events=outcome.events,
        )

    def _handle_play_cards(self, state: GameState, action: Action) -> ActionResult:
        """Handle playing several hand cards (by index) for resources."""
        player = state.get_player(action.payload.player_id)
        card_ids, failure = self._resolve_indices(player.hand, action.payload.hand_indices, "hand")
        if failure:
            return failure
        cards, failure = self._lookup_cards(card_ids)
        if failure:
            return failure

        total = 0
        changes: list[str] = []
        events = []
        drawn = 0
        for card in cards:
            gained, outcome = self._play_for_resources(state, player, card)
            total += gained
            drawn += len(outcome.cards_drawn)
            changes.append(f"{player.name} played {card.name} for {gained} resource(s)")
            changes.extend(outcome.changes)
            events.extend(outcome.events)

        return ActionResult.success_with_state(
            state,
            changes=changes,
            summary={"resources_gained": total, "cards_played": len(cards), "cards_drawn": drawn},
            pending_events=events,
        )

    def _handle_play_for_attack(self, state: GameState, action: Action) -> ActionResult:
        """Handle playing a card into the attack power pool."""
        player = state.get_player(action.payload.player_id)
        card, failure = self._card_in_hand(player, action.payload.card_id)
        if failure:
            return failure

        player.hand.remove(card.id)
        player.attack_power += card.attack
        outcome = self.abilities.execute(state, player.id, card, AbilityContext.ATTACK_POOL)
        player.discard.append(card.id)
        self._feed(state, "card_played", player.id, {"card": card.id, "attack": card.attack})

        return ActionResult.success_with_state(
            state,
            changes=[
                f"{player.name} played {card.name} for {card.attack} attack "
                f"(pool {player.attack_power})",
                *outcome.changes,
            ],
            summary={"attack_gained": card.attack, "attack_power": player.attack_power},
            pending_events=outcome.events,
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _check_placement(
        self, state: GameState, player_id: str, objective_id: str | None, count: int,
    ) -> ActionResult | None:
        if not objective_id or objective_id not in state.construction_row:
            return ActionResult.failure(
                f"Objective {objective_id} is not in the construction row",
                ErrorCode.OBJECTIVE_NOT_AVAILABLE,
            )
        if self.catalog.get_objective(objective_id) is None:
            return ActionResult.failure(f"Unknown objective {objective_id}", ErrorCode.UNKNOWN_OBJECTIVE)
        owner = state.objective_owner(objective_id)
        if owner is not None and owner != player_id:
            return ActionResult.failure(
                f"{state.players[owner].name} is already building this objective",
                ErrorCode.OBJECTIVE_CLAIMED,
            )
        ok, reason = self.rules.can_place_on_construction(state, player_id, objective_id, extra=count)
        if not ok:
            return ActionResult.failure(reason, ErrorCode.OBJECTIVE_FULL)
        return None

    def _place(self, state: GameState, player: PlayerState, card: CardDef, objective_id: str):
        player.hand.remove(card.id)
        player.construction_zone.setdefault(objective_id, []).append(card.id)
        outcome = self.abilities.execute(state, player.id, card, AbilityContext.PLACE)
        self._feed(state, "ant_placed", player.id, {"card": card.id, "objective": objective_id})
        return outcome

    def _handle_place_ant(self, state: GameState, action: Action) -> ActionResult:
        """Handle placing one ant on the visible objective."""
        player = state.get_player(action.payload.player_id)
        objective_id = action.payload.objective_id
        card, failure = self._card_in_hand(player, action.payload.card_id)
        if failure:
            return failure
        failure = self._check_placement(state, player.id, objective_id, 1)
        if failure:
            return failure

        outcome = self._place(state, player, card, objective_id)
        objective = self.catalog.get_objective(objective_id)
        placed = len(player.construction_zone[objective_id])
        return ActionResult.success_with_state(
            state,
            changes=[
                f"{player.name} placed {card.name} on {objective.name} "
                f"({placed}/{objective.ants_required})",
                *outcome.changes,
            ],
            summary={"objective": objective_id, "ants_placed": placed},
            pending_events=outcome.events,
        )

    def _handle_place_ants(self, state: GameState, action: Action) -> ActionResult:
        """Handle placing several hand cards (by index) on the visible objective."""
        player = state.get_player(action.payload.player_id)
        objective_id = action.payload.objective_id
        card_ids, failure = self._resolve_indices(player.hand, action.payload.hand_indices, "hand")
        if failure:
            return failure
        cards, failure = self._lookup_cards(card_ids)
        if failure:
            return failure
        failure = self._check_placement(state, player.id, objective_id, len(cards))
        if failure:
            return failure

        changes: list[str] = []
        events = []
        for card in cards:
            outcome = self._place(state, player, card, objective_id)
            changes.append(f"{player.name} placed {card.name}")
            changes.extend(outcome.changes)
            events.extend(outcome.events)

        return ActionResult.success_with_state(
            state,
            changes=changes,
            summary={"objective": objective_id, "ants_placed": len(player.construction_zone[objective_id])},
            pending_events=events,
        )

    # ------------------------------------------------------------------
    # Buy
    # ------------------------------------------------------------------

    def _buy(self, state: GameState, player: PlayerState, card: CardDef) -> None:
        player.resources -= card.cost
        state.trade_row.remove(card.id)
        player.discard.append(card.id)
        player.vp += card.vp
        self._feed(state, "card_bought", player.id, {"card": card.id, "cost": card.cost})

    def _handle_buy_card(self, state: GameState, action: Action) -> ActionResult:
        """Handle buying one card from the trade row."""
        player = state.get_player(action.payload.player_id)
        card_id = action.payload.card_id
        if not card_id or card_id not in state.trade_row:
            return ActionResult.failure(f"Card {card_id} not in trade row", ErrorCode.CARD_NOT_IN_TRADE_ROW)
        card = self.catalog.get_card(card_id)
        if card is None:
            return ActionResult.failure(f"Unknown card {card_id}", ErrorCode.UNKNOWN_CARD)
        if not self.rules.can_afford_card(player, card):
            return ActionResult.failure(
                f"Not enough resources: {card.name} costs {card.cost}, you have {player.resources}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        self._buy(state, player, card)
        self.rules.fill_trade_row(state)
        return ActionResult.success_with_state(
            state,
            changes=[f"{player.name} bought {card.name} for {card.cost}"],
            summary={"resources_spent": card.cost, "vp_gained": card.vp},
        )

    def _handle_buy_cards(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle a batch buy: play the chosen hand cards for resources,
        then buy the chosen trade row cards.

        Fails without playing anything when the projected resources
        cannot cover the total cost.
        """
        player = state.get_player(action.payload.player_id)
        buy_ids, failure = self._resolve_indices(state.trade_row, action.payload.trade_indices, "trade row")
        if failure:
            return failure
        buy_cards, failure = self._lookup_cards(buy_ids)
        if failure:
            return failure

        play_cards: list[CardDef] = []
        if action.payload.hand_indices:
            play_ids, failure = self._resolve_indices(player.hand, action.payload.hand_indices, "hand")
            if failure:
                return failure
            play_cards, failure = self._lookup_cards(play_ids)
            if failure:
                return failure

        total_cost = sum(card.cost for card in buy_cards)
        projected = player.resources + sum(self._projected_resources(card) for card in play_cards)
        if projected < total_cost:
            return ActionResult.failure(
                f"Not enough resources: need {total_cost}, would have {projected}",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        changes: list[str] = []
        events = []
        gained = 0
        for card in play_cards:
            amount, outcome = self._play_for_resources(state, player, card)
            gained += amount
            changes.append(f"{player.name} played {card.name} for {amount} resource(s)")
            changes.extend(outcome.changes)
            events.extend(outcome.events)

        vp_gained = 0
        for card in buy_cards:
            self._buy(state, player, card)
            vp_gained += card.vp
            changes.append(f"{player.name} bought {card.name} for {card.cost}")
        self.rules.fill_trade_row(state)

        return ActionResult.success_with_state(
            state,
            changes=changes,
            summary={
                "resources_gained": gained,
                "resources_spent": total_cost,
                "cards_bought": len(buy_cards),
                "vp_gained": vp_gained,
            },
            pending_events=events,
        )

    # ------------------------------------------------------------------
    # Attack
    # ------------------------------------------------------------------

    def _largest_objective(self, target: PlayerState) -> str | None:
        """Objective in progress with the most ants; first wins a tie."""
        chosen = None
        most = 0
        for objective_id, ants in target.construction_zone.items():
            if len(ants) > most:
                most = len(ants)
                chosen = objective_id
        return chosen

    def _check_attack(
        self, state: GameState, attacker_id: str, target_id: str | None, power: int,
    ) -> tuple[str | None, ActionResult | None]:
        """Shared attack validation. Returns (objective to destroy, failure)."""
        if target_id == attacker_id:
            return None, ActionResult.failure("Cannot attack yourself", ErrorCode.SELF_ATTACK)
        target = state.get_player(target_id) if target_id else None
        if target is None:
            return None, ActionResult.failure(f"Player {target_id} not found", ErrorCode.PLAYER_NOT_FOUND)
        ok, reason = self.rules.can_attack(state, attacker_id, target_id, power)
        if not ok:
            return None, ActionResult.failure(reason, ErrorCode.ATTACK_TOO_WEAK)
        objective_id = self._largest_objective(target)
        if objective_id is None:
            return None, ActionResult.failure(
                f"{target.name} has no construction in progress",
                ErrorCode.NO_TARGET_OBJECTIVE,
            )
        return objective_id, None

    def _destroy(
        self, state: GameState, attacker: PlayerState, target: PlayerState, objective_id: str, power: int,
    ) -> tuple[list[str], dict]:
        ants = target.construction_zone.pop(objective_id)
        target.discard.extend(ants)
        attacker.vp += self.config.attack_vp_reward
        self._feed(state, "attack", attacker.id, {
            "target": target.id,
            "power": power,
            "objective": objective_id,
            "ants": len(ants),
        })
        objective = self.catalog.get_objective(objective_id)
        name = objective.name if objective else objective_id
        return (
            [f"{attacker.name} destroyed {target.name}'s {name} ({len(ants)} ant(s))"],
            {
                "objective_destroyed": objective_id,
                "ants_destroyed": len(ants),
                "vp_gained": self.config.attack_vp_reward,
            },
        )

    def _handle_attack_player(self, state: GameState, action: Action) -> ActionResult:
        """Handle an attack paid for with hand cards."""
        attacker = state.get_player(action.payload.player_id)
        target_id = action.payload.target_player_id
        card_ids = list(action.payload.card_ids or [])
        if not card_ids:
            return ActionResult.failure("No attack cards selected", ErrorCode.CARD_NOT_IN_HAND)
        if target_id == attacker.id:
            return ActionResult.failure("Cannot attack yourself", ErrorCode.SELF_ATTACK)
        missing = Counter(card_ids) - Counter(attacker.hand)
        if missing:
            return ActionResult.failure(
                f"Cards not in hand: {', '.join(sorted(missing))}", ErrorCode.CARD_NOT_IN_HAND,
            )
        cards, failure = self._lookup_cards(card_ids)
        if failure:
            return failure

        power = sum(card.attack for card in cards)
        objective_id, failure = self._check_attack(state, attacker.id, target_id, power)
        if failure:
            return failure

        target = state.players[target_id]
        changes: list[str] = []
        events = []
        for card in cards:
            attacker.hand.remove(card.id)
            outcome = self.abilities.execute(
                state, attacker.id, card, AbilityContext.ATTACK, target_id=target_id,
            )
            attacker.discard.append(card.id)
            changes.extend(outcome.changes)
            events.extend(outcome.events)

        destroyed, summary = self._destroy(state, attacker, target, objective_id, power)
        summary["attack_power"] = power
        return ActionResult.success_with_state(
            state, changes=[*destroyed, *changes], summary=summary, pending_events=events,
        )

    def _handle_attack_with_power(self, state: GameState, action: Action) -> ActionResult:
        """Handle an attack paid from the accumulated attack pool."""
        attacker = state.get_player(action.payload.player_id)
        target_id = action.payload.target_player_id
        power = action.payload.power
        if not isinstance(power, int) or power <= 0:
            return ActionResult.failure("Attack power must be positive", ErrorCode.INSUFFICIENT_ATTACK)
        if power > attacker.attack_power:
            return ActionResult.failure(
                f"Only {attacker.attack_power} attack power available",
                ErrorCode.INSUFFICIENT_ATTACK,
            )
        objective_id, failure = self._check_attack(state, attacker.id, target_id, power)
        if failure:
            return failure

        attacker.attack_power = 0
        target = state.players[target_id]
        changes, summary = self._destroy(state, attacker, target, objective_id, power)
        summary["attack_power"] = power
        return ActionResult.success_with_state(state, changes=changes, summary=summary)

    # ------------------------------------------------------------------
    # Turn end and scoring
    # ------------------------------------------------------------------

    def _handle_end_turn(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle end of turn.

        Completed objectives of the new current player score here, so
        opponents get a full turn to attack them first.
        """
        player = state.get_player(action.payload.player_id)
        self.rules.end_turn(state, player.id)
        changes = [f"{player.name} ended their turn"]
        summary: dict = {"next_player": state.current_player, "objectives_scored": []}

        if state.status == GameStatus.ACTIVE:
            scored_changes, scored = self.score_completed_objectives(state, state.current_player)
            changes.extend(scored_changes)
            summary["objectives_scored"] = scored
            self.rules.check_end_game(state)

        if state.status == GameStatus.FINISHED:
            summary["winner"] = state.winner
            changes.append(f"Game over - winner {state.winner}")
        return ActionResult.success_with_state(state, changes=changes, summary=summary)

    def score_completed_objectives(self, state: GameState, player_id: str) -> tuple[list[str], list[str]]:
        """Score every objective in the player's zone that has reached its threshold."""
        player = state.players[player_id]
        changes: list[str] = []
        scored: list[str] = []
        for objective_id in list(player.construction_zone):
            if state.status == GameStatus.FINISHED:
                break
            objective = self.catalog.get_objective(objective_id)
            if objective is None:
                logger.error("Construction zone of %s holds unknown objective %s", player_id, objective_id)
                continue
            if self.rules.is_objective_complete(player, objective):
                changes.extend(self.complete_objective(state, player_id, objective_id))
                scored.append(objective_id)
        return changes, scored

    def complete_objective(self, state: GameState, player_id: str, objective_id: str) -> list[str]:
        """
        Score an objective from the player's zone.

        Ants tagged return go back to the discard, starter ants are
        destroyed, the rest are reshuffled into the market. Unknown or
        unowned objectives are a no-op.
        """
        player = state.players[player_id]
        objective = self.catalog.get_objective(objective_id)
        if objective is None or objective_id not in player.construction_zone:
            return []

        ants = player.construction_zone.pop(objective_id)
        to_market: list[str] = []
        for ant_id in ants:
            card = self.catalog.get_card(ant_id)
            if card is not None and card.has_ability(AbilityKind.RETURN):
                player.discard.append(ant_id)
            elif card is None or card.is_starter:
                continue
            else:
                to_market.append(ant_id)
        self.rules.reshuffle_to_market(state, to_market)

        if objective_id not in player.completed_objectives:
            player.completed_objectives.append(objective_id)
        player.vp += objective.vp

        changes = [f"{player.name} completed {objective.name} for {objective.vp} VP"]
        if objective.reward:
            changes.append(self._apply_reward(state, player, objective))

        if objective_id in state.construction_row:
            state.construction_row.remove(objective_id)
        if objective_id in state.construction_deck:
            state.construction_deck.remove(objective_id)
        if not state.construction_row and not state.construction_deck:
            self.rules.advance_tier(state)
        self.rules.fill_construction_row(state)

        self._feed(state, "objective_scored", player_id, {
            "objective": objective_id,
            "vp": objective.vp,
            "reward": objective.reward.to_dict() if objective.reward else None,
        })
        return changes

    def _apply_reward(self, state: GameState, player: PlayerState, objective) -> str:
        """Apply an objective reward. Returns a change description."""
        reward = objective.reward
        kind = reward.reward_type
        if kind == RewardType.RESOURCES:
            player.resources += reward.amount
        elif kind == RewardType.DRAW:
            self.rules.draw_cards(state, player.id, reward.amount)
        elif kind == RewardType.CARD:
            player.discard.append(reward.card_id)
        elif kind == RewardType.VP_MULTIPLIER:
            player.bonuses.vp_multiplier += reward.amount
        elif kind == RewardType.DEFENSE:
            player.bonuses.defense_bonus += reward.amount
        elif kind == RewardType.RESOURCES_PER_TURN:
            player.bonuses.resources_per_turn += reward.amount
        elif kind == RewardType.INSTANT_WIN:
            self.rules.end_game(state, winner=player.id)
        elif kind == RewardType.VP_BONUS:
            player.vp += reward.amount
        return f"{player.name} gained reward: {reward.describe()}"

    # ------------------------------------------------------------------
    # Pending event resolution
    # ------------------------------------------------------------------

    _RESOLUTION_KINDS = {
        ActionType.COMPLETE_SCOUT: PendingEventKind.SCOUT,
        ActionType.COMPLETE_SABOTAGE: PendingEventKind.SABOTAGE,
        ActionType.COMPLETE_DISCARD: PendingEventKind.DISCARD,
        ActionType.COMPLETE_TRASH: PendingEventKind.TRASH,
        ActionType.CANCEL_SCOUT: PendingEventKind.SCOUT,
    }

    def _find_event(self, state: GameState, action: Action):
        """
        The event a resolution command targets: the given event id, or the
        player's oldest event of the matching kind.
        """
        player_id = action.payload.player_id
        kind = self._RESOLUTION_KINDS[action.action_type]
        event_id = action.payload.event_id
        if event_id:
            event = state.find_pending(event_id)
            if event is None or event.player_id != player_id:
                return None, ActionResult.failure(f"No pending event {event_id}", ErrorCode.NO_PENDING_EVENT)
            if event.kind != kind:
                return None, ActionResult.failure(
                    f"Event {event_id} is a {event.kind.value}, not a {kind.value}",
                    ErrorCode.NO_PENDING_EVENT,
                )
            return event, None
        for event in state.pending_for(player_id):
            if event.kind == kind:
                return event, None
        return None, ActionResult.failure(f"No pending {kind.value} for {player_id}", ErrorCode.NO_PENDING_EVENT)

    def _handle_complete(self, state: GameState, action: Action) -> ActionResult:
        event, failure = self._find_event(state, action)
        if failure:
            return failure
        return self.abilities.complete(state, event, list(action.payload.selection or []))

    def _handle_cancel_scout(self, state: GameState, action: Action) -> ActionResult:
        event, failure = self._find_event(state, action)
        if failure:
            return failure
        return self.abilities.cancel_scout(state, event)

    def _handle_resolve_default(self, state: GameState, action: Action) -> ActionResult:
        """Resolve the head of the player's queue with the fallback policy."""
        event = state.next_pending(action.payload.player_id)
        return self.abilities.resolve_default(state, event)


def apply_action(catalog: Catalog, state: GameState, action: Action, config: RulesConfig = DEFAULT_RULES) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(catalog=catalog, config=config)
    return reducer.apply(state, action)
