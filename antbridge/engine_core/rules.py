"""
Rules - Turn-cycle mechanics and game-invariant predicates.

Rules never validates player intent beyond simple predicates; the Reducer
does that. Everything here mutates the GameState it is handed.

All shuffles go through the instance's random.Random so a game started
from a recorded seed replays identically.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random
import time

from ..catalog import Catalog, CardDef, ObjectiveDef
from ..config import RulesConfig, DEFAULT_RULES
from .state import GameState, GameStatus, PendingEventKind, PlayerState, TurnPhase

logger = logging.getLogger(__name__)


@dataclass
class Rules:
    """
    Game rules bound to a catalog and a set of constants.

    Stateless apart from the random generator.
    """
    catalog: Catalog
    config: RulesConfig = DEFAULT_RULES
    rng: random.Random = field(default_factory=random.Random)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup_game(self, state: GameState) -> None:
        """
        Deal starter decks, build the market and construction decks,
        fill both rows, deal opening hands and start the first turn.
        """
        if state.random_seed is not None:
            self.rng.seed(state.random_seed)

        for player in state.players.values():
            player.deck = self.shuffle(self.catalog.starter_deck)
            player.hand = []
            player.discard = []
            player.construction_zone = {}
            player.completed_objectives = []
            player.resources = 0
            player.attack_power = 0
            player.vp = 0

        state.market_deck = self.create_market_pool()
        state.trade_row = []

        state.objectives_by_tier = {
            tier: list(ids) for tier, ids in self.catalog.objectives_by_tier().items()
        }
        first_tier = min(state.objectives_by_tier, default=1)
        state.current_tier = first_tier
        state.construction_deck = self.shuffle(state.objectives_by_tier.get(first_tier, []))
        state.construction_row = []

        self.fill_trade_row(state)
        self.fill_construction_row(state)

        for player_id in state.players:
            self.draw_cards(state, player_id, self.config.hand_size)

        state.status = GameStatus.ACTIVE
        state.started_at = time.time()
        state.turn_number = 1
        state.winner = None
        state.final_scores = {}
        state.pending_events = []
        if state.current_player not in state.players:
            state.current_player = state.seat_order[0]

        logger.info(
            "Game %s set up for %d players (market %d, tier %d objectives %d)",
            state.game_id, state.num_players, len(state.market_deck),
            state.current_tier, len(state.construction_deck) + len(state.construction_row),
        )
        self.start_turn(state, state.current_player)

    def create_market_pool(self) -> list[str]:
        """Every non-starter card expanded into its copies, shuffled."""
        pool: list[str] = []
        for card in self.catalog.market_cards():
            pool.extend([card.id] * card.copies)
        return self.shuffle(pool)

    def shuffle(self, ids: list[str]) -> list[str]:
        """Return a shuffled copy."""
        shuffled = list(ids)
        self.rng.shuffle(shuffled)
        return shuffled

    # ------------------------------------------------------------------
    # Zones
    # ------------------------------------------------------------------

    def draw_cards(self, state: GameState, player_id: str, count: int) -> list[str]:
        """
        Draw from the top of the player's deck.

        The discard is reshuffled into the deck when the deck runs out.
        Stops silently when both are empty.
        """
        player = state.players[player_id]
        drawn: list[str] = []
        for _ in range(count):
            if not player.deck:
                if not player.discard:
                    break
                self.reshuffle_discard(player)
            card_id = player.deck.pop()
            player.hand.append(card_id)
            drawn.append(card_id)
        if drawn:
            logger.debug("%s drew %d card(s)", player_id, len(drawn))
        return drawn

    def reshuffle_discard(self, player: PlayerState, under_deck: bool = False) -> None:
        """
        Shuffle the discard into the deck.

        With under_deck the shuffled discard goes beneath the existing
        deck so the current top cards stay on top.
        """
        reshuffled = self.shuffle(player.discard)
        player.discard = []
        if under_deck:
            player.deck = reshuffled + player.deck
        else:
            player.deck = player.deck + reshuffled
        logger.debug("Reshuffled %d discard card(s) for %s", len(reshuffled), player.id)

    def fill_trade_row(self, state: GameState) -> None:
        """Top up the trade row from the market deck."""
        while len(state.trade_row) < self.config.trade_row_size and state.market_deck:
            state.trade_row.append(state.market_deck.pop())

    def fill_construction_row(self, state: GameState) -> None:
        """Top up the construction row from the construction deck."""
        while (
            len(state.construction_row) < self.config.construction_row_size
            and state.construction_deck
        ):
            state.construction_row.append(state.construction_deck.pop())

    def reshuffle_to_market(self, state: GameState, card_ids: list[str]) -> None:
        """Return cards to circulation: append, then shuffle the whole market."""
        if not card_ids:
            return
        state.market_deck = self.shuffle(state.market_deck + list(card_ids))
        logger.debug("Reshuffled %d card(s) into the market", len(card_ids))

    def advance_tier(self, state: GameState) -> bool:
        """
        Move to the next objective tier.

        Only when both the construction row and deck are empty and a next
        tier exists. Returns False and changes nothing otherwise.
        """
        if state.construction_row or state.construction_deck:
            return False
        next_tier = state.current_tier + 1
        objectives = state.objectives_by_tier.get(next_tier)
        if not objectives:
            return False

        state.current_tier = next_tier
        state.construction_deck = self.shuffle(objectives)
        self.fill_construction_row(state)
        state.add_feed_event(
            "tier_advanced", None, {"tier": next_tier}, limit=self.config.feed_limit,
        )
        logger.info("Game %s advanced to tier %d", state.game_id, next_tier)
        return True

    def return_scouted_cards(self, state: GameState, player_id: str, card_ids: list[str]) -> None:
        """Put revealed cards back on top of the deck in their original order."""
        state.players[player_id].deck.extend(card_ids)

    # ------------------------------------------------------------------
    # Turn cycle
    # ------------------------------------------------------------------

    def start_turn(self, state: GameState, player_id: str) -> None:
        """Grant the per-turn resource bonus and open the action phase."""
        player = state.players[player_id]
        player.resources += player.bonuses.resources_per_turn
        state.turn_phase = TurnPhase.ACTION
        state.add_feed_event(
            "turn_start", player_id, {"turn": state.turn_number}, limit=self.config.feed_limit,
        )
        logger.info("Turn %d: %s", state.turn_number, player.name)

    def end_turn(self, state: GameState, player_id: str) -> None:
        """
        Clean up the player's turn and pass play to the next seat.

        Pending events never carry across the boundary; a pending scout
        returns its revealed cards to the top of its owner's deck.
        """
        player = state.players[player_id]
        state.turn_phase = TurnPhase.CLEANUP
        state.add_feed_event(
            "turn_end", player_id, {"turn": state.turn_number}, limit=self.config.feed_limit,
        )

        player.discard.extend(player.hand)
        player.hand = []
        player.resources = 0
        player.attack_power = 0

        self.clear_pending_events(state)
        self.draw_cards(state, player_id, self.config.hand_size)

        state.current_player = state.next_player_id(player_id)
        state.turn_number += 1
        self.start_turn(state, state.current_player)
        self.check_end_game(state)

    def clear_pending_events(self, state: GameState) -> None:
        """Drop every pending event, cancelling scouts."""
        for event in state.pending_events:
            if event.kind == PendingEventKind.SCOUT:
                self.return_scouted_cards(state, event.player_id, event.candidates)
        if state.pending_events:
            logger.debug("Cleared %d pending event(s)", len(state.pending_events))
        state.pending_events = []

    def check_end_game(self, state: GameState) -> bool:
        """Finish the game once the final tier is exhausted."""
        if state.status == GameStatus.FINISHED:
            return True
        if state.construction_deck or state.construction_row:
            return False
        if self.advance_tier(state):
            return False
        self.end_game(state)
        return True

    def end_game(self, state: GameState, winner: str | None = None) -> None:
        """
        Score every player and declare the winner.

        The first player in seating order wins a tie. An explicit winner
        (instant win) overrides the scoreboard.
        """
        if state.status == GameStatus.FINISHED:
            return
        state.final_scores = {pid: self.calculate_vp(p) for pid, p in state.players.items()}
        if winner is None:
            best = -1
            for player_id, score in state.final_scores.items():
                if score > best:
                    best = score
                    winner = player_id
        state.winner = winner
        state.status = GameStatus.FINISHED
        state.add_feed_event(
            "game_over", winner, {"scores": dict(state.final_scores)}, limit=self.config.feed_limit,
        )
        logger.info("Game %s finished, winner %s", state.game_id, winner)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def can_afford_card(self, player: PlayerState, card: CardDef) -> bool:
        return player.resources >= card.cost

    def can_place_on_construction(
        self, state: GameState, player_id: str, objective_id: str, extra: int = 1,
    ) -> tuple[bool, str | None]:
        """
        Check whether extra more ants can go on the objective.

        Returns (ok, reason).
        """
        if objective_id not in state.construction_row:
            return False, f"Objective {objective_id} is not in the construction row"
        owner = state.objective_owner(objective_id)
        if owner is not None and owner != player_id:
            return False, f"{state.players[owner].name} is already building {objective_id}"
        objective = self.catalog.get_objective(objective_id)
        if objective is None:
            return False, f"Unknown objective {objective_id}"
        placed = len(state.players[player_id].construction_zone.get(objective_id, []))
        if placed + extra > objective.ants_required:
            return False, f"{objective.name} only needs {objective.ants_required} ants"
        return True, None

    def can_attack(
        self, state: GameState, attacker_id: str, target_id: str, power: int,
    ) -> tuple[bool, str | None]:
        """Attack must strictly exceed the target's defense. Returns (ok, reason)."""
        if attacker_id == target_id:
            return False, "Cannot attack yourself"
        target = state.get_player(target_id)
        if target is None:
            return False, f"Player {target_id} not found"
        defense = self.calculate_defense(target)
        if power <= defense:
            return False, f"Attack {power} does not beat defense {defense}"
        return True, None

    def calculate_defense(self, player: PlayerState) -> int:
        """Defense bonus plus the defense of every ant under construction."""
        defense = player.bonuses.defense_bonus
        for card_id in player.all_ants():
            card = self.catalog.get_card(card_id)
            if card is not None:
                defense += card.defense
        return defense

    def calculate_vp(self, player: PlayerState) -> int:
        return player.vp * player.bonuses.vp_multiplier

    def is_objective_complete(self, player: PlayerState, objective: ObjectiveDef) -> bool:
        return len(player.construction_zone.get(objective.id, [])) >= objective.ants_required
