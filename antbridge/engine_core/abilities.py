"""
Ability Resolver - Card ability execution and pending interactive events.

Immediate abilities (draw, resources, heal) apply on the spot.
Interactive abilities (scout, sabotage, trash, steal) cannot finish
inside the command that triggered them: they enqueue a PendingEvent for
the player who must choose, and a later complete_* command resumes them.

Pending events are per-player FIFO queues. Two players can hold
unresolved events at the same time (a steal plus a sabotage hitting the
same victim queue up in order).

Selection rules:
- scout, discard, sabotage: exactly min(count, candidates) card ids
- trash: any number from 0 to count
- a selection must be a sub-multiset of the live candidates
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import logging

from ..catalog import AbilityKind, CardDef
from .action import ActionResult, ErrorCode
from .state import GameState, PendingEvent, PendingEventKind

if TYPE_CHECKING:
    from .rules import Rules

logger = logging.getLogger(__name__)


class AbilityContext(Enum):
    """How the card left the hand."""
    PLAY = "play"  # Played for resources
    PLACE = "place"  # Placed on a construction objective
    ATTACK = "attack"  # Spent in a card attack
    ATTACK_POOL = "attack_pool"  # Played into the attack power pool


@dataclass(frozen=True)
class CardOverride:
    """Extra effect keyed by card id, applied after the card's tags."""
    draw: int = 0
    resources: int = 0


CARD_OVERRIDES: dict[str, CardOverride] = {
    "queen_ant": CardOverride(draw=2, resources=2),
    "forager_ant": CardOverride(resources=1),
    "heavy_lifter": CardOverride(resources=2),
}


@dataclass
class AbilityOutcome:
    """What executing one card's abilities did."""
    resources_gained: int = 0
    cards_drawn: list[str] = field(default_factory=list)
    events: list[PendingEvent] = field(default_factory=list)
    changes: list[str] = field(default_factory=list)


@dataclass
class AbilityResolver:
    """
    Executes card abilities against a GameState.

    Holds no state of its own; pending work lives in
    GameState.pending_events.
    """
    rules: Rules

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(
        self,
        state: GameState,
        player_id: str,
        card: CardDef,
        context: AbilityContext,
        target_id: str | None = None,
    ) -> AbilityOutcome:
        """
        Run every ability tag on the card, then its override.

        Resources are only granted in the PLAY context. steal only fires
        in the ATTACK context, against target_id.
        """
        outcome = AbilityOutcome()
        player = state.players[player_id]
        grants_resources = context == AbilityContext.PLAY

        for ability in card.abilities:
            kind = ability.kind
            if kind == AbilityKind.DRAW:
                drawn = self.rules.draw_cards(state, player_id, ability.count)
                outcome.cards_drawn.extend(drawn)
                if drawn:
                    outcome.changes.append(f"{player.name} drew {len(drawn)} card(s)")

            elif kind == AbilityKind.RESOURCES:
                if grants_resources:
                    player.resources += ability.count
                    outcome.resources_gained += ability.count

            elif kind == AbilityKind.HEAL:
                for _ in range(ability.count):
                    if not player.discard:
                        break
                    healed = player.discard.pop()
                    player.hand.append(healed)
                    outcome.changes.append(f"{player.name} returned {healed} to hand")

            elif kind == AbilityKind.SCOUT:
                self._add(state, outcome, self._start_scout(state, player_id, card, ability.count))

            elif kind == AbilityKind.SABOTAGE:
                self._add(state, outcome, self._start_sabotage(state, player_id, card, ability.count))

            elif kind == AbilityKind.TRASH:
                self._add(state, outcome, self._start_trash(state, player_id, card, ability.count))

            elif kind == AbilityKind.STEAL:
                if context == AbilityContext.ATTACK and target_id is not None:
                    self._add(
                        state, outcome,
                        self._start_steal(state, player_id, target_id, card, ability.count),
                    )

            elif kind == AbilityKind.RETURN:
                # Handled when the objective scores
                pass

        override = CARD_OVERRIDES.get(card.id)
        if override and grants_resources:
            if override.draw:
                drawn = self.rules.draw_cards(state, player_id, override.draw)
                outcome.cards_drawn.extend(drawn)
                if drawn:
                    outcome.changes.append(f"{player.name} drew {len(drawn)} card(s)")
            player.resources += override.resources
            outcome.resources_gained += override.resources

        return outcome

    def _add(self, state: GameState, outcome: AbilityOutcome, event: PendingEvent | None) -> None:
        if event is None:
            return
        state.pending_events.append(event)
        outcome.events.append(event)
        target = state.players[event.player_id]
        outcome.changes.append(f"{target.name} must resolve {event.kind.value}")
        logger.debug("Queued %s event %s for %s", event.kind.value, event.event_id, event.player_id)

    def _start_scout(
        self, state: GameState, player_id: str, card: CardDef, count: int,
    ) -> PendingEvent | None:
        """Reveal the top cards; they stay out of the deck until resolved."""
        player = state.players[player_id]
        reveal = self.rules.config.scout_reveal_count
        if len(player.deck) < reveal and player.discard:
            self.rules.reshuffle_discard(player, under_deck=True)

        revealed = player.deck[-reveal:] if player.deck else []
        if not revealed:
            return None
        del player.deck[-len(revealed):]

        return PendingEvent(
            kind=PendingEventKind.SCOUT,
            player_id=player_id,
            source_player_id=player_id,
            count=count,
            candidates=list(revealed),
            source_card_id=card.id,
        )

    def _start_sabotage(
        self, state: GameState, player_id: str, card: CardDef, count: int,
    ) -> PendingEvent | None:
        """Target the first opponent in seating order who has an ant under construction."""
        victim = next((p for p in state.opponents_of(player_id) if p.ant_count > 0), None)
        if victim is None:
            return None
        state.add_feed_event(
            "sabotage", player_id,
            {"target": victim.id, "count": count, "stage": "started"},
            limit=self.rules.config.feed_limit,
        )
        return PendingEvent(
            kind=PendingEventKind.SABOTAGE,
            player_id=victim.id,
            source_player_id=player_id,
            count=count,
            candidates=victim.all_ants(),
            source_card_id=card.id,
        )

    def _start_trash(
        self, state: GameState, player_id: str, card: CardDef, count: int,
    ) -> PendingEvent | None:
        player = state.players[player_id]
        candidates = player.hand + player.discard
        if not candidates:
            return None
        return PendingEvent(
            kind=PendingEventKind.TRASH,
            player_id=player_id,
            source_player_id=player_id,
            count=count,
            candidates=candidates,
            source_card_id=card.id,
        )

    def _start_steal(
        self, state: GameState, player_id: str, target_id: str, card: CardDef, count: int,
    ) -> PendingEvent | None:
        target = state.players[target_id]
        if not target.hand:
            return None
        state.add_feed_event(
            "steal", player_id, {"target": target_id, "count": count},
            limit=self.rules.config.feed_limit,
        )
        return PendingEvent(
            kind=PendingEventKind.DISCARD,
            player_id=target_id,
            source_player_id=player_id,
            count=count,
            candidates=list(target.hand),
            source_card_id=card.id,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def live_candidates(self, state: GameState, event: PendingEvent) -> list[str]:
        """Candidates as they stand now (scout cards are held by the event)."""
        player = state.players[event.player_id]
        if event.kind == PendingEventKind.SCOUT:
            return list(event.candidates)
        if event.kind == PendingEventKind.SABOTAGE:
            return player.all_ants()
        if event.kind == PendingEventKind.DISCARD:
            return list(player.hand)
        return player.hand + player.discard

    def validate_selection(
        self, state: GameState, event: PendingEvent, selection: list[str],
    ) -> str | None:
        """Return an error message, or None when the selection is acceptable."""
        candidates = self.live_candidates(state, event)
        if event.kind == PendingEventKind.TRASH:
            if len(selection) > event.count:
                return f"Choose at most {event.count} card(s) to trash"
        else:
            required = min(event.count, len(candidates))
            if len(selection) != required:
                return f"Choose exactly {required} card(s)"

        missing = Counter(selection) - Counter(candidates)
        if missing:
            return f"Invalid selection: {', '.join(sorted(missing))}"
        return None

    def complete(
        self, state: GameState, event: PendingEvent, selection: list[str],
    ) -> ActionResult:
        """Resolve an event with the player's selection and remove it from the queue."""
        candidates = self.live_candidates(state, event)
        if not candidates and event.kind != PendingEventKind.SCOUT:
            state.remove_pending(event)
            return ActionResult.success_with_state(
                state, changes=[f"Nothing left to {event.kind.value}; event cleared"],
            )

        error = self.validate_selection(state, event, selection)
        if error:
            logger.warning("Rejected %s selection from %s: %s", event.kind.value, event.player_id, error)
            return ActionResult.failure(error, ErrorCode.INVALID_SELECTION)

        handlers = {
            PendingEventKind.SCOUT: self._finish_scout,
            PendingEventKind.SABOTAGE: self._finish_sabotage,
            PendingEventKind.DISCARD: self._finish_discard,
            PendingEventKind.TRASH: self._finish_trash,
        }
        state.remove_pending(event)
        changes, summary = handlers[event.kind](state, event, list(selection))
        return ActionResult.success_with_state(state, changes=changes, summary=summary)

    def _finish_scout(
        self, state: GameState, event: PendingEvent, selection: list[str],
    ) -> tuple[list[str], dict]:
        """Selected cards to hand, the rest to the bottom of the deck."""
        player = state.players[event.player_id]
        remaining = list(event.candidates)
        for card_id in selection:
            remaining.remove(card_id)
        player.hand.extend(selection)
        player.deck[0:0] = remaining

        state.add_feed_event(
            "scout", player.id, {"taken": len(selection), "revealed": len(event.candidates)},
            limit=self.rules.config.feed_limit,
        )
        return (
            [f"{player.name} scouted {len(event.candidates)} and kept {len(selection)}"],
            {"cards_taken": selection},
        )

    def _finish_sabotage(
        self, state: GameState, event: PendingEvent, selection: list[str],
    ) -> tuple[list[str], dict]:
        """Chosen ants leave the victim's constructions for the victim's discard."""
        victim = state.players[event.player_id]
        for ant_id in selection:
            for objective_id, ants in list(victim.construction_zone.items()):
                if ant_id in ants:
                    ants.remove(ant_id)
                    if not ants:
                        del victim.construction_zone[objective_id]
                    break
            victim.discard.append(ant_id)

        state.add_feed_event(
            "sabotage", event.source_player_id,
            {"target": victim.id, "ants": list(selection), "stage": "resolved"},
            limit=self.rules.config.feed_limit,
        )
        return (
            [f"{victim.name} lost {len(selection)} ant(s) to sabotage"],
            {"ants_removed": len(selection)},
        )

    def _finish_discard(
        self, state: GameState, event: PendingEvent, selection: list[str],
    ) -> tuple[list[str], dict]:
        target = state.players[event.player_id]
        for card_id in selection:
            target.hand.remove(card_id)
            target.discard.append(card_id)

        state.add_feed_event(
            "discard", target.id, {"cards": list(selection), "source": event.source_player_id},
            limit=self.rules.config.feed_limit,
        )
        return (
            [f"{target.name} discarded {len(selection)} card(s)"],
            {"cards_discarded": len(selection)},
        )

    def _finish_trash(
        self, state: GameState, event: PendingEvent, selection: list[str],
    ) -> tuple[list[str], dict]:
        """Hand first, then discard. Non-starters return to the market; starters are destroyed."""
        player = state.players[event.player_id]
        to_market: list[str] = []
        destroyed: list[str] = []
        for card_id in selection:
            if card_id in player.hand:
                player.hand.remove(card_id)
            else:
                player.discard.remove(card_id)
            card = self.rules.catalog.get_card(card_id)
            if card is not None and not card.is_starter:
                to_market.append(card_id)
            else:
                destroyed.append(card_id)
        self.rules.reshuffle_to_market(state, to_market)

        state.add_feed_event(
            "trash", player.id, {"cards": list(selection)},
            limit=self.rules.config.feed_limit,
        )
        return (
            [f"{player.name} trashed {len(selection)} card(s)"],
            {"cards_trashed": len(selection), "returned_to_market": len(to_market)},
        )

    def cancel_scout(self, state: GameState, event: PendingEvent) -> ActionResult:
        """Put the revealed cards back on top of the deck."""
        state.remove_pending(event)
        self.rules.return_scouted_cards(state, event.player_id, event.candidates)
        player = state.players[event.player_id]
        return ActionResult.success_with_state(
            state, changes=[f"{player.name} put {len(event.candidates)} scouted card(s) back"],
        )

    # ------------------------------------------------------------------
    # Fallback
    # ------------------------------------------------------------------

    def default_selection(self, state: GameState, event: PendingEvent) -> list[str] | None:
        """
        Auto-pick for forced events: the first candidates.

        None for scout (cancelled instead); empty for trash.
        """
        if event.kind == PendingEventKind.SCOUT:
            return None
        if event.kind == PendingEventKind.TRASH:
            return []
        candidates = self.live_candidates(state, event)
        return candidates[: min(event.count, len(candidates))]

    def resolve_default(self, state: GameState, event: PendingEvent) -> ActionResult:
        selection = self.default_selection(state, event)
        if selection is None:
            return self.cancel_scout(state, event)
        return self.complete(state, event, selection)
