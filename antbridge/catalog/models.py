"""
Catalog Models - Read-only card and objective definitions.

A Catalog is built once (from JSON documents or the built-in set) and
shared by every game. Game state only ever stores ids; definitions are
looked up here.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .abilities import Ability, AbilityKind, CatalogError, Reward


@dataclass(frozen=True)
class CardDef:
    """
    An ant card definition.

    cost 0 marks a starter card: it is dealt in starter decks and never
    enters the market pool.
    """
    id: str
    name: str
    type: str = "ant"
    cost: int = 0
    attack: int = 0
    defense: int = 0
    resources: int = 0
    vp: int = 0
    abilities: tuple[Ability, ...] = ()
    copies: int = 0
    description: str = ""

    @property
    def is_starter(self) -> bool:
        return self.cost == 0

    def has_ability(self, kind: AbilityKind) -> bool:
        return any(ability.kind == kind for ability in self.abilities)

    def ability_count(self, kind: AbilityKind) -> int:
        """Total repeat count for an ability kind (0 when absent)."""
        return sum(ability.count for ability in self.abilities if ability.kind == kind)


@dataclass(frozen=True)
class ObjectiveDef:
    """A construction objective definition."""
    id: str
    name: str
    tier: int = 1
    ants_required: int = 1
    vp: int = 0
    reward: Reward | None = None
    description: str = ""


@dataclass
class Catalog:
    """
    Lookup-by-id over the static game data.

    The starter deck is a list of card ids (duplicates allowed) dealt to
    every player at setup.
    """
    cards: dict[str, CardDef] = field(default_factory=dict)
    objectives: dict[str, ObjectiveDef] = field(default_factory=dict)
    starter_deck: list[str] = field(default_factory=list)
    name: str = "Ant Bridge"

    def get_card(self, card_id: str) -> CardDef | None:
        """Get a card definition by id."""
        return self.cards.get(card_id)

    def get_objective(self, objective_id: str) -> ObjectiveDef | None:
        """Get an objective definition by id."""
        return self.objectives.get(objective_id)

    def market_cards(self) -> list[CardDef]:
        """Non-starter cards, in catalog order."""
        return [card for card in self.cards.values() if not card.is_starter]

    def objectives_by_tier(self) -> dict[int, list[str]]:
        """Objective ids grouped by tier, tiers ascending, catalog order within a tier."""
        grouped: dict[int, list[str]] = {}
        for objective in self.objectives.values():
            grouped.setdefault(objective.tier, []).append(objective.id)
        return {tier: grouped[tier] for tier in sorted(grouped)}

    @classmethod
    def from_definitions(
        cls,
        cards: list[CardDef],
        objectives: list[ObjectiveDef],
        starter_deck: list[str],
        name: str = "Ant Bridge",
    ) -> Catalog:
        """Build a catalog, rejecting duplicate ids."""
        card_map: dict[str, CardDef] = {}
        for card in cards:
            if card.id in card_map:
                raise CatalogError(f"Duplicate card id: {card.id}")
            card_map[card.id] = card

        objective_map: dict[str, ObjectiveDef] = {}
        for objective in objectives:
            if objective.id in objective_map:
                raise CatalogError(f"Duplicate objective id: {objective.id}")
            objective_map[objective.id] = objective

        return cls(
            cards=card_map,
            objectives=objective_map,
            starter_deck=list(starter_deck),
            name=name,
        )
