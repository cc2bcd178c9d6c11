"""
Built-in Ant Bridge card set.

Starter cards (cost 0):
- Worker Ant: +1 resource
- Soldier Ant: 1 attack, 1 defense

Market ants cover every ability tag; objectives span three tiers and
every reward type. Custom sets can be loaded with load_catalog().
"""

from __future__ import annotations

from .abilities import Reward, RewardType, parse_ability_tags
from .models import Catalog, CardDef, ObjectiveDef


def _ant(
    id: str,
    name: str,
    cost: int,
    attack: int = 0,
    defense: int = 0,
    resources: int = 0,
    vp: int = 0,
    abilities: list[str] | None = None,
    copies: int = 0,
    description: str = "",
) -> CardDef:
    return CardDef(
        id=id,
        name=name,
        type="ant",
        cost=cost,
        attack=attack,
        defense=defense,
        resources=resources,
        vp=vp,
        abilities=parse_ability_tags(abilities),
        copies=copies,
        description=description,
    )


# ============================================================================
# Starter Cards
# ============================================================================

WORKER_ANT = _ant("worker_ant", "Worker Ant", cost=0, resources=1)
SOLDIER_ANT = _ant("soldier_ant", "Soldier Ant", cost=0, attack=1, defense=1)

STARTER_DECK: list[str] = ["worker_ant"] * 7 + ["soldier_ant"] * 3


# ============================================================================
# Market Cards
# ============================================================================

MARKET_ANTS: list[CardDef] = [
    _ant("forager_ant", "Forager Ant", cost=2, resources=1, copies=4,
         description="Gathers an extra resource when played."),
    _ant("scout_ant", "Scout Ant", cost=2, defense=1, resources=1,
         abilities=["scout"], copies=3,
         description="Look at the top 3 cards of your deck, take 1."),
    _ant("pathfinder_ant", "Pathfinder Ant", cost=4, resources=1,
         abilities=["scout:2"], copies=2,
         description="Look at the top 3 cards of your deck, take 2."),
    _ant("medic_ant", "Medic Ant", cost=2, defense=1, resources=1,
         abilities=["heal"], copies=2,
         description="Return the last discarded card to your hand."),
    _ant("recycler_ant", "Recycler Ant", cost=2, resources=1,
         abilities=["trash"], copies=2,
         description="Remove a card in hand or discard from the game."),
    _ant("builder_ant", "Builder Ant", cost=3, defense=2,
         abilities=["return"], copies=3,
         description="Returns to your discard when its construction scores."),
    _ant("carpenter_ant", "Carpenter Ant", cost=3, defense=1, resources=1,
         abilities=["draw", "return"], copies=2),
    _ant("fire_ant", "Fire Ant", cost=3, attack=3, copies=4),
    _ant("leafcutter_ant", "Leafcutter Ant", cost=4, resources=2,
         abilities=["resources"], copies=2),
    _ant("raider_ant", "Raider Ant", cost=4, attack=2,
         abilities=["steal"], copies=3,
         description="When it attacks, the defender discards a card."),
    _ant("saboteur_ant", "Saboteur Ant", cost=4, attack=1,
         abilities=["sabotage"], copies=2,
         description="An opponent removes an ant from their construction."),
    _ant("bullet_ant", "Bullet Ant", cost=5, attack=4, defense=1, vp=1,
         abilities=["draw"], copies=2),
    _ant("heavy_lifter", "Heavy Lifter", cost=5, defense=3, vp=1, copies=2,
         description="Produces 2 resources when played."),
    _ant("weaver_ant", "Weaver Ant", cost=5, defense=2,
         abilities=["sabotage:2", "draw"], copies=1),
    _ant("army_ant", "Army Ant", cost=6, attack=5, defense=2, vp=2,
         abilities=["steal:2"], copies=1),
    _ant("queen_ant", "Queen Ant", cost=8, defense=2, vp=3, copies=1,
         description="Draw 2 cards and gain 2 resources when played."),
]


# ============================================================================
# Construction Objectives
# ============================================================================

OBJECTIVES: list[ObjectiveDef] = [
    # Tier 1
    ObjectiveDef("twig_bridge", "Twig Bridge", tier=1, ants_required=2, vp=2,
                 reward=Reward(RewardType.RESOURCES, amount=2)),
    ObjectiveDef("leaf_raft", "Leaf Raft", tier=1, ants_required=2, vp=2,
                 reward=Reward(RewardType.DRAW, amount=2)),
    ObjectiveDef("pebble_wall", "Pebble Wall", tier=1, ants_required=3, vp=3,
                 reward=Reward(RewardType.DEFENSE, amount=1)),
    # Tier 2
    ObjectiveDef("root_tunnel", "Root Tunnel", tier=2, ants_required=3, vp=4,
                 reward=Reward(RewardType.RESOURCES_PER_TURN, amount=1)),
    ObjectiveDef("silk_span", "Silk Span", tier=2, ants_required=3, vp=4,
                 reward=Reward(RewardType.CARD, card_id="fire_ant")),
    ObjectiveDef("nursery_chamber", "Nursery Chamber", tier=2, ants_required=4, vp=5,
                 reward=Reward(RewardType.VP_BONUS, amount=2)),
    # Tier 3
    ObjectiveDef("colony_fortress", "Colony Fortress", tier=3, ants_required=4, vp=6,
                 reward=Reward(RewardType.DEFENSE, amount=2)),
    ObjectiveDef("great_bridge", "Great Bridge", tier=3, ants_required=5, vp=8,
                 reward=Reward(RewardType.VP_MULTIPLIER, amount=1)),
    ObjectiveDef("queens_throne", "Queen's Throne", tier=3, ants_required=6, vp=10,
                 reward=Reward(RewardType.INSTANT_WIN)),
]


def default_catalog() -> Catalog:
    """Build the built-in catalog."""
    return Catalog.from_definitions(
        cards=[WORKER_ANT, SOLDIER_ANT, *MARKET_ANTS],
        objectives=OBJECTIVES,
        starter_deck=STARTER_DECK,
    )
