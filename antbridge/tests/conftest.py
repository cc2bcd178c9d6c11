"""
Pytest fixtures for Ant Bridge tests.
"""

import random

import pytest

from ..catalog import Catalog, CardDef, ObjectiveDef, Reward, RewardType, default_catalog
from ..catalog import parse_ability_tags
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState


def _card(id, cost=0, attack=0, defense=0, resources=0, vp=0, abilities=None, copies=0):
    return CardDef(
        id=id,
        name=id.replace("_", " ").title(),
        cost=cost,
        attack=attack,
        defense=defense,
        resources=resources,
        vp=vp,
        abilities=parse_ability_tags(abilities),
        copies=copies,
    )


@pytest.fixture
def catalog() -> Catalog:
    """The built-in card set."""
    return default_catalog()


@pytest.fixture
def small_catalog() -> Catalog:
    """
    A compact card set with one objective per tier.

    tier 1: twig_bridge (2 ants, 2 VP, +2 resources)
    tier 2: stone_tower (2 ants, 3 VP, +1 defense)
    """
    cards = [
        _card("worker_ant", resources=1),
        _card("soldier_ant", attack=1, defense=1),
        _card("digger_ant", cost=2, resources=1, abilities=["draw"], copies=2),
        _card("scout_ant", cost=2, resources=1, abilities=["scout"], copies=2),
        _card("pathfinder_ant", cost=3, abilities=["scout:2"], copies=1),
        _card("saboteur_ant", cost=3, attack=1, abilities=["sabotage"], copies=1),
        _card("raider_ant", cost=3, attack=2, abilities=["steal"], copies=2),
        _card("recycler_ant", cost=2, abilities=["trash:2"], copies=1),
        _card("medic_ant", cost=2, abilities=["heal"], copies=1),
        _card("builder_ant", cost=3, defense=2, abilities=["return"], copies=2),
        _card("fire_ant", cost=3, attack=3, copies=2),
        _card("wall_ant", cost=4, defense=3, vp=1, copies=1),
        _card("forager_ant", cost=2, resources=1, copies=1),
        _card("queen_ant", cost=8, vp=3, copies=1),
    ]
    objectives = [
        ObjectiveDef("twig_bridge", "Twig Bridge", tier=1, ants_required=2, vp=2,
                     reward=Reward(RewardType.RESOURCES, amount=2)),
        ObjectiveDef("stone_tower", "Stone Tower", tier=2, ants_required=2, vp=3,
                     reward=Reward(RewardType.DEFENSE, amount=1)),
    ]
    starter = ["worker_ant"] * 7 + ["soldier_ant"] * 3
    return Catalog.from_definitions(cards, objectives, starter, name="Test Set")


@pytest.fixture
def reducer(small_catalog: Catalog) -> Reducer:
    """Reducer over the small catalog with a seeded generator."""
    return Reducer(small_catalog, rng=random.Random(7))


@pytest.fixture
def game(reducer: Reducer) -> GameState:
    """A started two-player game: Alice (current) and Bob."""
    state = GameState.create("test_game", [("alice", "Alice"), ("bob", "Bob")])
    state.random_seed = 7
    reducer.rules.setup_game(state)
    return state


@pytest.fixture
def three_player_game(reducer: Reducer) -> GameState:
    """A started three-player game: Alice, Bob, Carol."""
    state = GameState.create(
        "test_game_3", [("alice", "Alice"), ("bob", "Bob"), ("carol", "Carol")]
    )
    state.random_seed = 11
    reducer.rules.setup_game(state)
    return state


def all_cards(state: GameState) -> list[str]:
    """Every card id in every zone, including revealed scout cards."""
    cards = list(state.trade_row) + list(state.market_deck)
    for player in state.players.values():
        cards.extend(player.deck)
        cards.extend(player.hand)
        cards.extend(player.discard)
        cards.extend(player.all_ants())
    for event in state.pending_events:
        if event.kind.value == "scout":
            cards.extend(event.candidates)
    return sorted(cards)
