"""
Tests for the reducer (command validation and application).

Tests:
- Play, place, buy and attack commands
- End of turn and objective scoring
- Validate-then-commit: failed commands leave the state untouched
- Error codes
"""

import random

import pytest

from ..catalog import default_catalog
from ..engine_core.action import Action, ActionPayload, ActionType, ErrorCode
from ..engine_core.reducer import Reducer, apply_action
from ..engine_core.state import GameState, GameStatus
from .conftest import all_cards


class TestCommonValidation:
    """Tests for checks shared by every command."""

    def test_not_your_turn(self, reducer, game):
        result = reducer.apply(game, Action.end_turn("bob"))
        assert not result.success
        assert result.error_code == ErrorCode.NOT_YOUR_TURN
        assert "turn" in result.error.lower()

    def test_unknown_player(self, reducer, game):
        result = reducer.apply(game, Action.end_turn("mallory"))
        assert result.error_code == ErrorCode.PLAYER_NOT_FOUND

    def test_game_not_active(self, reducer, small_catalog):
        state = GameState.create("lobby", [("alice", "Alice")])
        result = reducer.apply(state, Action.end_turn("alice"))
        assert result.error_code == ErrorCode.GAME_NOT_ACTIVE

    def test_resolution_without_event(self, reducer, game):
        result = reducer.apply(game, Action.complete_scout("alice", []))
        assert result.error_code == ErrorCode.NO_PENDING_EVENT

    def test_handler_exception_is_wrapped(self, reducer, game, monkeypatch):
        def boom(state, player_id):
            raise RuntimeError("rules exploded")

        monkeypatch.setattr(reducer.rules, "end_turn", boom)
        result = reducer.apply(game, Action.end_turn("alice"))
        assert not result.success
        assert result.error_code == ErrorCode.HANDLER_ERROR
        assert "exploded" in result.error

    def test_apply_action_helper(self, small_catalog, game):
        result = apply_action(small_catalog, game, Action.end_turn("alice"))
        assert result.success
        assert game.current_player == "bob"

    def test_raw_action(self, reducer, game):
        action = Action(
            action_type=ActionType.PLAY_CARD,
            payload=ActionPayload(player_id="alice", card_id=game.players["alice"].hand[0]),
        )
        assert reducer.apply(game, action).success


class TestPlayCard:
    """Tests for playing cards for resources."""

    def test_play_for_resources(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "soldier_ant"]
        result = reducer.apply(game, Action.play_card("alice", "worker_ant"))

        assert result.success
        assert alice.resources == 1
        assert alice.hand == ["soldier_ant"]
        assert alice.discard == ["worker_ant"]
        assert result.summary["resources_gained"] == 1

    def test_card_not_in_hand(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant"]
        before = game.clone()
        result = reducer.apply(game, Action.play_card("alice", "queen_ant"))

        assert result.error_code == ErrorCode.CARD_NOT_IN_HAND
        assert game == before

    def test_unknown_card(self, reducer, game):
        game.players["alice"].hand = ["ghost_ant"]
        result = reducer.apply(game, Action.play_card("alice", "ghost_ant"))
        assert result.error_code == ErrorCode.UNKNOWN_CARD
        assert game.players["alice"].hand == ["ghost_ant"]

    def test_draw_ability(self, reducer, game):
        """Scenario: play a 1-resource card with draw; hand size is net unchanged."""
        alice = game.players["alice"]
        alice.hand = ["digger_ant", "worker_ant"]
        result = reducer.apply(game, Action.play_card("alice", "digger_ant"))

        assert result.success
        assert len(alice.hand) == 2
        assert alice.resources == 1
        assert "digger_ant" in alice.discard
        assert result.summary["cards_drawn"] == 1

    def test_forager_override(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["forager_ant"]
        result = reducer.apply(game, Action.play_card("alice", "forager_ant"))
        assert alice.resources == 2
        assert result.summary["resources_gained"] == 2

    def test_queen_override(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["queen_ant"]
        reducer.apply(game, Action.play_card("alice", "queen_ant"))
        assert alice.resources == 2
        assert len(alice.hand) == 2

    def test_heal(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["medic_ant"]
        alice.discard = ["worker_ant", "fire_ant"]
        reducer.apply(game, Action.play_card("alice", "medic_ant"))
        assert alice.hand == ["fire_ant"]
        assert alice.discard == ["worker_ant", "medic_ant"]

    def test_feed_entry(self, reducer, game):
        game.players["alice"].hand = ["worker_ant"]
        reducer.apply(game, Action.play_card("alice", "worker_ant"))
        entry = game.feed[-1]
        assert entry.event_type == "card_played"
        assert entry.data == {"card": "worker_ant", "resources": 1}


class TestPlayCards:
    """Tests for batch play by hand index."""

    def test_play_several(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "soldier_ant", "worker_ant"]
        result = reducer.apply(game, Action.play_cards("alice", [0, 2]))

        assert result.success
        assert alice.resources == 2
        assert alice.hand == ["soldier_ant"]
        assert result.summary["cards_played"] == 2

    def test_indices_resolved_before_removal(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["soldier_ant", "worker_ant", "forager_ant"]
        reducer.apply(game, Action.play_cards("alice", [2, 0]))
        assert alice.hand == ["worker_ant"]
        assert sorted(alice.discard) == ["forager_ant", "soldier_ant"]

    @pytest.mark.parametrize("indices", [[0, 0], [5], [-1], []])
    def test_bad_indices(self, reducer, game, indices):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "worker_ant"]
        result = reducer.apply(game, Action.play_cards("alice", indices))
        assert result.error_code == ErrorCode.INVALID_INDEX
        assert alice.hand == ["worker_ant", "worker_ant"]
        assert alice.resources == 0


class TestPlayForAttack:
    """Tests for building the attack power pool."""

    def test_adds_attack(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["fire_ant"]
        result = reducer.apply(game, Action.play_for_attack("alice", "fire_ant"))
        assert result.success
        assert alice.attack_power == 3
        assert alice.resources == 0
        assert alice.discard == ["fire_ant"]

    def test_no_resources_from_overrides(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["forager_ant"]
        reducer.apply(game, Action.play_for_attack("alice", "forager_ant"))
        assert alice.resources == 0


class TestPlaceAnt:
    """Tests for placing ants on construction objectives."""

    def test_place(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "fire_ant"]
        result = reducer.apply(game, Action.place_ant("alice", "worker_ant", "twig_bridge"))

        assert result.success
        assert alice.construction_zone == {"twig_bridge": ["worker_ant"]}
        assert alice.hand == ["fire_ant"]
        assert alice.discard == []
        assert result.summary["ants_placed"] == 1

    def test_objective_not_in_row(self, reducer, game):
        game.players["alice"].hand = ["worker_ant"]
        result = reducer.apply(game, Action.place_ant("alice", "worker_ant", "stone_tower"))
        assert result.error_code == ErrorCode.OBJECTIVE_NOT_AVAILABLE

    def test_unknown_objective_in_row(self, reducer, game):
        game.construction_row = ["ghost_site"]
        game.players["alice"].hand = ["worker_ant"]
        result = reducer.apply(game, Action.place_ant("alice", "worker_ant", "ghost_site"))
        assert result.error_code == ErrorCode.UNKNOWN_OBJECTIVE

    def test_claimed_by_opponent(self, reducer, game):
        game.players["bob"].construction_zone = {"twig_bridge": ["worker_ant"]}
        game.players["alice"].hand = ["worker_ant"]
        result = reducer.apply(game, Action.place_ant("alice", "worker_ant", "twig_bridge"))
        assert result.error_code == ErrorCode.OBJECTIVE_CLAIMED
        assert "already building" in result.error

    def test_full(self, reducer, game):
        alice = game.players["alice"]
        alice.construction_zone = {"twig_bridge": ["worker_ant", "worker_ant"]}
        alice.hand = ["worker_ant"]
        result = reducer.apply(game, Action.place_ant("alice", "worker_ant", "twig_bridge"))
        assert result.error_code == ErrorCode.OBJECTIVE_FULL

    def test_place_batch(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "fire_ant", "soldier_ant"]
        result = reducer.apply(game, Action.place_ants("alice", [0, 2], "twig_bridge"))
        assert result.success
        assert alice.construction_zone["twig_bridge"] == ["worker_ant", "soldier_ant"]
        assert alice.hand == ["fire_ant"]

    def test_batch_over_capacity(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "worker_ant", "worker_ant"]
        result = reducer.apply(game, Action.place_ants("alice", [0, 1, 2], "twig_bridge"))
        assert result.error_code == ErrorCode.OBJECTIVE_FULL
        assert alice.hand == ["worker_ant", "worker_ant", "worker_ant"]
        assert alice.construction_zone == {}

    def test_placement_grants_no_resources(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["forager_ant"]
        reducer.apply(game, Action.place_ant("alice", "forager_ant", "twig_bridge"))
        assert alice.resources == 0


class TestBuyCard:
    """Tests for buying from the trade row."""

    def test_insufficient_resources(self, reducer, game):
        """Scenario: 2 resources cannot buy a 3-cost card; nothing changes."""
        alice = game.players["alice"]
        game.trade_row[0] = "fire_ant"
        alice.resources = 2
        row = list(game.trade_row)

        result = reducer.apply(game, Action.buy_card("alice", "fire_ant"))

        assert not result.success
        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES
        assert alice.resources == 2
        assert game.trade_row == row

    def test_buy(self, reducer, game):
        alice = game.players["alice"]
        game.trade_row[0] = "fire_ant"
        alice.resources = 4
        market = len(game.market_deck)

        result = reducer.apply(game, Action.buy_card("alice", "fire_ant"))

        assert result.success
        assert alice.resources == 1
        assert "fire_ant" in alice.discard
        assert len(game.trade_row) == 5
        assert len(game.market_deck) == market - 1
        assert result.summary["resources_spent"] == 3

    def test_buy_grants_vp(self, reducer, game):
        alice = game.players["alice"]
        game.trade_row[0] = "wall_ant"
        alice.resources = 4
        reducer.apply(game, Action.buy_card("alice", "wall_ant"))
        assert alice.vp == 1

    def test_not_in_trade_row(self, reducer, game):
        game.trade_row = ["fire_ant"]
        game.players["alice"].resources = 10
        result = reducer.apply(game, Action.buy_card("alice", "queen_ant"))
        assert result.error_code == ErrorCode.CARD_NOT_IN_TRADE_ROW


class TestBuyCards:
    """Tests for batch buying."""

    def test_play_then_buy(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "worker_ant", "worker_ant"]
        game.trade_row[0] = "fire_ant"

        result = reducer.apply(game, Action.buy_cards("alice", [0], [0, 1, 2]))

        assert result.success
        assert alice.hand == []
        assert alice.resources == 0
        assert "fire_ant" in alice.discard
        assert result.summary["resources_gained"] == 3
        assert result.summary["cards_bought"] == 1

    def test_projected_shortfall_changes_nothing(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["worker_ant", "worker_ant"]
        game.trade_row[0] = "fire_ant"
        before = game.clone()

        result = reducer.apply(game, Action.buy_cards("alice", [0], [0, 1]))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES
        assert game == before

    def test_override_counts_toward_projection(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["forager_ant", "worker_ant"]
        game.trade_row[0] = "fire_ant"
        result = reducer.apply(game, Action.buy_cards("alice", [0], [0, 1]))
        assert result.success

    def test_buy_two(self, reducer, game):
        alice = game.players["alice"]
        game.trade_row[0] = "fire_ant"
        game.trade_row[1] = "wall_ant"
        alice.resources = 7
        result = reducer.apply(game, Action.buy_cards("alice", [0, 1]))
        assert result.success
        assert alice.resources == 0
        assert alice.vp == 1
        assert len(game.trade_row) == 5


class TestAttackPlayer:
    """Tests for attacks paid with hand cards."""

    def test_destroys_objective(self, reducer, game):
        alice, bob = game.players["alice"], game.players["bob"]
        alice.hand = ["soldier_ant", "worker_ant"]
        bob.construction_zone = {"twig_bridge": ["worker_ant"]}
        bob.discard = []

        result = reducer.apply(game, Action.attack_player("alice", "bob", ["soldier_ant"]))

        assert result.success
        assert bob.construction_zone == {}
        assert bob.discard == ["worker_ant"]
        assert alice.vp == 1
        assert alice.hand == ["worker_ant"]
        assert alice.discard == ["soldier_ant"]
        assert result.summary["objective_destroyed"] == "twig_bridge"
        assert result.summary["ants_destroyed"] == 1

    def test_tie_favors_defender(self, reducer, game):
        """Scenario: attack equal to defense fails and consumes nothing."""
        alice, bob = game.players["alice"], game.players["bob"]
        alice.hand = ["soldier_ant"]
        bob.construction_zone = {"twig_bridge": ["soldier_ant"]}
        before = game.clone()

        result = reducer.apply(game, Action.attack_player("alice", "bob", ["soldier_ant"]))

        assert result.error_code == ErrorCode.ATTACK_TOO_WEAK
        assert alice.hand == ["soldier_ant"]
        assert bob.construction_zone == {"twig_bridge": ["soldier_ant"]}
        assert game == before

    def test_largest_objective_destroyed(self, reducer, game):
        alice, bob = game.players["alice"], game.players["bob"]
        alice.hand = ["fire_ant"]
        bob.construction_zone = {
            "twig_bridge": ["worker_ant"],
            "stone_tower": ["worker_ant", "worker_ant"],
        }
        result = reducer.apply(game, Action.attack_player("alice", "bob", ["fire_ant"]))
        assert result.summary["objective_destroyed"] == "stone_tower"
        assert bob.construction_zone == {"twig_bridge": ["worker_ant"]}

    def test_self_attack(self, reducer, game):
        game.players["alice"].hand = ["fire_ant"]
        result = reducer.apply(game, Action.attack_player("alice", "alice", ["fire_ant"]))
        assert result.error_code == ErrorCode.SELF_ATTACK

    def test_no_objective_in_progress(self, reducer, game):
        game.players["alice"].hand = ["fire_ant"]
        game.players["bob"].construction_zone = {}
        result = reducer.apply(game, Action.attack_player("alice", "bob", ["fire_ant"]))
        assert result.error_code == ErrorCode.NO_TARGET_OBJECTIVE
        assert game.players["alice"].hand == ["fire_ant"]

    def test_cards_must_be_in_hand(self, reducer, game):
        game.players["alice"].hand = ["fire_ant"]
        game.players["bob"].construction_zone = {"twig_bridge": ["worker_ant"]}
        result = reducer.apply(game, Action.attack_player("alice", "bob", ["fire_ant", "fire_ant"]))
        assert result.error_code == ErrorCode.CARD_NOT_IN_HAND

    def test_unknown_target(self, reducer, game):
        game.players["alice"].hand = ["fire_ant"]
        result = reducer.apply(game, Action.attack_player("alice", "mallory", ["fire_ant"]))
        assert result.error_code == ErrorCode.PLAYER_NOT_FOUND

    def test_defense_bonus_counts(self, reducer, game):
        game.players["alice"].hand = ["fire_ant"]
        bob = game.players["bob"]
        bob.construction_zone = {"twig_bridge": ["worker_ant"]}
        bob.bonuses.defense_bonus = 3
        result = reducer.apply(game, Action.attack_player("alice", "bob", ["fire_ant"]))
        assert result.error_code == ErrorCode.ATTACK_TOO_WEAK


class TestAttackWithPower:
    """Tests for attacks paid from the attack pool."""

    def test_spends_pool(self, reducer, game):
        alice, bob = game.players["alice"], game.players["bob"]
        alice.attack_power = 3
        bob.construction_zone = {"twig_bridge": ["soldier_ant"]}

        result = reducer.apply(game, Action.attack_with_power("alice", "bob", 2))

        assert result.success
        assert alice.attack_power == 0
        assert bob.construction_zone == {}
        assert result.summary["attack_power"] == 2

    def test_power_above_pool(self, reducer, game):
        game.players["alice"].attack_power = 1
        game.players["bob"].construction_zone = {"twig_bridge": ["worker_ant"]}
        result = reducer.apply(game, Action.attack_with_power("alice", "bob", 2))
        assert result.error_code == ErrorCode.INSUFFICIENT_ATTACK
        assert game.players["alice"].attack_power == 1

    def test_power_must_be_positive(self, reducer, game):
        game.players["alice"].attack_power = 3
        result = reducer.apply(game, Action.attack_with_power("alice", "bob", 0))
        assert result.error_code == ErrorCode.INSUFFICIENT_ATTACK

    def test_failed_attack_keeps_pool(self, reducer, game):
        game.players["alice"].attack_power = 1
        game.players["bob"].construction_zone = {"twig_bridge": ["soldier_ant"]}
        result = reducer.apply(game, Action.attack_with_power("alice", "bob", 1))
        assert result.error_code == ErrorCode.ATTACK_TOO_WEAK
        assert game.players["alice"].attack_power == 1


class TestEndTurn:
    """Tests for ending turns and scoring."""

    def test_end_turn(self, reducer, game):
        result = reducer.apply(game, Action.end_turn("alice"))
        assert result.success
        assert game.current_player == "bob"
        assert result.summary["next_player"] == "bob"
        assert result.summary["objectives_scored"] == []

    def test_objective_scores_for_new_current_player(self, reducer, game):
        bob = game.players["bob"]
        bob.construction_zone = {"twig_bridge": ["worker_ant", "worker_ant"]}

        result = reducer.apply(game, Action.end_turn("alice"))

        assert result.summary["objectives_scored"] == ["twig_bridge"]
        assert bob.vp == 2
        assert bob.resources == 2
        assert bob.completed_objectives == ["twig_bridge"]
        assert bob.construction_zone == {}
        assert game.current_tier == 2
        assert game.construction_row == ["stone_tower"]

    def test_game_over(self, reducer, game):
        game.construction_row = []
        game.current_tier = 2
        game.players["bob"].vp = 3

        result = reducer.apply(game, Action.end_turn("alice"))

        assert result.success
        assert game.status == GameStatus.FINISHED
        assert result.summary["winner"] == "bob"
        assert reducer.apply(game, Action.end_turn("bob")).error_code == ErrorCode.GAME_NOT_ACTIVE

    def test_scoring_last_objective_ends_game(self, reducer, game):
        game.construction_row = ["stone_tower"]
        game.current_tier = 2
        game.players["bob"].construction_zone = {"stone_tower": ["worker_ant", "worker_ant"]}

        result = reducer.apply(game, Action.end_turn("alice"))

        assert game.status == GameStatus.FINISHED
        assert game.winner == "bob"
        assert result.summary["objectives_scored"] == ["stone_tower"]


class TestCompleteObjective:
    """Tests for objective completion bookkeeping."""

    def test_ant_routing(self, reducer, game):
        """Return ants go home, starters are destroyed, the rest rejoin the market."""
        alice = game.players["alice"]
        alice.construction_zone = {"twig_bridge": ["builder_ant", "worker_ant", "fire_ant"]}
        alice.discard = []
        fire_in_market = game.market_deck.count("fire_ant")

        changes = reducer.complete_objective(game, "alice", "twig_bridge")

        assert changes
        assert alice.discard == ["builder_ant"]
        assert game.market_deck.count("fire_ant") == fire_in_market + 1
        assert "worker_ant" not in game.market_deck
        assert "twig_bridge" not in game.construction_row

    def test_not_owned_is_noop(self, reducer, game):
        before = game.clone()
        assert reducer.complete_objective(game, "alice", "twig_bridge") == []
        assert game == before

    def test_feed_entry(self, reducer, game):
        game.players["alice"].construction_zone = {"twig_bridge": ["worker_ant"]}
        reducer.complete_objective(game, "alice", "twig_bridge")
        scored = [e for e in game.feed if e.event_type == "objective_scored"]
        assert scored[-1].data["objective"] == "twig_bridge"
        assert scored[-1].data["reward"] == {"type": "resources", "amount": 2}


class TestRewards:
    """Tests for every reward type, using the built-in catalog."""

    @pytest.fixture
    def full(self):
        reducer = Reducer(default_catalog(), rng=random.Random(3))
        state = GameState.create("rewards", [("alice", "Alice"), ("bob", "Bob")])
        state.random_seed = 3
        reducer.rules.setup_game(state)
        return reducer, state

    def complete(self, reducer, state, objective_id, ants=1):
        state.construction_row = [objective_id]
        state.construction_deck = []
        state.players["alice"].construction_zone = {objective_id: ["worker_ant"] * ants}
        reducer.complete_objective(state, "alice", objective_id)
        return state.players["alice"]

    def test_draw(self, full):
        reducer, state = full
        alice = self.complete(reducer, state, "leaf_raft")
        assert len(alice.hand) == 7

    def test_card(self, full):
        reducer, state = full
        alice = self.complete(reducer, state, "silk_span")
        assert "fire_ant" in alice.discard

    def test_defense(self, full):
        reducer, state = full
        alice = self.complete(reducer, state, "pebble_wall")
        assert alice.bonuses.defense_bonus == 1

    def test_resources_per_turn(self, full):
        reducer, state = full
        alice = self.complete(reducer, state, "root_tunnel")
        assert alice.bonuses.resources_per_turn == 1

    def test_vp_bonus(self, full):
        reducer, state = full
        alice = self.complete(reducer, state, "nursery_chamber")
        assert alice.vp == 5 + 2

    def test_vp_multiplier(self, full):
        reducer, state = full
        alice = self.complete(reducer, state, "great_bridge")
        assert alice.bonuses.vp_multiplier == 2
        assert reducer.rules.calculate_vp(alice) == 16

    def test_instant_win(self, full):
        reducer, state = full
        state.players["bob"].vp = 100
        self.complete(reducer, state, "queens_throne")
        assert state.status == GameStatus.FINISHED
        assert state.winner == "alice"


class TestCardConservation:
    """Cards are only created or destroyed by trash, scoring and rewards."""

    def test_play_buy_attack_conserve_cards(self, reducer, game):
        alice, bob = game.players["alice"], game.players["bob"]
        alice.hand = ["worker_ant", "worker_ant", "worker_ant", "fire_ant", "worker_ant"]
        bob.construction_zone = {"twig_bridge": [bob.hand.pop()]}
        before = all_cards(game)

        assert reducer.apply(game, Action.play_cards("alice", [0, 1, 2])).success
        alice.resources += 10
        assert reducer.apply(game, Action.buy_card("alice", game.trade_row[0])).success
        assert reducer.apply(game, Action.play_for_attack("alice", "fire_ant")).success
        assert reducer.apply(game, Action.attack_with_power("alice", "bob", 3)).success
        assert reducer.apply(game, Action.end_turn("alice")).success

        assert all_cards(game) == before
