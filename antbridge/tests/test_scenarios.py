"""
End-to-end game scenarios.

Tests:
- Short scripted games across several turns
- A seeded random walk over the built-in catalog that checks the board
  invariants after every command
"""

import random

import pytest

from ..catalog import default_catalog
from ..engine_core.action import Action, ErrorCode
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, GameStatus, PendingEventKind


class TestScriptedGames:
    """Tests for multi-turn flows on the small catalog."""

    def test_unaffordable_buy(self, reducer, game):
        alice = game.players["alice"]
        alice.resources = 2
        target = game.trade_row[0] = "fire_ant"
        row = list(game.trade_row)

        result = reducer.apply(game, Action.buy_card("alice", target))

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES
        assert alice.resources == 2
        assert game.trade_row == row

    def test_draw_card_keeps_hand_size(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["digger_ant", "worker_ant", "worker_ant"]

        reducer.apply(game, Action.play_card("alice", "digger_ant"))

        assert len(alice.hand) == 3
        assert alice.resources == 1
        assert alice.discard == ["digger_ant"]

    def test_build_and_score_objective(self, reducer, game):
        """An objective at its threshold scores when its builder's next turn begins."""
        alice, bob = game.players["alice"], game.players["bob"]

        alice.hand = ["worker_ant", "worker_ant", "soldier_ant"]
        assert reducer.apply(game, Action.place_ant("alice", "worker_ant", "twig_bridge")).success
        assert reducer.apply(game, Action.end_turn("alice")).success

        bob.hand = ["worker_ant"]
        result = reducer.apply(game, Action.place_ant("bob", "worker_ant", "twig_bridge"))
        assert result.error_code == ErrorCode.OBJECTIVE_CLAIMED
        assert "already building" in result.error
        assert reducer.apply(game, Action.end_turn("bob")).success

        alice.hand = ["worker_ant", "soldier_ant"]
        assert reducer.apply(game, Action.place_ant("alice", "worker_ant", "twig_bridge")).success
        assert alice.construction_zone == {"twig_bridge": ["worker_ant", "worker_ant"]}

        result = reducer.apply(game, Action.end_turn("alice"))
        assert result.summary["objectives_scored"] == []
        assert alice.vp == 0

        result = reducer.apply(game, Action.end_turn("bob"))

        assert result.summary["objectives_scored"] == ["twig_bridge"]
        assert game.current_player == "alice"
        assert alice.vp == 2
        assert alice.resources == 2
        assert alice.completed_objectives == ["twig_bridge"]
        assert alice.construction_zone == {}
        assert game.current_tier == 2
        assert game.construction_row == ["stone_tower"]

    def test_tied_attack_consumes_nothing(self, reducer, game):
        alice, bob = game.players["alice"], game.players["bob"]
        alice.hand = ["soldier_ant", "worker_ant"]
        bob.construction_zone = {"twig_bridge": ["soldier_ant"]}
        before = game.clone()

        result = reducer.apply(game, Action.attack_player("alice", "bob", ["soldier_ant"]))

        assert result.error_code == ErrorCode.ATTACK_TOO_WEAK
        assert game == before

    def test_scout_with_short_deck(self, reducer, game):
        alice = game.players["alice"]
        alice.hand = ["scout_ant"]
        alice.deck = ["worker_ant", "soldier_ant"]
        alice.discard = ["digger_ant"]

        reducer.apply(game, Action.play_card("alice", "scout_ant"))

        event = game.next_pending("alice")
        assert event.kind == PendingEventKind.SCOUT
        assert len(event.candidates) == 3

    def test_game_runs_to_the_last_tier(self, reducer, game):
        """Scoring the last objective of the last tier ends the game."""
        alice = game.players["alice"]
        game.construction_row = []
        reducer.rules.advance_tier(game)
        alice.construction_zone = {"stone_tower": ["worker_ant", "worker_ant"]}

        reducer.apply(game, Action.end_turn("alice"))
        result = reducer.apply(game, Action.end_turn("bob"))

        assert result.summary["objectives_scored"] == ["stone_tower"]
        assert game.status == GameStatus.FINISHED
        assert game.winner == "alice"
        assert result.summary["winner"] == "alice"
        assert reducer.apply(game, Action.end_turn("alice")).error_code == ErrorCode.GAME_NOT_ACTIVE


class TestRandomWalk:
    """Random legal play checking the board invariants after every command."""

    def check_invariants(self, state):
        owners = {}
        for player in state.players.values():
            for objective_id in player.construction_zone:
                assert objective_id not in owners, f"{objective_id} built by two players"
                owners[objective_id] = player.id
            if player.id != state.current_player:
                assert player.resources == 0
                assert player.attack_power == 0
        assert len(state.construction_row) <= 1

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_random_walk(self, seed):
        catalog = default_catalog()
        rng = random.Random(seed)
        reducer = Reducer(catalog, rng=random.Random(seed))
        generator = ActionGenerator(catalog)

        state = GameState.create("walk", [("alice", "Alice"), ("bob", "Bob"), ("carol", "Carol")])
        state.random_seed = seed
        reducer.rules.setup_game(state)

        winner = None
        for _ in range(600):
            actor = state.pending_events[0].player_id if state.pending_events else state.current_player
            actions = generator.generate(state, actor)
            if not actions:
                break
            action = rng.choice(actions)

            result = reducer.apply(state, action)

            assert result.success, (action.action_type, result.error)
            self.check_invariants(state)
            if winner is not None:
                assert state.winner == winner
            winner = state.winner

        if state.status == GameStatus.FINISHED:
            assert state.winner in state.players
            assert set(state.final_scores) == set(state.players)
