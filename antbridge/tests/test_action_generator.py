"""
Tests for legal action generation.
"""

import pytest

from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator, is_legal, legal_actions


@pytest.fixture
def generator(small_catalog):
    return ActionGenerator(small_catalog)


def types_of(actions):
    return {a.action_type for a in actions}


class TestTurnActions:
    """Tests for the current player's commands."""

    def test_current_player_can_end_turn(self, generator, game):
        actions = generator.generate(game, "alice")
        assert actions[-1].action_type == ActionType.END_TURN

    def test_other_player_has_nothing(self, generator, game):
        assert generator.generate(game, "bob") == []

    def test_unknown_player(self, generator, game):
        assert generator.generate(game, "mallory") == []

    def test_attack_cards_offer_pool_play(self, generator, game):
        game.players["alice"].hand = ["soldier_ant", "worker_ant"]
        actions = generator.generate(game, "alice")
        pool = [a.payload.card_id for a in actions if a.action_type == ActionType.PLAY_FOR_ATTACK]
        assert pool == ["soldier_ant"]

    def test_duplicate_hand_cards_listed_once(self, generator, game):
        game.players["alice"].hand = ["worker_ant"] * 4
        plays = [a for a in generator.generate(game, "alice") if a.action_type == ActionType.PLAY_CARD]
        assert len(plays) == 1

    def test_only_affordable_buys(self, generator, game, small_catalog):
        game.players["alice"].resources = 3
        buys = [a for a in generator.generate(game, "alice") if a.action_type == ActionType.BUY_CARD]
        for action in buys:
            assert small_catalog.get_card(action.payload.card_id).cost <= 3
        affordable = {c for c in game.trade_row if small_catalog.get_card(c).cost <= 3}
        assert {a.payload.card_id for a in buys} == affordable

    def test_placement_blocked_when_claimed(self, generator, game):
        game.players["bob"].construction_zone = {"twig_bridge": ["worker_ant"]}
        assert ActionType.PLACE_ANT not in types_of(generator.generate(game, "alice"))

    def test_attack_offered_when_strong_enough(self, generator, game):
        game.players["alice"].hand = ["fire_ant", "worker_ant"]
        game.players["bob"].construction_zone = {"twig_bridge": ["soldier_ant"]}
        attacks = [a for a in generator.generate(game, "alice") if a.action_type == ActionType.ATTACK_PLAYER]
        assert len(attacks) == 1
        assert attacks[0].payload.card_ids == ["fire_ant"]

    def test_weak_attack_not_offered(self, generator, game):
        game.players["alice"].hand = ["soldier_ant"]
        game.players["bob"].construction_zone = {"twig_bridge": ["soldier_ant"]}
        assert ActionType.ATTACK_PLAYER not in types_of(generator.generate(game, "alice"))

    def test_pool_attack(self, generator, game):
        game.players["alice"].attack_power = 2
        game.players["bob"].construction_zone = {"twig_bridge": ["worker_ant"]}
        actions = [a for a in generator.generate(game, "alice") if a.action_type == ActionType.ATTACK_WITH_POWER]
        assert [a.payload.power for a in actions] == [2]

    def test_finished_game(self, generator, reducer, game):
        reducer.rules.end_game(game)
        assert generator.generate(game, "alice") == []


class TestResolutionActions:
    """Tests for pending event choices."""

    def test_discard_combinations(self, generator, reducer, game):
        game.players["alice"].hand = ["raider_ant"]
        bob = game.players["bob"]
        bob.construction_zone = {"twig_bridge": ["worker_ant"]}
        bob.hand = ["worker_ant", "worker_ant", "fire_ant"]
        reducer.apply(game, Action.attack_player("alice", "bob", ["raider_ant"]))

        actions = generator.generate(game, "bob")

        assert types_of(actions) == {ActionType.COMPLETE_DISCARD}
        assert sorted(a.payload.selection[0] for a in actions) == ["fire_ant", "worker_ant"]

    def test_pending_overrides_turn(self, generator, reducer, game):
        game.players["alice"].hand = ["scout_ant", "worker_ant"]
        reducer.apply(game, Action.play_card("alice", "scout_ant"))
        actions = generator.generate(game, "alice")
        assert types_of(actions) == {ActionType.COMPLETE_SCOUT, ActionType.CANCEL_SCOUT}

    def test_scout_includes_cancel(self, generator, reducer, game):
        game.players["alice"].hand = ["scout_ant"]
        game.players["alice"].deck = ["worker_ant", "fire_ant", "wall_ant"]
        reducer.apply(game, Action.play_card("alice", "scout_ant"))
        actions = generator.generate(game, "alice")
        assert len(actions) == 4
        assert actions[-1].action_type == ActionType.CANCEL_SCOUT

    def test_trash_sizes(self, generator, reducer, game):
        game.players["alice"].hand = ["recycler_ant", "fire_ant", "wall_ant"]
        game.players["alice"].discard = []
        reducer.apply(game, Action.play_card("alice", "recycler_ant"))

        sizes = sorted(len(a.payload.selection) for a in generator.generate(game, "alice"))
        # 1 empty, 3 singles, 3 pairs over fire, wall, recycler
        assert sizes == [0, 1, 1, 1, 2, 2, 2]

    def test_generated_actions_carry_event_id(self, generator, reducer, game):
        game.players["alice"].hand = ["saboteur_ant"]
        game.players["bob"].construction_zone = {"twig_bridge": ["worker_ant"]}
        reducer.apply(game, Action.play_card("alice", "saboteur_ant"))
        event = game.next_pending("bob")
        assert {a.payload.event_id for a in generator.generate(game, "bob")} == {event.event_id}


class TestLegality:
    """Tests that generated actions are accepted by the reducer."""

    @pytest.mark.parametrize("hand", [
        ["worker_ant", "soldier_ant", "fire_ant"],
        ["scout_ant", "digger_ant"],
        ["recycler_ant", "medic_ant", "builder_ant"],
    ])
    def test_every_generated_action_applies(self, generator, reducer, game, hand):
        game.players["alice"].hand = list(hand)
        game.players["alice"].resources = 4
        game.players["bob"].construction_zone = {"twig_bridge": ["worker_ant"]}

        for action in generator.generate(game, "alice"):
            result = reducer.apply(game.clone(), action)
            assert result.success, (action.action_type, result.error)

    def test_every_resolution_applies(self, generator, reducer, game):
        game.players["alice"].hand = ["recycler_ant", "fire_ant"]
        reducer.apply(game, Action.play_card("alice", "recycler_ant"))
        for action in generator.generate(game, "alice"):
            assert reducer.apply(game.clone(), action).success

    def test_is_legal(self, small_catalog, game):
        game.players["alice"].hand = ["worker_ant"]
        assert is_legal(small_catalog, game, Action.play_card("alice", "worker_ant"))
        assert not is_legal(small_catalog, game, Action.play_card("alice", "queen_ant"))
        assert not is_legal(small_catalog, game, Action.end_turn("bob"))

    def test_legal_actions_helper(self, small_catalog, game):
        assert legal_actions(small_catalog, game, "alice")
