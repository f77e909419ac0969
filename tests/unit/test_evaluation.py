"""评估层测试"""
import pytest
import numpy as np

from core.catalog import DEFAULT_SHOP, THRONE_ROOM
from core.connectors import NONE, WILD
from core.rooms import RoomTemplate
from core.state import Castle


VAULT = DEFAULT_SHOP[0]
GATEHOUSE = RoomTemplate("Gatehouse", False, 0, (WILD, NONE, WILD, NONE))


def small_env_fn():
    from env import CastleEnv, EnvConfig

    config = EnvConfig(shop=DEFAULT_SHOP[:6], damage_schedule=((0, 0, 0), (1, 0, 0)))
    return lambda: CastleEnv(config=config)


class TestEvalResult:
    """EvalResult 测试"""

    def test_create(self):
        from evaluation import EvalResult

        result = EvalResult(
            avg_treasure=2.5,
            avg_reward=1.5,
            avg_length=50.0,
            games_played=100,
        )
        assert result.avg_treasure == 2.5
        assert result.games_played == 100
        assert result.loss_rate == 0.0

    def test_to_dict(self):
        from evaluation import EvalResult

        result = EvalResult(1.0, 1.0, 10.0, 4, loss_rate=0.25, extra_stats={"max_rooms": 7})
        d = result.to_dict()
        assert d["loss_rate"] == 0.25
        assert d["max_rooms"] == 7

    def test_repr(self):
        from evaluation import EvalResult

        assert "avg_treasure=1.00" in repr(EvalResult(1.0, 0.0, 1.0, 1))


class TestRandomAgent:
    """RandomAgent 测试"""

    def test_act(self):
        from evaluation import RandomAgent

        agent = RandomAgent()
        legal_actions = [0, 1, 2, 3, 4]

        action = agent.act({}, legal_actions)
        assert action in legal_actions

    def test_empty_legal_actions(self):
        from evaluation import RandomAgent

        agent = RandomAgent()
        action = agent.act({}, [])
        assert action == 0

    def test_seeded(self):
        from evaluation import RandomAgent

        legal_actions = list(range(100))
        a = RandomAgent(seed=7)
        b = RandomAgent(seed=7)
        assert [a.act({}, legal_actions) for _ in range(10)] == [b.act({}, legal_actions) for _ in range(10)]

    def test_reset_keeps_stream(self):
        from evaluation import RandomAgent

        legal_actions = list(range(1000))
        agent = RandomAgent(seed=3)
        first = [agent.act({}, legal_actions) for _ in range(5)]
        agent.reset()
        assert [agent.act({}, legal_actions) for _ in range(5)] != first

    def test_reset_with_seed_replays(self):
        from evaluation import RandomAgent

        legal_actions = list(range(1000))
        agent = RandomAgent(seed=3)
        first = [agent.act({}, legal_actions) for _ in range(5)]
        agent.reset(seed=3)
        assert [agent.act({}, legal_actions) for _ in range(5)] == first


class TestGreedyTreasureAgent:
    """GreedyTreasureAgent 测试"""

    def test_prefers_treasure(self):
        from evaluation import GreedyTreasureAgent

        castle = Castle.new(THRONE_ROOM)
        legal_actions = castle.possible_actions([GATEHOUSE, VAULT])
        agent = GreedyTreasureAgent()

        action = agent.act({}, legal_actions, castle)
        assert action.room == VAULT

    def test_without_castle(self):
        from evaluation import GreedyTreasureAgent

        agent = GreedyTreasureAgent()
        assert agent.act({}, ["a", "b"]) == "a"

    def test_empty_legal_actions(self):
        from evaluation import GreedyTreasureAgent

        assert GreedyTreasureAgent().act({}, [], Castle.new(THRONE_ROOM)) == 0

    def test_score(self):
        from evaluation import GreedyTreasureAgent

        castle = Castle.new(THRONE_ROOM).place_room(VAULT, (1, 0))
        assert GreedyTreasureAgent.score(castle) == (1, 1, 2)


class TestEvaluator:
    """Evaluator 测试"""

    def test_evaluate(self):
        from evaluation import Evaluator, RandomAgent

        evaluator = Evaluator(env_fn=small_env_fn())
        agent = RandomAgent("test", seed=0)

        result = evaluator.evaluate(agent, n_games=3, max_steps=10)

        assert result.games_played == 3
        assert 0.0 <= result.loss_rate <= 1.0
        assert 0 < result.avg_length <= 10
        assert result.avg_treasure >= 0

    def test_greedy_collects_treasure(self):
        from evaluation import Evaluator, GreedyTreasureAgent

        evaluator = Evaluator(env_fn=small_env_fn())
        result = evaluator.evaluate(GreedyTreasureAgent(), n_games=1, max_steps=4)

        assert result.avg_treasure > 0

    def test_compare(self):
        from evaluation import Evaluator, RandomAgent, GreedyTreasureAgent

        evaluator = Evaluator(env_fn=small_env_fn())
        agent1 = GreedyTreasureAgent("agent1")
        agent2 = RandomAgent("agent2", seed=1)

        result = evaluator.compare(agent1, agent2, n_games=2, max_steps=5)

        assert "agent1_wins" in result
        assert "agent2_wins" in result
        assert result["agent1_wins"] + result["agent2_wins"] + result["draws"] == 2

    def test_seeded_episodes_differ(self):
        from evaluation import Evaluator, RandomAgent

        class RecordingAgent(RandomAgent):
            def __init__(self, seed):
                super().__init__("recording", seed=seed)
                self.episodes = []

            def reset(self, seed=None):
                super().reset(seed)
                self.episodes.append([])

            def act(self, obs, legal_actions, castle=None):
                action = super().act(obs, legal_actions, castle)
                self.episodes[-1].append(action)
                return action

        evaluator = Evaluator(env_fn=small_env_fn())
        agent = RecordingAgent(seed=5)
        evaluator.evaluate(agent, n_games=5, max_steps=20)

        assert len(agent.episodes) == 5
        assert len({tuple(episode) for episode in agent.episodes}) > 1

    def test_seeded_evaluate_reproducible(self):
        from evaluation import Evaluator, RandomAgent

        evaluator = Evaluator(env_fn=small_env_fn())
        first = evaluator.evaluate(RandomAgent(seed=5), n_games=4, max_steps=20)
        second = evaluator.evaluate(RandomAgent(seed=5), n_games=4, max_steps=20)

        assert first.to_dict() == second.to_dict()
