"""
评估器

评估智能体在城堡环境中的表现
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import logging
import numpy as np

from core.actions import Action
from core.errors import CastleError
from core.state import Castle

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """评估结果"""
    avg_treasure: float
    avg_reward: float
    avg_length: float
    games_played: int
    loss_rate: float = 0.0
    avg_rooms: float = 0.0
    avg_links: float = 0.0
    extra_stats: Dict[str, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"EvalResult(avg_treasure={self.avg_treasure:.2f}, "
            f"loss_rate={self.loss_rate:.2%}, "
            f"games={self.games_played})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_treasure": self.avg_treasure,
            "avg_reward": self.avg_reward,
            "avg_length": self.avg_length,
            "games_played": self.games_played,
            "loss_rate": self.loss_rate,
            "avg_rooms": self.avg_rooms,
            "avg_links": self.avg_links,
            **self.extra_stats,
        }


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(self, obs: Dict[str, Any], legal_actions: List, castle: Optional[Castle] = None) -> Any:
        """选择动作"""
        raise NotImplementedError

    def reset(self, seed: Optional[int] = None):
        """重置状态; 给出 seed 时重新播种"""
        pass


class RandomAgent(Agent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self._rng = np.random.default_rng(seed)

    def act(self, obs: Dict[str, Any], legal_actions: List, castle: Optional[Castle] = None) -> Any:
        if not legal_actions:
            return 0
        idx = self._rng.integers(len(legal_actions))
        return legal_actions[idx]

    def reset(self, seed: Optional[int] = None):
        # 不给 seed 时随机流跨局延续
        if seed is not None:
            self._rng = np.random.default_rng(seed)


class GreedyTreasureAgent(Agent):
    """
    贪心智能体

    向前看一步，选择宝藏最多的结果; 宝藏相同时选择连接更多、房间更多的结果
    """

    def __init__(self, name: str = "greedy"):
        super().__init__(name)

    @staticmethod
    def score(castle: Castle) -> Tuple[int, int, int]:
        """结果评分 (宝藏, 连接数, 房间数)"""
        return castle.get_treasure(), sum(castle.get_links()), castle.room_count

    def act(self, obs: Dict[str, Any], legal_actions: List, castle: Optional[Castle] = None) -> Any:
        if not legal_actions:
            return 0
        if castle is None:
            return legal_actions[0]

        best_action = legal_actions[0]
        best_score = None
        for action in legal_actions:
            try:
                result = castle.apply(action)
            except CastleError:
                continue
            s = self.score(result)
            if best_score is None or s > best_score:
                best_action, best_score = action, s
        return best_action


class Evaluator:
    """
    评估器

    评估智能体在环境中的表现
    """

    def __init__(self, env_fn: Callable):
        self.env_fn = env_fn

    def run_episode(self, agent: Agent, env=None, max_steps: int = 200) -> Dict[str, Any]:
        """
        运行一局

        Returns:
            单局统计 (reward, length, treasure, rooms, links, lost)
        """
        env = env or self.env_fn()
        agent.reset()
        obs, info = env.reset()
        done = False
        episode_reward = 0.0
        episode_length = 0

        while not done and episode_length < max_steps:
            legal_actions = env.get_legal_actions()
            action = agent.act(obs, legal_actions, env.state)
            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            episode_reward += reward
            episode_length += 1

        castle = env.state
        return {
            "reward": episode_reward,
            "length": episode_length,
            "treasure": castle.get_treasure(),
            "rooms": castle.room_count,
            "links": sum(castle.get_links()),
            "lost": castle.is_lost(),
        }

    def evaluate(
        self,
        agent: Agent,
        n_games: int = 100,
        max_steps: int = 200,
        verbose: bool = False,
    ) -> EvalResult:
        """
        评估智能体

        Args:
            agent: 待评估智能体
            n_games: 游戏数量
            max_steps: 每局最大步数
            verbose: 是否输出详情

        Returns:
            评估结果
        """
        env = self.env_fn()
        totals = {"reward": 0.0, "length": 0, "treasure": 0, "rooms": 0, "links": 0, "lost": 0}

        for game_idx in range(n_games):
            stats = self.run_episode(agent, env, max_steps)
            for key in totals:
                totals[key] += stats[key]

            if verbose and (game_idx + 1) % 10 == 0:
                logger.info(
                    f"Game {game_idx + 1}/{n_games}, "
                    f"Avg treasure: {totals['treasure'] / (game_idx + 1):.2f}"
                )

        n = n_games if n_games > 0 else 1
        return EvalResult(
            avg_treasure=totals["treasure"] / n,
            avg_reward=totals["reward"] / n,
            avg_length=totals["length"] / n,
            games_played=n_games,
            loss_rate=totals["lost"] / n,
            avg_rooms=totals["rooms"] / n,
            avg_links=totals["links"] / n,
        )

    def compare(
        self,
        agent1: Agent,
        agent2: Agent,
        n_games: int = 100,
        max_steps: int = 200,
    ) -> Dict[str, float]:
        """
        对比两个智能体 (同一环境配置下各自游戏，比较最终宝藏)

        Returns:
            对比结果
        """
        env = self.env_fn()

        agent1_wins = 0
        agent2_wins = 0
        draws = 0

        for _ in range(n_games):
            t1 = self.run_episode(agent1, env, max_steps)["treasure"]
            t2 = self.run_episode(agent2, env, max_steps)["treasure"]
            if t1 > t2:
                agent1_wins += 1
            elif t2 > t1:
                agent2_wins += 1
            else:
                draws += 1

        n = n_games if n_games > 0 else 1
        return {
            "agent1_wins": agent1_wins,
            "agent2_wins": agent2_wins,
            "draws": draws,
            "agent1_win_rate": agent1_wins / n,
            "agent2_win_rate": agent2_wins / n,
        }
