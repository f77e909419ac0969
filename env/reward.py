"""
奖励函数

支持两种奖励设计:
- 终局奖励 (sparse): 结束时的宝藏
- 过程奖励 (shaped): 每步的宝藏变化
"""
from dataclasses import dataclass
from typing import Optional
from enum import Enum

from core.state import Castle


class RewardType(Enum):
    """奖励类型"""
    SPARSE = "sparse"      # 仅终局奖励
    SHAPED = "shaped"      # 过程奖励


@dataclass
class RewardConfig:
    """奖励配置"""
    reward_type: RewardType = RewardType.SHAPED
    treasure_scale: float = 1.0   # 每点宝藏的奖励
    link_bonus: float = 0.0       # 每个新增连接的奖励
    lose_reward: float = -1.0     # 城堡失守

    @classmethod
    def from_dict(cls, d: dict) -> 'RewardConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "reward_type" in filtered:
            filtered["reward_type"] = RewardType(filtered["reward_type"])
        return cls(**filtered)


class RewardCalculator:
    """
    奖励计算器

    根据配置计算不同类型的奖励
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(
        self,
        state: Castle,
        prev_state: Optional[Castle] = None,
        terminated: bool = False,
    ) -> float:
        """
        计算奖励

        Args:
            state: 当前状态
            prev_state: 前一状态 (用于 shaped 奖励)
            terminated: 回合是否结束

        Returns:
            奖励值
        """
        if self.config.reward_type == RewardType.SPARSE:
            return self._sparse_reward(state, terminated)
        elif self.config.reward_type == RewardType.SHAPED:
            return self._shaped_reward(state, prev_state, terminated)
        else:
            return 0.0

    def _sparse_reward(self, state: Castle, terminated: bool) -> float:
        """
        稀疏奖励：仅在游戏结束时给予

        Returns:
            失守: lose_reward, 否则为最终宝藏
        """
        if not terminated:
            return 0.0

        if state.is_lost():
            return self.config.lose_reward

        return state.get_treasure() * self.config.treasure_scale

    def _shaped_reward(
        self,
        state: Castle,
        prev_state: Optional[Castle],
        terminated: bool,
    ) -> float:
        """
        过程奖励

        奖励组成:
        1. 宝藏变化
        2. 连接数变化
        3. 失守惩罚
        """
        reward = 0.0

        if prev_state is not None:
            reward += (state.get_treasure() - prev_state.get_treasure()) * self.config.treasure_scale

            if self.config.link_bonus:
                links = sum(state.get_links()) - sum(prev_state.get_links())
                reward += links * self.config.link_bonus

        if terminated and state.is_lost():
            reward += self.config.lose_reward

        return reward


def create_reward_calculator(
    reward_type: str = "shaped",
    **kwargs
) -> RewardCalculator:
    """
    工厂函数：创建奖励计算器

    Args:
        reward_type: 奖励类型 ("sparse", "shaped")
        **kwargs: 其他配置参数

    Returns:
        RewardCalculator 实例
    """
    config = RewardConfig(
        reward_type=RewardType(reward_type),
        **kwargs
    )
    return RewardCalculator(config)
