"""
城堡环境包装器

- 展平观测 / 合法动作掩码: 对接只接受向量观测或需要 masking 的算法
- 奖励缩放 / 步数上限 / 回合统计: 训练与评估时常用
"""
from typing import Any, Dict, Optional
import numpy as np

import gymnasium as gym


class FlattenObservationWrapper(gym.ObservationWrapper):
    """
    board / status / shop 拼接为一维 float32 向量

    拼接顺序与 observation_space 的键顺序一致
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        self._keys = list(env.observation_space.spaces.keys())
        boxes = [env.observation_space.spaces[k] for k in self._keys]

        self.observation_space = gym.spaces.Box(
            low=np.concatenate([b.low.ravel() for b in boxes]).astype(np.float32),
            high=np.concatenate([b.high.ravel() for b in boxes]).astype(np.float32),
            dtype=np.float32,
        )

    def observation(self, observation: Dict[str, np.ndarray]) -> np.ndarray:
        parts = [np.asarray(observation[k], dtype=np.float32).ravel() for k in self._keys]
        return np.concatenate(parts)


class LegalActionMaskWrapper(gym.Wrapper):
    """
    info["action_mask"]: 动作索引是否可选

    掩码来自 CastleEnv 的 legal_action_mask; 回合结束后全部为 0
    """

    def reset(self, **kwargs):
        obs, info = self.env.reset(**kwargs)
        info["action_mask"] = self._mask(info, done=False)
        return obs, info

    def step(self, action):
        obs, reward, terminated, truncated, info = self.env.step(action)
        info["action_mask"] = self._mask(info, done=terminated)
        return obs, reward, terminated, truncated, info

    def _mask(self, info: Dict[str, Any], done: bool) -> np.ndarray:
        n = self.action_space.n
        if done:
            return np.zeros(n, dtype=np.float32)
        mask = info.get("legal_action_mask")
        if mask is None:
            legal = self.env.unwrapped.get_legal_actions()
            mask = np.zeros(n, dtype=np.float32)
            mask[:min(len(legal), n)] = 1
        return np.asarray(mask, dtype=np.float32)


class RewardScaleWrapper(gym.RewardWrapper):
    """奖励乘以固定系数"""

    def __init__(self, env: gym.Env, scale: float = 1.0):
        super().__init__(env)
        self.scale = scale

    def reward(self, reward: float) -> float:
        return reward * self.scale


class TimeLimit(gym.Wrapper):
    """
    限制每局的步数 (包括弃置步)
    """

    def __init__(self, env: gym.Env, max_steps: int = 200):
        super().__init__(env)
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.max_steps = max_steps
        self._elapsed = 0

    def reset(self, **kwargs):
        self._elapsed = 0
        return self.env.reset(**kwargs)

    def step(self, action):
        obs, reward, terminated, truncated, info = self.env.step(action)
        self._elapsed += 1
        if not terminated and self._elapsed >= self.max_steps:
            truncated = True
        return obs, reward, terminated, truncated, info


class RecordEpisodeStatistics(gym.Wrapper):
    """
    回合结束时在 info["episode"] 中写入统计

    r: 累计奖励, l: 步数, treasure: 最终宝藏, max_treasure: 回合内最高宝藏,
    rooms: 最终房间数, discards: 弃置步数, invalid: 非法动作数, lost: 是否失守
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        self._stats: Dict[str, Any] = {}

    def reset(self, **kwargs):
        obs, info = self.env.reset(**kwargs)
        self._stats = {
            "r": 0.0,
            "l": 0,
            "max_treasure": info.get("treasure", 0),
            "discards": 0,
            "invalid": 0,
        }
        return obs, info

    def step(self, action):
        state = self.env.unwrapped.state
        damage_before = state.damage if state is not None else 0
        obs, reward, terminated, truncated, info = self.env.step(action)

        stats = self._stats
        stats["r"] += reward
        stats["l"] += 1
        stats["max_treasure"] = max(stats["max_treasure"], info.get("treasure", 0))
        if "error" in info:
            stats["invalid"] += 1
        elif damage_before > 0:
            stats["discards"] += 1

        if terminated or truncated:
            info["episode"] = dict(
                stats,
                treasure=info.get("treasure", 0),
                rooms=info.get("room_count", 0),
                lost=info.get("lost", False),
            )

        return obs, reward, terminated, truncated, info


def wrap_env(
    env: gym.Env,
    time_limit: Optional[int] = None,
    reward_scale: float = 1.0,
    record_stats: bool = True,
    action_mask: bool = True,
    flatten_obs: bool = False,
) -> gym.Env:
    """
    按固定顺序套上常用包装器

    由内到外: 步数上限 -> 统计 -> 奖励缩放 -> 动作掩码 -> 展平观测
    """
    if time_limit is not None:
        env = TimeLimit(env, max_steps=time_limit)
    if record_stats:
        env = RecordEpisodeStatistics(env)
    if reward_scale != 1.0:
        env = RewardScaleWrapper(env, scale=reward_scale)
    if action_mask:
        env = LegalActionMaskWrapper(env)
    if flatten_obs:
        env = FlattenObservationWrapper(env)
    return env
