"""
城堡 Gymnasium 环境

遵循标准 Gymnasium API
"""
from typing import Dict, Any, Tuple, Optional, List, Union
import logging
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from core.actions import Action
from core.errors import CastleError
from core.state import Castle

from .config import EnvConfig
from .observation import (
    BOARD_CHANNELS,
    SHOP_ENTRY_DIM,
    STATUS_DIM,
    ActionEncoder,
    ObservationBuilder,
)
from .reward import create_reward_calculator

logger = logging.getLogger(__name__)


class CastleEnv(gym.Env):
    """
    城堡建造 Gymnasium 环境

    每个建造回合 (放置/移动/交换) 结束后，按配置的伤害序列对城堡造成伤害;
    有伤害时下一步只能选择弃置序列

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "Castle-v1",
    }

    def __init__(
        self,
        config: Optional[EnvConfig] = None,
        render_mode: Optional[str] = None,
        reward_type: str = "shaped",
    ):
        """
        Args:
            config: 环境配置
            render_mode: 渲染模式 ("human", "ansi", None)
            reward_type: 奖励类型 ("sparse", "shaped")
        """
        super().__init__()

        self.config = config or EnvConfig()
        self.render_mode = render_mode

        # 观测构建器
        self._obs_builder = ObservationBuilder(
            shop=self.config.shop,
            board_radius=self.config.board_radius,
        )

        # 奖励计算器
        self._reward_calculator = create_reward_calculator(reward_type)

        # 动作编码器
        self._action_encoder = ActionEncoder(self.config.max_actions)

        # 状态
        self._state: Optional[Castle] = None
        self._prev_state: Optional[Castle] = None
        self._legal_actions: List[Action] = []
        self._turn = 0
        self._step_count = 0

        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        size = self.config.board_size

        # 动作空间: 合法动作列表的索引
        self.action_space = spaces.Discrete(self._action_encoder.num_actions)

        self.observation_space = spaces.Dict({
            "board": spaces.Box(0, 1, shape=(BOARD_CHANNELS, size, size), dtype=np.float32),
            "status": spaces.Box(0, np.inf, shape=(STATUS_DIM,), dtype=np.float32),
            "shop": spaces.Box(
                0, np.inf, shape=(len(self.config.shop), SHOP_ENTRY_DIM), dtype=np.float32
            ),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境

        Args:
            seed: 随机种子 (城堡本身是确定性的，仅用于 action_space 采样)
            options: 额外选项，支持 {"castle": Castle} 从指定状态开始

        Returns:
            (observation, info) 元组
        """
        super().reset(seed=seed)

        if options and options.get("castle") is not None:
            self._state = options["castle"]
        else:
            self._state = Castle.new(self.config.throne)
        self._prev_state = None
        self._turn = 0
        self._step_count = 0
        self._refresh_legal_actions()

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: Union[int, Action],
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行动作

        Args:
            action: 合法动作列表中的索引，或 Action 对象

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        if self._state is None:
            raise RuntimeError("Environment not reset. Call reset() first.")

        concrete_action = self._decode_action(action)

        # 只接受当前合法动作列表中的动作 (伤害只能由环境产生)
        if concrete_action is None or concrete_action not in self._legal_actions:
            return self._reject(f"Invalid action: {action}")

        try:
            new_state = self._state.apply(concrete_action)
        except CastleError as e:
            return self._reject(str(e))

        self._prev_state = self._state
        self._step_count += 1

        # 建造回合结束后结算伤害
        if concrete_action.is_build:
            self._turn += 1
            amounts = self.config.damage_for_turn(self._turn)
            if amounts is not None:
                new_state = new_state.deal_damage(*amounts)

        self._state = new_state
        self._refresh_legal_actions()

        obs = self._build_observation()
        terminated = self._is_terminal()
        reward = self._reward_calculator.compute(self._state, self._prev_state, terminated)
        truncated = False
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _reject(self, error: str):
        """非法动作：给予惩罚并保持状态"""
        logger.debug(error)
        obs = self._build_observation()
        info = self._build_info()
        info["error"] = error
        return obs, self.config.invalid_action_penalty, False, False, info

    def _decode_action(self, action: Union[int, Action]) -> Optional[Action]:
        """解码动作"""
        if isinstance(action, Action):
            return action
        elif isinstance(action, (int, np.integer)):
            return self._action_encoder.decode(int(action), self._legal_actions)
        else:
            raise ValueError(f"Invalid action type: {type(action)}")

    def _refresh_legal_actions(self):
        if self._state.is_lost():
            self._legal_actions = []
        else:
            self._legal_actions = self._state.possible_actions(self.config.shop)

    def _is_terminal(self) -> bool:
        """已输，或无路可走"""
        return self._state.is_lost() or not self._legal_actions

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """构建观测"""
        obs = self._obs_builder.build(self._state, self._legal_actions)
        return obs.to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        info = {
            "legal_actions": self._legal_actions,
            "legal_action_mask": self._action_encoder.build_legal_mask(self._legal_actions),
            "damage": self._state.damage,
            "room_count": self._state.room_count,
            "treasure": self._state.get_treasure(),
            "links": self._state.get_links(),
            "turn": self._turn,
            "step_count": self._step_count,
        }

        if self._is_terminal():
            info["lost"] = self._state.is_lost()

        return info

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        lines = []
        lines.append("=" * 50)
        lines.append(render_castle(self._state))
        lines.append(f"Turn: {self._turn}  Legal actions: {len(self._legal_actions)}")
        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def state(self) -> Optional[Castle]:
        """获取当前状态 (用于调试)"""
        return self._state

    def get_legal_actions(self) -> List[Action]:
        """获取当前合法动作"""
        if self._state is None:
            return []
        return list(self._legal_actions)

    def sample_action(self) -> Union[int, Action]:
        """随机采样一个合法动作"""
        if not self._legal_actions:
            return 0
        idx = self.np_random.integers(len(self._legal_actions))
        return self._legal_actions[idx]


def render_castle(castle: Castle) -> str:
    """
    将城堡绘制为文本网格

    T 为王座，其余房间显示名称首字母; 下方附带伤害、宝藏与连接数
    """
    rooms = castle.get_rooms()
    lines = []
    if rooms:
        xs = [x for x, _ in rooms]
        ys = [y for _, y in rooms]
        for y in range(min(ys), max(ys) + 1):
            row = []
            for x in range(min(xs), max(xs) + 1):
                room = rooms.get((x, y))
                if room is None:
                    row.append(".")
                elif room.is_throne:
                    row.append("T")
                else:
                    row.append(room.name[:1].lower())
            lines.append(" ".join(row))
    else:
        lines.append("(empty)")

    diamond, cross, moon, wild = castle.get_links()
    lines.append(
        f"Rooms: {castle.room_count}  Damage: {castle.damage}  Treasure: {castle.get_treasure()}"
    )
    lines.append(f"Links: diamond={diamond} cross={cross} moon={moon} wild={wild}")
    if castle.is_lost():
        lines.append("Castle is lost")
    return "\n".join(lines)


def make_env(
    env_id: str = "Castle-v1",
    **kwargs
) -> CastleEnv:
    """
    工厂函数：创建环境

    Args:
        env_id: 环境 ID
        **kwargs: 环境参数 (config 可以是 EnvConfig 或 dict)

    Returns:
        CastleEnv 实例
    """
    config = kwargs.pop("config", None)
    if isinstance(config, dict):
        config = EnvConfig.from_dict(config)
    return CastleEnv(config=config, **kwargs)
