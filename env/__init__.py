"""
Environment Layer - Gymnasium 兼容环境

Modules:
    castle_env: 主环境类
    config: 环境配置
    observation: 观测空间构建
    reward: 奖励函数
    wrappers: 环境包装器
"""
from .castle_env import (
    CastleEnv,
    make_env,
    render_castle,
)

from .config import EnvConfig

from .observation import (
    Observation,
    ObservationBuilder,
    ActionEncoder,
    encode_shop,
)

from .reward import (
    RewardType,
    RewardConfig,
    RewardCalculator,
    create_reward_calculator,
)

from .wrappers import (
    FlattenObservationWrapper,
    LegalActionMaskWrapper,
    RewardScaleWrapper,
    TimeLimit,
    RecordEpisodeStatistics,
    wrap_env,
)

__all__ = [
    # env
    "CastleEnv",
    "make_env",
    "render_castle",
    # config
    "EnvConfig",
    # observation
    "Observation",
    "ObservationBuilder",
    "ActionEncoder",
    "encode_shop",
    # reward
    "RewardType",
    "RewardConfig",
    "RewardCalculator",
    "create_reward_calculator",
    # wrappers
    "FlattenObservationWrapper",
    "LegalActionMaskWrapper",
    "RewardScaleWrapper",
    "TimeLimit",
    "RecordEpisodeStatistics",
    "wrap_env",
]
