"""
环境配置

定义城堡环境相关的参数
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from core.catalog import DEFAULT_SHOP, THRONE_ROOM, room_from_dict
from core.rooms import RoomTemplate

# (diamond, cross, moon)
DamageAmounts = Tuple[int, int, int]


@dataclass
class EnvConfig:
    """
    城堡环境配置

    Attributes:
        shop: 商店中的房间模板 (固定顺序)
        throne: 起始王座
        damage_schedule: 伤害序列，每 damage_interval 个建造回合循环取一项
        damage_interval: 两次伤害之间的建造回合数
        board_radius: 观测网格半径 (以原点为中心)
        max_actions: 动作空间大小 (合法动作列表的最大长度)
        invalid_action_penalty: 非法动作的惩罚
    """
    shop: Tuple[RoomTemplate, ...] = DEFAULT_SHOP
    throne: RoomTemplate = THRONE_ROOM

    # 伤害设置
    damage_schedule: Tuple[DamageAmounts, ...] = (
        (0, 0, 0),
        (1, 0, 0),
        (0, 1, 0),
        (0, 0, 1),
        (1, 1, 1),
    )
    damage_interval: int = 1

    # 观测 / 动作空间
    board_radius: int = 4
    max_actions: int = 1024

    invalid_action_penalty: float = -1.0

    def __post_init__(self):
        self.shop = tuple(self.shop)
        self.damage_schedule = tuple(tuple(int(v) for v in amounts) for amounts in self.damage_schedule)
        if self.damage_interval < 1:
            raise ValueError("damage_interval must be at least 1")
        if self.board_radius < 1:
            raise ValueError("board_radius must be at least 1")
        for amounts in self.damage_schedule:
            if len(amounts) != 3 or min(amounts) < 0:
                raise ValueError(f"Invalid damage amounts: {amounts}")

    @property
    def board_size(self) -> int:
        return 2 * self.board_radius + 1

    def damage_for_turn(self, turn: int) -> Optional[DamageAmounts]:
        """
        第 turn 个建造回合结束后的伤害

        Args:
            turn: 已完成的建造回合数 (从 1 开始)

        Returns:
            伤害三元组，不在伤害回合时返回 None
        """
        if not self.damage_schedule or turn % self.damage_interval != 0:
            return None
        idx = (turn // self.damage_interval - 1) % len(self.damage_schedule)
        return self.damage_schedule[idx]

    @classmethod
    def from_dict(cls, d: dict) -> 'EnvConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "shop" in filtered:
            filtered["shop"] = tuple(
                room if isinstance(room, RoomTemplate) else room_from_dict(room)
                for room in filtered["shop"]
            )
        if "throne" in filtered and not isinstance(filtered["throne"], RoomTemplate):
            filtered["throne"] = room_from_dict(filtered["throne"])
        return cls(**filtered)
