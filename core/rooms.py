"""
房间模板与已放置房间

房间模板是商店中的不可变条目; 放置到城堡后绑定一个旋转角度。
"""
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from .connectors import Connector, NONE, connector_to_str

Connectors = Tuple[Connector, Connector, Connector, Connector]

# 合法旋转角度
ROTATIONS: Tuple[int, ...] = (0, 90, 180, 270)


def normalize_rotation(rotation: int) -> int:
    """将任意角度向下取整到 90 的倍数，并归一化到 [0, 360)"""
    return ((int(rotation) % 360) // 90) * 90


def rotated_connectors(
    room: Union['RoomTemplate', Sequence[Connector]],
    rotation: int,
) -> Connectors:
    """
    计算旋转后的连接口

    顺时针旋转 rotation 度: 原索引 k 的连接口移动到 (k + rotation/90) % 4

    Args:
        room: 房间模板或原始连接口四元组
        rotation: 角度

    Returns:
        旋转后的连接口四元组
    """
    connectors = room.connectors if isinstance(room, RoomTemplate) else tuple(room)
    steps = normalize_rotation(rotation) // 90
    return tuple(connectors[4 - steps:]) + tuple(connectors[:4 - steps])


@dataclass(frozen=True, slots=True, order=True)
class RoomTemplate:
    """
    不可变房间模板

    Attributes:
        name: 房间名
        is_throne: 是否为王座
        treasure: 宝藏值 (供能时计入总宝藏)
        connectors: 未旋转的四个连接口 (北、东、南、西)
    """
    name: str
    is_throne: bool = False
    treasure: int = 0
    connectors: Connectors = (NONE, NONE, NONE, NONE)

    def __post_init__(self):
        connectors = tuple(self.connectors)
        if len(connectors) != 4:
            raise ValueError(f"Room {self.name!r} needs exactly 4 connectors, got {len(connectors)}")
        if not all(isinstance(c, Connector) for c in connectors):
            raise TypeError(f"Room {self.name!r} connectors must be Connector values")
        if self.treasure < 0:
            raise ValueError(f"Room {self.name!r} treasure must be non-negative")
        object.__setattr__(self, "connectors", connectors)

    def rotated(self, rotation: int) -> Connectors:
        return rotated_connectors(self, rotation)

    def __str__(self) -> str:
        conns = ", ".join(connector_to_str(c) for c in self.connectors)
        return f"{self.name} [{conns}]"


@dataclass(frozen=True, slots=True, order=True)
class PlacedRoom:
    """
    绑定旋转角度的房间

    rotation 在构造时归一化为 0/90/180/270
    """
    template: RoomTemplate
    rotation: int = 0

    def __post_init__(self):
        object.__setattr__(self, "rotation", normalize_rotation(self.rotation))

    @property
    def connectors(self) -> Connectors:
        """旋转后的连接口"""
        return rotated_connectors(self.template, self.rotation)

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def is_throne(self) -> bool:
        return self.template.is_throne

    @property
    def treasure(self) -> int:
        return self.template.treasure

    def rotated(self, rotation: int) -> 'PlacedRoom':
        """以新的角度重新放置"""
        return PlacedRoom(self.template, rotation)

    def __str__(self) -> str:
        return f"{self.template.name}@{self.rotation}"
