"""
网格拓扑

城堡建在无限的整数网格上，每个格子有四个相邻格子，
方向顺序固定为 北、东、南、西。
"""
from enum import IntEnum
from typing import Tuple

# (x, y) 坐标
Position = Tuple[int, int]

# 起始王座所在的位置
ORIGIN: Position = (0, 0)


class Direction(IntEnum):
    """方向 (索引即连接口在四元组中的位置)"""
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3


# 每个方向的坐标偏移
DIRECTION_OFFSETS: Tuple[Position, ...] = (
    (0, -1),   # 北
    (1, 0),    # 东
    (0, 1),    # 南
    (-1, 0),   # 西
)


def neighbors(pos: Position) -> Tuple[Position, Position, Position, Position]:
    """
    获取四个相邻位置

    Args:
        pos: 位置

    Returns:
        (北, 东, 南, 西) 四个位置
    """
    x, y = pos
    return (x, y - 1), (x + 1, y), (x, y + 1), (x - 1, y)


def opposite(direction: int) -> int:
    """对面方向: 同一条边的另一端"""
    return (direction + 2) % 4


def parse_position(s: str) -> Position:
    """
    将 "x,y" 字符串解析为位置

    Args:
        s: 如 "0,-1"

    Returns:
        位置元组
    """
    parts = s.replace("(", "").replace(")", "").split(",")
    if len(parts) != 2:
        raise ValueError(f"Invalid position: {s!r}")
    return int(parts[0]), int(parts[1])


def position_to_str(pos: Position) -> str:
    return f"{pos[0]},{pos[1]}"
