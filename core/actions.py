"""
动作类型定义与动作生成器

城堡共有 5 种动作: 放置、移动、交换、弃置、伤害
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple
import logging

from .grid import Position
from .rooms import PlacedRoom, RoomTemplate, normalize_rotation
from .rules import RuleEngine

if TYPE_CHECKING:
    from .state import Castle

logger = logging.getLogger(__name__)


class ActionType(IntEnum):
    """动作类型"""
    PLACE = 0     # 从商店放置房间
    MOVE = 1      # 移动外围房间
    SWAP = 2      # 交换两个房间
    DISCARD = 3   # 按顺序弃置房间以抵消伤害
    DAMAGE = 4    # 受到伤害 (由外部驱动产生)


# 玩家在无伤害时可执行的动作
BUILD_ACTIONS = (ActionType.PLACE, ActionType.MOVE, ActionType.SWAP)


@dataclass(frozen=True, slots=True)
class Action:
    """
    不可变动作表示

    Attributes:
        action_type: 动作类型
        positions: 涉及的位置 (放置: 目标; 移动/交换: 两个位置; 弃置: 按顺序的位置)
        room: 放置的房间模板 (仅 PLACE)
        rotation: 旋转角度 (PLACE / MOVE; MOVE 为 None 时保持原角度)
        amounts: 伤害值 (diamond, cross, moon) (仅 DAMAGE)
    """
    action_type: ActionType
    positions: Tuple[Position, ...] = ()
    room: Optional[RoomTemplate] = None
    rotation: Optional[int] = None
    amounts: Tuple[int, int, int] = (0, 0, 0)

    @classmethod
    def place(cls, room: RoomTemplate, pos: Position, rotation: int = 0) -> 'Action':
        """创建放置动作"""
        return cls(
            ActionType.PLACE, positions=(tuple(pos),), room=room,
            rotation=normalize_rotation(rotation),
        )

    @classmethod
    def move(cls, src: Position, dst: Position, rotation: Optional[int] = None) -> 'Action':
        """创建移动动作"""
        if rotation is not None:
            rotation = normalize_rotation(rotation)
        return cls(ActionType.MOVE, positions=(tuple(src), tuple(dst)), rotation=rotation)

    @classmethod
    def swap(cls, pos1: Position, pos2: Position) -> 'Action':
        """创建交换动作"""
        return cls(ActionType.SWAP, positions=(tuple(pos1), tuple(pos2)))

    @classmethod
    def discard(cls, positions: Sequence[Position]) -> 'Action':
        """创建弃置动作 (按顺序)"""
        return cls(ActionType.DISCARD, positions=tuple(tuple(p) for p in positions))

    @classmethod
    def damage(cls, diamond: int = 0, cross: int = 0, moon: int = 0) -> 'Action':
        """创建伤害动作"""
        if min(diamond, cross, moon) < 0:
            raise ValueError("Damage amounts must be non-negative")
        return cls(ActionType.DAMAGE, amounts=(diamond, cross, moon))

    @property
    def is_build(self) -> bool:
        return self.action_type in BUILD_ACTIONS

    @property
    def is_discard(self) -> bool:
        return self.action_type == ActionType.DISCARD

    @property
    def source(self) -> Position:
        """移动/交换的第一个位置，放置的目标位置"""
        return self.positions[0]

    @property
    def target(self) -> Position:
        """移动/交换的第二个位置，放置的目标位置"""
        return self.positions[-1]

    def __len__(self) -> int:
        return len(self.positions)

    def __str__(self) -> str:
        if self.action_type == ActionType.PLACE:
            return f"Place {self.room.name} at {self.target} ({self.rotation})"
        if self.action_type == ActionType.MOVE:
            rotation = "" if self.rotation is None else f" ({self.rotation})"
            return f"Move {self.source} -> {self.target}{rotation}"
        if self.action_type == ActionType.SWAP:
            return f"Swap {self.source} <-> {self.target}"
        if self.action_type == ActionType.DISCARD:
            return "Discard " + " ".join(str(p) for p in self.positions)
        diamond, cross, moon = self.amounts
        return f"Damage diamond={diamond} cross={cross} moon={moon}"


class ActionGenerator:
    """
    合法动作生成器

    根据城堡状态生成所有可能的动作
    """

    def __init__(self, castle: 'Castle'):
        """
        Args:
            castle: 城堡状态
        """
        self.castle = castle
        self._rooms = castle.get_rooms()

    def gen_placements(self, shop: Sequence[RoomTemplate]) -> List[Action]:
        """
        生成所有放置动作

        枚举时旋转固定为 0; 相同模板只生成一次
        """
        result = []
        for template in dict.fromkeys(shop):
            room = PlacedRoom(template, 0)
            for pos in RuleEngine.placeable_positions(self._rooms, room):
                result.append(Action.place(template, pos, 0))
        return result

    def gen_moves(self) -> List[Action]:
        """
        生成所有移动动作

        只有外围房间可以移动; 先移除房间，再寻找其他可放置位置
        """
        result = []
        for src in sorted(self._rooms):
            if not RuleEngine.is_outer(self._rooms, src):
                continue
            room = self._rooms[src]
            remaining = {p: r for p, r in self._rooms.items() if p != src}
            for dst in RuleEngine.placeable_positions(remaining, room):
                if dst != src:
                    result.append(Action.move(src, dst, room.rotation))
        return result

    def gen_swaps(self) -> List[Action]:
        """生成所有交换动作 (无序对，每对一次)"""
        # 房间数量有限，直接枚举所有位置对
        result = []
        positions = sorted(self._rooms)
        for i, pos1 in enumerate(positions):
            for pos2 in positions[i + 1:]:
                if RuleEngine.can_swap(self._rooms, pos1, pos2):
                    result.append(Action.swap(pos1, pos2))
        return result

    def gen_discard_sequences(self) -> List[Tuple[Position, ...]]:
        """
        穷举所有把伤害恰好降到 0 的弃置序列

        使用显式栈做深度优先搜索，每一步都按弃置优先级选择候选。
        每次弃置都会减少一个房间，搜索树有限。

        Returns:
            弃置位置序列列表 (长度可能不同)
        """
        root = self.castle
        if root.damage == 0:
            return []

        results: List[Tuple[Position, ...]] = []
        stack: List[Tuple['Castle', Tuple[Position, ...]]] = []

        _, candidates = root.discard_candidates()
        # 逆序入栈，出栈顺序与位置顺序一致
        for pos in reversed(candidates):
            stack.append((root.discard_room(pos), (pos,)))

        while stack:
            castle, history = stack.pop()
            if castle.damage == 0:
                results.append(history)
                continue
            _, candidates = castle.discard_candidates()
            for pos in reversed(candidates):
                stack.append((castle.discard_room(pos), history + (pos,)))

        logger.debug(f"Found {len(results)} discard sequences for damage {root.damage}")
        return results

    def gen_discards(self) -> List[Action]:
        """生成所有弃置动作 (每个完整序列一个动作)"""
        return [Action.discard(seq) for seq in self.gen_discard_sequences()]

    def generate_all(self, shop: Sequence[RoomTemplate]) -> List[Action]:
        """
        生成所有可能的动作

        有伤害时只能弃置; 否则为 放置 + 移动 + 交换

        Args:
            shop: 商店中可用的房间模板

        Returns:
            所有合法动作列表
        """
        if self.castle.damage > 0:
            return self.gen_discards()

        actions = []
        actions.extend(self.gen_placements(shop))
        actions.extend(self.gen_moves())
        actions.extend(self.gen_swaps())
        return actions
