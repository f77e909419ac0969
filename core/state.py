"""
城堡状态定义

使用不可变数据结构，支持:
- 哈希 (用于置换表 / 搜索缓存)
- 多个快照同时存在 (撤销栈、推演)
- 易于序列化
"""
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
import logging

from .actions import Action, ActionGenerator, ActionType
from .catalog import room_from_dict, room_to_dict
from .errors import (
    EmptyPositionError,
    InvalidConnectionError,
    InvalidPositionError,
    MustDiscardError,
    NoDamageError,
    NotNearlyOuterRoomError,
    NotOuterRoomError,
    TakenPositionError,
)
from .grid import ORIGIN, Position, parse_position, position_to_str
from .rooms import PlacedRoom, RoomTemplate
from .rules import DiscardTier, Links, RuleEngine

logger = logging.getLogger(__name__)


def _as_placed(room: Union[RoomTemplate, PlacedRoom], rotation: Optional[int] = None) -> PlacedRoom:
    """模板或已放置房间 -> 指定角度的已放置房间"""
    if isinstance(room, PlacedRoom):
        return room if rotation is None else room.rotated(rotation)
    return PlacedRoom(room, rotation or 0)


@dataclass(frozen=True)
class Castle:
    """
    不可变城堡状态

    使用 frozen=True 保证:
    - 可哈希
    - 每次操作都返回新的城堡，旧快照保持不变

    Attributes:
        rooms: (位置, 房间) 元组，按位置排序
        damage: 尚未通过弃置抵消的伤害
    """
    rooms: Tuple[Tuple[Position, PlacedRoom], ...] = ()
    damage: int = 0

    def __post_init__(self):
        rooms = tuple(sorted(((tuple(pos), room) for pos, room in self.rooms), key=lambda item: item[0]))
        positions = [pos for pos, _ in rooms]
        if len(set(positions)) != len(positions):
            raise ValueError("Castle has more than one room at the same position")
        if self.damage < 0:
            raise ValueError(f"Castle damage must be non-negative, got {self.damage}")
        object.__setattr__(self, "rooms", rooms)

    @cached_property
    def _room_map(self) -> Dict[Position, PlacedRoom]:
        return dict(self.rooms)

    @classmethod
    def new(cls, starting_room: Union[RoomTemplate, PlacedRoom]) -> 'Castle':
        """
        创建初始城堡

        Args:
            starting_room: 起始 (王座) 房间，放在原点

        Returns:
            无伤害的新城堡
        """
        return cls(rooms=((ORIGIN, _as_placed(starting_room)),), damage=0)

    def _with(self, rooms: Mapping[Position, PlacedRoom], damage: int) -> 'Castle':
        return Castle(rooms=tuple(rooms.items()), damage=damage)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def get_rooms(self) -> Dict[Position, PlacedRoom]:
        """获取房间映射 (只读副本)"""
        return dict(self._room_map)

    def room_at(self, pos: Position) -> Optional[PlacedRoom]:
        return self._room_map.get(tuple(pos))

    @property
    def positions(self) -> List[Position]:
        return [pos for pos, _ in self.rooms]

    @property
    def room_count(self) -> int:
        return len(self.rooms)

    def get_damage(self) -> int:
        return self.damage

    def is_lost(self) -> bool:
        """伤害不少于房间数，或者城堡中已没有王座"""
        return RuleEngine.is_lost(self._room_map, self.damage)

    def get_links(self) -> Links:
        """(diamond, cross, moon, wild) 连接数"""
        return RuleEngine.count_links(self._room_map)

    def get_treasure(self) -> int:
        """供能房间的宝藏总和"""
        return RuleEngine.total_treasure(self._room_map)

    def room_is_powered(self, pos: Position) -> bool:
        return RuleEngine.is_powered(self._room_map, tuple(pos))

    def num_connections(self, pos: Position) -> int:
        return RuleEngine.num_connections(self._room_map, tuple(pos))

    def room_is_outer(self, pos: Position) -> bool:
        return RuleEngine.is_outer(self._room_map, tuple(pos))

    def can_place_room(self, room: Union[RoomTemplate, PlacedRoom], pos: Position, rotation: Optional[int] = None) -> bool:
        """检查放置合法性 (不检查占用)"""
        return RuleEngine.can_place_room(self._room_map, _as_placed(room, rotation), tuple(pos))

    def discard_candidates(self) -> Tuple[DiscardTier, Tuple[Position, ...]]:
        """按优先级获取可弃置位置"""
        return RuleEngine.discard_candidates(self._room_map, self.damage)

    def possible_actions(self, shop: Sequence[RoomTemplate]) -> List[Action]:
        """
        获取所有合法动作

        Args:
            shop: 商店中可用的房间模板

        Returns:
            有伤害时为弃置序列动作，否则为放置/移动/交换动作
        """
        return ActionGenerator(self).generate_all(shop)

    def all_possible_discards(self) -> List[Tuple[Position, ...]]:
        """所有能把伤害恰好降到 0 的弃置序列"""
        return ActionGenerator(self).gen_discard_sequences()

    # ------------------------------------------------------------------
    # 变更 (全部返回新城堡)
    # ------------------------------------------------------------------

    def place_room(self, room: Union[RoomTemplate, PlacedRoom], pos: Position, rotation: int = 0) -> 'Castle':
        """
        放置房间

        Raises:
            MustDiscardError: 有未处理的伤害
            TakenPositionError: 位置已有房间
            InvalidConnectionError: 连接不匹配
        """
        pos = tuple(pos)
        if self.damage > 0:
            raise MustDiscardError()
        if pos in self._room_map:
            raise TakenPositionError()
        placed = _as_placed(room, rotation)
        if not RuleEngine.can_place_room(self._room_map, placed, pos):
            raise InvalidConnectionError()

        rooms = self.get_rooms()
        rooms[pos] = placed
        return self._with(rooms, self.damage)

    def move_room(self, src: Position, dst: Position, rotation: Optional[int] = None) -> 'Castle':
        """
        移动外围房间

        Args:
            src: 原位置
            dst: 目标位置
            rotation: 新角度 (None 保持原角度)

        Raises:
            MustDiscardError, InvalidPositionError, EmptyPositionError,
            NotOuterRoomError, TakenPositionError, InvalidConnectionError
        """
        src, dst = tuple(src), tuple(dst)
        if self.damage > 0:
            raise MustDiscardError()
        if src == dst:
            raise InvalidPositionError()
        if src not in self._room_map:
            raise EmptyPositionError()
        if not RuleEngine.is_outer(self._room_map, src):
            raise NotOuterRoomError()
        if dst in self._room_map:
            raise TakenPositionError()

        rooms = self.get_rooms()
        room = _as_placed(rooms.pop(src), rotation)
        if not RuleEngine.can_place_room(rooms, room, dst):
            raise InvalidConnectionError()
        rooms[dst] = room
        return self._with(rooms, self.damage)

    def swap_rooms(self, pos1: Position, pos2: Position) -> 'Castle':
        """
        交换两个房间

        Raises:
            MustDiscardError, InvalidPositionError, EmptyPositionError, InvalidConnectionError
        """
        pos1, pos2 = tuple(pos1), tuple(pos2)
        if self.damage > 0:
            raise MustDiscardError()
        if pos1 == pos2:
            raise InvalidPositionError()
        if pos1 not in self._room_map or pos2 not in self._room_map:
            raise EmptyPositionError()
        if not RuleEngine.can_swap(self._room_map, pos1, pos2):
            raise InvalidConnectionError()

        rooms = self.get_rooms()
        rooms[pos1], rooms[pos2] = rooms[pos2], rooms[pos1]
        return self._with(rooms, self.damage)

    def discard_room(self, pos: Position) -> 'Castle':
        """
        弃置单个房间，伤害减 1

        王座只有在最后一个房间时才能弃置; 其余房间优先弃置外围房间，
        没有外围房间时才能弃置连接数 <= 2 的房间

        Raises:
            NoDamageError, EmptyPositionError, NotOuterRoomError, NotNearlyOuterRoomError
        """
        pos = tuple(pos)
        if self.damage == 0:
            raise NoDamageError()
        room = self._room_map.get(pos)
        if room is None:
            raise EmptyPositionError()
        if room.is_throne and self.room_count > 1:
            raise NotOuterRoomError()

        if self.room_count > 1:
            outer = [
                p for p, r in self.rooms
                if not r.is_throne and RuleEngine.is_outer(self._room_map, p)
            ]
            if outer:
                if pos not in outer:
                    raise NotOuterRoomError()
            elif not RuleEngine.is_nearly_outer(self._room_map, pos):
                raise NotNearlyOuterRoomError()

        rooms = self.get_rooms()
        del rooms[pos]
        return self._with(rooms, self.damage - 1)

    def discard_rooms(self, positions: Iterable[Position]) -> 'Castle':
        """
        按顺序弃置多个房间，最终伤害必须恰好为 0

        Raises:
            NoDamageError: 没有伤害
            MustDiscardError: 弃置后仍有剩余伤害
            其他单次弃置的错误
        """
        if self.damage == 0:
            raise NoDamageError()
        castle = self
        for pos in positions:
            castle = castle.discard_room(pos)
        if castle.damage != 0:
            raise MustDiscardError()
        return castle

    def deal_damage(self, diamond: int = 0, cross: int = 0, moon: int = 0) -> 'Castle':
        """
        受到伤害

        每种类型超出对应连接数的部分计入伤害; 伤害大于 wild 连接数时
        减去 wild 连接数; 伤害不少于房间数时整个城堡被摧毁

        Returns:
            新城堡 (从不失败)
        """
        diamond_link, cross_link, moon_link, wild_link = self.get_links()
        damage = self.damage
        damage += max(diamond - diamond_link, 0)
        damage += max(cross - cross_link, 0)
        damage += max(moon - moon_link, 0)
        if damage > wild_link:
            damage -= wild_link

        rooms = self.get_rooms()
        if damage >= len(rooms):
            logger.debug(f"Castle wiped: damage {damage} >= {len(rooms)} rooms")
            damage -= len(rooms)
            rooms = {}
        return self._with(rooms, damage)

    def apply(self, action: Action) -> 'Castle':
        """
        执行动作后的新状态

        Args:
            action: 动作

        Returns:
            新城堡

        Raises:
            CastleError: 动作不合法
        """
        if action.action_type == ActionType.PLACE:
            return self.place_room(action.room, action.target, action.rotation or 0)
        elif action.action_type == ActionType.MOVE:
            return self.move_room(action.source, action.target, action.rotation)
        elif action.action_type == ActionType.SWAP:
            return self.swap_rooms(action.source, action.target)
        elif action.action_type == ActionType.DISCARD:
            return self.discard_rooms(action.positions)
        elif action.action_type == ActionType.DAMAGE:
            return self.deal_damage(*action.amounts)
        raise ValueError(f"Unknown action type: {action.action_type}")

    # ------------------------------------------------------------------
    # 序列化
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """转换为可 JSON 序列化的字典"""
        return {
            "damage": self.damage,
            "rooms": {
                position_to_str(pos): room_to_dict(room.template, room.rotation)
                for pos, room in self.rooms
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Castle':
        """从字典恢复城堡"""
        rooms = []
        for key, value in data.get("rooms", {}).items():
            template = room_from_dict(value)
            rooms.append((parse_position(key), PlacedRoom(template, int(value.get("rotation", 0)))))
        return cls(rooms=tuple(rooms), damage=int(data.get("damage", 0)))


def apply(castle: Castle, action: Action) -> Castle:
    """动作应用入口"""
    return castle.apply(action)
