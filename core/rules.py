"""
规则引擎 - 放置合法性、连接统计、供能判定、弃置资格

所有方法都是纯函数，无状态; 输入为 位置 -> 已放置房间 的映射
"""
from collections import Counter
from enum import Enum
from typing import Dict, List, Mapping, Tuple

from .connectors import ConnectorKind, compatible, connect, link, power
from .errors import EmptyPositionError
from .grid import Position, neighbors, opposite
from .rooms import PlacedRoom

Rooms = Mapping[Position, PlacedRoom]

# (diamond, cross, moon, wild)
Links = Tuple[int, int, int, int]


class DiscardTier(Enum):
    """弃置候选集合的来源层级"""
    LOST = "lost"                  # 已经输了，不可弃置
    LAST_ROOM = "last_room"        # 只剩一个房间，必须弃置它
    OUTER = "outer"                # 外围非王座房间
    NEARLY_OUTER = "nearly_outer"  # 连接数 <= 2 的非王座房间
    BLOCKED = "blocked"            # 无可弃置房间


# 外围房间的连接数
OUTER_CONNECTIONS = 1

# 近外围房间的最大连接数
NEARLY_OUTER_CONNECTIONS = 2


class RuleEngine:
    """
    城堡规则引擎

    提供放置检查、连接统计、供能判定等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def can_place_room(rooms: Rooms, room: PlacedRoom, pos: Position) -> bool:
        """
        检查房间能否放在指定位置

        不检查该位置是否已被占用，调用方需要单独检查

        Args:
            rooms: 当前房间映射
            room: 待放置的房间 (已旋转)
            pos: 目标位置

        Returns:
            所有相邻边都能接合，且至少与一个房间相连
        """
        connectors = room.connectors
        touching = 0
        for i, con_pos in enumerate(neighbors(pos)):
            con_room = rooms.get(con_pos)
            if con_room is None:
                continue
            own = connectors[i]
            other = con_room.connectors[opposite(i)]
            joined = connect(own, other)
            if joined is None:
                continue
            # 出口对墙，或者类型不匹配
            if not joined or not compatible(own, other):
                return False
            touching += 1
        return touching > 0

    @staticmethod
    def can_swap(rooms: Rooms, pos1: Position, pos2: Position) -> bool:
        """
        检查两个房间能否交换

        两个方向分别检查: 假设另一个房间已经换过去，
        再检查当前房间能否放到对方的位置
        """
        room1 = rooms[pos1]
        room2 = rooms[pos2]
        base = {p: r for p, r in rooms.items() if p != pos1 and p != pos2}

        # room1 -> pos2，假设 room2 已在 pos1
        leg1 = dict(base)
        leg1[pos1] = room2
        if not RuleEngine.can_place_room(leg1, room1, pos2):
            return False

        # room2 -> pos1，假设 room1 已在 pos2
        leg2 = dict(base)
        leg2[pos2] = room1
        return RuleEngine.can_place_room(leg2, room2, pos1)

    @staticmethod
    def frontier(rooms: Rooms) -> List[Position]:
        """与已有房间相邻的空位置 (已排序)"""
        empty = set()
        for pos in rooms:
            for con_pos in neighbors(pos):
                if con_pos not in rooms:
                    empty.add(con_pos)
        return sorted(empty)

    @staticmethod
    def placeable_positions(rooms: Rooms, room: PlacedRoom) -> List[Position]:
        """房间可以放置的所有空位置"""
        return [
            pos for pos in RuleEngine.frontier(rooms)
            if RuleEngine.can_place_room(rooms, room, pos)
        ]

    @staticmethod
    def num_connections(rooms: Rooms, pos: Position) -> int:
        """
        房间的有效连接数

        Raises:
            EmptyPositionError: 位置上没有房间
        """
        room = rooms.get(pos)
        if room is None:
            raise EmptyPositionError()
        connectors = room.connectors
        count = 0
        for i, con_pos in enumerate(neighbors(pos)):
            con_room = rooms.get(con_pos)
            if con_room is None:
                continue
            if connect(connectors[i], con_room.connectors[opposite(i)]):
                count += 1
        return count

    @staticmethod
    def is_outer(rooms: Rooms, pos: Position) -> bool:
        """外围房间: 恰好一个连接"""
        return RuleEngine.num_connections(rooms, pos) == OUTER_CONNECTIONS

    @staticmethod
    def is_nearly_outer(rooms: Rooms, pos: Position) -> bool:
        """近外围房间: 最多两个连接"""
        return RuleEngine.num_connections(rooms, pos) <= NEARLY_OUTER_CONNECTIONS

    @staticmethod
    def count_links(rooms: Rooms) -> Links:
        """
        按类型统计连接数

        每条边会从两端各统计一次，最终结果除以 2

        Returns:
            (diamond, cross, moon, wild)
        """
        counter: Counter = Counter()
        for pos, room in rooms.items():
            connectors = room.connectors
            for i, con_pos in enumerate(neighbors(pos)):
                con_room = rooms.get(con_pos)
                if con_room is None:
                    continue
                joined = link(connectors[i], con_room.connectors[opposite(i)])
                if joined.kind != ConnectorKind.NONE:
                    counter[joined.kind] += 1
        return (
            counter[ConnectorKind.DIAMOND] // 2,
            counter[ConnectorKind.CROSS] // 2,
            counter[ConnectorKind.MOON] // 2,
            counter[ConnectorKind.WILD] // 2,
        )

    @staticmethod
    def is_powered(rooms: Rooms, pos: Position) -> bool:
        """
        房间是否处于供能状态

        房间上每个供能的连接口都必须接到一个房间，且接合结果也是供能的;
        没有供能连接口的房间总是供能的

        Raises:
            EmptyPositionError: 位置上没有房间
        """
        room = rooms.get(pos)
        if room is None:
            raise EmptyPositionError()
        connectors = room.connectors
        for i, con_pos in enumerate(neighbors(pos)):
            if not power(connectors[i]):
                continue
            con_room = rooms.get(con_pos)
            if con_room is None:
                return False
            if not power(link(connectors[i], con_room.connectors[opposite(i)])):
                return False
        return True

    @staticmethod
    def total_treasure(rooms: Rooms) -> int:
        """所有供能房间的宝藏总和"""
        return sum(
            room.treasure for pos, room in rooms.items()
            if room.treasure > 0 and RuleEngine.is_powered(rooms, pos)
        )

    @staticmethod
    def is_lost(rooms: Rooms, damage: int) -> bool:
        """伤害不少于房间数，或者没有王座"""
        return damage >= len(rooms) or not any(room.is_throne for room in rooms.values())

    @staticmethod
    def discard_candidates(rooms: Rooms, damage: int) -> Tuple[DiscardTier, Tuple[Position, ...]]:
        """
        按优先级计算可弃置的位置

        1. 已输 -> 空
        2. 只剩一个房间 -> 该房间
        3. 外围非王座房间
        4. 连接数 <= 2 的非王座房间
        5. 否则为空 (受阻)

        Returns:
            (层级, 已排序的位置元组)
        """
        if RuleEngine.is_lost(rooms, damage):
            return DiscardTier.LOST, ()

        if len(rooms) == 1:
            return DiscardTier.LAST_ROOM, tuple(rooms)

        candidates = sorted(rooms)
        outer = tuple(
            pos for pos in candidates
            if not rooms[pos].is_throne and RuleEngine.is_outer(rooms, pos)
        )
        if outer:
            return DiscardTier.OUTER, outer

        nearly_outer = tuple(
            pos for pos in candidates
            if not rooms[pos].is_throne and RuleEngine.is_nearly_outer(rooms, pos)
        )
        if nearly_outer:
            return DiscardTier.NEARLY_OUTER, nearly_outer

        return DiscardTier.BLOCKED, ()

    @staticmethod
    def connection_map(rooms: Rooms) -> Dict[Position, int]:
        """每个房间的连接数"""
        return {pos: RuleEngine.num_connections(rooms, pos) for pos in rooms}
