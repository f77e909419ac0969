"""规则引擎测试"""
import pytest

from core.catalog import THRONE_ROOM
from core.connectors import Connector, NONE, WILD
from core.errors import EmptyPositionError
from core.rooms import PlacedRoom, RoomTemplate
from core.rules import RuleEngine, DiscardTier


THRONE = PlacedRoom(THRONE_ROOM)

# 单个出口的房间，出口方向见名称
WEST_CROSS = PlacedRoom(RoomTemplate("West Cross", False, 1, (NONE, NONE, NONE, Connector.cross())))
EAST_DIAMOND = PlacedRoom(RoomTemplate("East Diamond", False, 1, (NONE, Connector.diamond(), NONE, NONE)))
SOUTH_CROSS = PlacedRoom(RoomTemplate("South Cross", False, 0, (NONE, NONE, Connector.cross(), NONE)))
SOUTH_MOON = PlacedRoom(RoomTemplate("South Moon", False, 0, (NONE, NONE, Connector.moon(), NONE)))
BLANK = PlacedRoom(RoomTemplate("Blank"))

CORRIDOR = PlacedRoom(RoomTemplate("Corridor", False, 0, (Connector.diamond(), NONE, Connector.diamond(), NONE)))
GATEHOUSE = PlacedRoom(RoomTemplate("Gatehouse", False, 0, (WILD, NONE, WILD, NONE)))
GALLERY = PlacedRoom(RoomTemplate("Gallery", False, 2, (Connector.moon(True), NONE, Connector.moon(), NONE)))


def wild_room(name, north=False, east=False, south=False, west=False):
    """指定方向为 Wild、其余为 None 的房间"""
    connectors = tuple(WILD if flag else NONE for flag in (north, east, south, west))
    return PlacedRoom(RoomTemplate(name, False, 0, connectors))


def square_castle():
    """王座与三个房间组成 2x2 环，每个房间恰好两个连接"""
    return {
        (0, 0): THRONE,
        (1, 0): wild_room("A", south=True, west=True),
        (1, 1): wild_room("B", north=True, west=True),
        (0, 1): wild_room("C", north=True, east=True),
    }


class TestCanPlaceRoom:
    """放置合法性测试"""

    def test_facing_throne(self):
        rooms = {(0, 0): THRONE}
        assert RuleEngine.can_place_room(rooms, WEST_CROSS, (1, 0))
        assert RuleEngine.can_place_room(rooms, EAST_DIAMOND, (-1, 0))

    def test_exit_facing_wall(self):
        rooms = {(0, 0): THRONE}
        # 王座的 Wild 对着房间的墙
        assert not RuleEngine.can_place_room(rooms, WEST_CROSS, (-1, 0))
        assert not RuleEngine.can_place_room(rooms, WEST_CROSS, (0, -1))

    def test_no_neighbors(self):
        rooms = {(0, 0): THRONE}
        assert not RuleEngine.can_place_room(rooms, WEST_CROSS, (5, 5))

    def test_wall_to_wall_does_not_count(self):
        rooms = {(0, 0): EAST_DIAMOND}
        assert not RuleEngine.can_place_room(rooms, BLANK, (-1, 0))

    def test_mismatched_types_rejected(self):
        rooms = {(0, 0): THRONE, (0, -1): CORRIDOR}
        assert not RuleEngine.can_place_room(rooms, SOUTH_CROSS, (0, -2))

    def test_matching_types_accepted(self):
        rooms = {(0, 0): THRONE, (0, -1): CORRIDOR}
        south_diamond = PlacedRoom(RoomTemplate("South Diamond", False, 0, (NONE, NONE, Connector.diamond(), NONE)))
        assert RuleEngine.can_place_room(rooms, south_diamond, (0, -2))

    def test_rotation_applied(self):
        rooms = {(0, 0): THRONE}
        # 旋转 180 度后 West 出口朝东
        assert RuleEngine.can_place_room(rooms, WEST_CROSS.rotated(180), (-1, 0))
        assert not RuleEngine.can_place_room(rooms, WEST_CROSS.rotated(180), (1, 0))


class TestCanSwap:
    """交换测试"""

    def test_symmetric_swap(self):
        rooms = {(0, 0): THRONE, (0, -1): GATEHOUSE, (0, 1): CORRIDOR}
        assert RuleEngine.can_swap(rooms, (0, -1), (0, 1))

    def test_swap_breaking_connections(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS, (-1, 0): EAST_DIAMOND}
        assert not RuleEngine.can_swap(rooms, (1, 0), (-1, 0))

    def test_adjacent_swap(self):
        rooms = {(0, 0): THRONE, (1, 0): wild_room("A", west=True)}
        assert not RuleEngine.can_swap(rooms, (0, 0), (1, 0))


class TestFrontier:
    """可放置位置测试"""

    def test_single_room(self):
        assert RuleEngine.frontier({(0, 0): THRONE}) == [(-1, 0), (0, -1), (0, 1), (1, 0)]

    def test_excludes_occupied(self):
        frontier = RuleEngine.frontier({(0, 0): THRONE, (1, 0): WEST_CROSS})
        assert (1, 0) not in frontier
        assert (2, 0) in frontier
        assert len(frontier) == 6

    def test_placeable_positions(self):
        rooms = {(0, 0): THRONE}
        assert RuleEngine.placeable_positions(rooms, WEST_CROSS) == [(1, 0)]
        assert RuleEngine.placeable_positions(rooms, GATEHOUSE) == [(0, -1), (0, 1)]


class TestConnections:
    """连接数测试"""

    def test_single_throne(self):
        assert RuleEngine.num_connections({(0, 0): THRONE}, (0, 0)) == 0

    def test_outer(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS}
        assert RuleEngine.num_connections(rooms, (1, 0)) == 1
        assert RuleEngine.is_outer(rooms, (1, 0))
        assert RuleEngine.is_outer(rooms, (0, 0))

    def test_nearly_outer(self):
        rooms = square_castle()
        for pos in rooms:
            assert RuleEngine.num_connections(rooms, pos) == 2
            assert not RuleEngine.is_outer(rooms, pos)
            assert RuleEngine.is_nearly_outer(rooms, pos)

    def test_empty_position(self):
        with pytest.raises(EmptyPositionError):
            RuleEngine.num_connections({(0, 0): THRONE}, (3, 3))

    def test_connection_map(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS, (-1, 0): EAST_DIAMOND}
        assert RuleEngine.connection_map(rooms) == {(0, 0): 2, (1, 0): 1, (-1, 0): 1}


class TestCountLinks:
    """连接统计测试"""

    def test_no_links(self):
        assert RuleEngine.count_links({(0, 0): THRONE}) == (0, 0, 0, 0)

    def test_typed_link_through_wild(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS, (-1, 0): EAST_DIAMOND}
        assert RuleEngine.count_links(rooms) == (1, 1, 0, 0)

    def test_wild_link(self):
        rooms = {(0, 0): THRONE, (0, 1): GATEHOUSE}
        assert RuleEngine.count_links(rooms) == (0, 0, 0, 1)

    def test_square(self):
        assert RuleEngine.count_links(square_castle()) == (0, 0, 0, 4)


class TestPower:
    """供能测试"""

    def test_no_powered_connectors(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS}
        assert RuleEngine.is_powered(rooms, (1, 0))

    def test_open_powered_connector(self):
        rooms = {(0, 0): THRONE, (0, -1): GALLERY}
        assert not RuleEngine.is_powered(rooms, (0, -1))
        assert RuleEngine.total_treasure(rooms) == 0

    def test_closed_powered_connector(self):
        rooms = {(0, 0): THRONE, (0, -1): GALLERY, (0, -2): SOUTH_MOON}
        assert RuleEngine.is_powered(rooms, (0, -1))
        assert RuleEngine.total_treasure(rooms) == 2

    def test_total_treasure(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS, (-1, 0): EAST_DIAMOND}
        assert RuleEngine.total_treasure(rooms) == 2

    def test_empty_position(self):
        with pytest.raises(EmptyPositionError):
            RuleEngine.is_powered({}, (0, 0))


class TestIsLost:
    """失败判定测试"""

    def test_not_lost(self):
        assert not RuleEngine.is_lost({(0, 0): THRONE}, 0)

    def test_damage_reaches_room_count(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS}
        assert not RuleEngine.is_lost(rooms, 1)
        assert RuleEngine.is_lost(rooms, 2)

    @pytest.mark.parametrize("damage", [0, 1, 5])
    def test_no_throne(self, damage):
        rooms = {(1, 0): WEST_CROSS, (2, 0): EAST_DIAMOND}
        assert RuleEngine.is_lost(rooms, damage)

    def test_empty(self):
        assert RuleEngine.is_lost({}, 0)


class TestDiscardCandidates:
    """弃置候选测试"""

    def test_lost(self):
        assert RuleEngine.discard_candidates({(1, 0): WEST_CROSS}, 0) == (DiscardTier.LOST, ())

    def test_last_room(self):
        assert RuleEngine.discard_candidates({(0, 0): THRONE}, 0) == (DiscardTier.LAST_ROOM, ((0, 0),))

    def test_outer_excludes_throne(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS}
        assert RuleEngine.discard_candidates(rooms, 1) == (DiscardTier.OUTER, ((1, 0),))

    def test_outer_sorted(self):
        rooms = {(0, 0): THRONE, (1, 0): WEST_CROSS, (-1, 0): EAST_DIAMOND}
        assert RuleEngine.discard_candidates(rooms, 1) == (DiscardTier.OUTER, ((-1, 0), (1, 0)))

    def test_nearly_outer(self):
        tier, positions = RuleEngine.discard_candidates(square_castle(), 1)
        assert tier == DiscardTier.NEARLY_OUTER
        assert positions == ((0, 1), (1, 0), (1, 1))

    def test_blocked(self):
        other_throne = PlacedRoom(RoomTemplate("Second Throne", True, 0, (WILD, WILD, WILD, WILD)))
        rooms = {(0, 0): THRONE, (1, 0): other_throne}
        assert RuleEngine.discard_candidates(rooms, 1) == (DiscardTier.BLOCKED, ())
