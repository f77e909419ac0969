"""房间目录测试"""
import json

import pytest

from core.catalog import (
    THRONE_ROOM,
    DEFAULT_SHOP,
    room_from_dict,
    room_to_dict,
    parse_rooms,
    load_rooms,
    dump_rooms,
)
from core.connectors import Connector, NONE, WILD
from core.rooms import RoomTemplate


VAULT_DICT = {
    "throne": False,
    "name": "Small Vault",
    "treasure": 1,
    "rotation": 0,
    "connections": ["None", "None", "None", "Cross(false)"],
}


class TestRoomFromDict:
    """room_from_dict 测试"""

    def test_parse(self):
        room = room_from_dict(VAULT_DICT)
        assert room == RoomTemplate("Small Vault", False, 1, (NONE, NONE, NONE, Connector.cross()))

    def test_defaults(self):
        room = room_from_dict({"name": "Hall", "connections": ["Wild", "None", "None", "None"]})
        assert not room.is_throne
        assert room.treasure == 0

    def test_rotation_ignored(self):
        data = dict(VAULT_DICT, rotation=90)
        assert room_from_dict(data).connectors == room_from_dict(VAULT_DICT).connectors

    def test_missing_name(self):
        with pytest.raises(ValueError):
            room_from_dict({"connections": ["None"] * 4})

    def test_wrong_connection_count(self):
        with pytest.raises(ValueError):
            room_from_dict({"name": "Bad", "connections": ["None"] * 3})

    def test_bad_connector(self):
        with pytest.raises(ValueError):
            room_from_dict({"name": "Bad", "connections": ["None", "None", "None", "Star"]})

    def test_bad_treasure(self):
        with pytest.raises(ValueError):
            room_from_dict(dict(VAULT_DICT, treasure="lots"))

    @pytest.mark.parametrize("treasure", [1.7, "2", True, None])
    def test_treasure_not_integer(self, treasure):
        with pytest.raises(ValueError, match="treasure"):
            room_from_dict(dict(VAULT_DICT, treasure=treasure))

    @pytest.mark.parametrize("throne", ["false", 0, 1, None])
    def test_throne_not_boolean(self, throne):
        with pytest.raises(ValueError, match="throne"):
            room_from_dict(dict(VAULT_DICT, throne=throne))

    def test_not_a_dict(self):
        with pytest.raises(ValueError):
            room_from_dict(["Small Vault"])


class TestRoomToDict:
    """room_to_dict 测试"""

    def test_format(self):
        assert room_to_dict(room_from_dict(VAULT_DICT)) == VAULT_DICT

    def test_rotation(self):
        assert room_to_dict(THRONE_ROOM, 270)["rotation"] == 270

    def test_throne(self):
        data = room_to_dict(THRONE_ROOM)
        assert data["throne"] is True
        assert data["connections"] == ["Wild"] * 4


class TestParseRooms:
    """房间列表解析测试"""

    def test_list(self):
        rooms = parse_rooms(json.dumps([VAULT_DICT, VAULT_DICT]))
        assert len(rooms) == 2

    def test_object_with_rooms(self):
        rooms = parse_rooms(json.dumps({"rooms": [VAULT_DICT]}))
        assert rooms[0].name == "Small Vault"

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_rooms(json.dumps("rooms"))

    def test_invalid_json(self):
        with pytest.raises(ValueError):
            parse_rooms("{not json")

    def test_file_roundtrip(self, tmp_path):
        path = tmp_path / "shop.json"
        dump_rooms(DEFAULT_SHOP, path)
        assert tuple(load_rooms(path)) == DEFAULT_SHOP


class TestBuiltinRooms:
    """内置房间测试"""

    def test_throne(self):
        assert THRONE_ROOM.is_throne
        assert THRONE_ROOM.connectors == (WILD, WILD, WILD, WILD)

    def test_default_shop(self):
        assert len(DEFAULT_SHOP) == 10
        assert not any(room.is_throne for room in DEFAULT_SHOP)
        assert [room.name for room in DEFAULT_SHOP[:4]] == ["Small Vault"] * 4

    def test_vaults_have_one_exit(self):
        for room in DEFAULT_SHOP[:4]:
            assert room.treasure == 1
            assert sum(1 for c in room.connectors if not c.is_none) == 1
