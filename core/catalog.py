"""
房间目录 - 模板的文本表示与内置房间

模板的结构化文本格式 (JSON):
    {
        "throne": false,
        "name": "Small Vault",
        "treasure": 1,
        "rotation": 0,
        "connections": ["None", "Diamond(false)", "None", "None"]
    }

rotation 对模板无意义，读取时忽略，写出时用于保存已放置房间的角度。
"""
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union
import json

from .connectors import Connector, NONE, WILD, connector_to_str, str_to_connector
from .rooms import RoomTemplate


def room_from_dict(data: Dict[str, Any]) -> RoomTemplate:
    """
    从字典解析房间模板

    Args:
        data: 房间字典

    Returns:
        RoomTemplate

    Raises:
        ValueError: 字段缺失或格式错误
    """
    if not isinstance(data, dict):
        raise ValueError(f"Room entry must be an object, got {type(data).__name__}")
    if "name" not in data:
        raise ValueError("Room entry is missing 'name'")
    connections = data.get("connections")
    if not isinstance(connections, (list, tuple)) or len(connections) != 4:
        raise ValueError(f"Room {data['name']!r}: 'connections' must list 4 connectors")

    connectors = []
    for value in connections:
        if isinstance(value, Connector):
            connectors.append(value)
        elif isinstance(value, str):
            connectors.append(str_to_connector(value))
        else:
            raise ValueError(f"Room {data['name']!r}: invalid connector {value!r}")

    treasure = data.get("treasure", 0)
    if isinstance(treasure, bool) or not isinstance(treasure, int):
        raise ValueError(f"Room {data['name']!r}: 'treasure' must be an integer, got {treasure!r}")
    is_throne = data.get("throne", False)
    if not isinstance(is_throne, bool):
        raise ValueError(f"Room {data['name']!r}: 'throne' must be a boolean, got {is_throne!r}")

    return RoomTemplate(
        name=str(data["name"]),
        is_throne=is_throne,
        treasure=treasure,
        connectors=tuple(connectors),
    )


def room_to_dict(room: RoomTemplate, rotation: int = 0) -> Dict[str, Any]:
    """将房间模板转换为字典"""
    return {
        "throne": room.is_throne,
        "name": room.name,
        "treasure": room.treasure,
        "rotation": rotation,
        "connections": [connector_to_str(c) for c in room.connectors],
    }


def parse_rooms(text: str) -> List[RoomTemplate]:
    """解析 JSON 文本中的房间列表"""
    data = json.loads(text)
    if isinstance(data, dict):
        data = data.get("rooms", [])
    if not isinstance(data, list):
        raise ValueError("Room catalog must be a list of rooms")
    return [room_from_dict(entry) for entry in data]


def load_rooms(path: Union[str, Path]) -> List[RoomTemplate]:
    """从 JSON 文件读取房间列表"""
    with open(path, "r", encoding="utf-8") as f:
        return parse_rooms(f.read())


def dump_rooms(rooms: Sequence[RoomTemplate], path: Union[str, Path]) -> None:
    """将房间列表写入 JSON 文件"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump([room_to_dict(room) for room in rooms], f, indent=2)


# 白色王座: 四面万能口
THRONE_ROOM = RoomTemplate(
    name="Throne Room (White)",
    is_throne=True,
    treasure=0,
    connectors=(WILD, WILD, WILD, WILD),
)

# 默认商店 (固定顺序，不洗牌)
DEFAULT_SHOP: tuple = (
    RoomTemplate("Small Vault", False, 1, (NONE, NONE, NONE, Connector.cross())),
    RoomTemplate("Small Vault", False, 1, (NONE, Connector.diamond(), NONE, NONE)),
    RoomTemplate("Small Vault", False, 1, (NONE, NONE, Connector.moon(), NONE)),
    RoomTemplate("Small Vault", False, 1, (Connector.cross(), NONE, NONE, NONE)),
    RoomTemplate("Corridor", False, 0, (Connector.diamond(), NONE, Connector.diamond(), NONE)),
    RoomTemplate("Crossing", False, 0, (Connector.cross(), Connector.cross(), Connector.cross(), Connector.cross())),
    RoomTemplate("Moon Hall", False, 1, (Connector.moon(), WILD, NONE, NONE)),
    RoomTemplate("Treasury", False, 3, (Connector.diamond(True), NONE, NONE, Connector.cross(True))),
    RoomTemplate("Gallery", False, 2, (Connector.moon(True), NONE, Connector.moon(), NONE)),
    RoomTemplate("Gatehouse", False, 0, (WILD, NONE, WILD, NONE)),
)
