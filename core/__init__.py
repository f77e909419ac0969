"""
Core Layer - 纯城堡规则 (无 ML 依赖)

Modules:
    grid: 网格位置与相邻关系
    connectors: 连接口与连接代数
    rooms: 房间模板与旋转
    rules: 规则引擎
    actions: 动作类型与生成
    state: 城堡状态
    catalog: 房间目录读写
"""
from .grid import (
    Position,
    ORIGIN,
    Direction,
    neighbors,
    opposite,
)

from .connectors import (
    ConnectorKind,
    Connector,
    NONE,
    WILD,
    connect,
    link,
    compatible,
    power,
    connector_to_str,
    str_to_connector,
    connectors_to_array,
)

from .rooms import (
    RoomTemplate,
    PlacedRoom,
    ROTATIONS,
    normalize_rotation,
    rotated_connectors,
)

from .errors import (
    CastleError,
    TakenPositionError,
    EmptyPositionError,
    InvalidConnectionError,
    InvalidPositionError,
    NotOuterRoomError,
    NotNearlyOuterRoomError,
    MustDiscardError,
    NoDamageError,
    InconsistentCastleError,
)

from .rules import RuleEngine, DiscardTier

from .actions import (
    ActionType,
    Action,
    ActionGenerator,
)

from .state import Castle, apply

from .catalog import (
    THRONE_ROOM,
    DEFAULT_SHOP,
    room_from_dict,
    room_to_dict,
    parse_rooms,
    load_rooms,
    dump_rooms,
)

__all__ = [
    # grid
    "Position",
    "ORIGIN",
    "Direction",
    "neighbors",
    "opposite",
    # connectors
    "ConnectorKind",
    "Connector",
    "NONE",
    "WILD",
    "connect",
    "link",
    "compatible",
    "power",
    "connector_to_str",
    "str_to_connector",
    "connectors_to_array",
    # rooms
    "RoomTemplate",
    "PlacedRoom",
    "ROTATIONS",
    "normalize_rotation",
    "rotated_connectors",
    # errors
    "CastleError",
    "TakenPositionError",
    "EmptyPositionError",
    "InvalidConnectionError",
    "InvalidPositionError",
    "NotOuterRoomError",
    "NotNearlyOuterRoomError",
    "MustDiscardError",
    "NoDamageError",
    "InconsistentCastleError",
    # rules
    "RuleEngine",
    "DiscardTier",
    # actions
    "ActionType",
    "Action",
    "ActionGenerator",
    # state
    "Castle",
    "apply",
    # catalog
    "THRONE_ROOM",
    "DEFAULT_SHOP",
    "room_from_dict",
    "room_to_dict",
    "parse_rooms",
    "load_rooms",
    "dump_rooms",
]
