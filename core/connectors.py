"""
连接口定义与代数

每个房间的四条边各有一个连接口:
- None: 没有出口 (墙)
- Wild: 万能口，可与任何有类型的口相连
- Diamond / Cross / Moon: 有类型的口，带有是否供能的标记
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import re

import numpy as np

from .errors import InconsistentCastleError


class ConnectorKind(IntEnum):
    """连接口种类"""
    NONE = 0
    WILD = 1
    DIAMOND = 2
    CROSS = 3
    MOON = 4


# 有类型 (可携带供能标记) 的连接口
TYPED_KINDS = (ConnectorKind.DIAMOND, ConnectorKind.CROSS, ConnectorKind.MOON)

# 种类到显示名的映射
KIND_TO_STR: Dict[int, str] = {
    ConnectorKind.NONE: "None",
    ConnectorKind.WILD: "Wild",
    ConnectorKind.DIAMOND: "Diamond",
    ConnectorKind.CROSS: "Cross",
    ConnectorKind.MOON: "Moon",
}

# 显示名到种类的映射 (小写)
STR_TO_KIND: Dict[str, ConnectorKind] = {v.lower(): ConnectorKind(k) for k, v in KIND_TO_STR.items()}

# 每个连接口的特征维度: 5 种类 one-hot + 供能
CONNECTOR_FEATURES = len(ConnectorKind) + 1

_CONNECTOR_RE = re.compile(r"^\s*([A-Za-z]+)\s*(?:\(\s*(true|false)\s*\))?\s*$", re.IGNORECASE)


@dataclass(frozen=True, slots=True, order=True)
class Connector:
    """
    不可变连接口

    Attributes:
        kind: 连接口种类
        powered: 连接后这条边是否传输能量 (仅有类型的口有意义)
    """
    kind: ConnectorKind
    powered: bool = False

    def __post_init__(self):
        if self.powered and self.kind not in TYPED_KINDS:
            raise ValueError(f"{KIND_TO_STR[self.kind]} connector cannot be powered")

    @classmethod
    def diamond(cls, powered: bool = False) -> 'Connector':
        return cls(ConnectorKind.DIAMOND, powered)

    @classmethod
    def cross(cls, powered: bool = False) -> 'Connector':
        return cls(ConnectorKind.CROSS, powered)

    @classmethod
    def moon(cls, powered: bool = False) -> 'Connector':
        return cls(ConnectorKind.MOON, powered)

    @property
    def is_none(self) -> bool:
        return self.kind == ConnectorKind.NONE

    @property
    def is_wild(self) -> bool:
        return self.kind == ConnectorKind.WILD

    @property
    def is_typed(self) -> bool:
        return self.kind in TYPED_KINDS

    def connect(self, other: 'Connector') -> Optional[bool]:
        return connect(self, other)

    def link(self, other: 'Connector') -> 'Connector':
        return link(self, other)

    def power(self) -> bool:
        return power(self)

    def __str__(self) -> str:
        return connector_to_str(self)


NONE = Connector(ConnectorKind.NONE)
WILD = Connector(ConnectorKind.WILD)


def connect(a: Connector, b: Connector) -> Optional[bool]:
    """
    判断两条相对的边在结构上是否接合

    Returns:
        None: 两边都没有出口 (不约束)
        True: 两边都有出口
        False: 只有一边有出口 (出口正对着墙)
    """
    if a.is_none and b.is_none:
        return None
    return not a.is_none and not b.is_none


def link(a: Connector, b: Connector) -> Connector:
    """
    计算两条边接合后的连接口 (从 a 所在房间的视角)

    - Wild + Wild -> Wild
    - Wild + 有类型 -> 该类型，供能
    - 有类型 + Wild -> 该类型，保留 a 的供能
    - 同类型 -> 该类型，取 a 的供能
    - None + None -> None

    Raises:
        InconsistentCastleError: 其他组合，说明城堡中存在非法放置的房间
    """
    if a.is_none and b.is_none:
        return NONE
    if a.is_wild and b.is_wild:
        return WILD
    if a.is_wild and b.is_typed:
        return Connector(b.kind, True)
    if a.is_typed and b.is_wild:
        return a
    if a.is_typed and a.kind == b.kind:
        return a
    raise InconsistentCastleError(
        f"Cannot link {connector_to_str(a)} with {connector_to_str(b)}"
    )


def compatible(a: Connector, b: Connector) -> bool:
    """两个连接口是否可以相对放置 (link 有定义)"""
    if a.is_none or b.is_none:
        return a.is_none and b.is_none
    if a.is_wild or b.is_wild:
        return True
    return a.kind == b.kind


def power(c: Connector) -> bool:
    """是否为供能的有类型连接口"""
    return c.is_typed and c.powered


def connector_to_str(c: Connector) -> str:
    """
    转换为文本形式

    如 "None", "Wild", "Diamond(true)", "Moon(false)"
    """
    name = KIND_TO_STR[c.kind]
    if c.is_typed:
        return f"{name}({'true' if c.powered else 'false'})"
    return name


def str_to_connector(s: str) -> Connector:
    """
    从文本形式解析连接口

    有类型的口可以省略括号，默认不供能
    """
    match = _CONNECTOR_RE.match(s)
    if match is None:
        raise ValueError(f"Invalid connector: {s!r}")
    name, flag = match.groups()
    kind = STR_TO_KIND.get(name.lower())
    if kind is None:
        raise ValueError(f"Unknown connector type: {name!r}")
    powered = flag is not None and flag.lower() == "true"
    return Connector(kind, powered)


def connectors_to_array(connectors: Sequence[Connector]) -> np.ndarray:
    """
    将连接口序列编码为 (N, 6) 特征矩阵

    每行: 5 维种类 one-hot + 1 维供能标记
    """
    result = np.zeros((len(connectors), CONNECTOR_FEATURES), dtype=np.float32)
    for i, c in enumerate(connectors):
        result[i, int(c.kind)] = 1
        if c.powered:
            result[i, -1] = 1
    return result
