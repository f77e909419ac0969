"""
观察空间编码

将城堡状态转换为神经网络可用的特征表示
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import numpy as np

from core.actions import Action
from core.connectors import CONNECTOR_FEATURES, connectors_to_array
from core.grid import Position
from core.rooms import RoomTemplate
from core.rules import RuleEngine
from core.state import Castle

# 网格通道:
# 0 占用, 1 王座, 2 供能, 3 宝藏 (归一化), 4 连接数 / 4,
# 之后每个方向 CONNECTOR_FEATURES 个通道
BASE_CHANNELS = 5
BOARD_CHANNELS = BASE_CHANNELS + 4 * CONNECTOR_FEATURES

# 状态向量: 伤害, 房间数, 宝藏, diamond/cross/moon/wild 连接数
STATUS_DIM = 7

# 商店条目: 4 个连接口特征 + 宝藏 + 王座
SHOP_ENTRY_DIM = 4 * CONNECTOR_FEATURES + 2


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        board: 以原点为中心的网格特征 (BOARD_CHANNELS, D, D)
        status: 伤害、房间数、宝藏、连接数 (7,)
        shop: 商店房间特征 (S, 26)
        legal_actions: 合法动作列表
        damage: 当前伤害
        is_lost: 是否已输
    """
    board: np.ndarray
    status: np.ndarray
    shop: np.ndarray
    legal_actions: List[Action]
    damage: int
    is_lost: bool

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "board": self.board,
            "status": self.status,
            "shop": self.shop,
        }

    def to_flat_array(self) -> np.ndarray:
        """展平为单一向量 (用于简单网络)"""
        return np.concatenate([
            self.board.flatten(),
            self.status,
            self.shop.flatten(),
        ])


def encode_shop(shop: Sequence[RoomTemplate]) -> np.ndarray:
    """
    编码商店

    Returns:
        (len(shop), SHOP_ENTRY_DIM) 数组
    """
    result = np.zeros((len(shop), SHOP_ENTRY_DIM), dtype=np.float32)
    for i, room in enumerate(shop):
        result[i, :4 * CONNECTOR_FEATURES] = connectors_to_array(room.connectors).flatten()
        result[i, -2] = room.treasure
        result[i, -1] = float(room.is_throne)
    return result


class ObservationBuilder:
    """
    观测构建器

    负责将 Castle 转换为 Observation
    """

    def __init__(
        self,
        shop: Sequence[RoomTemplate],
        board_radius: int = 4,
    ):
        """
        Args:
            shop: 商店房间 (用于合法动作和商店编码)
            board_radius: 观测网格半径，超出范围的房间不编码
        """
        self.shop = tuple(shop)
        self.board_radius = board_radius
        self.board_size = 2 * board_radius + 1

        # 宝藏归一化系数
        self._max_treasure = max([1] + [room.treasure for room in self.shop])

        # 商店编码不随状态变化
        self._shop_array = encode_shop(self.shop)

    def build(self, castle: Castle, legal_actions: Optional[List[Action]] = None) -> Observation:
        """
        从城堡状态构建观测

        Args:
            castle: 城堡状态
            legal_actions: 已计算好的合法动作 (None 时重新生成)

        Returns:
            Observation 对象
        """
        if legal_actions is None:
            legal_actions = castle.possible_actions(self.shop)

        return Observation(
            board=self._encode_board(castle),
            status=self._encode_status(castle),
            shop=self._shop_array.copy(),
            legal_actions=legal_actions,
            damage=castle.damage,
            is_lost=castle.is_lost(),
        )

    def to_index(self, pos: Position) -> Optional[tuple]:
        """网格位置 -> (行, 列) 索引，超出范围返回 None"""
        x, y = pos
        r = self.board_radius
        if abs(x) > r or abs(y) > r:
            return None
        return y + r, x + r

    def _encode_board(self, castle: Castle) -> np.ndarray:
        """
        编码网格

        Returns:
            (BOARD_CHANNELS, D, D) 数组
        """
        board = np.zeros((BOARD_CHANNELS, self.board_size, self.board_size), dtype=np.float32)
        rooms = castle.get_rooms()
        connections = RuleEngine.connection_map(rooms)

        for pos, room in rooms.items():
            idx = self.to_index(pos)
            if idx is None:
                continue
            row, col = idx
            board[0, row, col] = 1
            board[1, row, col] = float(room.is_throne)
            board[2, row, col] = float(RuleEngine.is_powered(rooms, pos))
            board[3, row, col] = min(room.treasure / self._max_treasure, 1.0)
            board[4, row, col] = connections[pos] / 4
            features = connectors_to_array(room.connectors).flatten()
            board[BASE_CHANNELS:, row, col] = features

        return board

    def _encode_status(self, castle: Castle) -> np.ndarray:
        """编码伤害、房间数、宝藏和连接数"""
        diamond, cross, moon, wild = castle.get_links()
        return np.array(
            [
                castle.damage,
                castle.room_count,
                castle.get_treasure(),
                diamond,
                cross,
                moon,
                wild,
            ],
            dtype=np.float32,
        )


class ActionEncoder:
    """
    动作编码器

    城堡的动作集合随状态变化，动作索引即当前合法动作列表中的下标
    """

    def __init__(self, max_actions: int = 1024):
        self._num_actions = max_actions

    @property
    def num_actions(self) -> int:
        """动作空间大小"""
        return self._num_actions

    def encode(self, action: Action, legal_actions: List[Action]) -> int:
        """
        将 Action 编码为索引

        Returns:
            动作索引，未找到或超出动作空间返回 -1
        """
        try:
            idx = legal_actions.index(action)
        except ValueError:
            return -1
        return idx if idx < self._num_actions else -1

    def decode(self, idx: int, legal_actions: List[Action]) -> Optional[Action]:
        """
        将索引解码为 Action

        Returns:
            Action 对象，索引无效返回 None
        """
        if idx < 0 or idx >= min(len(legal_actions), self._num_actions):
            return None
        return legal_actions[idx]

    def get_legal_action_indices(self, legal_actions: List[Action]) -> List[int]:
        """合法动作的索引列表"""
        return list(range(min(len(legal_actions), self._num_actions)))

    def build_legal_mask(self, legal_actions: List[Action]) -> np.ndarray:
        """
        构建合法动作掩码

        Returns:
            (num_actions,) 数组
        """
        mask = np.zeros(self._num_actions, dtype=np.float32)
        mask[:min(len(legal_actions), self._num_actions)] = 1
        return mask
