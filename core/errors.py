"""
城堡规则错误

所有 CastleError 均为可恢复的非法操作，由调用方反馈给玩家。
InconsistentCastleError 表示城堡结构已损坏，不应在正确使用时出现。
"""


class CastleError(ValueError):
    """非法城堡操作基类"""
    kind = "castle_error"
    default_message = "Illegal castle operation."

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)


class TakenPositionError(CastleError):
    kind = "taken_position"
    default_message = "Room position is already taken."


class EmptyPositionError(CastleError):
    kind = "empty_position"
    default_message = "Room position does not contain a room."


class InvalidConnectionError(CastleError):
    kind = "invalid_connection"
    default_message = (
        "Room cannot be placed, moved or swapped because its connections do not match up."
    )


class InvalidPositionError(CastleError):
    kind = "invalid_position"
    default_message = (
        "Cannot select the same position as both the source and destination of a move or swap."
    )


class NotOuterRoomError(CastleError):
    kind = "not_outer_room"
    default_message = "Room cannot be moved or discarded because it is not an outer room."


class NotNearlyOuterRoomError(CastleError):
    kind = "not_nearly_outer_room"
    default_message = "Room cannot be discarded because it has too many connections."


class MustDiscardError(CastleError):
    kind = "must_discard"
    default_message = "Rooms must be discarded to match the damage."


class NoDamageError(CastleError):
    kind = "no_damage"
    default_message = "Room cannot be discarded because there is no damage."


class InconsistentCastleError(RuntimeError):
    """城堡中存在无法连接的相邻房间"""
