from .config import ClientConfig
from .connection import MazeSession, reshape_maze
from .moves import Direction, OtherDirection, to_direction
from .protocol import (
    GameOverError,
    ProtocolError,
    RejectedError,
    ServerError,
    ShapeMismatchError,
    UnexpectedResponseError,
)

__all__ = [
    "ClientConfig",
    "Direction",
    "GameOverError",
    "MazeSession",
    "OtherDirection",
    "ProtocolError",
    "RejectedError",
    "ServerError",
    "ShapeMismatchError",
    "UnexpectedResponseError",
    "reshape_maze",
    "to_direction",
]
