"""Network session for the maze game server."""

from __future__ import annotations

import logging
import socket
from typing import Sequence

from .config import ClientConfig
from .moves import AnyDirection, Direction, OtherDirection, to_direction
from .protocol import (
    Command,
    Data,
    Done,
    GameOverError,
    GetH,
    GetW,
    GetX,
    GetY,
    Levl,
    Maze,
    Move,
    Nope,
    Over,
    RejectedError,
    Response,
    ShapeMismatchError,
    UnexpectedResponseError,
    User,
    Wait,
    What,
    decode_response,
    encode_command,
)

logger = logging.getLogger(__name__)


def reshape_maze(flat: Sequence[int], width: int, height: int) -> list[list[int]]:
    """Split a row-major cell list into ``height`` rows of ``width`` cells."""
    if len(flat) != width * height:
        raise ShapeMismatchError(len(flat), width, height)
    return [list(flat[row * width : (row + 1) * width]) for row in range(height)]


def _raise_for_error(response: Response) -> None:
    if isinstance(response, Nope):
        raise RejectedError(response.message)
    if isinstance(response, Over):
        raise GameOverError(response.message)


def _expect_done(command: Command, response: Response) -> None:
    _raise_for_error(response)
    if not isinstance(response, Done):
        raise UnexpectedResponseError(f"Expected DONE for {command.verb}, got {response!r}")


def _expect_data(command: Command, response: Response) -> list[int]:
    _raise_for_error(response)
    if not isinstance(response, Data):
        raise UnexpectedResponseError(f"Expected DATA for {command.verb}, got {response!r}")
    return list(response.values)


def _expect_single(command: Command, response: Response) -> int:
    values = _expect_data(command, response)
    if len(values) != 1:
        raise UnexpectedResponseError(f"Expected one DATA value for {command.verb}, got {len(values)}")
    return values[0]


class MazeSession:
    """Blocking line-based client for one game on the maze server.

    Instances are only handed out by :meth:`connect` once the handshake has
    finished, so width and height are always known.
    """

    def __init__(self, sock: socket.socket):
        self._sock: socket.socket | None = sock
        self._buffer = b""
        self._width = 0
        self._height = 0

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        user: str,
        level: str,
        wait: bool = False,
        timeout: float | None = None,
    ) -> "MazeSession":
        sock = socket.create_connection((host, port), timeout=timeout)
        session = cls(sock)
        try:
            session._handshake(user, level, wait)
        except Exception:
            session.close()
            raise
        logger.info(
            "Connected to %s:%s as %s on level %s (%dx%d)",
            host, port, user, level, session._width, session._height,
        )
        return session

    @classmethod
    def from_config(cls, config: ClientConfig) -> "MazeSession":
        return cls.connect(
            config.host,
            config.port,
            config.user,
            config.level,
            wait=config.wait,
            timeout=config.timeout,
        )

    def _handshake(self, user: str, level: str, wait: bool) -> None:
        steps: list[Command] = [User(user), Levl(level)]
        if wait:
            steps.append(Wait())
        for command in steps:
            try:
                self._request_done(command)
            except (RejectedError, GameOverError) as exc:
                logger.warning("Handshake command %s failed:%s", command.verb, exc.message)
                raise

        self._width = self._request_single(GetW())
        self._height = self._request_single(GetH())

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "MazeSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def width(self) -> int:
        return self._width

    def height(self) -> int:
        return self._height

    def query_x(self) -> int:
        return self._request_single(GetX())

    def query_y(self) -> int:
        return self._request_single(GetY())

    def inspect_cell(self, x: int, y: int) -> int:
        return self._request_single(What(x, y))

    def fetch_maze(self) -> list[int]:
        return self._request_data(Maze())

    def fetch_maze_grid(self) -> list[list[int]]:
        return reshape_maze(self.fetch_maze(), self._width, self._height)

    def mov(self, direction: AnyDirection | str) -> None:
        if not isinstance(direction, (Direction, OtherDirection)):
            direction = to_direction(direction)
        self._request_done(Move(direction.value))

    def wait(self) -> None:
        self._request_done(Wait())

    def _request_done(self, command: Command) -> None:
        _expect_done(command, self._communicate(command))

    def _request_data(self, command: Command) -> list[int]:
        return _expect_data(command, self._communicate(command))

    def _request_single(self, command: Command) -> int:
        return _expect_single(command, self._communicate(command))

    def _communicate(self, command: Command) -> Response:
        self._send(command)
        return decode_response(self._recv_line())

    def _send(self, command: Command) -> None:
        if self._sock is None:
            raise RuntimeError("Session is closed")
        packet = encode_command(command)
        logger.debug("-> %r", packet)
        self._sock.sendall(packet)

    def _recv_line(self) -> bytes:
        if self._sock is None:
            raise RuntimeError("Session is closed")

        while b"\n" not in self._buffer:
            chunk = self._sock.recv(4096)
            if not chunk:
                raise ConnectionError("Connection closed by server")
            self._buffer += chunk
        line, _, self._buffer = self._buffer.partition(b"\n")
        logger.debug("<- %r", line)
        return line
