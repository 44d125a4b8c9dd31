"""Standalone protocol utilities for maze clients.

Every command is one ASCII line ``<VERB>[ <arg>...]`` and every reply is one
line whose first four characters are a tag (``DONE``, ``DATA``, ``NOPE`` or
``OVER``) followed by an unmodified payload.
"""

from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import ClassVar, Union


class ProtocolError(RuntimeError):
    """Raised when a server reply cannot be understood."""


class UnexpectedResponseError(ProtocolError):
    """Raised when a well-formed reply does not fit the command that was sent."""


class ShapeMismatchError(ProtocolError):
    """Raised when a maze does not hold exactly width * height cells."""

    def __init__(self, length: int, width: int, height: int):
        super().__init__(f"Maze has {length} cells, expected {width}x{height}={width * height}")
        self.length = length
        self.width = width
        self.height = height


class ServerError(RuntimeError):
    """A NOPE or OVER reply. ``message`` is the payload exactly as received."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RejectedError(ServerError):
    """The server refused the command; the game goes on."""


class GameOverError(ServerError):
    """The server ended the game; gameplay commands will keep failing."""


@dataclass(frozen=True)
class Command:
    verb: ClassVar[str]


@dataclass(frozen=True)
class User(Command):
    verb: ClassVar[str] = "USER"
    name: str


@dataclass(frozen=True)
class Levl(Command):
    verb: ClassVar[str] = "LEVL"
    name: str


@dataclass(frozen=True)
class Wait(Command):
    verb: ClassVar[str] = "WAIT"


@dataclass(frozen=True)
class GetW(Command):
    verb: ClassVar[str] = "GETW"


@dataclass(frozen=True)
class GetH(Command):
    verb: ClassVar[str] = "GETH"


@dataclass(frozen=True)
class GetX(Command):
    verb: ClassVar[str] = "GETX"


@dataclass(frozen=True)
class GetY(Command):
    verb: ClassVar[str] = "GETY"


@dataclass(frozen=True)
class What(Command):
    verb: ClassVar[str] = "WHAT"
    x: int
    y: int

    def __post_init__(self) -> None:
        for name in ("x", "y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"'{name}' must be a non-negative integer")


@dataclass(frozen=True)
class Maze(Command):
    verb: ClassVar[str] = "MAZE"


@dataclass(frozen=True)
class Move(Command):
    verb: ClassVar[str] = "MOVE"
    char: str

    def __post_init__(self) -> None:
        if len(self.char) != 1:
            raise ValueError("Move takes exactly one character")


@dataclass(frozen=True)
class Done:
    pass


@dataclass(frozen=True)
class Data:
    values: tuple[int, ...]


@dataclass(frozen=True)
class Nope:
    message: str


@dataclass(frozen=True)
class Over:
    message: str


Response = Union[Done, Data, Nope, Over]


def encode_command(command: Command) -> bytes:
    parts = [command.verb, *(str(arg) for arg in astuple(command))]
    line = " ".join(parts)
    if "\n" in line or "\r" in line:
        raise ValueError(f"{command.verb} argument must not contain line breaks")
    try:
        return (line + "\n").encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError(f"{command.verb} argument must be ASCII") from exc


def _parse_data(payload: str) -> tuple[int, ...]:
    values = []
    for token in payload.split():
        if not token.isascii() or not token.isdigit():
            raise ProtocolError(f"Invalid DATA value: {token!r}")
        values.append(int(token))
    return tuple(values)


def decode_response(raw_line: str | bytes) -> Response:
    if isinstance(raw_line, bytes):
        try:
            raw_line = raw_line.decode("ascii")
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"Non-ASCII server response: {exc}") from exc

    line = raw_line[:-1] if raw_line.endswith("\n") else raw_line
    if line.endswith("\r"):
        line = line[:-1]
    if len(line) < 4:
        raise ProtocolError(f"Server response too short: {line!r}")

    tag, payload = line[:4], line[4:]
    if tag == "DONE":
        return Done()
    if tag == "DATA":
        return Data(_parse_data(payload))
    if tag == "NOPE":
        return Nope(payload)
    if tag == "OVER":
        return Over(payload)
    raise ProtocolError(f"Unknown response tag: {tag!r}")
