"""Mapping of keyboard characters to MOVE arguments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Direction(str, Enum):
    UP = "w"
    LEFT = "a"
    DOWN = "s"
    RIGHT = "d"


@dataclass(frozen=True)
class OtherDirection:
    """Any non-canonical key, passed through to the server, ASCII letters lower-cased."""

    char: str

    @property
    def value(self) -> str:
        return self.char


AnyDirection = Union[Direction, OtherDirection]

_CANONICAL = {direction.value: direction for direction in Direction}


def to_direction(key: str) -> AnyDirection:
    if len(key) != 1:
        raise ValueError(f"Expected a single character, got {key!r}")
    lowered = key.lower() if key.isascii() else key
    return _CANONICAL.get(lowered, OtherDirection(lowered))
