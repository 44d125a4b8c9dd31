"""Playable levels for the practice server.

A level owns the state of one player's game. The server creates a fresh
instance for every connection that selects it.
"""

from __future__ import annotations

from .protocol import CommandError

WALL = 1
FLOOR = 0
EXIT = 2

STEPS = {"w": (0, -1), "a": (-1, 0), "s": (0, 1), "d": (1, 0)}


class Level:
    code = ""
    max_conn = 0  # 0 means unlimited
    max_time = 0.0  # seconds, 0 means unlimited

    def move(self, char: str) -> bool:
        """Apply a move. Returns True when the move wins the level."""
        raise NotImplementedError

    def what(self, x: int, y: int) -> int:
        raise NotImplementedError

    def get_x(self) -> int:
        raise NotImplementedError

    def get_y(self) -> int:
        raise NotImplementedError

    def get_w(self) -> int:
        raise NotImplementedError

    def get_h(self) -> int:
        raise NotImplementedError

    def cells(self) -> list[int]:
        return [self.what(x, y) for y in range(self.get_h()) for x in range(self.get_w())]


class WalledLevel(Level):
    code = "test"
    max_conn = 2
    max_time = 10.0

    def move(self, char: str) -> bool:
        raise CommandError("Walls everywhere.")

    def what(self, x: int, y: int) -> int:
        return 0

    def get_x(self) -> int:
        return 0

    def get_y(self) -> int:
        return 0

    def get_w(self) -> int:
        return 0

    def get_h(self) -> int:
        return 0


class GridLevel(Level):
    code = "grid"
    max_time = 300.0
    layout = (
        "#######",
        "#.....#",
        "#.###.#",
        "#...#E#",
        "#######",
    )
    start = (1, 1)

    _glyphs = {"#": WALL, ".": FLOOR, "E": EXIT}

    def __init__(self) -> None:
        self._rows = [[self._glyphs[glyph] for glyph in row] for row in self.layout]
        self._x, self._y = self.start

    def move(self, char: str) -> bool:
        if char not in STEPS:
            raise CommandError(f"Unknown direction {char}")
        dx, dy = STEPS[char]
        x, y = self._x + dx, self._y + dy
        if not (0 <= x < self.get_w() and 0 <= y < self.get_h()) or self._rows[y][x] == WALL:
            raise CommandError("You bumped into a wall.")
        self._x, self._y = x, y
        return self._rows[y][x] == EXIT

    def what(self, x: int, y: int) -> int:
        if not (0 <= x < self.get_w() and 0 <= y < self.get_h()):
            raise CommandError("Coordinates out of range")
        return self._rows[y][x]

    def get_x(self) -> int:
        return self._x

    def get_y(self) -> int:
        return self._y

    def get_w(self) -> int:
        return len(self._rows[0])

    def get_h(self) -> int:
        return len(self._rows)


LEVELS: dict[str, type[Level]] = {}


def register_level(level_cls: type[Level]) -> type[Level]:
    if not level_cls.code:
        raise ValueError("Level needs a code")
    LEVELS[level_cls.code] = level_cls
    return level_cls


def get_level(code: str) -> Level:
    try:
        level_cls = LEVELS[code]
    except KeyError:
        raise CommandError(f"Unknown level {code}") from None
    return level_cls()


register_level(WalledLevel)
register_level(GridLevel)
