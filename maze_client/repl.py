#!/usr/bin/env python3
"""Keyboard client: every typed character is sent as a move."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TextIO

from .config import ClientConfig
from .connection import MazeSession
from .protocol import GameOverError, RejectedError

logger = logging.getLogger(__name__)


CELL_GLYPHS = {0: ".", 1: "#", 2: "E"}


def render_maze_grid(grid: list[list[int]]) -> str:
    rows = []
    for row in grid:
        rows.append("".join(CELL_GLYPHS.get(cell, "?") for cell in row))
    return "\n".join(rows)


def play(session: MazeSession, source: TextIO, out: TextIO = sys.stdout) -> int:
    """Feed characters from ``source`` into moves until input ends or the game is over.

    Returns the number of moves the server accepted.
    """
    accepted = 0
    while True:
        char = source.read(1)
        if char == "":
            return accepted
        if char in "\r\n":
            continue
        if not char.isascii():
            print(f"Error moving {char}: only ASCII keys can be sent", file=out)
            continue
        try:
            session.mov(char)
        except RejectedError as exc:
            print(f"Error moving {char}:{exc.message}", file=out)
            continue
        except GameOverError as exc:
            print(f"Game over:{exc.message}", file=out)
            return accepted
        accepted += 1


def build_parser() -> argparse.ArgumentParser:
    defaults = ClientConfig()
    parser = argparse.ArgumentParser(description="Maze game keyboard client")
    parser.add_argument("--host", default=defaults.host)
    parser.add_argument("--port", type=int, default=defaults.port)
    parser.add_argument("--user", required=True)
    parser.add_argument("--level", required=True)
    parser.add_argument("--wait", action="store_true", help="wait for the game to start before moving")
    parser.add_argument("--timeout", type=float, default=None, help="socket timeout in seconds")
    parser.add_argument("--show-maze", action="store_true", help="print the maze after connecting")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    config = ClientConfig(
        host=args.host,
        port=args.port,
        user=args.user,
        level=args.level,
        wait=args.wait,
        timeout=args.timeout,
    )
    try:
        session = MazeSession.from_config(config)
    except (RejectedError, GameOverError) as exc:
        logger.error("Could not join level %s:%s", config.level, exc.message)
        return 1
    except OSError as exc:
        logger.error("Could not connect to %s:%s: %s", config.host, config.port, exc)
        return 1

    with session:
        print(f"Maze is {session.width()}x{session.height()}.")
        if args.show_maze:
            print(render_maze_grid(session.fetch_maze_grid()))
        moves = play(session, sys.stdin)
    logger.info("Session finished after %d accepted moves", moves)
    return 0


if __name__ == "__main__":
    sys.exit(main())
