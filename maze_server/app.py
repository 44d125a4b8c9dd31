from __future__ import annotations

import logging
import socketserver
import threading
import time

from .config import ServerConfig
from .levels import Level, get_level
from .protocol import (
    MAX_LINE_LENGTH,
    CommandError,
    data_message,
    done_message,
    nope_message,
    over_message,
    parse_command_line,
    parse_coordinates,
)

logger = logging.getLogger(__name__)


class GameOver(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MazeRequestHandler(socketserver.StreamRequestHandler):
    server: "MazeTCPServer"

    def setup(self) -> None:
        super().setup()
        self.username: str | None = None
        self.level: Level | None = None
        self.started_at: float | None = None
        self.won = False

    def handle(self) -> None:
        logger.info("Connection from %s:%s", *self.client_address[:2])
        try:
            while True:
                raw = self.rfile.readline(MAX_LINE_LENGTH)
                if not raw:
                    return
                if not raw.endswith(b"\n") and len(raw) == MAX_LINE_LENGTH:
                    self._skip_rest_of_line()
                    self.wfile.write(nope_message("Command too long"))
                    continue
                self.wfile.write(self.server.respond(self, raw))
        finally:
            self.server.release_level(self)
            logger.info("Connection from %s:%s closed", *self.client_address[:2])

    def _skip_rest_of_line(self) -> None:
        while True:
            chunk = self.rfile.readline(MAX_LINE_LENGTH)
            if not chunk or chunk.endswith(b"\n"):
                return


class MazeTCPServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, config: ServerConfig):
        self.config = config
        self.players_lock = threading.Lock()
        self.players: dict[str, int] = {}
        super().__init__((config.host, config.port), MazeRequestHandler)

    def respond(self, handler: MazeRequestHandler, raw: bytes) -> bytes:
        try:
            return self.dispatch(handler, raw)
        except CommandError as exc:
            return nope_message(exc.message)
        except GameOver as exc:
            return over_message(exc.message)
        except Exception:
            logger.exception("Level failed while handling %r", raw)
            return nope_message("internal error")

    def dispatch(self, handler: MazeRequestHandler, raw: bytes) -> bytes:
        verb, rest = parse_command_line(raw)

        if verb == "USER":
            return self._user(handler, rest)
        if handler.username is None:
            raise CommandError("Identify yourself with USER first")
        if verb == "LEVL":
            return self._select_level(handler, rest)

        level = handler.level
        if level is None:
            raise CommandError("Select a level with LEVL first")
        if verb == "WAIT":
            return done_message()

        self._check_game_over(handler, level)
        if verb == "GETW":
            return data_message(level.get_w())
        if verb == "GETH":
            return data_message(level.get_h())
        if verb == "GETX":
            return data_message(level.get_x())
        if verb == "GETY":
            return data_message(level.get_y())
        if verb == "WHAT":
            x, y = parse_coordinates(rest)
            return data_message(level.what(x, y))
        if verb == "MAZE":
            return data_message(*level.cells())
        if verb == "MOVE":
            if len(rest) != 1:
                raise CommandError("MOVE takes one character")
            if level.move(rest):
                handler.won = True
                logger.info("%s finished level %s", handler.username, level.code)
            return done_message()
        raise CommandError(f"Unknown command {verb}")

    def _user(self, handler: MazeRequestHandler, name: str) -> bytes:
        if handler.username is not None:
            raise CommandError("Already identified")
        if not name.strip():
            raise CommandError("User name cannot be empty")
        handler.username = name
        return done_message()

    def _select_level(self, handler: MazeRequestHandler, code: str) -> bytes:
        if handler.level is not None:
            raise CommandError("Level already selected")
        level = get_level(code)
        with self.players_lock:
            playing = self.players.get(level.code, 0)
            if level.max_conn and playing >= level.max_conn:
                raise CommandError("Level is full")
            self.players[level.code] = playing + 1
        handler.level = level
        handler.started_at = time.monotonic()
        logger.info("%s started level %s", handler.username, level.code)
        return done_message()

    def release_level(self, handler: MazeRequestHandler) -> None:
        if handler.level is None:
            return
        with self.players_lock:
            self.players[handler.level.code] -= 1

    def _check_game_over(self, handler: MazeRequestHandler, level: Level) -> None:
        if handler.won:
            raise GameOver("Level complete.")
        max_time = self.config.max_time_override
        if max_time is None:
            max_time = level.max_time
        if max_time and time.monotonic() - handler.started_at > max_time:
            raise GameOver("Time is up.")


def run_server(config: ServerConfig) -> None:
    server = MazeTCPServer(config)
    logger.info("Maze server listening on %s:%s", *server.server_address[:2])
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Maze server stopped")
