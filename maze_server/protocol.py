from __future__ import annotations

VERBS = {"USER", "LEVL", "WAIT", "GETW", "GETH", "GETX", "GETY", "WHAT", "MAZE", "MOVE"}
MAX_LINE_LENGTH = 1024


class CommandError(Exception):
    """A command line that should be answered with NOPE."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def parse_command_line(line: bytes) -> tuple[str, str]:
    """Split a raw line into its verb and the raw argument text."""
    try:
        decoded = line.decode("ascii").rstrip("\r\n")
    except UnicodeDecodeError as exc:
        raise CommandError("Command must be ASCII") from exc
    if not decoded:
        raise CommandError("Empty command")

    verb, _, rest = decoded.partition(" ")
    if verb not in VERBS:
        raise CommandError(f"Unknown command {verb}")
    return verb, rest


def parse_coordinates(rest: str) -> tuple[int, int]:
    parts = rest.split(" ")
    if len(parts) != 2 or not all(part.isascii() and part.isdigit() for part in parts):
        raise CommandError("WHAT takes two non-negative integers")
    return int(parts[0]), int(parts[1])


def done_message() -> bytes:
    return b"DONE\n"


def data_message(*values: int) -> bytes:
    return ("DATA " + " ".join(str(value) for value in values) + "\n").encode("ascii")


def nope_message(message: str) -> bytes:
    return f"NOPE {message}\n".encode("ascii", "replace")


def over_message(message: str) -> bytes:
    return f"OVER {message}\n".encode("ascii", "replace")
