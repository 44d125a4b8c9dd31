import argparse
import logging

from .app import run_server
from .config import ServerConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Maze practice server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=4000)
    parser.add_argument("--max-time", type=float, default=None, help="override every level's time limit (0 = unlimited)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    config = ServerConfig(host=args.host, port=args.port, max_time_override=args.max_time)
    run_server(config)


if __name__ == "__main__":
    main()
