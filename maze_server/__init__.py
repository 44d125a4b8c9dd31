from .app import MazeTCPServer, run_server
from .config import ServerConfig
from .levels import Level, get_level, register_level

__all__ = ["Level", "MazeTCPServer", "ServerConfig", "get_level", "register_level", "run_server"]
