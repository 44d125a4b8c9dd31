from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 4000
    max_time_override: Optional[float] = None
