from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClientConfig:
    host: str = "i.protab.cz"
    port: int = 4000
    user: str = ""
    level: str = ""
    wait: bool = False
    timeout: Optional[float] = None
