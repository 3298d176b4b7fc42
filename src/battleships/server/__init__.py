"""Server package - transport and configuration."""

from .config import ServerConfig
from .websocket_server import BattleshipsServer, run_server

__all__ = [
    "ServerConfig",
    "BattleshipsServer",
    "run_server",
]
