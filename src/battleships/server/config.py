"""Server configuration.

Defaults can be overridden from the environment (PORT, BATTLESHIPS_HOST,
BATTLESHIPS_SEED, BATTLESHIPS_LOG_LEVEL) and then from command-line flags.
"""

import os
from typing import Mapping, Optional
from pydantic import BaseModel, Field

from battleships.engine.session_manager import DEFAULT_CHAT_MAX_LENGTH

DEFAULT_PORT = 3000


class ServerConfig(BaseModel):
    """Settings for one server process."""

    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    chat_max_length: int = Field(default=DEFAULT_CHAT_MAX_LENGTH, ge=1)
    seed: Optional[int] = None  # first-turn draws are reproducible when set
    validate_state: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """Build a config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get("PORT"):
            values["port"] = env["PORT"]
        if env.get("BATTLESHIPS_HOST"):
            values["host"] = env["BATTLESHIPS_HOST"]
        if env.get("BATTLESHIPS_SEED"):
            values["seed"] = env["BATTLESHIPS_SEED"]
        if env.get("BATTLESHIPS_LOG_LEVEL"):
            values["log_level"] = env["BATTLESHIPS_LOG_LEVEL"].upper()
        return cls.model_validate(values)
