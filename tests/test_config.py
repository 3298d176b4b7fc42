"""Tests for server configuration and CLI merging."""

import pytest
from pydantic import ValidationError

from battleships.play import build_parser, load_config
from battleships.server import ServerConfig


class TestServerConfig:
    """Environment-driven defaults."""

    def test_defaults(self):
        config = ServerConfig.from_env({})
        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.chat_max_length == 400
        assert config.seed is None
        assert not config.validate_state
        assert config.log_level == "INFO"

    def test_environment_overrides(self):
        config = ServerConfig.from_env({
            "PORT": "8080",
            "BATTLESHIPS_HOST": "127.0.0.1",
            "BATTLESHIPS_SEED": "42",
            "BATTLESHIPS_LOG_LEVEL": "debug",
        })
        assert config.port == 8080
        assert config.host == "127.0.0.1"
        assert config.seed == 42
        assert config.log_level == "DEBUG"

    def test_empty_values_ignored(self):
        config = ServerConfig.from_env({"PORT": "", "BATTLESHIPS_SEED": ""})
        assert config.port == 3000
        assert config.seed is None

    def test_invalid_port_rejected(self):
        with pytest.raises(ValidationError):
            ServerConfig.from_env({"PORT": "70000"})
        with pytest.raises(ValidationError):
            ServerConfig.from_env({"PORT": "abc"})


class TestCommandLine:
    """Flags override the environment."""

    def test_flags_override(self, monkeypatch):
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.delenv("BATTLESHIPS_SEED", raising=False)
        args = build_parser().parse_args([
            "--port", "5000", "--seed", "7", "--validate", "--chat-max-length", "50",
        ])
        config = load_config(args)
        assert config.port == 5000
        assert config.seed == 7
        assert config.validate_state
        assert config.chat_max_length == 50

    def test_environment_used_without_flags(self, monkeypatch):
        monkeypatch.setenv("PORT", "4000")
        config = load_config(build_parser().parse_args([]))
        assert config.port == 4000
        assert not config.validate_state
