"""Unit tests for config module."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import yaml

from chat_auth.config import ClientConfig, ConfigLoader, get_client_config, get_config_loader


class TestClientConfig:
    """Test ClientConfig dataclass."""

    def test_defaults(self) -> None:
        config = ClientConfig()

        assert config.required_server_version == "0.62.0"
        assert config.recommended_server_version == "0.63.0"
        assert config.cas_settle_delay_seconds == 3.0
        assert config.request_timeout == 30.0
        assert config.connectivity_probe_url is None


class TestConfigLoader:
    """Test ConfigLoader class."""

    def setup_method(self) -> None:
        """Setup test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = Path(self.temp_dir) / "config.yaml"
        self.config_loader = ConfigLoader(str(self.config_file))

    def create_test_yaml(self, content: dict) -> Path:
        """Helper to create test YAML file."""
        with open(self.config_file, "w") as f:
            yaml.dump(content, f)
        return self.config_file

    def test_missing_file_uses_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = self.config_loader.load()

        assert config == ClientConfig()

    def test_load_yaml_values(self) -> None:
        """Test loading values from the YAML file."""
        self.create_test_yaml(
            {
                "server_url": "https://chat.example.com",
                "required_server_version": "0.70.0",
                "cas_settle_delay_seconds": 1,
                "request_timeout": "15",
            }
        )

        with patch.dict(os.environ, {}, clear=True):
            config = self.config_loader.load()

        assert config.server_url == "https://chat.example.com"
        assert config.required_server_version == "0.70.0"
        assert config.cas_settle_delay_seconds == 1.0
        assert config.request_timeout == 15.0
        assert config.recommended_server_version == "0.63.0"

    def test_unknown_keys_are_ignored(self) -> None:
        self.create_test_yaml({"push_app_name": "com.example.chat", "unused": True})

        with patch.dict(os.environ, {}, clear=True):
            config = self.config_loader.load()

        assert config.push_app_name == "com.example.chat"
        assert not hasattr(config, "unused")

    def test_environment_overrides_file(self) -> None:
        self.create_test_yaml({"recommended_server_version": "0.64.0"})

        env = {
            "RECOMMENDED_SERVER_VERSION": "0.65.0",
            "CAS_SETTLE_DELAY_SECONDS": "0.5",
            "CONNECTIVITY_PROBE_URL": "https://probe.example.com",
        }
        with patch.dict(os.environ, env, clear=True):
            config = self.config_loader.load()

        assert config.recommended_server_version == "0.65.0"
        assert config.cas_settle_delay_seconds == 0.5
        assert config.connectivity_probe_url == "https://probe.example.com"

    def test_invalid_number_keeps_default(self) -> None:
        with patch.dict(os.environ, {"REQUEST_TIMEOUT": "soon"}, clear=True):
            config = self.config_loader.load()

        assert config.request_timeout == 30.0

    def test_invalid_yaml_falls_back(self) -> None:
        """Test that a broken file is logged and defaults are used."""
        with open(self.config_file, "w") as f:
            f.write("invalid: yaml: content: [")

        with patch.dict(os.environ, {}, clear=True):
            config = self.config_loader.load()

        assert config == ClientConfig()

    def test_non_mapping_yaml_falls_back(self) -> None:
        with open(self.config_file, "w") as f:
            f.write("- just\n- a list\n")

        with patch.dict(os.environ, {}, clear=True):
            config = self.config_loader.load()

        assert config == ClientConfig()

    def test_empty_file(self) -> None:
        self.config_file.touch()

        with patch.dict(os.environ, {}, clear=True):
            config = self.config_loader.load()

        assert config == ClientConfig()


def test_get_config_loader() -> None:
    """Test config loader factory."""
    with patch.dict(os.environ, {"CHAT_AUTH_CONFIG_PATH": "/tmp/chat-auth.yaml"}):
        loader = get_config_loader()

    assert isinstance(loader, ConfigLoader)
    assert loader.config_file == Path("/tmp/chat-auth.yaml")


def test_get_client_config() -> None:
    env = {
        "CHAT_AUTH_CONFIG_PATH": "/nonexistent/config.yaml",
        "CHAT_AUTH_SERVER_URL": "https://chat.example.com",
    }
    with patch.dict(os.environ, env, clear=True):
        config = get_client_config()

    assert config.server_url == "https://chat.example.com"
