"""Configuration loader for the login client."""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = "~/.config/chat-auth/config.yaml"


@dataclass
class ClientConfig:
    """Client configuration and build-time version thresholds."""

    server_url: str = ""
    required_server_version: str = "0.62.0"
    recommended_server_version: str = "0.63.0"
    cas_settle_delay_seconds: float = 3.0
    request_timeout: float = 30.0
    connectivity_probe_url: str | None = None
    push_app_name: str = "chat.rocket.android"


# Environment variable -> config field
ENV_OVERRIDES = {
    "CHAT_AUTH_SERVER_URL": "server_url",
    "REQUIRED_SERVER_VERSION": "required_server_version",
    "RECOMMENDED_SERVER_VERSION": "recommended_server_version",
    "CAS_SETTLE_DELAY_SECONDS": "cas_settle_delay_seconds",
    "REQUEST_TIMEOUT": "request_timeout",
    "CONNECTIVITY_PROBE_URL": "connectivity_probe_url",
    "PUSH_APP_NAME": "push_app_name",
}


class ConfigLoader:
    """Loads client configuration from a YAML file and the environment."""

    def __init__(self, config_file: str = DEFAULT_CONFIG_PATH):
        self.config_file = Path(config_file).expanduser()

    def load(self) -> ClientConfig:
        """Load configuration; a missing or broken file falls back to defaults."""
        values: dict[str, Any] = {}

        if self.config_file.exists():
            try:
                values.update(self._load_yaml_file(self.config_file))
            except Exception as e:
                logger.error(
                    "Failed to load config file",
                    file=str(self.config_file),
                    error=str(e),
                )
        else:
            logger.debug("Config file does not exist", file=str(self.config_file))

        for env_name, field_name in ENV_OVERRIDES.items():
            env_value = os.getenv(env_name)
            if env_value is not None:
                values[field_name] = env_value

        return self._build(values)

    def _load_yaml_file(self, yaml_file: Path) -> dict[str, Any]:
        with open(yaml_file) as f:
            content = yaml.safe_load(f)

        if not content:
            return {}
        if not isinstance(content, dict):
            raise ValueError("Config file must contain a mapping")

        known = {f.name for f in fields(ClientConfig)}
        unknown = set(content) - known
        if unknown:
            logger.warning("Ignoring unknown config keys", keys=sorted(unknown))
        return {k: v for k, v in content.items() if k in known}

    def _build(self, values: dict[str, Any]) -> ClientConfig:
        config = ClientConfig()
        for f in fields(ClientConfig):
            if f.name not in values:
                continue
            value = values[f.name]
            try:
                if f.name in ("cas_settle_delay_seconds", "request_timeout"):
                    value = float(value)
                elif value is not None:
                    value = str(value)
            except (TypeError, ValueError):
                logger.error("Invalid config value, using default", key=f.name, value=value)
                continue
            setattr(config, f.name, value)
        return config


def get_config_loader() -> ConfigLoader:
    """Get configured config loader instance."""
    return ConfigLoader(os.getenv("CHAT_AUTH_CONFIG_PATH", DEFAULT_CONFIG_PATH))


def get_client_config() -> ClientConfig:
    return get_config_loader().load()
