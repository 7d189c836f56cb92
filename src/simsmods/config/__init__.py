"""Configuration file handling for simsmods."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigError
from .models import SimsModsConfig
from .resolver import env_overrides, resolve_config

DEFAULT_CONFIG_PATH = Path("~/.simsmods/config.yaml")
_HEADER = (
    "# simsmods configuration file\n"
    "# Change it with `simsmods config set` or `simsmods config edit`.\n"
)


class ConfigManager:
    """Own the YAML configuration file and resolve the effective settings."""

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Bind the manager to a configuration file.

        Args:
            path: Configuration file; ``~/.simsmods/config.yaml`` by default.
            env: Environment consulted for overrides; ``os.environ`` by default.
        """
        self.path = (path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    def load(
        self,
        *,
        cli: Optional[Mapping[str, Any]] = None,
        use_env: bool = True,
    ) -> SimsModsConfig:
        """Return the settings from defaults, the file, the environment and ``cli``.

        The file is created with default values when it does not exist yet.

        Raises:
            ConfigError: If the file or an override holds invalid values.
        """
        self.ensure_exists()
        return resolve_config(
            file=self.read(),
            env=env_overrides(self._env) if use_env else None,
            cli=cli,
        )

    def ensure_exists(self) -> Path:
        if not self.path.exists():
            self.write(SimsModsConfig().model_dump(mode="python"))
        return self.path

    def read(self) -> dict[str, Any]:
        """Return the settings stored in the file, without defaults applied.

        Raises:
            ConfigError: If the file is not a YAML mapping.
        """
        if not self.path.exists():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return data

    def write(self, data: Mapping[str, Any]) -> None:
        """Replace the file with ``data`` under a fresh header."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self.path.write_text(f"{_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8")

    def text(self) -> str:
        return self.path.read_text(encoding="utf-8") if self.path.exists() else ""


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "SimsModsConfig",
    "resolve_config",
]
