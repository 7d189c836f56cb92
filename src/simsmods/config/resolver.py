"""Merging of configuration sources into a validated :class:`SimsModsConfig`."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import SimsModsConfig

ENV_PREFIX = "SIMSMODS__"


def resolve_config(
    *,
    file: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, Any]] = None,
    cli: Optional[Mapping[str, Any]] = None,
) -> SimsModsConfig:
    """Layer ``file``, ``env`` and ``cli`` overrides, in that order, over the defaults.

    Keys of every source may be dotted (``"paths.mods_dir"``) or nested.

    Raises:
        ConfigError: If a source is malformed or the merged values do not validate.
    """
    merged = SimsModsConfig().model_dump(mode="python")
    for origin, source in (("config file", file), ("environment", env), ("command line", cli)):
        if source:
            merged = _merge(merged, _expand(source, origin))
    try:
        return SimsModsConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``SIMSMODS__SECTION__KEY`` variables as nested overrides.

    Values are parsed as YAML so lists and numbers keep their type; a value that
    is not valid YAML is taken verbatim.
    """
    overrides: dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        path = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        assign_dotted(overrides, path, value, origin="environment")
    return overrides


def assign_dotted(target: dict[str, Any], path: list[str], value: Any, *, origin: str) -> None:
    """Set ``value`` at ``path`` inside ``target``, creating sections as needed.

    Raises:
        ConfigError: If ``path`` runs through a value that is not a section.
    """
    node = target
    for part in path[:-1]:
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            raise ConfigError(f"{'.'.join(path)} from the {origin} is not inside a section.")
        node = child
    if isinstance(value, Mapping):
        current = node.get(path[-1])
        base = current if isinstance(current, dict) else {}
        node[path[-1]] = _merge(base, _expand(value, origin))
    else:
        node[path[-1]] = value


def _expand(source: Mapping[str, Any], origin: str) -> dict[str, Any]:
    if not isinstance(source, Mapping):
        raise ConfigError(f"Settings from the {origin} must form a mapping.")
    nested: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"Setting names from the {origin} must be strings.")
        assign_dotted(nested, key.split("."), value, origin=origin)
    return nested


def _merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "assign_dotted", "env_overrides", "resolve_config"]
