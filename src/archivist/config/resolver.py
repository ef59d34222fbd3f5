"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import ArchivistConfig

ENV_PREFIX = "ARCHIVIST__"


def resolve_with_precedence(
    *,
    defaults: ArchivistConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> ArchivistConfig:
    """Merge configuration sources; later sources win.

    Precedence runs defaults, then the config file, then the environment, then
    CLI flags. Override keys may be nested mappings or dotted paths such as
    ``"remote.endpoint_url"``.

    Raises:
        ConfigError: If an override is malformed or the merged data is invalid.
    """
    merged = defaults.model_dump(mode="python")
    layers = (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    for label, layer in layers:
        if layer is None:
            continue
        merged = _deep_merge(merged, _expand_dotted(layer, label=label))

    try:
        return ArchivistConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: ArchivistConfig) -> Dict[str, str]:
    """Render the config as ``ARCHIVIST__SECTION__KEY`` environment mappings."""
    flat: Dict[str, str] = {}

    def _walk(path: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                _walk([*path, str(key)], child)
            return
        env_key = ENV_PREFIX + "__".join(part.upper() for part in path)
        if isinstance(value, list):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[env_key] = "null"
        else:
            flat[env_key] = str(value)

    for section, payload in config.model_dump(mode="python").items():
        _walk([section], payload)
    return flat


def _expand_dotted(layer: Mapping[str, Any], *, label: str) -> dict[str, Any]:
    if not isinstance(layer, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in dict(layer).items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        _assign(expanded, key.split("."), value, label=label)
    return expanded


def _assign(target: dict[str, Any], path: list[str], value: Any, *, label: str) -> None:
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{label.capitalize()} override for {'.'.join(path)} conflicts with existing value."
            )
        node = child

    leaf = path[-1]
    if isinstance(value, MappingABC):
        nested = _expand_dotted(value, label=label)
        current = node.get(leaf)
        node[leaf] = _deep_merge(current if isinstance(current, dict) else {}, nested)
    else:
        node[leaf] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        existing = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(existing, MappingABC):
            merged[key] = _deep_merge(existing, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "resolve_with_precedence", "flatten_for_env"]
