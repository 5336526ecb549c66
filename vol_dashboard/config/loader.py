"""Config file + environment + CLI precedence resolution."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

from vol_dashboard.exceptions import ConfigError, ConfigValidationError
from vol_dashboard.utils.logging import get_logger

log = get_logger(__name__, component="config")

Caster = Callable[[Any], Any]


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON mapping from disk."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    text = path.read_text()
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to parse config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at the top level")
    return dict(data)


def load_config_with_precedence(
    *,
    config_path: Optional[Path],
    env_prefix: str,
    cli_values: Mapping[str, Any],
    defaults: Mapping[str, Any],
    casters: Optional[Mapping[str, Caster]] = None,
) -> dict[str, Any]:
    """Merge defaults < config file < environment < CLI.

    Only keys present in ``defaults`` are resolved. CLI values of ``None`` are
    treated as "not supplied". Env values are read from ``{env_prefix}{KEY}``
    and passed through ``casters`` when one is registered for the key.
    """
    casters = casters or {}
    merged: dict[str, Any] = dict(defaults)
    sources: dict[str, str] = {key: "default" for key in defaults}

    if config_path is not None:
        file_values = load_config_file(Path(config_path))
        for key, value in file_values.items():
            if key not in defaults:
                log.warning("Ignoring unknown config key %s", key)
                continue
            merged[key] = value
            sources[key] = "file"

    for key in defaults:
        env_key = f"{env_prefix}{key.upper()}"
        raw = os.environ.get(env_key)
        if raw is not None:
            merged[key] = raw
            sources[key] = "env"

    for key, value in cli_values.items():
        if key in defaults and value is not None:
            merged[key] = value
            sources[key] = "cli"

    for key, caster in casters.items():
        if key in merged and merged[key] is not None:
            try:
                merged[key] = caster(merged[key])
            except (TypeError, ValueError) as exc:
                raise ConfigValidationError(
                    f"Invalid value for {key!r} from {sources.get(key, 'default')}: {merged[key]!r}"
                ) from exc

    log.debug("Resolved configuration", extra={"component": "config"})
    return merged


__all__ = ["load_config_file", "load_config_with_precedence"]
