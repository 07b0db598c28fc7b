"""Configuration loader for connection descriptors."""

import json
import os
from pathlib import Path
from typing import Any

from ._logging import get_logger, redact_config
from .exceptions import ConfigurationError
from .options import ConnectionOptions

LOGGER = get_logger("config")


def _read_prefixed_env(prefix: str) -> dict[str, Any]:
    """Read environment keys matching <PREFIX>_* and normalize key names."""
    prefix_token = f"{prefix.upper()}_"
    values: dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix_token):
            normalized_key = key.removeprefix(prefix_token).lower()
            values[normalized_key] = value

    LOGGER.info("Loaded %s config keys from environment prefix %s", len(values), prefix_token)
    return values


def _parse_config_text(path: Path) -> Any:
    content = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix == ".json":
        return json.loads(content)

    if suffix in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise ConfigurationError("PyYAML is not installed. Install it to use YAML config files.") from exc
        return yaml.safe_load(content)

    raise ConfigurationError("Unsupported config format. Use JSON (.json) or YAML (.yaml/.yml).")


def _read_config_file(file_path: str | Path | None) -> dict[str, Any]:
    """Read a JSON or YAML config file when provided, otherwise return an empty mapping."""
    if not file_path:
        LOGGER.info("No config file path provided")
        return {}

    path = Path(file_path)
    if not path.exists():
        LOGGER.error("Config file not found: %s", file_path)
        raise ConfigurationError(f"Config file not found: {file_path}")

    data = _parse_config_text(path)
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a key-value object at the root")

    LOGGER.info("Loaded config from %s", file_path)
    return data


def _not_none_values(values: dict[str, Any] | None) -> dict[str, Any]:
    """Drop keys with None values to avoid overriding previous layers."""
    if not values:
        return {}
    return {key: value for key, value in values.items() if value is not None}


def _merge_config_layers(layers: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge config dictionaries in order where last layer wins."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    return merged


def _ensure_required_keys(config: dict[str, Any], required: tuple[str, ...]) -> None:
    missing = [key for key in required if config.get(key) in (None, "")]
    if missing:
        joined = ", ".join(missing)
        LOGGER.error("Required config keys missing: %s", joined)
        raise ConfigurationError(f"Missing required connection config keys: {joined}")


def load_connection_config(
    config: dict[str, Any] | None = None,
    *,
    file_path: str | Path | None = None,
    env_prefix: str | None = None,
    required: tuple[str, ...] = (),
    defaults: dict[str, Any] | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve final config from defaults, file, env, config, and overrides."""
    LOGGER.info(
        "Loading connection config with env_prefix=%s, file_path=%s",
        env_prefix,
        file_path,
    )
    env_config = _read_prefixed_env(env_prefix) if env_prefix else {}
    merged = _merge_config_layers(
        [
            defaults or {},
            _read_config_file(file_path),
            env_config,
            config or {},
            _not_none_values(overrides),
        ]
    )

    _ensure_required_keys(merged, required)
    LOGGER.info("Connection config resolved: %s", redact_config(merged))
    return merged


def load_connection_options(
    connection_url: str | None = None,
    username: str | None = None,
    password: str | None = None,
    driver: str | None = None,
    *,
    config: dict[str, Any] | None = None,
    file_path: str | Path | None = None,
    env_prefix: str = "JDBC",
) -> ConnectionOptions:
    """Build a validated connection descriptor from layered configuration."""
    merged = load_connection_config(
        config,
        file_path=file_path,
        env_prefix=env_prefix,
        required=("connection_url",),
        defaults={"username": ""},
        overrides={
            "connection_url": connection_url,
            "username": username,
            "password": password,
            "driver": driver,
        },
    )
    fields = ConnectionOptions.model_fields
    return ConnectionOptions.model_validate({key: value for key, value in merged.items() if key in fields})
