"""Configuration loader for the MISP match pipeline."""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from misp_match.errors import ConfigError

logger = logging.getLogger("misp_match.config")

DEFAULT_CONFIG_PATH = Path.home() / ".misp_match" / "conf.toml"
EXPECTED_CONTENT_TYPE = "application/json"
EXPECTED_RETURN_FORMAT = "json"


def _bool_from_str(value: str, default: bool = False) -> bool:
    """Convert string to boolean."""
    return value.lower() in ("true", "1", "yes") if value else default


@dataclass
class MatchConfig:
    """Connection and runtime settings for one pipeline run."""

    url: str
    authorization: str
    content_type: str = EXPECTED_CONTENT_TYPE
    return_format: str = EXPECTED_RETURN_FORMAT

    # False skips certificate verification for this client only
    verify_ssl: bool = False
    request_timeout: float = 300.0

    log_file: str = "active-responses.log"
    debug: bool = False


# Environment variable -> config field
_ENV_OVERRIDES = {
    "MISP_URL": "url",
    "MISP_AUTHORIZATION": "authorization",
    "MISP_CONTENT_TYPE": "content_type",
    "MISP_RETURN_FORMAT": "return_format",
    "MISP_VERIFY_SSL": "verify_ssl",
    "MISP_REQUEST_TIMEOUT": "request_timeout",
    "MISP_MATCH_LOG_FILE": "log_file",
    "MISP_MATCH_DEBUG": "debug",
}

_REQUIRED_FIELDS = ("url", "authorization")


def _read_config_file(path: Optional[str]) -> dict[str, Any]:
    """Read the TOML config file, if one is configured or present."""
    explicit = path or os.environ.get("MISP_MATCH_CONFIG")
    config_path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"config file not found: {config_path}")
        return {}

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"error while reading config file {config_path}: {e}") from e

    logger.debug(f"successfully read config file {config_path}")
    return data


def _coerce(field_name: str, value: Any) -> Any:
    """Convert a raw file/env value to the field's type."""
    if field_name in ("verify_ssl", "debug"):
        if isinstance(value, bool):
            return value
        return _bool_from_str(str(value))
    if field_name == "request_timeout":
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid request_timeout: {value!r}") from e
    return str(value)


def load_config(path: Optional[str] = None) -> MatchConfig:
    """
    Load configuration from a TOML file and environment variables.

    Environment variables take precedence over file values.

    Args:
        path: Explicit config file path (overrides MISP_MATCH_CONFIG)

    Raises:
        ConfigError: If the file is unreadable or required settings are missing
    """
    raw = _read_config_file(path)

    values: dict[str, Any] = {}
    for field_name in _ENV_OVERRIDES.values():
        if field_name in raw:
            values[field_name] = _coerce(field_name, raw[field_name])

    for env_var, field_name in _ENV_OVERRIDES.items():
        env_value = os.environ.get(env_var)
        if env_value:
            values[field_name] = _coerce(field_name, env_value)

    for required in _REQUIRED_FIELDS:
        if not values.get(required):
            raise ConfigError(f"'{required}' is required (config file or environment)")

    config = MatchConfig(**values)

    if config.content_type != EXPECTED_CONTENT_TYPE:
        logger.warning(f"Unexpected content_type {config.content_type!r}")
    if config.return_format != EXPECTED_RETURN_FORMAT:
        logger.warning(f"Unexpected return_format {config.return_format!r}")

    return config
