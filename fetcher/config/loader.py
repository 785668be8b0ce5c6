"""Configuration loader with YAML parsing and environment variable resolution."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from ..exceptions import ConfigurationError
from .models import FetcherConfig, TransportConfig

_ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')

_TRANSPORT_FIELDS = {
  "keep_alive": float,
  "handshake_timeout": float,
  "max_connections": int,
  "trust_env": bool,
}


class ConfigLoader:
  """Loads fetcher configuration files from a directory.

  A configuration file looks like::

    transport:
      keep_alive: 30
      handshake_timeout: 5
    request:
      max_attempts: 3
      headers:
        Authorization: Bearer ${API_TOKEN}

  ``${VAR}`` references are replaced with environment variables, and
  ``${VAR:-default}`` falls back to ``default`` when VAR is unset.
  """

  def __init__(self, config_dir: Path):
    """Initialize ConfigLoader with configuration directory.

    Args:
      config_dir: Path to directory containing configuration files
    """
    self.config_dir = Path(config_dir)

  def load_config(self, config_name: str = "fetcher") -> FetcherConfig:
    """Load configuration from the named file.

    Args:
      config_name: Name of configuration file without .yaml extension

    Returns:
      FetcherConfig with environment variables resolved

    Raises:
      ConfigurationError: If the file is missing, malformed, or invalid
    """
    config_file = self.get_config_file_path(config_name)

    if not config_file.exists():
      raise ConfigurationError(
        f"Configuration file not found: {config_file}",
        config_file=str(config_file)
      )

    try:
      with open(config_file, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
      raise ConfigurationError(
        f"Invalid YAML in configuration file: {e}",
        config_file=str(config_file)
      )
    except OSError as e:
      raise ConfigurationError(
        f"Error reading configuration file: {e}",
        config_file=str(config_file)
      )

    if config_dict is None:
      config_dict = {}

    if not isinstance(config_dict, dict):
      raise ConfigurationError(
        "Configuration file must contain a YAML dictionary",
        config_file=str(config_file)
      )

    try:
      resolved = self._resolve_environment_variables(config_dict)
    except ConfigurationError as e:
      raise ConfigurationError(str(e), config_file=str(config_file), field=e.field)

    return self.from_dict(resolved, str(config_file))

  def from_dict(self, config_dict: dict[str, Any], config_file: Optional[str] = None) -> FetcherConfig:
    """Build a FetcherConfig from an already-parsed dictionary."""
    transport_dict = self._section(config_dict, "transport", config_file)
    request_dict = self._section(config_dict, "request", config_file)

    transport_kwargs = {}
    for name, value in transport_dict.items():
      if name not in _TRANSPORT_FIELDS:
        raise ConfigurationError(
          f"Unknown transport setting '{name}'",
          config_file=config_file,
          field=f"transport.{name}"
        )
      transport_kwargs[name] = self._coerce(value, _TRANSPORT_FIELDS[name], f"transport.{name}", config_file)

    headers = request_dict.get("headers", {}) or {}
    if not isinstance(headers, dict):
      raise ConfigurationError(
        "Request headers must be a dictionary",
        config_file=config_file,
        field="request.headers"
      )

    max_attempts = self._coerce(request_dict.get("max_attempts", 1), int, "request.max_attempts", config_file)

    try:
      transport = TransportConfig(**transport_kwargs)
    except ConfigurationError as e:
      raise ConfigurationError(str(e), config_file=config_file, field=f"transport.{e.field}")

    return FetcherConfig(
      transport=transport,
      default_headers={str(k): str(v) for k, v in headers.items()},
      max_attempts=max_attempts,
      source=config_file,
    )

  def list_available_configs(self) -> list[str]:
    """List configuration names (without extension) in the config directory."""
    if not self.config_dir.is_dir():
      return []
    return sorted(p.stem for p in self.config_dir.glob("*.yaml") if p.is_file())

  def get_config_file_path(self, config_name: str) -> Path:
    return self.config_dir / f"{config_name}.yaml"

  @staticmethod
  def _section(config_dict: dict[str, Any], name: str, config_file: Optional[str]) -> dict[str, Any]:
    section = config_dict.get(name, {})
    if section is None:
      return {}
    if not isinstance(section, dict):
      raise ConfigurationError(
        f"{name.capitalize()} section must be a dictionary",
        config_file=config_file,
        field=name
      )
    return section

  @staticmethod
  def _coerce(value: Any, kind: type, path: str, config_file: Optional[str]) -> Any:
    if kind is bool:
      if isinstance(value, bool):
        return value
      if isinstance(value, str) and value.lower() in ("true", "false", "1", "0", "yes", "no"):
        return value.lower() in ("true", "1", "yes")
      raise ConfigurationError(
        f"Expected a boolean for '{path}', got {value!r}",
        config_file=config_file,
        field=path
      )
    if isinstance(value, bool):
      raise ConfigurationError(
        f"Expected a number for '{path}', got {value!r}",
        config_file=config_file,
        field=path
      )
    try:
      return kind(value)
    except (TypeError, ValueError):
      raise ConfigurationError(
        f"Expected a number for '{path}', got {value!r}",
        config_file=config_file,
        field=path
      )

  def _resolve_environment_variables(self, config_dict: dict[str, Any]) -> dict[str, Any]:
    """Resolve ${VAR} and ${VAR:-default} patterns with environment variables.

    Raises:
      ConfigurationError: If a referenced variable is unset and has no default
    """
    def resolve_value(value: Any, path: str = "") -> Any:
      if isinstance(value, str):
        def substitute(match: re.Match) -> str:
          var_name, default = match.group(1), match.group(2)
          env_value = os.getenv(var_name)
          if env_value is not None:
            return env_value
          if default is not None:
            return default
          error_path = f" at {path}" if path else ""
          raise ConfigurationError(
            f"Environment variable '{var_name}' is not set{error_path}",
            field=path or None
          )

        return _ENV_PATTERN.sub(substitute, value)

      elif isinstance(value, dict):
        return {
          key: resolve_value(val, f"{path}.{key}" if path else str(key))
          for key, val in value.items()
        }

      elif isinstance(value, list):
        return [
          resolve_value(item, f"{path}[{i}]" if path else f"[{i}]")
          for i, item in enumerate(value)
        ]

      return value

    return resolve_value(config_dict)
