"""Unit tests for ConfigLoader."""

import pytest
import yaml
from pathlib import Path

from fetcher.config.loader import ConfigLoader
from fetcher.config.models import TransportConfig
from fetcher.exceptions import ConfigurationError


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
  config_path = tmp_path / "config"
  config_path.mkdir()
  return config_path


def write_config(config_dir: Path, data, name: str = "fetcher") -> Path:
  config_file = config_dir / f"{name}.yaml"
  with open(config_file, "w") as f:
    if isinstance(data, str):
      f.write(data)
    else:
      yaml.dump(data, f)
  return config_file


class TestConfigLoader:
  """Test cases for ConfigLoader class."""

  def test_load_full_config(self, config_dir):
    write_config(config_dir, {
      "transport": {
        "keep_alive": 30,
        "handshake_timeout": 5,
        "max_connections": 10,
        "trust_env": False,
      },
      "request": {
        "max_attempts": 3,
        "headers": {"User-Agent": "fetcher/0.1"},
      },
    })

    config = ConfigLoader(config_dir).load_config()

    assert config.transport == TransportConfig(
      keep_alive=30.0, handshake_timeout=5.0, max_connections=10, trust_env=False
    )
    assert config.max_attempts == 3
    assert config.default_headers == {"User-Agent": "fetcher/0.1"}
    assert config.source.endswith("fetcher.yaml")

  def test_empty_file_gives_defaults(self, config_dir):
    write_config(config_dir, "")

    config = ConfigLoader(config_dir).load_config()

    assert config.transport == TransportConfig()
    assert config.max_attempts == 1
    assert config.default_headers == {}

  def test_missing_file(self, config_dir):
    with pytest.raises(ConfigurationError, match="Configuration file not found"):
      ConfigLoader(config_dir).load_config("missing")

  def test_invalid_yaml(self, config_dir):
    write_config(config_dir, "transport: [unclosed")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
      ConfigLoader(config_dir).load_config()

  def test_non_dict_root(self, config_dir):
    write_config(config_dir, "- a\n- b\n")

    with pytest.raises(ConfigurationError, match="must contain a YAML dictionary"):
      ConfigLoader(config_dir).load_config()

  def test_unknown_transport_setting(self, config_dir):
    write_config(config_dir, {"transport": {"dial_timeout": 3}})

    with pytest.raises(ConfigurationError) as exc_info:
      ConfigLoader(config_dir).load_config()

    assert exc_info.value.field == "transport.dial_timeout"

  def test_invalid_transport_value(self, config_dir):
    write_config(config_dir, {"transport": {"keep_alive": -5}})

    with pytest.raises(ConfigurationError) as exc_info:
      ConfigLoader(config_dir).load_config()

    assert exc_info.value.field == "transport.keep_alive"
    assert exc_info.value.config_file.endswith("fetcher.yaml")

  def test_infinite_duration(self, config_dir):
    write_config(config_dir, "transport:\n  keep_alive: .inf\n")

    with pytest.raises(ConfigurationError, match="must be finite") as exc_info:
      ConfigLoader(config_dir).load_config()

    assert exc_info.value.field == "transport.keep_alive"

  def test_non_numeric_value(self, config_dir):
    write_config(config_dir, {"transport": {"handshake_timeout": "soon"}})

    with pytest.raises(ConfigurationError, match="Expected a number"):
      ConfigLoader(config_dir).load_config()

  def test_zero_max_attempts(self, config_dir):
    write_config(config_dir, {"request": {"max_attempts": 0}})

    with pytest.raises(ConfigurationError, match="max_attempts"):
      ConfigLoader(config_dir).load_config()

  def test_environment_variables_resolved(self, config_dir, monkeypatch):
    monkeypatch.setenv("FETCHER_TOKEN", "secret-token")
    monkeypatch.setenv("FETCHER_KEEP_ALIVE", "45")
    write_config(config_dir, {
      "transport": {"keep_alive": "${FETCHER_KEEP_ALIVE}"},
      "request": {"headers": {"Authorization": "Bearer ${FETCHER_TOKEN}"}},
    })

    config = ConfigLoader(config_dir).load_config()

    assert config.transport.keep_alive == 45.0
    assert config.default_headers["Authorization"] == "Bearer secret-token"

  def test_environment_default(self, config_dir, monkeypatch):
    monkeypatch.delenv("FETCHER_ATTEMPTS", raising=False)
    write_config(config_dir, {"request": {"max_attempts": "${FETCHER_ATTEMPTS:-4}"}})

    assert ConfigLoader(config_dir).load_config().max_attempts == 4

  def test_missing_environment_variable(self, config_dir, monkeypatch):
    monkeypatch.delenv("FETCHER_UNSET", raising=False)
    write_config(config_dir, {"request": {"headers": {"X-Key": "${FETCHER_UNSET}"}}})

    with pytest.raises(ConfigurationError, match="FETCHER_UNSET") as exc_info:
      ConfigLoader(config_dir).load_config()

    assert exc_info.value.field == "request.headers.X-Key"

  def test_trust_env_from_string(self, config_dir):
    write_config(config_dir, {"transport": {"trust_env": "no"}})
    assert ConfigLoader(config_dir).load_config().transport.trust_env is False

  def test_list_available_configs(self, config_dir):
    write_config(config_dir, {}, name="staging")
    write_config(config_dir, {}, name="fetcher")
    (config_dir / "notes.txt").write_text("ignored")

    assert ConfigLoader(config_dir).list_available_configs() == ["fetcher", "staging"]

  def test_list_available_configs_missing_dir(self, tmp_path):
    assert ConfigLoader(tmp_path / "absent").list_available_configs() == []
