"""Unit tests for transport configuration models and options."""

import pytest

from fetcher.config.models import (
    DEFAULT_HANDSHAKE_TIMEOUT,
    DEFAULT_KEEP_ALIVE,
    FetcherConfig,
    TransportConfig,
    apply_transport_options,
    with_handshake_timeout,
    with_keep_alive,
    with_max_connections,
    with_trust_env,
)
from fetcher.exceptions import ConfigurationError
from fetcher.http.request import RequestConfig


class TestTransportConfig:
    """Test cases for TransportConfig."""

    def test_defaults(self):
        config = TransportConfig()
        assert config.keep_alive == DEFAULT_KEEP_ALIVE == 60
        assert config.handshake_timeout == DEFAULT_HANDSHAKE_TIMEOUT == 10
        assert config.max_connections == 100
        assert config.trust_env is True

    def test_is_immutable(self):
        config = TransportConfig()
        with pytest.raises(Exception):
            config.keep_alive = 5

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"keep_alive": -1}, "keep_alive"),
            ({"handshake_timeout": -0.5}, "handshake_timeout"),
            ({"max_connections": 0}, "max_connections"),
        ],
    )
    def test_validation(self, kwargs, field):
        with pytest.raises(ConfigurationError) as exc_info:
            TransportConfig(**kwargs)
        assert exc_info.value.field == field

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"keep_alive": "30"}, "keep_alive"),
            ({"keep_alive": float("nan")}, "keep_alive"),
            ({"keep_alive": True}, "keep_alive"),
            ({"handshake_timeout": None}, "handshake_timeout"),
            ({"handshake_timeout": float("inf")}, "handshake_timeout"),
            ({"max_connections": "10"}, "max_connections"),
            ({"max_connections": 2.5}, "max_connections"),
            ({"max_connections": True}, "max_connections"),
            ({"trust_env": "yes"}, "trust_env"),
        ],
    )
    def test_rejects_wrong_types(self, kwargs, field):
        with pytest.raises(ConfigurationError) as exc_info:
            TransportConfig(**kwargs)
        assert exc_info.value.field == field

    def test_accepts_integer_durations(self):
        config = TransportConfig(keep_alive=0, handshake_timeout=3)
        assert config.keep_alive == 0
        assert config.handshake_timeout == 3


class TestTransportOptions:
    """Test cases for transport options."""

    def test_options_return_new_config(self):
        base = TransportConfig()
        updated = with_keep_alive(5)(base)
        assert base.keep_alive == 60
        assert updated.keep_alive == 5

    def test_apply_in_order(self):
        config = apply_transport_options(
            with_handshake_timeout(1),
            with_keep_alive(2),
            with_handshake_timeout(3),
            with_max_connections(4),
            with_trust_env(False),
        )
        assert config == TransportConfig(
            keep_alive=2, handshake_timeout=3, max_connections=4, trust_env=False
        )

    def test_no_options_gives_defaults(self):
        assert apply_transport_options() == TransportConfig()

    def test_invalid_option_raises(self):
        with pytest.raises(ConfigurationError):
            apply_transport_options(with_max_connections(-3))

    @pytest.mark.parametrize(
        "option",
        [
            with_keep_alive("30"),
            with_handshake_timeout(None),
            with_keep_alive(float("nan")),
        ],
    )
    def test_invalid_option_value_raises_configuration_error(self, option):
        with pytest.raises(ConfigurationError):
            apply_transport_options(option)


class TestFetcherConfig:
    """Test cases for FetcherConfig."""

    def test_rejects_zero_attempts(self):
        with pytest.raises(ConfigurationError, match="max_attempts"):
            FetcherConfig(max_attempts=0)

    def test_transport_options_round_trip(self):
        transport = TransportConfig(keep_alive=7, handshake_timeout=2)
        config = FetcherConfig(transport=transport)
        assert apply_transport_options(*config.transport_options()) == transport

    def test_request_options(self):
        config = FetcherConfig(default_headers={"User-Agent": "fetcher"}, max_attempts=3)

        request_config = RequestConfig()
        for option in config.request_options():
            request_config = option(request_config)

        assert request_config.headers == (("User-Agent", "fetcher"),)
        assert request_config.max_attempts == 3
