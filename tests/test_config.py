"""Tests for server configuration."""

import pytest

from rpc_wire.config import DEFAULT_MAX_BODY_SIZE, ConfigError, RpcConfig
from rpc_wire.http.message import POST_READ_SIZE

CUSTOM_MAX = 4096
CUSTOM_CHUNK = 512


class TestDefaults:
    """Verify default limits and identity."""

    def test_defaults(self) -> None:
        """Defaults match the legacy server."""
        config = RpcConfig()
        assert config.max_body_size == DEFAULT_MAX_BODY_SIZE
        assert config.read_chunk_size == POST_READ_SIZE
        assert config.product == "nodex-json-rpc"
        assert config.keep_alive

    def test_negative_max_rejected(self) -> None:
        """A negative body limit is invalid."""
        with pytest.raises(ConfigError, match="max_body_size"):
            RpcConfig(max_body_size=-1)

    def test_zero_chunk_rejected(self) -> None:
        """The read chunk must be positive."""
        with pytest.raises(ConfigError, match="read_chunk_size"):
            RpcConfig(read_chunk_size=0)


class TestFromEnv:
    """Verify loading from an environment mapping."""

    def test_empty_env_gives_defaults(self) -> None:
        """Missing keys fall back to defaults."""
        assert RpcConfig.from_env({}) == RpcConfig()

    def test_all_keys(self) -> None:
        """Every recognised key is applied."""
        config = RpcConfig.from_env(
            {
                "RPC_MAX_BODY_SIZE": str(CUSTOM_MAX),
                "RPC_READ_CHUNK_SIZE": f" {CUSTOM_CHUNK} ",
                "RPC_VERSION": "v2.0.1",
                "RPC_PRODUCT": "example-rpc",
                "RPC_KEEPALIVE": "false",
            }
        )
        assert config == RpcConfig(
            max_body_size=CUSTOM_MAX,
            read_chunk_size=CUSTOM_CHUNK,
            version="v2.0.1",
            product="example-rpc",
            keep_alive=False,
        )

    @pytest.mark.parametrize(("raw", "expected"), [("1", True), ("YES", True), ("off", False)])
    def test_boolean_words(self, raw: str, *, expected: bool) -> None:
        """Common boolean spellings are accepted."""
        assert RpcConfig.from_env({"RPC_KEEPALIVE": raw}).keep_alive is expected

    def test_bad_integer(self) -> None:
        """A non-numeric size is a configuration error."""
        with pytest.raises(ConfigError, match="RPC_MAX_BODY_SIZE"):
            RpcConfig.from_env({"RPC_MAX_BODY_SIZE": "big"})

    def test_bad_boolean(self) -> None:
        """An unrecognised boolean is a configuration error."""
        with pytest.raises(ConfigError, match="RPC_KEEPALIVE"):
            RpcConfig.from_env({"RPC_KEEPALIVE": "maybe"})

    def test_values_still_validated(self) -> None:
        """Values from the environment go through the same checks."""
        with pytest.raises(ConfigError):
            RpcConfig.from_env({"RPC_READ_CHUNK_SIZE": "-4"})
