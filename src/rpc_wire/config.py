"""Server configuration — limits and identity for the RPC layer.

Configuration is a frozen dataclass so that a connection handler can
hold one without worrying about it changing under its feet.  Values can
come from keyword arguments or from an environment-style mapping of
``KEY=VALUE`` strings::

    config = RpcConfig.from_env(os.environ)

Recognised keys:
    - ``RPC_MAX_BODY_SIZE`` — largest request body accepted, in bytes.
    - ``RPC_READ_CHUNK_SIZE`` — largest single read issued for a body.
    - ``RPC_VERSION`` — version token embedded in the ``Server`` header.
    - ``RPC_PRODUCT`` — product name embedded in the ``Server`` header.
    - ``RPC_KEEPALIVE`` — ``0``/``1`` (or ``false``/``true``) to allow
      connection reuse.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from rpc_wire.http.message import POST_READ_SIZE

DEFAULT_MAX_BODY_SIZE = 0x02000000
DEFAULT_PRODUCT = "nodex-json-rpc"

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


class ConfigError(Exception):
    """Raise when a configuration value is invalid."""


@dataclass(frozen=True)
class RpcConfig:
    """Limits and identity shared by every connection of one server.

    Attributes:
        max_body_size: Largest declared ``Content-Length`` accepted.
        read_chunk_size: Largest single read issued while reading a body.
        version: Version token embedded in the ``Server`` header.
        product: Product name embedded in the ``Server`` header.
        keep_alive: Whether connections may be reused at all.

    """

    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    read_chunk_size: int = POST_READ_SIZE
    version: str = ""
    product: str = DEFAULT_PRODUCT
    keep_alive: bool = True

    def __post_init__(self) -> None:
        """Reject limits that could never admit a request."""
        if self.max_body_size < 0:
            msg = f"max_body_size must be non-negative, got {self.max_body_size}"
            raise ConfigError(msg)
        if self.read_chunk_size <= 0:
            msg = f"read_chunk_size must be positive, got {self.read_chunk_size}"
            raise ConfigError(msg)

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "RpcConfig":
        """Build a configuration from ``RPC_*`` keys, defaulting the rest.

        Raises:
            ConfigError: If a present key has an unusable value.

        """
        defaults = cls()
        return cls(
            max_body_size=_int_value(env, "RPC_MAX_BODY_SIZE", defaults.max_body_size),
            read_chunk_size=_int_value(env, "RPC_READ_CHUNK_SIZE", defaults.read_chunk_size),
            version=env.get("RPC_VERSION", defaults.version),
            product=env.get("RPC_PRODUCT", defaults.product),
            keep_alive=_bool_value(env, "RPC_KEEPALIVE", default=defaults.keep_alive),
        )


def _int_value(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ConfigError(msg) from e


def _bool_value(env: Mapping[str, str], key: str, *, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    word = raw.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    msg = f"{key} must be a boolean, got {raw!r}"
    raise ConfigError(msg)
