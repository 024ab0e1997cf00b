"""JSON-RPC envelopes — the fixed shapes of requests, replies and errors.

The server speaks JSON-RPC 1.0 for compatibility with older clients,
borrowing from 1.1/2.0 where 1.0 was silent (the contents of ``error``
and the HTTP status accompanying it).  The shapes are::

    request:  {"method": ..., "params": [...], "id": ...}
    reply:    {"result": ..., "error": ..., "id": ...}
    error:    {"code": ..., "message": ...}

Key order is fixed.  ``params``, ``result`` and ``id`` are opaque JSON
values; this module only places them and never looks inside.  A reply
carrying an error always has a null ``result``.

Serialisation is delegated to an *encoder* — any callable turning a
JSON-compatible value into text.  The default is compact ``json.dumps``.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, TypeAlias

JsonEncoder: TypeAlias = Callable[[Any], str]


def compact_json(value: Any) -> str:
    """Serialise *value* without insignificant whitespace."""
    return json.dumps(value, separators=(",", ":"))


class RpcErrorCode(IntEnum):
    """Error codes carried in the ``code`` field of an error object.

    The negative 32xxx range comes from JSON-RPC 2.0; the small negative
    numbers are general application errors.
    """

    # Standard JSON-RPC 2.0 errors
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    PARSE_ERROR = -32700

    # General application defined errors
    MISC_ERROR = -1
    FORBIDDEN_BY_SAFE_MODE = -2
    TYPE_ERROR = -3
    INVALID_ADDRESS_OR_KEY = -5
    OUT_OF_MEMORY = -7
    INVALID_PARAMETER = -8
    DATABASE_ERROR = -20
    DESERIALIZATION_ERROR = -22
    VERIFY_ERROR = -25
    VERIFY_REJECTED = -26
    VERIFY_ALREADY_IN_CHAIN = -27
    IN_WARMUP = -28


def error_object(code: int, message: str) -> dict[str, Any]:
    """Return ``{"code": code, "message": message}``."""
    return {"code": int(code), "message": message}


class RpcError(Exception):
    """Raise from an RPC method to reply with a JSON-RPC error object."""

    def __init__(self, code: int, message: str) -> None:
        """Create an error with a numeric *code* and a *message*."""
        super().__init__(message)
        self.code = code
        self.message = message

    def to_object(self) -> dict[str, Any]:
        """Return the error object for this exception."""
        return error_object(self.code, self.message)


@dataclass(frozen=True)
class JsonRpcError:
    """The ``error`` member of a reply."""

    code: int
    message: str

    def to_object(self) -> dict[str, Any]:
        """Return ``{"code": ..., "message": ...}``."""
        return error_object(self.code, self.message)


def _empty_params() -> list[Any]:
    """Return an empty params list (typed factory for dataclass fields)."""
    return []


@dataclass(frozen=True)
class JsonRpcRequest:
    """A call of *method* with positional *params*."""

    method: str
    params: list[Any] = field(default_factory=_empty_params)
    id: Any = None

    def to_object(self) -> dict[str, Any]:
        """Return ``{"method": ..., "params": ..., "id": ...}``."""
        return {"method": self.method, "params": self.params, "id": self.id}

    @classmethod
    def from_object(cls, value: Any) -> "JsonRpcRequest":
        """Validate a decoded request object.

        ``params`` may be omitted (meaning no arguments) but must otherwise
        be an array.

        Raises:
            RpcError: ``INVALID_REQUEST`` if the shape is wrong.

        """
        if not isinstance(value, dict):
            raise RpcError(RpcErrorCode.INVALID_REQUEST, "Invalid Request object")
        method = value.get("method")
        if method is None:
            raise RpcError(RpcErrorCode.INVALID_REQUEST, "Missing method")
        if not isinstance(method, str):
            raise RpcError(RpcErrorCode.INVALID_REQUEST, "Method must be a string")
        params = value.get("params")
        if params is None:
            params = []
        elif not isinstance(params, list):
            raise RpcError(RpcErrorCode.INVALID_REQUEST, "Params must be an array")
        return cls(method=method, params=params, id=value.get("id"))


@dataclass(frozen=True)
class JsonRpcResponse:
    """The reply to one request: a result or an error, never both."""

    result: Any = None
    error: Any = None
    id: Any = None

    def to_object(self) -> dict[str, Any]:
        """Return ``{"result": ..., "error": ..., "id": ...}``."""
        return reply_object(self.result, self.error, self.id)


def format_request(
    method: str,
    params: list[Any],
    id: Any,  # noqa: A002
    *,
    encoder: JsonEncoder = compact_json,
) -> str:
    """Serialise a request envelope, newline-terminated."""
    return encoder(JsonRpcRequest(method=method, params=params, id=id).to_object()) + "\n"


def reply_object(result: Any, error: Any, id: Any) -> dict[str, Any]:  # noqa: A002
    """Return a reply object; *result* is dropped when *error* is set."""
    return {"result": None if error is not None else result, "error": error, "id": id}


def format_reply(
    result: Any,
    error: Any,
    id: Any,  # noqa: A002
    *,
    encoder: JsonEncoder = compact_json,
) -> str:
    """Serialise a reply envelope, newline-terminated."""
    return encoder(reply_object(result, error, id)) + "\n"


def decode_payload(body: bytes | str) -> Any:
    """Decode a request body into a JSON value.

    Raises:
        RpcError: ``PARSE_ERROR`` if the body is not valid JSON or nests
            too deeply to decode.

    """
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as e:
        raise RpcError(RpcErrorCode.PARSE_ERROR, "Parse error") from e
