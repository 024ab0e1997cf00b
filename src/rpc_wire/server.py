"""RPC server glue — method dispatch and the per-connection loop.

A connection is serviced one request at a time:

    read request line → read message → authorise → dispatch → reply

and the loop repeats while both sides agree to keep the connection
alive.  Anything that goes wrong while reading ends the connection;
whether a reply is written first depends on what went wrong:

- malformed request line   → 400 reply, close
- oversize body            → 500 reply, close
- stream failure           → close without a reply
- failed authorisation     → the fixed 401 reply, close
- URI other than ``/``     → 404 reply, close

Dispatch errors are not connection errors: they become a JSON-RPC error
object in an otherwise ordinary reply.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeAlias

from rpc_wire.config import RpcConfig
from rpc_wire.http.errors import HttpParseError, OversizeBodyError, StreamFailureError
from rpc_wire.http.headers import HeaderMap
from rpc_wire.http.lines import ByteStream, parse_request_line, read_line
from rpc_wire.http.message import read_message
from rpc_wire.http.response import ResponseFormatter, unauthorized_response
from rpc_wire.http.status import HttpStatus
from rpc_wire.jsonrpc import (
    JsonEncoder,
    JsonRpcRequest,
    RpcError,
    RpcErrorCode,
    compact_json,
    decode_payload,
    format_reply,
    reply_object,
)
from rpc_wire.logging import Logger, LogLevel

# Retention for the log a connection keeps when the caller supplies none.
DEFAULT_LOG_CAPACITY = 64

# An RPC method receives the positional params array and returns a JSON value.
RpcMethod: TypeAlias = Callable[[list[Any]], Any]

# Decides from the request headers whether the caller may proceed.
Authorizer: TypeAlias = Callable[[HeaderMap], bool]


class DuplexStream(ByteStream, Protocol):
    """A byte stream that can also be written to."""

    def write(self, data: bytes, /) -> int: ...

    def flush(self) -> None: ...


class RpcDispatcher:
    """A table of named RPC methods."""

    def __init__(self) -> None:
        """Create a dispatcher with no methods."""
        self._methods: dict[str, RpcMethod] = {}

    def register(self, name: str, handler: RpcMethod) -> None:
        """Make *handler* callable as *name* (replacing any previous one)."""
        self._methods[name] = handler

    def method(self, name: str | None = None) -> Callable[[RpcMethod], RpcMethod]:
        """Register the decorated function, under *name* or its own name."""

        def decorator(handler: RpcMethod) -> RpcMethod:
            self.register(name or handler.__name__, handler)
            return handler

        return decorator

    @property
    def names(self) -> list[str]:
        """Return the registered method names, sorted."""
        return sorted(self._methods)

    def __contains__(self, name: object) -> bool:
        """Return True if *name* is registered."""
        return name in self._methods

    def execute(self, request: JsonRpcRequest) -> Any:
        """Run the method named by *request* and return its result.

        Raises:
            RpcError: ``METHOD_NOT_FOUND`` for unknown methods; errors
                raised by the method itself pass through unchanged and any
                other exception becomes ``MISC_ERROR``.

        """
        handler = self._methods.get(request.method)
        if handler is None:
            raise RpcError(RpcErrorCode.METHOD_NOT_FOUND, "Method not found")
        try:
            return handler(request.params)
        except RpcError:
            raise
        except Exception as e:
            raise RpcError(RpcErrorCode.MISC_ERROR, str(e)) from e

    def execute_one(self, value: Any) -> dict[str, Any]:
        """Validate and run one decoded request, always returning a reply object."""
        request_id = value.get("id") if isinstance(value, dict) else None
        try:
            request = JsonRpcRequest.from_object(value)
            return reply_object(self.execute(request), None, request.id)
        except RpcError as e:
            return reply_object(None, e.to_object(), request_id)

    def execute_batch(self, values: list[Any]) -> list[dict[str, Any]]:
        """Run a batch of decoded requests, one reply object per entry."""
        return [self.execute_one(value) for value in values]


def error_status(code: int) -> HttpStatus:
    """Return the HTTP status that accompanies a JSON-RPC error *code*."""
    if code == RpcErrorCode.INVALID_REQUEST:
        return HttpStatus.BAD_REQUEST
    if code == RpcErrorCode.METHOD_NOT_FOUND:
        return HttpStatus.NOT_FOUND
    return HttpStatus.INTERNAL_SERVER_ERROR


def _serialise(reply: Any, encoder: JsonEncoder) -> str:
    """Encode a reply, newline-terminated.

    Raises:
        RpcError: ``INTERNAL_ERROR`` if a method returned something the
            encoder cannot represent.

    """
    try:
        return encoder(reply) + "\n"
    except (TypeError, ValueError, RecursionError) as e:
        msg = f"Result not serializable: {e}"
        raise RpcError(RpcErrorCode.INTERNAL_ERROR, msg) from e


def handle_jsonrpc(
    body: bytes | str,
    dispatcher: RpcDispatcher,
    *,
    encoder: JsonEncoder = compact_json,
) -> tuple[HttpStatus, str]:
    """Decode a request body, dispatch it and serialise the reply.

    A JSON object is a single call; a JSON array is a batch, which answers
    200 with per-entry errors inside.  A result the encoder rejects
    becomes an ``INTERNAL_ERROR`` reply.

    Returns:
        The HTTP status to reply with and the serialised reply.

    """
    request_id: Any = None
    try:
        value = decode_payload(body)
        if isinstance(value, dict):
            request_id = value.get("id")
            request = JsonRpcRequest.from_object(value)
            result = dispatcher.execute(request)
            return HttpStatus.OK, _serialise(reply_object(result, None, request.id), encoder)
        if isinstance(value, list):
            return HttpStatus.OK, _serialise(dispatcher.execute_batch(value), encoder)
        raise RpcError(RpcErrorCode.PARSE_ERROR, "Top-level object parse error")
    except RpcError as e:
        reply = format_reply(None, e.to_object(), request_id, encoder=encoder)
        return error_status(e.code), reply


def serve_connection(
    stream: DuplexStream,
    dispatcher: RpcDispatcher,
    *,
    config: RpcConfig | None = None,
    formatter: ResponseFormatter | None = None,
    authorize: Authorizer | None = None,
    logger: Logger | None = None,
    peer: str = "",
) -> int:
    """Service requests on *stream* until the connection should close.

    Returns:
        The number of requests answered with a JSON-RPC reply.

    """
    config = config or RpcConfig()
    formatter = formatter or ResponseFormatter(config.version, product=config.product)
    log = logger if logger is not None else Logger(capacity=DEFAULT_LOG_CAPACITY)
    served = 0

    def send(data: bytes) -> None:
        stream.write(data)
        stream.flush()

    while True:
        try:
            line = read_line(stream)
        except StreamFailureError as e:
            log.log(LogLevel.ERROR, str(e), source="http", peer=peer)
            return served
        if not line:
            return served

        try:
            request_line = parse_request_line(line)
        except HttpParseError as e:
            log.log(LogLevel.WARNING, str(e), source="http", peer=peer)
            send(formatter.error(e.status, keep_alive=False))
            return served

        try:
            message = read_message(
                stream,
                request_line.protocol_version,
                config.max_body_size,
                chunk_size=config.read_chunk_size,
                logger=log,
            )
        except OversizeBodyError as e:
            send(formatter.error(e.status, keep_alive=False))
            return served
        except StreamFailureError:
            return served

        if authorize is not None and not authorize(message.headers):
            log.log(LogLevel.WARNING, "Incorrect password attempt", source="rpc", peer=peer)
            send(unauthorized_response())
            return served

        if request_line.uri != "/":
            log.log(LogLevel.WARNING, f"No handler for {request_line.uri}", source="rpc", peer=peer)
            send(formatter.error(HttpStatus.NOT_FOUND, keep_alive=False))
            return served

        keep_alive = config.keep_alive and message.keep_alive
        status, reply = handle_jsonrpc(message.body, dispatcher)
        log.log(LogLevel.DEBUG, f"{request_line.method} / -> {status}", source="rpc", peer=peer)
        send(formatter.reply(status, reply, keep_alive=keep_alive))
        served += 1
        if not keep_alive:
            return served
