"""Flask application factory for the JSON-RPC endpoint.

The ``create_app`` function wraps an :class:`~rpc_wire.server.RpcDispatcher`
in a Flask app with a single endpoint:

- ``POST /`` — decode a JSON-RPC call or batch and return the reply.

Flask does the HTTP framing here, so only the envelope handling and the
legacy 401 HTML document are shared with the socket server.  The 401
status line and headers are Flask's own: its Content-Length is the real
body length, not the legacy literal's 296.
"""

from __future__ import annotations

from flask import Flask, Response, request

from rpc_wire.config import RpcConfig
from rpc_wire.http.headers import HeaderMap
from rpc_wire.http.response import unauthorized_body
from rpc_wire.http.status import HttpStatus
from rpc_wire.server import Authorizer, RpcDispatcher, handle_jsonrpc


def create_app(
    dispatcher: RpcDispatcher,
    *,
    config: RpcConfig | None = None,
    authorize: Authorizer | None = None,
) -> Flask:
    """Create a Flask application serving *dispatcher* at ``/``.

    Args:
        dispatcher: The RPC methods to expose.
        config: Body limit and ``Server`` identity; defaults apply if omitted.
        authorize: Optional check run against the request headers.

    Returns:
        A configured Flask application ready to serve.

    """
    config = config or RpcConfig()
    server_token = f"{config.product}/{config.version}"

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_body_size

    @app.route("/", methods=["POST"])
    def jsonrpc() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Dispatch one JSON-RPC call or batch."""
        headers = HeaderMap(request.headers.items())
        if authorize is not None and not authorize(headers):
            return Response(
                unauthorized_body(),
                status=int(HttpStatus.UNAUTHORIZED),
                headers={"WWW-Authenticate": 'Basic realm="jsonrpc"', "Server": server_token},
                content_type="text/html",
            )

        status, reply = handle_jsonrpc(request.get_data(), dispatcher)
        return Response(
            reply,
            status=int(status),
            headers={"Server": server_token},
            content_type="application/json",
        )

    return app
