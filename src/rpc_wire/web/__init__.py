"""Flask adapter for serving JSON-RPC behind a WSGI server."""
