"""rpc_wire — HTTP message framing and JSON-RPC envelopes for RPC servers."""
