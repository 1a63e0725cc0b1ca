"""Node access: the ``NodeClient`` protocol and its JSON-RPC implementation."""
