"""JSON-RPC client and parameter marshalling tests."""
