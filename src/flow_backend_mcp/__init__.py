"""
flow_backend_mcp

Logging backends for a flow collection host, plus a thin MCP host adapter.

Core ideas
1. The collector hands over FlowRecord batches, already assembled
2. Backends turn each flow into one output line on a sink
3. The host owns the sink and calls backends in a fixed order
"""

__all__ = ["core", "backends", "decoders", "cli"]
