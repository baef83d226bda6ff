"""
Core modules shared by every backend.

Keep output formats out of this package. The MCP server lives in
core.server and is imported from there directly.
"""

from .models import FlowEntry, FlowRecord
from .sink import MemorySink, Sink, StreamSink
from .resolver import HostResolver
from .backend_base import Backend, BackendContext

__all__ = [
    "FlowEntry",
    "FlowRecord",
    "Sink",
    "StreamSink",
    "MemorySink",
    "HostResolver",
    "Backend",
    "BackendContext",
]
