from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol, Sequence

from .models import FlowEntry
from .resolver import HostResolver
from .sink import Sink


@dataclass
class BackendContext:
    """
    Shared runtime objects provided by the host to each backend.

    sink
      Where formatted lines go. Backends hold a reference only.

    resolver
      Shared HostResolver, so all backends reuse one name cache.

    log
      Diagnostics function. Never used for formatted output.
    """

    sink: Sink
    resolver: HostResolver
    log: Callable[[str], None]


class Backend(Protocol):
    """
    Required interface for a logging backend.

    The host calls initialize once, then write once per reporting interval.
    Calls are serialized by the host.
    """

    name: str

    def initialize(self, config: Any = None) -> None:
        """
        One time setup. config is opaque and may be None.
        """
        ...

    def write(self, record: Any) -> None:
        """
        Consume one flow record. Side effects only.
        """
        ...

    def status(self) -> Dict[str, Any]:
        """
        Return quick counters. Must be fast and side effect free.
        """
        ...


def record_entries(record: Any, name: str, log: Callable[[str], None]) -> Sequence[Any]:
    """
    Items of a record in order. None is empty, anything without a flows
    list or tuple is logged and treated as empty.
    """
    if record is None:
        return ()

    flows = getattr(record, "flows", record)
    if isinstance(flows, (list, tuple)):
        return flows

    log(f"{name}: ignoring malformed record of type {type(record).__name__}")
    return ()


def as_entry(item: Any) -> FlowEntry:
    if isinstance(item, FlowEntry):
        return item
    if isinstance(item, Mapping):
        return FlowEntry.from_dict(item)
    raise TypeError(f"expected FlowEntry or mapping, got {type(item).__name__}")


class LineFormattingBackend:
    """
    Backend that emits one sink line per flow entry.

    Subclasses implement format_entry. Everything else is shared:
      record shape tolerance
      per entry failure isolation
      counters for status()
    """

    name = "line"

    def __init__(self, ctx: BackendContext):
        self._ctx = ctx
        self._config: Any = None
        self._initialized = False

        self._records = 0
        self._lines = 0
        self._failed = 0

    def initialize(self, config: Any = None) -> None:
        self._config = config
        self._initialized = True
        self._ctx.log(f"{self.name} backend initialized")

    def write(self, record: Any) -> None:
        entries = record_entries(record, self.name, self._ctx.log)
        self._records += 1

        for index, item in enumerate(entries):
            try:
                line = self.format_entry(as_entry(item))
            except Exception as exc:
                self._failed += 1
                self._ctx.log(f"{self.name}: skipped flow {index} of {len(entries)}: {exc!r}")
                continue

            # Sink errors propagate, the output channel is unusable.
            self._ctx.sink.write_line(line)
            self._lines += 1

    def format_entry(self, entry: FlowEntry) -> str:
        raise NotImplementedError

    def status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "initialized": self._initialized,
            "records": self._records,
            "lines": self._lines,
            "failed": self._failed,
        }
