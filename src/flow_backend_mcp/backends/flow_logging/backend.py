from __future__ import annotations

from flow_backend_mcp.core.backend_base import Backend, BackendContext, LineFormattingBackend
from flow_backend_mcp.core.models import FlowEntry

DEFAULT_LABEL = "JS Proof!"


class FlowRecordFormatter(LineFormattingBackend):
    """
    Human readable flow logging backend.

    Each entry becomes one line:
      <label> source=<host>:<port>, dest=<host>:<port>, bytes=<n>

    Host names go through the shared resolver. If a name cannot be
    resolved in time the raw address is printed instead, so one bad
    lookup never costs the rest of the batch.
    """

    name = "text"

    def __init__(self, ctx: BackendContext, label: str = DEFAULT_LABEL):
        super().__init__(ctx)
        self.label = label

    def format_entry(self, entry: FlowEntry) -> str:
        resolver = self._ctx.resolver
        return (
            f"{self.label} source={resolver.canonical(entry.source_host)}:{entry.source_port}, "
            f"dest={resolver.canonical(entry.dest_host)}:{entry.dest_port}, "
            f"bytes={entry.byte_count}"
        )


def build_backend(ctx: BackendContext, label: str = DEFAULT_LABEL) -> Backend:
    return FlowRecordFormatter(ctx, label=label)
