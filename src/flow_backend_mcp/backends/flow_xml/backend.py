from __future__ import annotations

from dataclasses import fields
from xml.sax.saxutils import escape

from flow_backend_mcp.core.backend_base import Backend, BackendContext, LineFormattingBackend
from flow_backend_mcp.core.models import FlowEntry

FLOW_TAG = "flow"
ATTR_TAG = "attribute"
NAME_TAG = "name"
VALUE_TAG = "value"


def _wrap_attribute(name: str, value: object) -> str:
    return (
        f"<{ATTR_TAG}><{NAME_TAG}>{escape(name)}</{NAME_TAG}>"
        f"<{VALUE_TAG}>{escape(str(value))}</{VALUE_TAG}></{ATTR_TAG}>"
    )


class XmlFlowBackend(LineFormattingBackend):
    """
    Writes every entry as a single line XML element with one attribute
    element per FlowEntry field. Addresses are written raw, no lookups.
    """

    name = "xml"

    def format_entry(self, entry: FlowEntry) -> str:
        body = "".join(_wrap_attribute(f.name, getattr(entry, f.name)) for f in fields(entry))
        return f"<{FLOW_TAG}>{body}</{FLOW_TAG}>"


def build_backend(ctx: BackendContext) -> Backend:
    return XmlFlowBackend(ctx)
