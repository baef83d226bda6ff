import asyncio

from flow_backend_mcp.backends.flow_logging.backend import build_backend as build_text
from flow_backend_mcp.backends.flow_xml.backend import build_backend as build_xml
from flow_backend_mcp.core.models import FlowEntry, FlowRecord
from flow_backend_mcp.core.server import FlowBackendMCPServer


class BrokenSink:
    def write_line(self, line):
        raise BrokenPipeError("output closed")


def make_server(sink, resolver, factories=None, config=None):
    return FlowBackendMCPServer(
        backend_factories=factories or [build_text, build_xml],
        sink=sink,
        resolver=resolver,
        config=config,
    )


def test_server_initializes_backends(sink, resolver):
    server = make_server(sink, resolver)
    assert server.registry.list() == ["text", "xml"]
    assert server.registry.get("text").status()["initialized"] is True
    assert server.registry.get("xml").status()["initialized"] is True
    assert sink.lines == []


def test_dispatch_reaches_every_backend_in_order(sink, resolver):
    server = make_server(sink, resolver)
    entry = FlowEntry(source_host="10.0.0.1", source_port=1, dest_host="10.0.0.2", dest_port=2, byte_count=3)
    result = server.dispatch(FlowRecord.of([entry]))

    assert result == {"entries": 1, "delivered": 2, "errors": {}}
    assert sink.lines[0] == "JS Proof! source=10.0.0.1:1, dest=10.0.0.2:2, bytes=3"
    assert sink.lines[1].startswith("<flow>")


def test_dispatch_reports_sink_failures(resolver):
    server = make_server(BrokenSink(), resolver)
    entry = FlowEntry(source_host="10.0.0.1", source_port=1, dest_host="10.0.0.2", dest_port=2, byte_count=3)
    result = server.dispatch([entry])

    assert result["delivered"] == 0
    assert set(result["errors"]) == {"text", "xml"}
    assert "BrokenPipeError" in result["errors"]["text"]


def test_dispatch_accepts_flow_dicts(sink, resolver):
    server = make_server(sink, resolver, factories=[build_text])
    result = server.dispatch([{"src": "10.0.0.1", "dst": "10.0.0.2", "src_port": 1, "dst_port": 2, "bytes": 3}])
    assert result["entries"] == 1
    assert sink.lines == ["JS Proof! source=10.0.0.1:1, dest=10.0.0.2:2, bytes=3"]


def test_write_netflow_v5_rejects_bad_hex(sink, resolver):
    server = make_server(sink, resolver)
    result = server.write_netflow_v5("zz")
    assert "error" in result
    assert sink.lines == []


def test_write_netflow_v5_non_v5_payload_is_empty(sink, resolver):
    server = make_server(sink, resolver)
    result = server.write_netflow_v5("0009" + "00" * 22)
    assert result == {"entries": 0, "delivered": 2, "errors": {}}
    assert sink.lines == []


def test_server_registers_tools(sink, resolver):
    server = make_server(sink, resolver)
    tools = asyncio.run(server.mcp.list_tools())
    names = {t.name for t in tools}
    assert {"list_backends", "backend_status", "write_flows", "write_netflow_v5", "resolver_stats"} <= names
