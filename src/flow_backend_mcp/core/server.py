from __future__ import annotations
import sys
from typing import Any, Callable, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from flow_backend_mcp.decoders.netflow_v5 import decode_netflow_v5

from .backend_base import Backend, BackendContext
from .registry import BackendRegistry
from .resolver import HostResolver
from .sink import Sink, StreamSink

BackendFactory = Callable[[BackendContext], Backend]


class FlowBackendMCPServer:
    """
    Minimal host for logging backends, exposed over MCP.

    Responsibilities:
      Build the shared BackendContext
      Initialize every backend once with the opaque config
      Hand each record to every backend, in registration order
      Expose write and status tools

    The default sink is stderr. stdout belongs to the MCP stdio transport.
    """

    def __init__(
        self,
        backend_factories: List[BackendFactory],
        sink: Optional[Sink] = None,
        resolver: Optional[HostResolver] = None,
        config: Any = None,
    ):
        self.sink = sink if sink is not None else StreamSink(sys.stderr)
        self.resolver = resolver if resolver is not None else HostResolver()
        self.ctx = BackendContext(sink=self.sink, resolver=self.resolver, log=self._log)
        self.registry = BackendRegistry()
        self.mcp = FastMCP("flow_backend_mcp")

        self._load_backends(backend_factories, config)
        self._register_tools()

    def _log(self, msg: str) -> None:
        print(msg, file=sys.stderr)

    def _load_backends(self, factories: List[BackendFactory], config: Any) -> None:
        for factory in factories:
            backend = factory(self.ctx)
            self.registry.register(backend)
            backend.initialize(config)

    def dispatch(self, record: Any) -> Dict[str, Any]:
        """
        Send one record to every backend.

        A backend that raises is reported under errors and the remaining
        backends still get the record.
        """
        errors: Dict[str, str] = {}
        delivered = 0

        for backend in self.registry:
            try:
                backend.write(record)
            except Exception as exc:
                self._log(f"backend {backend.name} failed: {exc!r}")
                errors[backend.name] = repr(exc)
                continue
            delivered += 1

        flows = getattr(record, "flows", record)
        return {
            "entries": len(flows) if isinstance(flows, (list, tuple)) else 0,
            "delivered": delivered,
            "errors": errors,
        }

    def _register_tools(self) -> None:
        @self.mcp.tool()
        def list_backends() -> List[str]:
            return self.registry.list()

        @self.mcp.tool()
        def backend_status(name: str) -> Dict[str, Any]:
            return self.registry.get(name).status()

        @self.mcp.tool()
        def resolver_stats() -> Dict[str, Any]:
            return self.resolver.stats()

        @self.mcp.tool()
        def write_flows(flows: List[Dict[str, Any]]) -> Dict[str, Any]:
            """
            Write one record given as a list of flow objects with keys
            src, dst, src_port, dst_port, bytes and optional packets, proto.
            """
            return self.dispatch(list(flows))

        @self.mcp.tool()
        def write_netflow_v5(datagram_hex: str, exporter: str = "unknown") -> Dict[str, Any]:
            return self.write_netflow_v5(datagram_hex, exporter=exporter)

    def write_netflow_v5(self, datagram_hex: str, exporter: str = "unknown") -> Dict[str, Any]:
        try:
            data = bytes.fromhex(datagram_hex)
        except ValueError as exc:
            return {"error": f"invalid hex payload: {exc}"}
        return self.dispatch(decode_netflow_v5(data, exporter=exporter))

    def run(self) -> None:
        try:
            self.mcp.run()
        finally:
            self.resolver.close()
