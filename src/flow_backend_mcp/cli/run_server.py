from __future__ import annotations
import functools
import json
import os
from typing import Dict, List, Optional

from flow_backend_mcp.backends.flow_logging.backend import DEFAULT_LABEL
from flow_backend_mcp.backends.flow_logging.backend import build_backend as build_text_backend
from flow_backend_mcp.backends.flow_xml.backend import build_backend as build_xml_backend
from flow_backend_mcp.backends.top_talkers import backend as top_talkers
from flow_backend_mcp.core.resolver import HostResolver
from flow_backend_mcp.core.server import BackendFactory, FlowBackendMCPServer


def build_factories(
    names: List[str],
    label: str = DEFAULT_LABEL,
    networks: Optional[List[str]] = None,
    max_entries: int = top_talkers.DEFAULT_MAX_ENTRIES,
    interval_secs: float = top_talkers.DEFAULT_INTERVAL_SECS,
) -> List[BackendFactory]:
    known: Dict[str, BackendFactory] = {
        "text": functools.partial(build_text_backend, label=label),
        "xml": build_xml_backend,
        "top_talkers": functools.partial(
            top_talkers.build_backend,
            networks=networks or [],
            max_entries=max_entries,
            interval_secs=interval_secs,
        ),
    }
    factories: List[BackendFactory] = []
    for name in names:
        if name not in known:
            raise ValueError(f"unknown backend {name}, expected one of {sorted(known)}")
        factories.append(known[name])
    return factories


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


def build_server() -> FlowBackendMCPServer:
    names = json.loads(os.environ.get("FLOW_BACKENDS", '["text"]'))
    label = os.environ.get("FLOW_LABEL", DEFAULT_LABEL)
    config = json.loads(os.environ.get("FLOW_BACKEND_CONFIG", "null"))

    resolver = HostResolver(
        timeout_seconds=float(os.environ.get("FLOW_RESOLVE_TIMEOUT", "0.5")),
        enabled=_env_flag("FLOW_RESOLVE_HOSTS", True),
    )
    return FlowBackendMCPServer(
        backend_factories=build_factories(
            names,
            label=label,
            networks=json.loads(os.environ.get("FLOW_TOP_TALKERS_NETWORKS", "[]")),
            max_entries=int(os.environ.get("FLOW_TOP_TALKERS_MAX_ENTRIES", top_talkers.DEFAULT_MAX_ENTRIES)),
            interval_secs=float(os.environ.get("FLOW_TOP_TALKERS_INTERVAL", top_talkers.DEFAULT_INTERVAL_SECS)),
        ),
        resolver=resolver,
        config=config,
    )


def main() -> None:
    """
    Configure backends from environment variables and serve over MCP.

    Example:
      export FLOW_BACKENDS='["text", "xml", "top_talkers"]'
      export FLOW_TOP_TALKERS_NETWORKS='["10.0.0.0/8"]'
      export FLOW_RESOLVE_TIMEOUT=0.2
      python -m flow_backend_mcp.cli.run_server
    """
    build_server().run()


if __name__ == "__main__":
    main()
