import pytest

from flow_backend_mcp.core.backend_base import BackendContext
from flow_backend_mcp.core.resolver import HostResolver
from flow_backend_mcp.core.sink import MemorySink

@pytest.fixture
def sink():
    return MemorySink()

@pytest.fixture
def resolver():
    r = HostResolver(lookup=lambda host: host, timeout_seconds=1.0)
    yield r
    r.close()

@pytest.fixture
def logs():
    return []

@pytest.fixture
def ctx(sink, resolver, logs):
    return BackendContext(sink=sink, resolver=resolver, log=logs.append)
