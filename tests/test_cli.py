import pytest

from flow_backend_mcp.cli.run_server import build_factories, build_server
from flow_backend_mcp.core.sink import StreamSink


def test_build_factories_known_names(ctx):
    backends = [factory(ctx) for factory in build_factories(["xml", "text"], label="L")]
    assert [b.name for b in backends] == ["xml", "text"]
    assert backends[1].label == "L"


def test_build_factories_unknown_name():
    with pytest.raises(ValueError):
        build_factories(["csv"])


def test_build_server_from_env(monkeypatch):
    monkeypatch.setenv("FLOW_BACKENDS", '["text", "xml"]')
    monkeypatch.setenv("FLOW_LABEL", "flows")
    monkeypatch.setenv("FLOW_RESOLVE_HOSTS", "0")
    monkeypatch.setenv("FLOW_RESOLVE_TIMEOUT", "0.2")
    monkeypatch.setenv("FLOW_BACKEND_CONFIG", '{"site": "lab"}')

    server = build_server()
    try:
        assert server.registry.list() == ["text", "xml"]
        assert server.registry.get("text").label == "flows"
        assert server.resolver.stats()["enabled"] is False
        assert server.resolver.timeout_seconds == 0.2
        assert isinstance(server.sink, StreamSink)
    finally:
        server.resolver.close()


def test_build_server_defaults(monkeypatch):
    for name in (
        "FLOW_BACKENDS", "FLOW_LABEL", "FLOW_RESOLVE_HOSTS", "FLOW_RESOLVE_TIMEOUT", "FLOW_BACKEND_CONFIG",
        "FLOW_TOP_TALKERS_NETWORKS", "FLOW_TOP_TALKERS_MAX_ENTRIES", "FLOW_TOP_TALKERS_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)

    server = build_server()
    assert server.registry.list() == ["text"]
    assert server.resolver.enabled is True


def test_build_factories_top_talkers(ctx):
    (factory,) = build_factories(["top_talkers"], networks=["10.0.0.0/8"], max_entries=3, interval_secs=5)
    backend = factory(ctx)
    assert backend.name == "top_talkers"
    assert backend.max_entries == 3
    assert backend.interval_secs == 5
    assert backend.netblocks.is_internal("10.1.1.1")


def test_build_server_top_talkers_from_env(monkeypatch):
    monkeypatch.setenv("FLOW_BACKENDS", '["top_talkers"]')
    monkeypatch.setenv("FLOW_TOP_TALKERS_NETWORKS", '["172.16.0.0/12"]')
    monkeypatch.setenv("FLOW_TOP_TALKERS_MAX_ENTRIES", "50")
    monkeypatch.setenv("FLOW_TOP_TALKERS_INTERVAL", "120")

    server = build_server()
    backend = server.registry.get("top_talkers")
    assert backend.status()["networks"] == ["172.16.0.0/12"]
    assert backend.max_entries == 50
    assert backend.interval_secs == 120.0
