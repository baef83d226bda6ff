from flow_backend_mcp.core.netblocks import NetblockMatcher


def test_address_inside_block():
    m = NetblockMatcher(["10.0.0.0/8", "192.168.1.0/24"])
    assert m.is_internal("10.20.30.40")
    assert m.is_internal("192.168.1.7")
    assert not m.is_internal("192.168.2.7")


def test_host_bits_are_ignored():
    assert NetblockMatcher(["10.1.2.3/8"]).is_internal("10.200.0.1")


def test_names_and_other_families_are_external():
    m = NetblockMatcher(["10.0.0.0/8"])
    assert not m.is_internal("gw.example.com")
    assert not m.is_internal("unknown")
    assert not m.is_internal("2001:db8::1")


def test_no_networks_means_nothing_internal():
    assert not NetblockMatcher().is_internal("10.0.0.1")
