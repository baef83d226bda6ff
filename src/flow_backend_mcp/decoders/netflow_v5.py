from __future__ import annotations

import ipaddress
import struct
import time
from typing import List

from flow_backend_mcp.core.models import FlowEntry, FlowRecord

# NetFlow v5 export datagram, Cisco NetFlow Collection Engine format reference.

HEADER_SIZE = 24
FLOW_SIZE = 48


def _ipv4_from_u32(v: int) -> str:
    return str(ipaddress.IPv4Address(v))


def decode_netflow_v5(data: bytes, exporter: str = "unknown") -> FlowRecord:
    """
    Decode one NetFlow v5 datagram into a FlowRecord.

    Header is 24 bytes, followed by count flow records, each 48 bytes.
    Anything that is not a v5 datagram gives an empty record.

    exporter
      Sender identity, carried on the record for backends that want it.
    """
    if len(data) < HEADER_SIZE:
        return FlowRecord(exporter=exporter)

    # v5 header:
    # version(2), count(2), sysUpTime(4), unix_secs(4), unix_nsecs(4),
    # flow_sequence(4), engine_type(1), engine_id(1), sampling_interval(2)
    version, count = struct.unpack_from("!HH", data, 0)
    if version != 5:
        return FlowRecord(exporter=exporter)

    unix_secs = struct.unpack_from("!I", data, 8)[0]
    ts = float(unix_secs) if unix_secs else time.time()

    # Exporters occasionally announce more records than they send.
    max_records = (len(data) - HEADER_SIZE) // FLOW_SIZE
    count = min(count, max_records)

    flows: List[FlowEntry] = []
    for i in range(count):
        off = HEADER_SIZE + i * FLOW_SIZE

        # v5 record layout (selected fields):
        # srcaddr(4), dstaddr(4), nexthop(4),
        # input(2), output(2),
        # dPkts(4), dOctets(4),
        # First(4), Last(4),
        # srcport(2), dstport(2),
        # pad1(1), tcp_flags(1), prot(1), tos(1), ...
        src_u32, dst_u32 = struct.unpack_from("!II", data, off)
        dpkts, doctets = struct.unpack_from("!II", data, off + 16)
        src_port, dst_port = struct.unpack_from("!HH", data, off + 32)
        proto = struct.unpack_from("!B", data, off + 38)[0]

        flows.append(
            FlowEntry(
                source_host=_ipv4_from_u32(src_u32),
                source_port=int(src_port),
                dest_host=_ipv4_from_u32(dst_u32),
                dest_port=int(dst_port),
                byte_count=int(doctets),
                packet_count=int(dpkts),
                protocol=int(proto),
            )
        )

    return FlowRecord.of(flows, ts=ts, exporter=exporter)
