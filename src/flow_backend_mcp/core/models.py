from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Tuple

MAX_PORT = 65535


def _as_int(value: Any, key: str) -> int:
    """
    Strict integer conversion for tool input.

    Integral floats (80.0) and decimal strings ("80") pass. Booleans and
    fractional values are rejected rather than truncated.
    """
    if isinstance(value, bool):
        raise TypeError(f"{key} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{key} must be an integer, got {value!r}")
        return int(value)
    if isinstance(value, str):
        return int(value.strip(), 10)
    raise TypeError(f"{key} must be an integer, got {type(value).__name__}")


@dataclass(frozen=True)
class FlowEntry:
    """
    One observed flow, as handed over by the collector.

    Fields:
      source_host, dest_host
        Addresses or host names as strings. Empty means unknown.

      source_port, dest_port
        Transport layer ports, 0 if unknown.

      byte_count
        Octets seen for the flow.

      packet_count, protocol
        Optional extras filled in by decoders that have them.
    """

    source_host: str
    source_port: int
    dest_host: str
    dest_port: int
    byte_count: int
    packet_count: int = 0
    protocol: int = 0

    def __post_init__(self) -> None:
        for field_name in ("source_port", "dest_port"):
            port = getattr(self, field_name)
            if not 0 <= port <= MAX_PORT:
                raise ValueError(f"{field_name} out of range: {port}")
        for field_name in ("byte_count", "packet_count"):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be non negative")

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "FlowEntry":
        """
        Build an entry from the JSON shape used by the tool surface.

        Required keys: src, dst, src_port, dst_port, bytes.
        Optional keys: packets, proto.
        """
        return cls(
            source_host=str(d["src"]),
            source_port=_as_int(d["src_port"], "src_port"),
            dest_host=str(d["dst"]),
            dest_port=_as_int(d["dst_port"], "dst_port"),
            byte_count=_as_int(d["bytes"], "bytes"),
            packet_count=_as_int(d.get("packets", 0), "packets"),
            protocol=_as_int(d.get("proto", 0), "proto"),
        )


@dataclass(frozen=True)
class FlowRecord:
    """
    Batch of flows reported together for one interval.

    flows keeps capture order. Backends read it, never change it.
    """

    flows: Tuple[FlowEntry, ...] = ()
    ts: float = 0.0
    exporter: str = "unknown"

    @classmethod
    def of(cls, entries: Iterable[FlowEntry], ts: float = 0.0, exporter: str = "unknown") -> "FlowRecord":
        return cls(flows=tuple(entries), ts=ts, exporter=exporter)

    def __iter__(self) -> Iterator[FlowEntry]:
        return iter(self.flows)

    def __len__(self) -> int:
        return len(self.flows)
