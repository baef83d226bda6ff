from __future__ import annotations

import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable

from flow_backend_mcp.core.backend_base import Backend, BackendContext, as_entry, record_entries
from flow_backend_mcp.core.models import FlowEntry
from flow_backend_mcp.core.netblocks import NetblockMatcher

DEFAULT_INTERVAL_SECS = 60 * 60
DEFAULT_MAX_ENTRIES = 1000
MAX_BYTES = 2**63 - 1


class TopTalkersBackend:
    """
    Tracks bytes per host on our side of the traffic.

    Each flow is classified against the configured netblocks:
      internal to internal
        both hosts are charged
      outgoing
        only the internal source is charged
      anything else
        treated as incoming, the destination is charged

    Totals live in an LRU map of max_entries hosts, least recently charged
    hosts fall out first. A total never grows past MAX_BYTES. Once more than
    interval_secs have passed since the last dump, every total is logged as
    "host=<addr>, bytes=<n>" and the map is cleared.
    """

    name = "top_talkers"

    def __init__(
        self,
        ctx: BackendContext,
        networks: Iterable[str] = (),
        max_entries: int = DEFAULT_MAX_ENTRIES,
        interval_secs: float = DEFAULT_INTERVAL_SECS,
        clock: Callable[[], float] = time.time,
    ):
        self._ctx = ctx
        self.netblocks = NetblockMatcher(networks)
        self.max_entries = int(max_entries)
        self.interval_secs = float(interval_secs)
        self._clock = clock

        self._totals: "OrderedDict[str, int]" = OrderedDict()
        self._last_dump = clock()
        self._initialized = False

        self._records = 0
        self._failed = 0
        self._dumps = 0

    def initialize(self, config: Any = None) -> None:
        self._initialized = True
        self._ctx.log(f"{self.name} backend initialized, {len(self.netblocks.networks)} networks")

    def write(self, record: Any) -> None:
        entries = record_entries(record, self.name, self._ctx.log)
        self._records += 1

        for index, item in enumerate(entries):
            try:
                self._charge(as_entry(item))
            except Exception as exc:
                self._failed += 1
                self._ctx.log(f"{self.name}: skipped flow {index} of {len(entries)}: {exc!r}")

        now = self._clock()
        if now - self._last_dump > self.interval_secs:
            self._last_dump = now
            self.dump()

    def _charge(self, entry: FlowEntry) -> None:
        src_internal = self.netblocks.is_internal(entry.source_host)
        dst_internal = self.netblocks.is_internal(entry.dest_host)

        if src_internal and dst_internal:
            self._store(entry.source_host, entry.byte_count)
            self._store(entry.dest_host, entry.byte_count)
        elif src_internal:
            self._store(entry.source_host, entry.byte_count)
        else:
            self._store(entry.dest_host, entry.byte_count)

    def _store(self, host: str, byte_count: int) -> None:
        total = self._totals.get(host, 0)
        # Keep the old total rather than overflow.
        if total <= MAX_BYTES - byte_count:
            total += byte_count
        self._totals[host] = total
        self._totals.move_to_end(host)
        while len(self._totals) > self.max_entries:
            self._totals.popitem(last=False)

    def dump(self) -> None:
        """
        Log every tracked total and start over.
        """
        for host, total in self._totals.items():
            self._ctx.log(f"host={host}, bytes={total}")
        self._totals.clear()
        self._dumps += 1

    def totals(self) -> Dict[str, int]:
        return dict(self._totals)

    def status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "initialized": self._initialized,
            "records": self._records,
            "failed": self._failed,
            "tracked_hosts": len(self._totals),
            "dumps": self._dumps,
            "networks": [str(n) for n in self.netblocks.networks],
        }


def build_backend(
    ctx: BackendContext,
    networks: Iterable[str] = (),
    max_entries: int = DEFAULT_MAX_ENTRIES,
    interval_secs: float = DEFAULT_INTERVAL_SECS,
) -> Backend:
    return TopTalkersBackend(ctx, networks=networks, max_entries=max_entries, interval_secs=interval_secs)
