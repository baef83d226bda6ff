from __future__ import annotations
import socket
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, Optional

UNKNOWN_HOST = "unknown"


def _reverse_lookup(host: str) -> str:
    return socket.gethostbyaddr(host)[0]


class HostResolver:
    """
    Turns addresses into canonical host names for display.

    Main concepts:
      lookup
        Callable doing the actual resolution. Defaults to reverse DNS.
        Tests inject a fake.

      timeout_seconds
        Upper bound on how long a caller waits for one lookup. Lookups run
        on a small worker pool so a stuck resolver never blocks the caller
        past this bound.

      retry_seconds
        After a timeout the raw address is served for this long without a
        new lookup, then the address is tried again. Timeouts are never
        put in the name cache.

      max_entries
        LRU cache size for answers and hard failures.

    canonical() never raises. Anything that goes wrong returns the raw
    address string instead.
    """

    def __init__(
        self,
        lookup: Optional[Callable[[str], str]] = None,
        timeout_seconds: float = 0.5,
        max_entries: int = 1000,
        enabled: bool = True,
        retry_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._lookup = lookup or _reverse_lookup
        self.timeout_seconds = float(timeout_seconds)
        self.retry_seconds = float(retry_seconds)
        self.max_entries = int(max_entries)
        self.enabled = enabled
        self._clock = clock

        self._cache: "OrderedDict[str, str]" = OrderedDict()
        self._retry_at: "OrderedDict[str, float]" = OrderedDict()
        self._executor: Optional[ThreadPoolExecutor] = None

        self._lookups = 0
        self._failures = 0
        self._timeouts = 0

    def canonical(self, host: Optional[str]) -> str:
        raw = str(host).strip() if host is not None else ""
        if not raw:
            return UNKNOWN_HOST
        if not self.enabled:
            return raw

        cached = self._cache.get(raw)
        if cached is not None:
            self._cache.move_to_end(raw)
            return cached

        retry_at = self._retry_at.get(raw)
        if retry_at is not None:
            if self._clock() < retry_at:
                return raw
            del self._retry_at[raw]

        name = self._resolve(raw)
        if name is None:
            self._backoff(raw)
            return raw
        self._remember(raw, name)
        return name

    def _resolve(self, raw: str) -> Optional[str]:
        """
        Run one bounded lookup. None means it timed out.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="host-resolver")

        self._lookups += 1
        future = self._executor.submit(self._lookup, raw)
        try:
            name = future.result(timeout=self.timeout_seconds)
        except FutureTimeout:
            future.cancel()
            self._timeouts += 1
            return None
        except Exception:
            # Resolution is best effort, the raw address is always valid output.
            self._failures += 1
            return raw

        if not name:
            self._failures += 1
            return raw
        return str(name)

    def _remember(self, raw: str, name: str) -> None:
        self._cache[raw] = name
        self._cache.move_to_end(raw)
        while len(self._cache) > self.max_entries:
            self._cache.popitem(last=False)

    def _backoff(self, raw: str) -> None:
        self._retry_at[raw] = self._clock() + self.retry_seconds
        self._retry_at.move_to_end(raw)
        while len(self._retry_at) > self.max_entries:
            self._retry_at.popitem(last=False)

    def stats(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "timeout_seconds": self.timeout_seconds,
            "lookups": self._lookups,
            "failures": self._failures,
            "timeouts": self._timeouts,
            "cache_size": len(self._cache),
            "backoff_size": len(self._retry_at),
        }

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
