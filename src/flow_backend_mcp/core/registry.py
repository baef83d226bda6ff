from __future__ import annotations
from typing import Dict, Iterator, List
from .backend_base import Backend


class BackendRegistry:
    """
    Backend instances keyed by name.

    Two orders matter here:
      iteration
        Registration order. The server delivers every record to backends in
        this order, so a host that registers text before xml sees text lines
        first on a shared sink.

      list()
        Sorted names, for stable tool output.

    The host builds backends itself and hands them in. Nothing is imported
    dynamically here.
    """

    def __init__(self):
        self._by_name: Dict[str, Backend] = {}
        self._order: List[Backend] = []

    def register(self, backend: Backend) -> None:
        name = backend.name
        if name in self._by_name:
            raise ValueError(f"backend {name!r} is already registered")
        self._by_name[name] = backend
        self._order.append(backend)

    def get(self, name: str) -> Backend:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"no backend named {name!r}, have {self.list()}") from None

    def list(self) -> List[str]:
        return sorted(self._by_name)

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Backend]:
        # Snapshot, so a backend registered mid dispatch waits for the next record.
        return iter(tuple(self._order))
