from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Hashable, Optional, Tuple

from ..qimen.plate import Plate

DEFAULT_CAPACITY = 500

PlateKey = Tuple[Hashable, ...]


@dataclass(slots=True)
class _Entry:
    key: PlateKey
    value: Plate


class PlateCache:
    """LRU cache of built plates with a fixed capacity and no expiry."""

    __slots__ = ("capacity", "_data")

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._data: "OrderedDict[PlateKey, _Entry]" = OrderedDict()

    def get(self, key: PlateKey) -> Optional[Plate]:
        entry = self._data.get(key)
        if entry is None:
            return None
        # move to end (most recently used)
        self._data.move_to_end(key)
        return entry.value

    def put(self, key: PlateKey, value: Plate) -> None:
        if key in self._data:
            self._data.move_to_end(key)
            self._data[key].value = value
            return
        if len(self._data) >= self.capacity:
            self._data.popitem(last=False)
        self._data[key] = _Entry(key, value)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> tuple[PlateKey, ...]:
        """Return keys from least to most recently used."""

        return tuple(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        # membership does not count as a use
        return key in self._data


__all__ = ["DEFAULT_CAPACITY", "PlateCache", "PlateKey"]
