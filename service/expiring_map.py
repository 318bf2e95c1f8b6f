"""
Process-local map with per-key expiry.

- Lazy expiry on read (get / contains / len never return stale keys)
- sweep() drops every expired key; callers decide when to run it
- Lock-guarded; safe under gthread workers

Usage:
    m = ExpiringMap(default_ttl=60)
    m.set("ip:1.2.3.4", bucket)
    m.get("ip:1.2.3.4")
    m.sweep()
"""

from __future__ import annotations
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Tuple


@dataclass
class ExpiringMap:
    default_ttl: Optional[float] = None
    clock: Callable[[], float] = time.monotonic
    _data: Dict[str, Tuple[Any, Optional[float]]] = field(default_factory=dict)
    _lock: threading.RLock = field(default_factory=threading.RLock)

    @property
    def lock(self) -> threading.RLock:
        """Re-entrant lock guarding the map; hold it to make read-modify-write atomic."""
        return self._lock

    def _live(self, key: str, now: float) -> bool:
        item = self._data.get(key)
        if item is None:
            return False
        exp = item[1]
        if exp is not None and exp <= now:
            del self._data[key]
            return False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if not self._live(key, self.clock()):
                return default
            return self._data[key][0]

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            exp = self.clock() + ttl if ttl else None
            self._data[key] = (value, exp)

    def touch(self, key: str, ttl: Optional[float] = None) -> bool:
        """Push a live key's expiry forward. Returns False if the key is gone."""
        with self._lock:
            if not self._live(key, self.clock()):
                return False
            self.set(key, self._data[key][0], ttl)
            return True

    def pop(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if not self._live(key, self.clock()):
                return default
            return self._data.pop(key)[0]

    def sweep(self) -> int:
        """Remove expired keys; returns how many were dropped."""
        with self._lock:
            now = self.clock()
            dead = [k for k, (_, exp) in self._data.items() if exp is not None and exp <= now]
            for k in dead:
                del self._data[k]
            return len(dead)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> Iterator[str]:
        with self._lock:
            now = self.clock()
            return iter([k for k in list(self._data) if self._live(k, now)])

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._live(key, self.clock())

    def __len__(self) -> int:
        with self._lock:
            now = self.clock()
            return sum(1 for k in list(self._data) if self._live(k, now))
