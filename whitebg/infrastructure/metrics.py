from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from threading import Lock
from time import perf_counter, time
from typing import Iterator


class MetricsStore:
    """Process-local counters and duration summaries for the HTTP surface."""

    def __init__(self, prefix: str = "whitebg") -> None:
        self._prefix = prefix
        self._lock = Lock()
        self._counters: dict[str, int] = defaultdict(int)
        self._durations: dict[str, list[float]] = defaultdict(lambda: [0, 0.0])
        self._last_update_ts: int = int(time())

    def incr(self, key: str, value: int = 1) -> None:
        with self._lock:
            self._counters[key] += value
            self._last_update_ts = int(time())

    def observe(self, key: str, seconds: float) -> None:
        with self._lock:
            summary = self._durations[key]
            summary[0] += 1
            summary[1] += seconds
            self._last_update_ts = int(time())

    @contextmanager
    def timed(self, key: str) -> Iterator[None]:
        start = perf_counter()
        try:
            yield
        finally:
            self.observe(key, perf_counter() - start)

    def snapshot(self) -> dict[str, int | float]:
        with self._lock:
            merged: dict[str, int | float] = dict(self._counters)
            for key, (count, total) in self._durations.items():
                merged[f"{key}_count"] = count
                merged[f"{key}_sum"] = round(total, 6)
            merged["metrics_last_update_ts"] = self._last_update_ts
            return merged

    def to_prometheus_text(self) -> str:
        lines = [
            f"{self._prefix}_{key.lower().replace('-', '_')} {value}"
            for key, value in sorted(self.snapshot().items())
        ]
        return "\n".join(lines) + "\n"


metrics = MetricsStore()
