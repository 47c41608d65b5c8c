from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

DEBOUNCE_WINDOW_SECONDS = 2.0

DebounceKey = Tuple[str, str]


class TickClock:
    """Monotonic clock advanced only by tick deltas."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def advance(self, delta_seconds: float) -> float:
        if delta_seconds > 0:
            self._now += float(delta_seconds)
        return self._now

    def now(self) -> float:
        return self._now


@dataclass
class DebounceRecord:
    last_edit: float
    pending_value: Any


class DebounceTracker:
    """Per-field live-edit guard: a recent local edit wins over the host value."""

    def __init__(
        self,
        *,
        window_seconds: float = DEBOUNCE_WINDOW_SECONDS,
        time_source: Callable[[], float],
    ) -> None:
        self._window = max(0.0, float(window_seconds))
        self._time = time_source
        self._records: Dict[DebounceKey, DebounceRecord] = {}

    @property
    def window_seconds(self) -> float:
        return self._window

    def record_edit(self, key: DebounceKey, value: Any) -> None:
        self._records[key] = DebounceRecord(last_edit=self._time(), pending_value=value)

    def is_active(self, key: DebounceKey) -> bool:
        record = self._records.get(key)
        return record is not None and (self._time() - record.last_edit) < self._window

    def active_value(self, key: DebounceKey, default: Any = None) -> Any:
        """Return the pending local value while its window is open, else ``default``."""
        record = self._records.get(key)
        if record is None:
            return default
        if (self._time() - record.last_edit) >= self._window:
            return default
        return record.pending_value

    def project(self, key: DebounceKey, host_value: Any) -> Any:
        return self.active_value(key, host_value)

    def prune(self) -> int:
        now = self._time()
        expired = [key for key, record in self._records.items() if (now - record.last_edit) >= self._window]
        for key in expired:
            self._records.pop(key, None)
        return len(expired)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class PendingValue:
    """Single-widget variant of the live-edit guard (transition duration)."""

    def __init__(self, *, window_seconds: float = DEBOUNCE_WINDOW_SECONDS, time_source: Callable[[], float]) -> None:
        self._window = max(0.0, float(window_seconds))
        self._time = time_source
        self._last_edit: Optional[float] = None
        self._value: Any = None

    def record_edit(self, value: Any) -> None:
        self._last_edit = self._time()
        self._value = value

    def project(self, host_value: Any) -> Any:
        if self._last_edit is None or (self._time() - self._last_edit) >= self._window:
            return host_value
        return self._value


class ActionThrottle:
    """Minimum interval between repeats of the same button action."""

    def __init__(self, *, interval_seconds: float = DEBOUNCE_WINDOW_SECONDS, time_source: Callable[[], float]) -> None:
        self._interval = max(0.0, float(interval_seconds))
        self._time = time_source
        self._last_fired: Dict[Hashable, float] = {}

    def allow(self, key: Hashable) -> bool:
        now = self._time()
        last = self._last_fired.get(key)
        if last is not None and (now - last) < self._interval:
            return False
        self._last_fired[key] = now
        return True

    def reset(self) -> None:
        self._last_fired.clear()
