"""Time-bounded typeahead search over the option registry."""

from __future__ import annotations

import heapq
import itertools
import time
from typing import Any, Callable, Hashable, List, Optional, Protocol, Tuple

from constants import TYPEAHEAD_IDLE_MS, TYPEAHEAD_MAX_LENGTH
from listbox.registry import Option, OptionRegistry
from logging_utils import logger

Clock = Callable[[], float]


class TimerScheduler(Protocol):
    """Schedules one-shot callbacks; implemented by Tk ``after`` or a fake."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ManualScheduler:
    """Virtual-time scheduler used by headless sessions and tests.

    Time only moves when :meth:`advance` is called; due timers fire in
    deadline order, each one as a separate call.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._cancelled: set[int] = set()
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._counter)
        heapq.heappush(self._queue, (self._now + delay_ms, handle, callback))
        return handle

    def cancel(self, handle: Any) -> None:
        self._cancelled.add(handle)

    @property
    def pending(self) -> int:
        return sum(1 for _, handle, _ in self._queue if handle not in self._cancelled)

    def advance(self, delta_ms: float) -> None:
        if delta_ms < 0:
            raise ValueError("delta_ms must not be negative")
        target = self._now + delta_ms
        while self._queue and self._queue[0][0] <= target:
            deadline, handle, callback = heapq.heappop(self._queue)
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            self._now = deadline
            callback()
        self._now = target


class TypeaheadMatcher:
    """Accumulate printable keystrokes and resolve them to an option."""

    def __init__(
        self,
        registry: OptionRegistry,
        *,
        scheduler: TimerScheduler,
        clock: Clock = monotonic_ms,
        idle_ms: int = TYPEAHEAD_IDLE_MS,
        max_length: int = TYPEAHEAD_MAX_LENGTH,
        on_expire: Optional[Callable[[Callable[[], None]], None]] = None,
    ) -> None:
        self._registry = registry
        self._scheduler = scheduler
        self._clock = clock
        self._idle_ms = idle_ms
        self._max_length = max_length
        # Lets the owner route timer expiry through its own event queue.
        self._on_expire = on_expire
        self._buffer = ""
        self._last_keystroke: Optional[float] = None
        self._timer: Any = None

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def searching(self) -> bool:
        return bool(self._buffer)

    def feed(self, char: str, active_id: Optional[Hashable]) -> Optional[Option]:
        now = self._clock()
        if self._last_keystroke is not None and now - self._last_keystroke > self._idle_ms:
            self._buffer = ""

        if self._buffer and self._buffer.casefold() == char.casefold() * len(self._buffer):
            # Repeated presses of one key cycle through options with that prefix.
            self._buffer = char
        else:
            self._buffer += char
        self._last_keystroke = now
        self._restart_timer()

        match = self._registry.match_by_prefix(self._buffer, after_id=active_id)
        if match is None:
            logger.debug("Typeahead buffer %r matched nothing", self._buffer)
            if len(self._buffer) > self._max_length:
                self.reset()
        return match

    def reset(self) -> None:
        self._buffer = ""
        self._last_keystroke = None
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
            self._timer = None

    def _restart_timer(self) -> None:
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
        # A keystroke arriving exactly idle_ms later still extends the buffer.
        self._timer = self._scheduler.schedule(self._idle_ms + 1, self._expire)

    def _expire(self) -> None:
        self._timer = None
        if self._on_expire is not None:
            self._on_expire(self._clear_buffer)
        else:
            self._clear_buffer()

    def _clear_buffer(self) -> None:
        self._buffer = ""
        self._last_keystroke = None


__all__ = [
    "Clock",
    "TimerScheduler",
    "ManualScheduler",
    "TypeaheadMatcher",
    "monotonic_ms",
]
