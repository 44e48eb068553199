"""Bounded caches, cancellation tokens and debounced scheduling on the event loop."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class FifoCache(Generic[K, V]):
    """Mapping capped at ``maxsize`` entries, evicting the oldest insertion first.

    Overwriting an existing key keeps its original insertion position.
    """

    def __init__(self, maxsize: int) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self.maxsize = maxsize
        self._data: OrderedDict[K, V] = OrderedDict()

    def get(self, key: K) -> Optional[V]:
        return self._data.get(key)

    def set(self, key: K, value: V) -> None:
        self._data[key] = value
        while len(self._data) > self.maxsize:
            evicted, _ = self._data.popitem(last=False)
            logger.debug(f"Evicted cache entry {evicted!r}")

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[K]:
        return list(self._data.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class CancellationToken:
    """Marks the eventual result of an asynchronous task as one to ignore."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class Debouncer:
    """Single replaceable timer that starts an action once input pauses.

    ``schedule`` cancels the pending timer (if any) and starts a new one. When
    a timer fires, the action runs as its own task and is tracked as in-flight
    until it completes; later ``schedule``/``cancel`` calls no longer touch it.
    """

    def __init__(self, delay: float, name: str = "debounce") -> None:
        self.delay = delay
        self.name = name
        self._timer: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def inflight(self) -> int:
        return sum(1 for task in self._inflight if not task.done())

    def schedule(self, action: Callable[[], Awaitable[None]]) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.create_task(self._fire_later(action), name=f"{self.name}-timer")

    def cancel(self) -> bool:
        """Drop the pending timer. Returns True if one was pending."""
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()
            logger.debug(f"{self.name}: pending timer cancelled")
            return True
        return False

    def abort(self) -> None:
        """Cancel the pending timer and every in-flight action."""
        self.cancel()
        for task in list(self._inflight):
            if not task.done():
                task.cancel()
        self._inflight.clear()

    async def wait(self) -> None:
        """Wait until no timer is pending and no action is in flight."""
        while True:
            tasks = [task for task in (self._timer, *self._inflight) if task is not None and not task.done()]
            if not tasks:
                return
            await asyncio.wait(tasks)

    async def _fire_later(self, action: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.get_running_loop().create_task(action(), name=f"{self.name}-action")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        if self._timer is asyncio.current_task():
            self._timer = None
