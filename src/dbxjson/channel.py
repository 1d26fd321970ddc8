"""Broadcast channel announcing which catalog items changed."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")

log = logging.getLogger("dbxjson/channel")

_CLOSED = object()


class Subscription(Generic[T]):
    """
    Receiving side of an UpdateChannel.

    Each subscription owns an unbounded queue, hence publishing never
    waits for a slow subscriber. Use as an iterator or call `get`:

        with channel.subscribe() as sub:
            for item in sub:
                ...
    """

    def __init__(self, channel: UpdateChannel[T]) -> None:
        self._channel = channel
        self._queue: queue.SimpleQueue[object] = queue.SimpleQueue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def get(self, timeout: float | None = None) -> T:
        """
        Wait for the next item.

        Raises:
            queue.Empty: if the timeout expires.
            EOFError: if the subscription has been closed.
        """
        value = self._queue.get(timeout=timeout)
        if value is _CLOSED:
            # Leave the marker in place for any other waiting reader.
            self._queue.put(_CLOSED)
            raise EOFError("subscription closed")
        return value  # type: ignore[return-value]

    def drain(self) -> list[T]:
        """Return all the pending items without waiting."""
        items: list[T] = []
        while True:
            try:
                value = self._queue.get_nowait()
            except queue.Empty:
                return items
            if value is _CLOSED:
                self._queue.put(_CLOSED)
                return items
            items.append(value)  # type: ignore[arg-type]

    def close(self) -> None:
        """Stop receiving items and wake up any waiting reader."""
        if self._closed.is_set():
            return
        self._closed.set()
        self._channel._unsubscribe(self)
        self._queue.put(_CLOSED)

    def _deliver(self, item: T) -> None:
        if not self._closed.is_set():
            self._queue.put(item)

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except EOFError:
                return

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class UpdateChannel(Generic[T]):
    """
    Fire-and-forget multi-subscriber channel.

    Subscribers only observe items published after they subscribed and
    the publisher never blocks on them.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[Subscription[T]] = []

    def subscribe(self) -> Subscription[T]:
        sub: Subscription[T] = Subscription(self)
        with self._lock:
            self._subscribers.append(sub)
        return sub

    def add_listener(self, callback: Callable[[T], None]) -> Subscription[T]:
        """
        Invoke callback for every published item on a dedicated thread.

        Close the returned subscription to stop the listener.
        """
        sub = self.subscribe()

        def _run() -> None:
            for item in sub:
                try:
                    callback(item)
                except Exception as exc:
                    log.error("update listener failed for %s: %s", item, exc)

        threading.Thread(target=_run, name="dbxjson-listener", daemon=True).start()
        return sub

    def publish(self, item: T) -> int:
        """Deliver item to the current subscribers and return how many there were."""
        with self._lock:
            subscribers = list(self._subscribers)
        for sub in subscribers:
            sub._deliver(item)
        return len(subscribers)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def close(self) -> None:
        """Close all the subscriptions."""
        with self._lock:
            subscribers = list(self._subscribers)
        for sub in subscribers:
            sub.close()

    def _unsubscribe(self, sub: Subscription[T]) -> None:
        with self._lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)
