"""Network reachability signal driving the poller lifecycle."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

import requests

log = logging.getLogger("dbxjson/connectivity")

Listener = Callable[[bool], None]


class ConnectivitySignal:
    """
    Latest known reachability, with duplicate suppression.

    Listeners are invoked only on transitions, one at a time, on the
    thread calling `set`. A new listener immediately receives the current
    value when one is known.
    """

    def __init__(self, initial: bool | None = None) -> None:
        self._lock = threading.RLock()
        self._value = initial
        self._listeners: list[Listener] = []

    @property
    def value(self) -> bool | None:
        return self._value

    def set(self, value: bool) -> bool:
        """Record a new value and return whether it was a transition."""
        with self._lock:
            if self._value == value:
                return False
            self._value = value
            log.info("network %s", "reachable" if value else "unreachable")
            for listener in list(self._listeners):
                self._notify(listener, value)
            return True

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return the function unregistering it."""
        with self._lock:
            self._listeners.append(listener)
            if self._value is not None:
                self._notify(listener, self._value)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    @staticmethod
    def _notify(listener: Listener, value: bool) -> None:
        try:
            listener(value)
        except Exception as exc:
            log.error("connectivity listener failed: %s", exc)


class ConnectivityProbe:
    """
    Periodically probe an HTTP endpoint and feed the result into a signal.

    Any HTTP response, regardless of status, means the network is
    reachable; a transport error means it is not.
    """

    def __init__(
        self,
        signal: ConnectivitySignal,
        url: str,
        *,
        interval: float = 15.0,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.signal = signal
        self.url = url
        self.interval = interval
        self.timeout = timeout
        self._session = session or requests.Session()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def check(self) -> bool:
        """Probe once, update the signal and return the result."""
        try:
            self._session.head(self.url, timeout=self.timeout, allow_redirects=False)
            reachable = True
        except requests.RequestException as exc:
            log.debug("probing %s... failure: %s", self.url, exc)
            reachable = False
        self.signal.set(reachable)
        return reachable

    def start(self) -> None:
        """Start probing in a background thread."""
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="dbxjson-connectivity", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=self.timeout + 1)
        self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self.check()
            self._stop_event.wait(self.interval)
