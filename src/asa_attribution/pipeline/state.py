"""Thread-safe observable value holder.

A small listener contract standing in for a reactive property: read the
current value, subscribe to changes, unsubscribe with the returned callable.
Listeners run synchronously on the thread that sets the value.
"""

import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObservableValue(Generic[T]):
    """Holds one value and notifies listeners when it is set."""

    def __init__(self, initial: T | None = None) -> None:
        self._value = initial
        self._listeners: list[Callable[[T | None], None]] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T | None:
        with self._lock:
            return self._value

    def set(self, value: T | None) -> None:
        """Store ``value`` and notify every listener."""
        with self._lock:
            self._value = value
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.exception("Observer %r raised", listener)

    def subscribe(self, listener: Callable[[T | None], None]) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe
