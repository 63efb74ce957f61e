from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Listener = Callable[[T], None]


class EventEmitter(Generic[T]):
    """Named listener lists, invoked in registration order."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener[T]]] = {}

    def on(self, name: str, callback: Listener[T]) -> None:
        self._listeners.setdefault(name, []).append(callback)

    def off(self, name: str, callback: Listener[T]) -> None:
        listeners = self._listeners.get(name)
        if not listeners:
            return
        try:
            listeners.remove(callback)
        except ValueError:
            return
        if not listeners:
            del self._listeners[name]

    def listener_count(self, name: str) -> int:
        return len(self._listeners.get(name, ()))

    def emit(self, name: str, data: T) -> None:
        # Snapshot so on/off inside a callback applies from the next emit.
        for callback in tuple(self._listeners.get(name, ())):
            try:
                callback(data)
            except Exception:
                logger.exception("Listener for %r failed", name)

    def clear(self) -> None:
        self._listeners.clear()
