"""Listener registry for stats client events.

Events:
  post_stats  – fired with the ``StatsPayload`` after an HTTP 200 post.
  error       – fired with a ``RemoteError`` after a rejected post.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any, Literal

EventName = Literal["post_stats", "error"]
EVENTS: tuple[str, ...] = ("post_stats", "error")

Listener = Callable[..., Any]


class EventHooks:
    """Manages registration and firing of event listeners.

    Listeners may be plain callables or coroutine functions. They run in
    registration order and are awaited before ``emit`` returns; a failing
    listener is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[tuple[Listener, bool]]] = {name: [] for name in EVENTS}

    def on(self, event: EventName, listener: Listener) -> Listener:
        """Register ``listener`` for every future ``event`` and return it."""
        self._listeners_for(event).append((listener, False))
        return listener

    def once(self, event: EventName, listener: Listener) -> Listener:
        """Register ``listener`` for the next ``event`` only."""
        self._listeners_for(event).append((listener, True))
        return listener

    def off(self, event: EventName, listener: Listener) -> bool:
        """Remove ``listener``. Returns False if it was not registered."""
        entries = self._listeners_for(event)
        for i, (registered, _) in enumerate(entries):
            if registered is listener:
                del entries[i]
                return True
        return False

    def listener_count(self, event: EventName) -> int:
        return len(self._listeners_for(event))

    async def emit(self, event: EventName, *args: Any) -> bool:
        """Call every listener registered for ``event``.

        Returns:
            True if at least one listener was registered.
        """
        entries = self._listeners_for(event)
        if not entries:
            return False
        snapshot = list(entries)
        # Drop one-shot listeners before calling so re-entrant emits skip them.
        entries[:] = [entry for entry in entries if not entry[1]]
        for listener, _ in snapshot:
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:  # noqa: BLE001
                logging.warning(
                    f"⚠️ Event listener error event={event} listener={getattr(listener, '__name__', listener)!r} "
                    f"error={str(e)} type={type(e).__name__}"
                )
        return True

    def _listeners_for(self, event: str) -> list[tuple[Listener, bool]]:
        try:
            return self._listeners[event]
        except KeyError:
            raise ValueError(f"Unknown event {event!r}; expected one of {EVENTS}") from None
