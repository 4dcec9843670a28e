"""Minimal publish/subscribe channel.

Handlers are called synchronously, in registration order, with the
emitted payload. `on()` returns a `Subscription` that detaches the handler;
registering the same handler for the same event twice returns the existing
subscription instead of adding a second registration.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger("netmanager.events")

Handler = Callable[[Any], None]


class Subscription:
    def __init__(self, channel: "EventChannel", event: str, handler: Handler):
        self._channel = channel
        self.event = event
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._channel.off(self.event, self.handler)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.unsubscribe()


class EventChannel:
    def __init__(self) -> None:
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def on(self, event: str, handler: Handler) -> Subscription:
        subs = self._subscriptions.setdefault(event, [])
        for sub in subs:
            if sub.handler == handler:
                return sub
        sub = Subscription(self, event, handler)
        subs.append(sub)
        return sub

    def off(self, event: str, handler: Handler) -> None:
        subs = self._subscriptions.get(event)
        if not subs:
            return
        kept = []
        for sub in subs:
            if sub.handler == handler:
                sub.active = False
            else:
                kept.append(sub)
        if kept:
            self._subscriptions[event] = kept
        else:
            del self._subscriptions[event]

    def emit(self, event: str, payload: Any = None) -> int:
        """Deliver `payload` to every handler of `event`.

        Returns the number of handlers called. The handler list is
        snapshotted first so handlers may unsubscribe while being called.
        """
        subs = list(self._subscriptions.get(event, ()))
        logger.debug("emit %s to %d handler(s)", event, len(subs))
        for sub in subs:
            if sub.active:
                sub.handler(payload)
        return len(subs)

    def listener_count(self, event: str) -> int:
        return len(self._subscriptions.get(event, ()))
