"""Timeout race for a single in-flight request.

`PendingRequest.race()` runs the request coroutine against a deadline.
Whichever settles first decides the outcome; the other side is disposed:
a late response after the deadline is cancelled and dropped, and the
deadline is gone once the request settles so it can never fire afterwards.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from .errors import RequestTimeoutError

logger = logging.getLogger("netmanager.racing")


class AbortController:
    """Cancellation handle handed to a transport.

    Transports register callbacks with `add_callback()`; `abort()` runs
    them once. Callback failures are logged and not raised.

    `timeout` is the request deadline in seconds, for transports that can
    also bound their own blocking calls with it.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.aborted = False
        self.timeout = timeout
        self._callbacks: List[Callable[[], Any]] = []

    def add_callback(self, callback: Callable[[], Any]) -> None:
        if self.aborted:
            self._run(callback)
            return
        self._callbacks.append(callback)

    def abort(self) -> None:
        if self.aborted:
            return
        self.aborted = True
        callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            self._run(cb)

    @staticmethod
    def _run(callback: Callable[[], Any]) -> None:
        try:
            callback()
        except Exception as e:
            logger.debug("abort callback %r failed: %s", callback, e)


class PendingRequest:
    def __init__(self, timeout_ms: float, url: Optional[str] = None):
        self.timeout_ms = timeout_ms
        self.url = url
        self.controller = AbortController(timeout=self.timeout_seconds)
        self.task: Optional[asyncio.Future] = None

    @property
    def timeout_seconds(self) -> float:
        return max(0.0, float(self.timeout_ms) / 1000.0)

    async def race(self, work: Awaitable[Any]) -> Any:
        """Await `work` unless the deadline passes first.

        Raises:
            RequestTimeoutError: the deadline won. The controller has been
                aborted and `work` cancelled.
            Exception: whatever `work` raised. The controller is aborted
                before re-raising.
        """
        self.task = asyncio.ensure_future(work)
        try:
            done, _ = await asyncio.wait({self.task}, timeout=self.timeout_seconds)
        except asyncio.CancelledError:
            self._dispose()
            raise
        if not done:
            self._dispose()
            raise RequestTimeoutError(url=self.url, timeout=self.timeout_ms)
        try:
            return self.task.result()
        except Exception:
            self.controller.abort()
            raise

    def _dispose(self) -> None:
        self.controller.abort()
        if self.task is not None and not self.task.done():
            self.task.cancel()
            self.task.add_done_callback(_discard_result)


def _discard_result(task: asyncio.Future) -> None:
    # Retrieve the outcome so a late failure is not reported as never retrieved
    if not task.cancelled():
        task.exception()
