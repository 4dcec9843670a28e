"""Network reachability tracking.

`ReachabilityMonitor` keeps the last known connection type reported by a
connectivity provider (uppercased: WIFI, CELLULAR, NONE, UNKNOWN, ...) and
emits a change event on its `EventChannel` whenever the stored value
changes. Explicit probes and pushed notifications go through the same
state setter, so a repeated identical state never produces an event.

A process-wide monitor is available through `get_monitor()`; it is created
on first use with the polling provider defined here.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

import requests

from . import config
from .events import EventChannel, Subscription

logger = logging.getLogger("netmanager.reachability")


class ConnectivityProvider(Protocol):
    async def current_state(self) -> Mapping[str, Any]: ...

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> Callable[[], None]: ...


def _connection_type(info: Any) -> Optional[str]:
    if info is None:
        return None
    if isinstance(info, Mapping):
        return info.get("type")
    return getattr(info, "type", None)


class ReachabilityMonitor:
    def __init__(self, provider: ConnectivityProvider, channel: Optional[EventChannel] = None, autostart: bool = True):
        """
        Args:
            provider: connectivity source, see `ConnectivityProvider`.
            channel: event channel used for change notifications; a
                private one is created when omitted.
            autostart: schedule `start()` right away when called from a
                running event loop. Outside a loop, await `start()`.
        """
        self.provider = provider
        self.channel = channel if channel is not None else EventChannel()
        self._state = config.UNSET_STATE
        self._started = False
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.startup: Optional[asyncio.Task] = None
        if autostart:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self.startup = loop.create_task(self.start())
                self.startup.add_done_callback(_log_startup_failure)
            else:
                logger.debug("no running event loop; reachability monitor waits for start()")

    @property
    def emitter(self) -> EventChannel:
        return self.channel

    @property
    def state(self) -> str:
        return self._state

    @state.setter
    def state(self, value: Optional[str]) -> None:
        if not value:
            return
        previous = self._state
        self._state = str(value).upper()
        logger.debug("reachability %s -> %s", previous, self._state)
        if previous != self._state:
            self.channel.emit(config.CHANGE_EVENT, self._state)

    def current_state(self) -> str:
        return self._state

    def on_change(self, listener: Callable[[str], None]) -> Subscription:
        return self.channel.on(config.CHANGE_EVENT, listener)

    def _handle_notification(self, info: Any) -> None:
        self.state = _connection_type(info)

    async def probe(self) -> str:
        """Query the provider once and store the result.

        Provider errors propagate; the stored state is left as it was.
        """
        info = await self.provider.current_state()
        self.state = _connection_type(info)
        return self._state

    async def start(self) -> str:
        """Probe once, then follow the provider's change notifications.

        Calling it again while started is a no-op.
        """
        if self._started:
            return self._state
        self._started = True
        try:
            await self.probe()
        except Exception:
            self._started = False
            raise
        if self._started and self._unsubscribe is None:
            self._unsubscribe = self.provider.subscribe(config.CONNECTION_CHANGE_EVENT, self._handle_notification)
        return self._state

    def stop(self) -> None:
        self._started = False
        if self.startup is not None and not self.startup.done():
            self.startup.cancel()
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None


def _log_startup_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("initial reachability probe failed: %s", exc)


class PollingConnectivityProvider:
    """Connectivity provider that polls a probe URL.

    The connection type cannot be determined portably from here, so a
    reachable network is reported as `connected_type` ("unknown" by
    default) and an unreachable one as "none".
    """

    def __init__(
        self,
        probe_url: Optional[str] = None,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        connected_type: str = "unknown",
    ):
        self.probe_url = probe_url or config.REACHABILITY_PROBE_URL
        self.interval = interval if interval is not None else config.REACHABILITY_POLL_INTERVAL
        self.timeout = timeout if timeout is not None else config.REACHABILITY_PROBE_TIMEOUT
        self.session = session or requests.Session()
        self.connected_type = connected_type
        self._tasks: Dict[int, asyncio.Task] = {}

    def _check(self) -> str:
        try:
            self.session.head(self.probe_url, timeout=self.timeout, allow_redirects=False)
        except requests.RequestException as e:
            logger.debug("reachability probe of %s failed: %s", self.probe_url, e)
            return "none"
        return self.connected_type

    async def current_state(self) -> Dict[str, str]:
        return {"type": await asyncio.to_thread(self._check)}

    async def _poll(self, handler: Callable[[Any], None]) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                info = await self.current_state()
            except Exception as e:
                logger.warning("reachability poll failed: %s", e)
                continue
            try:
                handler(info)
            except Exception as e:
                logger.warning("reachability handler failed: %s", e)

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        if event != config.CONNECTION_CHANGE_EVENT:
            raise ValueError(f"unsupported event: {event}")
        task = asyncio.get_running_loop().create_task(self._poll(handler))
        self._tasks[id(task)] = task

        def unsubscribe() -> None:
            self._tasks.pop(id(task), None)
            task.cancel()

        return unsubscribe

    def close(self) -> None:
        for task in list(self._tasks.values()):
            task.cancel()
        self._tasks.clear()
        self.session.close()


_monitor: Optional[ReachabilityMonitor] = None


def get_monitor() -> ReachabilityMonitor:
    """Return the process-wide monitor, creating it on first use.

    The monitor starts itself only when first requested from a running
    event loop. Created outside one, it stays at UNSET until `start()` is
    awaited.
    """
    global _monitor
    if _monitor is None:
        _monitor = ReachabilityMonitor(PollingConnectivityProvider())
    return _monitor


def set_monitor(monitor: Optional[ReachabilityMonitor]) -> Optional[ReachabilityMonitor]:
    """Replace the process-wide monitor and return the previous one."""
    global _monitor
    previous, _monitor = _monitor, monitor
    return previous
