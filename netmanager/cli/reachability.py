import asyncio
import logging
from typing import Any

from ..reachability import PollingConnectivityProvider, ReachabilityMonitor

logger = logging.getLogger("netmanager.cli.reachability")


async def _watch(monitor: ReachabilityMonitor, seconds: float) -> None:
    sub = monitor.on_change(lambda state: print(state, flush=True))
    try:
        await monitor.start()
        await asyncio.sleep(seconds)
    finally:
        sub.unsubscribe()
        monitor.stop()


def cmd_reachability(args: Any) -> None:
    """Print the current connection type, or follow changes with --watch."""
    provider = PollingConnectivityProvider(probe_url=args.probe_url, interval=args.interval)
    monitor = ReachabilityMonitor(provider, autostart=False)
    try:
        if args.watch:
            asyncio.run(_watch(monitor, args.watch))
        else:
            print(asyncio.run(monitor.probe()))
    finally:
        provider.close()
