"""netmanager package - HTTP client facade and network reachability.

Expose the client, the reachability monitor and the error types for
application code.
"""

from . import config
from .client import HttpClient, RequestOptions, metrics
from .encoding import FileSpec
from .errors import ErrorStrings, NetworkError, RequestTimeoutError, error_strings
from .events import EventChannel, Subscription
from .reachability import (
    PollingConnectivityProvider,
    ReachabilityMonitor,
    get_monitor,
    set_monitor,
)

__all__ = [
    "config",
    "HttpClient",
    "RequestOptions",
    "metrics",
    "FileSpec",
    "ErrorStrings",
    "NetworkError",
    "RequestTimeoutError",
    "error_strings",
    "EventChannel",
    "Subscription",
    "PollingConnectivityProvider",
    "ReachabilityMonitor",
    "get_monitor",
    "set_monitor",
]

__version__ = "2026.10.19"
