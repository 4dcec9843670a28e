"""Configuration constants for netmanager.

Defines the default host and timeout used by `HttpClient`, the timeout
error sentinel, and the settings of the default reachability provider.
"""

# Base URL prefix used when a client is created without a host
DEFAULT_HOST = "http://localhost"

# Request timeout in milliseconds. Can be overridden per client or per call
# through the `timeout` option.
DEFAULT_TIMEOUT_MS = 60000

# Sentinel carried by RequestTimeoutError; str(error) == "-1:err_api_timeout"
TIMEOUT_ERROR_CODE = -1
TIMEOUT_ERROR_KEY = "err_api_timeout"

USER_AGENT = "netmanager/1.0"

# Reachability
UNSET_STATE = "UNSET"
CONNECTION_CHANGE_EVENT = "connectionChange"
# Monitor-level event name used on the EventChannel
CHANGE_EVENT = "change"
# URL probed by the default polling provider. Any host that answers a HEAD
# request quickly works.
REACHABILITY_PROBE_URL = "http://clients3.google.com/generate_204"
# Seconds between polls of the default provider
REACHABILITY_POLL_INTERVAL = 1.0
# Seconds before a probe is considered failed
REACHABILITY_PROBE_TIMEOUT = 5.0
