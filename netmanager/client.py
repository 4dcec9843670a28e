"""HTTP client facade.

`HttpClient` turns ``get``/``post``/``upload`` calls into fully specified
requests, races each one against its timeout, parses the body (JSON, or
text when ``content_type="TEXT"``) and passes the result through an
interception hook before handing it to the caller.

It also records simple in-process metrics counters that callers can log.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from . import config
from . import errors
from .encoding import Part, build_parts, urlencode
from .errors import ErrorStrings, RequestTimeoutError
from .racing import AbortController, PendingRequest
from .reachability import ReachabilityMonitor, get_monitor
from .transport import MultipartTransport, RequestsMultipartTransport, RequestsTransport, Transport

logger = logging.getLogger("netmanager.client")

# Simple in-process metrics counters (module-level), shared by all clients.
metrics = {
    'requests_total': 0,
    'requests_failed': 0,
    'requests_timed_out': 0,
}


def _inc(metric: str, n: int = 1):
    try:
        metrics[metric] += n
    except Exception:
        pass


TEXT = "TEXT"

OnReceived = Callable[[Any, "RequestOptions"], Union[Any, Awaitable[Any]]]


@dataclass
class RequestOptions:
    """Everything known about one request.

    Built by `get`/`post`/`upload` and handed to the transport and to the
    interception hook, which may inspect any of it.
    """

    method: str = "GET"
    url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, Any]] = None
    form_data: Optional[Mapping[str, Any]] = None
    files: Optional[List[Any]] = None
    # url-encoded body for POST; None for GET and uploads
    body: Optional[str] = None
    # multipart parts for uploads
    parts: Optional[List[Part]] = None
    use_cache: Optional[bool] = None
    use_cookie: Optional[bool] = None
    timeout: Optional[float] = None
    content_type: Optional[str] = None
    on_received: Optional[OnReceived] = None


def _identity(body: Any, options: Any) -> Any:
    return body


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class _ReachableAccessor:
    # HttpClient.reachable resolves the shared monitor on each access so
    # set_monitor() replacements are picked up.
    def __get__(self, obj: Any, owner: Any) -> ReachabilityMonitor:
        return get_monitor()


class HttpClient:
    reachable = _ReachableAccessor()

    def __init__(
        self,
        host: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        on_received: Optional[OnReceived] = None,
        error_strings: Optional[Mapping[Any, str]] = None,
        transport: Optional[Transport] = None,
        multipart_transport: Optional[MultipartTransport] = None,
        share_default_headers: bool = False,
        error_table: Optional[ErrorStrings] = None,
    ):
        """Create a client.

        Args:
            host: base URL prepended to every endpoint.
            headers: default headers for `post` and `upload`.
            timeout: milliseconds before a request is aborted.
            on_received: hook ``(body, options)`` applied to every
                successful response; may return an awaitable.
            error_strings: when given, replaces the contents of the
                shared error table (last constructed client wins).
            transport: collaborator for GET/POST requests.
            multipart_transport: collaborator for uploads.
            share_default_headers: when True, `post`/`upload` without
                explicit headers write their injected headers into the
                default mapping itself, as older clients did. By default a
                copy is used per call.
            error_table: table to use instead of the process-wide one.
        """
        self.host = host or config.DEFAULT_HOST
        self.default_headers: Dict[str, str] = headers if headers is not None else {}
        self.timeout = timeout or config.DEFAULT_TIMEOUT_MS
        self._on_received: OnReceived = on_received if callable(on_received) else _identity
        self.transport: Transport = transport or RequestsTransport()
        self.multipart_transport: MultipartTransport = multipart_transport or RequestsMultipartTransport()
        self.share_default_headers = share_default_headers
        self.error_table = error_table if error_table is not None else errors.error_strings
        if error_strings is not None:
            self.error_table.replace(error_strings)

    @property
    def error_strings(self) -> ErrorStrings:
        return self.error_table

    async def on_received(self, response: Any, options: Optional[RequestOptions] = None) -> Any:
        """Run the interception hook on a parsed body.

        The per-request hook (``options.on_received``) wins over the
        client-level one. Awaitable results are awaited.
        """
        options = options if options is not None else RequestOptions()
        hook = options.on_received if callable(options.on_received) else self._on_received
        data = hook(response, options)
        if inspect.isawaitable(data):
            data = await data
        return data

    async def _dispatch(self, url: str, options: RequestOptions, controller: AbortController) -> Any:
        if options.parts is not None:
            response = await self.multipart_transport.send(options.method, url, options.headers, options.parts, controller)
        else:
            response = await self.transport.request(url, options, controller)
        if options.content_type == TEXT:
            return await response.text()
        return await response.json()

    async def fetch(self, url: str, options: Optional[RequestOptions] = None) -> Any:
        """Send a request and return the hook-processed body.

        Args:
            url: absolute request URL.
            options: request description; a bare GET when omitted.

        Returns:
            Whatever the interception hook returns for the parsed body.

        Raises:
            RequestTimeoutError: the request did not settle within
                ``options.timeout`` (or the client default) milliseconds.
            Exception: transport, parse, or hook errors, unchanged.
        """
        options = options if options is not None else RequestOptions(url=url)
        timeout = options.timeout if _is_number(options.timeout) else self.timeout
        pending = PendingRequest(timeout, url=url)
        _inc('requests_total', 1)
        try:
            result = await pending.race(self._dispatch(url, options, pending.controller))
        except RequestTimeoutError:
            _inc('requests_timed_out', 1)
            logger.warning("%s %s timed out after %sms", options.method, url, timeout)
            raise
        except Exception as e:
            _inc('requests_failed', 1)
            logger.debug("%s %s failed: %s", options.method, url, e)
            raise
        try:
            return await self.on_received(result, options)
        except Exception as e:
            _inc('requests_failed', 1)
            logger.debug("%s %s hook failed: %s", options.method, url, e)
            raise

    def _request_headers(self, headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
        if headers is not None:
            return dict(headers)
        if self.share_default_headers:
            return self.default_headers
        return dict(self.default_headers)

    @staticmethod
    def _apply_cache_headers(headers: Dict[str, str], use_cache: Optional[bool]) -> None:
        if use_cache is False:
            headers['pragma'] = 'no-cache'
            headers['cache-control'] = 'no-cache'

    async def get(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        use_cache: Optional[bool] = None,
        timeout: Optional[float] = None,
        content_type: Optional[str] = None,
        on_received: Optional[OnReceived] = None,
    ) -> Any:
        """GET ``host + endpoint`` with `params` encoded into the query string.

        The URL always carries the ``?`` separator, even with no params.
        Client default headers are not applied to GET requests.
        """
        url = self.host + endpoint + "?" + urlencode(params)
        headers = dict(headers) if headers is not None else {}
        self._apply_cache_headers(headers, use_cache)
        headers['Content-Type'] = 'application/json'
        options = RequestOptions(
            method="GET",
            url=url,
            headers=headers,
            params=params,
            use_cache=use_cache,
            timeout=timeout,
            content_type=content_type,
            on_received=on_received,
        )
        return await self.fetch(url, options)

    async def post(
        self,
        endpoint: str,
        form_data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        use_cache: Optional[bool] = None,
        use_cookie: Optional[bool] = None,
        timeout: Optional[float] = None,
        content_type: Optional[str] = None,
        on_received: Optional[OnReceived] = None,
    ) -> Any:
        """POST `form_data` url-encoded to ``host + endpoint``.

        Uses the caller's headers when given, otherwise the client default
        headers. ``use_cookie=False`` sends an empty Cookie header.
        """
        url = self.host + endpoint
        headers = self._request_headers(headers)
        self._apply_cache_headers(headers, use_cache)
        headers['Content-Type'] = 'application/x-www-form-urlencoded'
        if use_cookie is False:
            headers['Cookie'] = ''
        options = RequestOptions(
            method="POST",
            url=url,
            headers=headers,
            form_data=form_data,
            body=urlencode(form_data),
            use_cache=use_cache,
            use_cookie=use_cookie,
            timeout=timeout,
            content_type=content_type,
            on_received=on_received,
        )
        return await self.fetch(url, options)

    async def upload(
        self,
        endpoint: str,
        form_data: Optional[Mapping[str, Any]] = None,
        files: Optional[List[Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        use_cache: Optional[bool] = None,
        use_cookie: Optional[bool] = None,
        timeout: Optional[float] = None,
        content_type: Optional[str] = None,
        on_received: Optional[OnReceived] = None,
    ) -> Any:
        """POST a multipart body built from `form_data` and `files`.

        Each entry of `files` is a `FileSpec` or a mapping with ``name``,
        ``file`` (path or ``file://`` URI), ``filename`` and ``type``.
        Header rules match `post`.
        """
        url = self.host + endpoint
        headers = self._request_headers(headers)
        self._apply_cache_headers(headers, use_cache)
        headers['Content-Type'] = 'multipart/form-data'
        if use_cookie is False:
            headers['Cookie'] = ''
        files = list(files or [])
        options = RequestOptions(
            method="POST",
            url=url,
            headers=headers,
            form_data=form_data,
            files=files,
            parts=build_parts(form_data, files),
            use_cache=use_cache,
            use_cookie=use_cookie,
            timeout=timeout,
            content_type=content_type,
            on_received=on_received,
        )
        return await self.fetch(url, options)
