"""Transport collaborators and their default `requests` implementations.

`HttpClient` talks to two duck-typed collaborators:

- a transport with ``async request(url, options, controller) -> response``
- a multipart transport with
  ``async send(method, url, headers, parts, controller) -> response``

where a response exposes ``async json()`` and ``async text()``. The
defaults below run blocking `requests` calls in a worker thread and use a
fresh `requests.Session` per call, registering ``session.close`` with the
controller so an abort tears down the connection.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import requests

from . import config
from .encoding import FilePart, FormPart, Part
from .racing import AbortController

logger = logging.getLogger("netmanager.transport")


class Response(Protocol):
    async def json(self) -> Any: ...

    async def text(self) -> str: ...


class Transport(Protocol):
    async def request(self, url: str, options: Any, controller: AbortController) -> Response: ...


class MultipartTransport(Protocol):
    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        parts: Sequence[Part],
        controller: AbortController,
    ) -> Response: ...


class RequestsResponse:
    """Async facade over a fully read `requests.Response`."""

    def __init__(self, response: requests.Response):
        self.raw = response

    @property
    def status_code(self) -> int:
        return self.raw.status_code

    async def json(self) -> Any:
        return self.raw.json()

    async def text(self) -> str:
        return self.raw.text


def _request_timeout(socket_timeout: Optional[float], controller: Any) -> Optional[float]:
    """Seconds requests may block: the smaller of `socket_timeout` and the
    controller's request deadline, or None when neither is set."""
    limits = [t for t in (socket_timeout, getattr(controller, "timeout", None)) if t is not None and t > 0]
    return min(limits) if limits else None


def _new_session(session_factory: Callable[[], requests.Session]) -> requests.Session:
    session = session_factory()
    session.headers.setdefault("User-Agent", config.USER_AGENT)
    return session


class RequestsTransport:
    def __init__(self, session_factory: Optional[Callable[[], requests.Session]] = None, socket_timeout: Optional[float] = None):
        """
        Args:
            session_factory: callable returning a new `requests.Session`.
            socket_timeout: upper bound in seconds for requests' own timeout.
                The request deadline from the controller applies as well, so
                a worker thread never outlives the request it serves.
        """
        self._session_factory = session_factory or requests.Session
        self.socket_timeout = socket_timeout

    async def request(self, url: str, options: Any, controller: AbortController) -> RequestsResponse:
        session = _new_session(self._session_factory)
        controller.add_callback(session.close)
        method = getattr(options, "method", None) or "GET"
        logger.debug("%s %s", method, url)
        try:
            resp = await asyncio.to_thread(
                session.request,
                method,
                url,
                headers=dict(getattr(options, "headers", None) or {}),
                data=getattr(options, "body", None),
                timeout=_request_timeout(self.socket_timeout, controller),
            )
        finally:
            session.close()
        return RequestsResponse(resp)


def _multipart_fields(parts: Sequence[Part]) -> List[Tuple[str, Tuple[Any, ...]]]:
    fields: List[Tuple[str, Tuple[Any, ...]]] = []
    for part in parts:
        if isinstance(part, FilePart):
            fields.append((part.name, (part.filename, part.data.read(), part.type)))
        elif isinstance(part, FormPart):
            fields.append((part.name, (None, part.data)))
        else:
            raise TypeError(f"unsupported multipart part: {part!r}")
    return fields


class RequestsMultipartTransport:
    def __init__(self, session_factory: Optional[Callable[[], requests.Session]] = None, socket_timeout: Optional[float] = None):
        self._session_factory = session_factory or requests.Session
        self.socket_timeout = socket_timeout

    def _send_blocking(self, session: requests.Session, method: str, url: str, headers: Dict[str, str], parts: Sequence[Part], timeout: Optional[float]) -> requests.Response:
        # requests generates the multipart body and needs to add the boundary
        # parameter itself, so a bare multipart Content-Type is dropped.
        for key in list(headers):
            if key.lower() == "content-type" and headers[key].strip().lower() == "multipart/form-data":
                del headers[key]
        return session.request(method, url, headers=headers, files=_multipart_fields(parts), timeout=timeout)

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        parts: Sequence[Part],
        controller: AbortController,
    ) -> RequestsResponse:
        session = _new_session(self._session_factory)
        controller.add_callback(session.close)
        logger.debug("%s %s (multipart, %d part(s))", method, url, len(parts))
        try:
            resp = await asyncio.to_thread(
                self._send_blocking,
                session,
                method,
                url,
                dict(headers),
                parts,
                _request_timeout(self.socket_timeout, controller),
            )
        finally:
            session.close()
        return RequestsResponse(resp)
