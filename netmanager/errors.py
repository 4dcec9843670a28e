"""Error types and the shared error-string table."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from . import config


class NetworkError(Exception):
    """Base error raised by netmanager itself.

    Carries a numeric `code` and a string `key`; `str()` renders them as
    ``"<code>:<key>"`` so presentation layers can split them back apart.
    """

    def __init__(self, code: int, key: str):
        super().__init__(f"{code}:{key}")
        self.code = code
        self.key = key


class RequestTimeoutError(NetworkError):
    """A request did not settle before its deadline."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(config.TIMEOUT_ERROR_CODE, config.TIMEOUT_ERROR_KEY)
        self.url = url
        self.timeout = timeout


class ErrorStrings:
    """Lookup table mapping error keys or codes to human-readable text.

    One process-wide instance (`error_strings`) is shared by every
    `HttpClient`; constructing a client with an `error_strings` mapping
    replaces its contents, so the most recently constructed client wins.
    The table is only read by presentation code, never by request handling.
    """

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        self._mapping: Dict[Any, str] = dict(mapping or {})

    @property
    def mapping(self) -> Dict[Any, str]:
        return self._mapping

    def replace(self, mapping: Mapping[Any, str]) -> None:
        self._mapping = dict(mapping)

    def get(self, key: Any, default: Optional[str] = None) -> Optional[str]:
        return self._mapping.get(key, default)

    def describe(self, error: BaseException) -> str:
        """Return display text for `error`.

        NetworkError instances are looked up by key first, then by code.
        Anything else (or a miss) falls back to ``str(error)``.
        """
        if isinstance(error, NetworkError):
            text = self._mapping.get(error.key)
            if text is None:
                text = self._mapping.get(error.code)
            if text is not None:
                return text
        return str(error)

    def __len__(self) -> int:
        return len(self._mapping)

    def __contains__(self, key: Any) -> bool:
        return key in self._mapping


error_strings = ErrorStrings()
