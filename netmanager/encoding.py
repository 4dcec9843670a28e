"""Request body construction.

Helpers that turn caller-supplied mappings into the three body shapes the
client sends: a percent-encoded query string, an
``application/x-www-form-urlencoded`` body (same encoding), and an ordered
list of multipart parts.

Keys and values are encoded with the ``encodeURIComponent`` rules used by
browser and mobile front ends, so a value that is already percent-encoded
is encoded a second time ("a%20b" becomes "a%2520b").
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote

# Characters encodeURIComponent leaves alone in addition to quote()'s
# always-safe set (letters, digits, "_.-~").
_SAFE = "!*'()"

FILE_URI_PREFIX = "file://"


def encode_component(value: Any) -> str:
    """Percent-encode a single key or value."""
    if value is None:
        text = ""
    elif isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return quote(text, safe=_SAFE)


def urlencode(data: Optional[Mapping[str, Any]]) -> str:
    """Encode `data` as ``k=v&k2=v2`` in mapping insertion order.

    Args:
        data: mapping of names to values, or None.

    Returns:
        The encoded string; empty when `data` is None or empty.
    """
    if not data:
        return ""
    return "&".join(f"{encode_component(k)}={encode_component(v)}" for k, v in data.items())


@dataclass
class FileRef:
    """Reference to a local file whose bytes are read by the transport."""

    path: str

    def read(self) -> bytes:
        with open(self.path, "rb") as fh:
            return fh.read()


@dataclass
class FormPart:
    name: str
    data: str


@dataclass
class FilePart:
    name: str
    filename: Optional[str]
    type: Optional[str]
    data: FileRef


Part = Union[FormPart, FilePart]


@dataclass
class FileSpec:
    """A file the caller wants uploaded.

    `file` is a local path or a ``file://`` URI.
    """

    name: str
    file: str
    filename: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def coerce(cls, value: Any) -> "FileSpec":
        """Accept a FileSpec or a mapping with name/file/filename/type keys.

        The camel-case keys ``fileName``/``fileType`` are accepted too.
        """
        if isinstance(value, FileSpec):
            return value
        if isinstance(value, Mapping):
            return cls(
                name=value["name"],
                file=value["file"],
                filename=value.get("filename", value.get("fileName")),
                type=value.get("type", value.get("fileType")),
            )
        raise TypeError(f"unsupported file spec: {value!r}")


def normalize_file_path(path: str) -> str:
    """Strip a leading ``file://`` URI prefix from `path`."""
    if path.startswith(FILE_URI_PREFIX):
        return path[len(FILE_URI_PREFIX):]
    return path


def build_parts(form_data: Optional[Mapping[str, Any]], files: Optional[Iterable[Any]]) -> List[Part]:
    """Build the multipart part list for an upload.

    Plain fields come first, each name and value percent-encoded, followed
    by one FilePart per entry in `files`, in the order given.
    """
    parts: List[Part] = []
    for key, value in (form_data or {}).items():
        parts.append(FormPart(name=encode_component(key), data=encode_component(value)))
    for item in files or []:
        spec = FileSpec.coerce(item)
        parts.append(
            FilePart(
                name=spec.name,
                filename=spec.filename,
                type=spec.type,
                data=FileRef(normalize_file_path(spec.file)),
            )
        )
    return parts
