"""Shared helpers for netmanager CLI subcommand modules.

Small utilities to parse ``key=value`` arguments, build a client from
parsed arguments, and print results.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, Optional

from ..client import TEXT, HttpClient
from ..encoding import FileSpec


def parse_pairs(values: Optional[List[str]]) -> Dict[str, str]:
    """Turn ``["a=1", "b=x y"]`` into ``{"a": "1", "b": "x y"}``.

    Order is preserved. Raises ValueError on an entry without ``=``.
    """
    out: Dict[str, str] = {}
    for item in values or []:
        if "=" not in item:
            raise ValueError(f"expected key=value, got {item!r}")
        key, value = item.split("=", 1)
        out[key] = value
    return out


def parse_file_arg(value: str) -> FileSpec:
    """Parse ``name=path[:mime]`` into a FileSpec.

    The filename defaults to the last path component.
    """
    if "=" not in value:
        raise ValueError(f"expected name=path[:mime], got {value!r}")
    name, rest = value.split("=", 1)
    mime = None
    # only split on the last colon when it is not part of a file:// URI
    head, sep, tail = rest.rpartition(":")
    if sep and "/" in tail and not tail.startswith("//"):
        rest, mime = head, tail
    filename = rest.rstrip("/").rsplit("/", 1)[-1]
    return FileSpec(name=name, file=rest, filename=filename, type=mime)


def get_client(args: Any) -> HttpClient:
    """Create an HttpClient from the global CLI options."""
    return HttpClient(host=getattr(args, "host", None), timeout=getattr(args, "timeout", None))


def content_type(args: Any) -> Optional[str]:
    return TEXT if getattr(args, "text", False) else None


def print_result(result: Any, out=None) -> None:
    out = out or sys.stdout
    if isinstance(result, str):
        out.write(result)
        if not result.endswith("\n"):
            out.write("\n")
        return
    out.write(json.dumps(result, indent=2, ensure_ascii=False))
    out.write("\n")
