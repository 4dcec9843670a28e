#!/usr/bin/env python3
"""Package-level CLI entrypoint for netmanager.

This module wires subcommands implemented in separate modules under
`netmanager.cli` into a single `run()` function so the top-level
`main.py` can remain a thin wrapper.
"""
import argparse
import logging
import sys
from typing import List, Optional

import requests

from .. import config
from ..errors import NetworkError, error_strings
from .common import parse_pairs
from .reachability import cmd_reachability
from .request import cmd_get, cmd_post, cmd_upload

logger = logging.getLogger("netmanager.cli")


def _add_request_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("endpoint", help="Endpoint path appended to --host (e.g. /api/items)")
    p.add_argument("--host", default=config.DEFAULT_HOST, help=f"Base URL (default: {config.DEFAULT_HOST})")
    p.add_argument("--header", action="append", help="Request header as key=value (repeatable)")
    p.add_argument("--timeout", type=float, default=None, help=f"Timeout in milliseconds (default: {config.DEFAULT_TIMEOUT_MS})")
    p.add_argument("--no-cache", action="store_true", help="Send pragma/cache-control: no-cache")
    p.add_argument("--text", action="store_true", help="Print the body as text instead of parsing JSON")
    p.add_argument("--error-string", action="append", help="Error text as key=text, shown instead of raw errors (repeatable)")


def run(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for the netmanager CLI.

    Parses command-line arguments and dispatches to the appropriate
    `cmd_*` handler. Returns the process exit status.
    """
    parser = argparse.ArgumentParser(prog="netmanager")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd")

    p_get = sub.add_parser("get", help="GET an endpoint")
    _add_request_args(p_get)
    p_get.add_argument("--param", action="append", help="Query parameter as key=value (repeatable)")
    p_get.set_defaults(func=cmd_get)

    p_post = sub.add_parser("post", help="POST url-encoded form fields")
    _add_request_args(p_post)
    p_post.add_argument("--field", action="append", help="Form field as key=value (repeatable)")
    p_post.add_argument("--no-cookie", action="store_true", help="Send an empty Cookie header")
    p_post.set_defaults(func=cmd_post)

    p_upload = sub.add_parser("upload", help="Upload files as multipart/form-data")
    _add_request_args(p_upload)
    p_upload.add_argument("--field", action="append", help="Form field as key=value (repeatable)")
    p_upload.add_argument("--file", action="append", required=True, help="File as name=path[:mime] (repeatable)")
    p_upload.add_argument("--no-cookie", action="store_true", help="Send an empty Cookie header")
    p_upload.set_defaults(func=cmd_upload)

    p_reach = sub.add_parser("reachability", help="Print the current connection type")
    p_reach.add_argument("--watch", type=float, default=None, help="Follow changes for this many seconds")
    p_reach.add_argument("--probe-url", default=config.REACHABILITY_PROBE_URL, help="URL probed to decide reachability")
    p_reach.add_argument("--interval", type=float, default=config.REACHABILITY_POLL_INTERVAL, help="Seconds between polls when watching")
    p_reach.set_defaults(func=cmd_reachability)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")
    if not args.cmd:
        parser.print_help()
        return 0
    if getattr(args, "error_string", None):
        error_strings.replace(parse_pairs(args.error_string))
    try:
        args.func(args)
    except (NetworkError, requests.RequestException, ValueError, OSError) as e:
        logger.error("%s failed: %s", args.cmd, error_strings.describe(e))
        return 1
    return 0


def main() -> None:
    sys.exit(run())


__all__ = ["run", "main"]
