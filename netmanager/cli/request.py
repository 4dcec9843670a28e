import asyncio
import logging
from typing import Any

from .common import content_type, get_client, parse_file_arg, parse_pairs, print_result

logger = logging.getLogger("netmanager.cli.request")


def cmd_get(args: Any) -> None:
    """GET an endpoint and print the parsed body."""
    client = get_client(args)
    result = asyncio.run(
        client.get(
            args.endpoint,
            params=parse_pairs(args.param),
            headers=parse_pairs(args.header),
            use_cache=False if args.no_cache else None,
            content_type=content_type(args),
        )
    )
    print_result(result)


def cmd_post(args: Any) -> None:
    """POST url-encoded fields to an endpoint and print the parsed body."""
    client = get_client(args)
    headers = parse_pairs(args.header)
    result = asyncio.run(
        client.post(
            args.endpoint,
            form_data=parse_pairs(args.field),
            headers=headers or None,
            use_cache=False if args.no_cache else None,
            use_cookie=False if args.no_cookie else None,
            content_type=content_type(args),
        )
    )
    print_result(result)


def cmd_upload(args: Any) -> None:
    """Upload files with optional fields and print the parsed body."""
    client = get_client(args)
    files = [parse_file_arg(f) for f in args.file or []]
    logger.info("uploading %d file(s) to %s", len(files), args.endpoint)
    headers = parse_pairs(args.header)
    result = asyncio.run(
        client.upload(
            args.endpoint,
            form_data=parse_pairs(args.field),
            files=files,
            headers=headers or None,
            use_cache=False if args.no_cache else None,
            use_cookie=False if args.no_cookie else None,
            content_type=content_type(args),
        )
    )
    print_result(result)
