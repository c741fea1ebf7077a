#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from .config import Settings
from .feed import FeedFetchError, fetch_latest_entries
from .resolver import ChannelReference, resolve


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="latestvideos",
        description="Resolve a YouTube channel_id from a channel URL and list its latest videos.",
    )
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution steps to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Print the channel_id for a channel URL or handle")
    p_resolve.add_argument("url", help="YouTube channel URL, handle, or custom link")

    p_latest = sub.add_parser("latest", help="Print the latest feed entries as JSON")
    p_latest.add_argument("url", nargs="?", default=None, help="Channel URL (defaults to DEFAULT_CHANNEL_URL)")
    p_latest.add_argument("--channel-id", default=None, help="Skip resolution and use this channel_id")
    p_latest.add_argument("--limit", type=int, default=None, help="Number of entries to print")
    return parser


async def _resolve(url: str, settings: Settings) -> int:
    resolution = await resolve(ChannelReference(source_url=url), settings)
    if not resolution.ok:
        print(f"channel id not found ({resolution.source})", file=sys.stderr)
        return 1
    print(resolution.channel_id)
    return 0


async def _latest(url: Optional[str], channel_id: Optional[str], limit: Optional[int], settings: Settings) -> int:
    source_url = url or settings.DEFAULT_CHANNEL_URL
    resolution = await resolve(ChannelReference(source_url=source_url, explicit_id=channel_id), settings)
    resolved = resolution.channel_id or settings.default_channel_id()
    if not resolved:
        print(f"channel id not found ({resolution.source})", file=sys.stderr)
        return 1
    if limit is None:
        limit = settings.FEED_ENTRY_LIMIT
    entries = await fetch_latest_entries(resolved, settings, limit=limit)
    json.dump({"videos": [e.to_dict() for e in entries]}, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    if args.timeout is not None:
        settings = settings.model_copy(update={"HTTP_TIMEOUT_SEC": args.timeout})
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "resolve":
            return asyncio.run(_resolve(args.url, settings))
        return asyncio.run(_latest(args.url, args.channel_id, args.limit, settings))
    except (ValueError, FeedFetchError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
