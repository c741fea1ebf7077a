from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from aiohttp import web

from .config import Settings
from .feed import FeedFetchError, fetch_latest_entries
from .resolver import ChannelReference, resolve

LATEST_VIDEOS_PATH = "/api/latest-videos"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
}


@dataclass
class WebDeps:
    settings: Settings


DEPS_KEY = web.AppKey("deps", WebDeps)


@web.middleware
async def cors_middleware(
    request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
) -> web.StreamResponse:
    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


async def _pick_channel_id(url: str, explicit_id: Optional[str], settings: Settings) -> Optional[str]:
    resolution = await resolve(ChannelReference(source_url=url, explicit_id=explicit_id), settings)
    if resolution.ok:
        return resolution.channel_id
    fallback = settings.default_channel_id()
    if fallback:
        logging.warning(
            f"Could not resolve channel_id from {url} ({resolution.source}), using default {fallback}"
        )
    return fallback


async def latest_videos(request: web.Request) -> web.Response:
    settings = request.app[DEPS_KEY].settings
    try:
        url = (request.query.get("url") or "").strip() or settings.DEFAULT_CHANNEL_URL
        explicit_id = request.query.get("channelId") or None

        channel_id = await _pick_channel_id(url, explicit_id, settings)
        if not channel_id:
            logging.warning(f"No channel_id for {url} and no default configured")
            return web.json_response(
                {"error": "Unable to resolve channelId from URL", "url": url}, status=500
            )

        try:
            entries = await fetch_latest_entries(channel_id, settings, limit=settings.FEED_ENTRY_LIMIT)
        except FeedFetchError as e:
            logging.warning(f"Failed to fetch feed for {channel_id}: {e}")
            return web.json_response(
                {"error": "Failed to fetch channel feed", "detail": e.detail}, status=500
            )

        return web.json_response({"videos": [entry.to_dict() for entry in entries]})
    except Exception as e:
        logging.error(f"Unhandled error in {LATEST_VIDEOS_PATH}: {e}", exc_info=True)
        return web.json_response({"error": "Server error", "detail": str(e)}, status=500)


async def preflight(request: web.Request) -> web.Response:
    return web.Response(status=200)


def create_app(settings: Settings) -> web.Application:
    app = web.Application(middlewares=[cors_middleware])
    app[DEPS_KEY] = WebDeps(settings=settings)
    app.router.add_get(LATEST_VIDEOS_PATH, latest_videos, allow_head=False)
    app.router.add_route("OPTIONS", LATEST_VIDEOS_PATH, preflight)
    return app
