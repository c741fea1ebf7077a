from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

import aiohttp

from . import http_client
from .config import Settings

ENTRY_RE = re.compile(r"<entry>[\s\S]*?</entry>")
VIDEO_ID_RE = re.compile(r"<yt:videoId>([^<]+)</yt:videoId>")
COMPOSITE_ID_RE = re.compile(r"yt:video:([^<]+)</id>")
TITLE_RE = re.compile(r"<title>([\s\S]*?)</title>")
PUBLISHED_RE = re.compile(r"<published>([^<]+)</published>")
THUMBNAIL_RE = re.compile(r'<media:thumbnail[^>]*url="([^"]+)"', re.IGNORECASE)
DESCRIPTION_RE = re.compile(r"<media:description>([\s\S]*?)</media:description>")


class FeedFetchError(RuntimeError):
    """Raised when the channel feed could not be fetched."""

    def __init__(self, detail: str, status: Optional[int] = None) -> None:
        super().__init__(f"feed fetch failed (status={status}): {detail[:200]}")
        self.detail = detail
        self.status = status


@dataclass(frozen=True)
class FeedEntry:
    video_id: str
    title: str
    published_at: str
    thumbnail_url: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.video_id,
            "title": self.title,
            "description": self.description,
            "thumbnail": self.thumbnail_url,
            "publishedAt": self.published_at,
        }


def _first(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    if match and match.group(1):
        return match.group(1)
    return ""


def feed_url(channel_id: str, settings: Settings) -> str:
    return settings.FEED_URL_TEMPLATE.format(channel_id=channel_id)


def thumbnail_for(video_id: str, settings: Settings) -> str:
    return settings.THUMBNAIL_URL_TEMPLATE.format(video_id=video_id)


def split_entries(xml: str, limit: int) -> List[str]:
    fragments: List[str] = []
    for match in ENTRY_RE.finditer(xml):
        if len(fragments) >= limit:
            break
        fragments.append(match.group(0))
    return fragments


def extract_video_id(fragment: str) -> str:
    # Dedicated <yt:videoId>, else the tail of <id>yt:video:VIDEOID</id>
    return _first(VIDEO_ID_RE, fragment) or _first(COMPOSITE_ID_RE, fragment)


def extract_title(fragment: str) -> str:
    return _first(TITLE_RE, fragment).strip()


def extract_published(fragment: str) -> str:
    return _first(PUBLISHED_RE, fragment)


def extract_thumbnail(fragment: str) -> str:
    return _first(THUMBNAIL_RE, fragment)


def extract_description(fragment: str) -> str:
    return _first(DESCRIPTION_RE, fragment).strip()


def parse_entry(fragment: str, settings: Settings) -> FeedEntry:
    video_id = extract_video_id(fragment)
    return FeedEntry(
        video_id=video_id,
        title=extract_title(fragment),
        published_at=extract_published(fragment),
        thumbnail_url=extract_thumbnail(fragment) or thumbnail_for(video_id, settings),
        description=extract_description(fragment),
    )


def parse_entries(xml: str, limit: int, settings: Settings) -> List[FeedEntry]:
    return [parse_entry(fragment, settings) for fragment in split_entries(xml, limit)]


async def fetch_latest_entries(
    channel_id: str, settings: Settings, limit: int = 3
) -> List[FeedEntry]:
    """Fetch the channel's feed and return its first `limit` entries in feed order.

    Raises FeedFetchError on non-2xx, connection errors and timeouts.
    """
    if not channel_id:
        raise ValueError("empty channel id")
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")

    url = feed_url(channel_id, settings)
    try:
        result = await http_client.fetch_text(
            url, user_agent=settings.USER_AGENT, timeout=settings.HTTP_TIMEOUT_SEC
        )
    except asyncio.TimeoutError as e:
        raise FeedFetchError(f"timed out after {settings.HTTP_TIMEOUT_SEC}s") from e
    except aiohttp.ClientError as e:
        raise FeedFetchError(f"{type(e).__name__}: {e}") from e

    if not result.ok:
        logging.warning(f"Feed fetch: {url} -> status {result.status}")
        raise FeedFetchError(result.text, status=result.status)

    return parse_entries(result.text, limit, settings)
