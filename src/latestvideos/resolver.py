from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import aiohttp

from . import http_client
from .config import Settings

CHANNEL_ID_RE = re.compile(r"UC[A-Za-z0-9_-]+")

PATH_PATTERN = re.compile(r"/channel/(UC[A-Za-z0-9_-]+)", re.IGNORECASE)

# Tried in order; the first match wins.
HTML_PATTERNS = [
    ("channel_id_json", re.compile(r'"channelId":"(UC[A-Za-z0-9_-]+)"')),
    ("external_id_json", re.compile(r'"externalId":"(UC[A-Za-z0-9_-]+)"')),
    (
        "canonical_link",
        re.compile(r'<link[^>]*\brel="canonical"[^>]*\bhref="https?://[^"]+/channel/(UC[A-Za-z0-9_-]+)"'),
    ),
    (
        "canonical_link",
        re.compile(r'<link[^>]*\bhref="https?://[^"]+/channel/(UC[A-Za-z0-9_-]+)"[^>]*\brel="canonical"'),
    ),
]


@dataclass(frozen=True)
class ChannelReference:
    source_url: str
    explicit_id: Optional[str] = None


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a channel reference.

    `source` names the strategy that produced the id, or the reason the
    resolution failed when `channel_id` is None.
    """

    channel_id: Optional[str]
    source: str

    @property
    def ok(self) -> bool:
        return self.channel_id is not None


def normalize_url(url: str) -> str:
    url = url.strip()
    if not url:
        raise ValueError("empty url")
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    if not urlparse(url).netloc:
        raise ValueError(f"invalid url: {url}")
    return url


def is_channel_id(value: Optional[str]) -> bool:
    return bool(value) and CHANNEL_ID_RE.fullmatch(value) is not None


def extract_from_path(url: str) -> Optional[str]:
    match = PATH_PATTERN.search(urlparse(url).path)
    if match:
        return match.group(1)
    return None


def extract_from_html(html: str) -> Optional[tuple[str, str]]:
    for name, pattern in HTML_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1), name
    return None


async def resolve(reference: ChannelReference, settings: Settings) -> Resolution:
    """Resolve a channel id, issuing at most one request.

    Network errors, timeouts and non-2xx responses give a failed Resolution.
    A malformed source URL raises ValueError.
    """
    explicit = (reference.explicit_id or "").strip()
    if explicit:
        if is_channel_id(explicit):
            return Resolution(explicit, "explicit")
        logging.warning(f"Ignoring malformed explicit channel id: {explicit!r}")

    url = normalize_url(reference.source_url)
    channel_id = extract_from_path(url)
    if channel_id:
        return Resolution(channel_id, "url_path")

    try:
        result = await http_client.fetch_text(
            url, user_agent=settings.USER_AGENT, timeout=settings.HTTP_TIMEOUT_SEC
        )
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logging.info(f"Channel page fetch failed for {url}: {type(e).__name__}: {str(e)[:150]}")
        return Resolution(None, "network_error")

    if not result.ok:
        logging.info(f"Channel page fetch: {url} -> status {result.status}")
        return Resolution(None, "http_status")

    found = extract_from_html(result.text)
    if found:
        channel_id, strategy = found
        logging.info(f"Found channel_id via {strategy}: {channel_id}")
        return Resolution(channel_id, strategy)

    channel_id = extract_from_path(result.final_url)
    if channel_id:
        logging.info(f"Found channel_id via redirect: {url} -> {result.final_url}")
        return Resolution(channel_id, "final_url")

    return Resolution(None, "not_found")


async def resolve_channel_id(reference: ChannelReference, settings: Settings) -> Optional[str]:
    resolution = await resolve(reference, settings)
    return resolution.channel_id
