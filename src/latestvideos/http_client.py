from __future__ import annotations

from dataclasses import dataclass

import aiohttp


@dataclass(frozen=True)
class FetchResult:
    status: int
    text: str
    final_url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


async def fetch_text(url: str, *, user_agent: str, timeout: float) -> FetchResult:
    """GET `url` and return status, decoded body and the URL after redirects.

    Connection failures raise aiohttp.ClientError, an exceeded timeout raises
    asyncio.TimeoutError. Non-2xx statuses are returned, not raised.
    """
    headers = {"User-Agent": user_agent}
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        async with session.get(url, headers=headers, allow_redirects=True) as resp:
            text = await resp.text(errors="ignore")
            return FetchResult(status=resp.status, text=text, final_url=str(resp.url))
