"""
Reference text retrieval for color tables and datasets.

Sources starting with http:// or https:// are downloaded with httpx; anything
else is read as a local UTF-8 file. Both paths raise FetchError on failure so
the session can stop its pipeline with a clear stage.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable

import httpx

from radar3d.core.errors import FetchError

FetchText = Callable[[str], Awaitable[str]]

DEFAULT_TIMEOUT = 30.0


def is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


async def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
    except httpx.HTTPError as exc:
        raise FetchError(f"Unable to fetch {url}: {exc}") from exc


async def fetch_file(path: str) -> str:
    p = Path(path)
    try:
        return await asyncio.to_thread(p.read_text, encoding="utf-8-sig")
    except OSError as exc:
        raise FetchError(f"Unable to read {path}: {exc}") from exc


async def fetch_text(source: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    if not source:
        raise FetchError("No source configured.")
    if is_url(source):
        return await fetch_url(source, timeout=timeout)
    return await fetch_file(source)
