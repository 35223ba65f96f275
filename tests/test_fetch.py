from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from radar3d.core.errors import FetchError
from radar3d.data import fetch
from radar3d.data.fetch import fetch_text, is_url


def test_is_url() -> None:
    assert is_url("https://example.org/data.csv")
    assert is_url("HTTP://example.org")
    assert not is_url("data/colors.csv")
    assert not is_url("ftp://example.org/data.csv")


def test_fetch_local_file(tmp_path: Path) -> None:
    path = tmp_path / "colors.csv"
    path.write_text("A,ff0000\n", encoding="utf-8")

    text = asyncio.run(fetch_text(str(path)))

    assert text == "A,ff0000\n"


def test_fetch_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FetchError):
        asyncio.run(fetch_text(str(tmp_path / "nope.csv")))


def test_fetch_empty_source() -> None:
    with pytest.raises(FetchError):
        asyncio.run(fetch_text(""))


def test_fetch_url_http_error_becomes_fetch_error(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(fetch.httpx, "AsyncClient", client_factory)

    with pytest.raises(FetchError):
        asyncio.run(fetch_text("https://example.org/data.csv"))


def test_fetch_url_returns_body(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="A,t1,1\n")

    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(fetch.httpx, "AsyncClient", client_factory)

    assert asyncio.run(fetch_text("https://example.org/data.csv")) == "A,t1,1\n"


def test_fetch_local_file_drops_byte_order_mark(tmp_path: Path) -> None:
    path = tmp_path / "data.csv"
    path.write_text("dimension,time,value\n", encoding="utf-8-sig")

    text = asyncio.run(fetch_text(str(path)))

    assert text == "dimension,time,value\n"
