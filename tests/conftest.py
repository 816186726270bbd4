from __future__ import annotations

import asyncio
import gzip
import json
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest
from aiohttp import web

from vimeo_scope.transport import Transport


@pytest.fixture(autouse=True)
def _clean_scope_env(monkeypatch: pytest.MonkeyPatch) -> None:  # pyright: ignore[reportUnusedFunction]
    for name in (
        "APIROOT",
        "IGNORE_ACCOUNTS",
        "ACCESS_TOKEN",
        "CLIENT_ID",
        "CLIENT_SECRET",
        "TIMEOUT_SECS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"VIMEO_SCOPE_{name}", raising=False)


def gzip_json(payload: Any) -> bytes:
    return gzip.compress(json.dumps(payload).encode("utf-8"))


@dataclass
class SeenRequest:
    path: str
    query: dict[str, str]
    headers: dict[str, str]


@dataclass
class FakeVimeo:
    base_url: str = ""
    slow_path: str = "/slow"
    routes: dict[str, tuple[int, bytes]] = field(default_factory=dict)
    requests: list[SeenRequest] = field(default_factory=list)
    stream_started: threading.Event = field(default_factory=threading.Event)
    stream_release: threading.Event = field(default_factory=threading.Event)

    def add_json(self, path: str, payload: Any, status: int = 200) -> None:
        self.routes[path] = (status, gzip_json(payload))

    def add_raw(self, path: str, body: bytes, status: int = 200) -> None:
        self.routes[path] = (status, body)

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(
            SeenRequest(
                path=request.path,
                query=dict(request.query),
                headers=dict(request.headers),
            )
        )
        if request.path == self.slow_path:
            return await self._slow(request)
        status, body = self.routes.get(request.path, (404, gzip_json({"error": "not found"})))
        headers = {"Content-Encoding": "gzip"} if body else {}
        return web.Response(status=status, body=body, headers=headers)

    async def _slow(self, request: web.Request) -> web.StreamResponse:
        resp = web.StreamResponse()
        await resp.prepare(request)
        try:
            await resp.write(b"x" * 10)
            self.stream_started.set()
            while not self.stream_release.is_set():
                await asyncio.sleep(0.01)
            await resp.write(b"y" * 10)
            await resp.write_eof()
        except ConnectionResetError:
            pass
        return resp


@pytest.fixture
def transport() -> Iterator[Transport]:
    t = Transport().start()
    yield t
    t.stop()


@pytest.fixture
def vimeo_server(transport: Transport) -> Iterator[FakeVimeo]:
    fake = FakeVimeo()
    app = web.Application()
    app.router.add_get("/{tail:.*}", fake.handle)
    runner = web.AppRunner(app)

    async def _start() -> int:
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", 0)
        await site.start()
        return runner.addresses[0][1]

    port = transport.submit(_start()).result(timeout=5)
    fake.base_url = f"http://127.0.0.1:{port}"
    yield fake
    fake.stream_release.set()
    transport.submit(runner.cleanup()).result(timeout=5)
