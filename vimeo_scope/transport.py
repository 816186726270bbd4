# -*- coding: utf-8 -*-
import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Coroutine, Optional

import aiohttp

from .errors import TransportError
from .http_client import ProgressCallback, Request, Response, fetch

LOGGER = logging.getLogger("vimeo_scope.transport")


class Transport:
    """Loop asyncio + ClientSession rodando numa thread dedicada.

    Quem chama recebe `concurrent.futures.Future`; a espera de rede
    acontece toda na thread do worker. `stop()` é idempotente e só retorna
    depois do join, então nenhum callback dispara após ele.
    """

    def __init__(self, *, timeout_secs: Optional[float] = None):
        self._timeout_secs = timeout_secs
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._ready = threading.Event()
        self._start_error: Optional[Exception] = None
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> "Transport":
        with self._lock:
            if self._running:
                return self
            if self._thread is not None:
                raise TransportError("transport cannot be restarted")
            self._loop = asyncio.new_event_loop()
            self._thread = threading.Thread(
                target=self._run, name="vimeo-scope-transport", daemon=True)
            self._thread.start()
            self._ready.wait()
            if self._start_error is not None:
                self._thread.join()
                raise TransportError(
                    f"transport failed to start: {self._start_error!r}") from self._start_error
            self._running = True
        LOGGER.debug("transport started")
        return self

    def _run(self):
        loop = self._loop
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(self._open_session())
        except Exception as exc:
            self._start_error = exc
            loop.close()
            return
        finally:
            self._ready.set()
        try:
            loop.run_forever()
        finally:
            loop.run_until_complete(self._drain())
            loop.close()

    async def _open_session(self):
        # o cliente descomprime gzip por conta própria
        if self._timeout_secs is None:
            timeout = aiohttp.ClientTimeout()
        else:
            timeout = aiohttp.ClientTimeout(total=self._timeout_secs)
        self._session = aiohttp.ClientSession(timeout=timeout, auto_decompress=False)

    async def _drain(self):
        current = asyncio.current_task()
        pending = [t for t in asyncio.all_tasks() if t is not current]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if self._session is not None:
            await self._session.close()
            self._session = None

    def submit(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        with self._lock:
            if not self._running:
                coro.close()
                raise TransportError("transport is not running")
            return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def execute(self, request: Request,
                on_progress: ProgressCallback) -> "concurrent.futures.Future[Response]":
        return self.submit(self._execute(request, on_progress))

    async def _execute(self, request: Request, on_progress: ProgressCallback) -> Response:
        return await fetch(self._session, request, on_progress)

    def stop(self):
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        LOGGER.debug("transport stopped")

    def __enter__(self) -> "Transport":
        return self.start()

    def __exit__(self, *exc_info):
        self.stop()
