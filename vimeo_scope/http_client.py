# -*- coding: utf-8 -*-
import asyncio
import enum
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import aiohttp
from yarl import URL

from .config import CHUNK_SIZE
from .errors import CancellationAbort, TransportError


@dataclass(frozen=True)
class Request:
    url: URL
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Response:
    status: int
    body: bytes


@dataclass(frozen=True)
class Progress:
    received: int
    total: Optional[int]


class Next(enum.Enum):
    CONTINUE = "continue"
    ABORT = "abort"


ProgressCallback = Callable[[Progress], Next]


def _checkpoint(on_progress: ProgressCallback, received: int, total: Optional[int]):
    if on_progress(Progress(received, total)) is Next.ABORT:
        raise CancellationAbort("operation aborted")


async def fetch(session: aiohttp.ClientSession, request: Request,
                on_progress: ProgressCallback) -> Response:
    """GET sem corpo; o corpo volta cru (possivelmente gzip)."""
    try:
        async with session.get(request.url, headers=request.headers) as r:
            total = r.content_length
            received = 0
            _checkpoint(on_progress, received, total)
            chunks = []
            async for chunk in r.content.iter_chunked(CHUNK_SIZE):
                chunks.append(chunk)
                received += len(chunk)
                _checkpoint(on_progress, received, total)
            return Response(status=r.status, body=b"".join(chunks))
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise TransportError(f"{request.url}: {exc}") from exc
