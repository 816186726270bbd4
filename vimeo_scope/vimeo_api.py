"""Cliente assíncrono para os endpoints da API do Vimeo."""

import base64
import concurrent.futures
import dataclasses
import gzip
import json
import logging
import threading
import zlib
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from yarl import URL

from .accounts import AccountClient
from .config import CHANNELS_PAGE_SIZE, Config, ScopeSettings
from .errors import (
    ApiError,
    CancellationAbort,
    DecompressionError,
    ParseError,
    TransportError,
    VimeoScopeError,
)
from .http_client import Next, Progress, Request, Response
from .models import Channel, Video, get_list
from .transport import Transport

LOGGER = logging.getLogger("vimeo_scope.api")

T = TypeVar("T")

VideoList = List[Video]
ChannelList = List[Channel]


def _videos(root: Any) -> VideoList:
    return get_list(root, Video.from_json)


def _channels(root: Any) -> ChannelList:
    return get_list(root, Channel.from_json)


def _decompress(body: bytes) -> bytes:
    if not body:
        return body
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecompressionError(f"invalid gzip body: {exc}") from exc


def _parse(body: bytes, status: int) -> Any:
    if not body:
        return {}
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as exc:
        if status != 200:
            return {}
        raise ParseError(f"invalid JSON body: {exc}") from exc


def _error_message(root: Any) -> str:
    if isinstance(root, dict):
        message = root.get("error", "")
        return message if isinstance(message, str) else str(message)
    return ""


class ApiClient:
    """Monta requisições a partir do Config e decodifica as respostas.

    A flag de cancelamento é permanente: depois de `cancel()` nenhuma
    requisição deste cliente chega a completar.
    """

    def __init__(self, transport: Transport, accounts: Optional[AccountClient] = None,
                 config: Optional[Config] = None):
        self._transport = transport
        self._accounts = accounts
        self._config = config or Config()
        self._config_lock = threading.Lock()
        self._cancelled = threading.Event()
        self._owns_transport = False

    @classmethod
    def create(cls, accounts: Optional[AccountClient] = None,
               config: Optional[Config] = None) -> "ApiClient":
        transport = Transport(timeout_secs=ScopeSettings().timeout_secs).start()
        client = cls(transport, accounts, config)
        client._owns_transport = True
        return client

    @property
    def config(self) -> Config:
        return self._config

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    # ---------------- endpoints ----------------

    def videos(self, query: str) -> "concurrent.futures.Future[VideoList]":
        return self._async_get(["videos"], {"query": query}, _videos)

    def channels(self) -> "concurrent.futures.Future[ChannelList]":
        params = {"sort": "followers", "filter": "featured",
                  "per_page": str(CHANNELS_PAGE_SIZE)}
        return self._async_get(["channels"], params, _channels)

    def channels_videos(self, channel_id: str) -> "concurrent.futures.Future[VideoList]":
        return self._async_get(["channels", channel_id, "videos"], {}, _videos)

    def feed(self) -> "concurrent.futures.Future[VideoList]":
        return self._async_get(["me", "feed"], {}, _videos)

    def cancel(self):
        self._cancelled.set()

    def authenticated(self) -> bool:
        with self._config_lock:
            self._update_config()
            return self._config.authenticated

    def close(self):
        if self._owns_transport:
            self._transport.stop()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ---------------- pipeline ----------------

    def _update_config(self):
        settings = ScopeSettings()
        config = self._config
        if settings.apiroot:
            config = dataclasses.replace(config, apiroot=settings.apiroot)

        if settings.ignore_accounts is not None:
            self._config = config
            return

        statuses = self._accounts.get_service_statuses() if self._accounts else []
        status = next((s for s in statuses if s.service_authenticated), None)
        if status is None:
            config = dataclasses.replace(
                config, access_token="", client_id="", client_secret="",
                authenticated=False)
            LOGGER.info("vimeo scope is unauthenticated")
        else:
            config = dataclasses.replace(
                config, access_token=status.access_token,
                client_id=status.client_id, client_secret=status.client_secret,
                authenticated=True)
            LOGGER.info("vimeo scope is authenticated")
        self._config = config

    def _build_request(self, path: Sequence[str], params: Dict[str, str]) -> Request:
        with self._config_lock:
            self._update_config()
            config = self._config

        url = URL(config.apiroot)
        for segment in path:
            url = url / segment
        url = url.with_query(params)

        headers: Dict[str, str] = {}
        if config.access_token:
            headers["Authorization"] = "bearer " + config.access_token
        elif config.client_id and config.client_secret:
            pair = f"{config.client_id}:{config.client_secret}".encode("utf-8")
            headers["Authorization"] = "basic " + base64.b64encode(pair).decode("ascii")
        headers["Accept"] = config.accept
        headers["User-Agent"] = config.user_agent + " (gzip)"
        headers["Accept-Encoding"] = "gzip"
        return Request(url=url, headers=headers)

    def _progress_report(self, progress: Progress) -> Next:
        return Next.ABORT if self._cancelled.is_set() else Next.CONTINUE

    def _async_get(self, path: Sequence[str], params: Dict[str, str],
                   extract: Callable[[Any], T]) -> "concurrent.futures.Future[T]":
        result: "concurrent.futures.Future[T]" = concurrent.futures.Future()
        request = self._build_request(path, params)
        LOGGER.debug("GET %s", request.url)

        try:
            raw = self._transport.execute(request, self._progress_report)
        except TransportError as exc:
            result.set_exception(exc)
            return result

        raw.add_done_callback(
            lambda f: self._handle_response(f, result, extract, request))
        return result

    @staticmethod
    def _raw_result(raw: "concurrent.futures.Future[Response]") -> Response:
        try:
            return raw.result()
        except concurrent.futures.CancelledError as exc:
            raise CancellationAbort("request cancelled before completion") from exc
        except VimeoScopeError:
            raise
        except Exception as exc:
            raise TransportError(str(exc)) from exc

    def _handle_response(self, raw: "concurrent.futures.Future[Response]",
                         result: "concurrent.futures.Future[T]",
                         extract: Callable[[Any], T], request: Request):
        try:
            response = self._raw_result(raw)
            root = _parse(_decompress(response.body), response.status)
            if response.status != 200:
                raise ApiError(_error_message(root), response.status)
            value = extract(root)
        except VimeoScopeError as exc:
            self._fail(result, exc, request)
            return
        except Exception as exc:
            # roda como done-callback: o future precisa ser resolvido sempre
            error = ParseError(f"unexpected response: {exc!r}")
            error.__cause__ = exc
            self._fail(result, error, request)
            return
        result.set_result(value)

    @staticmethod
    def _fail(result: "concurrent.futures.Future[T]", exc: VimeoScopeError, request: Request):
        LOGGER.warning("request failed url=%s error=%r", request.url, exc)
        result.set_exception(exc)
