from __future__ import annotations

import io
import json
import logging
import sys
from collections.abc import Iterator

import pytest

from vimeo_scope import cli
from vimeo_scope.io_ndjson import NDJSONReply
from vimeo_scope.logging_config import configure_logging
from vimeo_scope.query import CategorisedResult, Category

from conftest import FakeVimeo


@pytest.fixture(autouse=True)
def _restore_scope_logger() -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    logger = logging.getLogger("vimeo_scope")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def _lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def test_ndjson_reply_writes_and_applies_limit() -> None:
    out = io.StringIO()
    reply = NDJSONReply(out, limit=1)
    cat = reply.register_category("vimeo", "")

    first = CategorisedResult(cat, {"title": "a"})
    second = CategorisedResult(cat, {"title": "b"})

    assert reply.push(first) is True
    assert reply.push(second) is False
    (line,) = _lines(out.getvalue())
    assert line["category"] == "vimeo"
    assert line["title"] == "a"
    assert "fetched_ts" in line
    assert reply.categories == [Category("vimeo", "")]


def test_configure_logging_renders_to_stream() -> None:
    stream = io.StringIO()
    configure_logging("debug", stream=stream)

    logging.getLogger("vimeo_scope.api").debug("GET %s", "https://api.vimeo.com/videos")

    output = stream.getvalue()
    assert "GET https://api.vimeo.com/videos" in output
    assert "vimeo_scope.api" in output


def test_cli_search_prints_results(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    vimeo_server: FakeVimeo,
) -> None:
    vimeo_server.add_json("/videos", {"data": [{"id": "1", "name": "one", "uri": "/videos/1"}]})
    monkeypatch.setattr(
        sys, "argv", ["vimeo-scope", "turtles", "--apiroot", vimeo_server.base_url]
    )
    monkeypatch.setenv("VIMEO_SCOPE_ACCESS_TOKEN", "tok")

    cli.main()

    (record,) = _lines(capsys.readouterr().out)
    assert record["title"] == "one"
    assert record["uri"] == "/videos/1"
    assert vimeo_server.requests[0].headers["Authorization"] == "bearer tok"


def test_cli_exits_non_zero_on_api_error(
    monkeypatch: pytest.MonkeyPatch,
    vimeo_server: FakeVimeo,
) -> None:
    vimeo_server.add_json("/channels", {"error": "unavailable"}, status=503)
    monkeypatch.setenv("VIMEO_SCOPE_APIROOT", vimeo_server.base_url)
    monkeypatch.setattr(sys, "argv", ["vimeo-scope"])

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 1


def test_cli_rejects_negative_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["vimeo-scope", "--limit", "-1"])

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 2
