import asyncio
import json
import socket
import threading

import aiohttp
import pytest
from aiohttp import web

from relkit import compat, constants
from relkit.compat import CatalogResult, CatalogStatus
from relkit.config import BuildConfig

FLOOR = (1, 19, 4)


def _entry(version, version_type="release"):
    return {"version": version, "version_type": version_type, "major": False}


@pytest.mark.parametrize(
    "version, expected",
    [
        ("1.20", True),
        ("1.19.4", True),
        ("1.19.10", True),
        ("2", True),
        ("1.19.3", False),
        ("1.19", False),
        ("1.18.2", False),
        ("23w13a", False),
        ("1.20-pre1", False),
        ("", False),
        ("1.21\n1.22", False),
    ],
)
def test_version_at_least(version, expected):
    assert compat.version_at_least(version, [1, 19, 4]) is expected


def test_version_at_least_pads_floor():
    assert compat.version_at_least("1.20.0.1", (1, 20)) is True
    assert compat.version_at_least("1.20", (1, 20, 0)) is True


def test_parse_version():
    assert compat.parse_version(" 1.21.4 ") == (1, 21, 4)
    assert compat.parse_version("1.21-rc1") is None


def test_parse_catalog_filters_floor_and_type():
    payload = [
        _entry("1.20"),
        _entry("24w14a", "snapshot"),
        _entry("1.19.4"),
        _entry("1.20-pre2", "beta"),
        _entry("1.19.3"),
        _entry("1.20"),
    ]
    result = compat.parse_catalog(payload, FLOOR)
    assert result.status is CatalogStatus.OK
    assert result.versions == ("1.20", "1.19.4")


def test_parse_catalog_accepts_untyped_and_nested_entries():
    payload = [
        {"version": "1.21"},
        {"version_type": "release", "versions": ["1.21.1", "1.18", 7, "1.21"]},
        {"version": "1.22", "versions": ["1.22.1"], "version_type": "alpha"},
        "1.21.2",
        None,
    ]
    result = compat.parse_catalog(payload, FLOOR)
    assert result.versions == ("1.21", "1.21.1")


def test_parse_catalog_rejects_non_list():
    result = compat.parse_catalog({"versions": ["1.20"]}, FLOOR)
    assert result.status is CatalogStatus.ERROR
    assert "dict" in result.error


def test_parse_catalog_empty_after_filter():
    result = compat.parse_catalog([_entry("1.12.2")], FLOOR)
    assert result.status is CatalogStatus.EMPTY
    assert result.versions == ()


def test_override_wins_and_catalog_is_not_consulted():
    def failing_fetch(_config):
        raise AssertionError("catalog should not be consulted")

    config = BuildConfig(game_versions_override=("1.8.9", "1.12.2"))
    result = compat.resolve_compatible_versions(config, fetch=failing_fetch)
    assert result == ["1.8.9", "1.12.2"]


def test_catalog_versions_are_filtered_by_floor():
    payload = [_entry("1.19.3"), _entry("1.19.4"), _entry("1.20")]

    result = compat.resolve_compatible_versions(
        BuildConfig(), fetch=lambda config: compat.parse_catalog(payload, config.version_floor)
    )
    assert "1.19.3" not in result
    assert result == ["1.19.4", "1.20"]


def test_fetch_error_falls_back(caplog):
    result = compat.resolve_compatible_versions(
        BuildConfig(), fetch=lambda _config: CatalogResult.failed("boom")
    )
    assert result == list(constants.FALLBACK_GAME_VERSIONS)
    assert "boom" in caplog.text


def test_empty_catalog_falls_back(caplog):
    result = compat.resolve_compatible_versions(
        BuildConfig(), fetch=lambda _config: CatalogResult.ok([])
    )
    assert result == list(constants.FALLBACK_GAME_VERSIONS)
    assert any(r.levelname == "WARNING" for r in caplog.records)


def test_network_failure_returns_fallback(monkeypatch):
    async def unreachable(*_args, **_kwargs):
        raise aiohttp.ClientConnectionError("connection refused")

    monkeypatch.setattr(compat, "_request_json", unreachable)

    assert compat.fetch_catalog(BuildConfig()).status is CatalogStatus.ERROR
    assert compat.resolve_compatible_versions(BuildConfig()) == list(
        constants.FALLBACK_GAME_VERSIONS
    )


def test_timeout_returns_fallback(monkeypatch):
    async def slow(*_args, **_kwargs):
        raise aiohttp.ServerTimeoutError("read timeout")

    monkeypatch.setattr(compat, "_request_json", slow)
    assert compat.resolve_compatible_versions(BuildConfig()) == list(
        constants.FALLBACK_GAME_VERSIONS
    )


def test_malformed_json_returns_error(monkeypatch):
    async def garbage(*_args, **_kwargs):
        return json.loads("{not json")

    monkeypatch.setattr(compat, "_request_json", garbage)
    result = compat.fetch_catalog(BuildConfig())
    assert result.status is CatalogStatus.ERROR


def test_fetch_catalog_passes_config_to_request(monkeypatch):
    seen = {}

    async def fake_request(url, connect_timeout, read_timeout):
        seen.update(url=url, connect=connect_timeout, read=read_timeout)
        return [_entry("1.21.4"), _entry("1.19.2")]

    monkeypatch.setattr(compat, "_request_json", fake_request)
    config = BuildConfig(catalog_url="https://example.invalid/tags", connect_timeout=2.0)

    result = compat.fetch_catalog(config)
    assert result == CatalogResult(CatalogStatus.OK, ("1.21.4",))
    assert seen == {"url": "https://example.invalid/tags", "connect": 2.0, "read": 5.0}


@pytest.fixture
def catalog_server():
    """在后台线程中运行的 aiohttp.web 目录服务，响应可在测试中替换"""
    response = {"status": 200, "text": "[]"}

    async def handler(_request):
        return web.Response(
            status=response["status"],
            text=response["text"],
            content_type="application/json",
        )

    app = web.Application()
    app.router.add_get("/v2/tag/game_version", handler)

    loop = asyncio.new_event_loop()
    runner = web.AppRunner(app)
    loop.run_until_complete(runner.setup())
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    loop.run_until_complete(web.SockSite(runner, sock).start())
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    config = BuildConfig(
        catalog_url=f"http://127.0.0.1:{port}/v2/tag/game_version",
        connect_timeout=2.0,
        read_timeout=2.0,
    )
    yield response, config

    asyncio.run_coroutine_threadsafe(runner.cleanup(), loop).result(timeout=5)
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


def test_catalog_server_returns_release_list(catalog_server):
    response, config = catalog_server
    response["text"] = json.dumps(
        [_entry("1.21.4"), _entry("24w14a", "snapshot"), _entry("1.19.3"), _entry("1.20")]
    )

    result = compat.fetch_catalog(config)
    assert result.status is CatalogStatus.OK
    assert result.versions == ("1.21.4", "1.20")


def test_catalog_server_error_status(catalog_server):
    response, config = catalog_server
    response["status"] = 500
    response["text"] = "internal error"

    result = compat.fetch_catalog(config)
    assert result.status is CatalogStatus.ERROR
    assert "500" in result.error
    assert compat.resolve_compatible_versions(config) == list(
        constants.FALLBACK_GAME_VERSIONS
    )


def test_catalog_server_non_json_body(catalog_server):
    response, config = catalog_server
    response["text"] = "<html>maintenance</html>"

    assert compat.fetch_catalog(config).status is CatalogStatus.ERROR


def test_catalog_server_empty_body(catalog_server):
    response, config = catalog_server
    response["text"] = ""

    result = compat.fetch_catalog(config)
    assert result.status is CatalogStatus.ERROR
    assert "NoneType" in result.error


def test_catalog_server_unreachable():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()

    config = BuildConfig(catalog_url=f"http://127.0.0.1:{port}/", connect_timeout=2.0)
    assert compat.fetch_catalog(config).status is CatalogStatus.ERROR
