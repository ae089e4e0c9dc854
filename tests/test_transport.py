import asyncio

import httpx
import pytest
import requests

from ajaxlite import transport as transport_mod
from ajaxlite.schemas import RequestDescriptor
from ajaxlite.transport import (
    NO_SUPPORT_MESSAGE,
    Available,
    HttpxTransport,
    RequestsTransport,
    Transport,
    TransportError,
    TransportFactory,
    Unavailable,
)


class LegacyA(Transport):
    name = "legacy-a"

    def __init__(self):
        raise TransportError("not installed")


class LegacyB(Transport):
    name = "legacy-b"


class Broken(Transport):
    def __init__(self):
        raise ValueError("bug")


def test_native_transport_is_preferred():
    factory = TransportFactory(native=LegacyB, supports_native=True, legacy=("legacy-a",), registry={"legacy-a": LegacyA})
    result = factory.acquire()
    assert isinstance(result, Available)
    assert isinstance(result.handle, LegacyB)


def test_legacy_probing_skips_failures_in_order():
    registry = {"legacy-a": LegacyA, "legacy-b": LegacyB}
    factory = TransportFactory(supports_native=False, legacy=("missing", "legacy-a", "legacy-b"), registry=registry)
    result = factory.acquire()
    assert isinstance(result, Available)
    assert isinstance(result.handle, LegacyB)


def test_each_acquire_returns_a_fresh_handle():
    factory = TransportFactory(supports_native=False, legacy=("legacy-b",), registry={"legacy-b": LegacyB})
    assert factory.acquire().handle is not factory.acquire().handle


def test_no_transport_is_unavailable():
    factory = TransportFactory(supports_native=False, legacy=("legacy-a",), registry={"legacy-a": LegacyA})
    result = factory.acquire()
    assert result == Unavailable()
    assert result.reason == NO_SUPPORT_MESSAGE


def test_unexpected_probe_errors_propagate():
    factory = TransportFactory(supports_native=False, legacy=("broken",), registry={"broken": Broken})
    with pytest.raises(ValueError):
        factory.acquire()


def test_register_transport(monkeypatch):
    monkeypatch.setattr(transport_mod, "_REGISTRY", {})
    transport_mod.register_transport("legacy-b", LegacyB)
    factory = TransportFactory(supports_native=False, legacy=("legacy-b",))
    assert isinstance(factory.acquire().handle, LegacyB)


def test_default_legacy_list_uses_requests():
    factory = TransportFactory(supports_native=False)
    assert isinstance(factory.acquire().handle, RequestsTransport)


def _run_handle(handle, request, payload=None):
    async def scenario():
        handle.open(request)
        handle.set_request_header("X-Test", "1")
        handle.send(payload)
        return await handle.wait()

    return asyncio.run(scenario())


def test_httpx_transport_sends_request():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = request.content
        seen["header"] = request.headers.get("x-test")
        return httpx.Response(404, text="missing")

    handle = HttpxTransport(transport=httpx.MockTransport(handler))
    envelope = _run_handle(handle, RequestDescriptor("https://example.com/a", "POST"), "k=v")
    assert seen == {"method": "POST", "url": "https://example.com/a", "body": b"k=v", "header": "1"}
    assert envelope.status == 404
    assert envelope.status_text == "Not Found"
    assert envelope.raw_body == "missing"
    assert envelope.handle is handle
    assert not envelope.succeeded


def test_httpx_connection_failure_completes_with_status_zero():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    handle = HttpxTransport(transport=httpx.MockTransport(handler))
    envelope = _run_handle(handle, RequestDescriptor("https://example.com/a", "GET"))
    assert envelope.status == 0
    assert envelope.raw_body == ""
    assert "refused" in envelope.status_text


class FakeResponse:
    status_code = 200
    reason = "OK"
    text = '{"ok": true}'


def test_requests_transport_runs_in_executor(monkeypatch):
    calls = {}

    def fake_request(method, url, data=None, headers=None):
        calls.update(method=method, url=url, data=data, headers=headers)
        return FakeResponse()

    monkeypatch.setattr(transport_mod.requests, "request", fake_request)
    handle = RequestsTransport()
    envelope = _run_handle(handle, RequestDescriptor("https://example.com/b", "GET"))
    assert calls["method"] == "GET"
    assert calls["data"] is None
    assert calls["headers"]["X-Test"] == "1"
    assert "User-Agent" in calls["headers"]
    assert envelope.succeeded
    assert envelope.raw_body == '{"ok": true}'


def test_requests_transport_failure(monkeypatch):
    def fake_request(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(transport_mod.requests, "request", fake_request)
    envelope = _run_handle(RequestsTransport(), RequestDescriptor("https://example.com/b", "GET"))
    assert envelope.status == 0
    assert envelope.status_text == "down"


def test_send_requires_open():
    with pytest.raises(RuntimeError):
        Transport().send()


def test_header_overrides_merge_with_defaults():
    handle = HttpxTransport(headers={"User-Agent": "custom", "Accept": "application/json"})
    assert handle.headers == {"User-Agent": "custom", "Accept": "application/json"}


def test_has_module_uses_find_spec(monkeypatch):
    monkeypatch.setattr(transport_mod.importlib.util, "find_spec", lambda name: None)
    assert not transport_mod.has_module("httpx")


def test_default_factory_falls_back_without_native_support(monkeypatch):
    monkeypatch.setattr(transport_mod, "NATIVE_SUPPORT", False)
    assert isinstance(TransportFactory().acquire().handle, RequestsTransport)


def test_default_factory_prefers_native_when_supported(monkeypatch):
    monkeypatch.setattr(transport_mod, "NATIVE_SUPPORT", True)
    assert isinstance(TransportFactory().acquire().handle, HttpxTransport)


def test_httpx_transport_without_httpx_is_skipped(monkeypatch):
    monkeypatch.setattr(transport_mod, "httpx", None)
    with pytest.raises(TransportError):
        HttpxTransport()
    factory = TransportFactory(supports_native=False, legacy=("httpx", "requests"))
    assert isinstance(factory.acquire().handle, RequestsTransport)
