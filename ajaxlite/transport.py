"""HTTP transports and capability-based transport selection."""

from __future__ import annotations

import asyncio
import functools
import importlib.util
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Type, Union

import requests

from .schemas import OutcomeEnvelope, RequestDescriptor
from .utils import logger, merge_dicts

NO_SUPPORT_MESSAGE = "No support for AJAX request."

DEFAULT_HEADERS = {
    "User-Agent": os.getenv("AJAXLITE_USER_AGENT", "ajaxlite/0.1"),
}


def has_module(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


# Checked once per process; legacy transports are probed on every acquire().
NATIVE_SUPPORT = has_module("httpx")

if NATIVE_SUPPORT:
    import httpx
else:  # pragma: no cover
    httpx = None

LEGACY_TRANSPORTS: Tuple[str, ...] = ("requests",)


class TransportError(RuntimeError):
    """Raised when a transport cannot be created in the current environment."""


class Transport:
    """A single HTTP request whose outcome resolves :attr:`completion` once.

    Usage mirrors a browser XHR object: :meth:`open`, any number of
    :meth:`set_request_header` calls, then :meth:`send`. Subclasses provide
    :meth:`exchange` and list the exceptions that mean "the request failed on
    the wire" in :attr:`failures`.
    """

    name = "transport"
    failures: Tuple[Type[BaseException], ...] = ()

    def __init__(self, headers: Optional[Dict[str, str]] = None) -> None:
        self.request: Optional[RequestDescriptor] = None
        self.headers: Dict[str, str] = merge_dicts(DEFAULT_HEADERS, headers)
        self.completion: Optional[asyncio.Future] = None
        self._task: Optional[asyncio.Task] = None

    def open(self, request: RequestDescriptor) -> None:
        loop = asyncio.get_running_loop()
        self.request = request
        self.completion = loop.create_future()

    def set_request_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def send(self, payload: Any = None) -> None:
        if self.request is None or self.completion is None:
            raise RuntimeError("Transport must be opened before send()")
        if self._task is not None:
            raise RuntimeError("Transport handles are single use")
        self._task = asyncio.get_running_loop().create_task(self._run(payload))

    async def wait(self) -> OutcomeEnvelope:
        if self.completion is None:
            raise RuntimeError("Transport was never opened")
        return await self.completion

    async def exchange(self, request: RequestDescriptor, payload: Any) -> Tuple[int, str, str]:
        """Perform the request and return ``(status, status_text, body)``."""
        raise NotImplementedError

    async def _run(self, payload: Any) -> None:
        request, completion = self.request, self.completion
        if request is None or completion is None:
            raise RuntimeError("Transport must be opened before send()")
        try:
            status, status_text, body = await self.exchange(request, payload)
        except self.failures as exc:
            logger.warning("%s %s failed: %s", request.method, request.url, exc)
            status, status_text, body = 0, str(exc), ""
        except Exception as exc:
            if not completion.done():
                completion.set_exception(exc)
            return
        if not completion.done():
            completion.set_result(
                OutcomeEnvelope(raw_body=body, status_text=status_text, status=status, handle=self)
            )


class HttpxTransport(Transport):
    """Native asyncio transport backed by :class:`httpx.AsyncClient`."""

    name = "httpx"

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        if httpx is None:
            raise TransportError("httpx is not installed")
        super().__init__(headers)
        self.failures = (httpx.HTTPError,)
        self._transport = transport

    async def exchange(self, request: RequestDescriptor, payload: Any) -> Tuple[int, str, str]:
        async with httpx.AsyncClient(transport=self._transport) as client:
            resp = await client.request(request.method, request.url, content=payload, headers=self.headers)
            return resp.status_code, resp.reason_phrase, resp.text


class RequestsTransport(Transport):
    """Blocking :mod:`requests` call pushed onto the loop's default executor."""

    name = "requests"
    failures = (requests.RequestException,)

    async def exchange(self, request: RequestDescriptor, payload: Any) -> Tuple[int, str, str]:
        loop = asyncio.get_running_loop()
        call = functools.partial(
            requests.request,
            request.method,
            request.url,
            data=payload,
            headers=dict(self.headers),
        )
        resp = await loop.run_in_executor(None, call)
        return resp.status_code, resp.reason or "", resp.text


TransportBuilder = Callable[[], Transport]

_REGISTRY: Dict[str, TransportBuilder] = {
    HttpxTransport.name: HttpxTransport,
    RequestsTransport.name: RequestsTransport,
}


def register_transport(name: str, builder: TransportBuilder) -> None:
    """Make ``builder`` available to legacy probing under ``name``."""
    _REGISTRY[name] = builder


@dataclass(frozen=True)
class Available:
    handle: Transport


@dataclass(frozen=True)
class Unavailable:
    reason: str = NO_SUPPORT_MESSAGE


TransportResult = Union[Available, Unavailable]


class TransportFactory:
    def __init__(
        self,
        native: Optional[TransportBuilder] = HttpxTransport,
        legacy: Sequence[str] = LEGACY_TRANSPORTS,
        supports_native: Optional[bool] = None,
        registry: Optional[Mapping[str, TransportBuilder]] = None,
    ) -> None:
        self.native = native
        self.legacy = tuple(legacy)
        self.supports_native = supports_native
        self.registry = registry

    def acquire(self) -> TransportResult:
        supports_native = NATIVE_SUPPORT if self.supports_native is None else self.supports_native
        if supports_native and self.native is not None:
            return Available(self.native())
        registry = _REGISTRY if self.registry is None else self.registry
        for name in self.legacy:
            builder = registry.get(name)
            if builder is None:
                logger.debug("Transport %s is not registered", name)
                continue
            try:
                return Available(builder())
            except TransportError as exc:
                logger.debug("Transport %s unavailable: %s", name, exc)
        return Unavailable()


__all__ = [
    "Available",
    "DEFAULT_HEADERS",
    "HttpxTransport",
    "LEGACY_TRANSPORTS",
    "NATIVE_SUPPORT",
    "NO_SUPPORT_MESSAGE",
    "has_module",
    "RequestsTransport",
    "Transport",
    "TransportError",
    "TransportFactory",
    "TransportResult",
    "Unavailable",
    "register_transport",
]
