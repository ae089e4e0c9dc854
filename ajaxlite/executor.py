"""Request dispatch and outcome routing."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from .params import encode_parameters
from .schemas import OutcomeEnvelope, RequestDescriptor
from .transport import Available, Transport, TransportFactory
from .utils import logger

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"

Callback = Callable[..., Any]


def _noop(*args: Any) -> None:
    return None


class RequestExecutor:
    """Configure a transport for one request and route its outcome."""

    def __init__(self, factory: Optional[TransportFactory] = None) -> None:
        self.factory = factory or TransportFactory()

    def perform(
        self,
        url: str,
        body: Any,
        on_success: Callback,
        method: str = "GET",
        on_error: Optional[Callback] = None,
        is_file_upload: bool = False,
    ) -> Optional[Transport]:
        """Dispatch a request and return its handle before it completes.

        ``on_success(raw_body, status_text, handle)`` fires for status 200 and
        ``on_error(raw_body, status_text, handle)`` for everything else. When no
        transport can be acquired, ``on_error`` receives only the reason and
        ``None`` is returned.
        """
        on_error = on_error or _noop
        method = method.upper()
        if method == "POST" and body is None:
            body = {}

        result = self.factory.acquire()
        if not isinstance(result, Available):
            logger.debug("No transport for %s %s: %s", method, url, result.reason)
            on_error(result.reason)
            return None

        handle = result.handle
        request = RequestDescriptor(url=url, method=method, body=body, is_file_upload=is_file_upload)
        handle.open(request)

        if method == "POST":
            if is_file_upload:
                handle.set_request_header("Content-type", MULTIPART_CONTENT_TYPE)
                payload = body
            else:
                handle.set_request_header("Content-type", FORM_CONTENT_TYPE)
                payload = encode_parameters(body)
        else:
            payload = None

        handle.set_request_header("X-Requested-With", "XMLHttpRequest")
        if handle.completion is None:
            raise RuntimeError("Transport did not create a completion future")
        handle.completion.add_done_callback(lambda future: self._route(request, future, on_success, on_error))
        handle.send(payload)
        return handle

    @staticmethod
    def _route(
        request: RequestDescriptor,
        future: "asyncio.Future[OutcomeEnvelope]",
        on_success: Callback,
        on_error: Callback,
    ) -> None:
        if future.cancelled():
            logger.debug("%s %s was cancelled before completion", request.method, request.url)
            return
        exc = future.exception()
        if exc is not None:
            logger.error("%s %s raised %r", request.method, request.url, exc, exc_info=exc)
            on_error(str(exc), "", None)
            return
        envelope = future.result()
        if envelope.succeeded:
            on_success(envelope.raw_body, envelope.status_text, envelope.handle)
        else:
            logger.debug("%s %s returned %s %s", request.method, request.url, envelope.status, envelope.status_text)
            on_error(envelope.raw_body, envelope.status_text, envelope.handle)


def perform(
    url: str,
    body: Any,
    on_success: Callback,
    method: str = "GET",
    on_error: Optional[Callback] = None,
    is_file_upload: bool = False,
) -> Optional[Transport]:
    return RequestExecutor().perform(url, body, on_success, method, on_error, is_file_upload)


__all__ = ["RequestExecutor", "perform", "FORM_CONTENT_TYPE", "MULTIPART_CONTENT_TYPE"]
