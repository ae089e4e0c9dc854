"""High-level request helpers for ajaxlite."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .decoding import Error, decode_if_json, unwrap
from .executor import Callback, RequestExecutor
from .params import ParameterSet, ParameterStore, ParamValue, build_query_url, default_store
from .script import Document, ScriptElement
from .script import fetch_script as _fetch_script
from .transport import Transport, TransportFactory
from .utils import logger


def default_error_handler(*args: Any) -> None:
    """Log a failure that the caller did not ask to handle."""
    logger.warning("Caught exception: %s", args[0] if args else "Unknown error")


class AjaxClient:
    """Convenience layer binding a transport factory, a parameter store and a document."""

    def __init__(
        self,
        factory: Optional[TransportFactory] = None,
        store: Optional[ParameterStore] = None,
        document: Optional[Document] = None,
    ) -> None:
        self.executor = RequestExecutor(factory)
        self.store = store if store is not None else default_store
        self.document = document or Document(self.executor)

    def add_parameter(self, key: str, value: ParamValue) -> None:
        self.store.add(key, value)

    def fetch_json(
        self,
        url: str,
        on_success: Callback,
        on_error: Optional[Callback] = None,
        params: Optional[ParameterSet] = None,
    ) -> Optional[Transport]:
        """GET ``url`` with ``params`` plus the store's parameters and decode JSON."""
        on_error = on_error or default_error_handler
        url = build_query_url(url, params, self.store)

        def handle_success(raw_body: str, status_text: str, handle: Transport) -> None:
            decoded = decode_if_json(raw_body, "json")
            if isinstance(decoded, Error):
                on_error(decoded.description, status_text, handle)
                return
            on_success(decoded.value, status_text, handle)

        def handle_error(value: Any, status_text: str = "", handle: Optional[Transport] = None) -> None:
            on_error(value, status_text, handle)

        return self.executor.perform(url, None, handle_success, "GET", handle_error)

    def submit(
        self,
        url: str,
        data: Any,
        on_success: Callback,
        on_error: Optional[Callback] = None,
        data_type: str = "text",
        is_file_upload: bool = False,
    ) -> Optional[Transport]:
        """POST ``data`` and decode both success and failure bodies per ``data_type``.

        A failure body that does not decode is handed to ``on_error`` as raw text.
        """
        on_error = on_error or default_error_handler
        data_type = data_type.lower()

        def handle_success(raw_body: str, status_text: str, handle: Transport) -> None:
            decoded = decode_if_json(raw_body, data_type)
            if isinstance(decoded, Error):
                on_error(decoded.description, status_text, handle)
                return
            on_success(decoded.value, status_text, handle)

        def handle_error(raw_body: str, status_text: str = "", handle: Optional[Transport] = None) -> None:
            decoded = decode_if_json(raw_body, data_type)
            value = raw_body if isinstance(decoded, Error) else unwrap(decoded)
            on_error(value, status_text, handle)

        return self.executor.perform(url, data, handle_success, "POST", handle_error, is_file_upload)

    def fetch_script(
        self,
        url: str,
        on_load: Callable[[], Any],
        on_error: Optional[Callable[[str], Any]] = None,
    ) -> ScriptElement:
        return _fetch_script(url, on_load, self.document, on_error)


_default_client: Optional[AjaxClient] = None


def get_client() -> AjaxClient:
    global _default_client
    if _default_client is None:
        _default_client = AjaxClient()
    return _default_client


def fetch_json(
    url: str,
    on_success: Callback,
    on_error: Optional[Callback] = None,
    params: Optional[ParameterSet] = None,
) -> Optional[Transport]:
    return get_client().fetch_json(url, on_success, on_error, params)


def submit(
    url: str,
    data: Any,
    on_success: Callback,
    on_error: Optional[Callback] = None,
    data_type: str = "text",
    is_file_upload: bool = False,
) -> Optional[Transport]:
    return get_client().submit(url, data, on_success, on_error, data_type, is_file_upload)


def fetch_script(
    url: str,
    on_load: Callable[[], Any],
    on_error: Optional[Callable[[str], Any]] = None,
) -> ScriptElement:
    return get_client().fetch_script(url, on_load, on_error)


def add_parameter(key: str, value: ParamValue) -> None:
    """Add ``key=value`` to every later GET issued through the module-level helpers."""
    get_client().add_parameter(key, value)


__all__ = [
    "AjaxClient",
    "add_parameter",
    "default_error_handler",
    "fetch_json",
    "fetch_script",
    "get_client",
    "submit",
]
