"""Parameter encoding and the default GET parameter store."""

from __future__ import annotations

import threading
from typing import Dict, Mapping, Optional, Union
from urllib.parse import quote, urlsplit

ParamValue = Union[str, int, float, bool]
ParameterSet = Mapping[str, ParamValue]

# Characters left alone by JavaScript's encodeURIComponent.
URI_COMPONENT_SAFE = "-_.!~*'()"


def _coerce(value: ParamValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_parameters(params: Optional[ParameterSet]) -> str:
    """Build a ``key=value&...`` string with percent-escaped values."""
    if not params:
        return ""
    return "&".join(f"{key}={quote(_coerce(value), safe=URI_COMPONENT_SAFE)}" for key, value in params.items())


class ParameterStore:
    """Parameters appended to every GET query built by :class:`ajaxlite.api.AjaxClient`."""

    def __init__(self, initial: Optional[ParameterSet] = None) -> None:
        self._lock = threading.Lock()
        self._params: Dict[str, ParamValue] = dict(initial or {})

    def add(self, key: str, value: ParamValue) -> None:
        with self._lock:
            self._params[key] = value

    def current_set(self) -> Dict[str, ParamValue]:
        with self._lock:
            return dict(self._params)

    def encoded(self) -> str:
        return encode_parameters(self.current_set())


default_store = ParameterStore()


def build_query_url(url: str, params: Optional[ParameterSet] = None, store: Optional[ParameterStore] = None) -> str:
    """Append ``params`` followed by the store's pairs to ``url``."""
    pieces = [encode_parameters(params)]
    if store is not None:
        pieces.append(store.encoded())
    query = "&".join(piece for piece in pieces if piece)
    if not query:
        return url
    if url.endswith(("?", "&")):
        separator = ""
    else:
        separator = "&" if urlsplit(url).query else "?"
    return f"{url}{separator}{query}"


__all__ = [
    "ParamValue",
    "ParameterSet",
    "ParameterStore",
    "build_query_url",
    "default_store",
    "encode_parameters",
]
