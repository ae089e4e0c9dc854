"""Response body decoding."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Json:
    value: Any


@dataclass(frozen=True)
class Error:
    description: str


Decoded = Union[Text, Json, Error]


def decode_if_json(raw_body: str, data_type: str) -> Decoded:
    """Parse ``raw_body`` when ``data_type`` is ``"json"``; pass it through otherwise."""
    if data_type.lower() != "json":
        return Text(raw_body)
    try:
        return Json(json.loads(raw_body))
    except (TypeError, ValueError) as exc:
        return Error(f"Invalid JSON response: {exc}")


def unwrap(decoded: Decoded) -> Any:
    if isinstance(decoded, Error):
        return decoded.description
    return decoded.value


__all__ = ["Decoded", "Error", "Json", "Text", "decode_if_json", "unwrap"]
