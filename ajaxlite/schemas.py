"""Dataclasses describing a request and its outcome."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .transport import Transport

SUCCESS_STATUS = 200


@dataclass(frozen=True)
class RequestDescriptor:
    url: str
    method: str
    body: Any = None
    is_file_upload: bool = False


@dataclass(frozen=True)
class OutcomeEnvelope:
    raw_body: str
    status_text: str
    status: int = 0
    handle: Optional["Transport"] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS


__all__ = ["RequestDescriptor", "OutcomeEnvelope", "SUCCESS_STATUS"]
