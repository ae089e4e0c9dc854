"""Script injection into an in-process document."""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from .executor import RequestExecutor
from .utils import logger, once

READY_STATES_DONE = ("loaded", "complete")


class ScriptElement:
    """A ``<script>`` element that reports completion the way browsers do.

    Some environments signal through ``onload``, others only through
    ``onreadystatechange``; a successful load here fires both.
    """

    def __init__(self, src: str, async_: bool = True, type: str = "text/javascript") -> None:
        self.src = src
        self.async_ = async_
        self.type = type
        self.text = ""
        self.ready_state = "uninitialized"
        self.onload: Optional[Callable[[], Any]] = None
        self.onreadystatechange: Optional[Callable[[], Any]] = None
        self.onerror: Optional[Callable[[str], Any]] = None

    def set_ready_state(self, state: str) -> None:
        self.ready_state = state
        if self.onreadystatechange is not None:
            self.onreadystatechange()

    def loaded(self, source: str) -> None:
        self.text = source
        self.set_ready_state("loaded")
        self.set_ready_state("complete")
        if self.onload is not None:
            self.onload()

    def failed(self, description: str) -> None:
        logger.warning("Failed to load script %s: %s", self.src, description)
        if self.onerror is not None:
            self.onerror(description)


class Document:
    """Holds appended scripts and fetches each one as it is attached."""

    def __init__(self, executor: Optional[RequestExecutor] = None) -> None:
        self.executor = executor or RequestExecutor()
        self.body: List[ScriptElement] = []

    def append_child(self, element: ScriptElement) -> ScriptElement:
        self.body.append(element)
        element.set_ready_state("loading")
        self.executor.perform(
            element.src,
            None,
            lambda raw_body, status_text, handle: element.loaded(raw_body),
            on_error=lambda description, status_text="", handle=None: element.failed(status_text or description),
        )
        return element


def fetch_script(
    url: str,
    on_load: Callable[[], Any],
    document: Document,
    on_error: Optional[Callable[[str], Any]] = None,
) -> ScriptElement:
    """Attach a script for ``url`` to ``document`` and call ``on_load`` exactly once.

    ``on_error`` receives the failure description when the source cannot be fetched.
    """
    script = ScriptElement(url)
    callback = once(on_load)

    def on_ready_state_change() -> None:
        if script.ready_state in READY_STATES_DONE:
            callback()

    script.onload = callback
    script.onreadystatechange = on_ready_state_change
    script.onerror = on_error
    document.append_child(script)
    return script


__all__ = ["Document", "ScriptElement", "fetch_script"]
