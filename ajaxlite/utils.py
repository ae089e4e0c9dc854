"""Utility helpers for ajaxlite."""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "ajaxlite"


def get_logger() -> logging.Logger:
    """Return a module-level logger configured with rich if not already."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)
    return logger


logger = get_logger()


def set_log_level(level: str) -> None:
    """Allow callers (e.g. CLI) to adjust logging verbosity at runtime."""

    level_value = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level_value)


console = Console()


def once(func: Callable[..., Any]) -> Callable[..., None]:
    """Wrap ``func`` so that only the first call goes through."""
    lock = threading.Lock()
    fired = False

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        nonlocal fired
        with lock:
            if fired:
                return
            fired = True
        func(*args, **kwargs)

    return wrapper


def merge_dicts(base: Dict[str, Any], override: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    result = base.copy()
    if override:
        result.update({k: v for k, v in override.items() if v is not None})
    return result
