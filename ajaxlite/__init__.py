"""ajaxlite package initialization."""

from importlib.metadata import version, PackageNotFoundError

from .api import AjaxClient, add_parameter, fetch_json, fetch_script, submit
from .executor import RequestExecutor, perform

__all__ = [
    "__version__",
    "AjaxClient",
    "RequestExecutor",
    "add_parameter",
    "fetch_json",
    "fetch_script",
    "perform",
    "submit",
]

try:
    __version__ = version("ajaxlite")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"
