"""Command line interface for ajaxlite."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from typing import Any, Dict, List, Optional, Sequence

from .api import AjaxClient
from .params import ParameterStore, build_query_url
from .utils import console, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ajaxlite", description="Issue AJAX-style HTTP requests")
    parser.add_argument(
        "--log-level",
        default=os.getenv("AJAXLITE_LOG_LEVEL", "INFO"),
        help="Python logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="GET a URL")
    get.add_argument("url")
    get.add_argument("-p", "--param", action="append", default=[], help="Query parameter as key=value")
    get.add_argument("--json", action="store_true", help="Decode the response as JSON")

    post = sub.add_parser("post", help="POST form data to a URL")
    post.add_argument("url")
    post.add_argument("-d", "--data", action="append", default=[], help="Form field as key=value")
    post.add_argument("--data-type", default="text", choices=["text", "json"])

    return parser


def _parse_pairs(pairs: List[str]) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SystemExit(f"Expected key=value, got {pair!r}")
        result[key] = value
    return result


async def _run(args: argparse.Namespace, client: AjaxClient) -> Dict[str, Any]:
    outcome: Dict[str, Any] = {}

    def on_success(value: Any, status_text: str = "", handle: Any = None) -> None:
        outcome.update(ok=True, value=value, status_text=status_text)

    def on_error(value: Any, status_text: str = "", handle: Any = None) -> None:
        outcome.update(ok=False, value=value, status_text=status_text)

    if args.command == "get":
        params = _parse_pairs(args.param)
        if args.json:
            handle = client.fetch_json(args.url, on_success, on_error, params)
        else:
            url = build_query_url(args.url, params, client.store)
            handle = client.executor.perform(url, None, on_success, "GET", on_error)
    else:
        handle = client.submit(args.url, _parse_pairs(args.data), on_success, on_error, args.data_type)

    if handle is not None and handle.completion is not None:
        # Routing callbacks were registered first, so they run before this wakes up.
        await asyncio.wait({handle.completion})
    return outcome


def run_request(args: argparse.Namespace, client: Optional[AjaxClient] = None) -> Any:
    set_log_level(args.log_level)
    client = client or AjaxClient(store=ParameterStore())
    outcome = asyncio.run(_run(args, client))
    if not outcome.get("ok"):
        raise SystemExit(f"Request failed: {outcome.get('status_text') or ''} {outcome.get('value')!s}".strip())
    value = outcome["value"]
    if isinstance(value, str):
        console.print(value, markup=False, highlight=False)
    else:
        console.print_json(json.dumps(value))
    return value


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    run_request(args)


if __name__ == "__main__":  # pragma: no cover
    main()
