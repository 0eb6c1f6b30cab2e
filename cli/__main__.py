"""Intimex assistant maintenance CLI."""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import httpx

from cli.commands.classify import run_classify
from cli.commands.datasets_info import run_datasets_info


def _command_ask(args: argparse.Namespace) -> int:
    api_base = args.api.rstrip("/")
    payload = {"message": args.message, "device_id": args.device_id}
    try:
        with httpx.Client(timeout=args.timeout) as client:
            response = client.post(f"{api_base}/chat", json=payload)
            response.raise_for_status()
            body = response.json()
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}")
        if getattr(exc, "response", None) is not None:
            try:
                print(f"Error detail: {exc.response.json()}")
            except ValueError:
                print(f"Response text: {exc.response.text}")
        return 1

    print(f"[{body.get('section')}] {body.get('section_label')}")
    print(body.get("reply", ""))
    if body.get("download_url"):
        print(f"Download: {api_base}{body['download_url']}")
    return 0


def _command_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from app.config import settings

    uvicorn.run(
        "app.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="intimex", description="Intimex assistant maintenance CLI")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    info_parser = subparsers.add_parser(
        "datasets:info",
        help="Fetch the reference tables and show row counts and columns",
    )
    info_parser.add_argument(
        "sources",
        nargs="*",
        help="Source names (company, personnel); all when omitted",
    )
    info_parser.set_defaults(func=lambda a: run_datasets_info(a.sources))

    classify_parser = subparsers.add_parser(
        "classify",
        help="Show the topic, search strategy and selected rows for a question",
    )
    classify_parser.add_argument("question", help="Question text")
    classify_parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip fetching the dataset",
    )
    classify_parser.add_argument("--show", type=int, default=10, help="Rows to print (default: 10)")
    classify_parser.set_defaults(
        func=lambda a: run_classify(a.question, offline=a.offline, show=a.show)
    )

    ask_parser = subparsers.add_parser("ask", help="Send a question to a running API via POST /chat")
    ask_parser.add_argument("message", help="Question text")
    ask_parser.add_argument(
        "--api",
        default="http://localhost:3000",
        help="API base URL (default: http://localhost:3000).",
    )
    ask_parser.add_argument("--device-id", default=None, help="Optional device identifier.")
    ask_parser.add_argument(
        "--timeout",
        type=float,
        default=90.0,
        help="HTTP timeout in seconds (default: 90).",
    )
    ask_parser.set_defaults(func=_command_ask)

    serve_parser = subparsers.add_parser("serve", help="Run the API with uvicorn")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")
    serve_parser.set_defaults(func=_command_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
