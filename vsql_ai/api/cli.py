"""
Command-line adapter for the vsql_ai extension functions.

Architectural role:
- Runs one extension function for one set of arguments from a terminal.
- Shares the extension definition, provider registry and configuration with
  the HTTP adapter.

Input handling:
- `--text` may be omitted, in which case the text is read from stdin.
- `--api-key` falls back to the `VSQL_AI_API_KEY` environment variable; the
  key is never printed.

Exit codes:
- 0: value or NULL printed to stdout.
- 1: function returned an error (printed to stderr).
- 2: usage or configuration error.
"""

import argparse
import logging
import os
import sys
from typing import Sequence

from vsql_ai.api.extension import build_extension
from vsql_ai.api.functions import ResultType
from vsql_ai.config import load_settings

API_KEY_ENV = "VSQL_AI_API_KEY"


def build_parser(function_names: Sequence[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vsql-ai", description="Call AI provider functions")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List available functions")

    for name in function_names:
        function_parser = subparsers.add_parser(name, help=f"Run {name}")
        function_parser.add_argument("--provider", required=True, help="Provider name (e.g. anthropic, google)")
        function_parser.add_argument("--model", required=True, help="Model identifier")
        function_parser.add_argument("--api-key", default=None, help=f"API key (defaults to ${API_KEY_ENV})")
        function_parser.add_argument("--text", default=None, help="Input text (defaults to stdin)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    extension = build_extension(settings)
    parser = build_parser(list(extension.functions))
    args = parser.parse_args(argv)

    if args.command == "list":
        for function in extension.functions.values():
            print(f"{function.name}({', '.join(function.params)})")
        return 0

    api_key = args.api_key if args.api_key is not None else os.getenv(API_KEY_ENV)
    text = args.text if args.text is not None else sys.stdin.read()

    result = extension.call(args.command, args.provider, args.model, api_key, text)

    if result.type is ResultType.ERROR:
        print(result.error_msg, file=sys.stderr)
        return 1
    if result.type is ResultType.NULL:
        print("NULL")
        return 0

    print(result.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
