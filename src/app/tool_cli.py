# CLI for listing and invoking tool adapters from the command line.

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from src.config import settings
from tools.tool_registry import ToolRegistry, tool_registry

logger = logging.getLogger(__name__)


def parse_param(raw: str) -> tuple:
    """Split ``key=value``; the value is decoded as JSON when possible."""
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got '{raw}'")
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tool-cli", description="List and invoke agent tool adapters")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List registered tools")

    invoke = subparsers.add_parser("invoke", help="Invoke a tool and print the result as JSON")
    invoke.add_argument("tool", help="Tool name, e.g. gateway_tool")
    invoke.add_argument("--param", "-p", action="append", type=parse_param, default=[],
                        help="Tool parameter as key=value (JSON values allowed); repeatable")
    invoke.add_argument("--timeout", type=float, default=None, help="Timeout override in seconds")
    return parser


def main(argv: Optional[List[str]] = None, registry: Optional[ToolRegistry] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    logging.getLogger("httpx").setLevel(logging.WARNING)
    registry = registry or tool_registry

    if args.command == "list":
        for name in registry.list_tools():
            info = registry.get_tool_info(name)
            print(f"{name:<22} {info['target_service']:<13} {info['display_name']}")
        if not registry.list_tools():
            print("No tools configured. Set GATEWAY_API_KEY, EVALUATOR_API_KEY or VECTOR_STORE_URL.")
        return 0

    parameters: Dict[str, Any] = dict(args.param)
    try:
        result = registry.invoke_tool(args.tool, parameters, args.timeout)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    print(result.model_dump_json(indent=2))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
