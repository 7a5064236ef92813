"""
Command line entry point.

Usage:
    roastlog check [--level LEVEL] [--local]
    roastlog demo [--level LEVEL] [--local] [--timeout SECONDS]

Examples:
    # Verify ANTHROPIC_API_KEY and show the effective configuration
    roastlog check

    # Print a few sample lines with savage local annotations
    roastlog demo --level savage --local
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from roastlog.config import ConfigurationError, example_env, load_config, validate_env
from roastlog.humor.models import HumorLevel

DEMO_LINES: tuple[tuple[Any, ...], ...] = (
    ("Server started on port 8080",),
    ("Error: database connection failed",),
    ("User data:", {"id": 42, "name": "Ada", "roles": ["admin", "dev"]}),
    ("All tests passed, deployment complete",),
    ([1, 2, 3, 4, 5],),
)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.level:
        overrides["humor_level"] = args.level
    if args.local:
        overrides["api_key"] = None
    return overrides


def cmd_check(args: argparse.Namespace) -> int:
    try:
        config = load_config(_overrides(args))
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    print("Effective configuration:")
    print(json.dumps(config.redacted(), indent=2))

    if args.local:
        print("\nLocal mode: remote generation disabled, API key not required.")
        return 0

    valid, errors = validate_env()
    if valid:
        print("\nEnvironment OK: remote generation available.")
        return 0

    print("\nEnvironment problems:", file=sys.stderr)
    for error in errors:
        print(f"  - {error}", file=sys.stderr)
    print("\nExample .env:\n", file=sys.stderr)
    print(example_env(), file=sys.stderr)
    return 1


def cmd_demo(args: argparse.Namespace) -> int:
    from roastlog.roast import RoastLog

    try:
        roast = RoastLog(frequency=100, enabled=True, **_overrides(args))
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        for values in DEMO_LINES:
            print(*values)
            # One line at a time keeps each annotation under its own line
            roast.flush(timeout=args.timeout)
    finally:
        roast.cleanup()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roastlog", description="Humorous annotations for print() output"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--level",
            choices=[level.value for level in HumorLevel],
            help="Humor level (default: from environment/config, else medium)",
        )
        sub.add_argument(
            "--local", action="store_true", help="Use only the local phrase table"
        )

    check = subparsers.add_parser("check", help="Validate environment and show configuration")
    add_common(check)
    check.set_defaults(func=cmd_check)

    demo = subparsers.add_parser("demo", help="Print sample lines with annotations")
    add_common(demo)
    demo.add_argument(
        "--timeout", type=float, default=30.0, help="Seconds to wait for each annotation"
    )
    demo.set_defaults(func=cmd_demo)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
