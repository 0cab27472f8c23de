"""CLI entrypoint for context-signal."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path

from .config import load_config
from .demos import DEMOS
from .logging_utils import configure_logging
from .registry import Registry


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="context-signal",
        description="context-signal - named events and queries for asyncio",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML configuration file",
    )
    subcommands = parser.add_subparsers(dest="command")
    demo = subcommands.add_parser("demo", help="Run a bundled example")
    demo.add_argument("name", choices=sorted(DEMOS))
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Handle CLI flags and run the requested demo."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("context-signal")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"context-signal {version}")
        return

    if args.command != "demo":
        parser.print_help()
        return

    config = load_config(config_path=args.config)
    configure_logging(config["logging"])
    demo = DEMOS[args.name]

    async def _run() -> None:
        await demo(Registry.from_config(config))

    asyncio.run(_run())


if __name__ == "__main__":
    main()
