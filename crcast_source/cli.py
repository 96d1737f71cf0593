"""CLI for resolving CrCast decks."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from crcast_source.config import AppConfig, load_config
from crcast_source.crcast import MetaResolver
from crcast_source.errors import SourceNotFoundError, SourceServiceError
from crcast_source.models import Resolution, Slot, SourceRef

console = Console()

EXIT_NOT_FOUND = 1
EXIT_SERVICE_ERROR = 2


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return

    args.func(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crcast-source",
        description="Fetch CrCast decks as call and response cards",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (default: config.yaml)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # resolve
    resolve_parser = subparsers.add_parser("resolve", help="Fetch one or more decks")
    resolve_parser.add_argument("deck_codes", nargs="+", metavar="DECK_CODE")
    resolve_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the cards as JSON instead of a summary table",
    )
    resolve_parser.set_defaults(func=_cmd_resolve)

    # info
    info_parser = subparsers.add_parser("info", help="Show client settings")
    info_parser.set_defaults(func=_cmd_info)

    return parser


# ------------------------------------------------------------------
# Command handlers
# ------------------------------------------------------------------


def _cmd_resolve(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    results = asyncio.run(_run_resolve(config, args.deck_codes))

    resolved = [(code, r) for code, r in results if isinstance(r, Resolution)]
    if args.json:
        print(json.dumps({code: _resolution_to_dict(r) for code, r in resolved}, indent=2))
    elif resolved:
        table = Table(title="Decks")
        table.add_column("Code", style="cyan")
        table.add_column("Name")
        table.add_column("Calls", justify="right")
        table.add_column("Responses", justify="right")
        table.add_column("URL")
        for code, r in resolved:
            s = r.summary
            table.add_row(code, s.name, str(s.call_count), str(s.response_count), s.canonical_url or "")
        console.print(table)

    exit_code = 0
    for code, r in results:
        if isinstance(r, SourceNotFoundError):
            console.print(f"[red]Deck {code} not found[/red]")
            exit_code = exit_code or EXIT_NOT_FOUND
        elif isinstance(r, SourceServiceError):
            console.print(f"[yellow]CrCast unavailable for {code}, try again later:[/yellow] {r.reason}")
            exit_code = EXIT_SERVICE_ERROR
    if exit_code:
        sys.exit(exit_code)


async def _run_resolve(
    config: AppConfig, deck_codes: List[str]
) -> List[Tuple[str, Union[Resolution, BaseException]]]:
    async with MetaResolver(config.crcast) as meta:
        results = await asyncio.gather(
            *(meta.resolver(SourceRef.crcast(code)).resolve() for code in deck_codes),
            return_exceptions=True,
        )
    for r in results:
        # Only classified failures are reported; anything else is a bug.
        if isinstance(r, BaseException) and not isinstance(
            r, (SourceNotFoundError, SourceServiceError)
        ):
            raise r
    return list(zip(deck_codes, results))


def _cmd_info(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    meta = MetaResolver(config.crcast)
    info = meta.client_info()

    table = Table(title="CrCast client")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Base URL", info.base_url)
    table.add_row("Timeout", f"{config.crcast.timeout_ms} ms")
    table.add_row("Connections", str(meta.pool.max_size))
    table.add_row("Cacheable", str(meta.cache))
    console.print(table)


def _resolution_to_dict(resolution: Resolution) -> Dict[str, Any]:
    summary = resolution.summary
    return {
        "name": summary.name,
        "url": summary.canonical_url,
        "calls": [
            [[{} if isinstance(p, Slot) else p for p in line] for line in call.parts]
            for call in resolution.templates.calls
        ],
        "responses": [r.text for r in resolution.templates.responses],
    }
