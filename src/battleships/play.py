#!/usr/bin/env python
"""Run the Battleships match server.

Usage:
    battleships                         # Listen on 0.0.0.0:3000 (or $PORT)
    battleships --port 8080             # Custom port
    battleships --seed 42               # Reproducible first-turn draws
    battleships --validate              # Log state invariant violations
"""

import argparse
import asyncio
import logging
import random

from rich.console import Console
from rich.panel import Panel

from battleships import __version__
from battleships.engine import SessionManager
from battleships.models import FLEET_CONFIG, BOARD_SIZE
from battleships.server import ServerConfig, run_server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Battleships - two-seat naval combat server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to listen on (default: $BATTLESHIPS_HOST or 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: $PORT or 3000)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the first-turn draw"
    )
    parser.add_argument(
        "--chat-max-length",
        type=int,
        default=None,
        help="Truncate chat messages to this many characters (default: 400)"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check state invariants after every event and log violations"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """Environment values first, then any command-line overrides."""
    config = ServerConfig.from_env()
    overrides = {
        "host": args.host,
        "port": args.port,
        "seed": args.seed,
        "chat_max_length": args.chat_max_length,
        "log_level": args.log_level,
    }
    updates = {key: value for key, value in overrides.items() if value is not None}
    if args.validate:
        updates["validate_state"] = True
    return ServerConfig.model_validate({**config.model_dump(), **updates})


def print_banner(console: Console, config: ServerConfig) -> None:
    fleet = ", ".join(f"{spec.name} ({spec.size})" for spec in FLEET_CONFIG)
    console.print(Panel(
        f"[bold]Battleships server v{__version__}[/bold]\n"
        f"Listening on ws://{config.host}:{config.port}\n"
        f"Board: {BOARD_SIZE}x{BOARD_SIZE}  Fleet: {fleet}\n"
        f"Seed: {config.seed if config.seed is not None else 'random'}"
        f"{'  [yellow]validation on[/yellow]' if config.validate_state else ''}",
        title="Battleships",
        border_style="cyan",
    ))


def main() -> int:
    """Main entry point."""
    args = build_parser().parse_args()
    config = load_config(args)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(name)s: %(message)s",
    )

    manager = SessionManager(
        rng=random.Random(config.seed),
        chat_max_length=config.chat_max_length,
        validate=config.validate_state,
    )

    console = Console()
    print_banner(console, config)

    try:
        asyncio.run(run_server(manager, config.host, config.port))
    except KeyboardInterrupt:
        console.print("\n[dim]Server stopped.[/dim]")

    return 0


if __name__ == "__main__":
    exit(main())
