#!/usr/bin/env python3
"""
AI Notes CLI.

Offline-first notes with cloud sync and AI refine.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python cli.py --help                                  # Show help

    # Notes
    python cli.py notes list -u me                       # Active notes, pinned first
    python cli.py notes list -u me --archived            # Archive view
    python cli.py notes list -u me -s milk               # Substring search
    python cli.py notes create -u me -t "Title" -c "Body"
    python cli.py notes edit <id> -u me -c "New body"
    python cli.py notes pin <id> -u me                   # Toggle pin
    python cli.py notes archive <id> -u me [--restore]
    python cli.py notes delete <id> -u me
    python cli.py notes pending -u me                    # Notes not yet synced
    python cli.py notes refine <id> -u me [--mode append]

    # System info
    python cli.py system info                            # Show app info
    python cli.py system config                          # Show configuration

Options:
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
    --help            Show help message

The user id may also be given with the AINOTES_USER environment variable.
"""

import sys
from pathlib import Path

import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ainotes.cli.commands import notes_app, system_app

app = typer.Typer(
    name="ainotes",
    help="AI Notes CLI - offline-first notes with cloud sync and AI refine.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Register command groups
app.add_typer(notes_app, name="notes")
app.add_typer(system_app, name="system")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    AI Notes CLI.

    Notes are saved on this device first and synced to the cloud when it
    is reachable.
    """
    from ainotes.core.config import validate_project_root
    from ainotes.core.logging import setup_logging

    validate_project_root()

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging()


if __name__ == "__main__":
    app()
