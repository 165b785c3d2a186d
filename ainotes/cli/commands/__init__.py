"""
CLI Commands.

Organized by domain/feature area.
"""

from ainotes.cli.commands.notes import app as notes_app
from ainotes.cli.commands.system import app as system_app

__all__ = [
    "notes_app",
    "system_app",
]
