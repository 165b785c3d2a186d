"""
CLI Module.

Command-line presentation layer built with Typer and Rich.

Architecture:
- CLI is a thin presentation layer
- All note logic lives in ainotes.services
- Works offline; sync state is shown per note

Usage:
    python cli.py --help
    python cli.py notes list -u me
    python cli.py notes create -u me -t "Title" -c "Content"
"""
