"""
AI Notes.

- core/: Configuration, logging, exceptions, concurrency, resilience
- schemas/: Note data model and field sets
- repositories/: Local device cache and remote note stores
- services/: Reconciliation engine, listing helpers, AI refine
- cli/: Command-line presentation layer (Typer + Rich)
"""
