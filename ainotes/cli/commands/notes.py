"""
Note Commands.

Commands for listing, creating, editing, pinning, archiving, deleting and
refining notes. Every command works offline; notes that have not reached
the remote store are flagged as not synced.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ainotes.core.exceptions import ApplicationError, NotFoundError
from ainotes.core.logging import get_logger, log_with_source
from ainotes.schemas.note import Note, NoteCreate, NoteUpdate
from ainotes.services.factory import build_refine_service, build_sync_service
from ainotes.services.listing import partition_pinned, search_notes, sort_by_recent
from ainotes.services.refine import RefineMode, apply_refinement
from ainotes.services.sync import NoteSyncService

T = TypeVar("T")

app = typer.Typer(help="Note commands")
console = Console()
logger = get_logger(__name__)

USER_OPTION = typer.Option(
    ...,
    "--user",
    "-u",
    envvar="AINOTES_USER",
    help="User id the notes belong to",
)


def _run(operation: Callable[[NoteSyncService], Awaitable[T]]) -> T:
    """Build the sync service, run one async operation, close the remote store."""

    async def runner() -> T:
        service = build_sync_service()
        try:
            return await operation(service)
        finally:
            await service.close()

    return asyncio.run(runner())


async def _resolve(service: NoteSyncService, user: str, note_id: str) -> Note:
    note = await service.resolve(user, note_id)
    if note is None:
        raise NotFoundError(f"Note {note_id} not found on this device")
    return note


def _fail(error: ApplicationError) -> None:
    log_with_source(logger, "cli", "debug", "Command failed", code=error.code)
    console.print(f"[red]Error: {error.message}[/red]")
    raise typer.Exit(1)


def _sync_label(note: Note) -> str:
    return "[green]synced[/green]" if note.is_synced else "[yellow]not synced[/yellow]"


def _notes_table(title: str, notes: list[Note]) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Content")
    table.add_column("Updated")
    table.add_column("Sync")
    for note in notes:
        content = note.content if len(note.content) <= 60 else note.content[:57] + "..."
        table.add_row(
            str(note.id),
            note.title,
            content,
            note.updated_at.strftime("%Y-%m-%d %H:%M"),
            _sync_label(note),
        )
    return table


@app.command("list")
def list_notes(
    user: str = USER_OPTION,
    archived: bool = typer.Option(False, "--archived", "-a", help="Show the archive instead"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Substring to match"),
) -> None:
    """
    List notes, pinned first.

    Examples:
        cli.py notes list -u me
        cli.py notes list -u me --archived
        cli.py notes list -u me -s groceries
    """

    async def operation(service: NoteSyncService) -> tuple[list[Note], bool]:
        if archived:
            notes = await service.fetch_archived(user)
        else:
            notes = await service.fetch_active(user)
        return notes, service.listing_from_device

    notes, from_device = _run(operation)
    notes = sort_by_recent(search_notes(notes, search or ""))

    if from_device:
        console.print("[dim]Offline: showing device copy[/dim]")

    if not notes:
        console.print("[dim]No notes found.[/dim]")
        if search:
            console.print("[dim]Try a different search term.[/dim]")
        return

    if archived:
        console.print(_notes_table("Archive", notes))
        return

    pinned, others = partition_pinned(notes)
    if pinned:
        console.print(_notes_table("Pinned", pinned))
    if others:
        console.print(_notes_table("Notes", others))


@app.command()
def create(
    user: str = USER_OPTION,
    title: str = typer.Option("", "--title", "-t", help="Note title"),
    content: str = typer.Option("", "--content", "-c", help="Note content"),
    pin: bool = typer.Option(False, "--pin", help="Pin the note"),
    color: str = typer.Option("transparent", "--color", help="Display color"),
) -> None:
    """
    Create a note.

    Examples:
        cli.py notes create -u me -t "Groceries" -c "Milk, eggs"
    """
    data = NoteCreate(title=title, content=content, is_pinned=pin, color=color)
    note = _run(lambda service: service.create(user, data))

    if note is None:
        console.print("[yellow]Nothing to save: the note is empty.[/yellow]")
        return

    console.print(f"Created note [cyan]{note.id}[/cyan] ({_sync_label(note)})")


@app.command()
def edit(
    note_id: str = typer.Argument(..., help="Note id as shown by `notes list`"),
    user: str = USER_OPTION,
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New content"),
    color: Optional[str] = typer.Option(None, "--color", help="New display color"),
) -> None:
    """Edit a note's title, content or color."""
    data = NoteUpdate(title=title, content=content, color=color)

    async def operation(service: NoteSyncService) -> Note | None:
        note = await _resolve(service, user, note_id)
        await service.update(note.id, data)
        return await service.get_cached(note.id)

    try:
        note = _run(operation)
    except ApplicationError as e:
        _fail(e)

    status = _sync_label(note) if note else ""
    console.print(f"Updated note [cyan]{note_id}[/cyan] {status}")


@app.command()
def pin(
    note_id: str = typer.Argument(..., help="Note id as shown by `notes list`"),
    user: str = USER_OPTION,
) -> None:
    """Pin or unpin a note."""

    async def operation(service: NoteSyncService) -> bool | None:
        note = await _resolve(service, user, note_id)
        return await service.toggle_pin(note.id)

    try:
        pinned = _run(operation)
    except ApplicationError as e:
        _fail(e)

    console.print(f"Note [cyan]{note_id}[/cyan] {'pinned' if pinned else 'unpinned'}")


@app.command()
def archive(
    note_id: str = typer.Argument(..., help="Note id as shown by `notes list`"),
    user: str = USER_OPTION,
    restore: bool = typer.Option(False, "--restore", "-r", help="Move back out of the archive"),
) -> None:
    """Archive a note, or restore it with --restore."""

    async def operation(service: NoteSyncService) -> None:
        note = await _resolve(service, user, note_id)
        await service.set_archived(note.id, not restore)

    try:
        _run(operation)
    except ApplicationError as e:
        _fail(e)

    console.print(f"Note [cyan]{note_id}[/cyan] {'restored' if restore else 'archived'}")


@app.command()
def delete(
    note_id: str = typer.Argument(..., help="Note id as shown by `notes list`"),
    user: str = USER_OPTION,
) -> None:
    """Delete a note from this device and the cloud."""

    async def operation(service: NoteSyncService) -> None:
        note = await _resolve(service, user, note_id)
        await service.delete(note.id)

    try:
        _run(operation)
    except ApplicationError as e:
        _fail(e)

    console.print(f"Deleted note [cyan]{note_id}[/cyan]")


@app.command()
def pending(user: str = USER_OPTION) -> None:
    """List notes not yet confirmed by the cloud."""
    notes = _run(lambda service: service.pending(user))
    if not notes:
        console.print("[green]All notes are synced.[/green]")
        return
    console.print(_notes_table("Not synced", notes))


@app.command()
def refine(
    note_id: str = typer.Argument(..., help="Note id as shown by `notes list`"),
    user: str = USER_OPTION,
    mode: RefineMode = typer.Option(
        RefineMode.REPLACE, "--mode", "-m", help="Replace the content or append the refined text",
    ),
) -> None:
    """
    Rewrite a note's content with AI.

    Examples:
        cli.py notes refine temp-3f2a -u me
        cli.py notes refine 42 -u me --mode append
    """
    refiner = build_refine_service()

    async def operation(service: NoteSyncService) -> tuple[str, str]:
        note = await _resolve(service, user, note_id)
        refined = await refiner.refine(note.content)
        content = apply_refinement(note.content, refined, mode)
        await service.update(note.id, NoteUpdate(content=content))
        return note.content, refined

    try:
        original, refined = _run(operation)
    except ApplicationError as e:
        _fail(e)

    console.print(Panel(original, title="Original", border_style="dim"))
    console.print(Panel(refined, title="Refined", border_style="green"))
