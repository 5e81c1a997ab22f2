"""
CLI commands for GitHub Gist synchronization.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from settings_sync.config.user_config import (
    clear_gist_id,
    get_gist_id,
    get_proxy,
    get_public,
    get_timeout,
    set_gist_id,
)
from settings_sync.sync.differ import build_file_set, diff_files, is_protected
from settings_sync.sync.exceptions import (
    GistNotFoundError,
    SyncError,
    TransportError,
    UnauthorizedError,
)
from settings_sync.sync.gist_client import GistClient, GistConfig
from settings_sync.sync.models import Upload, Visibility
from settings_sync.sync.orchestrator import Existence, SyncOrchestrator
from settings_sync.sync.token_manager import TokenManager


app = typer.Typer(help="GitHub Gist synchronization commands")
console = Console()
logger = logging.getLogger(__name__)


def _build_client(token: Optional[str] = None) -> GistClient:
    """Create a Gist client from the stored token and user config."""
    if token is None:
        token = TokenManager().get_token()
    return GistClient(GistConfig(token=token, proxy=get_proxy(), timeout=get_timeout()))


def _fail(error: SyncError) -> None:
    """Print a category-specific message and exit with status 1."""
    if isinstance(error, UnauthorizedError):
        console.print(f"[red]✗ Authentication failed:[/red] {error}")
        console.print("[dim]Run 'settings-sync gist set-token <token>' with a token that has the 'gist' scope.[/dim]")
    elif isinstance(error, GistNotFoundError):
        console.print(f"[red]✗ Gist not found:[/red] {error}")
        console.print("[dim]Check the Gist id, or push without --no-upsert to create a new Gist.[/dim]")
    elif isinstance(error, TransportError):
        console.print(f"[red]✗ Connection error:[/red] {error}")
        if error.status_code:
            console.print(f"[dim]GitHub answered HTTP {error.status_code}.[/dim]")
    else:
        console.print(f"[red]✗ Error: {error}[/red]")
    raise typer.Exit(1)


def _read_uploads(paths: list[Path]) -> list[Upload]:
    uploads = []
    for path in paths:
        if not path.is_file():
            console.print(f"[yellow]⚠ Skipping missing file: {path}[/yellow]")
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            console.print(f"[yellow]⚠ Skipping non UTF-8 file: {path}[/yellow]")
            continue
        uploads.append(Upload(remote_name=path.name, content=content))
    return uploads


@app.command()
def push(
    files: list[Path] = typer.Argument(..., help="Local files to store in the Gist"),
    gist_id: Optional[str] = typer.Option(None, "--gist-id", help="Gist ID (default: configured Gist)"),
    no_upsert: bool = typer.Option(False, "--no-upsert", help="Fail instead of creating a new Gist"),
    public: Optional[bool] = typer.Option(None, "--public/--private", help="Visibility of a newly created Gist"),
    strict: bool = typer.Option(False, "--strict", help="Never create a Gist when the existing one cannot be reached"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the changes without writing to the Gist"),
):
    """
    Upload local files to the Gist, creating it if needed.

    Remote files missing locally are deleted, except settings and
    keybindings files.
    """
    gist_id = gist_id or get_gist_id()
    uploads = _read_uploads(files)
    if not any(upload.content for upload in uploads):
        console.print("[red]✗ No files with content to push[/red]")
        raise typer.Exit(1)
    if public is None:
        public = get_public()

    with _build_client() as client:
        orchestrator = SyncOrchestrator(
            client,
            visibility=Visibility.from_public_flag(public),
            strict_existence=strict,
        )
        try:
            if dry_run:
                _show_plan(orchestrator, gist_id, uploads)
                return

            console.print("Pushing to Gist...", end="")
            gist = orchestrator.reconcile(gist_id, uploads, upsert=not no_upsert)
        except SyncError as e:
            console.print()
            _fail(e)

    console.print(" [green]✓ Done[/green]")
    if gist.id != gist_id:
        set_gist_id(gist.id)
        console.print(f"[green]✓[/green] Created new Gist: {gist.id}")

    table = Table(show_header=False, box=None)
    table.add_row("Gist ID:", gist.id)
    table.add_row("Files:", str(len(gist.files)))
    if gist.html_url:
        table.add_row("URL:", gist.html_url)
    console.print(table)


def _show_plan(orchestrator: SyncOrchestrator, gist_id: Optional[str], uploads: list[Upload]) -> None:
    check = orchestrator.exists(gist_id)
    if check.state is Existence.FAILED:
        raise check.error

    local_files = build_file_set(uploads)
    if check.state is Existence.ABSENT:
        names = [name for name, entry in local_files.items() if entry.has_content]
        console.print(f"A new Gist would be created with {len(names)} file(s):")
        for name in names:
            console.print(f"  [green]+[/green] {name}")
        return

    change_set = diff_files(local_files, check.document.files)
    if change_set is None:
        console.print("[yellow]Nothing to sync[/yellow]")
        return

    for name in change_set.writes:
        marker = "~" if name in check.document.files else "+"
        console.print(f"  [green]{marker}[/green] {name}")
    for name in change_set.deletions:
        console.print(f"  [red]-[/red] {name}")


@app.command()
def pull(
    gist_id: Optional[str] = typer.Option(None, "--gist-id", help="Gist ID (default: configured Gist)"),
    dest: Path = typer.Option(Path("."), "--dest", "-d", help="Directory to write the files to"),
):
    """
    Download every file of the Gist into a directory.
    """
    gist_id = gist_id or get_gist_id()
    if not gist_id:
        console.print("[yellow]No Gist configured. Run 'settings-sync gist push' first.[/yellow]")
        raise typer.Exit(1)

    written = []
    with _build_client() as client:
        try:
            gist = client.fetch(gist_id)
            dest.mkdir(parents=True, exist_ok=True)
            for filename in gist.files:
                content = client.read_file(gist, filename)
                (dest / filename).write_text(content, encoding="utf-8")
                written.append(filename)
        except SyncError as e:
            _fail(e)

    console.print(f"[green]✓[/green] Pulled {len(written)} file(s) into {dest}")
    for filename in written:
        console.print(f"  {filename}")


@app.command()
def status():
    """
    Show synchronization status.
    """
    token_manager = TokenManager()
    gist_id = get_gist_id()
    gist_label = None

    table = Table(title="Settings Sync", show_header=False, box=None)
    table.add_row("Token:", token_manager.get_storage_location())

    if not gist_id and token_manager.has_token():
        # Adopt a Gist created by another machine.
        with _build_client(token_manager.get_token()) as client:
            try:
                found = client.find_gist_by_description(SyncOrchestrator.GIST_DESCRIPTION)
            except SyncError as e:
                logger.debug("Gist lookup by description failed: %s", e)
                found = None
        if found is not None:
            gist_id = found.id
            set_gist_id(gist_id)
            gist_label = f"{gist_id} [dim](found by description, saved)[/dim]"

    table.add_row("Gist ID:", gist_label or gist_id or "Not configured")
    table.add_row("Proxy:", get_proxy() or "None")

    if gist_id:
        with _build_client(token_manager.get_token()) as client:
            check = SyncOrchestrator(client).exists(gist_id)
        if check.state is Existence.EXISTS:
            table.add_row("Gist:", f"[green]✓ Found[/green] ({len(check.document.files)} files)")
            if check.document.updated_at:
                table.add_row("Last update:", check.document.updated_at)
        elif check.state is Existence.ABSENT:
            table.add_row("Gist:", "[red]✗ Not found[/red]")
        else:
            table.add_row("Gist:", f"[red]✗ {check.error}[/red]")

    console.print(table)


@app.command()
def info(
    gist_id: Optional[str] = typer.Option(None, "--gist-id", help="Gist ID (default: configured Gist)"),
):
    """
    Show detailed Gist information.
    """
    gist_id = gist_id or get_gist_id()
    if not gist_id:
        console.print("[yellow]No Gist found[/yellow]")
        return

    with _build_client() as client:
        try:
            gist = client.fetch(gist_id)
        except SyncError as e:
            _fail(e)

    console.print(f"\n[bold cyan]{gist.description or gist.id}[/bold cyan]")
    if gist.html_url:
        console.print(f"URL: {gist.html_url}")
    if gist.created_at:
        console.print(f"Created: {gist.created_at}")
    if gist.updated_at:
        console.print(f"Updated: {gist.updated_at}")
    console.print(f"Public: {'Yes' if gist.public else 'No'}")

    console.print("\n[bold]Files:[/bold]")
    files_table = Table()
    files_table.add_column("Filename")
    files_table.add_column("Size", justify="right")
    files_table.add_column("Protected")

    for filename, entry in gist.files.items():
        size = entry.size if entry is not None and entry.size is not None else 0
        files_table.add_row(filename, f"{size:,} bytes", "Yes" if is_protected(filename) else "")

    console.print(files_table)


@app.command()
def delete(
    gist_id: Optional[str] = typer.Option(None, "--gist-id", help="Gist ID (default: configured Gist)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """
    Delete the Gist and forget its ID.
    """
    configured_id = get_gist_id()
    gist_id = gist_id or configured_id
    if not gist_id:
        console.print("[yellow]No Gist configured[/yellow]")
        raise typer.Exit(1)

    if not yes and not typer.confirm(f"Delete Gist {gist_id}?", default=False):
        raise typer.Exit(0)

    with _build_client() as client:
        try:
            SyncOrchestrator(client).delete(gist_id)
        except SyncError as e:
            _fail(e)

    if gist_id == configured_id:
        clear_gist_id()
    console.print(f"[green]✓[/green] Deleted Gist {gist_id}")


@app.command()
def set_token(token: str):
    """
    Set GitHub Personal Access Token.
    """
    console.print("Validating token...", end="")
    with _build_client(token) as client:
        valid = client.test_token()
    if not valid:
        console.print(" [red]✗ Invalid token[/red]")
        raise typer.Exit(1)

    console.print(" [green]✓ Valid[/green]")
    location = TokenManager().set_token(token)
    console.print(f"[green]✓[/green] Token saved: {location}")


@app.command()
def clear_token():
    """
    Remove the stored GitHub token.
    """
    if TokenManager().delete_token():
        console.print("[green]✓[/green] Token removed")
    else:
        console.print("[yellow]No stored token[/yellow]")
