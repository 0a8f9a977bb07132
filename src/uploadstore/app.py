# /uploadstore/app.py
"""
Console front-end for the upload store.
Handles the menu loop and user prompts, and delegates every file operation to
the storage service.
"""
import os
import sys
from datetime import datetime
from pathlib import Path

# Rich UI Components
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table, box

# Local module imports
from .config import LOG_LEVEL, LOG_PATH, StorageProperties, console
from .exceptions import StorageError
from .observability import configure_logging, get_logger
from .storage_service import FileSystemStorageService, StorageService
from .uploads import FileUpload

logger = get_logger(__name__)


# --- UI & Formatting Functions ---

def display_welcome_banner(storage: StorageService):
    """Displays the application's welcome banner."""
    console.print(Panel(
        "[bold magenta]uploadstore - File Storage CLI[/bold magenta]",
        subtitle="[cyan]Upload, list, download and purge stored files[/cyan]",
        expand=False
    ))
    console.print(f"[green]Storage root: {storage.root_location}[/green]")


def _format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.2f} MB"


def _print_storage_error(exc: StorageError):
    console.print(f"[bold red]Error: {escape(str(exc))}[/bold red]")


# --- Menu Actions ---

def _resolve_upload_path(raw_input: str) -> tuple[Path | None, str | None]:
    """Normalizes and validates user-provided upload path."""
    cleaned = str(raw_input or "").strip().strip('"').strip("'")
    if not cleaned:
        return None, "Error: Empty path provided."
    try:
        resolved = Path(cleaned).expanduser().resolve(strict=True)
    except FileNotFoundError:
        return None, f"Error: File not found at '{cleaned}'"
    except OSError as exc:
        return None, f"Error: Invalid path '{cleaned}' ({exc})"

    if not resolved.is_file():
        return None, f"Error: Path is not a regular file: '{resolved}'"
    return resolved, None


def handle_file_upload(storage: StorageService) -> Path | None:
    """CLI flow for storing a local file."""
    file_path_str = Prompt.ask("Enter the full path to the file")
    file_path, error_message = _resolve_upload_path(file_path_str)
    if file_path is None:
        console.print(f"[bold red]{error_message}[/bold red]")
        return None
    stored_name = Prompt.ask("Store as", default=file_path.name)
    try:
        stored_path = storage.store(FileUpload.from_path(file_path, stored_name))
    except StorageError as exc:
        _print_storage_error(exc)
        return None
    console.print(
        Panel(
            f"[green]OK File stored: [bold]{stored_path.name}[/bold]\n"
            f"       Location: {stored_path}",
            title="Upload Success",
            border_style="green",
        )
    )
    return stored_path


def list_stored_files(storage: StorageService) -> list[Path]:
    """Displays a table of every file directly under the storage root."""
    try:
        names = sorted(storage.load_all())
    except StorageError as exc:
        _print_storage_error(exc)
        return []

    if not names:
        console.print("[yellow]No files stored yet.[/yellow]")
        return []

    table = Table(title="Stored Files", border_style="blue", header_style="bold", box=box.SQUARE)
    table.add_column("Name", style="cyan")
    table.add_column("Size", style="yellow", justify="right")
    table.add_column("Modified", style="white")

    for name in names:
        path = storage.load(str(name))
        try:
            stat = path.stat()
        except OSError:
            table.add_row(str(name), "?", "?")
            continue
        size = _format_size(stat.st_size) if path.is_file() else "[dim]dir[/dim]"
        modified = datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(str(name), size, modified)
    console.print(table)
    return names


def handle_file_download(storage: StorageService) -> Path | None:
    """CLI flow for copying a stored file out to a local path."""
    filename = Prompt.ask("Enter the stored file name").strip()
    try:
        resource = storage.load_as_resource(filename)
    except StorageError as exc:
        _print_storage_error(exc)
        return None

    destination_str = Prompt.ask("Save to", default=str(Path.cwd() / resource.filename))
    destination = Path(destination_str).expanduser()
    try:
        with open(destination, "wb") as handle:
            for chunk in resource.iter_bytes():
                handle.write(chunk)
    except OSError as exc:
        console.print(f"[bold red]Error: Could not write '{destination}' ({exc})[/bold red]")
        return None

    logger.info("file_downloaded", filename=resource.filename, destination=str(destination))
    console.print(f"[green]Saved {resource.filename} ({resource.content_type}) to {destination}[/green]")
    return destination


def handle_purge(storage: StorageService) -> bool:
    """CLI flow for deleting every stored file."""
    if not Confirm.ask("[bold red]Delete ALL stored files?[/bold red]", default=False):
        console.print("[yellow]Purge cancelled.[/yellow]")
        return False
    removed = storage.delete_all()
    try:
        storage.init()
    except StorageError as exc:
        _print_storage_error(exc)
        return removed
    if removed:
        console.print("[green]All stored files deleted.[/green]")
    else:
        console.print("[yellow]Some files could not be deleted; see the log for details.[/yellow]")
    return removed


# --- Main Application Flow ---

def main():
    """Main application loop."""
    configure_logging(LOG_PATH, LOG_LEVEL)
    try:
        storage = FileSystemStorageService(StorageProperties.from_env())
    except StorageError as exc:
        _print_storage_error(exc)
        sys.exit(1)

    display_welcome_banner(storage)
    actions = {
        "1": handle_file_upload,
        "2": list_stored_files,
        "3": handle_file_download,
        "4": handle_purge,
    }

    while True:
        try:
            console.print("\n[bold]Main Menu:[/bold]")
            console.print("[green]1. Upload File[/green]")
            console.print("[cyan]2. List Stored Files[/cyan]")
            console.print("[blue]3. Download File[/blue]")
            console.print("[magenta]4. Delete All Files[/magenta]")
            console.print("[red]5. Exit[/red]")

            choice = Prompt.ask("Choose an option", choices=["1", "2", "3", "4", "5"])
            if choice == "5":
                break
            actions[choice](storage)
        except KeyboardInterrupt:
            break

    console.print(f"\n[bold magenta]Goodbye! Files remain in {storage.root_location}{os.sep}[/bold magenta]")
    sys.exit(0)

if __name__ == "__main__":
    main()
