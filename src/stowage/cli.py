# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/cli.py

"""
Command line interface for stowage.

Every command takes a storage URL (``/path``, ``file://...``, ``s3://...``,
``gs://...``) except ``upload``, which talks to an SSH host directly.
"""

from importlib.metadata import version, PackageNotFoundError
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from stowage.config.manager import StorageConfig, load_config
from stowage.remote import RemoteOptions, upload as remote_upload
from stowage.storage import Storage, for_url
from stowage.system.exceptions import StowageError
from stowage.system.logging_setup import setup_logging

app = typer.Typer(
    help="""stowage - one interface for disk, S3 and GCS storage

[bold blue]Browse:[/bold blue] ls, cat, env
[bold green]Transfer:[/bold green] put, get, rm, upload
""",
    rich_markup_mode="rich"
)

console = Console()


def handle_operation_error(operation: str, error: Exception) -> None:
    """Print an error consistently and exit non-zero."""
    console.print(f"[red]✗[/red] Error {operation}: {error}")
    raise typer.Exit(1)


def _config() -> StorageConfig:
    try:
        return load_config()
    except StowageError as e:
        handle_operation_error("loading configuration", e)


def _open(storage_url: str) -> Storage:
    try:
        return for_url(storage_url, _config())
    except StowageError as e:
        handle_operation_error(f"opening {storage_url}", e)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        try:
            pkg_version = version("stowage")
        except PackageNotFoundError as e:
            handle_operation_error("retrieving version", e)
        console.print(f"stowage version {pkg_version}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """stowage - storage backends and directory sync."""
    setup_logging(debug=debug)


@app.command()
def ls(
    storage_url: str = typer.Argument(..., help="Storage URL, e.g. s3://bucket/root"),
    path: str = typer.Argument("", help="Path under the storage root"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="List every file below path"),
) -> None:
    """[bold blue]Browse[/bold blue]: List files under a path."""
    storage = _open(storage_url)
    if not recursive:
        try:
            entries = storage.list(path)
        except (StowageError, OSError) as e:
            handle_operation_error(f"listing {path or '/'}", e)
        for entry in entries:
            console.print(entry, highlight=False, markup=False)
        return

    errors = 0
    for result in storage.iter_recursive(path):
        if result.error is not None:
            errors += 1
            console.print(f"[red]✗[/red] {result.path or path}: {result.error}")
        else:
            console.print(result.path, highlight=False, markup=False)
    if errors:
        raise typer.Exit(1)


@app.command()
def cat(
    storage_url: str = typer.Argument(..., help="Storage URL"),
    path: str = typer.Argument(..., help="Object path under the storage root"),
) -> None:
    """[bold blue]Browse[/bold blue]: Print an object."""
    storage = _open(storage_url)
    try:
        data = storage.get(path)
    except (StowageError, OSError) as e:
        handle_operation_error(f"reading {path}", e)
    console.print(data.decode("utf-8", errors="replace"), end="", highlight=False, markup=False)


@app.command()
def env(
    storage_url: str = typer.Argument(..., help="Storage URL"),
) -> None:
    """[bold blue]Browse[/bold blue]: Print KEY=VALUE lines a job needs to reach this storage."""
    storage = _open(storage_url)
    try:
        lines = storage.prepare_run_env()
    except StowageError as e:
        handle_operation_error("preparing run environment", e)
    for line in lines:
        console.print(line, highlight=False, markup=False)


@app.command()
def put(
    local_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Local directory to upload"),
    storage_url: str = typer.Argument(..., help="Storage URL"),
    dest: str = typer.Option("", "--dest", help="Destination path under the storage root"),
) -> None:
    """[bold green]Transfer[/bold green]: Copy a local directory into storage."""
    storage = _open(storage_url)
    try:
        storage.put_directory(str(local_dir), dest)
    except (StowageError, OSError) as e:
        handle_operation_error(f"uploading {local_dir}", e)
    console.print(f"[green]✓[/green] Uploaded {local_dir} to {storage.root_url()}")


@app.command()
def get(
    storage_url: str = typer.Argument(..., help="Storage URL"),
    local_dir: Path = typer.Argument(..., help="Local directory to download into"),
    src: str = typer.Option("", "--src", help="Source path under the storage root"),
) -> None:
    """[bold green]Transfer[/bold green]: Copy a storage directory to local disk."""
    storage = _open(storage_url)
    try:
        storage.get_directory(src, str(local_dir))
    except (StowageError, OSError) as e:
        handle_operation_error(f"downloading {src or '/'}", e)
    console.print(f"[green]✓[/green] Downloaded {storage.root_url()} to {local_dir}")


@app.command()
def rm(
    storage_url: str = typer.Argument(..., help="Storage URL"),
    path: str = typer.Argument(..., help="Object or directory path under the storage root"),
) -> None:
    """[bold green]Transfer[/bold green]: Delete an object or a whole subtree."""
    storage = _open(storage_url)
    try:
        storage.delete(path)
    except (StowageError, OSError) as e:
        handle_operation_error(f"deleting {path}", e)


@app.command()
def upload(
    local_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Local directory to push"),
    remote_dir: str = typer.Argument(..., help="Directory on the remote host"),
    host: str = typer.Option(..., "--host", help="Remote host"),
    port: int = typer.Option(22, "--port", help="SSH port"),
    user: Optional[str] = typer.Option(None, "--user", help="SSH username"),
    key: Optional[list[Path]] = typer.Option(None, "--key", help="Private key file (repeatable)"),
) -> None:
    """[bold green]Transfer[/bold green]: Push a local directory to a host over SSH."""
    options = RemoteOptions(host=host, port=port, username=user, private_keys=key or [])
    try:
        remote_upload(local_dir, options, remote_dir)
    except (StowageError, OSError) as e:
        handle_operation_error(f"uploading to {host}", e)
    console.print(f"[green]✓[/green] Uploaded {local_dir} to {host}:{remote_dir}")
