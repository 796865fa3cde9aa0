"""chunkupload CLI - Main commands."""
import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="chunkupload",
    help="Chunked file upload CLI",
    add_completion=False
)
console = Console()

URL_OPTION = typer.Option(
    "http://localhost:8080/", "--url", "-u",
    envvar="CHUNKUPLOAD_URL", help="Upload service URL"
)
COOKIE_OPTION = typer.Option(
    None, "--cookie", "-c",
    envvar="CHUNKUPLOAD_COOKIE", help="Auth cookies, e.g. 'sid=abc; csrftoken=xyz'"
)
INSECURE_OPTION = typer.Option(False, "--insecure", help="Skip TLS certificate verification")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def _parse_cookies(raw: Optional[str]) -> Dict[str, str]:
    """Parse a 'name=value; name2=value2' cookie string."""
    cookies = {}
    if not raw:
        return cookies
    for part in raw.split(";"):
        name, sep, value = part.strip().partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Invalid cookie: {part.strip()!r}", param_hint="--cookie")
        cookies[name.strip()] = value.strip()
    return cookies


def _build_config(url: str, cookie: Optional[str], insecure: bool, retries: int = 0):
    from chunkupload import APIConfig, RetryConfig

    config = APIConfig.insecure() if insecure else APIConfig.default()
    config.base_url = url
    config.cookies = _parse_cookies(cookie)
    config.retry = RetryConfig(max_retries=retries)
    return config


def _configure_logging(verbose: bool) -> None:
    from chunkupload import setup_logging

    if verbose:
        logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
        setup_logging(logging.DEBUG)


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    name: str = typer.Option(None, "--name", "-n", help="File name declared to the server"),
    url: str = URL_OPTION,
    cookie: str = COOKIE_OPTION,
    insecure: bool = INSECURE_OPTION,
    retries: int = typer.Option(0, "--retries", "-r", min=0, help="Retries for transient failures"),
    verbose: bool = VERBOSE_OPTION,
):
    """Upload a file."""
    from chunkupload import UploadClient, UploadException, ProgressSnapshot

    _configure_logging(verbose)
    config = _build_config(url, cookie, insecure, retries)

    async def do_upload():
        async with UploadClient(config=config) as client:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {file_path.name}", total=100)

                def on_progress(snapshot: ProgressSnapshot):
                    description = snapshot.status_message or f"Uploading {file_path.name}"
                    progress.update(task, completed=snapshot.percent, description=description)

                return await client.upload(file_path, name=name, progress_callback=on_progress)

    try:
        result = run_async(do_upload())
    except UploadException as e:
        console.print(f"[red]Upload failed: {e.message}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Uploaded:[/green] {result.file_name}")
    console.print(f"Upload ID: {result.upload_id}")
    console.print(f"Size: {result.file_size:,} bytes in {result.chunks_sent} chunks")
    console.print(f"CRC-32: {result.checksum}")


@app.command()
def quota(
    url: str = URL_OPTION,
    cookie: str = COOKIE_OPTION,
    insecure: bool = INSECURE_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show storage quota."""
    from chunkupload import UploadClient, UploadException

    _configure_logging(verbose)
    config = _build_config(url, cookie, insecure)

    async def get_quota():
        async with UploadClient(config=config) as client:
            return await client.get_quota()

    try:
        info = run_async(get_quota())
    except UploadException as e:
        console.print(f"[red]Quota query failed: {e.message}[/red]")
        raise typer.Exit(1)

    gb = 1024 ** 3
    table = Table(title="Storage quota")
    table.add_column("Used", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Free", justify="right")
    table.add_column("Usage", justify="right", style="cyan")
    table.add_row(
        f"{info.used_quota / gb:.2f} GB",
        f"{info.total_quota / gb:.2f} GB",
        f"{info.free_quota / gb:.2f} GB",
        f"{info.usage_percent:.1f}%"
    )
    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
