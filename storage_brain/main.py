"""Command line front end: ``storage-brain upload|get|list|delete|quota|tenant``.

Configuration comes from ``STORAGE_BRAIN_*`` environment variables (or ``.env``).
"""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer

from storage_brain.client import StorageBrain
from storage_brain.config.settings import Settings
from storage_brain.constants import ProcessingContext
from storage_brain.errors.exceptions import StorageBrainError
from storage_brain.logging.logger import Log
from storage_brain.models import UploadPayload

T = TypeVar("T")

app = typer.Typer(help="Storage Brain - upload files and inspect your storage tenant")


def _run(operation: Callable[[StorageBrain], Awaitable[T]]) -> T:
    """Build a client from settings, run one async operation, map errors to exit 1."""
    settings = Settings()
    Log.configure(settings.log_level, sys.stderr)

    async def runner() -> T:
        async with StorageBrain.from_settings(settings) as client:
            return await operation(client)

    try:
        return asyncio.run(runner())
    except StorageBrainError as exc:
        typer.echo(f"Error [{exc.code}]: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc


def _echo_json(value: Any) -> None:
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    typer.echo(json.dumps(value, indent=2, default=str))


def _parse_tags(raw: list[str]) -> dict[str, str] | None:
    tags: dict[str, str] = {}
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Tag '{item}' must look like key=value", param_hint="--tag")
        tags[key] = value
    return tags or None


@app.command()
def upload(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
    context: Annotated[
        ProcessingContext,
        typer.Option("--context", "-c", help="Processing pipeline to apply"),
    ] = ProcessingContext.DEFAULT,
    tag: Annotated[
        list[str] | None,
        typer.Option("--tag", "-t", help="Tag as key=value, repeatable"),
    ] = None,
    webhook_url: Annotated[
        str | None,
        typer.Option("--webhook-url", help="URL notified when processing finishes"),
    ] = None,
    media_type: Annotated[
        str | None,
        typer.Option("--type", help="Media type, guessed from the extension if omitted"),
    ] = None,
) -> None:
    """Upload a file and print the processed record."""
    tags = _parse_tags(tag or [])
    payload = UploadPayload.from_path(path, media_type)

    def on_progress(percent: int) -> None:
        typer.echo(f"{percent}%", err=True)

    record = _run(
        lambda client: client.upload(
            payload,
            context,
            tags=tags,
            webhook_url=webhook_url,
            on_progress=on_progress,
        )
    )
    _echo_json(record)


@app.command("get")
def get_file(file_id: str) -> None:
    """Print one file record."""
    _echo_json(_run(lambda client: client.get_file(file_id)))


@app.command("list")
def list_files(
    limit: Annotated[int | None, typer.Option(min=1, max=100)] = None,
    cursor: Annotated[str | None, typer.Option()] = None,
    context: Annotated[ProcessingContext | None, typer.Option()] = None,
    file_type: Annotated[str | None, typer.Option("--file-type")] = None,
) -> None:
    """Print one page of files."""
    _echo_json(
        _run(
            lambda client: client.list_files(
                limit=limit,
                cursor=cursor,
                context=context,
                file_type=file_type,
            )
        )
    )


@app.command("delete")
def delete_file(file_id: str) -> None:
    """Delete a file."""
    _run(lambda client: client.delete_file(file_id))
    typer.echo(f"Deleted {file_id}")


@app.command()
def quota() -> None:
    """Print storage quota usage."""
    _echo_json(_run(lambda client: client.get_quota()))


@app.command()
def tenant() -> None:
    """Print tenant information."""
    _echo_json(_run(lambda client: client.get_tenant_info()))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
