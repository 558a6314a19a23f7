"""Command-line interface for the registration client.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from pydantic import TypeAdapter

from crpt_api.core.config import settings
from crpt_api.core.errors import AppError
from crpt_api.core.logging import configure_logging
from crpt_api.schemas.document import Document
from crpt_api.services.registration_service import build_registration_service

app = typer.Typer(
    name="crpt-api",
    no_args_is_help=True,
    help="Rate limited document registration client.",
)

_DOCUMENTS = TypeAdapter(list[Document])


def _exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, AppError):
        typer.secho(
            f"{command_name} failed ({exc.code}): {exc.message}",
            fg=typer.colors.RED,
            err=True,
        )
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def load_documents(path: Path) -> list[Document]:
    """Read one document or a JSON list of documents from ``path``.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not UTF-8 JSON holding valid documents.
    """

    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = [raw]
    return _DOCUMENTS.validate_python(raw)


@app.command("submit")
def submit_command(
    path: Annotated[
        Path,
        typer.Argument(help="JSON file holding a document or a list of documents."),
    ],
    limit: Annotated[
        int | None,
        typer.Option("--limit", help="Documents released per period (overrides CRPT_RATE_LIMIT_REQUESTS)."),
    ] = None,
    period_unit: Annotated[
        str | None,
        typer.Option("--period-unit", help="Period length: milliseconds, seconds, minutes, hours or days."),
    ] = None,
    wait: Annotated[
        bool,
        typer.Option("--wait/--no-wait", help="Wait until every document has been sent."),
    ] = True,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Give up waiting after this many seconds."),
    ] = None,
) -> None:
    """Queue documents from a file and send them at the configured rate."""

    configure_logging(settings.log)

    try:
        documents = load_documents(path)
    except (OSError, ValueError) as exc:
        # ValueError covers undecodable bytes, bad JSON and ValidationError.
        _exit_with_command_error("submit", exc)

    try:
        service = build_registration_service(period_unit=period_unit, limit=limit)
    except AppError as exc:
        _exit_with_command_error("submit", exc)

    with service:
        for document in documents:
            service.create_document(document)
        typer.echo(f"Queued: {len(documents)}")

        if wait and not service.wait_until_idle(timeout):
            typer.secho("Timed out waiting for delivery.", fg=typer.colors.YELLOW, err=True)

        stats = service.stats()
        failed = stats["dead_letters"]["recorded"]
        typer.echo(f"Released: {stats['queue']['released']}")
        typer.echo(f"Failed: {failed}")
        typer.echo(f"Pending: {stats['queue']['pending']}")


@app.command("show-config")
def show_config_command() -> None:
    """Print the effective endpoint and rate limit settings."""

    cfg = settings.crpt
    typer.echo(f"Endpoint: {cfg.create_url}")
    typer.echo(f"Rate limit: {cfg.rate_limit_requests} per {cfg.rate_limit_period_unit}")
    typer.echo(f"Timeout (s): {cfg.timeout_seconds}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
