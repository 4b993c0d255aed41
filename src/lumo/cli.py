"""
Lumo CLI - command-line interface for the Lumo daemon.

Minimal CLI for running the daemon, preparing the database and inspecting
OTLP payloads offline.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Sequence

import typer
from rich.console import Console
from rich.table import Table

from lumo.logging_config import setup_logging

app = typer.Typer(
    name="lumo",
    help="Lumo - local telemetry daemon for Claude Code",
    no_args_is_help=True,
)

console = Console()


class PayloadKind(str, Enum):
    metrics = "metrics"
    logs = "logs"


METRIC_COLUMNS = ("timestamp", "session_id", "name", "value", "metric_type", "model")
EVENT_COLUMNS = ("timestamp", "session_id", "name", "model", "duration_ms", "success")


def _render_table(title: str, columns: Sequence[str], rows: Sequence[Any]) -> Table:
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        values = (getattr(row, column) for column in columns)
        table.add_row(*("" if value is None else str(value) for value in values))
    return table


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (defaults to SERVER_HOST)"),
    port: int = typer.Option(None, help="Port to bind to (defaults to SERVER_PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """
    Start the daemon.

    Runs the OTLP receiver on the standard OTLP/HTTP port.
    """
    import uvicorn

    from lumo.config import settings

    host = host or settings.server_host
    port = port or settings.server_port

    console.print("[bold green]Starting Lumo daemon...[/bold green]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    console.print(f"  Reload: {reload}")
    console.print(f"\n  Metrics: http://{host}:{port}/v1/metrics")
    console.print(f"  Logs:    http://{host}:{port}/v1/logs")

    uvicorn.run(
        "lumo.api.app:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command("init-db")
def init_db() -> None:
    """Create the database and apply migrations."""
    from lumo.config import settings
    from lumo.db.connection import run_migrations

    try:
        setup_logging(context="cli")
    except PermissionError:
        import logging

        logging.basicConfig(level=logging.INFO)

    run_migrations()
    console.print(f"[green]✓ Database ready:[/green] {settings.database_file}")


@app.command()
def parse(
    path: str = typer.Argument(..., help="Path to an OTLP export payload"),
    kind: PayloadKind = typer.Option(..., "--kind", help="Payload signal type"),
    json_payload: bool = typer.Option(
        False, "--json", help="Payload is OTLP/JSON instead of protobuf"
    ),
) -> None:
    """
    Decode an OTLP payload and print the normalized rows.

    Nothing is written to the database.
    """
    from lumo.exceptions import OtlpDecodeError
    from lumo.otel import (
        decode_logs_request,
        decode_metrics_request,
        parse_logs,
        parse_metrics,
    )
    from lumo.otel.decoder import JSON_CONTENT_TYPE, PROTOBUF_CONTENT_TYPE

    payload_path = Path(path)
    if not payload_path.exists():
        console.print(f"[bold red]Error:[/bold red] Path not found: {path}")
        raise typer.Exit(1)

    payload = payload_path.read_bytes()
    content_type = JSON_CONTENT_TYPE if json_payload else PROTOBUF_CONTENT_TYPE

    try:
        if kind is PayloadKind.metrics:
            rows = parse_metrics(
                decode_metrics_request(payload, content_type=content_type)
            )
            table = _render_table("Metrics", METRIC_COLUMNS, rows)
        else:
            rows = parse_logs(decode_logs_request(payload, content_type=content_type))
            table = _render_table("Events", EVENT_COLUMNS, rows)
    except OtlpDecodeError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(1)

    console.print(table)
    console.print(f"\nParsed {len(rows)} {kind.value} record(s)")


if __name__ == "__main__":
    app()
