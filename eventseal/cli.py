"""eventseal CLI application with Typer."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from eventseal import __version__
from eventseal.audit.timestamps import EventTimestamp
from eventseal.bootstrap import bootstrap_application
from eventseal.config import get_settings, set_settings
from eventseal.utils.cli_output import json_response

app = typer.Typer(
    name="eventseal",
    help="Tamper-evident signing for security audit trails and ingestion receipts",
    add_completion=True,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"eventseal version {__version__}")
        raise typer.Exit()


def _parse_timestamp(value: str | None, *, default_now: bool) -> EventTimestamp:
    if value is None:
        if default_now:
            return EventTimestamp.now()
        raise typer.BadParameter("--timestamp is required", param_hint="--timestamp")
    try:
        return EventTimestamp.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--timestamp") from exc


def _read_payload(payload: str | None, payload_file: Path | None) -> bytes:
    if payload is not None and payload_file is not None:
        raise typer.BadParameter("Use either --payload or --payload-file, not both")
    if payload_file is not None:
        return payload_file.expanduser().read_bytes()
    if payload is not None:
        return payload.encode("utf-8")
    return b""


TimestampOption = Annotated[
    str | None,
    typer.Option(
        "--timestamp",
        "-t",
        help="ISO-8601 timestamp with UTC offset (up to nanosecond precision)",
    ),
]
PayloadOption = Annotated[
    str | None,
    typer.Option("--payload", "-p", help="Payload text (signed as UTF-8 bytes)"),
]
PayloadFileOption = Annotated[
    Path | None,
    typer.Option("--payload-file", help="Read the raw payload bytes from a file"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Override data directory"),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"),
    ] = None,
) -> None:
    """eventseal - tamper-evident audit signing."""
    # Update settings with CLI flags
    settings = get_settings()
    if data_dir:
        settings.data_dir = data_dir
    if log_level:
        try:
            settings.log_level = log_level
        except ValidationError as exc:
            raise typer.BadParameter(
                f"{log_level!r} is not a log level", param_hint="--log-level"
            ) from exc
    set_settings(settings)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("sign")
def sign(
    event_id: Annotated[str, typer.Argument(help="Event identifier")],
    source_ip: Annotated[str, typer.Argument(help="Source IP literal")],
    timestamp: TimestampOption = None,
    payload: PayloadOption = None,
    payload_file: PayloadFileOption = None,
    json_output: JsonOption = False,
) -> None:
    """Sign an audit event and print its signature."""
    instant = _parse_timestamp(timestamp, default_now=True)
    raw = _read_payload(payload, payload_file)

    container = bootstrap_application()
    signature = container.signer.sign(event_id, instant, source_ip, raw)

    if json_output:
        typer.echo(
            json_response(
                "event_signature",
                1,
                event_id=event_id,
                timestamp=instant.isoformat(),
                source_ip=source_ip,
                signature=signature,
            )
        )
    else:
        typer.echo(f"timestamp: {instant.isoformat()}")
        typer.echo(f"signature: {signature}")


@app.command("verify")
def verify(
    event_id: Annotated[str, typer.Argument(help="Event identifier")],
    source_ip: Annotated[str, typer.Argument(help="Source IP literal")],
    signature: Annotated[str, typer.Argument(help="Stored signature to check")],
    timestamp: TimestampOption = None,
    payload: PayloadOption = None,
    payload_file: PayloadFileOption = None,
) -> None:
    """Verify a stored event signature."""
    instant = _parse_timestamp(timestamp, default_now=False)
    raw = _read_payload(payload, payload_file)

    container = bootstrap_application()
    if container.signer.verify(event_id, instant, source_ip, raw, signature):
        typer.secho("Signature is valid", fg=typer.colors.GREEN)
        return

    typer.secho("Signature verification failed", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("receipt")
def receipt(
    hec_token_id: Annotated[str, typer.Argument(help="HEC token identifier")],
    source_ip: Annotated[str, typer.Argument(help="Client IP of the batch")],
    events: Annotated[int, typer.Option("--events", min=0, help="Events in the batch")],
    bytes_received: Annotated[
        int, typer.Option("--bytes", min=0, help="Bytes received for the batch")
    ],
    json_output: JsonOption = False,
) -> None:
    """Record a signed receipt for an accepted ingestion batch."""
    container = bootstrap_application()
    log = container.ingestion_recorder.record(hec_token_id, source_ip, events, bytes_received)

    if json_output:
        typer.echo(json_response("ingestion_receipt", 1, **log.model_dump(mode="json")))
    else:
        typer.echo(f"{log.id} | {log.timestamp} | {log.signature}")


# Audit subcommand
audit_app = typer.Typer(help="Signed audit trail management")
app.add_typer(audit_app, name="audit")


@audit_app.command("append")
def audit_append(
    event_id: Annotated[str, typer.Argument(help="Event identifier")],
    source_ip: Annotated[str, typer.Argument(help="Source IP literal")],
    timestamp: TimestampOption = None,
    payload: PayloadOption = None,
    payload_file: PayloadFileOption = None,
) -> None:
    """Sign an event and append it to the audit trail."""
    instant = _parse_timestamp(timestamp, default_now=True)
    raw = _read_payload(payload, payload_file)

    container = bootstrap_application()
    if container.audit_trail is None:
        typer.secho("Audit trail is disabled", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    entry = container.audit_trail.append(event_id, instant, source_ip, raw)
    typer.secho(f"✅ Appended {entry.event_id} ({entry.signature})", fg=typer.colors.GREEN)


@audit_app.command("show")
def audit_show(
    json_output: JsonOption = False,
    tail: Annotated[
        int | None,
        typer.Option("--tail", "-n", help="Show last N entries"),
    ] = None,
) -> None:
    """Show audit trail entries."""

    container = bootstrap_application()

    if not container.audit_service.is_enabled():
        typer.secho("No audit trail found", fg=typer.colors.YELLOW)
        return

    entries = container.audit_service.get_entries()

    if not entries:
        typer.secho("No audit trail entries found", fg=typer.colors.YELLOW)
        return

    if tail:
        entries = entries[-tail:]

    if json_output:
        typer.echo(
            json_response(
                "audit_trail",
                1,
                total_entries=len(entries),
                entries=[e.model_dump(mode="json") for e in entries],
            )
        )
    else:
        for entry in entries:
            typer.echo(f"{entry.timestamp} | {entry.event_id} | {entry.source_ip}")


@audit_app.command("verify")
def audit_verify() -> None:
    """Verify every signature in the audit trail."""
    container = bootstrap_application()

    if not container.audit_service.is_enabled():
        typer.secho("No audit trail found", fg=typer.colors.YELLOW)
        return

    valid, error = container.audit_service.verify()

    if valid:
        typer.secho("Audit trail is valid", fg=typer.colors.GREEN)
        return

    message = error or "Audit trail integrity check failed"
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
