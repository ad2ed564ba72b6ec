"""Tests for the eventseal CLI."""

import json
from pathlib import Path

from typer.testing import CliRunner

from eventseal import __version__
from eventseal.audit.signer import EventSigner
from eventseal.audit.timestamps import EventTimestamp
from eventseal.cli import app
from eventseal.config import Settings

runner = CliRunner()

TIMESTAMP = "2024-01-01T12:00:00.123456789Z"
TS = EventTimestamp.parse(TIMESTAMP)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_sign_json_then_verify(override_settings: Settings):
    """A signature printed by ``sign`` is accepted by ``verify``."""
    result = runner.invoke(
        app,
        ["sign", "event-1", "10.0.0.1", "--timestamp", TIMESTAMP, "--payload", "hello", "--json"],
    )
    assert result.exit_code == 0, result.output

    data = json.loads(result.stdout)
    assert data["schema_id"] == "event_signature"
    assert data["timestamp"] == TIMESTAMP
    assert data["signature"] == EventSigner("cli-test-secret").sign(
        "event-1", TS, "10.0.0.1", b"hello"
    )

    verified = runner.invoke(
        app,
        ["verify", "event-1", "10.0.0.1", data["signature"], "-t", TIMESTAMP, "-p", "hello"],
    )
    assert verified.exit_code == 0, verified.output
    assert "Signature is valid" in verified.output


def test_verify_rejects_tampered_payload(override_settings: Settings):
    result = runner.invoke(app, ["sign", "event-1", "10.0.0.1", "-t", TIMESTAMP, "-p", "hello"])
    assert result.exit_code == 0
    signature = result.stdout.strip().splitlines()[-1].removeprefix("signature: ")

    verified = runner.invoke(
        app, ["verify", "event-1", "10.0.0.1", signature, "-t", TIMESTAMP, "-p", "goodbye"]
    )
    assert verified.exit_code == 1
    assert "Signature verification failed" in verified.output


def test_verify_requires_timestamp(override_settings: Settings):
    result = runner.invoke(app, ["verify", "event-1", "10.0.0.1", "0" * 64])
    assert result.exit_code == 2


def test_sign_rejects_bad_timestamp(override_settings: Settings):
    result = runner.invoke(app, ["sign", "event-1", "10.0.0.1", "-t", "yesterday"])
    assert result.exit_code == 2


def test_sign_payload_file(override_settings: Settings, temp_dir: Path):
    """Payload files are signed as raw bytes."""
    payload_file = temp_dir / "payload.bin"
    payload_file.write_bytes(b"\x00\xffbinary")

    result = runner.invoke(
        app, ["sign", "event-1", "10.0.0.1", "-t", TIMESTAMP, "--payload-file", str(payload_file), "--json"]
    )
    assert result.exit_code == 0, result.output

    expected = EventSigner("cli-test-secret").sign("event-1", TS, "10.0.0.1", b"\x00\xffbinary")
    assert json.loads(result.stdout)["signature"] == expected


def test_sign_rejects_payload_and_payload_file(override_settings: Settings, temp_dir: Path):
    payload_file = temp_dir / "payload.bin"
    payload_file.write_bytes(b"x")

    result = runner.invoke(
        app, ["sign", "event-1", "10.0.0.1", "-p", "x", "--payload-file", str(payload_file)]
    )
    assert result.exit_code == 2


def test_receipt_json(override_settings: Settings):
    """Receipts are printed and persisted to the ingestion log."""
    result = runner.invoke(
        app, ["receipt", "token-123", "192.168.1.200", "--events", "42", "--bytes", "8192", "--json"]
    )
    assert result.exit_code == 0, result.output

    data = json.loads(result.stdout)
    assert data["schema_id"] == "ingestion_receipt"
    assert data["event_count"] == 42
    assert data["bytes_received"] == 8192
    assert len(data["signature"]) == 64

    log_path = override_settings.get_ingestion_log_path()
    stored = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert [r["id"] for r in stored] == [data["id"]]


def test_receipt_rejects_negative_counts(override_settings: Settings):
    result = runner.invoke(
        app, ["receipt", "token-123", "192.168.1.200", "--events", "-1", "--bytes", "10"]
    )
    assert result.exit_code == 2


def test_audit_append_show_verify(override_settings: Settings):
    """Appended events are listed and the trail verifies."""
    for event_id in ("event-1", "event-2"):
        result = runner.invoke(
            app, ["audit", "append", event_id, "10.0.0.1", "-t", TIMESTAMP, "-p", "data"]
        )
        assert result.exit_code == 0, result.output
        assert f"Appended {event_id}" in result.output

    shown = runner.invoke(app, ["audit", "show", "--json"])
    assert shown.exit_code == 0, shown.output
    data = json.loads(shown.stdout)
    assert data["schema_id"] == "audit_trail"
    assert data["total_entries"] == 2
    assert [e["event_id"] for e in data["entries"]] == ["event-1", "event-2"]

    tail = runner.invoke(app, ["audit", "show", "--tail", "1"])
    assert tail.exit_code == 0
    assert "event-2" in tail.output
    assert "event-1" not in tail.output

    verified = runner.invoke(app, ["audit", "verify"])
    assert verified.exit_code == 0, verified.output
    assert "Audit trail is valid" in verified.output


def test_audit_verify_detects_tampering(override_settings: Settings):
    runner.invoke(app, ["audit", "append", "event-1", "10.0.0.1", "-t", TIMESTAMP, "-p", "data"])

    trail_path = override_settings.get_audit_path()
    record = json.loads(trail_path.read_text(encoding="utf-8"))
    record["source_ip"] = "10.6.6.6"
    trail_path.write_text(json.dumps(record) + "\n", encoding="utf-8")

    result = runner.invoke(app, ["audit", "verify"])
    assert result.exit_code == 1
    assert "invalid signature" in result.output


def test_audit_append_disabled(override_settings: Settings):
    override_settings.audit_enabled = False

    result = runner.invoke(app, ["audit", "append", "event-1", "10.0.0.1"])
    assert result.exit_code == 1
    assert "disabled" in result.output


def test_log_level_option_is_validated(override_settings: Settings):
    result = runner.invoke(app, ["--log-level", "bogus", "audit", "show"])
    assert result.exit_code == 2
    assert override_settings.log_level == "WARNING"


def test_log_level_option_is_case_insensitive(override_settings: Settings):
    result = runner.invoke(app, ["--log-level", "debug", "audit", "show"])
    assert result.exit_code == 0, result.output
    assert override_settings.log_level == "DEBUG"
