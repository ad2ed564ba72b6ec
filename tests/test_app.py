"""Tests for the eventseal application layer bootstrap."""

from __future__ import annotations

import json
from pathlib import Path

from eventseal.audit.timestamps import EventTimestamp
from eventseal.bootstrap import bootstrap_application
from eventseal.config import Settings


def test_bootstrap_application_provides_services(temp_dir: Path) -> None:
    """bootstrap_application returns one signer shared by every service."""

    settings = Settings(
        data_dir=temp_dir / "data",
        config_dir=temp_dir / "config",
        audit_enabled=True,
        audit_secret="bootstrap-secret",
    )

    container = bootstrap_application(settings=settings)

    assert container.audit_trail is not None
    assert container.audit_trail._signer is container.signer
    assert container.ingestion_recorder._signer is container.signer
    assert container.audit_service.is_enabled()

    ts = EventTimestamp.now()
    container.audit_trail.append("smoke", ts, "127.0.0.1", b"payload")

    ledger_path = settings.get_audit_path()
    entry = json.loads(ledger_path.read_text().splitlines()[0])
    assert entry["event_id"] == "smoke"
    assert entry["signature"] == container.signer.sign("smoke", ts, "127.0.0.1", b"payload")

    service_entries = container.audit_service.get_entries()
    assert service_entries[-1].event_id == "smoke"
    assert container.audit_service.verify() == (True, None)


def test_bootstrap_without_audit(temp_dir: Path) -> None:
    """A disabled trail reads empty and verifies trivially."""

    settings = Settings(
        data_dir=temp_dir / "data",
        config_dir=temp_dir / "config",
        audit_enabled=False,
        audit_secret="bootstrap-secret",
    )

    container = bootstrap_application(settings=settings)

    assert container.audit_trail is None
    assert not container.audit_service.is_enabled()
    assert container.audit_service.get_entries() == []
    assert container.audit_service.verify() == (True, None)
    assert not settings.get_audit_path().exists()


def test_bootstrap_generates_key_file(temp_dir: Path, monkeypatch) -> None:
    """Without an inline secret the signer uses a persisted key file."""

    monkeypatch.delenv("EVENTSEAL_AUDIT_SECRET", raising=False)
    settings = Settings(data_dir=temp_dir / "data", config_dir=temp_dir / "config")

    first = bootstrap_application(settings=settings).signer
    second = bootstrap_application(settings=settings).signer

    ts = EventTimestamp(0)
    signature = first.sign("event", ts, "10.0.0.1", b"")
    assert second.verify("event", ts, "10.0.0.1", b"", signature)
    assert (temp_dir / "config" / "audit-signing.key").exists()
