"""Application bootstrap wiring the signer, trail, and services."""

from __future__ import annotations

from dataclasses import dataclass

from eventseal.app import AuditService
from eventseal.audit.ingestion import IngestionRecorder
from eventseal.audit.signer import EventSigner
from eventseal.audit.trail import AuditTrail
from eventseal.config import Settings, get_settings


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services for the CLI layer."""

    settings: Settings
    signer: EventSigner
    audit_trail: AuditTrail | None
    audit_service: AuditService
    ingestion_recorder: IngestionRecorder


def _create_trail(settings: Settings, signer: EventSigner) -> AuditTrail | None:
    if not settings.audit_enabled:
        return None
    return AuditTrail(settings.get_audit_path(), signer)


def bootstrap_application(settings: Settings | None = None) -> ApplicationContainer:
    """Instantiate the signer and the services that share it."""

    active_settings = settings or get_settings()

    # One signer per process, handed to every consumer by reference.
    signer = EventSigner.from_settings(active_settings)

    trail = _create_trail(active_settings, signer)
    recorder = IngestionRecorder(signer, log_path=active_settings.get_ingestion_log_path())

    return ApplicationContainer(
        settings=active_settings,
        signer=signer,
        audit_trail=trail,
        audit_service=AuditService(trail=trail),
        ingestion_recorder=recorder,
    )
