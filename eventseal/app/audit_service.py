"""Audit trail orchestration services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eventseal.audit.records import SignedEvent
    from eventseal.audit.trail import AuditTrail


@dataclass(slots=True)
class AuditService:
    """Expose read/verify operations over the signed audit trail."""

    trail: AuditTrail | None

    def is_enabled(self) -> bool:
        """Return True when the audit trail is available."""

        return self.trail is not None

    def get_entries(self) -> list[SignedEvent]:
        """Return all trail entries (empty list when disabled)."""

        if self.trail is None:
            return []
        return self.trail.read_all()

    def verify(self) -> tuple[bool, str | None]:
        """Verify trail signatures, treating a disabled trail as valid."""

        if self.trail is None:
            return True, None
        return self.trail.verify()
