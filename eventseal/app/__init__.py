"""Application layer for eventseal.

Services here orchestrate signing and verification; storage is delegated
to the audit trail.
"""

__all__ = ["AuditService"]

from eventseal.app.audit_service import AuditService
