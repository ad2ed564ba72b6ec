"""Signer port interface for audit event and receipt signing."""

from typing import Protocol

from eventseal.audit.timestamps import TimestampLike


class SignerPort(Protocol):
    """Port interface for tamper-evident signing operations.

    Implementations must be deterministic for :meth:`sign` and must never
    raise from :meth:`verify` for malformed signatures.

    Side effects: None (pure computation).
    """

    def sign(
        self,
        event_id: str,
        timestamp: TimestampLike,
        source_ip: str,
        payload: bytes,
    ) -> str:
        """Sign an audit event.

        Args:
            event_id: Event identifier
            timestamp: Event time
            source_ip: Source IP literal
            payload: Raw payload bytes

        Returns:
            64-character lowercase hex signature
        """
        ...

    def verify(
        self,
        event_id: str,
        timestamp: TimestampLike,
        source_ip: str,
        payload: bytes,
        signature: str,
    ) -> bool:
        """Verify an audit event signature.

        Returns:
            True only on an exact match
        """
        ...

    def sign_ingestion(
        self,
        hec_token_id: str,
        source_ip: str,
        event_count: int,
        bytes_received: int,
        timestamp: TimestampLike,
    ) -> str:
        """Sign an ingestion batch receipt (non-deterministic)."""
        ...
