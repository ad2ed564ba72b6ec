"""Persisted shapes for signed audit events and ingestion receipts."""

from __future__ import annotations

from pydantic import BaseModel, Field

from eventseal.audit.timestamps import EventTimestamp, TimestampLike, format_timestamp
from eventseal.utils.crypto import decode_bytes, encode_bytes


class SignedEvent(BaseModel):
    """Audit event stored together with its signature.

    Verification rebuilds the canonical signing input bit for bit, so every
    signed field is kept exactly as signed: the timestamp in its canonical
    nanosecond form and the payload as base64 of the raw bytes.
    """

    event_id: str = Field(..., description="Event identifier")
    timestamp: str = Field(
        ...,
        description="Canonical UTC timestamp with nine fractional digits",
    )
    source_ip: str = Field(..., description="Source IP literal as signed")
    payload: str = Field(
        default="",
        description="Base64 encoding of the exact payload bytes that were signed",
    )
    signature: str = Field(..., description="HMAC-SHA256 signature (64 lowercase hex chars)")

    @classmethod
    def from_fields(
        cls,
        event_id: str,
        timestamp: TimestampLike,
        source_ip: str,
        payload: bytes,
        signature: str,
    ) -> SignedEvent:
        return cls(
            event_id=event_id,
            timestamp=format_timestamp(timestamp),
            source_ip=source_ip,
            payload=encode_bytes(bytes(payload)),
            signature=signature,
        )

    def payload_bytes(self) -> bytes:
        """Decode the stored payload.

        Raises:
            ValueError: If the stored payload is not valid base64
        """
        return decode_bytes(self.payload)

    def event_timestamp(self) -> EventTimestamp:
        """Parse the stored timestamp.

        Raises:
            ValueError: If the stored timestamp is malformed
        """
        return EventTimestamp.parse(self.timestamp)


class IngestionLog(BaseModel):
    """Receipt for one accepted (or rejected) ingestion batch."""

    id: str = Field(..., description="Receipt identifier (UUID4)")
    timestamp: str = Field(..., description="Acceptance time, canonical UTC form")
    hec_token_id: str = Field(..., description="HEC token the batch was sent with")
    source_ip: str = Field(..., description="Client IP the batch arrived from")
    event_count: int = Field(..., ge=0, description="Number of events in the batch")
    bytes_received: int = Field(..., ge=0, description="Request body size in bytes")
    success: bool = Field(default=True, description="Whether the batch was accepted")
    error_message: str | None = Field(
        default=None,
        description="Rejection reason when success is False",
    )
    signature: str = Field(..., description="Nonce-bearing receipt signature")
