"""HMAC-SHA256 signing for audit-trail events and ingestion receipts.

Event signatures are deterministic: the same secret and the same canonical
input always produce the same 64-character lowercase hex digest, so a stored
record can be re-verified later. Ingestion receipt signatures mix in a fresh
random nonce on every call and are therefore unique per call.

Canonical signing input for an event::

    event_id | YYYY-MM-DDTHH:MM:SS.fffffffffZ | source_ip | <raw payload bytes>

Canonical signing input for an ingestion receipt::

    hec_token_id | source_ip | event_count | bytes_received | timestamp | nonce_hex

The free-text fields (event_id, source_ip, hec_token_id) have ``%`` and ``|``
percent-escaped before joining.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import TYPE_CHECKING, Any

from eventseal.audit.timestamps import TimestampLike, format_timestamp

if TYPE_CHECKING:
    from eventseal.config import Settings

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "|"
SIGNATURE_LENGTH = 64
NONCE_BYTES = 16

PayloadLike = bytes | bytearray | memoryview | str

_HEX_DIGITS = frozenset("0123456789abcdef")
_FIELD_ESCAPES = str.maketrans({"%": "%25", FIELD_DELIMITER: "%7C"})


def _encode_text(value: str) -> bytes:
    # surrogatepass keeps encoding total for any str the caller hands us
    return value.encode("utf-8", "surrogatepass")


def _escape_field(value: str) -> bytes:
    # "%" -> "%25", "|" -> "%7C"
    return _encode_text(value.translate(_FIELD_ESCAPES))


def _payload_bytes(payload: PayloadLike) -> bytes:
    if isinstance(payload, str):
        return _encode_text(payload)
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    raise TypeError(
        f"Unsupported payload type {type(payload).__name__!r}; expected bytes or str"
    )


def _require_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


def canonical_event_bytes(
    event_id: str,
    timestamp: TimestampLike,
    source_ip: str,
    payload: PayloadLike,
) -> bytes:
    """Build the exact byte sequence hashed by :meth:`EventSigner.sign`.

    ``%`` and ``|`` inside ``event_id`` and ``source_ip`` are percent-escaped
    (``%25``, ``%7C``), so every delimiter before the payload is a real field
    boundary. Ordinary identifiers and IP literals are unchanged. The payload
    follows the last delimiter raw and may contain anything.
    """
    delimiter = _encode_text(FIELD_DELIMITER)
    head = delimiter.join(
        [
            _escape_field(event_id),
            _encode_text(format_timestamp(timestamp)),
            _escape_field(source_ip),
            b"",
        ]
    )
    return head + _payload_bytes(payload)


def canonical_ingestion_bytes(
    hec_token_id: str,
    source_ip: str,
    event_count: int,
    bytes_received: int,
    timestamp: TimestampLike,
    nonce: bytes,
) -> bytes:
    """Build the byte sequence hashed for an ingestion receipt.

    Text fields are escaped the same way as in :func:`canonical_event_bytes`.
    """
    fields = [
        hec_token_id.translate(_FIELD_ESCAPES),
        source_ip.translate(_FIELD_ESCAPES),
        str(_require_int("event_count", event_count)),
        str(_require_int("bytes_received", bytes_received)),
        format_timestamp(timestamp),
        bytes(nonce).hex(),
    ]
    return _encode_text(FIELD_DELIMITER.join(fields))


def is_well_formed_signature(value: object) -> bool:
    """Return True when ``value`` is a 64-character lowercase hex string."""
    if not isinstance(value, str) or len(value) != SIGNATURE_LENGTH:
        return False
    return all(char in _HEX_DIGITS for char in value)


class EventSigner:
    """Sign and verify audit events and ingestion receipts with one secret.

    Build one instance at startup and pass it by reference to every consumer.
    The secret cannot be read back or replaced after construction, and every
    operation is a pure computation, so a single instance is safe to share
    across threads without locking.

    Args:
        secret_key: HMAC key. Any byte string is accepted, including an empty
            one; ``str`` keys are UTF-8 encoded. Key strength is the
            configuration layer's concern.
    """

    __slots__ = ("_secret_key",)

    def __init__(self, secret_key: bytes | str) -> None:
        key = _encode_text(secret_key) if isinstance(secret_key, str) else bytes(secret_key)
        if not key:
            logger.warning("EventSigner created with an empty secret key")
        object.__setattr__(self, "_secret_key", key)

    @classmethod
    def from_settings(cls, settings: Settings) -> EventSigner:
        """Construct a signer from the configured audit secret."""
        return cls(settings.get_audit_secret())

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("EventSigner is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("EventSigner is immutable")

    def __repr__(self) -> str:
        return "EventSigner(secret_key=<redacted>)"

    def _digest(self, message: bytes) -> str:
        return hmac.new(self._secret_key, message, hashlib.sha256).hexdigest()

    def sign(
        self,
        event_id: str,
        timestamp: TimestampLike,
        source_ip: str,
        payload: PayloadLike,
    ) -> str:
        """Return the deterministic signature for an audit event.

        Args:
            event_id: Event identifier
            timestamp: Event time (nanosecond precision is preserved)
            source_ip: Source IP literal as recorded
            payload: Raw event payload bytes

        Returns:
            64-character lowercase hex HMAC-SHA256 digest
        """
        return self._digest(canonical_event_bytes(event_id, timestamp, source_ip, payload))

    def verify(
        self,
        event_id: str,
        timestamp: TimestampLike,
        source_ip: str,
        payload: PayloadLike,
        signature: str,
    ) -> bool:
        """Check ``signature`` against the recomputed event signature.

        Fail-closed: anything other than an exact match, including a
        malformed signature, yields ``False`` rather than an exception. The
        final comparison runs in constant time.
        """
        if not is_well_formed_signature(signature):
            logger.debug("Rejected malformed signature for event %r", event_id)
            return False

        expected = self.sign(event_id, timestamp, source_ip, payload)
        return hmac.compare_digest(expected, signature)

    def sign_ingestion(
        self,
        hec_token_id: str,
        source_ip: str,
        event_count: int,
        bytes_received: int,
        timestamp: TimestampLike,
    ) -> str:
        """Return a receipt signature for an accepted ingestion batch.

        A fresh :data:`NONCE_BYTES`-byte random nonce is mixed into every
        call, so identical arguments never produce the same signature. The
        nonce is neither returned nor stored, which means the signature
        cannot be re-derived and checked later; receipts produced here are
        write-only. Use :meth:`sign_ingestion_with_nonce` when the nonce is
        retained elsewhere.
        """
        nonce = secrets.token_bytes(NONCE_BYTES)
        return self.sign_ingestion_with_nonce(
            hec_token_id,
            source_ip,
            event_count,
            bytes_received,
            timestamp,
            nonce=nonce,
        )

    def sign_ingestion_with_nonce(
        self,
        hec_token_id: str,
        source_ip: str,
        event_count: int,
        bytes_received: int,
        timestamp: TimestampLike,
        *,
        nonce: bytes,
    ) -> str:
        """Deterministic receipt signature for an explicit ``nonce``."""
        message = canonical_ingestion_bytes(
            hec_token_id,
            source_ip,
            event_count,
            bytes_received,
            timestamp,
            nonce,
        )
        return self._digest(message)
