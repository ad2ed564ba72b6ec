"""Append-only JSONL audit trail of individually signed events."""

from __future__ import annotations

import logging
from pathlib import Path

from eventseal.app.ports import SignerPort
from eventseal.audit.records import SignedEvent
from eventseal.audit.signer import PayloadLike
from eventseal.audit.timestamps import TimestampLike, to_event_timestamp
from eventseal.utils.jsonl import append_jsonl

logger = logging.getLogger(__name__)


class AuditTrail:
    """Append-only audit trail for tamper-evident event records.

    Each event is signed on write and stored as one JSON line together with
    exactly the fields that were signed. Verification recomputes every
    signature; any record that fails, or cannot even be decoded, makes the
    whole trail invalid.
    """

    def __init__(self, trail_path: Path, signer: SignerPort) -> None:
        """Initialize audit trail.

        Args:
            trail_path: Path to JSONL trail file
            signer: Signer shared with the rest of the process
        """
        self.trail_path = trail_path
        self.trail_path.parent.mkdir(parents=True, exist_ok=True)
        self._signer = signer

    # ---------------------------------------------------------------------#
    # Internal helpers
    # ---------------------------------------------------------------------#

    def _read_entries(self) -> list[SignedEvent]:
        """Load trail entries from disk."""
        if not self.trail_path.exists():
            return []

        entries: list[SignedEvent] = []
        with open(self.trail_path, encoding="utf-8") as fh:
            for line_num, raw_line in enumerate(fh, 1):
                line = raw_line.strip()
                if not line:
                    continue

                try:
                    entries.append(SignedEvent.model_validate_json(line))
                except ValueError as exc:
                    raise ValueError(
                        f"Invalid entry at line {line_num} in {self.trail_path}: {exc}"
                    ) from exc

        return entries

    # ---------------------------------------------------------------------#
    # Public API
    # ---------------------------------------------------------------------#

    def append(
        self,
        event_id: str,
        timestamp: TimestampLike,
        source_ip: str,
        payload: PayloadLike,
    ) -> SignedEvent:
        """Sign an event and append it to the trail.

        Args:
            event_id: Event identifier
            timestamp: Event time
            source_ip: Source IP literal
            payload: Raw payload (``str`` is stored as its UTF-8 bytes)

        Returns:
            The persisted signed event
        """
        instant = to_event_timestamp(timestamp)
        if isinstance(payload, str):
            raw = payload.encode("utf-8", "surrogatepass")
        else:
            raw = bytes(payload)
        signature = self._signer.sign(event_id, instant, source_ip, raw)

        entry = SignedEvent.from_fields(event_id, instant, source_ip, raw, signature)
        append_jsonl(self.trail_path, entry)
        logger.debug("Appended signed event %s to %s", event_id, self.trail_path)
        return entry

    def read_all(self) -> list[SignedEvent]:
        """Read all entries from the trail.

        Returns:
            List of signed events in write order
        """
        return self._read_entries()

    def verify_entry(self, entry: SignedEvent) -> bool:
        """Return True when ``entry`` carries a valid signature."""
        try:
            instant = entry.event_timestamp()
            payload = entry.payload_bytes()
        except ValueError:
            return False
        return self._signer.verify(
            entry.event_id, instant, entry.source_ip, payload, entry.signature
        )

    def verify(self) -> tuple[bool, str | None]:
        """Verify every signature in the trail.

        Returns:
            Tuple of (is_valid, error_message). error_message is None if valid.
        """
        try:
            entries = self._read_entries()
        except ValueError as exc:
            return False, f"Audit trail unreadable: {exc}"

        for idx, entry in enumerate(entries, 1):
            if not self.verify_entry(entry):
                logger.warning(
                    "Audit trail %s failed verification at entry %d (event %s)",
                    self.trail_path,
                    idx,
                    entry.event_id,
                )
                return (
                    False,
                    f"Entry {idx} (event '{entry.event_id}') has invalid signature; "
                    "trail may have been tampered.",
                )

        return True, None

    def get_by_event_id(self, event_id: str) -> list[SignedEvent]:
        """Get all entries recorded for ``event_id``."""
        return [entry for entry in self.read_all() if entry.event_id == event_id]

    def get_by_source_ip(self, source_ip: str) -> list[SignedEvent]:
        """Get all entries that originated from ``source_ip``."""
        return [entry for entry in self.read_all() if entry.source_ip == source_ip]
