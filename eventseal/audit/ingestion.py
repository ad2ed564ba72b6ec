"""Signed receipts for accepted ingestion batches."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from eventseal.app.ports import SignerPort
from eventseal.audit.records import IngestionLog
from eventseal.audit.timestamps import EventTimestamp, TimestampLike, to_event_timestamp
from eventseal.utils.jsonl import append_jsonl

logger = logging.getLogger(__name__)


class IngestionRecorder:
    """Build a signed :class:`IngestionLog` for every ingestion batch.

    Receipt signatures are nonce-bearing (see
    :meth:`~eventseal.audit.signer.EventSigner.sign_ingestion`), so two
    receipts for byte-identical batches never share a signature. When
    ``log_path`` is set, each receipt is also appended there as JSONL.
    """

    def __init__(self, signer: SignerPort, log_path: Path | None = None) -> None:
        self._signer = signer
        self.log_path = log_path

    def record(
        self,
        hec_token_id: str,
        source_ip: str,
        event_count: int,
        bytes_received: int,
        *,
        success: bool = True,
        error_message: str | None = None,
        timestamp: TimestampLike | None = None,
    ) -> IngestionLog:
        """Sign and return a receipt for one batch.

        Args:
            hec_token_id: Token the batch was authenticated with
            source_ip: Client IP of the batch
            event_count: Number of events in the batch
            bytes_received: Size of the request body
            success: Whether the batch was accepted
            error_message: Rejection reason, if any
            timestamp: Acceptance time (defaults to now)

        Raises:
            ValueError: If ``event_count`` or ``bytes_received`` is negative
        """
        if event_count < 0:
            raise ValueError(f"event_count must be non-negative, got {event_count}")
        if bytes_received < 0:
            raise ValueError(f"bytes_received must be non-negative, got {bytes_received}")

        accepted_at = EventTimestamp.now() if timestamp is None else to_event_timestamp(timestamp)
        signature = self._signer.sign_ingestion(
            hec_token_id, source_ip, event_count, bytes_received, accepted_at
        )

        receipt = IngestionLog(
            id=str(uuid.uuid4()),
            timestamp=accepted_at.isoformat(),
            hec_token_id=hec_token_id,
            source_ip=source_ip,
            event_count=event_count,
            bytes_received=bytes_received,
            success=success,
            error_message=error_message,
            signature=signature,
        )

        if self.log_path is not None:
            append_jsonl(self.log_path, receipt)

        logger.debug(
            "Recorded ingestion receipt %s (%d events, %d bytes)",
            receipt.id,
            event_count,
            bytes_received,
        )
        return receipt

    def read_all(self) -> list[IngestionLog]:
        """Read receipts previously written to ``log_path``."""
        if self.log_path is None or not self.log_path.exists():
            return []

        receipts: list[IngestionLog] = []
        with open(self.log_path, encoding="utf-8") as fh:
            for line_num, raw_line in enumerate(fh, 1):
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    receipts.append(IngestionLog.model_validate_json(line))
                except ValueError as exc:
                    raise ValueError(
                        f"Invalid receipt at line {line_num} in {self.log_path}: {exc}"
                    ) from exc
        return receipts
