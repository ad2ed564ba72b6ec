"""CLI JSON output wrapper.

Wraps CLI JSON outputs with schema metadata (schema_id, schema_version,
producer, produced_at) so downstream tooling can detect format changes.
"""

from __future__ import annotations

import json
from typing import Any

from eventseal.utils.schema import build_schema_stamp


def json_response(
    schema_id: str,
    schema_version: int,
    **data: Any,
) -> str:
    """Create schema-wrapped JSON response for CLI output.

    Args:
        schema_id: Identifier for the output type (e.g., "event_signature").
        schema_version: Integer version for backward compatibility.
        **data: Payload data to include in the response.

    Returns:
        JSON string with schema metadata and payload.

    Example:
        >>> json_response("event_signature", 1, event_id="evt-1", signature="ab...")
        {
          "schema_id": "event_signature",
          "schema_version": 1,
          "producer": "eventseal-0.1.0",
          "produced_at": "2025-12-12T10:30:00+00:00",
          "event_id": "evt-1",
          "signature": "ab..."
        }
    """
    stamp = build_schema_stamp(schema_id=schema_id, schema_version=schema_version)
    wrapped = {
        "schema_id": stamp.schema_id,
        "schema_version": stamp.schema_version,
        "producer": stamp.producer,
        "produced_at": stamp.produced_at,
        **data,
    }
    return json.dumps(wrapped, indent=2, default=str)
