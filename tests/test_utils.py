"""Tests for key storage, JSONL persistence, and CLI JSON stamping."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from eventseal import __version__
from eventseal.audit.records import IngestionLog
from eventseal.utils.cli_output import json_response
from eventseal.utils.crypto import decode_bytes, encode_bytes, load_or_create_hmac_key
from eventseal.utils.jsonl import append_jsonl


def test_load_or_create_hmac_key_is_stable(temp_dir: Path) -> None:
    key_path = temp_dir / "keys" / "hmac.key"

    first = load_or_create_hmac_key(key_path, length=16)
    second = load_or_create_hmac_key(key_path, length=64)

    assert len(first) == 16
    assert first == second


def test_encode_bytes_handles_binary() -> None:
    raw = bytes(range(256))
    assert decode_bytes(encode_bytes(raw)) == raw
    assert encode_bytes(b"") == ""


def test_decode_bytes_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        decode_bytes("not base64!")


def test_append_jsonl_accepts_models_and_dicts(temp_dir: Path) -> None:
    path = temp_dir / "records.jsonl"
    receipt = IngestionLog(
        id="r-1",
        timestamp="2024-01-01T00:00:00.000000000Z",
        hec_token_id="token",
        source_ip="10.0.0.1",
        event_count=1,
        bytes_received=2,
        signature="a" * 64,
    )

    append_jsonl(path, receipt)
    append_jsonl(path, {"b": 2, "a": 1})

    lines = path.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[0])["id"] == "r-1"
    assert lines[1] == '{"a":1,"b":2}'


def test_append_jsonl_rejects_other_types(temp_dir: Path) -> None:
    with pytest.raises(TypeError):
        append_jsonl(temp_dir / "records.jsonl", ["not", "a", "record"])


def test_json_response_puts_schema_metadata_first() -> None:
    payload = json.loads(json_response("event_signature", 1, signature="ab"))

    assert list(payload)[:4] == ["schema_id", "schema_version", "producer", "produced_at"]
    assert payload["schema_id"] == "event_signature"
    assert payload["schema_version"] == 1
    assert payload["producer"] == f"eventseal-{__version__}"
    assert payload["signature"] == "ab"
