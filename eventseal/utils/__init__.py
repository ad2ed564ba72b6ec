"""Utility modules for common operations."""

from eventseal.utils.crypto import decode_bytes, encode_bytes, load_or_create_hmac_key
from eventseal.utils.jsonl import append_jsonl
from eventseal.utils.schema import SchemaStamp, build_schema_stamp

__all__ = [
    "append_jsonl",
    "build_schema_stamp",
    "decode_bytes",
    "encode_bytes",
    "load_or_create_hmac_key",
    "SchemaStamp",
]
