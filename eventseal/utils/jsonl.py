"""JSONL append helpers with durability guarantees."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, cast


def _normalize_record(record: Any) -> str:
    """Convert a Pydantic model or mapping into a single JSON line."""
    if hasattr(record, "model_dump_json"):
        return cast(str, cast(Any, record).model_dump_json())
    if isinstance(record, dict):
        return json.dumps(record, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    raise TypeError(
        "Unsupported record type for JSONL serialization: "
        f"{type(record)!r}. Provide dict or Pydantic model."
    )


def append_jsonl(path: Path, record: Any) -> None:
    """Append ``record`` to ``path`` as one JSON line and fsync it.

    Audit records must survive a crash right after the caller is told they
    were written, so every append is flushed and fsynced before returning.
    """
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    line = _normalize_record(record)
    with open(destination, "a", encoding="utf-8") as fh:
        fh.write(line + "\n")
        fh.flush()
        os.fsync(fh.fileno())
