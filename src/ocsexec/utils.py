from __future__ import annotations

import base64
import json
from datetime import datetime, timezone
from typing import Any


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.b64decode(value + padding, validate=True)


def utc_now_rfc3339() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def compact_json(payload: Any) -> str:
    """Serialize without whitespace, preserving key insertion order."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def strip_0x(value: str) -> str:
    return value[2:] if value.lower().startswith("0x") else value
