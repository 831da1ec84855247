"""Best-effort recovery of a JSON object from free-form model text."""

from __future__ import annotations

import json
from typing import Any


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def recover_json(raw: str | None) -> dict[str, Any] | None:
    """Recover a JSON object from *raw*, or return None.

    Tries the whole trimmed text first, then the span from the first ``{`` to
    the last ``}``, which covers objects wrapped in prose or markdown fences.
    Only objects count; a bare list or scalar is not a recovered structure.
    """
    if not raw:
        return None
    trimmed = raw.strip()
    parsed = _loads_object(trimmed)
    if parsed is not None:
        return parsed

    first = trimmed.find("{")
    last = trimmed.rfind("}")
    if first != -1 and last > first:
        return _loads_object(trimmed[first : last + 1])
    return None
