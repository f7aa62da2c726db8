"""
JSON serialization helpers shared by the task file and the client export.

Both formats are a pretty-printed array with 2-space indentation.
"""

import json
from datetime import date, datetime
from typing import Any

from tasktrack.utils.time import to_iso


def _json_default(value: Any) -> Any:
    """Serialize unsupported types into JSON-friendly values."""
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, set):
        return sorted(value)
    raise TypeError(f"Type {type(value)} not serializable")


def pretty_dumps(value: Any) -> str:
    """Return indented JSON, keeping non-ASCII text readable."""
    return json.dumps(
        value,
        indent=2,
        ensure_ascii=False,
        default=_json_default,
    )


def compact_dumps(value: Any) -> str:
    """Return single-line JSON (used for the local key-value record)."""
    return json.dumps(
        value,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )
