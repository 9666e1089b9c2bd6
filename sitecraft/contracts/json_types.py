"""Canonical JSON type aliases.

Use ``JSONValue`` / ``JSONObject`` only when the shape is genuinely unknown
(raw tool-call arguments before validation, vendor payloads, memory blobs).
For every known structure, use a named TypedDict or pydantic model.

Do **not** use these aliases in Pydantic ``BaseModel`` fields; use
``pydantic.JsonValue`` there instead.
"""
from __future__ import annotations

JSONScalar = str | int | float | bool | None
"""A JSON leaf value with no recursive structure."""

JSONValue = str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]
"""Recursive JSON value, the most precise alternative to ``Any``."""

JSONObject = dict[str, JSONValue]
"""A JSON object with unknown key set."""


def jstr(v: JSONValue, default: str = "") -> str:
    """Safely extract a ``str`` from a ``JSONValue``."""
    return v if isinstance(v, str) else default


def jstr_list(v: JSONValue) -> list[str]:
    """Extract the string members of a JSON list; anything else yields ``[]``."""
    if not isinstance(v, list):
        return []
    return [item for item in v if isinstance(item, str)]
