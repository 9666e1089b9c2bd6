"""Pydantic base for everything that crosses the API or lands in a JSON column.

Fields are snake_case in Python and camelCase on the wire.  Input is accepted
in either spelling, so a model can be rebuilt from its own wire form or
constructed directly in code.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


def to_camel(name: str) -> str:
    """``primary_color`` -> ``primaryColor``."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self, **kwargs: Any) -> dict[str, Any]:
        """JSON-safe camelCase dict; unset optionals are left out unless told otherwise."""
        kwargs.setdefault("exclude_none", True)
        return self.model_dump(mode="json", by_alias=True, **kwargs)
