"""Typed tool-call payloads.

A provider hands us ``ToolCall(name, arguments)`` with an untyped argument
map.  ``parse_tool_call`` is the single boundary where that map becomes one
member of the ``ActionPayload`` tagged union (discriminated on ``action``);
handlers only ever see validated, typed payloads.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from sitecraft.contracts.json_types import JSONObject
from sitecraft.core.errors import InvalidToolArgumentsError, UnknownActionError, ValidationError
from sitecraft.models.site import SectionCta, SectionItem, SectionType

Position = Literal["start", "end", "after_hero", "before_contact"]


@dataclass(frozen=True)
class ToolCall:
    """A tool call as emitted by a provider, before validation."""

    name: str
    arguments: JSONObject = field(default_factory=dict)
    id: str = ""


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ItemInput(_Payload):
    """A section item as the model writes it; ids are optional."""

    id: str | None = None
    title: str
    description: str = ""
    icon: str | None = None
    price: str | None = None
    image: str | None = None

    def to_item(self, fallback_id: str) -> SectionItem:
        return SectionItem(
            id=self.id or fallback_id,
            title=self.title,
            description=self.description,
            icon=self.icon,
            price=self.price,
            image=self.image,
        )


class SectionContentInput(_Payload):
    title: str | None = None
    subtitle: str | None = None
    content: str | None = None
    items: list[ItemInput] | None = None
    cta: SectionCta | None = None


class SectionUpdates(_Payload):
    """Fields ``edit_section`` may overwrite; only keys actually sent are applied."""

    title: str | None = None
    subtitle: str | None = None
    content: str | None = None
    items: list[ItemInput] | None = None
    cta: SectionCta | None = None
    styles: dict[str, str] | None = None


class AddSectionArgs(_Payload):
    action: Literal["add_section"] = "add_section"
    section_type: SectionType
    position: Position = "end"
    content: SectionContentInput | None = None

    @field_validator("position", mode="before")
    @classmethod
    def _default_position(cls, v: object) -> object:
        return "end" if v in (None, "") else v


class RemoveSectionArgs(_Payload):
    action: Literal["remove_section"] = "remove_section"
    section_id: str | None = None
    section_type: SectionType | None = None


class EditSectionArgs(_Payload):
    action: Literal["edit_section"] = "edit_section"
    section_id: str | None = None
    section_type: SectionType | None = None
    updates: SectionUpdates


class ReorderSectionsArgs(_Payload):
    action: Literal["reorder_sections"] = "reorder_sections"
    section_order: list[str]


class UpdateColorsArgs(_Payload):
    action: Literal["update_colors"] = "update_colors"
    primary_color: str | None = None
    secondary_color: str | None = None
    accent_color: str | None = None


class UpdateFontsArgs(_Payload):
    action: Literal["update_fonts"] = "update_fonts"
    heading_font: str | None = None
    body_font: str | None = None


class UpdateSeoArgs(_Payload):
    action: Literal["update_seo"] = "update_seo"
    page_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] | None = None


class GetSiteInfoArgs(_Payload):
    action: Literal["get_site_info"] = "get_site_info"
    include: list[str] | None = None


ActionPayload = Annotated[
    Union[
        AddSectionArgs,
        RemoveSectionArgs,
        EditSectionArgs,
        ReorderSectionsArgs,
        UpdateColorsArgs,
        UpdateFontsArgs,
        UpdateSeoArgs,
        GetSiteInfoArgs,
    ],
    Field(discriminator="action"),
]

_PAYLOAD_ADAPTER: TypeAdapter[ActionPayload] = TypeAdapter(ActionPayload)

ACTION_NAMES: frozenset[str] = frozenset({
    "add_section",
    "remove_section",
    "edit_section",
    "reorder_sections",
    "update_colors",
    "update_fonts",
    "update_seo",
    "get_site_info",
})


def _to_validation_errors(exc: PydanticValidationError) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        errors.append(ValidationError(field=loc, message=err["msg"], code=err["type"]))
    return errors


def parse_tool_call(tool_call: ToolCall) -> ActionPayload:
    """Validate *tool_call* into its typed payload.

    Raises:
        UnknownActionError: the name is not an executable action.
        InvalidToolArgumentsError: the arguments do not fit the payload.
    """
    if tool_call.name not in ACTION_NAMES:
        raise UnknownActionError(tool_call.name)

    raw = dict(tool_call.arguments) if isinstance(tool_call.arguments, dict) else {}
    raw["action"] = tool_call.name
    try:
        return _PAYLOAD_ADAPTER.validate_python(raw)
    except PydanticValidationError as exc:
        raise InvalidToolArgumentsError(tool_call.name, _to_validation_errors(exc)) from exc
