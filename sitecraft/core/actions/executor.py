"""ActionExecutor: applies validated tool calls to a ``SiteState``.

Contract:

- ``execute`` never raises.  Unknown actions, bad arguments, lookup misses
  and unexpected handler failures all come back as an ``ActionResult`` with
  ``success=False``.
- Each handler mutates a deep copy of the state; the copy replaces the live
  state only when the handler returns normally, so a failing call leaves the
  state exactly as it was.
- ``execute_all`` runs calls strictly in order.  Later calls see what earlier
  calls in the same batch did (an ``edit_section`` can target a section
  added two calls before it).
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from sitecraft.contracts.json_types import JSONObject
from sitecraft.core.actions.payloads import (
    ActionPayload,
    AddSectionArgs,
    EditSectionArgs,
    GetSiteInfoArgs,
    ItemInput,
    RemoveSectionArgs,
    ReorderSectionsArgs,
    ToolCall,
    UpdateColorsArgs,
    UpdateFontsArgs,
    UpdateSeoArgs,
    parse_tool_call,
)
from sitecraft.core.errors import (
    InvalidToolArgumentsError,
    SectionNotFoundError,
    UnknownActionError,
)
from sitecraft.models.site import (
    SectionContent,
    SectionItem,
    SectionType,
    SiteState,
    default_title,
)

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Outcome of one tool call."""

    success: bool
    action: str
    description: str
    changes: JSONObject | None = None
    error: str | None = None

    def to_dict(self) -> JSONObject:
        out: JSONObject = {
            "success": self.success,
            "action": self.action,
            "description": self.description,
        }
        if self.changes is not None:
            out["changes"] = self.changes
        if self.error is not None:
            out["error"] = self.error
        return out


_Outcome = tuple[str, JSONObject]


def _items(inputs: list[ItemInput] | None, section_id: str) -> list[SectionItem] | None:
    if inputs is None:
        return None
    return [item.to_item(f"{section_id}_item_{i}") for i, item in enumerate(inputs)]


def _dump(model: SectionContent) -> JSONObject:
    return model.to_wire()


class ActionExecutor:
    """Executes AI tool calls against one site's state.

    One instance is scoped to a single command turn and must not be shared
    across concurrent callers.
    """

    def __init__(
        self,
        initial_state: SiteState,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._state = initial_state.model_copy(deep=True)
        self._pending: list[ActionResult] = []
        self._clock = clock

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(self, tool_call: ToolCall) -> ActionResult:
        name = tool_call.name
        try:
            payload = parse_tool_call(tool_call)
        except UnknownActionError:
            logger.warning(f"Unknown action requested: {name}")
            return ActionResult(
                success=False,
                action=name,
                description=f"Unknown action: {name}",
                error="Action not implemented",
            )
        except InvalidToolArgumentsError as exc:
            logger.info(f"Invalid arguments for {name}: {exc}")
            return ActionResult(
                success=False,
                action=name,
                description=f"Invalid arguments for {name}",
                error=str(exc),
            )

        working = self._state.model_copy(deep=True)
        try:
            description, changes = self._dispatch(working, payload)
        except SectionNotFoundError as exc:
            return ActionResult(
                success=False,
                action=name,
                description="Section not found",
                error=str(exc),
            )
        except Exception as exc:
            logger.exception(f"Action {name} failed")
            return ActionResult(
                success=False,
                action=name,
                description=f"Failed to execute {name}",
                error=str(exc) or "Unknown error",
            )

        self._state = working
        logger.info(f"Executed {name}: {description}")
        return ActionResult(success=True, action=name, description=description, changes=changes)

    async def execute_all(self, tool_calls: Sequence[ToolCall]) -> list[ActionResult]:
        results: list[ActionResult] = []
        for tool_call in tool_calls:
            result = await self.execute(tool_call)
            results.append(result)
            self._pending.append(result)
        return results

    def get_state(self) -> SiteState:
        return self._state

    def get_pending_changes(self) -> list[ActionResult]:
        return list(self._pending)

    def clear_pending_changes(self) -> None:
        self._pending = []

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, state: SiteState, payload: ActionPayload) -> _Outcome:
        if isinstance(payload, AddSectionArgs):
            return self._add_section(state, payload)
        if isinstance(payload, RemoveSectionArgs):
            return self._remove_section(state, payload)
        if isinstance(payload, EditSectionArgs):
            return self._edit_section(state, payload)
        if isinstance(payload, ReorderSectionsArgs):
            return self._reorder_sections(state, payload)
        if isinstance(payload, UpdateColorsArgs):
            return self._update_colors(state, payload)
        if isinstance(payload, UpdateFontsArgs):
            return self._update_fonts(state, payload)
        if isinstance(payload, UpdateSeoArgs):
            return self._update_seo(state, payload)
        if isinstance(payload, GetSiteInfoArgs):
            return self._get_site_info(state, payload)
        raise UnknownActionError(payload.action)

    def _new_section_id(self, state: SiteState) -> str:
        base = f"section_{int(self._clock() * 1000)}"
        taken = set(state.section_ids())
        candidate, n = base, 1
        while candidate in taken:
            candidate = f"{base}_{n}"
            n += 1
        return candidate

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _add_section(self, state: SiteState, args: AddSectionArgs) -> _Outcome:
        section_id = self._new_section_id(state)
        content = args.content
        section = SectionContent(
            id=section_id,
            type=args.section_type,
            title=(content.title if content and content.title else default_title(args.section_type)),
            subtitle=content.subtitle if content else None,
            content=content.content if content else None,
            items=_items(content.items, section_id) if content else None,
            cta=content.cta if content else None,
        )

        sections = state.sections
        if args.position == "start":
            sections.insert(0, section)
        elif args.position == "after_hero":
            # No hero gives index -1, so the section lands at the very start.
            hero_index = state.find_index(section_type=SectionType.HERO)
            sections.insert(hero_index + 1, section)
        elif args.position == "before_contact":
            contact_index = state.find_index(section_type=SectionType.CONTACT)
            if contact_index >= 0:
                sections.insert(contact_index, section)
            else:
                sections.append(section)
        else:
            sections.append(section)

        return f"Added {args.section_type.value} section", {"section": _dump(section)}

    def _remove_section(self, state: SiteState, args: RemoveSectionArgs) -> _Outcome:
        index = state.find_index(args.section_id, args.section_type)
        if index < 0:
            raise SectionNotFoundError("Could not find section to remove")
        removed = state.sections.pop(index)
        return f"Removed {removed.type.value} section", {"removed": _dump(removed)}

    def _edit_section(self, state: SiteState, args: EditSectionArgs) -> _Outcome:
        index = state.find_index(args.section_id, args.section_type)
        if index < 0:
            raise SectionNotFoundError("Could not find section to edit")

        current = state.sections[index]
        updates = args.updates.model_dump(exclude_unset=True)
        if updates.get("title") is None:
            updates.pop("title", None)
        if args.updates.items is not None:
            updates["items"] = _items(args.updates.items, current.id)
        merged = SectionContent.model_validate({**current.model_dump(), **updates})
        state.sections[index] = merged

        applied = args.updates.model_dump(by_alias=True, exclude_unset=True, mode="json")
        return f"Updated {merged.type.value} section", {"section": _dump(merged), "updates": applied}

    def _reorder_sections(self, state: SiteState, args: ReorderSectionsArgs) -> _Outcome:
        by_id = {s.id: s for s in state.sections}
        ordered: list[SectionContent] = []
        placed: set[str] = set()
        for section_id in args.section_order:
            section = by_id.get(section_id)
            if section is not None and section_id not in placed:
                ordered.append(section)
                placed.add(section_id)
        # Sections missing from the requested order keep their relative order at the end.
        ordered.extend(s for s in state.sections if s.id not in placed)
        state.sections = ordered
        return "Reordered sections", {"newOrder": [s.id for s in ordered]}

    def _update_colors(self, state: SiteState, args: UpdateColorsArgs) -> _Outcome:
        changes: JSONObject = {}
        if args.primary_color:
            state.styles.primary_color = args.primary_color
            changes["primaryColor"] = args.primary_color
        if args.secondary_color:
            state.styles.secondary_color = args.secondary_color
            changes["secondaryColor"] = args.secondary_color
        if args.accent_color:
            state.styles.accent_color = args.accent_color
            changes["accentColor"] = args.accent_color
        return "Updated color scheme", changes

    def _update_fonts(self, state: SiteState, args: UpdateFontsArgs) -> _Outcome:
        changes: JSONObject = {}
        if args.heading_font:
            state.styles.heading_font = args.heading_font
            changes["headingFont"] = args.heading_font
        if args.body_font:
            state.styles.body_font = args.body_font
            changes["bodyFont"] = args.body_font
        return "Updated typography", changes

    def _update_seo(self, state: SiteState, args: UpdateSeoArgs) -> _Outcome:
        changes: JSONObject = {}
        if args.page_title:
            state.meta.title = args.page_title
            changes["title"] = args.page_title
        if args.meta_description:
            state.meta.description = args.meta_description
            changes["description"] = args.meta_description
        return "Updated SEO settings", changes

    def _get_site_info(self, state: SiteState, args: GetSiteInfoArgs) -> _Outcome:
        return "Retrieved site information", {
            "sectionCount": len(state.sections),
            "sectionTypes": [s.type.value for s in state.sections],
            "styles": state.styles.to_wire(),
            "meta": state.meta.to_wire(),
        }
