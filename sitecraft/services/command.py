"""CommandService: one chat command turn, end to end.

    matcher (advisory) → memory context → system prompt → router
        → executor → persistence → reply

Turns for the same project are serialized with a per-project lock so two
commands never execute against the same starting state.  The site is saved
only when at least one action succeeded; a provider outage or a batch in
which every action failed leaves it untouched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sitecraft.contracts.json_types import JSONObject, JSONValue, jstr
from sitecraft.contracts.llm_types import ChatMessage
from sitecraft.core.actions.executor import ActionExecutor, ActionResult
from sitecraft.core.capabilities.models import CapabilityMatch, UserContext
from sitecraft.core.capabilities.prompt_builder import BusinessInfo, build_system_prompt
from sitecraft.core.capabilities.registry import CapabilityRegistry, get_capability_registry
from sitecraft.core.errors import NotFoundError
from sitecraft.core.memory.context_builder import MemoryContextBuilder
from sitecraft.core.memory.locks import KeyedLocks, memory_locks
from sitecraft.core.memory.models import MessageRole, ProjectMemoryData
from sitecraft.core.memory.project import ProjectMemoryStore
from sitecraft.core.memory.repository import (
    ProjectMemoryRepository,
    SessionRepository,
    UserMemoryRepository,
)
from sitecraft.core.memory.session import SessionMemoryStore
from sitecraft.core.memory.user import UserMemoryStore
from sitecraft.core.providers.base import AIRequest, AIResponse, ProviderExhaustedError
from sitecraft.core.providers.router import ProviderRouter
from sitecraft.core.tools.site_tools import tools_for_capabilities
from sitecraft.models.requests import CommandContext, CommandRequest, HistoryMessage
from sitecraft.models.site import SectionContent, SiteState
from sitecraft.services.sites import SiteRepository

logger = logging.getLogger(__name__)

PROVIDER_UNAVAILABLE_MESSAGE = (
    "I'm having trouble reaching the AI service right now. Please try again in a moment."
)
ALL_ACTIONS_FAILED_MESSAGE = "I couldn't apply any of the requested changes."
NO_REPLY_MESSAGE = "I couldn't process that request."


class ProjectNotFoundError(NotFoundError):
    """The project does not exist or belongs to someone else."""


@dataclass
class CommandResult:
    response: str
    state: SiteState | None = None
    actions: list[ActionResult] = field(default_factory=list)
    matches: list[CapabilityMatch] = field(default_factory=list)

    @property
    def blocks(self) -> list[SectionContent] | None:
        return list(self.state.sections) if self.state is not None else None


def compose_reply(ai_text: str, results: list[ActionResult]) -> str:
    """The text the user sees for one turn.

    With no actions this is the model's own text.  When every action failed
    it is a fixed apology followed by each failure; otherwise the model's text
    (if any) followed by one line per action.
    """
    text = ai_text.strip()
    if not results:
        return text or NO_REPLY_MESSAGE

    if not any(r.success for r in results):
        lines = [ALL_ACTIONS_FAILED_MESSAGE]
        lines.extend(f"- {r.description}: {r.error}" for r in results)
        return "\n".join(lines)

    lines = [text] if text else []
    for r in results:
        if r.success:
            lines.append(f"- Done: {r.description}")
        else:
            lines.append(f"- Failed: {r.description}: {r.error}")
    return "\n".join(lines)


def _context_note(context: CommandContext | None) -> str | None:
    if context is None:
        return None
    lines: list[str] = []
    if context.selected_block_id:
        lines.append(f"The user has selected the section with id \"{context.selected_block_id}\".")
    if context.current_blocks:
        blocks = ", ".join(f"{b.id} ({b.block_type})" for b in context.current_blocks)
        lines.append(f"Blocks currently shown in the editor: {blocks}")
    return "\n".join(lines) or None


def _business_info(project: ProjectMemoryData) -> BusinessInfo | None:
    details = project.business_details
    if not details.name:
        return None
    return BusinessInfo(name=details.name, type=details.type, description=details.description or None)


def _history_from_request(history: list[HistoryMessage]) -> list[ChatMessage]:
    return [
        ChatMessage(role=m.role, content=m.content)
        for m in history
        if m.role != "system"
    ]


class CommandService:
    """Runs chat commands against project sites.

    Everything it talks to is passed in; build one per application and share
    it across requests so the per-project locks are shared too.
    """

    def __init__(
        self,
        router: ProviderRouter,
        sites: SiteRepository,
        user_memory: UserMemoryRepository,
        project_memory: ProjectMemoryRepository,
        sessions: SessionRepository,
        registry: CapabilityRegistry | None = None,
        locks: KeyedLocks = memory_locks,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        history_limit: int = 20,
    ) -> None:
        self._router = router
        self._sites = sites
        self._user_memory = user_memory
        self._project_memory = project_memory
        self._sessions = sessions
        self._registry = registry or get_capability_registry()
        self._locks = locks
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._history_limit = history_limit

    async def handle(
        self,
        user_id: str,
        request: CommandRequest,
        user_context: UserContext | None = None,
    ) -> CommandResult:
        """Run one command for *user_id*.

        Raises:
            ProjectNotFoundError: the project is missing or not the user's.
        """
        project_id = request.project_id
        async with self._locks(f"command:{project_id}"):
            state = await self._sites.get(project_id, user_id)
            if state is None:
                raise ProjectNotFoundError(f"Project {project_id} not found")
            return await self._run(user_id, request, state, user_context or UserContext())

    async def _run(
        self,
        user_id: str,
        request: CommandRequest,
        state: SiteState,
        user_context: UserContext,
    ) -> CommandResult:
        project_id = request.project_id
        user_store = UserMemoryStore(user_id, self._user_memory, self._locks)
        project_store = ProjectMemoryStore(project_id, self._project_memory, self._locks)
        session_store = SessionMemoryStore(project_id, user_id, self._sessions, self._locks)
        memory = MemoryContextBuilder(user_store, project_store, session_store)

        matches = self._registry.match(request.command)

        context = await memory.build_context()
        if request.history is not None:
            history = _history_from_request(request.history)
        else:
            stored = await memory.get_conversation_history(self._history_limit)
            history = memory.format_conversation_for_prompt(stored)

        capabilities = self._registry.prompt_capabilities(user_context)
        system = build_system_prompt(
            capabilities,
            site_state=state,
            business_info=_business_info(context.project) if context.project else None,
            memory_section=memory.build_system_prompt_section(context),
            additional_context=_context_note(request.context),
        )
        ai_request = AIRequest(
            messages=[*history, ChatMessage(role="user", content=request.command)],
            model=self._model,
            max_tokens=self._max_tokens,
            system=system,
            tools=tools_for_capabilities(capabilities) or None,
            temperature=self._temperature,
        )

        await session_store.add_message(MessageRole.USER, request.command)

        try:
            response = await self._router.complete(ai_request, timeout=self._timeout)
        except ProviderExhaustedError as e:
            logger.error(f"Command for project {project_id} got no AI response: {e}")
            await session_store.add_message(MessageRole.ASSISTANT, PROVIDER_UNAVAILABLE_MESSAGE)
            return CommandResult(response=PROVIDER_UNAVAILABLE_MESSAGE, matches=matches)

        executor = ActionExecutor(state)
        results = await executor.execute_all(response.tool_calls)
        succeeded = [r for r in results if r.success]

        new_state: SiteState | None = None
        if succeeded:
            new_state = executor.get_state()
            await self._sites.save(new_state)
            await self._remember(command=request.command, before=state, results=succeeded,
                                 user_store=user_store, project_store=project_store)

        reply = compose_reply(response.content, results)
        await session_store.add_message(
            MessageRole.ASSISTANT,
            reply,
            tool_calls=_tool_call_log(response),
            actions=[r.to_dict() for r in results],
            tokens=response.usage.output_tokens if response.usage else None,
        )
        logger.info(
            f"Command for project {project_id}: {len(results)} actions, "
            f"{len(succeeded)} succeeded"
        )
        return CommandResult(response=reply, state=new_state, actions=results, matches=matches)

    async def _remember(
        self,
        command: str,
        before: SiteState,
        results: list[ActionResult],
        user_store: UserMemoryStore,
        project_store: ProjectMemoryStore,
    ) -> None:
        """Feed successful design and content changes back into memory."""
        for result in results:
            changes = result.changes or {}
            if result.action == "update_colors":
                await project_store.record_design_decision(
                    "color",
                    before=before.styles.to_wire(),
                    after=changes,
                    rationale=command,
                )
                primary = jstr(changes.get("primaryColor"))
                if primary:
                    await user_store.learn_from_decision(command, primary, field="color")
            elif result.action == "update_fonts":
                await project_store.record_design_decision("font", after=changes, rationale=command)
                heading = jstr(changes.get("headingFont"))
                if heading:
                    await user_store.learn_from_decision(command, heading, field="font")
            elif result.action in ("add_section", "remove_section", "reorder_sections"):
                await project_store.record_design_decision("section", after=changes, rationale=command)
            elif result.action == "edit_section":
                section = changes.get("section")
                if isinstance(section, dict):
                    await project_store.save_content_version(jstr(section.get("id")), section)


def _tool_call_log(response: AIResponse) -> list[JSONValue]:
    log: list[JSONValue] = []
    for call in response.tool_calls:
        entry: JSONObject = {"id": call.id, "name": call.name, "arguments": call.arguments}
        log.append(entry)
    return log
