"""First-draft site generation.

Once onboarding has the business basics, the whole site is written in one
completion: the model gets a copywriting prompt listing the sections that
suit the business type and answers with a JSON document holding the page
meta and every section.  That document becomes the project's ``SiteState``.
"""
from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from sitecraft.contracts.llm_types import ChatMessage
from sitecraft.core.capabilities.prompt_builder import BusinessInfo, build_site_generation_prompt
from sitecraft.core.memory.locks import KeyedLocks, memory_locks
from sitecraft.core.memory.project import ProjectMemoryStore
from sitecraft.core.memory.repository import ProjectMemoryRepository
from sitecraft.core.pipeline.models import (
    BUSINESS_TYPE_DEFAULTS,
    DEFAULT_PRIMARY_COLOR,
    FONT_RECOMMENDATIONS,
)
from sitecraft.core.pipeline.validator import derive_accent_color, derive_secondary_color
from sitecraft.core.providers.base import AIRequest
from sitecraft.core.providers.router import ProviderRouter
from sitecraft.models.base import CamelModel
from sitecraft.models.site import (
    SectionContent,
    SectionCta,
    SectionItem,
    SectionType,
    SiteMeta,
    SiteState,
    SiteStyles,
)
from sitecraft.services.command import ProjectNotFoundError
from sitecraft.services.sites import SiteRepository

logger = logging.getLogger(__name__)

_S = SectionType

TEMPLATE_SECTIONS: dict[str, tuple[SectionType, ...]] = {
    "restaurant": (_S.HERO, _S.ABOUT, _S.MENU, _S.GALLERY, _S.TESTIMONIALS, _S.CONTACT),
    "portfolio": (_S.HERO, _S.ABOUT, _S.PORTFOLIO, _S.SERVICES, _S.TESTIMONIALS, _S.CONTACT),
    "business": (_S.HERO, _S.FEATURES, _S.ABOUT, _S.TEAM, _S.TESTIMONIALS, _S.CTA, _S.CONTACT),
    "ecommerce": (_S.HERO, _S.FEATURES, _S.TESTIMONIALS, _S.FAQ, _S.NEWSLETTER, _S.CONTACT),
    "blog": (_S.HERO, _S.ABOUT, _S.NEWSLETTER, _S.CONTACT),
    "other": (_S.HERO, _S.ABOUT, _S.FEATURES, _S.TESTIMONIALS, _S.CONTACT),
}

GENERATION_MAX_TOKENS = 4096
GENERATED_CONTENT_KEY = "site"

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


class ContentGenerationError(Exception):
    """The model's reply could not be turned into site content."""


@dataclass(frozen=True)
class GenerateInput:
    business_type: str
    business_name: str
    business_description: str = ""
    business_tagline: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None


class GeneratedItem(CamelModel):
    title: str
    description: str = ""
    icon: str | None = None
    price: str | None = None


class GeneratedSection(CamelModel):
    # Kept as text: the model may invent a type the renderer does not have.
    type: str
    title: str
    subtitle: str | None = None
    content: str | None = None
    items: list[GeneratedItem] | None = None
    cta: SectionCta | None = None


class GeneratedContent(CamelModel):
    meta: SiteMeta
    sections: list[GeneratedSection] = Field(default_factory=list)


def sections_for(business_type: str) -> tuple[SectionType, ...]:
    return TEMPLATE_SECTIONS.get(business_type, TEMPLATE_SECTIONS["other"])


def parse_generated_content(text: str) -> GeneratedContent:
    """Parse the model's JSON reply, also accepting it inside a code fence.

    Raises:
        ContentGenerationError: empty reply, no parseable JSON, or JSON of
            the wrong shape.
    """
    text = text.strip()
    if not text:
        raise ContentGenerationError("No text content in response")

    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        match = _CODE_FENCE.search(text)
        if match is None:
            raise ContentGenerationError("Failed to parse AI response as JSON")
        try:
            raw = json.loads(match.group(1).strip())
        except json.JSONDecodeError as e:
            raise ContentGenerationError("Failed to parse AI response as JSON") from e

    try:
        return GeneratedContent.model_validate(raw)
    except PydanticValidationError as e:
        raise ContentGenerationError(
            f"Generated content has the wrong shape ({e.error_count()} errors)"
        ) from e


async def generate_site_content(
    router: ProviderRouter,
    generate_input: GenerateInput,
    timeout: float | None = None,
) -> GeneratedContent:
    """Write the content for a new site in one completion.

    Raises:
        ProviderExhaustedError: no provider produced a response.
        ContentGenerationError: the reply was not usable site content.
    """
    business = BusinessInfo(
        name=generate_input.business_name,
        type=generate_input.business_type,
        description=generate_input.business_description,
        tagline=generate_input.business_tagline,
    )
    section_types = [t.value for t in sections_for(generate_input.business_type)]
    prompt = build_site_generation_prompt(business, section_types)

    response = await router.complete(
        AIRequest(
            messages=[ChatMessage(role="user", content=prompt)],
            model=router.select_model("generation"),
            max_tokens=GENERATION_MAX_TOKENS,
        ),
        timeout=timeout,
    )
    return parse_generated_content(response.content)


def _styles_for(generate_input: GenerateInput) -> SiteStyles:
    defaults = BUSINESS_TYPE_DEFAULTS.get(generate_input.business_type)
    fonts = FONT_RECOMMENDATIONS.get(generate_input.business_type)
    primary = generate_input.primary_color or (
        defaults.primary_color if defaults else DEFAULT_PRIMARY_COLOR
    )
    return SiteStyles(
        primary_color=primary,
        secondary_color=generate_input.secondary_color or derive_secondary_color(primary),
        accent_color=derive_accent_color(primary),
        heading_font=fonts.heading if fonts else None,
        body_font=fonts.body if fonts else None,
    )


def build_site_state(
    project_id: str,
    site_id: str,
    content: GeneratedContent,
    generate_input: GenerateInput,
) -> SiteState:
    """Turn generated content into a site; sections of unknown type are dropped."""
    sections: list[SectionContent] = []
    for generated in content.sections:
        try:
            section_type = SectionType(generated.type)
        except ValueError:
            logger.warning(f"Dropping generated section of unknown type {generated.type!r}")
            continue
        section_id = f"section_{len(sections) + 1}"
        items = None
        if generated.items is not None:
            items = [
                SectionItem(
                    id=f"{section_id}_item_{i}",
                    title=item.title,
                    description=item.description,
                    icon=item.icon,
                    price=item.price,
                )
                for i, item in enumerate(generated.items)
            ]
        sections.append(SectionContent(
            id=section_id,
            type=section_type,
            title=generated.title,
            subtitle=generated.subtitle,
            content=generated.content,
            items=items,
            cta=generated.cta,
        ))

    return SiteState(
        project_id=project_id,
        site_id=site_id,
        sections=sections,
        styles=_styles_for(generate_input),
        meta=content.meta,
    )


class SiteGenerator:
    """Generates a project's site and stores it.

    Generation for a project holds the same per-project lock as chat
    commands, so a command never runs against a half-replaced site.
    """

    def __init__(
        self,
        router: ProviderRouter,
        sites: SiteRepository,
        project_memory: ProjectMemoryRepository,
        locks: KeyedLocks = memory_locks,
        timeout: float | None = None,
    ) -> None:
        self._router = router
        self._sites = sites
        self._project_memory = project_memory
        self._locks = locks
        self._timeout = timeout

    async def generate(self, user_id: str, project_id: str, generate_input: GenerateInput) -> SiteState:
        """Generate (or regenerate) the site for *project_id*.

        Raises:
            ProjectNotFoundError: the project belongs to another user.
            ProviderExhaustedError: no provider produced a response.
            ContentGenerationError: the reply was not usable site content.
        """
        async with self._locks(f"command:{project_id}"):
            existing = await self._sites.get(project_id, user_id)
            content = await generate_site_content(self._router, generate_input, timeout=self._timeout)
            site_id = existing.site_id if existing else str(uuid.uuid4())
            state = build_site_state(project_id, site_id, content, generate_input)

            if existing is not None:
                await self._sites.save(state)
            else:
                try:
                    await self._sites.create(state, owner_id=user_id, name=generate_input.business_name)
                except ValueError:
                    raise ProjectNotFoundError(f"Project {project_id} not found")

        project_store = ProjectMemoryStore(project_id, self._project_memory, self._locks)
        await project_store.update_business_details(
            name=generate_input.business_name,
            type=generate_input.business_type,
            description=generate_input.business_description,
            tagline=generate_input.business_tagline,
        )
        await project_store.cache_generated_content(GENERATED_CONTENT_KEY, content.to_wire())
        logger.info(
            f"Generated {len(state.sections)} sections for project {project_id} "
            f"({'replaced' if existing else 'new'} site)"
        )
        return state
