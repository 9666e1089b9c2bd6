"""Structured site-content model mutated by AI tool calls.

``SiteState`` is the unit an ``ActionExecutor`` owns for the duration of
one command: an ordered list of ``SectionContent`` plus global styles and
page meta.  Section ids are unique within a state; ``SiteState`` enforces
that on construction so a state loaded from the wire can never violate it.
"""
from __future__ import annotations

from enum import Enum

from pydantic import Field, model_validator

from sitecraft.models.base import CamelModel


class SectionType(str, Enum):
    """Closed set of section kinds the renderer knows how to draw."""

    HERO = "hero"
    ABOUT = "about"
    FEATURES = "features"
    SERVICES = "services"
    MENU = "menu"
    PORTFOLIO = "portfolio"
    GALLERY = "gallery"
    TESTIMONIALS = "testimonials"
    TEAM = "team"
    PRICING = "pricing"
    CONTACT = "contact"
    CTA = "cta"
    NEWSLETTER = "newsletter"
    FAQ = "faq"
    BLOG = "blog"


DEFAULT_SECTION_TITLES: dict[SectionType, str] = {
    SectionType.HERO: "Welcome",
    SectionType.ABOUT: "About Us",
    SectionType.FEATURES: "Features",
    SectionType.SERVICES: "Our Services",
    SectionType.MENU: "Menu",
    SectionType.PORTFOLIO: "Our Work",
    SectionType.GALLERY: "Gallery",
    SectionType.TESTIMONIALS: "What Our Customers Say",
    SectionType.TEAM: "Meet the Team",
    SectionType.PRICING: "Pricing",
    SectionType.CONTACT: "Get in Touch",
    SectionType.CTA: "Ready to Get Started?",
    SectionType.NEWSLETTER: "Stay Updated",
    SectionType.FAQ: "Frequently Asked Questions",
    SectionType.BLOG: "Latest Posts",
}


def default_title(section_type: SectionType) -> str:
    """Title used when ``add_section`` is called without one."""
    return DEFAULT_SECTION_TITLES.get(section_type, "New Section")


class SectionItem(CamelModel):
    """One repeated entry inside a section (a testimonial, a plan, a feature)."""

    id: str
    title: str
    description: str
    icon: str | None = None
    price: str | None = None
    image: str | None = None


class SectionCta(CamelModel):
    text: str
    url: str | None = None


class SectionContent(CamelModel):
    """A single page section."""

    id: str
    type: SectionType
    title: str
    subtitle: str | None = None
    content: str | None = None
    items: list[SectionItem] | None = None
    cta: SectionCta | None = None
    styles: dict[str, str] | None = None


class SiteStyles(CamelModel):
    primary_color: str
    secondary_color: str
    accent_color: str | None = None
    heading_font: str | None = None
    body_font: str | None = None


class SiteMeta(CamelModel):
    title: str
    description: str


class SiteState(CamelModel):
    """The mutable in-memory model of one site's sections, styles and meta."""

    project_id: str
    site_id: str
    sections: list[SectionContent] = Field(default_factory=list)
    styles: SiteStyles
    meta: SiteMeta

    @model_validator(mode="after")
    def _section_ids_unique(self) -> "SiteState":
        seen: set[str] = set()
        for section in self.sections:
            if section.id in seen:
                raise ValueError(f"Duplicate section id: {section.id}")
            seen.add(section.id)
        return self

    def section_ids(self) -> list[str]:
        return [s.id for s in self.sections]

    def find_index(self, section_id: str | None = None, section_type: SectionType | None = None) -> int:
        """Index of the section matching *section_id*, else *section_type*; ``-1`` when absent.

        The id wins when both are supplied, mirroring how the model is told
        to address sections ("by id, or by type if the id is not known").
        """
        if section_id:
            return next((i for i, s in enumerate(self.sections) if s.id == section_id), -1)
        if section_type is not None:
            return next((i for i, s in enumerate(self.sections) if s.type == section_type), -1)
        return -1
