"""Application services that compose the core modules."""
from __future__ import annotations

from sitecraft.services.command import CommandResult, CommandService, ProjectNotFoundError, compose_reply
from sitecraft.services.generation import ContentGenerationError, GenerateInput, SiteGenerator, generate_site_content
from sitecraft.services.repositories import Repositories, in_memory_repositories, sql_repositories
from sitecraft.services.sites import InMemorySiteRepository, SiteRepository, SqlSiteRepository
from sitecraft.services.suggestions import suggest_field_values

__all__ = [
    "CommandResult",
    "CommandService",
    "ContentGenerationError",
    "GenerateInput",
    "InMemorySiteRepository",
    "ProjectNotFoundError",
    "Repositories",
    "SiteGenerator",
    "SiteRepository",
    "SqlSiteRepository",
    "compose_reply",
    "generate_site_content",
    "in_memory_repositories",
    "sql_repositories",
    "suggest_field_values",
]
