"""Shared error types for the orchestration core.

Validation problems are *data* (``ValidationError`` records inside a result),
never raised past a component boundary.  The exception classes below are
raised internally and converted into results by ``ActionExecutor``; only
persistence and provider failures propagate to callers (see
``MemoryNotFoundError``, ``MemoryConflictError`` and
``sitecraft.core.providers.base``).
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ValidationError:
    """A single validation error."""

    field: str
    message: str
    code: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


class UnknownActionError(Exception):
    """A tool call names an action the executor does not implement."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown action: {name}")


class InvalidToolArgumentsError(Exception):
    """Tool-call arguments failed payload validation.

    ``errors`` lists every failure so the caller can report them together.
    """

    def __init__(self, action: str, errors: list[ValidationError]) -> None:
        self.action = action
        self.errors = errors
        super().__init__("; ".join(str(e) for e in errors))


class NotFoundError(Exception):
    """A lookup by id (section, task, question, session) found nothing."""


class SectionNotFoundError(NotFoundError):
    """No section matched the id/type a tool call addressed."""


class MemoryNotFoundError(NotFoundError):
    """A task, pending question or chat session id is unknown."""


class MemoryConflictError(Exception):
    """A memory record kept changing under us; the write was abandoned.

    Raised after the versioned write lost the compare-and-swap on every
    attempt.
    """

    def __init__(self, key: str, attempts: int) -> None:
        self.key = key
        self.attempts = attempts
        super().__init__(f"Memory record {key} changed concurrently ({attempts} attempts)")
