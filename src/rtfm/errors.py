"""Custom exception hierarchy for rtfm."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rtfm.models import DocumentKey


class AppError(Exception):
    """Base exception for app-specific failures."""


class UsageError(ValueError, AppError):
    """Command usage or user-input errors."""


class ConfigError(ValueError, AppError):
    """Config file validation errors."""


class StartupError(AppError):
    """Unrecoverable conditions before the session can start."""


class DuplicateEntry(ValueError, AppError):
    """A command name was offered to the index more than once."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate command entry: {name}")
        self.name = name


class FetchError(AppError):
    """Base for failures to produce a document for a key."""

    kind = "fetch_error"

    def __init__(self, key: DocumentKey, message: str) -> None:
        super().__init__(message)
        self.key = key


class NotFound(FetchError):
    """No documentation exists for the requested key."""

    kind = "not_found"


class ProviderUnavailable(FetchError):
    """The documentation tool is missing, timed out, or failed."""

    kind = "provider_unavailable"


class ParseFailure(FetchError):
    """Raw output could not be structured; the raw text is shown instead."""

    kind = "parse_failure"
