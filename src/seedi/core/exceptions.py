"""
SEEDi Custom Exceptions

This module defines all custom exceptions used throughout the SEEDi core.
Exceptions are organized by layer/responsibility.
"""

from typing import Any


class SeediError(Exception):
    """Base exception for all SEEDi errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(SeediError):
    """Error in system configuration."""

    pass


# =============================================================================
# LOAD ERRORS
# =============================================================================


class LoadError(SeediError):
    """Catalog or persisted state is malformed; initialization must stop."""

    pass


class CatalogSourceError(LoadError):
    """Catalog source could not be read."""

    def __init__(self, message: str, source: str, status_code: int | None = None):
        super().__init__(message, {"source": source, "status_code": status_code})
        self.source = source
        self.status_code = status_code


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class NotFoundError(SeediError):
    """Referenced record is absent from the current collection."""

    pass


class ProjectNotFoundError(NotFoundError):
    """Requested project not found."""

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}", {"project_id": project_id})


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(SeediError):
    """Error in data validation."""

    pass


class IncompleteContextError(ValidationError):
    """User context is missing fields required to advance."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            f"Context incomplete: {', '.join(missing_fields)}",
            {"missing_fields": missing_fields},
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(SeediError):
    """Base error for storage operations."""

    pass


# =============================================================================
# ASSISTANT ERRORS
# =============================================================================


class AssistantStreamError(SeediError):
    """Assistant stream reported an error frame."""

    def __init__(self, reason: str):
        super().__init__(f"Assistant stream failed: {reason}", {"reason": reason})
