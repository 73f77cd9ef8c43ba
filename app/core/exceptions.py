"""
Application-level exception types.

Services raise these instead of leaking SQLAlchemy errors or returning
sentinel values; `app.main` maps each family onto an HTTP status.
"""

from __future__ import annotations


class AppError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        self.detail = detail or message
        super().__init__(message)


class ConfigurationError(AppError):
    """Raised when required configuration is missing or invalid."""


class EntityNotFoundError(AppError):
    """Raised when a database entity cannot be found."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            detail=f"{entity_type} not found",
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConflictError(AppError):
    """Raised when a write would violate a store constraint or domain invariant."""


class HierarchyError(ConflictError):
    """Raised when a content node would break the level/parent rules of the tree."""


class StoreUnavailableError(AppError):
    """Raised when the backing store cannot be reached or fails mid-operation."""
