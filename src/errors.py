"""
Domain Errors

Validation and not-found errors surface to the caller of the triggering
operation. Conflicts are absorbed by the enrichment lifecycle manager.
Provider errors are recorded on the enrichment record as the failed state.
"""
from typing import Optional


class CRMError(Exception):
    """Base class for all domain errors."""
    pass


class ValidationError(CRMError):
    """A required field is missing or malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(CRMError):
    """An operation referenced an id with no matching record."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(CRMError):
    """A state transition was attempted from an unexpected source state."""

    def __init__(self, message: str, current: Optional[str] = None, attempted: Optional[str] = None):
        super().__init__(message)
        self.current = current
        self.attempted = attempted


class ProviderError(CRMError):
    """The enrichment provider failed, timed out or returned malformed data."""
    pass
