"""Error handling utilities."""

from typing import Optional


class FieldCatalogError(Exception):
    """Base exception for the field catalog backend."""
    pass


class ConfigurationError(FieldCatalogError):
    """Required configuration is missing or invalid."""
    pass


class InvalidTransition(FieldCatalogError):
    """A status transition is not allowed from the record's current status."""

    def __init__(
        self,
        action: str,
        current_status: Optional[str],
        record_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.action = action
        self.current_status = current_status
        self.record_id = record_id
        if message is None:
            message = f"Cannot {action} record {record_id or '<unsaved>'} in status '{current_status}'"
        super().__init__(message)


class NotFound(FieldCatalogError):
    """Record or profile lookup returned no rows."""
    pass


class NotAuthorized(FieldCatalogError):
    """No bound agent, or the bound agent lacks the required role."""
    pass


class LimitExceeded(FieldCatalogError):
    """Photo batch would exceed the configured maximum count."""

    def __init__(self, limit: int, attempted: int):
        self.limit = limit
        self.attempted = attempted
        super().__init__(f"Maximum {limit} photos allowed (attempted {attempted})")


class SupabaseError(FieldCatalogError):
    """Supabase operation error."""
    pass


class FetchFailed(SupabaseError):
    """Reading from the backing store failed."""
    pass


class WriteFailed(SupabaseError):
    """Inserting or updating in the backing store failed."""
    pass


class NotAuthenticated(NotAuthorized):
    """Missing or invalid access token."""
    pass
