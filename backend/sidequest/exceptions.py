"""
Side Quest Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the three error tiers.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers in main.py turn them into `{"error": message}`
       responses; context is logged, never returned.
Who:   Raised by gateways and CardService; caught by the global handlers.

Exception Hierarchy:
    SideQuestError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    └── DependencyError          → 500 Internal Server Error
        ├── UploadError          (object store rejected a write)
        ├── DeleteError          (object store rejected a batch delete)
        ├── DatabaseError        (record store call failed)
        ├── ConfigError          (text-generation credential missing)
        ├── UpstreamError        (text-generation call failed)
        └── CardOperationError   (a multi-step card operation failed)
"""

from typing import Any, Dict, Optional


class SideQuestError(Exception):
    """
    Base exception for all Side Quest application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SideQuestError):
    """
    Raised when client input fails validation.

    When:    Missing required form fields, unsupported file type or size,
             too many files, empty polish text.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(SideQuestError):
    """
    Raised when a requested resource does not exist.

    When:    DELETE /cards/{id} with an id that has no row.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "Card",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource_id = resource_id


class DependencyError(SideQuestError):
    """
    Base for failures of an external collaborator (record store, object
    store, text-generation endpoint).

    HTTP:    500 Internal Server Error. The message is returned to the client;
             the context (status codes, driver errors) is logged server-side.
    """


class UploadError(DependencyError):
    """Raised when the object store rejects an image upload."""

    def __init__(
        self,
        message: str = "Failed to upload image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DeleteError(DependencyError):
    """Raised when the object store rejects a batch delete."""

    def __init__(
        self,
        message: str = "Failed to delete images",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DependencyError):
    """
    Raised when a record store operation fails unexpectedly.

    The message is operation-specific ("Failed to fetch cards"); SQL and
    driver details only go to the log.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigError(DependencyError):
    """Raised when the text-generation credential is not configured."""

    def __init__(
        self,
        message: str = "AI service not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamError(DependencyError):
    """Raised when the text-generation endpoint call does not succeed."""

    def __init__(
        self,
        message: str = "Failed to polish description",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CardOperationError(DependencyError):
    """
    Raised when a multi-step card operation (delete, expiry cleanup) fails
    part-way. The original DependencyError is chained as __cause__.
    """

    def __init__(
        self,
        message: str = "Card operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
