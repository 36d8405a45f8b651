"""
FolderNotes Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the folder and note stores.
Why:   Services raise typed errors; global handlers in main.py turn them into
       `{"error": <message>}` JSON bodies with the right status code.
How:   Each exception carries a message (returned to the client) and an
       optional context dict (logged server-side only).

Exception Hierarchy:
    FolderNotesError (base)
    ├── NotFoundError          → 404 Not Found (file operations, note update)
    └── StoreUnavailableError  → 500 Internal Server Error (any store failure)

Deletes never raise NotFoundError: deleting an absent folder or note is
reported as success.
"""

from typing import Any, Dict, Optional


class FolderNotesError(Exception):
    """
    Base exception for all FolderNotes application errors.

    Attributes:
        message:  Error description returned in the API response
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


class NotFoundError(FolderNotesError):
    """
    Raised when a note targeted by a mutation does not exist.

    HTTP: 404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreUnavailableError(FolderNotesError):
    """
    Raised when a store operation fails (unreachable database, driver error,
    constraint violation).

    HTTP: 500 Internal Server Error

    The raw driver message is kept as the error message so clients see what
    went wrong; there is no retry or backoff.
    """

    def __init__(
        self,
        message: str = "The note store is unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
