"""
FolderNotes Backend — Shared Pydantic Schemas
==============================================

What:  Base model and small response bodies shared by every route.
Why:   The frontend speaks camelCase JSON (`folderId`, `isOpen`, `createdAt`);
       Python code uses snake_case attributes. `ApiModel` maps between them.
How:   `alias_generator=to_camel` gives each field a camelCase alias. FastAPI
       serializes responses by alias, and `populate_by_name` lets services
       build models with the Python names.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for all request/response schemas (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(BaseModel):
    """Acknowledgement returned by delete endpoints, whether or not anything matched."""
    success: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """
    Error body for every failed request.

    Example:
        {"error": "Note not found"}
    """
    error: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    status: str = Field(default="ok", description="Always 'ok' while the process serves requests")
