"""Studio Backend - Pydantic models for API requests and responses.

Attribute names follow Python conventions; the JSON field names used by the
front end (fullName, createdAt) are set as serialization aliases.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileRequest(BaseModel):
    """JSON body of a profile save. Required fields are checked by the record store."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    occupation: str | None = None
    phone: str | None = None
    address: str | None = None
    state: str | None = None
    country: str | None = None


class MessageResponse(BaseModel):
    """Response for successful write operations."""

    model_config = ConfigDict(extra="forbid")

    message: str = Field(..., description="Human readable outcome")


class PublishResponse(MessageResponse):
    """Response for a published post."""

    id: int = Field(..., description="Id assigned to the new post")


class ErrorResponse(BaseModel):
    """Response for failed operations."""

    model_config = ConfigDict(extra="forbid")

    message: str = Field(..., description="Human readable error message")
    error_code: str = Field(..., description="Machine readable error code")


class ProfileResponse(BaseModel):
    """The saved profile, or the all-empty default."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    full_name: str = Field(..., serialization_alias="fullName")
    occupation: str
    phone: str | None = None
    address: str | None = None
    state: str | None = None
    country: str | None = None


class PostResponse(BaseModel):
    """A published post. sources is the comma-joined list of reference paths."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    heading: str
    audio: str | None = None
    sources: str | None = None
    links: str | None = None
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
