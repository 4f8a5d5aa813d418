"""
Blog API — Pydantic Request/Response Schemas
==============================================

What:  Pydantic models defining the API contract.
How:   FastAPI validates request bodies against the *Request models, and
       serializes responses through the envelope models.

Request bodies wrap the post fields in a `data` object:
    POST /blogs          {"data": {"title": ..., "author": ..., "description": ...}}
    PUT  /blog/id/{id}   {"data": {"title": ...}}   (any subset of the three)

String fields are trimmed before the length checks run, so "  A  " is
stored as "A" and "   " counts as empty.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from blog_api.models.blog import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH

UPDATABLE_FIELDS = ("title", "author", "description")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BlogCreate(BaseModel):
    """Fields required to create a post. Unknown keys are ignored."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    author: str = Field(min_length=1)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)

    model_config = {"str_strip_whitespace": True}


class BlogUpdate(BaseModel):
    """
    Partial update: any subset of title, author and description.

    Only the three updatable fields are accepted; any other key (including
    id, revision and the timestamps) is rejected. A supplied field obeys the
    same rules as on create, and an explicit null is rejected.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    author: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(
        default=None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH
    )

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}

    @field_validator(*UPDATABLE_FIELDS, mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field may not be null")
        return v

    def changes(self) -> Dict[str, str]:
        """The fields the client actually sent, with their trimmed values."""
        return self.model_dump(exclude_unset=True)


class BlogCreateRequest(BaseModel):
    data: BlogCreate


class BlogUpdateRequest(BaseModel):
    # Optional so a missing `data` key reaches the route and gets the same
    # "No update data provided" answer as an empty object
    data: Optional[BlogUpdate] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BlogResponse(BaseModel):
    """Full representation of a stored post."""

    id: uuid.UUID = Field(description="Store-assigned identifier")
    title: str
    author: str
    description: str
    created_at: datetime = Field(description="Creation time (UTC)")
    updated_at: datetime = Field(description="Last modification time (UTC)")
    revision: int = Field(description="Number of updates applied to this post")

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Stores without timezone support (SQLite) hand back naive UTC values."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class BlogEnvelope(BaseModel):
    message: str
    blog: BlogResponse


class BlogListEnvelope(BaseModel):
    message: str
    count: int
    blogs: List[BlogResponse]


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """
    Error body shared by every failing endpoint.

    Example:
        {
            "error": "Invalid blog ID format",
            "details": {"field": "id", "value": "abc"},
            "request_id": "550e8400"
        }
    """

    error: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'OK' while the process is serving")
    timestamp: datetime = Field(description="Server time of the check (UTC)")
