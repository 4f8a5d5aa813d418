"""
Blog API — Blog Route Handlers
================================

What:  The blog CRUD endpoints.
How:   Parse the id (400 when malformed), delegate to BlogService, map a
       missing record to NotFoundError (404), wrap results in the success
       envelope.

Endpoints:
    GET    /blogs               list all, oldest first
    POST   /blogs               create                          → 201
    GET    /blog/id/{blog_id}   fetch one
    PUT    /blog/id/{blog_id}   partial update + revision bump
    DELETE /blog/id/{blog_id}   remove one
    GET    /blog/author?name=   case-insensitive author substring search
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db_session
from blog_api.exceptions import InvalidIdentifierError, NotFoundError, ValidationError
from blog_api.schemas.blog import (
    BlogCreateRequest,
    BlogEnvelope,
    BlogListEnvelope,
    BlogResponse,
    BlogUpdateRequest,
    ErrorResponse,
    MessageResponse,
)
from blog_api.services.blog_service import BlogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Blogs"])

_BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Blog not found", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Store error", "model": ErrorResponse}}


# ── Dependencies ──────────────────────────────────────────────────────────
def get_blog_service(db: AsyncSession = Depends(get_db_session)) -> BlogService:
    return BlogService(db)


def parse_blog_id(blog_id: str) -> UUID:
    """Path parameter → UUID, or InvalidIdentifierError (400)."""
    try:
        return UUID(blog_id)
    except ValueError:
        raise InvalidIdentifierError(blog_id)


# ── Routes ────────────────────────────────────────────────────────────────
@router.get(
    "/blogs",
    response_model=BlogListEnvelope,
    responses={**_SERVER_ERROR},
    summary="List all blog posts",
)
async def list_blogs(service: BlogService = Depends(get_blog_service)) -> BlogListEnvelope:
    posts = await service.list_all()
    return BlogListEnvelope(
        message="Blogs retrieved successfully",
        count=len(posts),
        blogs=[BlogResponse.model_validate(post) for post in posts],
    )


@router.post(
    "/blogs",
    status_code=201,
    response_model=BlogEnvelope,
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
    summary="Create a blog post",
)
async def create_blog(
    body: BlogCreateRequest,
    service: BlogService = Depends(get_blog_service),
) -> BlogEnvelope:
    """
    Create a post from `{"data": {"title", "author", "description"}}`.

    Field validation happens in BlogCreate before this runs; a failure there
    is answered with 400 by the request-validation handler in main.py and
    nothing is written.
    """
    post = await service.create(body.data)
    return BlogEnvelope(
        message="Blog created successfully",
        blog=BlogResponse.model_validate(post),
    )


@router.get(
    "/blog/id/{blog_id}",
    response_model=BlogEnvelope,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a blog post by ID",
)
async def get_blog(
    post_id: UUID = Depends(parse_blog_id),
    service: BlogService = Depends(get_blog_service),
) -> BlogEnvelope:
    post = await service.get(post_id)
    if post is None:
        raise NotFoundError(resource="Blog", resource_id=str(post_id))
    return BlogEnvelope(message="Blog found", blog=BlogResponse.model_validate(post))


@router.put(
    "/blog/id/{blog_id}",
    response_model=BlogEnvelope,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Update a blog post by ID",
)
async def update_blog(
    body: BlogUpdateRequest,
    post_id: UUID = Depends(parse_blog_id),
    service: BlogService = Depends(get_blog_service),
) -> BlogEnvelope:
    """
    Apply `{"data": {...}}` to the post and bump its revision by one.

    Only title, author and description may appear in `data`; at least one
    of them is required.
    """
    if body.data is None or not body.data.changes():
        raise ValidationError(message="No update data provided", field="data")

    post = await service.update(post_id, body.data)
    if post is None:
        raise NotFoundError(resource="Blog", resource_id=str(post_id))
    return BlogEnvelope(
        message="Blog updated successfully",
        blog=BlogResponse.model_validate(post),
    )


@router.delete(
    "/blog/id/{blog_id}",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete a blog post by ID",
)
async def delete_blog(
    post_id: UUID = Depends(parse_blog_id),
    service: BlogService = Depends(get_blog_service),
) -> MessageResponse:
    if not await service.delete(post_id):
        raise NotFoundError(resource="Blog", resource_id=str(post_id))
    return MessageResponse(message="Blog deleted successfully")


@router.get(
    "/blog/author",
    response_model=BlogListEnvelope,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Find blog posts by author",
)
async def find_blogs_by_author(
    name: Optional[str] = Query(
        default=None,
        description="Part of the author name; matched case-insensitively",
    ),
    service: BlogService = Depends(get_blog_service),
) -> BlogListEnvelope:
    if name is None or not name.strip():
        raise ValidationError(message="Author name is required", field="name")

    posts = await service.find_by_author(name.strip())
    if not posts:
        raise NotFoundError(resource="Blog", context={"author": name})
    return BlogListEnvelope(
        message="Blogs successfully retrieved by author",
        count=len(posts),
        blogs=[BlogResponse.model_validate(post) for post in posts],
    )
