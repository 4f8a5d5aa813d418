"""
Blog API — Blog Service (Data-Access Layer)
=============================================

What:  Every store operation on blog posts: insert, list, get, search by
       author, update-and-bump, delete.
How:   Thin wrapper over an AsyncSession. Each mutation is a single
       statement followed by a commit.
Who:   Constructed per request by the get_blog_service() dependency.

Outcomes:
    - A missing record is a normal result (None / False), not an exception;
      routes turn it into a 404.
    - Any SQLAlchemyError is logged and re-raised as StoreError (500).

Update atomicity:
    update() issues one UPDATE ... SET revision = revision + 1 ... RETURNING
    so the field changes and the revision bump land together even with
    concurrent writers on the same row.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.exceptions import StoreError
from blog_api.models.blog import BlogPost, utcnow
from blog_api.schemas.blog import BlogCreate, BlogUpdate

logger = logging.getLogger(__name__)


class BlogService:
    """
    Store operations for BlogPost.

    Stateless apart from the session it is handed, so a fresh instance per
    request costs nothing.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _fail(self, operation: str, exc: Exception, **context) -> StoreError:
        """Roll back, log, and build the StoreError for a failed operation."""
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback after failed %s also failed", operation)
        logger.error("Store error during %s: %s", operation, str(exc), exc_info=True)
        context.update(operation=operation, error_type=type(exc).__name__)
        return StoreError(context=context)

    async def create(self, payload: BlogCreate) -> BlogPost:
        """
        Insert a new post.

        id, timestamps and revision are filled in by the model defaults at
        flush time, so the returned object is complete without a refresh.
        """
        post = BlogPost(
            title=payload.title,
            author=payload.author,
            description=payload.description,
        )
        try:
            self.session.add(post)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("create", e) from e

        logger.info("Blog created: %s", post.id)
        return post

    async def list_all(self) -> List[BlogPost]:
        """
        All posts, oldest first.

        Posts sharing a created_at are ordered by id. Ids are random, so
        that order is stable across calls but is not insertion order.
        """
        query = select(BlogPost).order_by(BlogPost.created_at.asc(), BlogPost.id.asc())
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise await self._fail("list_all", e) from e
        return list(result.scalars().all())

    async def get(self, blog_id: UUID) -> Optional[BlogPost]:
        try:
            result = await self.session.execute(
                select(BlogPost).where(BlogPost.id == blog_id)
            )
        except SQLAlchemyError as e:
            raise await self._fail("get", e, blog_id=str(blog_id)) from e
        return result.scalar_one_or_none()

    async def find_by_author(self, name: str) -> List[BlogPost]:
        """
        Posts whose author contains `name`, ignoring case, ordered like
        list_all().

        `name` is matched literally: % and _ in the input are escaped.
        """
        query = (
            select(BlogPost)
            .where(BlogPost.author.icontains(name, autoescape=True))
            .order_by(BlogPost.created_at.asc(), BlogPost.id.asc())
        )
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise await self._fail("find_by_author", e, name=name) from e
        return list(result.scalars().all())

    async def update(self, blog_id: UUID, payload: BlogUpdate) -> Optional[BlogPost]:
        """
        Merge the supplied fields and bump the revision in one statement.

        Returns the post as stored after the update, or None when no row has
        this id. Callers must reject empty payloads before getting here.
        """
        changes = payload.changes()
        stmt = (
            update(BlogPost)
            .where(BlogPost.id == blog_id)
            .values(
                **changes,
                revision=BlogPost.revision + 1,
                updated_at=utcnow(),
            )
            .returning(BlogPost)
        )
        try:
            result = await self.session.execute(stmt)
            post = result.scalar_one_or_none()
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("update", e, blog_id=str(blog_id)) from e

        if post is not None:
            logger.info(
                "Blog %s updated (%s), revision=%d",
                blog_id, ", ".join(sorted(changes)), post.revision,
            )
        return post

    async def delete(self, blog_id: UUID) -> bool:
        """Remove a post. False when no row has this id."""
        stmt = delete(BlogPost).where(BlogPost.id == blog_id).returning(BlogPost.id)
        try:
            result = await self.session.execute(stmt)
            deleted_id = result.scalar_one_or_none()
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail("delete", e, blog_id=str(blog_id)) from e

        if deleted_id is None:
            return False
        logger.info("Blog deleted: %s", blog_id)
        return True
