"""
Blog API — BlogPost SQLAlchemy Model
======================================

What:  ORM model representing the `blog_posts` table.
How:   Inherits from the shared DeclarativeBase; create_schema() and Alembic
       read its metadata.
Who:   Used by BlogService for every store operation.

Column types are the generic SQLAlchemy ones (Uuid, DateTime(timezone=True))
so the same model runs on PostgreSQL in production and SQLite in tests.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from blog_api.database import Base

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BlogPost(Base):
    """
    A single blog post.

    Lifecycle:
        1. Created by POST /blogs with a validated payload (revision = 0)
        2. Mutated only by PUT /blog/id/{id}; each update bumps revision by 1
           and refreshes updated_at in the same UPDATE statement
        3. Deleted only by DELETE /blog/id/{id}

    Query Patterns:
        - List all:       ORDER BY created_at ASC  → idx_blog_posts_created_at
        - Get by id:      WHERE id = :uuid         → primary key
        - Search author:  WHERE lower(author) LIKE → idx_blog_posts_author
    """

    __tablename__ = "blog_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    author: Mapped[str] = mapped_column(Text, nullable=False)

    # TEXT rather than VARCHAR(1000): the length bound lives in the schema layer
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Python defaults fill ORM inserts; server defaults cover raw SQL inserts
    # and match migration 001
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    # Bumped atomically by BlogService.update(); never written by clients
    revision: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    __table_args__ = (
        Index("idx_blog_posts_created_at", "created_at"),
        Index("idx_blog_posts_author", "author"),
    )

    def __repr__(self) -> str:
        return (
            f"<BlogPost(id={self.id}, title='{self.title}', "
            f"author='{self.author}', revision={self.revision})>"
        )
