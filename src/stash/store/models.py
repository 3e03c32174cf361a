"""SQLAlchemy ORM models for the stash storage layer.

Declarative mirror of the tables the migration runner creates, used as the
Alembic target metadata. SQLAlchemy 2.0 style with Mapped[] annotations.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, LargeBinary, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models in stash."""

    pass


class CategoryModel(Base):
    """A user-defined category.

    Names are not unique here; case-insensitive uniqueness is an
    application-level rule restored by startup maintenance.
    """

    __tablename__ = "categories"
    __table_args__ = (Index("idx_categories_sort", "sort_order"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    color_hex: Mapped[str] = mapped_column(String, nullable=False, default="#007AFF")
    icon_name: Mapped[str] = mapped_column(String, nullable=False, default="folder")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_default: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[str] = mapped_column(String, nullable=False)

    # Items survive their category (nullify on delete)
    content_items: Mapped[list["ContentItemModel"]] = relationship(
        "ContentItemModel", back_populates="category", passive_deletes=True
    )


class ContentItemModel(Base):
    """A captured piece of content, optionally filed under a category."""

    __tablename__ = "content_items"
    __table_args__ = (
        Index("idx_content_items_category", "category_id"),
        Index("idx_content_items_created", "created_at"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    category_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_data: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    # JSON-encoded key -> string map
    metadata_json: Mapped[Optional[str]] = mapped_column("metadata", Text, nullable=True)
    is_hidden: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[str] = mapped_column(String, nullable=False)

    category: Mapped[Optional["CategoryModel"]] = relationship(
        "CategoryModel", back_populates="content_items"
    )
