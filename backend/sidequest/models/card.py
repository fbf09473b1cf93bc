"""
Side Quest Backend — Card SQLAlchemy Model
============================================

What:  ORM model representing the `cards` table in the managed record store.
Who:   Used by CardRepository for queries and by Alembic for schema management.

Table Design:
    - id, created_at and expires_at are filled in by column defaults; the
      application never sets them.
    - expires_at defaults to seven days after insert. Activity is decided at
      query time (expires_at > now), so nothing has to flip a status flag.
    - product_image_urls is an ordered text array (0..10 public URLs).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Index, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from sidequest.database import Base


class Card(Base):
    """
    A promotional listing with optional images and an expiry time.

    Lifecycle:
        1. Inserted by CardService.submit() after every image upload succeeded
        2. Never updated
        3. Deleted by DELETE /cards/{id} or the expiry cleanup, after its
           images were removed from the object store

    Query Patterns:
        - Active cards:  WHERE expires_at > :now ORDER BY created_at DESC
        - Expired cards: WHERE expires_at < :now
        - Single card:   WHERE id = :uuid
    """

    __tablename__ = "cards"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    )
    business_name: Mapped[str] = mapped_column(Text, nullable=False)
    employee_name: Mapped[str] = mapped_column(Text, nullable=False)
    webpage_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Public URLs into the object store; see storage_gateway.url_to_storage_path
    cover_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    product_image_urls: Mapped[List[str]] = mapped_column(
        ARRAY(Text),
        nullable=False,
        server_default=text("'{}'::text[]"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    expires_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP + interval '7 days'"),
    )

    __table_args__ = (
        Index("idx_cards_created_at", created_at.desc()),
        Index("idx_cards_expires_at", expires_at),
    )

    def __repr__(self) -> str:
        return (
            f"<Card(id={self.id}, business_name='{self.business_name}', "
            f"expires_at='{self.expires_at}')>"
        )
