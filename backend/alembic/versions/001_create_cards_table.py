"""Create cards table

Revision ID: 001
Revises: None
Create Date: 2025-01-20 00:00:00.000000+00:00

What:  Creates the `cards` table that backs GET/POST/DELETE /cards.
How:   PostgreSQL-specific features: UUID primary key from gen_random_uuid(),
       TEXT[] for product image URLs, TIMESTAMP WITH TIME ZONE with a
       seven-day expiry default.

Rollback: downgrade() drops the indexes and the table (all cards lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the cards table and its two query indexes."""
    op.create_table(
        "cards",

        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Card identifier, generated by the database",
        ),
        sa.Column("business_name", sa.Text(), nullable=False),
        sa.Column("employee_name", sa.Text(), nullable=False),
        sa.Column("webpage_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "cover_image_url",
            sa.Text(),
            nullable=True,
            comment="Public object-store URL of the cover image",
        ),
        sa.Column(
            "product_image_urls",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::text[]"),
            comment="Public object-store URLs of product images, in upload order",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "expires_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP + interval '7 days'"),
            nullable=False,
            comment="Card is listed while expires_at is in the future",
        ),

        sa.PrimaryKeyConstraint("id"),
    )

    # GET /cards orders by created_at DESC
    op.create_index(
        "idx_cards_created_at",
        "cards",
        [sa.text("created_at DESC")],
    )
    # Both the active filter and the cleanup scan compare against expires_at
    op.create_index(
        "idx_cards_expires_at",
        "cards",
        ["expires_at"],
    )


def downgrade() -> None:
    """Drop the cards table. Destructive: every card row is lost."""
    op.drop_index("idx_cards_expires_at", table_name="cards")
    op.drop_index("idx_cards_created_at", table_name="cards")
    op.drop_table("cards")
