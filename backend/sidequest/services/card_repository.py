"""
Side Quest Backend — Card Repository (Persistence Gateway)
============================================================

What:  Create/read/delete and filtered/ordered queries on the `cards` table.
How:   One AsyncSession per request (injected); every write commits at once
       so it stands on its own, independent of later steps in the request.
Who:   Used only by CardService.

Error translation:
    SQLAlchemy/driver failures → DatabaseError with an operation-specific
    message ("Failed to fetch cards", ...). The original exception is
    chained and its type recorded in the context for the server log.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.exceptions import DatabaseError, NotFoundError
from sidequest.models.card import Card
from sidequest.schemas.card import CardDraft

logger = logging.getLogger(__name__)


def _parse_card_id(card_id: str) -> Optional[uuid.UUID]:
    """Ids that are not UUIDs cannot exist in the table; treat them as absent."""
    try:
        return uuid.UUID(str(card_id))
    except ValueError:
        return None


class CardRepository:
    """Record store access for Card rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _db_error(self, message: str, exc: Exception, **context) -> DatabaseError:
        logger.error("%s: %s", message, exc, exc_info=True)
        return DatabaseError(
            message=message,
            context={"error_type": type(exc).__name__, **context},
        )

    async def list_active(self) -> List[Card]:
        """
        Cards whose expires_at is strictly after now, newest first.

            SELECT * FROM cards WHERE expires_at > :now ORDER BY created_at DESC
        """
        now = datetime.now(timezone.utc)
        try:
            result = await self.session.execute(
                select(Card)
                .where(Card.expires_at > now)
                .order_by(Card.created_at.desc())
            )
            return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            raise self._db_error("Failed to fetch cards", e) from e

    async def list_expired(self) -> List[Card]:
        """Cards whose expires_at is strictly before now (no ordering)."""
        now = datetime.now(timezone.utc)
        try:
            result = await self.session.execute(
                select(Card).where(Card.expires_at < now)
            )
            return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            raise self._db_error("Failed to fetch expired cards", e) from e

    async def insert(self, draft: CardDraft) -> Card:
        """
        Insert one card and return the stored row, including the id,
        created_at and expires_at generated by the column defaults.
        """
        try:
            result = await self.session.execute(
                insert(Card).values(**draft.model_dump()).returning(Card)
            )
            card = result.scalar_one()
            await self.session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise self._db_error("Failed to create card", e) from e

        logger.info("Card created: %s (%s)", card.id, card.business_name)
        return card

    async def get_by_id(self, card_id: str) -> Optional[Card]:
        """Return the card or None. Malformed ids are never queried."""
        parsed = _parse_card_id(card_id)
        if parsed is None:
            return None
        try:
            result = await self.session.execute(select(Card).where(Card.id == parsed))
            return result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise self._db_error("Failed to fetch card", e, card_id=str(card_id)) from e

    async def delete_by_id(self, card_id: str) -> None:
        """
        Delete one row.

        Raises:
            NotFoundError: no row with this id existed at delete time.
            DatabaseError: the statement or commit failed.
        """
        parsed = _parse_card_id(card_id)
        if parsed is None:
            raise NotFoundError(resource_id=str(card_id))
        try:
            result = await self.session.execute(delete(Card).where(Card.id == parsed))
            await self.session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise self._db_error("Failed to delete card", e, card_id=str(card_id)) from e

        if result.rowcount == 0:
            raise NotFoundError(resource_id=str(card_id))
        logger.info("Card deleted: %s", card_id)
