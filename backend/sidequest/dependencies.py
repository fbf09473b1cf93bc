"""
Side Quest Backend — FastAPI Dependency Providers
===================================================

What:  Hands route handlers the gateways and services built at startup.
How:   The lifespan in main.py stores process-lifetime objects on `app.state`;
       these functions read them back per request. CardService itself is
       cheap and built per request around that request's database session.
Who:   Used by routes via Depends(); replaced in tests through
       app.dependency_overrides.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sidequest.config import settings
from sidequest.database import get_db_session
from sidequest.services.card_repository import CardRepository
from sidequest.services.card_service import CardService
from sidequest.services.llm_base import LLMService
from sidequest.services.storage_gateway import StorageGateway


def get_storage_gateway(request: Request) -> StorageGateway:
    return request.app.state.storage


def get_text_polisher(request: Request) -> LLMService:
    return request.app.state.polisher


def get_card_service(
    session: AsyncSession = Depends(get_db_session),
    storage: StorageGateway = Depends(get_storage_gateway),
) -> CardService:
    return CardService(
        repository=CardRepository(session),
        storage=storage,
        max_product_images=settings.max_product_images,
    )
