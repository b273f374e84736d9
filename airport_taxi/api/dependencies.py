"""FastAPI dependency injection helpers."""

from functools import lru_cache

import httpx
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from airport_taxi.config import settings
from airport_taxi.domain.lifecycle import OrderLifecycle
from airport_taxi.domain.ports import Notifier
from airport_taxi.domain.tokens import TokenAuthority
from airport_taxi.infrastructure.database import async_session_factory
from airport_taxi.infrastructure.repositories import OrderRepository
from airport_taxi.notifications.email import build_notifier
from airport_taxi.notifications.links import LinkBuilder
from airport_taxi.notifications.translations import default_rejection_reason


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_http_client() -> httpx.AsyncClient:  # type: ignore[misc]
    """Yield a short-lived client for outbound calls to third-party APIs."""
    async with httpx.AsyncClient(
        timeout=settings.exchange_rate_timeout_seconds
    ) as client:
        yield client


@lru_cache
def get_notifier() -> Notifier:
    return build_notifier(settings)


def get_tokens() -> TokenAuthority:
    return TokenAuthority(settings.admin_panel_token)


def get_links() -> LinkBuilder:
    return LinkBuilder(settings)


def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    tokens: TokenAuthority = Depends(get_tokens),
) -> OrderLifecycle:
    return OrderLifecycle(
        OrderRepository(db),
        notifier,
        tokens,
        default_rejection_reason=default_rejection_reason,
    )
