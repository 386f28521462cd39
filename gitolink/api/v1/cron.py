"""Scheduled jobs triggered by an external cron."""

import secrets
from typing import Annotated

import structlog
from fastapi import APIRouter, Header, HTTPException, status

from gitolink.core.config import get_settings
from gitolink.core.deps import SessionDep
from gitolink.schemas.link import PublishResult
from gitolink.services import link_service

settings = get_settings()
logger = structlog.get_logger()

router = APIRouter(prefix="/cron", tags=["cron"])


def verify_cron_secret(authorization: str | None) -> None:
    """Require ``Bearer <cron_secret>`` when a secret is configured."""
    if not settings.cron_secret:
        return
    expected = f"Bearer {settings.cron_secret}"
    if authorization is None or not secrets.compare_digest(authorization, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )


@router.post("/publish-links", response_model=PublishResult)
async def publish_links(
    session: SessionDep,
    authorization: Annotated[str | None, Header()] = None,
) -> PublishResult:
    """Publish links whose schedule has arrived and hide expired ones."""
    verify_cron_secret(authorization)

    published, expired = await link_service.publish_scheduled_links(session)
    await session.commit()
    return PublishResult(published=published, expired=expired)
