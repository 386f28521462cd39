"""Link CRUD endpoints for the profile owner."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Body, HTTPException, Query, Request, status

from gitolink.core.config import get_settings
from gitolink.core.deps import CurrentUser, SessionDep
from gitolink.core.observability import record_link_operation
from gitolink.core.rate_limit import RATE_LIMIT_API, RATE_LIMIT_CREATE_LINK, limiter
from gitolink.schemas.analytics import LinkAnalytics
from gitolink.schemas.base import SuccessResponse
from gitolink.schemas.link import (
    LinkCreate,
    LinkEnvelope,
    LinkListResponse,
    LinkPatch,
    LinkReorder,
    LinkResponse,
)
from gitolink.services import analytics_service, link_service

settings = get_settings()
logger = structlog.get_logger()

router = APIRouter(prefix="/links", tags=["links"])

AnalyticsDays = Annotated[int | None, Query(ge=1, le=365)]


@router.get("", response_model=LinkListResponse)
@limiter.limit(RATE_LIMIT_API)
async def list_links(
    request: Request,
    user: CurrentUser,
    session: SessionDep,
) -> LinkListResponse:
    """List all of the current user's links in display order."""
    links = await link_service.get_user_links(session, user.id)
    return LinkListResponse(links=[LinkResponse.model_validate(link) for link in links])


@router.post("", response_model=LinkEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_CREATE_LINK)
async def create_link(
    request: Request,
    link_data: LinkCreate,
    user: CurrentUser,
    session: SessionDep,
) -> LinkEnvelope:
    """Append a new link to the end of the profile."""
    link = await link_service.create_link(
        session=session,
        user_id=user.id,
        link_data=link_data,
    )
    await session.commit()

    logger.info(
        "Link created",
        link_id=str(link.id),
        user_id=str(user.id),
        order=link.order,
        active=link.active,
    )
    record_link_operation("create")
    return LinkEnvelope(link=LinkResponse.model_validate(link))


@router.patch("/{link_id}", response_model=LinkEnvelope | LinkListResponse)
@limiter.limit(RATE_LIMIT_API)
async def patch_link(
    request: Request,
    link_id: UUID,
    patch: Annotated[LinkPatch, Body(discriminator="op")],
    user: CurrentUser,
    session: SessionDep,
) -> LinkEnvelope | LinkListResponse:
    """Update one link's fields, or reorder all of the user's links.

    The body's ``op`` selects the variant. ``{"op": "update", ...}`` edits
    the link in the path and returns it; ``{"op": "reorder", "linkIds":
    [...]}`` rewrites positions for the whole list and returns the list in
    its new order.
    """
    if isinstance(patch, LinkReorder):
        try:
            await link_service.reorder_links(session, user.id, patch.link_ids)
        except link_service.LinkNotFoundError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Link not found",
            )
        await session.commit()

        logger.info("Links reordered", user_id=str(user.id), count=len(patch.link_ids))
        record_link_operation("reorder")
        links = await link_service.get_user_links(session, user.id)
        return LinkListResponse(links=[LinkResponse.model_validate(link) for link in links])

    link = await link_service.get_link_by_id(
        session=session,
        link_id=link_id,
        user_id=user.id,
    )
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found",
        )

    updated_link = await link_service.update_link(session, link, patch)
    await session.commit()

    logger.info(
        "Link updated",
        link_id=str(link_id),
        user_id=str(user.id),
        fields=sorted(patch.changes()),
    )
    record_link_operation("update")
    return LinkEnvelope(link=LinkResponse.model_validate(updated_link))


@router.delete("/{link_id}", response_model=SuccessResponse)
@limiter.limit(RATE_LIMIT_API)
async def delete_link(
    request: Request,
    link_id: UUID,
    user: CurrentUser,
    session: SessionDep,
) -> SuccessResponse:
    """Permanently delete a link and its recorded clicks."""
    deleted = await link_service.delete_link(session, user.id, link_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found",
        )
    await session.commit()

    logger.info("Link deleted", link_id=str(link_id), user_id=str(user.id))
    record_link_operation("delete")
    return SuccessResponse()


@router.get("/{link_id}/analytics", response_model=LinkAnalytics)
@limiter.limit(RATE_LIMIT_API)
async def get_link_analytics(
    request: Request,
    link_id: UUID,
    user: CurrentUser,
    session: SessionDep,
    days: AnalyticsDays = None,
) -> LinkAnalytics:
    """Click analytics for one link over the last ``days`` days."""
    link = await link_service.get_link_by_id(
        session=session,
        link_id=link_id,
        user_id=user.id,
    )
    if not link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found",
        )

    return await analytics_service.get_link_analytics(
        session,
        link,
        days or settings.default_analytics_days,
    )
