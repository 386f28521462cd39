"""Open-Graph preview endpoint used by the link editor."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

import httpx
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import HttpUrl

from gitolink.core.deps import CurrentUser, SessionDep
from gitolink.core.rate_limit import RATE_LIMIT_API, limiter
from gitolink.schemas.analytics import OgMetadataResponse
from gitolink.services import link_service, og_metadata_service

logger = structlog.get_logger()

router = APIRouter(tags=["og-metadata"])


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Outbound HTTP client for scraping destination pages."""
    async with httpx.AsyncClient() as client:
        yield client


@router.get("/og-metadata", response_model=OgMetadataResponse)
@limiter.limit(RATE_LIMIT_API)
async def get_og_metadata(
    request: Request,
    url: Annotated[HttpUrl, Query()],
    user: CurrentUser,
    session: SessionDep,
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    link_id: Annotated[UUID | None, Query(alias="linkId")] = None,
) -> OgMetadataResponse:
    """Title, description and image of a destination page.

    With ``linkId`` the result is also stored on that link (which must
    belong to the caller) and reused from there while it is fresh.
    """
    link = None
    if link_id is not None:
        link = await link_service.get_link_by_id(session, link_id, user_id=user.id)
        if link is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Link not found",
            )

    try:
        metadata = await og_metadata_service.get_og_metadata(str(url), client, link)
    except og_metadata_service.MetadataFetchError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to fetch metadata",
        )

    if link is not None:
        await session.commit()
    return OgMetadataResponse(metadata=metadata)
