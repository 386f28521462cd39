"""Public profile page data and click ingestion.

These endpoints need no account: any visitor may read a profile and report
a click on one of its links.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, HTTPException, Path, Request, status
from sqlalchemy.exc import SQLAlchemyError

from gitolink.core.deps import SessionDep
from gitolink.core.errors import GENERIC_ERROR
from gitolink.core.observability import record_click, record_profile_view
from gitolink.core.rate_limit import RATE_LIMIT_PUBLIC, get_client_ip, limiter
from gitolink.schemas.base import SuccessResponse
from gitolink.schemas.link import PublicLink
from gitolink.schemas.profile import ClickCreate, ProfileResponse
from gitolink.schemas.user import PublicUser
from gitolink.services import click_service, link_service, user_service

logger = structlog.get_logger()

router = APIRouter(prefix="/profiles", tags=["profiles"])

Username = Annotated[str, Path(min_length=1, max_length=30)]


@router.get("/{username}", response_model=ProfileResponse)
@limiter.limit(RATE_LIMIT_PUBLIC)
async def get_profile(
    request: Request,
    username: Username,
    session: SessionDep,
) -> ProfileResponse:
    """Public projection of a profile and its active links in order.

    Each served link gets one impression added to its view counter.
    """
    user = await user_service.get_user_by_username(session, username)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    links = await link_service.get_active_links(session, user.id)
    response = ProfileResponse(
        user=PublicUser.model_validate(user),
        links=[PublicLink.model_validate(link) for link in links],
    )

    await link_service.increment_view_counts(session, [link.id for link in links])
    await session.commit()
    record_profile_view()
    return response


@router.post("/{username}/clicks", response_model=SuccessResponse)
@limiter.limit(RATE_LIMIT_PUBLIC)
async def track_click(
    request: Request,
    username: Username,
    click_data: ClickCreate,
    session: SessionDep,
) -> SuccessResponse:
    """Record a visitor's click on one of the profile's links."""
    context = click_service.ClickContext(
        ip=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        referrer=request.headers.get("Referer"),
    )

    try:
        await click_service.record_click(session, username, click_data.link_id, context)
        await session.commit()
    except click_service.ProfileNotFoundError:
        record_click("not_found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    except link_service.LinkNotFoundError:
        record_click("not_found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Link not found",
        )
    except SQLAlchemyError as e:
        record_click("failed")
        logger.error(
            "Failed to store click",
            link_id=str(click_data.link_id),
            error=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERIC_ERROR,
        )

    record_click("recorded")
    return SuccessResponse()
