"""Dashboard analytics across all of the user's links."""

from typing import Annotated

from fastapi import APIRouter, Query, Request

from gitolink.core.config import get_settings
from gitolink.core.deps import CurrentUser, SessionDep
from gitolink.core.rate_limit import RATE_LIMIT_API, limiter
from gitolink.schemas.analytics import UserAnalytics
from gitolink.services import analytics_service

settings = get_settings()

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=UserAnalytics)
@limiter.limit(RATE_LIMIT_API)
async def get_user_analytics(
    request: Request,
    user: CurrentUser,
    session: SessionDep,
    days: Annotated[int | None, Query(ge=1, le=365)] = None,
) -> UserAnalytics:
    """Totals, per-link counts, device/browser histograms and daily timeline."""
    return await analytics_service.get_user_analytics(
        session,
        user.id,
        days or settings.default_analytics_days,
    )
