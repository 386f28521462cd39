"""API v1 router - aggregates all v1 endpoints."""

from fastapi import APIRouter

from gitolink.api.v1.analytics import router as analytics_router
from gitolink.api.v1.auth import router as auth_router
from gitolink.api.v1.cron import router as cron_router
from gitolink.api.v1.links import router as links_router
from gitolink.api.v1.og import router as og_router
from gitolink.api.v1.profiles import router as profiles_router

router = APIRouter(prefix="/api/v1")

# Include sub-routers
router.include_router(auth_router)
router.include_router(links_router)
router.include_router(analytics_router)
router.include_router(profiles_router)
router.include_router(og_router)
router.include_router(cron_router)


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
