"""Business logic services."""

from gitolink.services import analytics as analytics_service
from gitolink.services import click as click_service
from gitolink.services import link as link_service
from gitolink.services import og_metadata as og_metadata_service
from gitolink.services import user as user_service

__all__ = [
    "analytics_service",
    "click_service",
    "link_service",
    "og_metadata_service",
    "user_service",
]
