"""Dashboard-side client: API access, optimistic link state, click tracking."""

from gitolink.client.api import ApiError, GitoLinkClient
from gitolink.client.coordinator import (
    AddLinkForm,
    LinkMutationCoordinator,
    LogNotifier,
    Notifier,
)
from gitolink.client.state import LinkCache, OptimisticLink
from gitolink.client.tracking import ClickTracker

__all__ = [
    "ApiError",
    "GitoLinkClient",
    "AddLinkForm",
    "LinkMutationCoordinator",
    "LogNotifier",
    "Notifier",
    "LinkCache",
    "OptimisticLink",
    "ClickTracker",
]
