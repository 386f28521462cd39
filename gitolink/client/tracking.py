"""Fire-and-forget click tracking for the public profile page."""

import asyncio
from collections.abc import Callable
from uuid import UUID

import structlog

from gitolink.client.api import ApiError, GitoLinkClient

logger = structlog.get_logger()


class ClickTracker:
    """Reports link clicks without ever holding up navigation.

    The tracking request runs as a detached task; ``open_link`` hands the
    destination to ``navigate`` straight away. A failed report is logged
    and dropped, never retried.
    """

    def __init__(self, client: GitoLinkClient, username: str) -> None:
        self.client = client
        self.username = username
        # Strong references so pending tasks are not garbage collected
        self._pending: set[asyncio.Task[None]] = set()

    def open_link(self, link_id: UUID, url: str, navigate: Callable[[str], object]) -> None:
        """Track a click on ``link_id`` and navigate to ``url``."""
        task = asyncio.create_task(self._report(link_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        navigate(url)

    async def _report(self, link_id: UUID) -> None:
        try:
            await self.client.track_click(self.username, link_id)
        except ApiError as e:
            logger.warning(
                "Click tracking failed",
                username=self.username,
                link_id=str(link_id),
                status_code=e.status_code,
                error=e.message,
            )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for reports still in flight, e.g. before shutdown."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
