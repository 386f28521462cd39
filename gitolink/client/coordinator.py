"""Optimistic link mutations for the dashboard.

Each mutation changes the local cache first, then calls the API. A failed
call rolls the cache back and reports through the notifier; a successful
one folds the server's answer into the cache.

    Operation      Applied at once               On failure
    create         temporary entry appended      entry removed, form reopened
    update         fields overwritten            original fields restored
    toggle active  flag flipped                  flag flipped back
    delete         entry removed                 entry put back in place
    reorder        order rewritten from zero     previous order put back
"""

import asyncio
from collections import defaultdict
from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

import structlog

from gitolink.client.api import ApiError, GitoLinkClient
from gitolink.client.state import LinkCache, OptimisticLink
from gitolink.schemas.link import LinkCreate, LinkUpdate

logger = structlog.get_logger()


class Notifier(Protocol):
    """Transient user feedback, e.g. toasts."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class AddLinkForm(Protocol):
    """The add-link input the coordinator closes on submit and reopens on failure."""

    def open(self, draft: LinkCreate | None = None) -> None: ...

    def close(self) -> None: ...


class LogNotifier:
    """Notifier that writes feedback to the log."""

    def success(self, message: str) -> None:
        logger.info("Link mutation succeeded", message=message)

    def error(self, message: str) -> None:
        logger.warning("Link mutation failed", message=message)


class _NoForm:
    def open(self, draft: LinkCreate | None = None) -> None:
        pass

    def close(self) -> None:
        pass


class LinkMutationCoordinator:
    """Applies link mutations optimistically against a ``LinkCache``.

    Mutations that touch the same entry run one after another; mutations
    that rewrite the whole list (delete, reorder) also wait for each other.
    """

    def __init__(
        self,
        client: GitoLinkClient,
        cache: LinkCache | None = None,
        notifier: Notifier | None = None,
        form: AddLinkForm | None = None,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else LinkCache()
        self.notifier = notifier or LogNotifier()
        self.form = form or _NoForm()
        self._entry_locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._list_lock = asyncio.Lock()

    async def load(self) -> bool:
        """Fetch the server list into the cache. Returns True if it changed."""
        try:
            links = await self.client.list_links()
        except ApiError as e:
            logger.warning("Failed to load links", status_code=e.status_code, error=e.message)
            self.notifier.error("Failed to load links")
            return False
        return self.cache.sync(links)

    async def create(self, draft: LinkCreate) -> OptimisticLink | None:
        """Add a link; a temporary entry stands in until the server answers."""
        order = max((entry.order for entry in self.cache), default=-1) + 1
        temp = self.cache.append(OptimisticLink.pending(draft, order))
        self.form.close()
        self.notifier.success("Link added!")

        try:
            created = await self.client.create_link(draft)
        except ApiError as e:
            self.cache.remove(temp.id)
            self.notifier.error(e.message or "Failed to add link")
            self.form.open(draft)
            return None

        if temp.id not in self.cache:
            # Removed locally while the request was in flight
            return None
        return self.cache.replace(temp.id, OptimisticLink.from_server(created))

    async def update(self, link_id: UUID, changes: LinkUpdate) -> OptimisticLink | None:
        """Edit fields of one link, restoring them exactly if the server refuses."""
        async with self._entry_locks[link_id]:
            return await self._update(link_id, changes, success_message="Link updated")

    async def toggle_active(self, link_id: UUID) -> OptimisticLink | None:
        """Show or hide a link on the public profile."""
        async with self._entry_locks[link_id]:
            entry = self.cache.get(link_id)
            if entry is None:
                return None
            hiding = entry.active
            return await self._update(
                link_id,
                LinkUpdate(active=not entry.active),
                success_message="Link hidden" if hiding else "Link visible",
            )

    async def _update(
        self,
        link_id: UUID,
        changes: LinkUpdate,
        success_message: str,
    ) -> OptimisticLink | None:
        entry = self.cache.get(link_id)
        if entry is None:
            return None

        fields = changes.changes()
        original = entry.fields()
        self.cache.update(link_id, **fields, is_updating=True, original_data=original)

        try:
            updated = await self.client.update_link(link_id, changes)
        except ApiError as e:
            logger.info("Rolling back link update", link_id=str(link_id), status_code=e.status_code)
            if link_id in self.cache:
                self.cache.update(link_id, **original, is_updating=False, original_data=None)
            self.notifier.error("Failed to update link")
            return None

        self.notifier.success(success_message)
        if link_id not in self.cache:
            return None
        return self.cache.update(
            link_id,
            **OptimisticLink.from_server(updated).fields(),
            is_updating=False,
            original_data=None,
        )

    async def delete(self, link_id: UUID) -> bool:
        """Remove a link at once; it comes back in place if the server refuses."""
        async with self._list_lock, self._entry_locks[link_id]:
            if link_id not in self.cache:
                return False

            index = self.cache.index(link_id)
            removed = self.cache.update(link_id, is_deleting=True)
            self.cache.remove(link_id)
            self.notifier.success("Link deleted")

            try:
                await self.client.delete_link(link_id)
            except ApiError:
                removed.is_deleting = False
                # A reload may already have brought it back
                if link_id not in self.cache:
                    self.cache.insert(index, removed)
                self.notifier.error("Failed to delete link")
                return False

            self._entry_locks.pop(link_id, None)
            return True

    async def reorder(self, link_ids: Sequence[UUID]) -> bool:
        """Show a new arrangement at once and persist it."""
        async with self._list_lock:
            previous = self.cache.positions()
            self.cache.reorder(link_ids)

            try:
                await self.client.reorder_links(link_ids)
            except ApiError:
                self.cache.restore_positions(previous)
                self.notifier.error("Failed to reorder links")
                return False
            return True

    async def move(self, link_id: UUID, new_index: int) -> bool:
        """Drag-and-drop helper: move one link to ``new_index``."""
        link_ids = self.cache.ids()
        if link_id not in link_ids:
            return False
        link_ids.remove(link_id)
        link_ids.insert(new_index, link_id)
        return await self.reorder(link_ids)
