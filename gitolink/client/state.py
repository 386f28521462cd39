"""Client-side link list: optimistic entries in a revisioned cache."""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from gitolink.schemas.link import LinkCreate, LinkResponse

# Fields compared by ``LinkCache.sync`` and captured for rollback
LINK_FIELDS = (
    "title",
    "url",
    "icon",
    "embed_type",
    "order",
    "active",
    "view_count",
    "click_count",
    "scheduled_at",
    "expires_at",
)


@dataclass
class OptimisticLink:
    """A link as the dashboard holds it, plus in-flight request flags.

    The flags never leave the client. ``original_data`` holds the fields
    as they were before a speculative update and is cleared once the
    request settles.
    """

    id: UUID
    title: str
    url: str
    icon: str | None = None
    embed_type: str | None = None
    order: int = 0
    active: bool = True
    view_count: int = 0
    click_count: int = 0
    scheduled_at: datetime | None = None
    expires_at: datetime | None = None

    is_optimistic: bool = False
    is_updating: bool = False
    is_deleting: bool = False
    original_data: dict[str, Any] | None = None
    revision: int = 0

    @classmethod
    def from_server(cls, link: LinkResponse) -> "OptimisticLink":
        return cls(id=link.id, **{name: getattr(link, name) for name in LINK_FIELDS})

    @classmethod
    def pending(cls, draft: LinkCreate, order: int) -> "OptimisticLink":
        """Placeholder for a link the server has not confirmed yet."""
        return cls(
            id=uuid4(),
            title=draft.title,
            url=draft.url,
            icon=draft.icon,
            embed_type=draft.embed_type,
            order=order,
            active=True,
            scheduled_at=draft.scheduled_at,
            expires_at=draft.expires_at,
            is_optimistic=True,
        )

    def fields(self) -> dict[str, Any]:
        """The server-backed fields only."""
        return {name: getattr(self, name) for name in LINK_FIELDS}

    def key(self) -> tuple[Any, ...]:
        return (self.id, *(getattr(self, name) for name in LINK_FIELDS))

    @property
    def is_settled(self) -> bool:
        return not (self.is_optimistic or self.is_updating or self.is_deleting)


class LinkCache:
    """Ordered links keyed by id, each carrying a revision counter.

    Iteration yields entries in display order. Every change to an entry
    bumps its revision so views can tell stale renders from fresh ones.
    """

    def __init__(self, links: Iterable[OptimisticLink] = ()) -> None:
        self._entries: dict[UUID, OptimisticLink] = {link.id: link for link in links}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[OptimisticLink]:
        return iter(list(self._entries.values()))

    def __contains__(self, link_id: object) -> bool:
        return link_id in self._entries

    @property
    def links(self) -> list[OptimisticLink]:
        return list(self._entries.values())

    def ids(self) -> list[UUID]:
        return list(self._entries)

    def get(self, link_id: UUID) -> OptimisticLink | None:
        return self._entries.get(link_id)

    def _bump(self, entry: OptimisticLink) -> OptimisticLink:
        previous = self._entries.get(entry.id)
        entry.revision = max(entry.revision, previous.revision if previous else 0) + 1
        return entry

    def append(self, entry: OptimisticLink) -> OptimisticLink:
        self._entries[entry.id] = self._bump(entry)
        return entry

    def replace(self, old_id: UUID, entry: OptimisticLink) -> OptimisticLink:
        """Swap ``old_id`` for ``entry`` at the same position."""
        if old_id not in self._entries:
            raise KeyError(old_id)
        entry.revision = self._entries[old_id].revision + 1
        self._entries = {
            (entry.id if key == old_id else key): (entry if key == old_id else value)
            for key, value in self._entries.items()
        }
        return entry

    def remove(self, link_id: UUID) -> OptimisticLink | None:
        return self._entries.pop(link_id, None)

    def update(self, link_id: UUID, **changes: Any) -> OptimisticLink:
        entry = self._entries[link_id]
        for name, value in changes.items():
            setattr(entry, name, value)
        entry.revision += 1
        return entry

    def index(self, link_id: UUID) -> int:
        return self.ids().index(link_id)

    def insert(self, index: int, entry: OptimisticLink) -> OptimisticLink:
        """Put ``entry`` at ``index``, or at the end if the list got shorter."""
        items = [(key, value) for key, value in self._entries.items() if key != entry.id]
        items.insert(min(index, len(items)), (entry.id, self._bump(entry)))
        self._entries = dict(items)
        return entry

    def positions(self) -> list[tuple[UUID, int]]:
        """Current arrangement as ``(id, order)`` pairs, for undoing a reorder."""
        return [(entry.id, entry.order) for entry in self._entries.values()]

    def restore_positions(self, positions: Sequence[tuple[UUID, int]]) -> None:
        """Put back an arrangement taken with ``positions``.

        Only entries still cached are moved. Entries added since keep their
        order and go to the end. Nothing else about an entry is touched.
        """
        restored = {}
        for link_id, order in positions:
            entry = self._entries.get(link_id)
            if entry is None:
                continue
            if entry.order != order:
                entry.order = order
                entry.revision += 1
            restored[link_id] = entry
        for link_id, entry in self._entries.items():
            restored.setdefault(link_id, entry)
        self._entries = restored

    def reorder(self, link_ids: Sequence[UUID]) -> None:
        """Rearrange to ``link_ids`` and rewrite ``order`` densely from zero.

        ``link_ids`` must name every cached entry exactly once.
        """
        if len(link_ids) != len(self._entries) or set(link_ids) != set(self._entries):
            raise ValueError("Reorder must list every link exactly once")

        reordered = {}
        for index, link_id in enumerate(link_ids):
            entry = self._entries[link_id]
            if entry.order != index:
                entry.order = index
                entry.revision += 1
            reordered[link_id] = entry
        self._entries = reordered

    def sync(self, server_links: Sequence[LinkResponse]) -> bool:
        """Adopt the server's list when it differs from what is cached.

        Comparison is structural: ids, positions and every field. Entries
        that did not change keep their revision. Returns True if the cache
        changed.
        """
        incoming = [OptimisticLink.from_server(link) for link in server_links]
        if [entry.key() for entry in incoming] == [entry.key() for entry in self._entries.values()]:
            return False

        synced = {}
        for entry in incoming:
            current = self._entries.get(entry.id)
            if current is not None and current.key() == entry.key() and current.is_settled:
                synced[entry.id] = current
            else:
                synced[entry.id] = self._bump(entry)
        self._entries = synced
        return True
