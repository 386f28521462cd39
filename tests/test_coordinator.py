"""Tests for optimistic link mutations and their rollback."""

import asyncio
from collections.abc import Sequence
from uuid import UUID, uuid4

import pytest

from gitolink.client.api import ApiError
from gitolink.client.coordinator import LinkMutationCoordinator
from gitolink.client.state import LinkCache, OptimisticLink
from gitolink.schemas.link import LinkCreate, LinkResponse, LinkUpdate
from helpers import link_response


class FakeLinkApi:
    """In-memory stand-in for ``GitoLinkClient``'s link methods."""

    def __init__(self, links: Sequence[LinkResponse] = ()) -> None:
        self.links = {link.id: link for link in links}
        self.fail_with: ApiError | None = None
        # Per-method failures, e.g. {"delete_link": ApiError(...)}
        self.fail_on: dict[str, ApiError] = {}
        self.gate: asyncio.Event | None = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def _call(self, method: str) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            if self.fail_with is not None:
                raise self.fail_with
            if method in self.fail_on:
                raise self.fail_on[method]
        finally:
            self.in_flight -= 1

    async def list_links(self) -> list[LinkResponse]:
        await self._call("list_links")
        return sorted(self.links.values(), key=lambda link: link.order)

    async def create_link(self, draft: LinkCreate) -> LinkResponse:
        await self._call("create_link")
        link = link_response(draft.title, len(self.links), url=str(draft.url))
        self.links[link.id] = link
        return link

    async def update_link(self, link_id: UUID, changes: LinkUpdate) -> LinkResponse:
        await self._call("update_link")
        link = self.links[link_id].model_copy(update=changes.changes())
        self.links[link_id] = link
        return link

    async def delete_link(self, link_id: UUID) -> None:
        await self._call("delete_link")
        del self.links[link_id]

    async def reorder_links(self, link_ids: Sequence[UUID]) -> list[LinkResponse]:
        await self._call("reorder_links")
        for index, link_id in enumerate(link_ids):
            self.links[link_id] = self.links[link_id].model_copy(update={"order": index})
        return await self.list_links()


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class RecordingForm:
    def __init__(self) -> None:
        self.is_open = True
        self.drafts: list[LinkCreate | None] = []

    def open(self, draft: LinkCreate | None = None) -> None:
        self.is_open = True
        self.drafts.append(draft)

    def close(self) -> None:
        self.is_open = False


def keys(cache: LinkCache) -> list[tuple]:
    return [entry.key() for entry in cache]


@pytest.fixture
async def api() -> FakeLinkApi:
    return FakeLinkApi([
        link_response("Portfolio", 0),
        link_response("GitHub", 1),
        link_response("Blog", 2),
    ])


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def form() -> RecordingForm:
    return RecordingForm()


@pytest.fixture
async def coordinator(api, notifier, form) -> LinkMutationCoordinator:
    coordinator = LinkMutationCoordinator(api, notifier=notifier, form=form)
    assert await coordinator.load() is True
    return coordinator


async def test_load_syncs_server_list(coordinator, api):
    assert [entry.title for entry in coordinator.cache] == ["Portfolio", "GitHub", "Blog"]
    assert all(entry.is_settled for entry in coordinator.cache)
    assert await coordinator.load() is False


async def test_create_shows_pending_entry_then_server_entry(coordinator, api, form):
    api.gate = asyncio.Event()
    draft = LinkCreate(title="Shop", url="https://shop.example")

    task = asyncio.create_task(coordinator.create(draft))
    await asyncio.sleep(0)

    pending = coordinator.cache.links[-1]
    assert pending.is_optimistic
    assert pending.title == "Shop"
    assert pending.order == 3
    assert form.is_open is False

    api.gate.set()
    created = await task

    assert created is not None
    assert not created.is_optimistic
    assert pending.id not in coordinator.cache
    assert coordinator.cache.links[-1] is created
    assert created.id in api.links


async def test_failed_create_restores_list_and_reopens_form(coordinator, api, notifier, form):
    before = keys(coordinator.cache)
    api.fail_with = ApiError(400, "url: Input should be a valid URL")
    draft = LinkCreate(title="Broken", url="https://broken.example")

    result = await coordinator.create(draft)

    assert result is None
    assert keys(coordinator.cache) == before
    assert not any(entry.is_optimistic for entry in coordinator.cache)
    assert notifier.errors == ["url: Input should be a valid URL"]
    assert form.is_open is True
    assert form.drafts == [draft]


async def test_update_is_applied_before_the_server_answers(coordinator, api):
    entry = coordinator.cache.links[0]
    api.gate = asyncio.Event()

    task = asyncio.create_task(coordinator.update(entry.id, LinkUpdate(title="Work")))
    await asyncio.sleep(0)

    assert entry.title == "Work"
    assert entry.is_updating
    assert entry.original_data["title"] == "Portfolio"

    api.gate.set()
    updated = await task

    assert updated.title == "Work"
    assert updated.is_settled
    assert updated.original_data is None


async def test_failed_update_restores_exact_fields(coordinator, api, notifier):
    entry = coordinator.cache.links[1]
    before = entry.fields()
    api.fail_with = ApiError(500, "Something went wrong")

    result = await coordinator.update(
        entry.id,
        LinkUpdate(title="Renamed", url="https://elsewhere.example", icon="star"),
    )

    assert result is None
    assert entry.fields() == before
    assert entry.is_settled
    assert entry.original_data is None
    assert notifier.errors == ["Failed to update link"]


async def test_toggle_active_flips_back_on_failure(coordinator, api, notifier):
    entry = coordinator.cache.links[0]

    await coordinator.toggle_active(entry.id)
    assert entry.active is False
    assert notifier.successes == ["Link hidden"]

    api.fail_with = ApiError(0, "connection refused")
    await coordinator.toggle_active(entry.id)

    assert entry.active is False
    assert notifier.errors == ["Failed to update link"]


async def test_delete_removes_immediately(coordinator, api, notifier):
    target = coordinator.cache.ids()[1]
    api.gate = asyncio.Event()

    task = asyncio.create_task(coordinator.delete(target))
    await asyncio.sleep(0)
    assert target not in coordinator.cache
    assert notifier.successes == ["Link deleted"]

    api.gate.set()
    assert await task is True
    assert target not in api.links


async def test_failed_delete_puts_link_back_in_place(coordinator, api, notifier):
    before = keys(coordinator.cache)
    api.fail_with = ApiError(404, "Link not found")

    assert await coordinator.delete(coordinator.cache.ids()[0]) is False

    assert keys(coordinator.cache) == before
    assert notifier.errors == ["Failed to delete link"]


async def test_reorder_applies_dense_order(coordinator, api):
    portfolio, github, blog = coordinator.cache.ids()

    assert await coordinator.reorder([blog, portfolio, github]) is True

    assert [entry.title for entry in coordinator.cache] == ["Blog", "Portfolio", "GitHub"]
    assert [entry.order for entry in coordinator.cache] == [0, 1, 2]
    assert api.links[blog].order == 0


async def test_failed_move_restores_previous_order(coordinator, api, notifier):
    before = keys(coordinator.cache)
    api.fail_with = ApiError(500, "Something went wrong")

    assert await coordinator.move(coordinator.cache.ids()[2], 0) is False

    assert keys(coordinator.cache) == before
    assert notifier.errors == ["Failed to reorder links"]


async def test_move_unknown_link_is_refused(coordinator, notifier):
    before = keys(coordinator.cache)

    assert await coordinator.move(uuid4(), 0) is False

    assert keys(coordinator.cache) == before
    assert notifier.errors == []


async def test_failed_delete_keeps_link_created_meanwhile(coordinator, api, notifier):
    github = coordinator.cache.ids()[1]
    api.gate = asyncio.Event()
    api.fail_on["delete_link"] = ApiError(500, "Something went wrong")

    creating = asyncio.create_task(
        coordinator.create(LinkCreate(title="Shop", url="https://shop.example"))
    )
    await asyncio.sleep(0)
    deleting = asyncio.create_task(coordinator.delete(github))
    await asyncio.sleep(0)
    assert github not in coordinator.cache

    api.gate.set()
    created = await creating
    assert await deleting is False

    assert [entry.title for entry in coordinator.cache] == ["Portfolio", "GitHub", "Blog", "Shop"]
    assert coordinator.cache.links[-1] is created
    assert all(entry.is_settled for entry in coordinator.cache)
    assert notifier.errors == ["Failed to delete link"]


async def test_failed_delete_leaves_other_updates_alone(coordinator, api):
    portfolio, github, _ = coordinator.cache.ids()
    api.gate = asyncio.Event()
    api.fail_on["delete_link"] = ApiError(500, "Something went wrong")

    updating = asyncio.create_task(coordinator.update(portfolio, LinkUpdate(title="Work")))
    deleting = asyncio.create_task(coordinator.delete(github))
    await asyncio.sleep(0)

    api.gate.set()
    updated = await updating
    assert await deleting is False

    entry = coordinator.cache.get(portfolio)
    assert entry is updated
    assert entry.title == "Work"
    assert entry.is_settled
    assert coordinator.cache.ids()[1] == github


async def test_failed_reorder_keeps_link_created_meanwhile(coordinator, api, notifier):
    blog = coordinator.cache.ids()[2]
    api.gate = asyncio.Event()
    api.fail_on["reorder_links"] = ApiError(404, "Link not found")

    creating = asyncio.create_task(
        coordinator.create(LinkCreate(title="Shop", url="https://shop.example"))
    )
    await asyncio.sleep(0)
    moving = asyncio.create_task(coordinator.move(blog, 0))
    await asyncio.sleep(0)
    assert coordinator.cache.ids()[0] == blog

    api.gate.set()
    created = await creating
    assert await moving is False

    assert [entry.title for entry in coordinator.cache] == ["Portfolio", "GitHub", "Blog", "Shop"]
    assert [entry.order for entry in coordinator.cache] == [0, 1, 2, 3]
    assert coordinator.cache.links[-1] is created
    assert not created.is_optimistic
    assert notifier.errors == ["Failed to reorder links"]


async def test_updates_to_one_link_do_not_overlap(coordinator, api):
    entry = coordinator.cache.links[0]

    await asyncio.gather(
        coordinator.update(entry.id, LinkUpdate(title="First")),
        coordinator.update(entry.id, LinkUpdate(title="Second")),
    )

    assert api.max_in_flight == 1
    assert entry.title == "Second"


async def test_load_failure_keeps_cache(coordinator, api, notifier):
    before = keys(coordinator.cache)
    api.fail_with = ApiError(401, "Not authenticated")

    assert await coordinator.load() is False
    assert keys(coordinator.cache) == before
    assert notifier.errors == ["Failed to load links"]


async def test_unknown_link_is_ignored(coordinator):
    missing = OptimisticLink.from_server(link_response("Ghost", 9)).id

    assert await coordinator.update(missing, LinkUpdate(title="x")) is None
    assert await coordinator.toggle_active(missing) is None
    assert await coordinator.delete(missing) is False
