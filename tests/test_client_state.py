"""Tests for the client-side link cache."""

import pytest

from gitolink.client.state import LinkCache, OptimisticLink
from gitolink.schemas.link import LinkCreate
from helpers import link_response


def cache_of(*titles: str) -> LinkCache:
    return LinkCache(
        OptimisticLink.from_server(link_response(title, order))
        for order, title in enumerate(titles)
    )


def test_pending_entry_from_draft():
    draft = LinkCreate(title="New", url="https://example.com/new")

    entry = OptimisticLink.pending(draft, order=3)

    assert entry.is_optimistic
    assert not entry.is_settled
    assert entry.order == 3
    assert entry.url == "https://example.com/new"


def test_replace_keeps_position():
    cache = cache_of("A", "B", "C")
    b = cache.links[1]
    server = OptimisticLink.from_server(link_response("B2", 1))

    cache.replace(b.id, server)

    assert [entry.title for entry in cache] == ["A", "B2", "C"]
    assert b.id not in cache
    assert server.revision == b.revision + 1


def test_update_bumps_revision():
    cache = cache_of("A")
    entry = cache.links[0]
    revision = entry.revision

    cache.update(entry.id, title="A!")

    assert entry.title == "A!"
    assert entry.revision == revision + 1


def test_reorder_rewrites_dense_order():
    cache = cache_of("A", "B", "C")
    a, b, c = cache.ids()

    cache.reorder([c, a, b])

    assert [entry.title for entry in cache] == ["C", "A", "B"]
    assert [entry.order for entry in cache] == [0, 1, 2]


def test_reorder_must_name_every_link():
    cache = cache_of("A", "B")

    with pytest.raises(ValueError):
        cache.reorder(cache.ids()[:1])


def test_insert_puts_entry_back_at_index():
    cache = cache_of("A", "B", "C")
    b = cache.remove(cache.ids()[1])

    cache.insert(1, b)

    assert [entry.title for entry in cache] == ["A", "B", "C"]


def test_insert_past_the_end_appends():
    cache = cache_of("A", "B", "C")
    c = cache.remove(cache.ids()[2])
    cache.remove(cache.ids()[1])

    cache.insert(2, c)

    assert [entry.title for entry in cache] == ["A", "C"]


def test_restore_positions_only_touches_order():
    cache = cache_of("A", "B", "C")
    a, b, c = cache.ids()
    positions = cache.positions()

    cache.reorder([c, a, b])
    cache.update(a, title="changed")
    cache.remove(b)
    extra = cache.append(OptimisticLink.from_server(link_response("D", 5)))
    cache.restore_positions(positions)

    assert cache.ids() == [a, c, extra.id]
    assert [entry.order for entry in cache] == [0, 2, 5]
    assert cache.get(a).title == "changed"


def test_sync_ignores_identical_server_list():
    servers = [link_response("A", 0), link_response("B", 1)]
    cache = LinkCache()
    assert cache.sync(servers) is True
    revisions = [entry.revision for entry in cache]

    assert cache.sync([link.model_copy() for link in servers]) is False
    assert [entry.revision for entry in cache] == revisions


def test_sync_detects_field_change_with_same_ids():
    servers = [link_response("A", 0), link_response("B", 1)]
    cache = LinkCache()
    cache.sync(servers)
    untouched = cache.get(servers[0].id)

    changed = servers[1].model_copy(update={"title": "B renamed"})
    assert cache.sync([servers[0], changed]) is True

    assert cache.get(servers[0].id) is untouched
    assert cache.get(changed.id).title == "B renamed"
    assert cache.get(changed.id).revision > 1


def test_sync_detects_reordering():
    a, b = link_response("A", 0), link_response("B", 1)
    cache = LinkCache()
    cache.sync([a, b])

    moved = [b.model_copy(update={"order": 0}), a.model_copy(update={"order": 1})]

    assert cache.sync(moved) is True
    assert [entry.title for entry in cache] == ["B", "A"]
