"""Tests for the public profile and click ingestion."""

from prometheus_client import REGISTRY
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from gitolink.models import Click
from gitolink.services import click_service
from helpers import IPHONE_UA, add_link, register, stored_links


async def test_profile_shows_only_active_links_in_order(client, make_client):
    await register(client, "alice")
    first = await add_link(client, "First")
    hidden = await add_link(client, "Hidden")
    third = await add_link(client, "Third")
    await client.patch(f"/api/v1/links/{hidden['id']}", json={"op": "update", "active": False})
    await client.patch(
        f"/api/v1/links/{first['id']}",
        json={"op": "reorder", "linkIds": [third["id"], hidden["id"], first["id"]]},
    )

    response = await make_client().get("/api/v1/profiles/alice")

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["username"] == "alice"
    assert "email" not in body["user"]
    assert [link["title"] for link in body["links"]] == ["Third", "First"]
    assert set(body["links"][0]) == {"id", "title", "url", "icon", "embedType"}


async def test_profile_view_counts_served_links(client, make_client, session_factory):
    alice = await register(client, "alice")
    await add_link(client, "Shown")
    hidden = await add_link(client, "Hidden")
    await client.patch(f"/api/v1/links/{hidden['id']}", json={"op": "update", "active": False})

    visitor = make_client()
    await visitor.get("/api/v1/profiles/alice")
    await visitor.get("/api/v1/profiles/alice")

    links = {link.title: link for link in await stored_links(session_factory, alice["id"])}
    assert links["Shown"].view_count == 2
    assert links["Hidden"].view_count == 0


async def test_unknown_profile(client):
    response = await client.get("/api/v1/profiles/nobody")

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


async def test_click_is_recorded_with_request_metadata(client, make_client, session_factory):
    alice = await register(client, "alice")
    link = await add_link(client)

    response = await make_client().post(
        "/api/v1/profiles/alice/clicks",
        json={"linkId": link["id"]},
        headers={
            "User-Agent": IPHONE_UA,
            "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
            "Referer": "https://instagram.com/alice",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}

    async with session_factory() as session:
        click = (await session.execute(select(Click))).scalar_one()
    assert str(click.link_id) == link["id"]
    assert str(click.user_id) == alice["id"]
    assert click.ip == "203.0.113.7"
    assert click.device == "mobile"
    assert click.os == "iOS"
    assert click.referrer == "https://instagram.com/alice"


async def test_click_without_headers_uses_defaults(client, make_client, session_factory):
    await register(client, "alice")
    link = await add_link(client)

    visitor = make_client()
    visitor.headers.pop("User-Agent", None)
    response = await visitor.post("/api/v1/profiles/alice/clicks", json={"linkId": link["id"]})

    assert response.status_code == 200
    async with session_factory() as session:
        click = (await session.execute(select(Click))).scalar_one()
    assert click.ip == "unknown"
    assert click.device == "desktop"
    assert click.referrer is None


async def test_click_updates_counter_but_not_active_or_order(client, make_client, session_factory):
    alice = await register(client, "alice")
    await add_link(client, "First")
    link = await add_link(client, "Second")

    visitor = make_client()
    for _ in range(3):
        await visitor.post("/api/v1/profiles/alice/clicks", json={"linkId": link["id"]})

    stored = {item.title: item for item in await stored_links(session_factory, alice["id"])}
    assert stored["Second"].click_count == 3
    assert stored["Second"].active is True
    assert stored["Second"].order == 1
    assert stored["First"].click_count == 0


async def test_click_on_another_users_link_is_not_found(client, make_client, session_factory):
    await register(client, "alice")
    mallory = make_client()
    await register(mallory, "mallory")
    foreign = await add_link(mallory, "Mallory's")

    response = await make_client().post(
        "/api/v1/profiles/alice/clicks",
        json={"linkId": foreign["id"]},
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Link not found"}
    async with session_factory() as session:
        assert (await session.execute(select(Click))).first() is None


async def test_click_on_hidden_link_is_not_found(client, make_client):
    await register(client, "alice")
    link = await add_link(client)
    await client.patch(f"/api/v1/links/{link['id']}", json={"op": "update", "active": False})

    response = await make_client().post(
        "/api/v1/profiles/alice/clicks",
        json={"linkId": link["id"]},
    )

    assert response.status_code == 404


async def test_click_for_unknown_profile(client, make_client):
    await register(client, "alice")
    link = await add_link(client)

    response = await make_client().post(
        "/api/v1/profiles/nobody/clicks",
        json={"linkId": link["id"]},
    )

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


async def test_click_requires_link_id(client):
    response = await client.post("/api/v1/profiles/alice/clicks", json={})

    assert response.status_code == 400
    assert response.json()["error"].startswith("linkId:")


def failed_clicks() -> float:
    return REGISTRY.get_sample_value("clicks_recorded_total", {"outcome": "failed"}) or 0.0


async def test_click_storage_failure_is_generic_and_rolled_back(
    client, make_client, session_factory, monkeypatch
):
    alice = await register(client, "alice")
    link = await add_link(client)
    record_click = click_service.record_click

    async def record_then_fail(session, *args, **kwargs):
        await record_click(session, *args, **kwargs)
        raise OperationalError("INSERT INTO clicks", {}, Exception("disk I/O error"))

    monkeypatch.setattr(click_service, "record_click", record_then_fail)
    failures = failed_clicks()

    response = await make_client().post(
        "/api/v1/profiles/alice/clicks", json={"linkId": link["id"]}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Something went wrong"}
    assert failed_clicks() == failures + 1

    async with session_factory() as session:
        clicks = (await session.execute(select(Click))).scalars().all()
    assert clicks == []
    (stored,) = await stored_links(session_factory, alice["id"])
    assert stored.click_count == 0
