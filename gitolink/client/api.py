"""Async HTTP client for the GitoLink API."""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import httpx
import structlog

from gitolink.schemas.analytics import LinkAnalytics, OgMetadata, UserAnalytics
from gitolink.schemas.base import ApiModel
from gitolink.schemas.link import LinkCreate, LinkReorder, LinkResponse, LinkUpdate
from gitolink.schemas.profile import ProfileResponse
from gitolink.schemas.user import UserResponse, UserUpdate

logger = structlog.get_logger()

DEFAULT_BASE_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"


class ApiError(Exception):
    """A request that did not succeed.

    ``status_code`` is 0 when the server was never reached.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


def _payload(model: ApiModel) -> dict[str, Any]:
    """Wire form of a request model: camelCase, only the fields that were set."""
    return model.model_dump(mode="json", by_alias=True, exclude_unset=True)


class GitoLinkClient:
    """Thin async wrapper over the REST API.

    The session cookie set by ``login``/``register`` is kept by the
    underlying ``httpx.AsyncClient`` and sent on every later call.

    Usage:
        async with GitoLinkClient("https://gitolink.example") as client:
            await client.login("me@example.com", "secret-password")
            links = await client.list_links()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitoLinkClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning("API request failed", method=method, path=path, error=str(e))
            raise ApiError(0, str(e)) from e

        if response.is_success:
            return response.json() if response.content else {}

        try:
            message = response.json().get("error") or response.reason_phrase
        except ValueError:
            message = response.reason_phrase
        raise ApiError(response.status_code, message)

    # Auth

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        name: str | None = None,
    ) -> UserResponse:
        body = {"username": username, "email": email, "password": password}
        if name is not None:
            body["name"] = name
        data = await self._request("POST", "/auth/register", json=body)
        return UserResponse.model_validate(data["user"])

    async def login(self, email: str, password: str) -> UserResponse:
        data = await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
        )
        return UserResponse.model_validate(data["user"])

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    async def me(self) -> UserResponse:
        data = await self._request("GET", "/auth/me")
        return UserResponse.model_validate(data["user"])

    async def update_profile(self, changes: UserUpdate) -> UserResponse:
        data = await self._request("PUT", "/auth/me", json=_payload(changes))
        return UserResponse.model_validate(data["user"])

    # Links

    async def list_links(self) -> list[LinkResponse]:
        data = await self._request("GET", "/links")
        return [LinkResponse.model_validate(link) for link in data["links"]]

    async def create_link(self, link: LinkCreate) -> LinkResponse:
        data = await self._request("POST", "/links", json=_payload(link))
        return LinkResponse.model_validate(data["link"])

    async def update_link(self, link_id: UUID, changes: LinkUpdate) -> LinkResponse:
        body = {**_payload(changes), "op": changes.op}
        data = await self._request("PATCH", f"/links/{link_id}", json=body)
        return LinkResponse.model_validate(data["link"])

    async def reorder_links(self, link_ids: Sequence[UUID]) -> list[LinkResponse]:
        """Persist a new display order; returns the list as stored."""
        reorder = LinkReorder(link_ids=list(link_ids))
        body = {**_payload(reorder), "op": reorder.op}
        data = await self._request("PATCH", f"/links/{reorder.link_ids[0]}", json=body)
        return [LinkResponse.model_validate(link) for link in data["links"]]

    async def delete_link(self, link_id: UUID) -> None:
        await self._request("DELETE", f"/links/{link_id}")

    # Analytics

    async def get_analytics(self, days: int | None = None) -> UserAnalytics:
        params = {"days": days} if days is not None else None
        data = await self._request("GET", "/analytics", params=params)
        return UserAnalytics.model_validate(data)

    async def get_link_analytics(
        self,
        link_id: UUID,
        days: int | None = None,
    ) -> LinkAnalytics:
        params = {"days": days} if days is not None else None
        data = await self._request("GET", f"/links/{link_id}/analytics", params=params)
        return LinkAnalytics.model_validate(data)

    async def get_og_metadata(self, url: str, link_id: UUID | None = None) -> OgMetadata:
        params: dict[str, str] = {"url": url}
        if link_id is not None:
            params["linkId"] = str(link_id)
        data = await self._request("GET", "/og-metadata", params=params)
        return OgMetadata.model_validate(data["metadata"])

    # Public profile

    async def get_profile(self, username: str) -> ProfileResponse:
        data = await self._request("GET", f"/profiles/{username}")
        return ProfileResponse.model_validate(data)

    async def track_click(self, username: str, link_id: UUID) -> None:
        await self._request(
            "POST",
            f"/profiles/{username}/clicks",
            json={"linkId": str(link_id)},
        )
