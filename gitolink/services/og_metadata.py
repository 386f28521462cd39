"""Open-Graph metadata scraper for link previews."""

from datetime import timedelta
from urllib.parse import urljoin

import httpx
import structlog
from bs4 import BeautifulSoup

from gitolink.core.config import get_settings
from gitolink.core.database import utcnow
from gitolink.core.redis import cache_og_metadata, get_cached_og_metadata
from gitolink.models.link import Link
from gitolink.schemas.analytics import OgMetadata

settings = get_settings()
logger = structlog.get_logger()

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 500

# Desktop browser UA; some sites serve no meta tags to unknown agents
FETCH_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class MetadataFetchError(Exception):
    """The destination page could not be fetched."""


def _find_meta(soup: BeautifulSoup, key: str) -> str | None:
    """Content of the first ``<meta>`` whose property or name is ``key``."""
    for attribute in ("property", "name"):
        tag = soup.find("meta", attrs={attribute: key})
        if tag and tag.get("content"):
            return tag["content"].strip()
    return None


def parse_og_metadata(document: str, page_url: str) -> OgMetadata:
    """Extract title, description and image from an HTML document."""
    soup = BeautifulSoup(document, "html.parser")

    # Open Graph first, then Twitter cards, then plain HTML
    title = _find_meta(soup, "og:title") or _find_meta(soup, "twitter:title")
    if not title:
        title_tag = soup.find("title")
        title = title_tag.get_text().strip() if title_tag else ""

    description = (
        _find_meta(soup, "og:description")
        or _find_meta(soup, "twitter:description")
        or _find_meta(soup, "description")
        or ""
    )

    image = _find_meta(soup, "og:image") or _find_meta(soup, "twitter:image") or ""
    if image and not image.startswith(("http://", "https://")):
        # Make relative image URLs absolute
        image = urljoin(page_url, image)

    return OgMetadata(
        title=title[:MAX_TITLE_LENGTH],
        description=description[:MAX_DESCRIPTION_LENGTH],
        image=image,
    )


async def fetch_og_metadata(url: str, client: httpx.AsyncClient) -> OgMetadata:
    """Download ``url`` and parse its preview metadata.

    Raises:
        MetadataFetchError: on transport failure, timeout or an error status
    """
    try:
        response = await client.get(
            url,
            headers={"User-Agent": FETCH_USER_AGENT},
            timeout=settings.og_fetch_timeout_seconds,
            follow_redirects=True,
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("OG metadata fetch failed", url=url, error=str(e))
        raise MetadataFetchError(str(e)) from e

    return parse_og_metadata(response.text, str(response.url))


def _from_link_cache(link: Link) -> OgMetadata | None:
    """The link row's stored metadata if it is younger than the cache TTL."""
    if link.og_cache_at is None:
        return None
    if utcnow() - link.og_cache_at >= timedelta(seconds=settings.og_cache_ttl_seconds):
        return None
    return OgMetadata(
        title=link.og_title or "",
        description=link.og_description or "",
        image=link.og_image or "",
    )


async def get_og_metadata(
    url: str,
    client: httpx.AsyncClient,
    link: Link | None = None,
) -> OgMetadata:
    """Resolve preview metadata: Redis, then the link row, then a live fetch.

    A fresh fetch is written back to Redis and, when ``link`` is given, onto
    the link's ``og_*`` columns. The caller commits.
    """
    cached = await get_cached_og_metadata(url)
    if cached is not None:
        return OgMetadata.model_validate(cached)

    if link is not None:
        stored = _from_link_cache(link)
        if stored is not None:
            await cache_og_metadata(url, stored.model_dump())
            return stored

    metadata = await fetch_og_metadata(url, client)
    await cache_og_metadata(url, metadata.model_dump())

    if link is not None:
        link.og_title = metadata.title
        link.og_description = metadata.description
        link.og_image = metadata.image
        link.og_cache_at = utcnow()

    return metadata
