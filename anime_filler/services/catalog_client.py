# anime_filler/services/catalog_client.py

from urllib.parse import quote

import httpx

from ..config import DEFAULT_BASE_URL, REQUEST_TIMEOUT_SECONDS, logger

_HEADERS = {"User-Agent": "anime-filler-marker/1.0"}


class AnimeFillerListClient:
    """
    Raw page access to animefillerlist.com.

    This class only downloads pages. Markup is understood exclusively by
    ``scrapers.animefillerlist`` so either side can be swapped out alone.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def index_url(self) -> str:
        return f"{self.base_url}/shows"

    def show_url(self, catalog_id: str) -> str:
        return f"{self.base_url}/shows/{quote(catalog_id, safe='')}"

    async def fetch_index_page(self) -> bytes:
        return await self._get(self.index_url())

    async def fetch_show_page(self, catalog_id: str) -> bytes:
        return await self._get(self.show_url(catalog_id))

    async def _get(self, url: str) -> bytes:
        logger.info(f"[CATALOG] Fetching {url}")
        async with httpx.AsyncClient(
            headers=_HEADERS, timeout=self.timeout, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
        return response.content
