import httpx
import pytest

from anime_filler.services.catalog_client import AnimeFillerListClient


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://www.animefillerlist.com/shows")
            response = httpx.Response(self.status_code, request=request)
            raise httpx.HTTPStatusError("error", request=request, response=response)


class FakeAsyncClient:
    def __init__(self, response: FakeResponse):
        self._response = response
        self.requested: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def get(self, url, *args, **kwargs):
        self.requested.append(url)
        return self._response


@pytest.mark.asyncio
async def test_fetch_index_page_returns_raw_bytes(mocker):
    fake = FakeAsyncClient(FakeResponse(b"<html>index</html>"))
    mocker.patch(
        "anime_filler.services.catalog_client.httpx.AsyncClient", return_value=fake
    )

    client = AnimeFillerListClient(base_url="https://example.com/")
    content = await client.fetch_index_page()

    assert content == b"<html>index</html>"
    assert fake.requested == ["https://example.com/shows"]


@pytest.mark.asyncio
async def test_fetch_show_page_uses_catalog_id_path(mocker):
    fake = FakeAsyncClient(FakeResponse(b"<html>show</html>"))
    mocker.patch(
        "anime_filler.services.catalog_client.httpx.AsyncClient", return_value=fake
    )

    await AnimeFillerListClient().fetch_show_page("naruto-shippuden")

    assert fake.requested == ["https://www.animefillerlist.com/shows/naruto-shippuden"]


@pytest.mark.asyncio
async def test_fetch_raises_on_http_error(mocker):
    fake = FakeAsyncClient(FakeResponse(b"", status_code=503))
    mocker.patch(
        "anime_filler.services.catalog_client.httpx.AsyncClient", return_value=fake
    )

    with pytest.raises(httpx.HTTPStatusError):
        await AnimeFillerListClient().fetch_show_page("naruto")
