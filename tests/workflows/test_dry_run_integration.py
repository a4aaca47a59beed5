from unittest.mock import AsyncMock

import pytest

from anime_filler.config import FillerConfig
from anime_filler.models import SeriesRecord
from anime_filler.workflows import process_library


class DummyResponse:
    def __init__(self, text=""):
        self.content = text.encode("utf-8")
        self.status_code = 200

    def raise_for_status(self):
        pass


class DummyClient:
    def __init__(self, pages):
        self._pages = pages
        self.requested = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        pass

    async def get(self, url, *args, **kwargs):
        self.requested.append(url)
        return DummyResponse(self._pages[url])


@pytest.mark.asyncio
async def test_full_pass_through_http_client(
    mocker, index_html, show_html, naruto_library
):
    client = DummyClient(
        {
            "https://afl.test/shows": index_html,
            "https://afl.test/shows/naruto": show_html,
        }
    )
    mocker.patch(
        "anime_filler.services.catalog_client.httpx.AsyncClient", return_value=client
    )
    config = FillerConfig(base_url="https://afl.test", series_delay=0)
    renamed = {}

    async def apply_rename(decision):
        renamed[decision.episode_id] = decision.new_title

    summary = await process_library(
        [naruto_library, naruto_library], config, apply_rename, sleep=AsyncMock()
    )

    assert renamed == {
        "e2": "[F] My Name is Konohamaru!",
        "e3": "[C/F] Sasuke and Sakura: Friends or Foes?",
    }
    assert summary.series_processed == 2
    # The second pass over the same series is served from the caches.
    assert client.requested == [
        "https://afl.test/shows",
        "https://afl.test/shows/naruto",
    ]


@pytest.fixture
def naruto_library(make_episode):
    return SeriesRecord(
        "Naruto",
        [
            make_episode("e1", 1, 1, "Enter: Naruto Uzumaki!"),
            make_episode("e2", 1, 2, "My Name is Konohamaru!"),
            make_episode("e3", 1, 3, "Sasuke and Sakura: Friends or Foes?"),
        ],
    )
