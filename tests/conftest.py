import sys
from pathlib import Path

import pytest

# Ensure root path is available for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from anime_filler.config import FillerConfig  # noqa: E402
from anime_filler.models import EpisodeRecord  # noqa: E402
from anime_filler.services.catalog_service import clear_catalog_caches  # noqa: E402


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_hours(self, hours: float) -> None:
        self.now += hours * 3600


class FakeCatalogSource:
    """Stands in for AnimeFillerListClient and records every request."""

    def __init__(
        self,
        index_html: str = "",
        show_pages: dict[str, str] | None = None,
        error: Exception | None = None,
    ):
        self.index_html = index_html
        self.show_pages = show_pages or {}
        self.error = error
        self.index_calls = 0
        self.show_calls: list[str] = []

    async def fetch_index_page(self) -> bytes:
        self.index_calls += 1
        if self.error:
            raise self.error
        return self.index_html.encode("utf-8")

    async def fetch_show_page(self, catalog_id: str) -> bytes:
        self.show_calls.append(catalog_id)
        if self.error:
            raise self.error
        return self.show_pages[catalog_id].encode("utf-8")


INDEX_HTML = """
<html><body>
<div class="ShowList">
  <a href="/shows">All shows</a>
  <a href="/shows/naruto">Naruto</a>
  <a href="/shows/naruto-shippuden">Naruto: Shippuden</a>
  <a href="/shows/dragon-ball-z">Dragon Ball Z</a>
  <a href="https://www.animefillerlist.com/shows/one-piece/">One Piece</a>
  <a href="/shows/">Broken</a>
  <a href="/about">About</a>
</div>
</body></html>
"""

SHOW_HTML = """
<html><body>
<table class="EpisodeList">
<thead><tr><th>#</th><th>Title</th><th>Type</th></tr></thead>
<tbody>
<tr class="manga_canon even"><td class="Number">1</td><td class="Title"><a>Enter: Naruto Uzumaki!</a></td><td>Manga Canon</td></tr>
<tr class="filler odd"><td class="Number">2</td><td class="Title"><a>My Name is Konohamaru!</a></td><td>Filler</td></tr>
<tr class="mixed_canon/filler even"><td class="Number">3</td><td class="Title"><a>Sasuke and Sakura: Friends or Foes?</a></td><td>Mixed</td></tr>
<tr class="filler even"><td class="Number">4</td><td class="Title"><a>Pass or Fail: Survival Test</a></td><td>Filler</td></tr>
<tr class="filler odd"><td class="Number">5</td><td class="Title"><a>My Name is Konohamaru!</a></td><td>Filler</td></tr>
</tbody>
</table>
</body></html>
"""


@pytest.fixture(autouse=True)
def _clear_catalog_caches():
    clear_catalog_caches()
    yield
    clear_catalog_caches()


@pytest.fixture
def index_html():
    return INDEX_HTML


@pytest.fixture
def show_html():
    return SHOW_HTML


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_source():
    def _make(**kwargs):
        kwargs.setdefault("index_html", INDEX_HTML)
        kwargs.setdefault("show_pages", {"naruto": SHOW_HTML})
        return FakeCatalogSource(**kwargs)

    return _make


@pytest.fixture
def config():
    return FillerConfig(series_delay=0)


@pytest.fixture
def make_episode():
    def _make(
        episode_id,
        season=1,
        index=1,
        title="Episode",
        placeholder=False,
    ):
        return EpisodeRecord(
            episode_id=episode_id,
            season=season,
            index=index,
            title=title,
            is_placeholder=placeholder,
        )

    return _make
