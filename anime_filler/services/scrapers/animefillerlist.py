import re

from bs4 import BeautifulSoup, Tag

from ...config import logger
from ...models import ClassificationResult
from ...utils import normalize_title, parse_episode_numbers, parse_single_episode_number

# Matches "/shows/naruto", "/shows/naruto/" and absolute links to the same path.
_SHOW_HREF_PATTERN = re.compile(r"^(?:https?://[^/]+)?/shows/([^/?#]+)/?(?:[?#].*)?$")

_FILLER_TOKEN = "filler"
_MIXED_TOKEN = "mixed"


def _make_soup(html: bytes | str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def parse_show_index(html: bytes | str) -> dict[str, str]:
    """
    Extracts ``{display name: catalog id}`` pairs from the ``/shows`` page.

    The first link seen for a display name wins; links without visible text
    or without a trailing path segment are ignored.
    """
    soup = _make_soup(html)
    index: dict[str, str] = {}

    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        match = _SHOW_HREF_PATTERN.match(href.strip())
        if not match:
            continue

        name = tag.get_text(" ", strip=True)
        catalog_id = match.group(1).strip()
        if not name or not catalog_id:
            continue
        index.setdefault(name, catalog_id)

    return index


def _row_classification(row: Tag) -> str | None:
    classes = row.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    row_class = " ".join(classes).lower()

    # "filler even" / "filler odd" are pure filler; "mixed_canon/filler" is mixed.
    if _MIXED_TOKEN in row_class:
        return _MIXED_TOKEN
    if _FILLER_TOKEN in row_class:
        return _FILLER_TOKEN
    return None


def parse_episode_table(html: bytes | str) -> ClassificationResult | None:
    """
    Parses a show page into filler / mixed episode numbers and a title lookup.

    Returns None when the page holds no episode rows at all, which means the
    markup is not what we expect rather than "this show has no filler".
    """
    soup = _make_soup(html)
    rows = [
        row
        for row in soup.find_all("tr")
        if isinstance(row, Tag) and row.find("td", recursive=False) is not None
    ]
    if not rows:
        return None

    filler: set[int] = set()
    mixed: set[int] = set()
    title_to_absolute: dict[str, int] = {}

    for row in rows:
        cells = row.find_all("td", recursive=False)
        number_text = cells[0].get_text(" ", strip=True)

        single = parse_single_episode_number(number_text)
        if single is not None and len(cells) > 1:
            title_text = cells[1].get_text(" ", strip=True)
            normalized = normalize_title(title_text)
            if normalized and normalized not in title_to_absolute:
                title_to_absolute[normalized] = single

        kind = _row_classification(row)
        if kind is None:
            continue

        numbers = parse_episode_numbers(number_text)
        if not numbers:
            logger.debug(f"[CATALOG] Skipping malformed episode number '{number_text}'")
            continue

        target, other = (mixed, filler) if kind == _MIXED_TOKEN else (filler, mixed)
        # A number already classified by an earlier row keeps that class.
        target.update(numbers - other)

    return ClassificationResult.build(filler, mixed, title_to_absolute)
