# anime_filler/services/catalog_service.py

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

import httpx
from thefuzz import process

from ..config import logger
from ..models import ClassificationResult
from ..utils import normalize_name
from .cache import TimedCache
from .catalog_client import AnimeFillerListClient
from .scrapers import parse_episode_table, parse_show_index

_INDEX_KEY = "show_index"


class CatalogSource(Protocol):
    async def fetch_index_page(self) -> bytes: ...

    async def fetch_show_page(self, catalog_id: str) -> bytes: ...


# --- Show name matching strategies ---


def _strategy_exact_match(query: str, candidate: str) -> bool:
    return candidate == query


def _strategy_substring_match(query: str, candidate: str) -> bool:
    return bool(candidate) and (query in candidate or candidate in query)


def _strategy_space_insensitive_match(query: str, candidate: str) -> bool:
    return candidate.replace(" ", "") == query.replace(" ", "")


_MATCH_STRATEGIES: tuple[tuple[str, Callable[[str, str], bool]], ...] = (
    ("exact", _strategy_exact_match),
    ("substring", _strategy_substring_match),
    ("space-insensitive", _strategy_space_insensitive_match),
)


def match_catalog_id(series_name: str, index: dict[str, str]) -> str | None:
    """
    Finds the catalog id for ``series_name`` in a show index.

    Each strategy is tried over the whole index before the next one, so an
    exact match always beats an earlier substring match.
    """
    query = normalize_name(series_name)
    if not query:
        return None

    normalized_index = [(name, normalize_name(name), slug) for name, slug in index.items()]
    for label, strategy in _MATCH_STRATEGIES:
        for name, candidate, slug in normalized_index:
            if strategy(query, candidate):
                if label != "exact":
                    logger.debug(
                        f"[CATALOG] {label} match: '{series_name}' -> '{name}' ({slug})"
                    )
                return slug
    return None


class CatalogIndexResolver:
    """Maps local series names to catalog ids using the cached show index."""

    def __init__(self, source: CatalogSource, cache: TimedCache | None = None) -> None:
        self.source = source
        self.cache = cache if cache is not None else _INDEX_CACHE

    async def get_show_index(self) -> dict[str, str]:
        cached = self.cache.get(_INDEX_KEY)
        if cached is not TimedCache.MISS:
            return cached

        try:
            html = await self.source.fetch_index_page()
            index = parse_show_index(html)
        except httpx.HTTPError as e:
            logger.error(f"[CATALOG] Failed to load show index: {e}")
            return self._stale_index()
        except Exception as e:
            logger.error(f"[CATALOG] Unexpected error parsing show index: {e}", exc_info=True)
            return self._stale_index()

        logger.info(f"[CATALOG] Show index loaded: {len(index)} entries.")
        self.cache.set(_INDEX_KEY, index)
        return index

    def _stale_index(self) -> dict[str, str]:
        stale = self.cache.peek(_INDEX_KEY)
        if stale is TimedCache.MISS:
            return {}
        logger.warning("[CATALOG] Using stale show index.")
        return stale

    async def resolve_catalog_id(self, series_name: str) -> str | None:
        index = await self.get_show_index()
        slug = match_catalog_id(series_name, index)
        if slug is None and index:
            closest = process.extractOne(series_name, list(index.keys()))
            if closest:
                logger.debug(
                    f"[CATALOG] No match for '{series_name}' "
                    f"(closest: '{closest[0]}', score {closest[1]})"
                )
        return slug


class EpisodeClassificationFetcher:
    """Fetches and caches the filler / mixed classification of catalog shows."""

    def __init__(self, source: CatalogSource, cache: TimedCache | None = None) -> None:
        self.source = source
        self.cache = cache if cache is not None else _CLASSIFICATION_CACHE
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_classification(self, catalog_id: str) -> ClassificationResult:
        cached = self.cache.get(catalog_id)
        if cached is not TimedCache.MISS:
            logger.debug(f"[CACHE] HIT classification for '{catalog_id}'")
            return cached

        lock = self._locks.setdefault(catalog_id, asyncio.Lock())
        async with lock:
            # Another pass may have filled the entry while we waited.
            cached = self.cache.get(catalog_id)
            if cached is not TimedCache.MISS:
                return cached
            logger.debug(f"[CACHE] MISS classification for '{catalog_id}'")
            return await self._fetch(catalog_id)

    async def _fetch(self, catalog_id: str) -> ClassificationResult:
        try:
            html = await self.source.fetch_show_page(catalog_id)
            result = parse_episode_table(html)
        except httpx.HTTPError as e:
            logger.error(f"[CATALOG] Failed to fetch episode list for '{catalog_id}': {e}")
            return ClassificationResult.empty()
        except Exception as e:
            logger.error(
                f"[CATALOG] Unexpected error parsing episode list for '{catalog_id}': {e}",
                exc_info=True,
            )
            return ClassificationResult.empty()

        if result is None:
            logger.warning(f"[CATALOG] No episode table found for '{catalog_id}'.")
            return ClassificationResult.empty()

        logger.info(
            f"[CATALOG] '{catalog_id}': {len(result.filler)} filler, "
            f"{len(result.mixed)} mixed, {len(result.title_to_absolute)} titles indexed."
        )
        self.cache.set(catalog_id, result)
        return result


_INDEX_CACHE = TimedCache()
_CLASSIFICATION_CACHE = TimedCache()


def clear_catalog_caches() -> None:
    """Clears the process-wide show index and classification caches (used in tests)."""
    _INDEX_CACHE.clear()
    _CLASSIFICATION_CACHE.clear()


def build_catalog_services(
    base_url: str,
    timeout: float,
    expiry: float | None = None,
) -> tuple[CatalogIndexResolver, EpisodeClassificationFetcher]:
    """Wires a resolver and fetcher onto one HTTP client and the shared caches."""
    source = AnimeFillerListClient(base_url=base_url, timeout=timeout)
    if expiry is not None:
        _INDEX_CACHE.expiry = expiry
        _CLASSIFICATION_CACHE.expiry = expiry
    return CatalogIndexResolver(source), EpisodeClassificationFetcher(source)
