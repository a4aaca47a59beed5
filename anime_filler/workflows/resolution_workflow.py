# anime_filler/workflows/resolution_workflow.py

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Hashable, Iterable, Mapping, Sequence

from ..config import FillerConfig, logger
from ..models import (
    ClassificationResult,
    EpisodeDecision,
    EpisodeLabel,
    EpisodeRecord,
    LibraryRunSummary,
    SeriesRecord,
)
from ..services.absolute_numbering import compute_absolute_numbers
from ..services.catalog_service import (
    CatalogIndexResolver,
    EpisodeClassificationFetcher,
    build_catalog_services,
)
from ..utils import apply_marker, normalize_title, strip_markers

RenameCallback = Callable[[EpisodeDecision], Any]
ProgressCallback = Callable[[float], None]
NumberStrategy = Callable[[EpisodeRecord, str], "int | None"]


# --- Absolute number strategies, tried in order ---


def _number_strategies(
    absolute_map: Mapping[Hashable, int],
    classification: ClassificationResult,
) -> list[tuple[str, NumberStrategy]]:
    def from_absolute_map(episode: EpisodeRecord, clean_title: str) -> int | None:
        return absolute_map.get(episode.episode_id)

    def from_catalog_title(episode: EpisodeRecord, clean_title: str) -> int | None:
        return classification.title_to_absolute.get(normalize_title(clean_title))

    def from_raw_index(episode: EpisodeRecord, clean_title: str) -> int | None:
        # Best effort only: may collide with another episode's catalog number.
        return episode.index

    return [
        ("absolute map", from_absolute_map),
        ("title match", from_catalog_title),
        ("raw index", from_raw_index),
    ]


def _resolve_number(
    episode: EpisodeRecord,
    clean_title: str,
    strategies: Sequence[tuple[str, NumberStrategy]],
) -> int | None:
    for label, strategy in strategies:
        number = strategy(episode, clean_title)
        if number is not None:
            if label != "absolute map":
                logger.debug(
                    f"[FILLER] {label}: '{clean_title}' -> absolute #{number}"
                )
            return number
    return None


def _desired_label(
    number: int, classification: ClassificationResult, config: FillerConfig
) -> EpisodeLabel:
    if config.mark_filler and number in classification.filler:
        return EpisodeLabel.FILLER
    if config.mark_mixed and number in classification.mixed:
        return EpisodeLabel.MIXED
    return EpisodeLabel.NONE


def _suffix_for(label: EpisodeLabel, config: FillerConfig) -> str | None:
    if label is EpisodeLabel.FILLER:
        return config.filler_suffix
    if label is EpisodeLabel.MIXED:
        return config.mixed_suffix
    return None


def build_decisions(
    concrete_episodes: Iterable[EpisodeRecord],
    all_episodes: Iterable[EpisodeRecord],
    classification: ClassificationResult,
    config: FillerConfig,
) -> list[EpisodeDecision]:
    """Decides the title of every concrete episode, keeping only real changes."""
    absolute_map = compute_absolute_numbers(all_episodes)
    strategies = _number_strategies(absolute_map, classification)

    decisions: list[EpisodeDecision] = []
    for episode in concrete_episodes:
        if episode.is_placeholder or episode.index is None:
            continue

        clean_title = strip_markers(
            episode.title, config.filler_suffix, config.mixed_suffix
        )
        number = _resolve_number(episode, clean_title, strategies)
        if number is None:
            continue

        label = _desired_label(number, classification, config)
        new_title = apply_marker(clean_title, _suffix_for(label, config))
        if new_title == episode.title:
            continue

        decisions.append(
            EpisodeDecision(
                episode_id=episode.episode_id,
                current_title=episode.title,
                absolute_number=number,
                label=label,
                new_title=new_title,
            )
        )
    return decisions


async def resolve_series(
    series_name: str,
    concrete_episodes: Sequence[EpisodeRecord],
    all_episodes: Sequence[EpisodeRecord],
    config: FillerConfig,
    *,
    resolver: CatalogIndexResolver,
    fetcher: EpisodeClassificationFetcher,
) -> list[EpisodeDecision]:
    """
    Works out the rename decisions for one series.

    A series unknown to the catalog yields no decisions, so its existing
    titles are left alone. In nothing mode no request is made and
    every existing marker is stripped.
    """
    if config.nothing_mode:
        classification = ClassificationResult.empty()
    else:
        catalog_id = await resolver.resolve_catalog_id(series_name)
        if catalog_id is None:
            logger.debug(f"[FILLER] No catalog entry for '{series_name}', skipping.")
            return []

        logger.info(f"[FILLER] Processing '{series_name}' (catalog id: {catalog_id})")
        classification = await fetcher.get_classification(catalog_id)
        if classification.is_empty:
            logger.info(
                f"[FILLER] No filler/mixed episodes known for '{series_name}'; "
                "only stripping existing markers."
            )

    return build_decisions(concrete_episodes, all_episodes, classification, config)


async def _apply_decisions(
    series_name: str,
    decisions: Sequence[EpisodeDecision],
    apply_rename: RenameCallback,
) -> tuple[int, int]:
    renamed = failed = 0
    for decision in decisions:
        try:
            outcome = apply_rename(decision)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            failed += 1
            logger.error(
                f"[FILLER] Could not rename episode {decision.episode_id!r} "
                f"of '{series_name}' to '{decision.new_title}': {e}"
            )
            continue

        renamed += 1
        action = "Marked" if decision.label is not EpisodeLabel.NONE else "Unmarked"
        logger.debug(
            f"[FILLER] {action}: #{decision.absolute_number} -> '{decision.new_title}'"
        )
    return renamed, failed


async def process_library(
    series_batch: Sequence[SeriesRecord],
    config: FillerConfig,
    apply_rename: RenameCallback,
    *,
    resolver: CatalogIndexResolver | None = None,
    fetcher: EpisodeClassificationFetcher | None = None,
    progress: ProgressCallback | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> LibraryRunSummary:
    """
    Runs a marking pass over every series, one at a time.

    A failing or timed-out series is logged and skipped. Cancelling the task
    running this coroutine stops the pass between requests; caches are never
    left half written.
    """
    if resolver is None or fetcher is None:
        default_resolver, default_fetcher = build_catalog_services(
            config.base_url, config.request_timeout, config.cache_expiry_seconds
        )
        resolver = resolver or default_resolver
        fetcher = fetcher or default_fetcher

    summary = LibraryRunSummary(series_total=len(series_batch))
    if not series_batch:
        logger.info("[FILLER] No series to process.")
        return summary

    logger.info(f"[FILLER] Marking pass started: {len(series_batch)} series.")
    for position, series in enumerate(series_batch):
        if progress:
            progress(position / len(series_batch) * 100)

        try:
            decisions = await asyncio.wait_for(
                resolve_series(
                    series.name,
                    series.concrete_episodes,
                    series.episodes,
                    config,
                    resolver=resolver,
                    fetcher=fetcher,
                ),
                timeout=config.series_timeout,
            )
        except asyncio.TimeoutError:
            summary.series_failed += 1
            logger.error(
                f"[FILLER] Timed out after {config.series_timeout}s on '{series.name}'."
            )
        except Exception as e:
            summary.series_failed += 1
            logger.error(f"[FILLER] Failed to process '{series.name}': {e}", exc_info=True)
        else:
            summary.series_processed += 1
            renamed, failed = await _apply_decisions(series.name, decisions, apply_rename)
            summary.episodes_renamed += renamed
            summary.rename_failures += failed
            if renamed:
                logger.info(f"[FILLER] '{series.name}': {renamed} episode(s) updated.")

        # Pause between series to go easy on the catalog.
        await sleep(config.series_delay)

    if progress:
        progress(100.0)
    logger.info(
        f"[FILLER] Marking pass completed: {summary.series_processed} processed, "
        f"{summary.series_failed} failed, "
        f"{summary.episodes_renamed} renamed."
    )
    return summary
