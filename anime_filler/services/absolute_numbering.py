# anime_filler/services/absolute_numbering.py

from typing import Hashable, Iterable

from ..models import EpisodeRecord


def _is_numbered_regular_episode(episode: EpisodeRecord) -> bool:
    # Season 0 holds specials, which the catalog's numbering never counts.
    return (
        episode.season is not None
        and episode.season > 0
        and episode.index is not None
    )


def compute_season_offsets(episodes: Iterable[EpisodeRecord]) -> dict[int, int]:
    """
    Computes the absolute-number offset of every regular season.

    The offset of a season is the sum of the highest episode index of all
    earlier seasons. Using the highest index instead of the number of records
    keeps gaps in the library from shifting later seasons, which is why
    placeholder episodes should be included.
    """
    season_max_index: dict[int, int] = {}
    for episode in episodes:
        if not _is_numbered_regular_episode(episode):
            continue
        assert episode.season is not None and episode.index is not None
        current = season_max_index.get(episode.season, 0)
        season_max_index[episode.season] = max(current, episode.index)

    offsets: dict[int, int] = {}
    running_total = 0
    for season in sorted(season_max_index):
        offsets[season] = running_total
        running_total += season_max_index[season]
    return offsets


def compute_absolute_numbers(
    episodes: Iterable[EpisodeRecord],
) -> dict[Hashable, int]:
    """
    Maps episode ids to absolute numbers (season offset + in-season index).

    Specials and records missing a season or index are left out; the caller
    falls back to other lookups for those.
    """
    episode_list = list(episodes)
    offsets = compute_season_offsets(episode_list)

    absolute: dict[Hashable, int] = {}
    for episode in episode_list:
        if not _is_numbered_regular_episode(episode):
            continue
        assert episode.season is not None and episode.index is not None
        absolute[episode.episode_id] = offsets[episode.season] + episode.index
    return absolute
