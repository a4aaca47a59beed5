# anime_filler/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Hashable, Mapping


@dataclass(frozen=True)
class EpisodeRecord:
    """
    One library episode as supplied by the caller.

    ``is_placeholder`` marks a known episode without a downloaded media file.
    Placeholders only contribute to season numbering and are never renamed.
    """

    episode_id: Hashable
    season: int | None
    index: int | None
    title: str
    is_placeholder: bool = False


@dataclass
class SeriesRecord:
    name: str
    episodes: list[EpisodeRecord] = field(default_factory=list)

    @property
    def concrete_episodes(self) -> list[EpisodeRecord]:
        return [ep for ep in self.episodes if not ep.is_placeholder]


@dataclass(frozen=True)
class ClassificationResult:
    """
    Filler and mixed episode numbers of one catalog show.

    ``title_to_absolute`` maps normalized episode titles to their absolute
    number. The two number sets are disjoint since each catalog row is
    classified as one kind at most.
    """

    filler: frozenset[int] = frozenset()
    mixed: frozenset[int] = frozenset()
    title_to_absolute: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def empty(cls) -> ClassificationResult:
        return cls()

    @classmethod
    def build(
        cls, filler: set[int], mixed: set[int], title_to_absolute: dict[str, int]
    ) -> ClassificationResult:
        return cls(
            filler=frozenset(filler),
            mixed=frozenset(mixed),
            title_to_absolute=MappingProxyType(dict(title_to_absolute)),
        )

    @property
    def is_empty(self) -> bool:
        return not self.filler and not self.mixed


class EpisodeLabel(Enum):
    NONE = "none"
    FILLER = "filler"
    MIXED = "mixed"


@dataclass(frozen=True)
class EpisodeDecision:
    episode_id: Hashable
    current_title: str
    absolute_number: int
    label: EpisodeLabel
    new_title: str


@dataclass
class LibraryRunSummary:
    series_total: int = 0
    series_processed: int = 0
    series_failed: int = 0
    episodes_renamed: int = 0
    rename_failures: int = 0
