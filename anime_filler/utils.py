# anime_filler/utils.py

import re

_DOUBLE_SPACE = "  "
_RANGE_DASHES = ("–", "—")
_SINGLE_NUMBER_PATTERN = re.compile(r"^\d+$")
_RANGE_PATTERN = re.compile(r"^(\d+)\s*-\s*(\d+)$")


def _collapse_spaces(value: str) -> str:
    while _DOUBLE_SPACE in value:
        value = value.replace(_DOUBLE_SPACE, " ")
    return value.strip()


def normalize_name(name: str) -> str:
    """
    Reduces a series or show name to a comparable form.

    Examples:
        - "Naruto: Shippuden" -> "naruto shippuden"
        - "Fullmetal_Alchemist-Brotherhood" -> "fullmetal alchemist brotherhood"
    """
    lowered = (name or "").lower()
    for char in (":", "-", "_"):
        lowered = lowered.replace(char, " ")
    return _collapse_spaces(lowered)


def normalize_title(title: str) -> str:
    """Reduces an episode title to a comparable form (punctuation dropped)."""
    lowered = (title or "").lower()
    for char in ("!", "?", ",", "."):
        lowered = lowered.replace(char, "")
    for char in (":", "-"):
        lowered = lowered.replace(char, " ")
    return _collapse_spaces(lowered)


def strip_markers(title: str, filler_suffix: str, mixed_suffix: str) -> str:
    """
    Removes a marker previously applied to an episode title.

    The current format puts the marker in front ("[F] Title"); older runs
    appended it ("Title [F]"). Only one marker is removed.
    """
    for suffix in (filler_suffix, mixed_suffix):
        prefix = f"{suffix} "
        if title.startswith(prefix):
            return title[len(prefix):]

    for suffix in (filler_suffix, mixed_suffix):
        trailer = f" {suffix}"
        if title.endswith(trailer):
            return title[: -len(trailer)]

    return title


def apply_marker(clean_title: str, suffix: str | None) -> str:
    return f"{suffix} {clean_title}" if suffix else clean_title


def parse_episode_numbers(text: str) -> set[int]:
    """
    Parses a catalog episode-number cell.

    "57" yields {57} and "57-60" yields {57, 58, 59, 60}. Reversed ranges
    and anything unparsable yield an empty set.
    """
    cleaned = (text or "").strip()
    for dash in _RANGE_DASHES:
        cleaned = cleaned.replace(dash, "-")

    if _SINGLE_NUMBER_PATTERN.match(cleaned):
        return {int(cleaned)}

    match = _RANGE_PATTERN.match(cleaned)
    if not match:
        return set()

    start, end = int(match.group(1)), int(match.group(2))
    return set(range(start, end + 1))


def parse_single_episode_number(text: str) -> int | None:
    """Returns the number of a non-range cell, or None."""
    cleaned = (text or "").strip()
    if _SINGLE_NUMBER_PATTERN.match(cleaned):
        return int(cleaned)
    return None
