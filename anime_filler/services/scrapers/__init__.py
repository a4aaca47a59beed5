from .animefillerlist import parse_episode_table, parse_show_index

__all__ = [
    "parse_episode_table",
    "parse_show_index",
]
