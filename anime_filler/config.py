# anime_filler/config.py

import configparser
import logging
import os
from dataclasses import dataclass

# --- Constants ---
DEFAULT_BASE_URL = "https://www.animefillerlist.com"
DEFAULT_FILLER_SUFFIX = "[F]"
DEFAULT_MIXED_SUFFIX = "[C/F]"
CACHE_EXPIRY_HOURS = 24
REQUEST_TIMEOUT_SECONDS = 30.0
SERIES_DELAY_SECONDS = 1.0
SERIES_TIMEOUT_SECONDS = 120.0
CONFIG_SECTION = "anime_filler"

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)
logging.getLogger("httpx").setLevel(logging.WARNING)


@dataclass(frozen=True)
class FillerConfig:
    """Settings that drive a marking pass over the library."""

    mark_filler: bool = True
    mark_mixed: bool = True
    filler_suffix: str = DEFAULT_FILLER_SUFFIX
    mixed_suffix: str = DEFAULT_MIXED_SUFFIX
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = REQUEST_TIMEOUT_SECONDS
    series_delay: float = SERIES_DELAY_SECONDS
    series_timeout: float = SERIES_TIMEOUT_SECONDS
    cache_expiry_hours: float = CACHE_EXPIRY_HOURS

    @property
    def nothing_mode(self) -> bool:
        """True when neither marking is enabled; existing markers get stripped."""
        return not self.mark_filler and not self.mark_mixed

    @property
    def cache_expiry_seconds(self) -> float:
        return self.cache_expiry_hours * 3600


def get_configuration(config_path: str = "config.ini") -> FillerConfig:
    """
    Reads the marker settings from the [anime_filler] section of config.ini.

    Every key is optional. A missing file or section yields the defaults,
    while present-but-invalid values raise ValueError so a broken config is
    never silently replaced by defaults.
    """
    if not os.path.exists(config_path):
        logger.info(
            f"[CONFIG] Configuration file '{config_path}' not found. Using defaults."
        )
        return FillerConfig()

    parser = configparser.ConfigParser(interpolation=None)
    with open(config_path, encoding="utf-8") as f:
        parser.read_string(f.read())

    if not parser.has_section(CONFIG_SECTION):
        logger.info(
            f"[CONFIG] No [{CONFIG_SECTION}] section in '{config_path}'. Using defaults."
        )
        return FillerConfig()

    try:
        config = _load_filler_section(parser)
    except ValueError as e:
        logger.critical(f"[CONFIG] Invalid [{CONFIG_SECTION}] section: {e}")
        raise

    logger.info(
        f"[CONFIG] Loaded: mark_filler={config.mark_filler}, "
        f"mark_mixed={config.mark_mixed}, nothing_mode={config.nothing_mode}"
    )
    return config


def _load_filler_section(parser: configparser.ConfigParser) -> FillerConfig:
    section = CONFIG_SECTION
    defaults = FillerConfig()

    mark_filler = parser.getboolean(section, "mark_filler", fallback=defaults.mark_filler)
    mark_mixed = parser.getboolean(section, "mark_mixed", fallback=defaults.mark_mixed)

    filler_suffix = parser.get(section, "filler_suffix", fallback=defaults.filler_suffix).strip()
    mixed_suffix = parser.get(section, "mixed_suffix", fallback=defaults.mixed_suffix).strip()
    if not filler_suffix or not mixed_suffix:
        raise ValueError("'filler_suffix' and 'mixed_suffix' must not be empty.")
    if filler_suffix == mixed_suffix:
        raise ValueError("'filler_suffix' and 'mixed_suffix' must differ.")

    base_url = parser.get(section, "base_url", fallback=defaults.base_url).strip().rstrip("/")
    if not base_url.startswith(("http://", "https://")):
        raise ValueError(f"'base_url' must be an http(s) URL, got '{base_url}'.")

    request_timeout = _positive_float(parser, "request_timeout", defaults.request_timeout)
    series_timeout = _positive_float(parser, "series_timeout", defaults.series_timeout)
    cache_expiry_hours = _positive_float(
        parser, "cache_expiry_hours", defaults.cache_expiry_hours
    )
    series_delay = parser.getfloat(section, "series_delay", fallback=defaults.series_delay)
    if series_delay < 0:
        raise ValueError("'series_delay' must not be negative.")

    return FillerConfig(
        mark_filler=mark_filler,
        mark_mixed=mark_mixed,
        filler_suffix=filler_suffix,
        mixed_suffix=mixed_suffix,
        base_url=base_url,
        request_timeout=request_timeout,
        series_delay=series_delay,
        series_timeout=series_timeout,
        cache_expiry_hours=cache_expiry_hours,
    )


def _positive_float(
    parser: configparser.ConfigParser, key: str, fallback: float
) -> float:
    value = parser.getfloat(CONFIG_SECTION, key, fallback=fallback)
    if value <= 0:
        raise ValueError(f"'{key}' must be greater than zero.")
    return value
