"""Country-name alias folding shared by geocoders and the cache cleanup pass."""

from __future__ import annotations

from typing import Dict

_COUNTRY_ALIASES: Dict[str, str] = {
    "usa": "United States",
    "us": "United States",
    "u.s.": "United States",
    "u.s.a.": "United States",
    "united states of america": "United States",
    "uk": "United Kingdom",
    "u.k.": "United Kingdom",
    "britain": "United Kingdom",
    "great britain": "United Kingdom",
    "england": "United Kingdom",
    "scotland": "United Kingdom",
    "wales": "United Kingdom",
    "deutschland": "Germany",
    "nederland": "Netherlands",
    "holland": "Netherlands",
}


def normalize_country(name: str) -> str:
    """Fold known aliases onto one canonical country name.

    Matching ignores case and surrounding whitespace. Unknown names come back
    unchanged, so the function is idempotent.
    """

    key = name.strip().lower()
    return _COUNTRY_ALIASES.get(key, name)


__all__ = ["normalize_country"]
