"""Route -> toll region classification"""
import re
from typing import Iterable, List, Optional

from shipcalc.core.enums import TollRegion

# state name + postal code keywords per region, in apportionment order
REGION_KEYWORDS = {
    TollRegion.NORTHEAST: (
        "new jersey", "nj", "new york", "ny", "pennsylvania", "pa",
    ),
    TollRegion.NEW_ENGLAND: (
        "massachusetts", "ma", "connecticut", "ct", "rhode island", "ri",
        "new hampshire", "nh", "vermont", "vt", "maine", "me",
    ),
    TollRegion.MID_ATLANTIC: (
        "maryland", "md", "delaware", "de", "virginia", "va",
        "district of columbia", "dc",
    ),
    TollRegion.GREAT_LAKES_MIDWEST: (
        "ohio", "oh", "indiana", "in", "illinois", "il", "michigan", "mi",
        "wisconsin", "wi", "minnesota", "mn",
    ),
    TollRegion.SOUTHEAST: (
        "florida", "fl", "georgia", "ga", "south carolina", "sc",
        "north carolina", "nc",
    ),
    TollRegion.TEXAS_SOUTHERN_PLAINS: (
        "texas", "tx", "arkansas", "ar", "oklahoma", "ok",
    ),
    TollRegion.MOUNTAIN_WEST: (
        "colorado", "co", "utah", "ut", "arizona", "az", "new mexico", "nm",
    ),
    TollRegion.GREAT_PLAINS: (
        "missouri", "mo", "kansas", "ks", "nebraska", "ne",
        "south dakota", "sd", "north dakota", "nd",
    ),
    TollRegion.PACIFIC_COAST: (
        "california", "ca", "oregon", "or", "washington", "wa",
    ),
    TollRegion.LOUISIANA: (
        "louisiana", "la",
    ),
}

_REGION_PATTERNS = {
    region: re.compile(r"\b(" + "|".join(re.escape(k) for k in keywords) + r")\b")
    for region, keywords in REGION_KEYWORDS.items()
}

_WHITESPACE = re.compile(r"\s+")


def _normalize(value: str) -> str:
    return _WHITESPACE.sub(" ", value.strip().lower())


def classify_states(states: Iterable[str]) -> List[TollRegion]:
    """Regions touched by a list of state codes or state names."""
    normalized = {_normalize(s) for s in states if s and s.strip()}
    return [
        region for region, keywords in REGION_KEYWORDS.items()
        if normalized.intersection(keywords)
    ]


def classify_text(route_text: str) -> List[TollRegion]:
    """Regions mentioned anywhere in free-text route steps.

    Whole-word matching on both full names and postal codes, so short codes
    such as "in" or "or" match inside ordinary instructions too.
    """
    text = _normalize(route_text)
    return [region for region, pattern in _REGION_PATTERNS.items() if pattern.search(text)]


def classify_route(
    route_states: Optional[Iterable[str]] = None,
    route_text: Optional[str] = None,
) -> Optional[List[TollRegion]]:
    """Union of both representations in enumeration order.

    Returns None when no route data was supplied at all, which callers treat
    as "route unavailable" rather than "no toll regions".
    """
    states = list(route_states or [])
    if not states and not (route_text and route_text.strip()):
        return None

    matched = set(classify_states(states))
    if route_text:
        matched.update(classify_text(route_text))
    return [region for region in TollRegion if region in matched]
