"""Taxon search and display ranking.

Ranking surfaces rare and unseen species first as an identification aid,
while species logged within the last day sink to the bottom so they are not
tapped again by mistake during active counting.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from birdcount.constants.taxonomy import RECENT_WINDOW
from birdcount.models.taxon import Taxon
from birdcount.utils.time import ensure_utc, utcnow

# Absent commonness sorts after every ranked value
UNRANKED = 1_000_000


def passes_commonness(
    taxon: Taxon,
    min_commonness: Optional[int],
    max_commonness: Optional[int],
) -> bool:
    """Commonness window filter. Unranked taxa always pass.

    The window only applies when both bounds are given.
    """
    if min_commonness is None or max_commonness is None:
        return True
    if taxon.commonness is None:
        return True
    return min_commonness <= taxon.commonness <= max_commonness


def ranking_key(
    taxon: Taxon,
    last_observed: Mapping[str, datetime],
    cutoff: datetime,
) -> Tuple:
    """Sort key implementing the display order.

    1. Species seen at or after ``cutoff`` go last, ordered older to newer.
    2. Others: commonness ascending (unranked last), never seen before seen,
       older sightings first, then taxonomic order, then common name.
    """
    seen = last_observed.get(taxon.id)
    seen_ts = ensure_utc(seen).timestamp() if seen is not None else 0.0
    is_recent = seen is not None and ensure_utc(seen) >= cutoff
    commonness = taxon.commonness if taxon.commonness is not None else UNRANKED

    return (
        1 if is_recent else 0,
        seen_ts if is_recent else 0.0,
        commonness,
        0 if seen is None else 1,
        seen_ts,
        taxon.order,
        taxon.common_name,
    )


def search(
    taxa: Iterable[Taxon],
    text: str,
    min_commonness: Optional[int] = None,
    max_commonness: Optional[int] = None,
    last_observed: Optional[Mapping[str, datetime]] = None,
    now: Optional[datetime] = None,
    recent_window: timedelta = RECENT_WINDOW,
) -> List[Taxon]:
    """Filter ``taxa`` by text and commonness, ranked for display.

    Args:
        taxa: Catalog entries to search
        text: Free text; matched against abbreviation prefixes and name substrings
        min_commonness: Lower commonness bound (used only with ``max_commonness``)
        max_commonness: Upper commonness bound (used only with ``min_commonness``)
        last_observed: Snapshot of taxon id -> last observed time
        now: Reference time for the recent bucket (default now)
        recent_window: How far back counts as recent (default 24 hours)

    Returns:
        Matching taxa in display order

    Example:
        >>> results = search(catalog.species, "crow", last_observed=log.last_observed_snapshot())
    """
    snapshot: Dict[str, datetime] = dict(last_observed or {})
    cutoff = ensure_utc(now if now is not None else utcnow()) - recent_window

    filtered = [
        taxon
        for taxon in taxa
        if passes_commonness(taxon, min_commonness, max_commonness)
        and taxon.matches(text)
    ]
    return sorted(filtered, key=lambda taxon: ranking_key(taxon, snapshot, cutoff))
