"""Counts over time windows and plain-text/tabular exports.

Summaries flatten the record tree and keep every node (parent or child) whose
interval overlaps the window, so a negative child correction cancels its
parent within the same window.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, Field

from birdcount.models.observation import ObservationRecord
from birdcount.models.taxon import Taxon
from birdcount.utils.time import ensure_utc, utcnow

DISTANT_PAST = datetime.min.replace(tzinfo=timezone.utc)


class DateRangePreset(str, Enum):
    """Time windows offered by the summary screens."""

    LAST_HOUR = "Last Hour"
    TODAY = "Today"
    LAST_7_DAYS = "7 Days"
    ALL = "All"
    CUSTOM = "Custom"


def effective_range(
    preset: DateRangePreset,
    now: Optional[datetime] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Resolve a preset to a concrete (start, end) window.

    Relative presets end at ``now``. "Today" starts at midnight in ``now``'s
    timezone.

    Args:
        preset: Window to resolve
        now: Reference time (default now, UTC)
        start: Window start, required for CUSTOM
        end: Window end, required for CUSTOM

    Returns:
        Tuple of (start, end)

    Raises:
        ValueError: If CUSTOM is requested without both bounds
    """
    now = now if now is not None else utcnow()
    if now.tzinfo is None:
        now = ensure_utc(now)

    if preset is DateRangePreset.LAST_HOUR:
        return now - timedelta(hours=1), now
    if preset is DateRangePreset.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0), now
    if preset is DateRangePreset.LAST_7_DAYS:
        return now - timedelta(days=7), now
    if preset is DateRangePreset.ALL:
        return DISTANT_PAST, now

    if start is None or end is None:
        raise ValueError("Custom range requires both start and end")
    return start, end


def shift_range(
    start: datetime, end: datetime, days: int
) -> Tuple[datetime, datetime]:
    """Move a window by whole days; the end never precedes the start."""
    new_start = start + timedelta(days=days)
    new_end = end + timedelta(days=days)
    return new_start, max(new_start, new_end)


def flatten_records(records: Iterable[ObservationRecord]) -> List[ObservationRecord]:
    """Every record and descendant, depth-first."""
    return [record for root in records for record in root.iter_tree()]


class SpeciesCount(BaseModel):
    """Net count of one species within a window."""

    taxon: Taxon = Field(..., description="Catalog entry")
    count: int = Field(..., description="Net individuals in the window", gt=0)


class RangeSummary(BaseModel):
    """Species observed within a time window."""

    start: datetime = Field(..., description="Window start")
    end: datetime = Field(..., description="Window end")
    species: List[SpeciesCount] = Field(
        default_factory=list, description="Species in taxonomic order"
    )

    @property
    def species_count(self) -> int:
        return len(self.species)

    @property
    def total_individuals(self) -> int:
        return sum(item.count for item in self.species)

    def export_text(self, include_counts: bool = False) -> str:
        """Plain-text summary suitable for sharing.

        Args:
            include_counts: Append a tab and the count to each species line

        Returns:
            Newline-separated text
        """
        lines = [
            "Bird Count Summary",
            f"Species observed: {self.species_count}",
            f"Total individuals: {self.total_individuals}",
            "",
        ]
        for item in self.species:
            if include_counts:
                lines.append(f"{item.taxon.common_name}\t{item.count}")
            else:
                lines.append(item.taxon.common_name)
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """Species counts as a DataFrame, one row per species."""
        rows = [
            {
                "taxon_id": item.taxon.id,
                "common_name": item.taxon.common_name,
                "scientific_name": item.taxon.scientific_name,
                "order": item.taxon.order,
                "count": item.count,
            }
            for item in self.species
        ]
        return pd.DataFrame(
            rows,
            columns=["taxon_id", "common_name", "scientific_name", "order", "count"],
        )


def species_in_range(
    records: Iterable[ObservationRecord],
    taxa: Iterable[Taxon],
    start: datetime,
    end: datetime,
) -> RangeSummary:
    """Net counts per species for records overlapping [start, end].

    Only catalog species with a positive net count are listed, in taxonomic
    order. Records for species missing from ``taxa`` are left out.
    """
    start = ensure_utc(start)
    end = ensure_utc(end)

    counts: Dict[str, int] = {}
    for record in flatten_records(records):
        if record.end >= start and record.begin <= end:
            counts[record.taxon_id] = counts.get(record.taxon_id, 0) + record.count

    species = [
        SpeciesCount(taxon=taxon, count=counts[taxon.id])
        for taxon in taxa
        if counts.get(taxon.id, 0) > 0
    ]
    species.sort(key=lambda item: item.taxon.order)
    return RangeSummary(start=start, end=end, species=species)


def _format_instant(value: datetime) -> str:
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def export_log_text(
    records: Iterable[ObservationRecord], taxa: Iterable[Taxon]
) -> str:
    """One line per top-level record, oldest first, with recursive totals."""
    names = {taxon.id: taxon.common_name for taxon in taxa}
    lines = ["Bird Count Observations"]

    for record in sorted(records, key=lambda r: r.begin):
        name = names.get(record.taxon_id, "Unknown")
        if record.begin == record.end:
            when = _format_instant(record.begin)
        else:
            when = f"{_format_instant(record.begin)} - {_format_instant(record.end)}"
        lines.append(f"{when}\t{name}\t×{record.total_count()}")

    return "\n".join(lines)
