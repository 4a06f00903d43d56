"""Derived per-species aggregates over the observation record tree."""

from datetime import datetime
from typing import Dict, Iterable, Optional

from birdcount.models.observation import ObservationRecord


class ObservationAggregateCache:
    """Per-species totals and last-observed times rebuilt from the record tree.

    The cache holds only derived data. The owning log calls :meth:`rebuild`
    with the full top-level sequence after every mutation; there is no
    incremental path, so each rebuild costs O(total records).
    """

    def __init__(self):
        self.counts_by_taxon: Dict[str, int] = {}
        self.last_observed_at: Dict[str, datetime] = {}

    def rebuild(self, records: Iterable[ObservationRecord]) -> None:
        """Recompute both maps from ``records`` and all their descendants.

        Counts are summed signed: negative child counts reduce the total.
        """
        counts: Dict[str, int] = {}
        last_observed: Dict[str, datetime] = {}

        for root in records:
            for record in root.iter_tree():
                counts[record.taxon_id] = counts.get(record.taxon_id, 0) + record.count
                previous = last_observed.get(record.taxon_id)
                if previous is None or record.end > previous:
                    last_observed[record.taxon_id] = record.end

        self.counts_by_taxon = counts
        self.last_observed_at = last_observed

    def count(self, taxon_id: str) -> int:
        return self.counts_by_taxon.get(taxon_id, 0)

    def last_observed(self, taxon_id: str) -> Optional[datetime]:
        return self.last_observed_at.get(taxon_id)

    @property
    def total_individuals(self) -> int:
        return sum(self.counts_by_taxon.values())

    @property
    def total_species_observed(self) -> int:
        """Species with a nonzero net count."""
        return sum(1 for total in self.counts_by_taxon.values() if total != 0)

    def snapshot(self) -> Dict[str, datetime]:
        """Read-only copy of last-observed times for search ranking."""
        return dict(self.last_observed_at)
