"""Observation log: the canonical record tree for a counting session.

The log owns the ordered sequence of top-level observation records. Every
mutation rebuilds the aggregate cache from the full tree and persists the
tree to the key-value store.

Corrections never rewrite history. Top-level records are created with
non-negative counts; totals only go down through child records with negative
counts, which is how :meth:`ObservationLog.set` lowers a species' total.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Union
from uuid import UUID

from pydantic import ValidationError

from birdcount.aggregates import ObservationAggregateCache
from birdcount.constants.taxonomy import OBSERVATIONS_KEY, RECENT_LIMIT
from birdcount.models.observation import (
    ObservationRecord,
    RecentEntry,
    decode_records,
    encode_records,
)
from birdcount.storage import KeyValueStore
from birdcount.utils.time import utcnow

logger = logging.getLogger(__name__)

RecordId = Union[UUID, str]


class ObservationLogError(Exception):
    """Raised when the log is used before it is ready."""

    pass


class LogState(str, Enum):
    """Lifecycle of an observation log."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class ObservationLog:
    """Ordered log of observation records with derived per-species totals.

    Example:
        >>> log = ObservationLog(KeyValueStore())
        >>> record = log.add_observation("amecro", count=2)
        >>> log.count("amecro")
        2
    """

    def __init__(
        self,
        store: KeyValueStore,
        recent_limit: int = RECENT_LIMIT,
        clock: Callable[[], datetime] = utcnow,
        autoload: bool = True,
    ):
        """Initialize the log.

        Args:
            store: Key-value store holding the persisted record tree
            recent_limit: Maximum size of the recently-touched species list
            clock: Source of "now" (aware UTC datetimes)
            autoload: Load persisted records immediately (default True)
        """
        self.store = store
        self.recent_limit = recent_limit
        self.clock = clock
        self.state = LogState.UNINITIALIZED
        self.cache = ObservationAggregateCache()

        self._observations: List[ObservationRecord] = []
        self._index: Dict[UUID, ObservationRecord] = {}
        self._recent: List[RecentEntry] = []

        if autoload:
            self.load()

    # Lifecycle

    def load(self) -> None:
        """Read the persisted record tree once.

        A missing entry or one that fails to decode yields an empty log.
        """
        if self.state is LogState.READY:
            return

        records: List[ObservationRecord] = []
        raw = self.store.get(OBSERVATIONS_KEY)
        if isinstance(raw, str):
            try:
                records = decode_records(raw)
            except ValidationError as e:
                logger.warning(f"Discarding unreadable observation records: {e}")
        elif raw is not None:
            logger.warning(
                f"Discarding observation records stored as {type(raw).__name__}"
            )

        self._observations = records
        self.state = LogState.READY
        self._rebuild()
        logger.info(f"Loaded {len(records)} observation records")

    def _require_ready(self) -> None:
        if self.state is not LogState.READY:
            raise ObservationLogError("Observation log has not been loaded")

    def _rebuild(self) -> None:
        self.cache.rebuild(self._observations)
        self._index = {record.id: record for record in self.iter_records()}

    def _persist(self) -> None:
        try:
            payload = encode_records(self._observations)
        except ValueError as e:
            logger.warning(f"Failed to encode observation records: {e}")
            return
        self.store.set(OBSERVATIONS_KEY, payload)

    def _changed(self) -> None:
        self._rebuild()
        self._persist()

    # Reads

    @property
    def observations(self) -> List[ObservationRecord]:
        """Top-level records in insertion order."""
        return list(self._observations)

    @property
    def recent(self) -> List[RecentEntry]:
        """Recently touched species, most recent first."""
        return list(self._recent)

    def iter_records(self) -> Iterator[ObservationRecord]:
        """Every record in the log, depth-first."""
        for root in self._observations:
            yield from root.iter_tree()

    def find_record(self, record_id: RecordId) -> Optional[ObservationRecord]:
        """Find a record at any depth by id."""
        key = _coerce_id(record_id)
        if key is None:
            return None
        return self._index.get(key)

    def count(self, taxon_id: str) -> int:
        return self.cache.count(taxon_id)

    def last_observed(self, taxon_id: str) -> Optional[datetime]:
        return self.cache.last_observed(taxon_id)

    def last_observed_snapshot(self) -> Dict[str, datetime]:
        return self.cache.snapshot()

    @property
    def total_individuals(self) -> int:
        return self.cache.total_individuals

    @property
    def total_species_observed(self) -> int:
        return self.cache.total_species_observed

    # Mutations

    def add_observation(
        self,
        taxon_id: str,
        begin: Optional[datetime] = None,
        end: Optional[datetime] = None,
        count: int = 1,
    ) -> ObservationRecord:
        """Append a top-level record.

        Args:
            taxon_id: Species code (not checked against the catalog)
            begin: Start time (default now)
            end: End time (default ``begin``)
            count: Number of individuals, clamped to at least 0

        Returns:
            The new record
        """
        self._require_ready()
        record = ObservationRecord(
            taxon_id=taxon_id,
            begin=begin if begin is not None else self.clock(),
            end=end,
            count=max(0, count),
        )
        self._observations.append(record)
        self._changed()
        self._touch_recent(taxon_id)
        return record

    def increment(self, taxon_id: str, by: int = 1) -> Optional[ObservationRecord]:
        """Record ``by`` more individuals now. Non-positive ``by`` is ignored."""
        if by <= 0:
            return None
        return self.add_observation(taxon_id, count=by)

    def add_child_observation(
        self,
        parent_id: RecordId,
        taxon_id: str,
        begin: Optional[datetime] = None,
        end: Optional[datetime] = None,
        count: int = 1,
    ) -> bool:
        """Attach a child record under the record ``parent_id``, at any depth.

        The child's count is signed; a negative count reduces totals.

        Returns:
            True if the parent was found and the child attached
        """
        self._require_ready()
        parent = self.find_record(parent_id)
        if parent is None:
            logger.debug(f"No parent record {parent_id} for {taxon_id}")
            return False

        ObservationRecord.child_of(
            parent,
            taxon_id=taxon_id,
            begin=begin if begin is not None else self.clock(),
            end=end,
            count=count,
        )
        # The top-level sequence is unchanged, so rebuild and persist here
        self._changed()
        self._touch_recent(taxon_id)
        return True

    def set(self, taxon_id: str, value: int) -> None:
        """Adjust the total for ``taxon_id`` to exactly ``value`` (at least 0).

        Raising the total adds a new top-level record. Lowering it attaches a
        negative child record to the newest record of that species, sharing
        its time interval so range summaries net out in the same window.
        """
        self._require_ready()
        value = max(0, value)
        current = self.count(taxon_id)

        if value > current:
            self.increment(taxon_id, by=value - current)
        elif value < current:
            target = self._newest_record_for(taxon_id)
            if target is not None:
                ObservationRecord.child_of(
                    target,
                    taxon_id=taxon_id,
                    begin=target.begin,
                    end=target.end,
                    count=value - current,
                )
                self._changed()
            else:
                logger.warning(f"No record to correct for {taxon_id}")

        self._touch_recent(taxon_id)

    def reset(self, taxon_id: str) -> None:
        self.set(taxon_id, 0)

    def clear_all(self) -> None:
        """Remove every record and the recent list."""
        self._require_ready()
        self._observations = []
        self._recent = []
        self._changed()

    # Recent handling

    def _newest_record_for(self, taxon_id: str) -> Optional[ObservationRecord]:
        newest = None
        for record in self.iter_records():
            if record.taxon_id != taxon_id:
                continue
            if newest is None or record.end >= newest.end:
                newest = record
        return newest

    def _touch_recent(self, taxon_id: str) -> None:
        now = self.clock()
        entries = [entry for entry in self._recent if entry.taxon_id != taxon_id]
        entries.insert(0, RecentEntry(taxon_id=taxon_id, last_updated=now))
        entries.sort(key=lambda entry: entry.last_updated, reverse=True)
        self._recent = entries[: self.recent_limit]


def _coerce_id(record_id: RecordId) -> Optional[UUID]:
    if isinstance(record_id, UUID):
        return record_id
    try:
        return UUID(str(record_id))
    except ValueError:
        return None
