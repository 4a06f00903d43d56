"""Tests for the observation aggregate cache."""

from datetime import timedelta

from birdcount.aggregates import ObservationAggregateCache
from birdcount.models.observation import ObservationRecord, decode_records, encode_records
from conftest import NOW


class TestObservationAggregateCache:
    """Tests for ObservationAggregateCache."""

    def test_empty(self):
        """Test defaults before anything is recorded."""
        cache = ObservationAggregateCache()

        assert cache.count("amecro") == 0
        assert cache.last_observed("amecro") is None
        assert cache.total_individuals == 0
        assert cache.total_species_observed == 0

    def test_counts_include_children(self):
        """Test that a parent of 2 and a child of 3 give 5."""
        parent = ObservationRecord(taxon_id="amecro", begin=NOW, count=2)
        ObservationRecord.child_of(parent, taxon_id="amecro", begin=NOW, count=3)
        decoded = decode_records(encode_records([parent]))

        cache = ObservationAggregateCache()
        cache.rebuild(decoded)

        assert cache.count("amecro") == 5
        assert cache.total_individuals == 5
        assert cache.total_species_observed == 1

    def test_mixed_species_across_levels(self):
        """Test that species sum independently across roots and children."""
        first = ObservationRecord(taxon_id="amecro", begin=NOW, count=2)
        ObservationRecord.child_of(first, taxon_id="amecro", begin=NOW, count=3)
        second = ObservationRecord(taxon_id="norbla", begin=NOW, count=1)
        ObservationRecord.child_of(second, taxon_id="cangoo", begin=NOW, count=4)

        cache = ObservationAggregateCache()
        cache.rebuild([first, second])

        assert cache.count("amecro") == 5
        assert cache.count("norbla") == 1
        assert cache.count("cangoo") == 4
        assert cache.total_individuals == 10
        assert cache.total_species_observed == 3

    def test_negative_children_subtract(self):
        """Test that signed child counts reduce totals without clamping."""
        parent = ObservationRecord(taxon_id="amecro", begin=NOW, count=2)
        ObservationRecord.child_of(parent, taxon_id="amecro", begin=NOW, count=-2)
        other = ObservationRecord(taxon_id="blujay", begin=NOW, count=1)
        ObservationRecord.child_of(other, taxon_id="blujay", begin=NOW, count=-3)

        cache = ObservationAggregateCache()
        cache.rebuild([parent, other])

        assert cache.count("amecro") == 0
        assert cache.count("blujay") == -2
        assert cache.total_individuals == -2
        # amecro nets to zero and no longer counts as observed
        assert cache.total_species_observed == 1

    def test_last_observed_is_latest_end(self):
        """Test that last-observed takes the maximum end over the whole tree."""
        earlier = ObservationRecord(
            taxon_id="amecro", begin=NOW - timedelta(hours=3), end=NOW - timedelta(hours=2)
        )
        later = ObservationRecord(taxon_id="blujay", begin=NOW - timedelta(hours=5))
        ObservationRecord.child_of(later, taxon_id="amecro", begin=NOW, end=NOW + timedelta(minutes=5))

        cache = ObservationAggregateCache()
        cache.rebuild([later, earlier])

        assert cache.last_observed("amecro") == NOW + timedelta(minutes=5)
        assert cache.last_observed("blujay") == NOW - timedelta(hours=5)
        assert cache.snapshot() == {
            "amecro": NOW + timedelta(minutes=5),
            "blujay": NOW - timedelta(hours=5),
        }

    def test_rebuild_replaces_contents(self):
        """Test that each rebuild starts from scratch."""
        cache = ObservationAggregateCache()
        cache.rebuild([ObservationRecord(taxon_id="amecro", begin=NOW, count=4)])
        cache.rebuild([ObservationRecord(taxon_id="blujay", begin=NOW, count=1)])

        assert cache.count("amecro") == 0
        assert cache.last_observed("amecro") is None
        assert cache.count("blujay") == 1

    def test_snapshot_is_a_copy(self):
        """Test that mutating a snapshot does not touch the cache."""
        cache = ObservationAggregateCache()
        cache.rebuild([ObservationRecord(taxon_id="amecro", begin=NOW)])

        snapshot = cache.snapshot()
        snapshot.clear()

        assert cache.last_observed("amecro") == NOW
