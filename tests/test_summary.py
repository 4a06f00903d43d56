"""Tests for time-window summaries and exports."""

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from birdcount.models.observation import ObservationRecord
from birdcount.summary import (
    DISTANT_PAST,
    DateRangePreset,
    effective_range,
    export_log_text,
    flatten_records,
    shift_range,
    species_in_range,
)
from conftest import NOW


class TestEffectiveRange:
    """Tests for resolving date range presets."""

    @pytest.mark.parametrize(
        "preset,expected_start",
        [
            (DateRangePreset.LAST_HOUR, NOW - timedelta(hours=1)),
            (DateRangePreset.TODAY, datetime(2024, 5, 1, tzinfo=timezone.utc)),
            (DateRangePreset.LAST_7_DAYS, NOW - timedelta(days=7)),
            (DateRangePreset.ALL, DISTANT_PAST),
        ],
    )
    def test_relative_presets(self, preset, expected_start):
        """Test that relative presets end now."""
        start, end = effective_range(preset, now=NOW)

        assert start == expected_start
        assert end == NOW

    def test_custom_range(self):
        """Test that a custom range is returned as given."""
        start = NOW - timedelta(days=3)

        assert effective_range(DateRangePreset.CUSTOM, now=NOW, start=start, end=NOW) == (
            start,
            NOW,
        )

    def test_custom_range_requires_bounds(self):
        """Test that a custom range without bounds is rejected."""
        with pytest.raises(ValueError):
            effective_range(DateRangePreset.CUSTOM, now=NOW, start=NOW)

    def test_preset_labels(self):
        """Test the labels shown for presets."""
        assert [p.value for p in DateRangePreset] == [
            "Last Hour",
            "Today",
            "7 Days",
            "All",
            "Custom",
        ]

    def test_shift_range(self):
        """Test moving a window by whole days."""
        start = NOW - timedelta(hours=2)

        assert shift_range(start, NOW, -1) == (
            start - timedelta(days=1),
            NOW - timedelta(days=1),
        )


class TestSpeciesInRange:
    """Tests for per-species counts within a window."""

    def test_counts_overlapping_records(self, sample_taxa):
        """Test that only records overlapping the window are counted."""
        records = [
            ObservationRecord(taxon_id="c3", begin=NOW - timedelta(minutes=30), count=2),
            ObservationRecord(taxon_id="c1", begin=NOW - timedelta(hours=3), count=5),
            ObservationRecord(
                taxon_id="c0",
                begin=NOW - timedelta(hours=2),
                end=NOW - timedelta(minutes=20),
                count=1,
            ),
        ]

        summary = species_in_range(records, sample_taxa, NOW - timedelta(hours=1), NOW)

        assert [item.taxon.id for item in summary.species] == ["c0", "c3"]
        assert summary.species_count == 2
        assert summary.total_individuals == 3

    def test_children_and_corrections(self, sample_taxa):
        """Test that children count and negative corrections cancel."""
        root = ObservationRecord(taxon_id="c3", begin=NOW, count=4)
        ObservationRecord.child_of(root, taxon_id="c3", begin=NOW, count=-4)
        ObservationRecord.child_of(root, taxon_id="c1", begin=NOW, count=2)

        summary = species_in_range([root], sample_taxa, DISTANT_PAST, NOW)

        assert [(item.taxon.id, item.count) for item in summary.species] == [("c1", 2)]

    def test_unknown_taxa_are_left_out(self, sample_taxa):
        """Test that records for species outside the catalog are ignored."""
        records = [
            ObservationRecord(taxon_id="nosuch", begin=NOW, count=3),
            ObservationRecord(taxon_id="unk", begin=NOW, count=1),
        ]

        summary = species_in_range(records, sample_taxa, DISTANT_PAST, NOW)

        assert [item.taxon.id for item in summary.species] == ["unk"]
        assert summary.total_individuals == 1

    def test_sorted_by_taxonomic_order(self, sample_taxa):
        """Test that species are listed in taxonomic order."""
        records = [
            ObservationRecord(taxon_id=taxon_id, begin=NOW)
            for taxon_id in ["c3", "c0", "unk", "c1"]
        ]

        summary = species_in_range(records, sample_taxa, DISTANT_PAST, NOW)

        assert [item.taxon.id for item in summary.species] == ["unk", "c1", "c0", "c3"]

    def test_flatten_records(self):
        """Test depth-first flattening of record trees."""
        root = ObservationRecord(taxon_id="c3", begin=NOW)
        child = ObservationRecord.child_of(root, taxon_id="c1")
        other = ObservationRecord(taxon_id="c0", begin=NOW)

        assert [r.id for r in flatten_records([root, other])] == [root.id, child.id, other.id]


class TestRangeSummaryExport:
    """Tests for summary export formats."""

    @pytest.fixture
    def summary(self, sample_taxa):
        records = [
            ObservationRecord(taxon_id="c3", begin=NOW, count=4),
            ObservationRecord(taxon_id="c1", begin=NOW, count=1),
        ]
        return species_in_range(records, sample_taxa, DISTANT_PAST, NOW)

    def test_export_text(self, summary):
        """Test the plain-text export."""
        assert summary.export_text() == (
            "Bird Count Summary\n"
            "Species observed: 2\n"
            "Total individuals: 5\n"
            "\n"
            "Scarce\n"
            "Common"
        )

    def test_export_text_with_counts(self, summary):
        """Test the plain-text export with per-species counts."""
        lines = summary.export_text(include_counts=True).splitlines()

        assert lines[-2:] == ["Scarce\t1", "Common\t4"]

    def test_to_dataframe(self, summary):
        """Test the tabular export."""
        df = summary.to_dataframe()

        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == [
            "taxon_id",
            "common_name",
            "scientific_name",
            "order",
            "count",
        ]
        assert df["taxon_id"].tolist() == ["c1", "c3"]
        assert df["count"].sum() == 5

    def test_empty_dataframe_keeps_columns(self, sample_taxa):
        """Test that an empty summary still has the expected columns."""
        df = species_in_range([], sample_taxa, DISTANT_PAST, NOW).to_dataframe()

        assert df.empty
        assert "common_name" in df.columns


class TestExportLogText:
    """Tests for the observation log export."""

    def test_export_log_text(self, sample_taxa):
        """Test lines are oldest first with recursive totals."""
        later = ObservationRecord(taxon_id="c3", begin=NOW, count=2)
        ObservationRecord.child_of(later, taxon_id="c3", count=3)
        earlier = ObservationRecord(
            taxon_id="nosuch",
            begin=NOW - timedelta(hours=1),
            end=NOW - timedelta(minutes=30),
        )

        text = export_log_text([later, earlier], sample_taxa)

        assert text.splitlines() == [
            "Bird Count Observations",
            "2024-05-01T11:00:00Z - 2024-05-01T11:30:00Z\tUnknown\t×1",
            "2024-05-01T12:00:00Z\tCommon\t×5",
        ]
