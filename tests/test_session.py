"""Tests for the session facade."""

from datetime import timedelta

import pytest

from birdcount.config import BirdCountConfig
from birdcount.session import BirdCountSession
from birdcount.summary import DateRangePreset
from birdcount.utils.time import utcnow


@pytest.fixture
def config(data_dir, tmp_path):
    return BirdCountConfig(data_dir=data_dir, store_path=tmp_path / "state" / "store.json")


class TestBirdCountSession:
    """Tests for BirdCountSession."""

    @pytest.mark.asyncio
    async def test_start_loads_catalog(self, config):
        """Test that start loads the taxonomy."""
        session = BirdCountSession(config)

        await session.start()

        assert session.catalog.loaded is True
        assert session.catalog.active_checklist_id is None
        assert [t.id for t in session.search("")][:1] == ["cangoo"]

    @pytest.mark.asyncio
    async def test_start_applies_saved_checklist(self, config):
        """Test that a persisted checklist selection is applied at start."""
        first = BirdCountSession(config)
        await first.start()
        task = first.select_checklist("region-B")
        await task

        second = BirdCountSession(config)
        await second.start()

        assert second.settings.selected_checklist_id == "region-B"
        assert second.catalog.get("bkcchi").commonness == 0

    @pytest.mark.asyncio
    async def test_start_with_missing_taxonomy(self, tmp_path):
        """Test that a missing taxonomy leaves the session usable but empty."""
        session = BirdCountSession(BirdCountConfig(data_dir=tmp_path / "nothing"))

        await session.start()

        assert session.catalog.error == "Missing taxonomy resource"
        assert session.search("") == []

    @pytest.mark.asyncio
    async def test_bounds_apply_only_with_checklist(self, config):
        """Test that commonness bounds filter only once a checklist is selected."""
        session = BirdCountSession(config)
        await session.start()
        session.settings.min_commonness = 2
        session.settings.max_commonness = 3

        assert len(session.search("")) == 4

        await session.select_checklist("region-A")

        # blujay (1) is filtered; unranked taxa stay
        assert [t.id for t in session.search("")] == ["amecro", "cangoo", "bkcchi"]

        assert session.select_checklist(None) is None
        assert session.settings.selected_checklist_id is None
        assert session.catalog.get("amecro").commonness is None
        assert len(session.search("")) == 4

    @pytest.mark.asyncio
    async def test_search_uses_log_sightings(self, config):
        """Test that species counted just now sink to the bottom."""
        session = BirdCountSession(config)
        await session.start()

        session.log.increment("cangoo")

        assert [t.id for t in session.search("")][-1] == "cangoo"

    @pytest.mark.asyncio
    async def test_summary_and_export(self, config):
        """Test summaries and the log export through the session."""
        session = BirdCountSession(config)
        await session.start()
        now = utcnow()
        session.log.add_observation("blujay", begin=now - timedelta(days=2), count=2)
        session.log.add_observation("amecro", begin=now - timedelta(minutes=5), count=3)

        last_hour = session.summary(DateRangePreset.LAST_HOUR, now=now)
        everything = session.summary(now=now)

        assert [item.taxon.id for item in last_hour.species] == ["amecro"]
        assert [item.taxon.id for item in everything.species] == ["blujay", "amecro"]
        assert everything.total_individuals == 5

        lines = session.export_log().splitlines()
        assert lines[0] == "Bird Count Observations"
        assert lines[1].endswith("\tBlue Jay\t×2")

    def test_recent_window(self, config):
        """Test the recent window comes from config."""
        config.recent_window_hours = 6

        assert BirdCountSession(config).recent_window == timedelta(hours=6)
