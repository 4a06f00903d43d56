"""Pytest configuration and shared fixtures.

To run async tests, ensure pytest-asyncio is installed:
    pip install pytest-asyncio

Or use the dev dependencies:
    pip install -e ".[dev]"

Run tests:
    pytest tests/
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from birdcount.models.taxon import Taxon
from birdcount.observation_log import ObservationLog
from birdcount.sources.bundled import BundledResourceSource
from birdcount.storage import KeyValueStore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TickingClock:
    """Clock that moves forward one second per call."""

    def __init__(self, start: datetime = NOW):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


class CountingSource(BundledResourceSource):
    """Bundled source that records every resource it reads."""

    def __init__(self, directory):
        super().__init__(directory)
        self.fetched = []

    async def fetch_json(self, name):
        self.fetched.append(name)
        return await super().fetch_json(name)


@pytest.fixture(scope="session")
def event_loop_policy():
    """Set event loop policy for async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture
def store():
    """In-memory key-value store."""
    return KeyValueStore()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def log(store, clock):
    """Loaded observation log on an in-memory store."""
    return ObservationLog(store, clock=clock)


@pytest.fixture
def sample_taxa():
    """Small taxonomy with commonness set on some entries."""
    return [
        Taxon(id="c0", common_name="Rare", scientific_name="Rarus", order=2, commonness=0),
        Taxon(id="c3", common_name="Common", scientific_name="Communis", order=3, commonness=3),
        Taxon(id="c1", common_name="Scarce", scientific_name="Scarsus", order=1, commonness=1),
        Taxon(id="unk", common_name="Unknown", scientific_name="Incertus", order=0),
    ]


@pytest.fixture
def data_dir(tmp_path):
    """Resource directory with a taxonomy and two checklists."""
    taxonomy = [
        {"id": "amecro", "commonName": "American Crow", "scientificName": "Corvus brachyrhynchos", "order": 30, "rank": "species"},
        {"id": "blujay", "commonName": "Blue Jay", "scientificName": "Cyanocitta cristata", "order": 20, "rank": "species"},
        {"id": "bkcchi", "commonName": "Black-capped Chickadee", "scientificName": "Poecile atricapillus", "order": 40, "rank": "species"},
        {"id": "cangoo", "commonName": "Canada Goose", "scientificName": "Branta canadensis", "order": 10, "rank": "species"},
    ]
    (tmp_path / "taxonomy_min.json").write_text(json.dumps(taxonomy))

    checklists = tmp_path / "checklists"
    checklists.mkdir()
    (checklists / "region-A.json").write_text(
        json.dumps(
            {
                "species": {
                    "amecro": {"commonness": 3},
                    "blujay": {"commonness": 1},
                    "cangoo": {},
                }
            }
        )
    )
    (checklists / "region-B.json").write_text(
        json.dumps(
            {
                "species": {
                    "blujay": {"commonness": 2},
                    "bkcchi": {"commonness": 0},
                }
            }
        )
    )
    (checklists / "broken.json").write_text("{not json")
    return tmp_path


@pytest.fixture
def counting_source(data_dir):
    return CountingSource(data_dir)
