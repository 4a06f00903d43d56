"""BirdCount

A Python library for tallying bird sightings during a counting session.

This library provides:
- A taxon catalog with regional checklist commonness overlays
- An observation log of nested, signed observation records
- Derived per-species totals and last-seen times
- Recency-aware taxon search and ranking
- Counts over time windows with text and tabular export
- Persisted settings and a local key-value store
- Configuration management
"""

__version__ = "0.1.0"

# Configuration
from birdcount.config import BirdCountConfig

# Catalog and search
from birdcount.catalog import ChecklistCache, TaxonCatalog
from birdcount.search import search

# Observation log
from birdcount.aggregates import ObservationAggregateCache
from birdcount.observation_log import LogState, ObservationLog, ObservationLogError

# Data models
from birdcount.models.checklist import Checklist
from birdcount.models.observation import ObservationRecord, RecentEntry
from birdcount.models.taxon import Taxon

# Resource sources
from birdcount.sources.base import DataSourceError, ResourceNotFoundError
from birdcount.sources.bundled import BundledResourceSource
from birdcount.sources.remote import HTTPResourceSource

# Session, settings and storage
from birdcount.session import BirdCountSession
from birdcount.settings import Settings
from birdcount.storage import KeyValueStore

# Summaries
from birdcount.summary import DateRangePreset, RangeSummary, species_in_range

__all__ = [
    # Version
    "__version__",
    # Configuration
    "BirdCountConfig",
    # Catalog and search
    "ChecklistCache",
    "TaxonCatalog",
    "search",
    # Observation log
    "LogState",
    "ObservationAggregateCache",
    "ObservationLog",
    "ObservationLogError",
    # Data models
    "Checklist",
    "ObservationRecord",
    "RecentEntry",
    "Taxon",
    # Resource sources
    "BundledResourceSource",
    "DataSourceError",
    "HTTPResourceSource",
    "ResourceNotFoundError",
    # Session, settings and storage
    "BirdCountSession",
    "KeyValueStore",
    "Settings",
    # Summaries
    "DateRangePreset",
    "RangeSummary",
    "species_in_range",
]
