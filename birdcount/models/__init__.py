"""Data models for BirdCount."""

from birdcount.models.checklist import Checklist, ChecklistEntry
from birdcount.models.observation import (
    ObservationRecord,
    RecentEntry,
    decode_records,
    encode_records,
)
from birdcount.models.taxon import Taxon, make_abbreviations, name_to_abbreviation

__all__ = [
    "Checklist",
    "ChecklistEntry",
    "ObservationRecord",
    "RecentEntry",
    "Taxon",
    "decode_records",
    "encode_records",
    "make_abbreviations",
    "name_to_abbreviation",
]
