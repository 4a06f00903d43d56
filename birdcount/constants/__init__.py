"""Constants for BirdCount."""

from birdcount.constants.taxonomy import (
    CHECKLIST_DIR,
    COMMONNESS_LABELS,
    COMMONNESS_MAX,
    COMMONNESS_MIN,
    OBSERVATIONS_KEY,
    RECENT_LIMIT,
    RECENT_WINDOW,
    TAXONOMY_RESOURCE,
)

__all__ = [
    "CHECKLIST_DIR",
    "COMMONNESS_LABELS",
    "COMMONNESS_MAX",
    "COMMONNESS_MIN",
    "OBSERVATIONS_KEY",
    "RECENT_LIMIT",
    "RECENT_WINDOW",
    "TAXONOMY_RESOURCE",
]
