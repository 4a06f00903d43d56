"""Constants for the taxonomy catalog, checklists and the observation log."""

from datetime import timedelta

# Bundled resource names
TAXONOMY_RESOURCE = "taxonomy_min.json"
CHECKLIST_DIR = "checklists"

# Placeholders used when a taxonomy entry is missing a field
MISSING_ID = "<missing-id>"
MISSING_COMMON_NAME = "<missing-commonName>"
MISSING_SCIENTIFIC_NAME = "<missing-scientificName>"
DEFAULT_RANK = "species"
DEFAULT_ORDER = 0

# Commonness scale: 0 rare .. 3 common, None = unranked
COMMONNESS_MIN = 0
COMMONNESS_MAX = 3
COMMONNESS_LABELS = {
    0: "Rare",
    1: "Scarce",
    2: "Uncommon",
    3: "Common",
}

# Observation log
OBSERVATIONS_KEY = "ObservationRecords"
RECENT_LIMIT = 20

# Species observed within this window sink to the bottom of search results
RECENT_WINDOW = timedelta(hours=24)

# Settings persistence
SETTINGS_KEY_PREFIX = "Settings_"
