"""Pydantic models for taxonomy catalog entries."""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from birdcount.constants.taxonomy import (
    COMMONNESS_LABELS,
    COMMONNESS_MAX,
    COMMONNESS_MIN,
    DEFAULT_ORDER,
    DEFAULT_RANK,
    MISSING_COMMON_NAME,
    MISSING_ID,
    MISSING_SCIENTIFIC_NAME,
)

_DISALLOWED_CHARS = re.compile(r"[^-A-Za-z /]")
_NON_LETTERS = re.compile(r"[^A-Za-z]+")


def name_to_abbreviation(name: str) -> str:
    """Build the initial-letter abbreviation of a name.

    Args:
        name: Common or scientific name

    Returns:
        Uppercase initials, or an empty string when no letters remain

    Examples:
        >>> name_to_abbreviation("American Crow")
        'AC'
        >>> name_to_abbreviation("Black-capped Chickadee")
        'BCC'
    """
    cleaned = _DISALLOWED_CHARS.sub("", name.upper())
    cleaned = _NON_LETTERS.sub(" ", cleaned)
    return "".join(word[0] for word in cleaned.split())


def make_abbreviations(common_name: str, scientific_name: str) -> List[str]:
    """Abbreviations for a taxon's common and scientific names (empties dropped)."""
    candidates = [
        name_to_abbreviation(common_name),
        name_to_abbreviation(scientific_name),
    ]
    return [abbreviation for abbreviation in candidates if abbreviation]


def is_valid_commonness(value: Any) -> bool:
    """Check a raw value is an integer commonness on the 0..3 scale."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return COMMONNESS_MIN <= value <= COMMONNESS_MAX


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


class Taxon(BaseModel):
    """A catalog entry identifying one species with display names and order.

    Entries decode leniently: a missing or malformed field gets a placeholder
    or default value instead of failing the whole catalog.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "amecro",
                "commonName": "American Crow",
                "scientificName": "Corvus brachyrhynchos",
                "order": 21112,
                "rank": "species",
                "commonness": 3,
            }
        },
    )

    id: str = Field(MISSING_ID, description="Species code, e.g. 'amecro'")
    common_name: str = Field(
        MISSING_COMMON_NAME, alias="commonName", description="English name"
    )
    scientific_name: str = Field(
        MISSING_SCIENTIFIC_NAME, alias="scientificName", description="Binomial name"
    )
    order: int = Field(DEFAULT_ORDER, description="Taxonomic sort key")
    rank: str = Field(DEFAULT_RANK, description="Taxonomic rank")
    abbreviations: List[str] = Field(
        default_factory=list, description="Initials used for prefix search"
    )
    commonness: Optional[int] = Field(
        None,
        ge=COMMONNESS_MIN,
        le=COMMONNESS_MAX,
        description="Regional commonness, 0 rare .. 3 common (None = unranked)",
    )

    @model_validator(mode="before")
    @classmethod
    def default_malformed_fields(cls, data: Any) -> Any:
        """Replace missing or wrongly typed fields with defaults."""
        if not isinstance(data, dict):
            return data

        def text(value: Any, default: str) -> str:
            return value if isinstance(value, str) else default

        order = _pick(data, "order")
        if isinstance(order, bool) or not isinstance(order, int):
            order = DEFAULT_ORDER

        commonness = _pick(data, "commonness")
        if not is_valid_commonness(commonness):
            commonness = None

        return {
            "id": text(_pick(data, "id"), MISSING_ID),
            "commonName": text(
                _pick(data, "commonName", "common_name"), MISSING_COMMON_NAME
            ),
            "scientificName": text(
                _pick(data, "scientificName", "scientific_name"),
                MISSING_SCIENTIFIC_NAME,
            ),
            "order": order,
            "rank": text(_pick(data, "rank"), DEFAULT_RANK),
            # Always derived from the names after decode
            "abbreviations": [],
            "commonness": commonness,
        }

    @property
    def commonness_label(self) -> Optional[str]:
        """Legend label for the commonness value, e.g. "Scarce"."""
        if self.commonness is None:
            return None
        return COMMONNESS_LABELS[self.commonness]

    @model_validator(mode="after")
    def compute_abbreviations(self) -> "Taxon":
        """Derive abbreviations once, right after decode."""
        self.abbreviations = make_abbreviations(
            self.common_name, self.scientific_name
        )
        return self

    def matches(self, text: str) -> bool:
        """Case-insensitive text match used by search.

        A taxon matches when one of its abbreviations starts with ``text`` or
        either name contains it. Blank text matches everything.
        """
        needle = text.strip().lower()
        if not needle:
            return True
        if any(a.lower().startswith(needle) for a in self.abbreviations):
            return True
        return (
            needle in self.common_name.lower()
            or needle in self.scientific_name.lower()
        )
