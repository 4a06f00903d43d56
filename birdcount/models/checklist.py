"""Pydantic models for regional checklist overlays."""

import logging
from typing import Dict, Optional

from pydantic import BaseModel, Field

from birdcount.models.taxon import is_valid_commonness

logger = logging.getLogger(__name__)


class ChecklistEntry(BaseModel):
    """Per-species entry of a checklist file."""

    commonness: Optional[int] = Field(
        None, description="Regional commonness, 0 rare .. 3 common"
    )


class Checklist(BaseModel):
    """A regional checklist: taxon id -> commonness overlay.

    Only ``species`` is read; other keys in the file are ignored.
    """

    species: Dict[str, ChecklistEntry] = Field(
        ..., description="Entries keyed by taxon id"
    )

    def commonness_map(self) -> Dict[str, int]:
        """Taxon id -> commonness for entries carrying a usable value.

        Entries without commonness are skipped. Values outside 0..3 are
        skipped with a warning.
        """
        overlay = {}
        for taxon_id, entry in self.species.items():
            if entry.commonness is None:
                continue
            if not is_valid_commonness(entry.commonness):
                logger.warning(
                    f"Ignoring commonness {entry.commonness} for {taxon_id}"
                )
                continue
            overlay[taxon_id] = entry.commonness
        return overlay
