"""Session facade wiring settings, catalog and observation log together."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from birdcount.catalog import TaxonCatalog
from birdcount.config import BirdCountConfig, build_source
from birdcount.models.taxon import Taxon
from birdcount.observation_log import ObservationLog
from birdcount.search import search as rank_taxa
from birdcount.settings import Settings
from birdcount.storage import KeyValueStore
from birdcount.summary import (
    DateRangePreset,
    RangeSummary,
    effective_range,
    export_log_text,
    species_in_range,
)
from birdcount.utils.time import utcnow

logger = logging.getLogger(__name__)


class BirdCountSession:
    """Everything a front end needs for one counting session.

    Example:
        ```python
        session = BirdCountSession(BirdCountConfig(store_path=Path("tally.json")))
        await session.start()
        session.log.increment("amecro")
        for taxon in session.search("am")[:10]:
            print(taxon.common_name, session.log.count(taxon.id))
        ```
    """

    def __init__(
        self,
        config: Optional[BirdCountConfig] = None,
        store: Optional[KeyValueStore] = None,
        catalog: Optional[TaxonCatalog] = None,
    ):
        """Initialize session.

        Args:
            config: Session configuration (default: BirdCountConfig())
            store: Key-value store (default: one at ``config.store_path``)
            catalog: Taxon catalog (default: one reading from ``config``)
        """
        self.config = config if config is not None else BirdCountConfig()
        self.store = store if store is not None else KeyValueStore(self.config.store_path)
        self.settings = Settings(self.store)
        self.catalog = catalog if catalog is not None else TaxonCatalog(
            build_source(self.config),
            taxonomy_resource=self.config.taxonomy_resource,
            checklist_dir=self.config.checklist_dir,
        )
        self.log = ObservationLog(self.store, recent_limit=self.config.recent_limit)

    @property
    def recent_window(self) -> timedelta:
        return timedelta(hours=self.config.recent_window_hours)

    async def start(self) -> None:
        """Load the taxonomy and apply the selected checklist."""
        await self.catalog.load()
        if self.catalog.error:
            logger.error(f"Taxonomy unavailable: {self.catalog.error}")
            return

        if self.settings.selected_checklist_id:
            task = self.catalog.load_checklist(self.settings.selected_checklist_id)
            if task is not None:
                await task

    def select_checklist(self, region_id: Optional[str]):
        """Change the selected checklist; None deselects it.

        Returns:
            The pending checklist load task, if one was started
        """
        self.settings.selected_checklist_id = region_id
        if region_id is None:
            self.catalog.clear_checklist()
            return None
        return self.catalog.load_checklist(region_id)

    def search(self, text: str, now: Optional[datetime] = None) -> List[Taxon]:
        """Search with the settings' commonness bounds and the log's sightings."""
        min_commonness, max_commonness = self.settings.commonness_bounds()
        return rank_taxa(
            self.catalog.species,
            text,
            min_commonness=min_commonness,
            max_commonness=max_commonness,
            last_observed=self.log.last_observed_snapshot(),
            now=now,
            recent_window=self.recent_window,
        )

    def summary(
        self,
        preset: DateRangePreset = DateRangePreset.ALL,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> RangeSummary:
        """Species counts for a preset or custom window."""
        window_start, window_end = effective_range(
            preset, now=now if now is not None else utcnow(), start=start, end=end
        )
        return species_in_range(
            self.log.observations, self.catalog.species, window_start, window_end
        )

    def export_log(self) -> str:
        return export_log_text(self.log.observations, self.catalog.species)
