"""Taxon catalog: the loaded taxonomy plus regional checklist overlays.

The catalog loads the taxonomy resource once, keeps it sorted by taxonomic
order, and overwrites each taxon's commonness from the active regional
checklist. Checklists are decoded in the background and cached per region
for the lifetime of the catalog.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Set

from pydantic import ValidationError

from birdcount.constants.taxonomy import CHECKLIST_DIR, TAXONOMY_RESOURCE
from birdcount.models.checklist import Checklist
from birdcount.models.taxon import Taxon
from birdcount.search import search as rank_taxa
from birdcount.sources.base import DataSourceError, ResourceNotFoundError, ResourceSource
from birdcount.sources.bundled import BundledResourceSource

logger = logging.getLogger(__name__)


def normalize_checklist_id(raw_id: str) -> str:
    """Strip a trailing ``.json`` so file names and ids select the same region."""
    return raw_id[: -len(".json")] if raw_id.endswith(".json") else raw_id


def decode_taxa(entries: List[Any]) -> List[Taxon]:
    """Decode raw taxonomy entries, defaulting malformed fields.

    Entries that are not JSON objects are skipped.
    """
    taxa = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping taxonomy entry {position}: not an object")
            continue
        taxa.append(Taxon.model_validate(entry))
    return taxa


class ChecklistCache:
    """Decoded checklist overlays keyed by region id."""

    def __init__(self):
        self._overlays: Dict[str, Dict[str, int]] = {}

    def get(self, region_id: str) -> Optional[Dict[str, int]]:
        return self._overlays.get(region_id)

    def put(self, region_id: str, overlay: Mapping[str, int]) -> None:
        self._overlays[region_id] = dict(overlay)

    def __contains__(self, region_id: str) -> bool:
        return region_id in self._overlays

    def __len__(self) -> int:
        return len(self._overlays)

    def clear(self) -> None:
        self._overlays.clear()


class TaxonCatalog:
    """Taxonomy reference data with regional commonness.

    Attributes:
        species: Taxa sorted ascending by taxonomic order
        loaded: True once the taxonomy loaded successfully
        error: Fatal taxonomy load error, if any
        checklist_error: Last checklist load error, if any
        active_checklist_id: Region whose overlay is selected

    Example:
        >>> catalog = TaxonCatalog()
        >>> await catalog.load()
        >>> task = catalog.load_checklist("checklist-US-ME")
        >>> if task:
        ...     await task
        >>> [t.id for t in catalog.search("crow")]
    """

    def __init__(
        self,
        source: Optional[ResourceSource] = None,
        taxonomy_resource: str = TAXONOMY_RESOURCE,
        checklist_dir: str = CHECKLIST_DIR,
    ):
        """Initialize catalog.

        Args:
            source: Where to read resources from (default: bundled package data)
            taxonomy_resource: Name of the taxonomy file
            checklist_dir: Directory of checklist files within the source
        """
        self.source = source if source is not None else BundledResourceSource()
        self.taxonomy_resource = taxonomy_resource
        self.checklist_dir = checklist_dir

        self.species: List[Taxon] = []
        self.loaded = False
        self.error: Optional[str] = None
        self.checklist_error: Optional[str] = None
        self.active_checklist_id: Optional[str] = None
        self.checklist_commonness: Dict[str, int] = {}
        self.checklist_cache = ChecklistCache()

        self._last_checklist_ids: Set[str] = set()
        self._index: Dict[str, int] = {}
        self._pending: Set[asyncio.Task] = set()

    # Taxonomy

    async def load(self) -> None:
        """Load the taxonomy resource. Does nothing once loaded.

        A missing or undecodable resource sets :attr:`error` and leaves the
        catalog empty.
        """
        if self.loaded:
            return

        try:
            raw = await self.source.fetch_json(self.taxonomy_resource)
        except ResourceNotFoundError:
            self.error = "Missing taxonomy resource"
            logger.error(f"{self.error}: {self.taxonomy_resource}")
            return
        except DataSourceError as e:
            self.error = str(e)
            logger.error(f"Failed to load taxonomy: {e}")
            return

        if not isinstance(raw, list):
            self.error = "Taxonomy resource is not a JSON array"
            logger.error(self.error)
            return

        self._install(decode_taxa(raw))
        self.loaded = True
        self.error = None
        logger.info(f"Loaded {len(self.species)} taxa")

    def load_preview(self, species: List[Taxon]) -> None:
        """Install an in-memory taxon list as-is, bypassing the resource."""
        self.species = list(species)
        self._rebuild_index()
        self.loaded = True
        self.error = None

    def _install(self, taxa: List[Taxon]) -> None:
        for taxon in taxa:
            if taxon.id in self.checklist_commonness:
                taxon.commonness = self.checklist_commonness[taxon.id]
        self.species = sorted(taxa, key=lambda taxon: taxon.order)
        self._rebuild_index()

    def _rebuild_index(self) -> None:
        self._index = {}
        for position, taxon in enumerate(self.species):
            if taxon.id in self._index:
                logger.warning(f"Duplicate taxon id {taxon.id}")
            self._index[taxon.id] = position

    def get(self, taxon_id: str) -> Optional[Taxon]:
        position = self._index.get(taxon_id)
        return self.species[position] if position is not None else None

    def __len__(self) -> int:
        return len(self.species)

    # Checklists

    def load_checklist(self, region_id: str) -> Optional["asyncio.Task[None]"]:
        """Select the regional checklist ``region_id``.

        Re-selecting the active region does nothing. A region decoded before
        is applied immediately. Otherwise the file is loaded in a background
        task (which is returned) and applied when it completes; this needs a
        running event loop.

        Args:
            region_id: Checklist id, with or without a ``.json`` suffix

        Returns:
            The pending load task, or None if nothing had to be loaded
        """
        region_id = normalize_checklist_id(region_id)
        if region_id == self.active_checklist_id:
            return None

        self.active_checklist_id = region_id
        self.checklist_error = None

        cached = self.checklist_cache.get(region_id)
        if cached is not None:
            logger.debug(f"Applying cached checklist {region_id}")
            self._apply_checklist(cached)
            return None

        task = asyncio.get_running_loop().create_task(self._fetch_checklist(region_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _fetch_checklist(self, region_id: str) -> None:
        try:
            raw = await self.source.fetch_checklist(region_id, self.checklist_dir)
            overlay = Checklist.model_validate(raw).commonness_map()
        except ResourceNotFoundError:
            self._checklist_failed(region_id, f"Checklist file not found: {region_id}.json")
            return
        except (DataSourceError, ValidationError) as e:
            self._checklist_failed(region_id, f"Checklist load failed: {e}")
            return

        self.checklist_cache.put(region_id, overlay)
        self._apply_checklist(overlay)
        logger.info(f"Applied checklist {region_id} ({len(overlay)} taxa)")

    def _checklist_failed(self, region_id: str, message: str) -> None:
        logger.warning(message)
        # A region the user already left reports nothing
        if self.active_checklist_id != region_id:
            return
        self.checklist_error = message
        # Allow a retry by selecting the region again
        self.active_checklist_id = None

    def clear_checklist(self) -> None:
        """Deselect the active checklist and reset overlaid commonness."""
        self.active_checklist_id = None
        self.checklist_error = None
        self._apply_checklist({})

    def _apply_checklist(self, overlay: Mapping[str, int]) -> None:
        """Apply ``overlay``, resetting taxa only the previous overlay covered."""
        self.checklist_commonness = dict(overlay)
        new_ids = set(overlay)

        if self.loaded:
            for taxon_id in self._last_checklist_ids - new_ids:
                taxon = self.get(taxon_id)
                if taxon is not None:
                    taxon.commonness = None
            for taxon_id, commonness in overlay.items():
                taxon = self.get(taxon_id)
                if taxon is not None:
                    taxon.commonness = commonness

        self._last_checklist_ids = new_ids

    async def wait_for_checklists(self) -> None:
        """Wait for every in-flight checklist load to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    # Search

    def search(
        self,
        text: str,
        min_commonness: Optional[int] = None,
        max_commonness: Optional[int] = None,
        last_observed: Optional[Mapping[str, datetime]] = None,
        now: Optional[datetime] = None,
    ) -> List[Taxon]:
        """Search the catalog; see :func:`birdcount.search.search`."""
        return rank_taxa(
            self.species,
            text,
            min_commonness=min_commonness,
            max_commonness=max_commonness,
            last_observed=last_observed,
            now=now,
        )
