"""Base class for taxonomy and checklist resource sources."""

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class DataSourceError(Exception):
    """Custom exception for resource source errors."""

    pass


class ResourceNotFoundError(DataSourceError):
    """Raised when a requested resource does not exist."""

    pass


class ResourceSource(ABC):
    """Abstract source of JSON resources (taxonomy, checklists).

    Implementations must not block the event loop: file reads run in a worker
    thread and network reads go through aiohttp.
    """

    @abstractmethod
    async def fetch_json(self, name: str) -> Any:
        """Fetch and decode the JSON resource ``name``.

        Args:
            name: Resource path relative to the source root,
                e.g. "checklists/CA-ON.json"

        Returns:
            Decoded JSON value

        Raises:
            ResourceNotFoundError: If the resource does not exist
            DataSourceError: If the resource cannot be read or decoded
        """
        pass

    async def fetch_checklist(self, region_id: str, checklist_dir: str) -> Any:
        """Fetch the checklist file for ``region_id``."""
        return await self.fetch_json(f"{checklist_dir}/{region_id}.json")
