"""Resource source backed by a local directory of bundled JSON files."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Union

from birdcount.sources.base import DataSourceError, ResourceNotFoundError, ResourceSource

logger = logging.getLogger(__name__)

# Taxonomy and checklists shipped with the package
PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class BundledResourceSource(ResourceSource):
    """Read JSON resources from a directory on disk.

    The taxonomy file is a few megabytes for a full world list, so decoding
    happens in a worker thread via ``asyncio.to_thread``.
    """

    def __init__(self, directory: Union[str, Path] = PACKAGE_DATA_DIR):
        """Initialize bundled source.

        Args:
            directory: Root directory holding the resources
                (default: the package's data directory)
        """
        self.directory = Path(directory)

    def resolve(self, name: str) -> Path:
        """Absolute path of resource ``name``."""
        return self.directory / name

    def read_json(self, name: str) -> Any:
        """Read and decode a resource synchronously.

        Raises:
            ResourceNotFoundError: If the file does not exist
            DataSourceError: If the file is not valid JSON
        """
        path = self.resolve(name)
        if not path.is_file():
            raise ResourceNotFoundError(f"Resource not found: {name}")

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except UnicodeDecodeError as e:
            raise DataSourceError(f"Invalid UTF-8 in {name}: {e}") from e
        except json.JSONDecodeError as e:
            raise DataSourceError(f"Invalid JSON in {name}: {e}") from e
        except OSError as e:
            raise DataSourceError(f"Failed to read {name}: {e}") from e

        logger.debug(f"Read bundled resource {path}")
        return data

    async def fetch_json(self, name: str) -> Any:
        return await asyncio.to_thread(self.read_json, name)
