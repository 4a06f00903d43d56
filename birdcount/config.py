"""Configuration for BirdCount.

This module provides the configuration dataclass for resource locations,
the local store file, and tuning values for the observation log and the
HTTP resource source.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from birdcount.constants.taxonomy import CHECKLIST_DIR, RECENT_LIMIT, TAXONOMY_RESOURCE
from birdcount.sources.base import ResourceSource
from birdcount.sources.bundled import PACKAGE_DATA_DIR, BundledResourceSource
from birdcount.sources.remote import HTTPResourceSource


@dataclass
class BirdCountConfig:
    """Configuration for a BirdCount session.

    Attributes:
        data_dir: Directory with bundled taxonomy and checklist files
            (default: the package's data directory)
        resource_base_url: Base URL to fetch resources from instead of
            ``data_dir`` (optional)
        store_path: JSON file for persisted observations and settings
            (default: None, keep everything in memory)
        taxonomy_resource: Taxonomy file name (default: "taxonomy_min.json")
        checklist_dir: Checklist directory within the source (default: "checklists")
        recent_limit: Size of the recently-touched species list (default: 20)
        recent_window_hours: Species seen this recently sink in search (default: 24)
        http_rate_limit: HTTP requests per minute (default: 60)
        http_max_retries: HTTP retry attempts (default: 3)

    Examples:
        >>> config = BirdCountConfig()
        >>> config.recent_limit
        20

        >>> config = BirdCountConfig(
        ...     store_path=Path("session.json"),
        ...     resource_base_url="https://example.org/birdcount",
        ... )
        >>> config.http_rate_limit
        60
    """

    data_dir: Path = PACKAGE_DATA_DIR
    resource_base_url: Optional[str] = None
    store_path: Optional[Path] = None
    taxonomy_resource: str = TAXONOMY_RESOURCE
    checklist_dir: str = CHECKLIST_DIR
    recent_limit: int = RECENT_LIMIT
    recent_window_hours: int = 24
    http_rate_limit: int = 60  # requests per minute
    http_max_retries: int = 3


def build_source(config: BirdCountConfig) -> ResourceSource:
    """Resource source for ``config``: HTTP when a base URL is set, else bundled."""
    if config.resource_base_url:
        return HTTPResourceSource(
            config.resource_base_url,
            rate_limit=config.http_rate_limit,
            max_retries=config.http_max_retries,
        )
    return BundledResourceSource(config.data_dir)


def configure_logging(level: int = logging.INFO) -> None:
    """Basic console logging for scripts. The library itself adds no handlers."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
