"""Sources for taxonomy and checklist resources."""

from birdcount.sources.base import DataSourceError, ResourceNotFoundError, ResourceSource
from birdcount.sources.bundled import PACKAGE_DATA_DIR, BundledResourceSource
from birdcount.sources.remote import HTTPResourceSource

__all__ = [
    "BundledResourceSource",
    "DataSourceError",
    "HTTPResourceSource",
    "PACKAGE_DATA_DIR",
    "ResourceNotFoundError",
    "ResourceSource",
]
