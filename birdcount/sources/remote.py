"""Resource source that downloads taxonomy and checklist files over HTTP."""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any

import aiohttp

from birdcount.sources.base import DataSourceError, ResourceNotFoundError, ResourceSource

logger = logging.getLogger(__name__)


class HTTPResourceSource(ResourceSource):
    """Fetch JSON resources relative to a base URL.

    Provides:
    - Rate limiting
    - Retry logic with exponential backoff
    - Error handling
    - Logging

    Example:
        >>> source = HTTPResourceSource("https://example.org/birdcount")
        >>> taxa = await source.fetch_json("taxonomy_min.json")
    """

    def __init__(
        self,
        base_url: str,
        rate_limit: int = 60,
        max_retries: int = 3,
        base_delay: float = 1.0,
    ):
        """Initialize HTTP source.

        Args:
            base_url: URL prefix the resource names are appended to
            rate_limit: Maximum requests per minute
            max_retries: Maximum retry attempts on failure
            base_delay: Base delay in seconds for exponential backoff
        """
        self.base_url = base_url.rstrip("/")
        self.rate_limit = rate_limit
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.last_request = datetime.now()

    def url_for(self, name: str) -> str:
        return f"{self.base_url}/{name.lstrip('/')}"

    async def _rate_limit_wait(self):
        """Space requests out to stay under the rate limit."""
        now = datetime.now()
        time_since_last = (now - self.last_request).total_seconds()
        min_interval = 60.0 / self.rate_limit

        if time_since_last < min_interval:
            wait_time = min_interval - time_since_last
            logger.debug(f"Rate limiting: waiting {wait_time:.2f}s")
            await asyncio.sleep(wait_time)

        self.last_request = datetime.now()

    async def fetch_json(self, name: str) -> Any:
        """Download and decode a JSON resource.

        Raises:
            ResourceNotFoundError: On HTTP 404
            DataSourceError: If all retries fail or the body is not JSON
        """
        url = self.url_for(name)

        async with aiohttp.ClientSession() as session:
            for attempt in range(self.max_retries):
                try:
                    await self._rate_limit_wait()

                    async with session.get(url) as response:
                        if response.status == 200:
                            try:
                                return json.loads(await response.text())
                            except UnicodeDecodeError as e:
                                raise DataSourceError(
                                    f"Invalid UTF-8 from {url}: {e}"
                                ) from e
                            except json.JSONDecodeError as e:
                                raise DataSourceError(
                                    f"Invalid JSON from {url}: {e}"
                                ) from e
                        elif response.status == 404:
                            raise ResourceNotFoundError(f"Resource not found: {name}")
                        elif response.status == 429:  # Rate limited
                            retry_after = int(response.headers.get("Retry-After", 60))
                            logger.warning(f"Rate limited, waiting {retry_after}s")
                            await asyncio.sleep(retry_after)
                            continue
                        elif response.status >= 500:  # Server error
                            logger.warning(
                                f"Server error {response.status}, retrying..."
                            )
                            delay = self.base_delay * (2**attempt)
                            await asyncio.sleep(delay)
                            continue
                        else:
                            raise DataSourceError(
                                f"HTTP {response.status}: {await response.text()}"
                            )

                except aiohttp.ClientError as e:
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.max_retries}): {e}"
                    )
                    if attempt == self.max_retries - 1:
                        raise DataSourceError(
                            f"Request failed after {self.max_retries} attempts: {e}"
                        ) from e
                    delay = self.base_delay * (2**attempt)
                    await asyncio.sleep(delay)

        raise DataSourceError(f"Request failed after {self.max_retries} attempts")
