"""Local key-value storage for persisted observations and settings.

This module provides a small key-value store kept in a single JSON file
(or only in memory). The observation log stores its whole record tree as one
JSON text value; settings store plain scalars.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Key-value store persisted to a JSON file.

    Writes are fire-and-forget: a failed write is logged and otherwise
    ignored, since the in-memory values stay authoritative for the session.
    A missing or unreadable file yields an empty store.

    Example:
        ```python
        store = KeyValueStore(Path("~/.birdcount/store.json").expanduser())
        store.set("Settings_minCommonness", 1)
        store.get("Settings_minCommonness")  # 1
        ```
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize store.

        Args:
            path: JSON file backing the store. None keeps values in memory only.
        """
        self.path = Path(path) if path is not None else None
        self._values: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring store {self.path}: expected a JSON object")
            return {}
        return data

    def _write(self) -> None:
        if self.path is None:
            return

        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._values, f)
            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write store {self.path}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def set(self, key: str, value: Any) -> None:
        """Set ``key`` to a JSON-serializable value and persist."""
        self._values[key] = value
        self._write()

    def remove(self, key: str) -> None:
        """Delete ``key`` if present and persist."""
        if key in self._values:
            del self._values[key]
            self._write()
