"""User settings consumed by the core: checklist selection and commonness bounds."""

import logging
from typing import Optional

from birdcount.constants.taxonomy import (
    COMMONNESS_MAX,
    COMMONNESS_MIN,
    SETTINGS_KEY_PREFIX,
)
from birdcount.storage import KeyValueStore

logger = logging.getLogger(__name__)


def _is_stored_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def clamp_commonness(value: int) -> int:
    """Clamp ``value`` to the 0..3 commonness scale."""
    return min(max(value, COMMONNESS_MIN), COMMONNESS_MAX)


class Settings:
    """Persisted settings.

    Both commonness bounds stay within 0..3 and ``min_commonness`` never
    exceeds ``max_commonness``: when a change would cross them, the bound that
    was not changed moves to meet the one that was.

    Example:
        >>> settings = Settings(KeyValueStore())
        >>> settings.max_commonness = 1
        >>> settings.min_commonness = 2
        >>> (settings.min_commonness, settings.max_commonness)
        (2, 2)
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._selected_checklist_id: Optional[str] = None
        self._min_commonness = COMMONNESS_MIN
        self._max_commonness = COMMONNESS_MAX
        self._load()

    @staticmethod
    def key(name: str) -> str:
        return f"{SETTINGS_KEY_PREFIX}{name}"

    def _load(self) -> None:
        raw_id = self.store.get(self.key("selectedChecklistId"))
        if isinstance(raw_id, str) and raw_id:
            self._selected_checklist_id = raw_id

        raw_min = self.store.get(self.key("minCommonness"))
        if _is_stored_int(raw_min):
            self._min_commonness = clamp_commonness(raw_min)

        raw_max = self.store.get(self.key("maxCommonness"))
        if _is_stored_int(raw_max):
            self._max_commonness = clamp_commonness(raw_max)

        if self._min_commonness > self._max_commonness:
            logger.warning(
                f"Stored commonness range {self._min_commonness}..{self._max_commonness} "
                "is inverted, using the maximum for both"
            )
            self._min_commonness = self._max_commonness

    def _persist(self) -> None:
        self.store.set(self.key("selectedChecklistId"), self._selected_checklist_id or "")
        self.store.set(self.key("minCommonness"), self._min_commonness)
        self.store.set(self.key("maxCommonness"), self._max_commonness)

    @property
    def selected_checklist_id(self) -> Optional[str]:
        return self._selected_checklist_id

    @selected_checklist_id.setter
    def selected_checklist_id(self, value: Optional[str]) -> None:
        self._selected_checklist_id = value or None
        self._persist()

    @property
    def min_commonness(self) -> int:
        return self._min_commonness

    @min_commonness.setter
    def min_commonness(self, value: int) -> None:
        self._min_commonness = clamp_commonness(value)
        if self._min_commonness > self._max_commonness:
            self._max_commonness = self._min_commonness
        self._persist()

    @property
    def max_commonness(self) -> int:
        return self._max_commonness

    @max_commonness.setter
    def max_commonness(self, value: int) -> None:
        self._max_commonness = clamp_commonness(value)
        if self._min_commonness > self._max_commonness:
            self._min_commonness = self._max_commonness
        self._persist()

    def commonness_bounds(self):
        """(min, max) bounds to search with, or (None, None) without a checklist."""
        if self._selected_checklist_id is None:
            return None, None
        return self._min_commonness, self._max_commonness
