"""Bounded memo of evaluated sub-expressions, keyed by canonical text."""

import logging

logger = logging.getLogger(__name__)


class EvaluationCache:
    """Maps canonical expression text to its evaluated value.

    Once the cache grows past max_size it is cleared wholesale; later
    lookups simply recompute.
    """

    def __init__(self, max_size: int = 10_000) -> None:
        self.max_size = max_size
        self._values: dict[str, float] = {}
        self.hits = 0
        self.misses = 0
        self.clears = 0

    def get(self, key: str) -> float | None:
        value = self._values.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def set(self, key: str, value: float) -> None:
        if len(self._values) >= self.max_size:
            logger.debug(f"Evaluation cache full ({len(self._values)} entries), clearing")
            self._values.clear()
            self.clears += 1
        self._values[key] = value

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: str) -> bool:
        return key in self._values
