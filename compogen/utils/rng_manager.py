"""Seeded random source shared by all steps of one algorithm pass."""

from __future__ import annotations

import random
from typing import Any


class RNGManager:
    """Owns exactly one ``random.Random`` stream.

    Every operator receives this stream through the step it is called with;
    access is sequential, there is no per-operator sub-stream.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def get_state(self) -> Any:
        """Snapshot the stream so it can be restored with set_state()."""
        return self._rng.getstate()

    def set_state(self, state: Any) -> None:
        self._rng.setstate(state)

    def __repr__(self) -> str:
        return f"RNGManager(seed={self.seed!r})"


__all__ = ["RNGManager"]
