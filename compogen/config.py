"""Parameter presets for static algorithm passes.

A config is a plain dict; ``pass_from_config`` builds a StaticAlgorithmPass
from it. Missing keys fall back to ``PRESET_STANDARD``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from compogen.evolution.static import StaticAlgorithmPass


PASS_KEYS = ("population", "retained_population", "generations", "mutation_probability", "seed")

PRESET_MINIMAL: dict[str, Any] = {
    "population": 16,
    "retained_population": 4,
    "generations": 8,
    "mutation_probability": 0.1,
}

PRESET_STANDARD: dict[str, Any] = {
    "population": 256,
    "retained_population": 64,
    "generations": 512,
    "mutation_probability": 0.1,
}

PRESET_RESEARCH: dict[str, Any] = {
    "population": 1024,
    "retained_population": 256,
    "generations": 2048,
    "mutation_probability": 0.05,
}


def pass_from_config(config: dict[str, Any] | None = None, seed: int | None = None) -> StaticAlgorithmPass:
    """Build a StaticAlgorithmPass; ``seed`` overrides a seed given in ``config``."""
    from compogen.evolution.static import StaticAlgorithmPass

    config = dict(config or {})
    if seed is not None:
        config["seed"] = seed
    return StaticAlgorithmPass.from_config(config)


__all__ = [
    "PASS_KEYS",
    "PRESET_MINIMAL",
    "PRESET_STANDARD",
    "PRESET_RESEARCH",
    "pass_from_config",
]
