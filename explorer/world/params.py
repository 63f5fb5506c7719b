from __future__ import annotations

import math
from dataclasses import dataclass

from explorer.config import (
    DEFAULT_CHUNK_RESOLUTION,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_HEIGHT_SCALE,
    DEFAULT_NOISE_SCALE,
    DEFAULT_RENDER_DISTANCE,
)

Color = tuple[float, float, float]


class ConfigError(ValueError):
    """Invalid terrain configuration. Fatal at startup."""


def _finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite, got {value!r}")


@dataclass(frozen=True)
class TerrainConfig:
    """Session-wide terrain settings, validated on construction."""

    chunk_size: float = DEFAULT_CHUNK_SIZE
    render_distance: int = DEFAULT_RENDER_DISTANCE
    height_scale: float = DEFAULT_HEIGHT_SCALE
    noise_scale: float = DEFAULT_NOISE_SCALE
    resolution: int = DEFAULT_CHUNK_RESOLUTION

    def __post_init__(self) -> None:
        _finite("chunk_size", self.chunk_size)
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be > 0, got {self.chunk_size!r}")
        if isinstance(self.render_distance, bool) or not isinstance(self.render_distance, int):
            raise ConfigError(f"render_distance must be an integer, got {self.render_distance!r}")
        if self.render_distance < 0:
            raise ConfigError(f"render_distance must be >= 0, got {self.render_distance!r}")
        if isinstance(self.resolution, bool) or not isinstance(self.resolution, int) or self.resolution < 1:
            raise ConfigError(f"resolution must be an integer >= 1, got {self.resolution!r}")
        _finite("height_scale", self.height_scale)
        _finite("noise_scale", self.noise_scale)

    @property
    def window_side(self) -> int:
        return 2 * self.render_distance + 1


@dataclass(frozen=True)
class MaterialBands:
    """Height bands used to pick one flat colour per chunk.

    The height factor is the chunk's average elevation divided by
    ``height_scale`` and clamped to [0, 1].
    """

    low: float = 0.15
    mid: float = 0.4
    rock_range: float = 0.6
    blend_limit: float = 1.0

    grass_light: Color = (0.3, 0.65, 0.25)
    grass_dark: Color = (0.15, 0.4, 0.15)
    grass_delta: Color = (0.15, 0.25, 0.1)
    rock: Color = (0.5, 0.5, 0.5)
    rock_delta: Color = (0.1, 0.05, 0.0)

    def __post_init__(self) -> None:
        if not (0.0 <= self.low < self.mid <= 1.0):
            raise ConfigError(f"expected 0 <= low < mid <= 1, got low={self.low!r} mid={self.mid!r}")
        if self.rock_range <= 0:
            raise ConfigError(f"rock_range must be > 0, got {self.rock_range!r}")
        if self.blend_limit <= 0:
            raise ConfigError(f"blend_limit must be > 0, got {self.blend_limit!r}")
