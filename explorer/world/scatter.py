from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from explorer.config import (
    DEFAULT_TREE_DENSITY,
    DEFAULT_TREE_MAX_HEIGHT,
    DEFAULT_TREE_MIN_HEIGHT,
    DEFAULT_TREE_SPAWN_DISTANCE,
)
from explorer.world.mesh_builder import terrain_height
from explorer.world.noise import HeightField
from explorer.world.params import ConfigError, TerrainConfig

log = logging.getLogger(__name__)

# Frequency of the placement field (independent of terrain noise_scale).
PLACEMENT_SCALE = 0.1

INSTANCE_FLOATS = 8  # x, y, z, height, rot_y, kind, c0, c1


@dataclass(frozen=True)
class TreeConfig:
    density: float = DEFAULT_TREE_DENSITY
    spawn_distance: float = DEFAULT_TREE_SPAWN_DISTANCE
    min_height: float = DEFAULT_TREE_MIN_HEIGHT
    max_height: float = DEFAULT_TREE_MAX_HEIGHT

    def __post_init__(self) -> None:
        if not (0.0 <= self.density <= 1.0):
            raise ConfigError(f"tree density must be in [0, 1], got {self.density!r}")
        if self.spawn_distance <= 0:
            raise ConfigError(f"spawn_distance must be > 0, got {self.spawn_distance!r}")
        if not (0.0 < self.min_height <= self.max_height):
            raise ConfigError(f"expected 0 < min_height <= max_height, got {self.min_height!r}, {self.max_height!r}")


def _hash01(seed: int, ix: np.ndarray, iz: np.ndarray) -> np.ndarray:
    """Deterministic hash -> [0,1) for integer grids (vectorized)."""
    x = (ix.astype(np.uint32) * np.uint32(374761393)) ^ (iz.astype(np.uint32) * np.uint32(668265263)) ^ np.uint32(seed & 0xFFFFFFFF)
    x ^= (x >> np.uint32(13))
    x *= np.uint32(1274126177)
    x ^= (x >> np.uint32(16))
    return x.astype(np.float64) / float(2**32)


class TreeScatter:
    """Spawns trees around the viewpoint whenever none are close by.

    Placement is a pure function of the integer world cell, so an area that is
    scanned twice yields the same trees, and a cell is never filled twice.
    """

    def __init__(
        self,
        terrain_cfg: TerrainConfig,
        terrain_field: HeightField,
        placement_field: HeightField,
        cfg: Optional[TreeConfig] = None,
    ) -> None:
        self.terrain_cfg = terrain_cfg
        self.terrain_field = terrain_field
        self.placement_field = placement_field
        self.cfg = cfg or TreeConfig()
        self.trees: Dict[Tuple[int, int], np.ndarray] = {}
        self.version = 0  # bumped whenever the tree set changes

    @property
    def forget_distance(self) -> float:
        return (self.terrain_cfg.render_distance + 1) * self.terrain_cfg.chunk_size

    def instances(self) -> np.ndarray:
        if not self.trees:
            return np.zeros((0, INSTANCE_FLOATS), dtype=np.float32)
        return np.stack(list(self.trees.values())).astype(np.float32)

    def has_nearby(self, x: float, z: float) -> bool:
        if not self.trees:
            return False
        inst = self.instances()
        d2 = (inst[:, 0] - x) ** 2 + (inst[:, 2] - z) ** 2
        return bool(np.any(d2 < self.cfg.spawn_distance ** 2))

    def update(self, position: Optional[Sequence[float]]) -> int:
        """Forget far trees and spawn around ``position`` if needed. Returns trees added."""
        if position is None:
            return 0
        x, z = float(position[0]), float(position[2])
        removed = self._forget_far(x, z)
        added = 0
        if not self.has_nearby(x, z):
            d = self.cfg.spawn_distance
            added = self.spawn_area(x - d, x + d, z - d, z + d)
        if added or removed:
            self.version += 1
            log.debug("trees: +%d -%d total=%d", added, removed, len(self.trees))
        return added

    def spawn_area(self, min_x: float, max_x: float, min_z: float, max_z: float) -> int:
        ix = np.arange(int(min_x), int(max_x), dtype=np.int64)
        iz = np.arange(int(min_z), int(max_z), dtype=np.int64)
        if ix.size == 0 or iz.size == 0:
            return 0

        density = self.cfg.density
        n = self.placement_field.grid(ix * PLACEMENT_SCALE, iz * PLACEMENT_SCALE)
        gx, gz = np.meshgrid(ix, iz, indexing="xy")
        seed = self.placement_field.seed
        chance = _hash01(seed, gx, gz)
        mask = (n > (1.0 - density)) & (chance < density)

        added = 0
        for cx, cz in zip(gx[mask].tolist(), gz[mask].tolist()):
            key = (cx, cz)
            if key in self.trees:
                continue
            self.trees[key] = self._make_tree(cx, cz)
            added += 1
        return added

    def _make_tree(self, cx: int, cz: int) -> np.ndarray:
        seed = self.placement_field.seed
        ax, az = np.array([cx]), np.array([cz])

        def rnd(k: int) -> float:
            return float(_hash01(seed + k, ax, az)[0])

        size_variation = 0.7 + 0.7 * rnd(17)
        height = (self.cfg.min_height + (self.cfg.max_height - self.cfg.min_height) * rnd(29)) * size_variation
        wx, wz = float(cx), float(cz)
        y = terrain_height(self.terrain_field, self.terrain_cfg, wx, wz)

        rot = rnd(41) * 6.28318530718
        kind = 1.0 if rnd(53) < 0.6 else 0.0
        c0 = 0.75 + 0.35 * rnd(67)
        c1 = 0.75 + 0.35 * rnd(79)
        return np.array([wx, y, wz, height, rot, kind, c0, c1], dtype=np.float32)

    def _forget_far(self, x: float, z: float) -> int:
        limit2 = self.forget_distance ** 2
        far = [k for k, t in self.trees.items() if (float(t[0]) - x) ** 2 + (float(t[2]) - z) ** 2 > limit2]
        for k in far:
            del self.trees[k]
        return len(far)
