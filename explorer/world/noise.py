from __future__ import annotations

import numpy as np
from opensimplex import OpenSimplex

from explorer.world.params import ConfigError

NOISE_MODES = ("simplex", "value")


class ValueNoise2D:
    """Fast 2D value noise with fully vectorized numpy implementation.

    Uses an integer hash on lattice points and smooth interpolation.
    Deterministic for a given seed. Output is in [-1, 1).
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed) & 0xFFFFFFFF

    @staticmethod
    def _fade(t: np.ndarray) -> np.ndarray:
        # smootherstep
        return t * t * t * (t * (t * 6 - 15) + 10)

    def _hash(self, xi: np.ndarray, zi: np.ndarray) -> np.ndarray:
        # Vectorized integer hash -> uint32 -> [0,1)
        x = (xi.astype(np.uint32) * np.uint32(374761393)) ^ (zi.astype(np.uint32) * np.uint32(668265263)) ^ np.uint32(self.seed)
        x ^= (x >> np.uint32(13))
        x *= np.uint32(1274126177)
        x ^= (x >> np.uint32(16))
        return x.astype(np.float64) / float(2**32)

    def noise(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        # x,z: float64 arrays (same shape)
        xi0 = np.floor(x).astype(np.int64)
        zi0 = np.floor(z).astype(np.int64)
        xi1 = xi0 + 1
        zi1 = zi0 + 1

        u = self._fade(x - xi0)
        v = self._fade(z - zi0)

        a = self._hash(xi0, zi0)
        b = self._hash(xi1, zi0)
        c = self._hash(xi0, zi1)
        d = self._hash(xi1, zi1)

        ab = a + (b - a) * u
        cd = c + (d - c) * u
        return (ab + (cd - ab) * v) * 2.0 - 1.0


class HeightField:
    """Seeded, stateless 2D coherent noise: (x, z) -> elevation in about [-1, 1].

    The seed is the only source of variation, so two fields built with the
    same seed and mode agree everywhere. Terrain and placement use different
    seeds.
    """

    def __init__(self, seed: int, mode: str = "simplex") -> None:
        if mode not in NOISE_MODES:
            raise ConfigError(f"unknown noise mode {mode!r} (expected one of {', '.join(NOISE_MODES)})")
        self.seed = int(seed)
        self.mode = mode
        if mode == "simplex":
            self._simp = OpenSimplex(self.seed)
        else:
            self._value = ValueNoise2D(self.seed)

    def sample(self, x: float, z: float) -> np.float32:
        if self.mode == "simplex":
            return np.float32(self._simp.noise2(float(x), float(z)))
        xv = np.array([x], dtype=np.float64)
        zv = np.array([z], dtype=np.float64)
        return np.float32(self._value.noise(xv, zv)[0])

    def grid(self, xs: np.ndarray, zs: np.ndarray) -> np.ndarray:
        """Sample the lattice xs (columns) by zs (rows); returns float32 (len(zs), len(xs))."""
        xs = np.asarray(xs, dtype=np.float64).reshape(-1)
        zs = np.asarray(zs, dtype=np.float64).reshape(-1)
        if self.mode == "simplex":
            return self._simp.noise2array(xs, zs).astype(np.float32)
        gx, gz = np.meshgrid(xs, zs, indexing="xy")
        return self._value.noise(gx, gz).astype(np.float32)

    def __call__(self, x: float, z: float) -> float:
        return float(self.sample(x, z))
