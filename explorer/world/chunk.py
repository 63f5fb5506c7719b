from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from explorer.world.params import Color


@dataclass(frozen=True, order=True)
class ChunkCoord:
    x: int
    z: int

    def origin(self, chunk_size: float) -> tuple[float, float]:
        return self.x * chunk_size, self.z * chunk_size

    def chebyshev(self, other: "ChunkCoord") -> int:
        return max(abs(self.x - other.x), abs(self.z - other.z))


@dataclass
class TerrainMesh:
    positions: np.ndarray  # (N,3) float32, N = (res+1)^2, row-major over z then x
    normals: np.ndarray  # (N,3) float32, unit length
    uvs: np.ndarray  # (N,2) float32 in [0,1]
    indices: np.ndarray  # (res*res*6,) uint32

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)

    def interleaved(self) -> np.ndarray:
        """pos(3) + norm(3) + uv(2) float32, flattened for a vertex buffer."""
        return np.concatenate([self.positions, self.normals, self.uvs], axis=1).astype(np.float32).reshape(-1)


@dataclass
class LoadedChunk:
    coord: ChunkCoord
    handle: Any  # owned by the render substrate
    color: Color
