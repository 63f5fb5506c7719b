from __future__ import annotations

import numpy as np

from explorer.world.chunk import ChunkCoord, TerrainMesh
from explorer.world.noise import HeightField
from explorer.world.params import Color, ConfigError, MaterialBands, TerrainConfig

DEFAULT_BANDS = MaterialBands()


def build_indices(res: int) -> np.ndarray:
    """Build indices for a grid of res x res cells ((res+1)^2 vertices, row-major).

    Both triangles of a cell are wound so their face normal points +Y.
    """
    if res < 1:
        raise ConfigError(f"resolution must be >= 1, got {res!r}")
    row = res + 1
    j, i = np.meshgrid(np.arange(res, dtype=np.uint32), np.arange(res, dtype=np.uint32), indexing="ij")
    a = (j * row + i).reshape(-1)
    c = a + row  # next row (+z)
    b = a + 1  # next column (+x)
    d = c + 1
    return np.stack([a, c, b, b, c, d], axis=1).reshape(-1).astype(np.uint32)


def lattice_axis(chunk: int, res: int, chunk_size: float) -> np.ndarray:
    """World coordinates of one chunk's vertex columns (or rows).

    Derived from the global vertex lattice so that the last vertex of chunk n
    and the first vertex of chunk n+1 are the same float.
    """
    step = float(chunk_size) / res
    return (np.arange(res + 1, dtype=np.int64) + int(chunk) * res).astype(np.float64) * step


def smooth_normals(positions: np.ndarray, indices: np.ndarray) -> np.ndarray:
    """Accumulate unit face normals into each vertex, then normalize."""
    tri = indices.reshape(-1, 3).astype(np.int64)
    v0 = positions[tri[:, 0]].astype(np.float64)
    v1 = positions[tri[:, 1]].astype(np.float64)
    v2 = positions[tri[:, 2]].astype(np.float64)

    face = np.cross(v1 - v0, v2 - v0)
    face /= np.maximum(np.linalg.norm(face, axis=1, keepdims=True), 1e-12)

    acc = np.zeros((positions.shape[0], 3), dtype=np.float64)
    for k in range(3):
        np.add.at(acc, tri[:, k], face)

    acc /= np.maximum(np.linalg.norm(acc, axis=1, keepdims=True), 1e-12)
    return acc.astype(np.float32)


def classify_material(avg_height: float, height_scale: float, bands: MaterialBands = DEFAULT_BANDS) -> Color:
    """Map a chunk's average height to one flat colour."""
    if height_scale == 0:
        factor = 0.0
    else:
        factor = float(np.clip(avg_height / height_scale, 0.0, 1.0))

    if factor > bands.mid:
        blend = min((factor - bands.mid) / bands.rock_range, bands.blend_limit)
        base, delta = bands.rock, bands.rock_delta
    elif factor > bands.low:
        blend = min((factor - bands.low) / (bands.mid - bands.low), 1.0)
        base, delta = bands.grass_dark, bands.grass_delta
    else:
        return bands.grass_light
    return (
        base[0] + blend * delta[0],
        base[1] + blend * delta[1],
        base[2] + blend * delta[2],
    )


def terrain_height(field: HeightField, cfg: TerrainConfig, x: float, z: float) -> float:
    """Elevation of the height field at a world point, scaled like the mesh."""
    return float(field.sample(x * cfg.noise_scale, z * cfg.noise_scale)) * cfg.height_scale


def build_chunk_mesh(
    coord: ChunkCoord,
    cfg: TerrainConfig,
    field: HeightField,
    *,
    bands: MaterialBands = DEFAULT_BANDS,
) -> tuple[TerrainMesh, Color]:
    """Return the surface mesh and flat material colour for one chunk."""
    res = cfg.resolution
    idx = build_indices(res)

    xs = lattice_axis(coord.x, res, cfg.chunk_size)
    zs = lattice_axis(coord.z, res, cfg.chunk_size)
    h = field.grid(xs * cfg.noise_scale, zs * cfg.noise_scale) * np.float32(cfg.height_scale)

    grid_x, grid_z = np.meshgrid(xs.astype(np.float32), zs.astype(np.float32), indexing="xy")
    pos = np.stack([grid_x, h.astype(np.float32), grid_z], axis=-1).reshape(-1, 3)

    t = np.arange(res + 1, dtype=np.float32) / np.float32(res)
    gu, gv = np.meshgrid(t, t, indexing="xy")
    uvs = np.stack([gu, gv], axis=-1).reshape(-1, 2)

    nrm = smooth_normals(pos, idx)

    avg = float(np.mean(pos[:, 1], dtype=np.float64))
    color = classify_material(avg, cfg.height_scale, bands)

    return TerrainMesh(positions=pos, normals=nrm, uvs=uvs, indices=idx), color
