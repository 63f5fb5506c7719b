from __future__ import annotations

import numpy as np
import pytest

from explorer.world.chunk import ChunkCoord
from explorer.world.mesh_builder import (
    DEFAULT_BANDS,
    build_chunk_mesh,
    build_indices,
    classify_material,
    lattice_axis,
    smooth_normals,
    terrain_height,
)
from explorer.world.noise import HeightField
from explorer.world.params import ConfigError, TerrainConfig


class PlaneField:
    """h = a * x + b * z + c, in noise space."""

    seed = 0

    def __init__(self, a: float = 0.0, b: float = 0.0, c: float = 0.0) -> None:
        self.a, self.b, self.c = a, b, c

    def grid(self, xs, zs):
        gx, gz = np.meshgrid(np.asarray(xs, dtype=np.float64), np.asarray(zs, dtype=np.float64), indexing="xy")
        return (self.a * gx + self.b * gz + self.c).astype(np.float32)

    def sample(self, x, z):
        return np.float32(self.a * x + self.b * z + self.c)


def test_indices_single_cell() -> None:
    assert build_indices(1).tolist() == [0, 2, 1, 1, 2, 3]


def test_indices_count_and_range() -> None:
    res = 5
    idx = build_indices(res)
    assert idx.dtype == np.uint32
    assert idx.size == res * res * 6
    assert idx.max() == (res + 1) ** 2 - 1


def test_indices_second_row_matches_source_pattern() -> None:
    res = 3
    idx = build_indices(res).reshape(-1, 6)
    # cell (x=1, z=1): i = 1 * (res+1) + 1
    i = 5
    assert idx[res + 1].tolist() == [i, i + res + 1, i + 1, i + 1, i + res + 1, i + res + 2]


def test_zero_resolution_rejected() -> None:
    with pytest.raises(ConfigError):
        build_indices(0)


def test_flat_field_gives_up_normals() -> None:
    cfg = TerrainConfig(resolution=4)
    mesh, _ = build_chunk_mesh(ChunkCoord(0, 0), cfg, PlaneField(c=0.2))
    assert np.allclose(mesh.normals, [0.0, 1.0, 0.0])


def test_sloped_plane_normals() -> None:
    cfg = TerrainConfig(resolution=4, noise_scale=1.0, height_scale=1.0)
    mesh, _ = build_chunk_mesh(ChunkCoord(1, -1), cfg, PlaneField(a=1.0))
    expected = np.array([-1.0, 1.0, 0.0]) / np.sqrt(2.0)
    assert np.allclose(mesh.normals, expected, atol=1e-6)


def test_smooth_normals_are_unit_and_face_up() -> None:
    cfg = TerrainConfig(resolution=8)
    mesh, _ = build_chunk_mesh(ChunkCoord(3, 4), cfg, HeightField(12345))
    lengths = np.linalg.norm(mesh.normals, axis=1)
    assert np.allclose(lengths, 1.0, atol=1e-5)
    assert np.all(mesh.normals[:, 1] > 0.0)


def test_smooth_normals_average_shared_faces() -> None:
    # Two triangles folded along the shared edge (1, 2); the second tilts up toward -x and -z.
    pos = np.array([[0, 0, 0], [1, 0, 0], [0, 0, 1], [1, 1, 1]], dtype=np.float32)
    idx = np.array([0, 2, 1, 1, 2, 3], dtype=np.uint32)
    n = smooth_normals(pos, idx)
    up = np.array([0.0, 1.0, 0.0])
    tilted = np.array([-1.0, 1.0, -1.0]) / np.sqrt(3.0)
    assert np.allclose(n[0], up)
    assert np.allclose(n[3], tilted, atol=1e-6)
    shared = (up + tilted) / np.linalg.norm(up + tilted)
    assert np.allclose(n[1], shared, atol=1e-6)
    assert np.allclose(n[2], shared, atol=1e-6)


def test_vertex_layout_and_uvs() -> None:
    cfg = TerrainConfig(chunk_size=32.0, resolution=4)
    mesh, _ = build_chunk_mesh(ChunkCoord(2, -3), cfg, PlaneField())
    assert mesh.vertex_count == 25
    assert mesh.triangle_count == 32
    assert mesh.positions[0].tolist() == [64.0, 0.0, -96.0]
    assert mesh.positions[-1].tolist() == [96.0, 0.0, -64.0]
    # row-major: second vertex steps in x
    assert mesh.positions[1].tolist() == [72.0, 0.0, -96.0]
    assert mesh.uvs.min() == 0.0 and mesh.uvs.max() == 1.0
    assert mesh.uvs[1].tolist() == [0.25, 0.0]
    assert mesh.uvs[5].tolist() == [0.0, 0.25]


def test_heights_use_noise_and_height_scale() -> None:
    cfg = TerrainConfig(resolution=2, noise_scale=0.5, height_scale=3.0)
    mesh, _ = build_chunk_mesh(ChunkCoord(0, 0), cfg, PlaneField(a=1.0))
    # x = 16 -> noise x = 8 -> h = 24
    assert mesh.positions[1].tolist() == [16.0, 24.0, 0.0]


def test_build_is_deterministic() -> None:
    cfg = TerrainConfig(resolution=16)
    a_mesh, a_color = build_chunk_mesh(ChunkCoord(2, -3), cfg, HeightField(12345))
    b_mesh, b_color = build_chunk_mesh(ChunkCoord(2, -3), cfg, HeightField(12345))
    assert np.array_equal(a_mesh.positions, b_mesh.positions)
    assert np.array_equal(a_mesh.indices, b_mesh.indices)
    assert np.array_equal(a_mesh.normals, b_mesh.normals)
    assert a_color == b_color


@pytest.mark.parametrize("chunk_size", [32.0, 0.7, 13.37])
@pytest.mark.parametrize("mode", ["simplex", "value"])
def test_seams_are_bit_identical(chunk_size: float, mode: str) -> None:
    cfg = TerrainConfig(chunk_size=chunk_size, resolution=7, height_scale=5.0)
    field = HeightField(12345, mode=mode)
    row = cfg.resolution + 1

    def grid(coord):
        mesh, _ = build_chunk_mesh(coord, cfg, field)
        return mesh.positions.reshape(row, row, 3)

    center = grid(ChunkCoord(-1, 2))
    east = grid(ChunkCoord(0, 2))
    north = grid(ChunkCoord(-1, 3))
    assert np.array_equal(center[:, -1, :], east[:, 0, :])
    assert np.array_equal(center[-1, :, :], north[0, :, :])


def test_lattice_axis_shares_endpoints() -> None:
    a = lattice_axis(4, 32, 0.3)
    b = lattice_axis(5, 32, 0.3)
    assert a[-1] == b[0]
    assert a[0] == pytest.approx(4 * 0.3)


def test_terrain_height_matches_mesh_scaling() -> None:
    cfg = TerrainConfig(noise_scale=0.5, height_scale=2.0)
    assert terrain_height(PlaneField(a=1.0, b=1.0), cfg, 2.0, 4.0) == pytest.approx(6.0)


def test_classify_low_is_light_grass() -> None:
    # average 0.1 with height_scale 5 -> factor 0.02
    assert classify_material(0.1, 5.0) == DEFAULT_BANDS.grass_light


def test_classify_high_is_rock_blend() -> None:
    # average 3.0 with height_scale 5 -> factor 0.6 -> blend 1/3
    r, g, b = classify_material(3.0, 5.0)
    assert r == pytest.approx(0.5 + 0.1 / 3)
    assert g == pytest.approx(0.5 + 0.05 / 3)
    assert b == pytest.approx(0.5)


def test_classify_mid_band_blends_grass() -> None:
    # factor 0.275 -> blend 0.5 from dark to light grass
    r, g, b = classify_material(1.375, 5.0)
    assert (r, g, b) == pytest.approx((0.225, 0.525, 0.2))


def test_classify_clamps_factor() -> None:
    assert classify_material(-4.0, 5.0) == DEFAULT_BANDS.grass_light
    assert classify_material(100.0, 5.0) == pytest.approx((0.6, 0.55, 0.5))
    assert classify_material(0.15 * 5.0, 5.0) == DEFAULT_BANDS.grass_light


def test_classify_zero_height_scale() -> None:
    assert classify_material(2.0, 0.0) == DEFAULT_BANDS.grass_light


def test_chunk_colour_uses_average_height() -> None:
    cfg = TerrainConfig(resolution=4, height_scale=5.0, noise_scale=1.0)
    # constant noise 0.6 -> every height 3.0 -> average 3.0
    _, color = build_chunk_mesh(ChunkCoord(0, 0), cfg, PlaneField(c=0.6))
    assert color == pytest.approx(classify_material(3.0, 5.0))
