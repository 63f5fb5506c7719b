from __future__ import annotations

import numpy as np
import pytest

from explorer.world.mesh_builder import terrain_height
from explorer.world.noise import HeightField
from explorer.world.params import ConfigError, TerrainConfig
from explorer.world.scatter import INSTANCE_FLOATS, TreeConfig, TreeScatter


def _scatter(density: float = 1.0, spawn_distance: float = 10.0) -> TreeScatter:
    cfg = TerrainConfig(chunk_size=32.0, render_distance=1)
    return TreeScatter(cfg, HeightField(12345), HeightField(54321), TreeConfig(density=density, spawn_distance=spawn_distance))


def test_tree_config_validation() -> None:
    with pytest.raises(ConfigError):
        TreeConfig(density=1.5)
    with pytest.raises(ConfigError):
        TreeConfig(spawn_distance=0.0)
    with pytest.raises(ConfigError):
        TreeConfig(min_height=3.0, max_height=2.0)


def test_dense_scatter_spawns_on_terrain() -> None:
    scatter = _scatter()
    added = scatter.update((0.0, 5.0, 0.0))
    assert added > 0
    inst = scatter.instances()
    assert inst.shape == (added, INSTANCE_FLOATS)
    for x, y, z, height, rot, kind, c0, c1 in inst[:20]:
        assert y == pytest.approx(terrain_height(scatter.terrain_field, scatter.terrain_cfg, float(x), float(z)), abs=1e-5)
        assert -10.0 <= x < 10.0 and -10.0 <= z < 10.0
        assert 2.0 * 0.7 <= height <= 4.0 * 1.4
        assert 0.0 <= rot < 6.3
        assert kind in (0.0, 1.0)


def test_zero_density_spawns_nothing() -> None:
    scatter = _scatter(density=0.0)
    assert scatter.update((0.0, 0.0, 0.0)) == 0
    assert scatter.instances().shape == (0, INSTANCE_FLOATS)


def test_placement_is_deterministic() -> None:
    a = _scatter()
    b = _scatter()
    a.update((3.0, 0.0, -7.0))
    b.update((3.0, 0.0, -7.0))
    assert np.array_equal(a.instances(), b.instances())


def test_no_respawn_while_trees_are_near() -> None:
    scatter = _scatter()
    scatter.update((0.0, 0.0, 0.0))
    version = scatter.version
    assert scatter.update((1.0, 0.0, 1.0)) == 0
    assert scatter.version == version


def test_rescanning_area_never_duplicates() -> None:
    scatter = _scatter()
    first = scatter.spawn_area(-5.0, 5.0, -5.0, 5.0)
    assert scatter.spawn_area(-5.0, 5.0, -5.0, 5.0) == 0
    assert len(scatter.trees) == first


def test_far_trees_are_forgotten() -> None:
    scatter = _scatter()
    scatter.update((0.0, 0.0, 0.0))
    assert scatter.trees
    # forget distance = (render_distance + 1) * chunk_size = 64
    scatter.update((500.0, 0.0, 500.0))
    inst = scatter.instances()
    d = np.hypot(inst[:, 0] - 500.0, inst[:, 2] - 500.0)
    assert np.all(d <= scatter.forget_distance)


def test_missing_viewpoint_does_nothing() -> None:
    scatter = _scatter()
    assert scatter.update(None) == 0
    assert not scatter.trees
