from __future__ import annotations

import numpy as np
import pytest

from explorer.world.noise import HeightField
from explorer.world.params import ConfigError


@pytest.mark.parametrize("mode", ["simplex", "value"])
def test_same_seed_same_values(mode: str) -> None:
    a = HeightField(12345, mode=mode)
    b = HeightField(12345, mode=mode)
    for x, z in [(0.0, 0.0), (3.7, -1.2), (-250.25, 918.5)]:
        assert a.sample(x, z) == b.sample(x, z)


@pytest.mark.parametrize("mode", ["simplex", "value"])
def test_different_seed_decorrelates(mode: str) -> None:
    a = HeightField(12345, mode=mode)
    b = HeightField(54321, mode=mode)
    xs = np.linspace(-10.0, 10.0, 17)
    assert not np.array_equal(a.grid(xs, xs), b.grid(xs, xs))


@pytest.mark.parametrize("mode", ["simplex", "value"])
def test_grid_shape_and_range(mode: str) -> None:
    hf = HeightField(7, mode=mode)
    xs = np.linspace(0.0, 5.0, 11)
    zs = np.linspace(-2.0, 2.0, 6)
    g = hf.grid(xs, zs)
    assert g.shape == (6, 11)
    assert g.dtype == np.float32
    assert np.all(np.abs(g) <= 1.0)


@pytest.mark.parametrize("mode", ["simplex", "value"])
def test_grid_agrees_with_sample(mode: str) -> None:
    hf = HeightField(99, mode=mode)
    xs = np.array([0.5, 1.25, -3.0])
    zs = np.array([2.0, -0.75])
    g = hf.grid(xs, zs)
    for j, z in enumerate(zs):
        for i, x in enumerate(xs):
            assert g[j, i] == pytest.approx(float(hf.sample(x, z)), abs=1e-6)


def test_field_is_coherent() -> None:
    hf = HeightField(12345)
    a = float(hf.sample(10.0, 10.0))
    b = float(hf.sample(10.001, 10.0))
    assert abs(a - b) < 0.01


def test_sample_returns_float32() -> None:
    assert isinstance(HeightField(1).sample(0.3, 0.4), np.float32)
    assert isinstance(HeightField(1, mode="value").sample(0.3, 0.4), np.float32)


def test_unknown_mode_is_config_error() -> None:
    with pytest.raises(ConfigError):
        HeightField(1, mode="perlin")
