from __future__ import annotations

import pytest

from explorer.world.noise import HeightField
from explorer.world.params import TerrainConfig


class RecordingSubstrate:
    """Stands in for the GPU: hands out integer handles and tracks which are live."""

    def __init__(self) -> None:
        self.next_handle = 0
        self.live: dict[int, object] = {}
        self.submitted: list[tuple[int, object]] = []
        self.released: list[int] = []

    def submit(self, mesh, color) -> int:
        h = self.next_handle
        self.next_handle += 1
        self.live[h] = (mesh, color)
        self.submitted.append((h, color))
        return h

    def release(self, handle: int) -> None:
        assert handle in self.live, f"double release of {handle}"
        del self.live[handle]
        self.released.append(handle)


@pytest.fixture
def substrate() -> RecordingSubstrate:
    return RecordingSubstrate()


@pytest.fixture
def field() -> HeightField:
    return HeightField(12345)


@pytest.fixture
def small_cfg() -> TerrainConfig:
    # Low resolution keeps streaming tests fast.
    return TerrainConfig(chunk_size=32.0, render_distance=1, resolution=4)
