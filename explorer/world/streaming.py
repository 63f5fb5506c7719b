from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Set

import numpy as np

from explorer.world.chunk import ChunkCoord, LoadedChunk, TerrainMesh
from explorer.world.mesh_builder import DEFAULT_BANDS, build_chunk_mesh
from explorer.world.noise import HeightField
from explorer.world.params import Color, MaterialBands, TerrainConfig
from explorer.world.registry import ChunkRegistry

log = logging.getLogger(__name__)


class RenderSubstrate(Protocol):
    def submit(self, mesh: TerrainMesh, color: Color) -> Any: ...

    def release(self, handle: Any) -> None: ...


@dataclass(frozen=True)
class TickReport:
    center: Optional[ChunkCoord]
    loaded: tuple[ChunkCoord, ...] = ()
    evicted: tuple[ChunkCoord, ...] = ()

    @property
    def skipped(self) -> bool:
        return self.center is None


def world_to_chunk(x: float, z: float, chunk_size: float) -> ChunkCoord:
    cx = int(np.floor(x / chunk_size))
    cz = int(np.floor(z / chunk_size))
    return ChunkCoord(cx, cz)


def chunk_window(center: ChunkCoord, radius: int) -> Set[ChunkCoord]:
    """Every coordinate within Chebyshev distance ``radius`` of ``center``."""
    return {
        ChunkCoord(center.x + dx, center.z + dz)
        for dx in range(-radius, radius + 1)
        for dz in range(-radius, radius + 1)
    }


class TerrainStreamer:
    """Keeps the loaded chunk set equal to the window around the viewpoint.

    Call ``prime()`` once at startup and ``advance(position)`` once per tick.
    All mesh building happens synchronously inside the call.
    """

    def __init__(
        self,
        cfg: TerrainConfig,
        field: HeightField,
        substrate: RenderSubstrate,
        *,
        bands: MaterialBands = DEFAULT_BANDS,
    ) -> None:
        self.cfg = cfg
        self.field = field
        self.substrate = substrate
        self.bands = bands
        self.registry = ChunkRegistry()
        self.center: Optional[ChunkCoord] = None

    def world_to_chunk(self, x: float, z: float) -> ChunkCoord:
        return world_to_chunk(x, z, self.cfg.chunk_size)

    def required(self, center: ChunkCoord) -> Set[ChunkCoord]:
        return chunk_window(center, self.cfg.render_distance)

    def prime(self) -> TickReport:
        origin = ChunkCoord(0, 0)
        loaded = self._load_missing(origin)
        self.center = origin
        log.info("primed %d chunks around origin (render_distance=%d)", len(loaded), self.cfg.render_distance)
        return TickReport(center=origin, loaded=loaded)

    def advance(self, position: Optional[Sequence[float]]) -> TickReport:
        """Run one streaming pass for the viewpoint ``(x, y, z)``.

        A missing viewpoint skips the tick and leaves everything as it is.
        """
        if position is None:
            return TickReport(center=None)

        center = self.world_to_chunk(float(position[0]), float(position[2]))
        evicted = self._evict_outside(center)
        loaded = self._load_missing(center)
        self.center = center

        if loaded or evicted:
            log.debug("tick center=(%d,%d) loaded=%d evicted=%d total=%d", center.x, center.z, len(loaded), len(evicted), len(self.registry))
        return TickReport(center=center, loaded=loaded, evicted=evicted)

    def shutdown(self) -> None:
        for chunk in self.registry:
            self._unload(chunk.coord)
        self.center = None

    def _evict_outside(self, center: ChunkCoord) -> tuple[ChunkCoord, ...]:
        r = self.cfg.render_distance
        evicted = []
        for chunk in self.registry:
            if chunk.coord.chebyshev(center) > r:
                self._unload(chunk.coord)
                evicted.append(chunk.coord)
        return tuple(sorted(evicted))

    def _load_missing(self, center: ChunkCoord) -> tuple[ChunkCoord, ...]:
        r = self.cfg.render_distance
        loaded = []
        for x in range(center.x - r, center.x + r + 1):
            for z in range(center.z - r, center.z + r + 1):
                coord = ChunkCoord(x, z)
                if self.registry.contains(coord):
                    continue
                self._load(coord)
                loaded.append(coord)
        return tuple(loaded)

    def _load(self, coord: ChunkCoord) -> None:
        mesh, color = build_chunk_mesh(coord, self.cfg, self.field, bands=self.bands)
        handle = self.substrate.submit(mesh, color)
        self.registry.insert(LoadedChunk(coord=coord, handle=handle, color=color))
        log.debug("loaded chunk (%d,%d) color=(%.3f, %.3f, %.3f)", coord.x, coord.z, *color)

    def _unload(self, coord: ChunkCoord) -> None:
        chunk = self.registry.remove(coord)
        if chunk is None:
            return
        self.substrate.release(chunk.handle)
        log.debug("evicted chunk (%d,%d)", coord.x, coord.z)
