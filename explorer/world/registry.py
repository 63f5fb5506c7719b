from __future__ import annotations

from typing import Dict, Iterator, Optional

from explorer.world.chunk import ChunkCoord, LoadedChunk


class ChunkRegistry:
    """The set of materialized chunks, keyed by grid coordinate.

    Holds exactly one ``LoadedChunk`` per coordinate. Inserting a coordinate
    that is already present keeps the existing entry; removing an absent one
    does nothing.
    """

    def __init__(self) -> None:
        self._chunks: Dict[ChunkCoord, LoadedChunk] = {}

    def contains(self, coord: ChunkCoord) -> bool:
        return coord in self._chunks

    def insert(self, chunk: LoadedChunk) -> bool:
        if chunk.coord in self._chunks:
            return False
        self._chunks[chunk.coord] = chunk
        return True

    def remove(self, coord: ChunkCoord) -> Optional[LoadedChunk]:
        return self._chunks.pop(coord, None)

    def get(self, coord: ChunkCoord) -> Optional[LoadedChunk]:
        return self._chunks.get(coord)

    def coords(self) -> frozenset[ChunkCoord]:
        return frozenset(self._chunks)

    def __contains__(self, coord: object) -> bool:
        return coord in self._chunks

    def __iter__(self) -> Iterator[LoadedChunk]:
        return iter(list(self._chunks.values()))

    def __len__(self) -> int:
        return len(self._chunks)
