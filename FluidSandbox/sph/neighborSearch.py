# -- Neighbor Search -- #

'''
Pair enumeration for the SPH density and force passes.

Two interchangeable strategies produce the same set of unique
pairs (i < j) closer than the smoothing radius:

    AllPairsSearch   -- O(N^2) reference, one vectorized sweep over
                        the upper triangle of the distance matrix
    SpatialHashGrid  -- cell-linked list keyed by floor(x / h); only
                        the 27 surrounding cells are searched

Pair order is deterministic for a given set of positions, so the
scatter-add accumulation in the passes replays bit for bit.

References:
-----------
Ihmsen et al. (2011) -- Parallel Neighbor-Search for SPH
Green (2010) -- Particle Simulation using CUDA
'''

from __future__ import annotations

from typing import Protocol

import numpy as np


def _emptyPairs() -> tuple[np.ndarray, np.ndarray]:
    return (np.array([], dtype=np.int64), np.array([], dtype=np.int64))


#--------------------------------------------------------------------#
# -- Neighbor Search Protocol -- #
#--------------------------------------------------------------------#

class NeighborSearch(Protocol):
    '''Protocol for neighbor search algorithms.'''

    def build(self, positions: np.ndarray) -> None:
        '''Build spatial data structure from particle positions.'''
        ...

    def queryPairs(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all particle pairs within the given radius.

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (i_indices, j_indices) where particle i and j are neighbors.
            Each pair appears once with i < j.
        '''
        ...


#--------------------------------------------------------------------#
# -- All Pairs (Reference) -- #
#--------------------------------------------------------------------#

class AllPairsSearch:
    '''
    Brute-force O(N^2) neighbor search.

    Computes every pairwise distance in one NumPy broadcast and keeps
    the upper triangle entries inside the radius. Memory grows as N^2,
    which caps the practical particle count at a few thousand.
    '''

    def __init__(self) -> None:
        self._positions: np.ndarray | None = None

    def build(self, positions: np.ndarray) -> None:
        '''Store the positions to search.'''
        self._positions = positions

    def queryPairs(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all unique pairs (i, j), i < j, closer than radius.

        Parameters:
        -----------
        radius : float
            Search radius

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] : (iIndices, jIndices)
        '''
        if self._positions is None or len(self._positions) < 2:
            return _emptyPairs()

        iIdx, jIdx = np.triu_indices(len(self._positions), k=1)
        dr = self._positions[iIdx] - self._positions[jIdx]
        distSq = np.sum(dr * dr, axis=1)
        within = distSq < radius * radius

        return (iIdx[within], jIdx[within])


#--------------------------------------------------------------------#
# -- Spatial Hash Grid -- #
#--------------------------------------------------------------------#

class SpatialHashGrid:
    '''
    Uniform grid spatial hashing for 3D neighbor search.

    Cell size equals the smoothing radius. Particles are binned by
    integer cell coordinates floor(x / cellSize); each pair query
    visits the particle's own cell plus the 13 cells of the positive
    half-stencil, so every pair is found exactly once.

    Parameters:
    -----------
    cellSize : float
        Grid cell size, should equal the smoothing radius
    '''

    def __init__(self, cellSize: float) -> None:
        self._cellSize = cellSize
        self._positions: np.ndarray | None = None
        self._cells: dict[tuple[int, int, int], np.ndarray] = {}

        self._halfStencil = self._computeHalfStencil()

    def build(self, positions: np.ndarray) -> None:
        '''
        Bin all particles into grid cells.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)
        '''
        self._positions = positions
        self._cells = {}
        if len(positions) == 0:
            return

        cellCoords = np.floor(positions / self._cellSize).astype(np.int64)

        # Stable sort by (x, y, z) cell, so each cell lists ascending indices
        order = np.lexsort((cellCoords[:, 2], cellCoords[:, 1], cellCoords[:, 0]))
        sortedCoords = cellCoords[order]

        changes = np.any(sortedCoords[1:] != sortedCoords[:-1], axis=1)
        starts = np.concatenate(([0], np.flatnonzero(changes) + 1))

        for start, members in zip(starts, np.split(order, starts[1:])):
            cx, cy, cz = sortedCoords[start]
            self._cells[(int(cx), int(cy), int(cz))] = members

    def queryPairs(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Find all unique particle pairs (i, j) within the given radius.

        Distance checks are vectorized per cell-pair group using
        NumPy broadcasting. The radius must not exceed the cell size.

        Parameters:
        -----------
        radius : float
            Search radius

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (iIndices, jIndices) arrays of neighbor pair indices
        '''
        if self._positions is None:
            return _emptyPairs()

        radiusSq = radius * radius
        positions = self._positions
        iChunks: list[np.ndarray] = []
        jChunks: list[np.ndarray] = []

        for cellKey, cellParticles in self._cells.items():
            cellPos = positions[cellParticles]

            # --- Pairs within the same cell --- #
            nCell = len(cellParticles)
            if nCell > 1:
                rowIdx, colIdx = np.triu_indices(nCell, k=1)
                diff = cellPos[rowIdx] - cellPos[colIdx]
                withinRadius = np.sum(diff * diff, axis=1) < radiusSq
                if np.any(withinRadius):
                    iChunks.append(cellParticles[rowIdx[withinRadius]])
                    jChunks.append(cellParticles[colIdx[withinRadius]])

            # --- Cross-pairs with neighbor cells (half-stencil only) --- #
            for offset in self._halfStencil:
                neighborKey = (
                    cellKey[0] + offset[0],
                    cellKey[1] + offset[1],
                    cellKey[2] + offset[2],
                )
                neighborParticles = self._cells.get(neighborKey)
                if neighborParticles is None:
                    continue

                neighborPos = positions[neighborParticles]
                diff = cellPos[:, np.newaxis, :] - neighborPos[np.newaxis, :, :]
                distSq = np.sum(diff * diff, axis=2)

                localI, localJ = np.where(distSq < radiusSq)
                if len(localI) > 0:
                    iChunks.append(cellParticles[localI])
                    jChunks.append(neighborParticles[localJ])

        if not iChunks:
            return _emptyPairs()

        iAll = np.concatenate(iChunks)
        jAll = np.concatenate(jChunks)

        # Canonical orientation i < j
        low = np.minimum(iAll, jAll)
        high = np.maximum(iAll, jAll)
        return (low, high)

    def _computeHalfStencil(self) -> list[tuple[int, int, int]]:
        '''
        Compute the 13 lexicographically positive offsets of the
        3x3x3 stencil, which visit each neighboring cell pair once.
        '''
        offsets = []
        for dx in range(-1, 2):
            for dy in range(-1, 2):
                for dz in range(-1, 2):
                    if (dx, dy, dz) > (0, 0, 0):
                        offsets.append((dx, dy, dz))
        return offsets


#--------------------------------------------------------------------#
# -- Factory -- #
#--------------------------------------------------------------------#

def createNeighborSearch(searchType: str, cellSize: float) -> NeighborSearch:
    '''
    Create a neighbor search by type name.

    Parameters:
    -----------
    searchType : str
        'allPairs' or 'spatialHash'
    cellSize : float
        Cell size for the spatial hash (the smoothing radius)

    Returns:
    --------
    NeighborSearch : Search instance

    Raises:
    -------
    ValueError : If the search type is unknown
    '''
    if searchType == 'allPairs':
        return AllPairsSearch()
    elif searchType == 'spatialHash':
        return SpatialHashGrid(cellSize)
    else:
        raise ValueError(f'Unknown neighbor search type: {searchType}')
