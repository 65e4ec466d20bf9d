# -- SPH Particle Field -- #

'''
Particle arrays and the per-step SPH pipeline.

The field owns positions, velocities, densities, pressures and
force accumulators for a fixed number of particles, stored as
contiguous NumPy arrays. Each step runs five passes, each one over
all particles before the next begins:

    1. Density      rho_i = sum_j m * W(|x_i - x_j|, h)  (self term included)
                    p_i   = k * (rho_i - rho_0)
    2. Force        pressure  -m * (p_i/rho_i^2 + p_j/rho_j^2) * nabla_W
                    viscosity  mu * m/rho_j * nabla^2_W * (v_j - v_i)
                    gravity    g * rho_i  along y
    3. Integrate    symplectic Euler, a = F / rho
    4. Boundary     domain walls
    5. Coupling     push-out against rigid bodies, then a final clip
                    so the walls have the last word

Pair work is vectorized over the neighbor list and scattered back
with np.add.at in pair order, so identical inputs give bitwise
identical outputs.

References:
-----------
Mueller, Charypar & Gross (2003) -- Particle-based fluid simulation
    for interactive applications
Monaghan (1992) -- Smoothed Particle Hydrodynamics
'''

from __future__ import annotations

import logging
import math

import numpy as np

from FluidSandbox import constants as const
from FluidSandbox.rigid.collisions import collideParticlesWithBodies
from FluidSandbox.rigid.rigidBody import RigidBody
from FluidSandbox.sph.boundaryHandling import BoundaryEnforcer
from FluidSandbox.sph.kernels import (
    poly6,
    poly6Batch,
    spikyGradientBatch,
    viscosityLaplacianBatch,
)
from FluidSandbox.sph.neighborSearch import createNeighborSearch
from FluidSandbox.sph.protocols import SimulationParameters
from FluidSandbox.sph.timeIntegration import SymplecticEuler

logger = logging.getLogger(__name__)


def _readOnly(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class ParticleField:
    '''
    Fixed-size set of SPH fluid particles.

    The particle count is set at construction and never changes;
    a different count needs a new field.

    Parameters:
    -----------
    positions : np.ndarray
        Initial positions, shape (N, 3)
    velocities : np.ndarray | None
        Initial velocities, shape (N, 3) (defaults to zero)
    '''

    def __init__(
        self,
        positions: np.ndarray,
        velocities: np.ndarray | None = None,
    ) -> None:
        positions = np.array(positions, dtype=float).reshape(-1, 3)
        nParticles = positions.shape[0]

        self.positions = positions
        self.velocities = (
            np.zeros((nParticles, 3)) if velocities is None
            else np.array(velocities, dtype=float).reshape(nParticles, 3)
        )
        self.densities = np.zeros(nParticles)
        self.pressures = np.zeros(nParticles)
        self.forces = np.zeros((nParticles, 3))

        self._integrator = SymplecticEuler()
        self._degenerateCount = 0
        self._layout: dict | None = None

    ######################################################################
    # -- Initialization -- #
    ######################################################################

    @classmethod
    def createCube(
        cls,
        nParticles: int,
        spacing: float = const.initialSpacing,
        baseHeight: float = const.initialHeight,
        positionJitter: float = const.initialPositionJitter,
        velocityJitter: float = const.initialVelocityJitter,
        seed: int = 0,
    ) -> ParticleField:
        '''
        Create particles stacked in a cube formation above the floor.

        The cube side is ceil(cbrt(N)); index i maps to column i mod c,
        row floor(i / c^2) and layer floor((i mod c^2) / c), centred
        horizontally on the origin. Positions get uniform jitter in
        +-positionJitter/2 and horizontal velocities in
        +-velocityJitter/2, drawn from a generator seeded with seed.

        Parameters:
        -----------
        nParticles : int
            Number of particles
        spacing : float
            Distance between neighboring grid sites
        baseHeight : float
            y coordinate of the lowest layer
        positionJitter : float
            Full width of the uniform position noise
        velocityJitter : float
            Full width of the uniform horizontal velocity noise
        seed : int
            Random seed

        Returns:
        --------
        ParticleField : Initialized field
        '''
        field = cls(np.zeros((nParticles, 3)))
        field._layout = {
            'spacing': spacing,
            'baseHeight': baseHeight,
            'positionJitter': positionJitter,
            'velocityJitter': velocityJitter,
            'seed': seed,
        }
        field.reset()
        return field

    def reset(self) -> None:
        '''
        Re-initialize the arrays from the stored cube layout.

        The same layout and seed always reproduce the same positions
        and velocities. Fields built directly from positions have no
        layout and are only zeroed apart from their positions.
        '''
        self.densities.fill(0.0)
        self.pressures.fill(0.0)
        self.forces.fill(0.0)
        self._degenerateCount = 0

        if self._layout is None:
            self.velocities.fill(0.0)
            return

        layout = self._layout
        n = self.nParticles
        spacing = layout['spacing']

        # Guard against cbrt round-off (27 ** (1/3) = 3.0000000000000004)
        cubeSize = math.ceil(round(n ** (1.0 / 3.0), 9))
        offset = cubeSize * spacing / 2.0

        idx = np.arange(n)
        grid = np.column_stack([
            (idx % cubeSize) * spacing - offset,
            (idx // (cubeSize * cubeSize)) * spacing + layout['baseHeight'],
            ((idx % (cubeSize * cubeSize)) // cubeSize) * spacing - offset,
        ])

        rng = np.random.default_rng(layout['seed'])
        jitter = (rng.random((n, 3)) - 0.5) * layout['positionJitter']
        lateral = (rng.random((n, 2)) - 0.5) * layout['velocityJitter']

        self.positions[:] = grid + jitter
        self.velocities[:, 0] = lateral[:, 0]
        self.velocities[:, 1] = 0.0
        self.velocities[:, 2] = lateral[:, 1]

        logger.debug('Initialized %d particles in a %d^3 cube', n, cubeSize)

    ######################################################################
    # -- Main Step -- #
    ######################################################################

    def step(
        self,
        params: SimulationParameters,
        bodies: list[RigidBody] | None = None,
        dt: float | None = None,
    ) -> None:
        '''
        Run the full density -> force -> integrate -> boundary -> coupling
        pipeline once.

        Parameters:
        -----------
        params : SimulationParameters
            Configuration for this step
        bodies : list[RigidBody] | None
            Live rigid bodies to push particles out of
        dt : float | None
            Time step (defaults to params.effectiveTimeStep)
        '''
        if dt is None:
            dt = params.effectiveTimeStep

        pairs = self.findPairs(params)

        # 1. Density and pressure
        self.computeDensity(params, pairs)

        # 2. Forces
        self.computeForces(params, pairs)

        # 3. Integration
        self._degenerateCount = self._integrator.integrate(
            self.positions, self.velocities, self.forces, self.densities, dt,
        )
        if self._degenerateCount:
            logger.debug(
                '%d particles below density floor, skipped this step',
                self._degenerateCount,
            )

        # 4. Domain walls
        boundary = BoundaryEnforcer(params.boundMin, params.boundMax, params.damping)
        boundary.enforceParticles(self.positions, self.velocities)

        # 5. Rigid body push-out, walls keep precedence
        if bodies:
            collideParticlesWithBodies(
                self.positions, self.velocities, bodies, params.damping,
            )
            boundary.clampPositions(self.positions)

    def findPairs(self, params: SimulationParameters) -> tuple[np.ndarray, np.ndarray]:
        '''
        Enumerate unique neighbor pairs (i < j) within the smoothing radius.

        Parameters:
        -----------
        params : SimulationParameters
            Supplies the radius and the search strategy

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] : (iIdx, jIdx)
        '''
        search = createNeighborSearch(params.neighborSearch, params.smoothingRadius)
        search.build(self.positions)
        return search.queryPairs(params.smoothingRadius)

    ######################################################################
    # -- Density Pass -- #
    ######################################################################

    def computeDensity(
        self,
        params: SimulationParameters,
        pairs: tuple[np.ndarray, np.ndarray],
    ) -> None:
        '''
        Compute densities by SPH summation and pressures from the
        linear equation of state.

        rho_i = m * W(0, h) + sum_{j != i} m * W(|x_i - x_j|, h)
        p_i   = k * (rho_i - rho_0)

        Pressure may be negative where the fluid is rarefied.

        Parameters:
        -----------
        params : SimulationParameters
            Configuration for this step
        pairs : tuple[np.ndarray, np.ndarray]
            Neighbor pairs from findPairs
        '''
        h = params.smoothingRadius
        mass = params.particleMass

        self.densities[:] = mass * poly6(0.0, h)

        iIdx, jIdx = pairs
        if len(iIdx) > 0:
            dr = self.positions[iIdx] - self.positions[jIdx]
            dist = np.linalg.norm(dr, axis=1)
            contribution = mass * poly6Batch(dist, h)

            np.add.at(self.densities, iIdx, contribution)
            np.add.at(self.densities, jIdx, contribution)

        self.pressures[:] = params.stiffness * (self.densities - params.restDensity)

    ######################################################################
    # -- Force Pass -- #
    ######################################################################

    def pressureForcePairs(
        self,
        params: SimulationParameters,
        pairs: tuple[np.ndarray, np.ndarray],
    ) -> tuple[np.ndarray, np.ndarray]:
        '''
        Pressure force of each pair on both of its members.

        F_ij = -m * (p_i/rho_i^2 + p_j/rho_j^2) * nabla_W(x_i - x_j, h)

        The force on j is computed independently from the j side,
        with the displacement x_j - x_i, so the two should cancel.

        Parameters:
        -----------
        params : SimulationParameters
            Configuration for this step
        pairs : tuple[np.ndarray, np.ndarray]
            Neighbor pairs from findPairs

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (force on i from j, force on j from i), each shape (M, 3)
        '''
        h = params.smoothingRadius
        mass = params.particleMass
        iIdx, jIdx = pairs

        dr = self.positions[iIdx] - self.positions[jIdx]
        dist = np.linalg.norm(dr, axis=1)

        termI = self.pressures[iIdx] / (self.densities[iIdx] ** 2)
        termJ = self.pressures[jIdx] / (self.densities[jIdx] ** 2)

        onI = -(mass * (termI + termJ))[:, np.newaxis] * spikyGradientBatch(dr, dist, h)
        onJ = -(mass * (termJ + termI))[:, np.newaxis] * spikyGradientBatch(-dr, dist, h)

        return (onI, onJ)

    def computeForces(
        self,
        params: SimulationParameters,
        pairs: tuple[np.ndarray, np.ndarray],
    ) -> None:
        '''
        Accumulate pressure, viscosity and gravity forces.

        Parameters:
        -----------
        params : SimulationParameters
            Configuration for this step
        pairs : tuple[np.ndarray, np.ndarray]
            Neighbor pairs from findPairs
        '''
        h = params.smoothingRadius
        mass = params.particleMass

        self.forces.fill(0.0)

        iIdx, jIdx = pairs
        if len(iIdx) > 0:
            pressureOnI, pressureOnJ = self.pressureForcePairs(params, pairs)

            dist = np.linalg.norm(self.positions[iIdx] - self.positions[jIdx], axis=1)
            lap = viscosityLaplacianBatch(dist, h)
            dv = self.velocities[jIdx] - self.velocities[iIdx]

            # mu * m / rho_neighbor * lap * (v_neighbor - v_self)
            viscOnI = (params.viscosity * mass / self.densities[jIdx] * lap)[:, np.newaxis] * dv
            viscOnJ = (params.viscosity * mass / self.densities[iIdx] * lap)[:, np.newaxis] * -dv

            np.add.at(self.forces, iIdx, pressureOnI + viscOnI)
            np.add.at(self.forces, jIdx, pressureOnJ + viscOnJ)

        # Body force; dividing by density later leaves plain g
        self.forces[:, 1] += params.gravity * self.densities

    ######################################################################
    # -- Diagnostics -- #
    ######################################################################

    @property
    def nParticles(self) -> int:
        '''Number of particles.'''
        return self.positions.shape[0]

    @property
    def degenerateCount(self) -> int:
        '''Particles skipped by the last integration pass.'''
        return self._degenerateCount

    @property
    def positionsView(self) -> np.ndarray:
        '''Read-only view of positions for rendering.'''
        return _readOnly(self.positions)

    @property
    def velocitiesView(self) -> np.ndarray:
        '''Read-only view of velocities for color mapping.'''
        return _readOnly(self.velocities)

    def snapshot(self) -> tuple[np.ndarray, np.ndarray]:
        '''
        Read-only copies of positions and velocities.

        Unlike the views, later steps do not change them.

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] : (positions, velocities), each shape (N, 3)
        '''
        return (_readOnly(self.positions.copy()), _readOnly(self.velocities.copy()))

    def kineticEnergy(self, mass: float) -> float:
        '''
        Total kinetic energy (1/2) * sum m * |v|^2.

        Parameters:
        -----------
        mass : float
            Particle mass

        Returns:
        --------
        float : Kinetic energy
        '''
        return float(0.5 * mass * np.sum(self.velocities * self.velocities))

    def maxSpeed(self) -> float:
        '''Largest particle speed.'''
        if self.nParticles == 0:
            return 0.0
        return float(np.max(np.linalg.norm(self.velocities, axis=1)))

    def maxDensityError(self, restDensity: float) -> float:
        '''Largest relative density error |rho - rho_0| / rho_0.'''
        if self.nParticles == 0:
            return 0.0
        return float(np.max(np.abs(self.densities - restDensity)) / restDensity)

    def isFinite(self) -> bool:
        '''True when positions and velocities contain no NaN or inf.'''
        return bool(np.all(np.isfinite(self.positions)) and np.all(np.isfinite(self.velocities)))

    def copy(self) -> ParticleField:
        '''Independent snapshot of the particle state.'''
        clone = ParticleField(self.positions.copy(), self.velocities.copy())
        clone.densities[:] = self.densities
        clone.pressures[:] = self.pressures
        clone.forces[:] = self.forces
        clone._layout = None if self._layout is None else dict(self._layout)
        clone._degenerateCount = self._degenerateCount
        return clone
