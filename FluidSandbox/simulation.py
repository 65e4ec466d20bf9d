# -- Fluid Sandbox Simulation -- #

'''
Per-frame orchestration of the fluid and its rigid bodies.

One call to step() advances everything by a single time step in a
fixed order:

    1. Fluid pipeline (density, forces, integration, walls, push-out
       of particles from the bodies)
    2. Each body's own update (buoyancy, drag, rotation, wall contact)
    3. rigidCollisionPasses sequential body-body passes
    4. Clip every body centre back into the domain

The simulation exclusively owns the particle field and the body list.
Configuration is supplied fresh on every step and never cached, so
anything may change it between frames.
'''

from __future__ import annotations

import logging
import time as timeModule
from typing import Iterable

import numpy as np

from FluidSandbox import constants as const
from FluidSandbox.rigid.collisions import resolveBodyCollisions
from FluidSandbox.rigid.rigidBody import RigidBody
from FluidSandbox.rigid.shapes import ShapeKind
from FluidSandbox.sph.boundaryHandling import BoundaryEnforcer
from FluidSandbox.sph.particleField import ParticleField
from FluidSandbox.sph.protocols import SimulationParameters, StepResult

logger = logging.getLogger(__name__)


class SandboxSimulation:
    '''
    Fluid particles plus interactive rigid bodies.

    Parameters:
    -----------
    nParticles : int
        Number of fluid particles
    seed : int
        Seed for the initial particle jitter and random drop positions
    spacing : float
        Initial cube spacing
    baseHeight : float
        y coordinate of the lowest initial layer
    positionJitter : float
        Full width of the initial position noise
    velocityJitter : float
        Full width of the initial horizontal velocity noise
    '''

    def __init__(
        self,
        nParticles: int,
        seed: int = 0,
        spacing: float = const.initialSpacing,
        baseHeight: float = const.initialHeight,
        positionJitter: float = const.initialPositionJitter,
        velocityJitter: float = const.initialVelocityJitter,
    ) -> None:
        self._seed = seed
        self._layout = {
            'spacing': spacing,
            'baseHeight': baseHeight,
            'positionJitter': positionJitter,
            'velocityJitter': velocityJitter,
        }

        self._bodies: list[RigidBody] = []
        self._particles = self._createField(nParticles)
        self._rng = np.random.default_rng(seed)
        self._nextBodyId = 0
        self._time = 0.0
        self._step = 0

        logger.info('Created sandbox with %d particles (seed=%d)', nParticles, seed)

    def _createField(self, nParticles: int) -> ParticleField:
        return ParticleField.createCube(nParticles, seed=self._seed, **self._layout)

    ######################################################################
    # -- State Access -- #
    ######################################################################

    @property
    def particles(self) -> ParticleField:
        '''The fluid particle field.'''
        return self._particles

    @property
    def bodies(self) -> list[RigidBody]:
        '''Live rigid bodies, in creation order (a copy of the list).'''
        return list(self._bodies)

    @property
    def time(self) -> float:
        '''Simulation time [s].'''
        return self._time

    @property
    def stepCount(self) -> int:
        '''Number of completed steps.'''
        return self._step

    def getBody(self, bodyId: int) -> RigidBody:
        '''
        Look up a live body by id.

        Raises:
        -------
        KeyError : If no live body has this id
        '''
        for body in self._bodies:
            if body.bodyId == bodyId:
                return body
        raise KeyError(f'No rigid body with id {bodyId}')

    ######################################################################
    # -- Body Management -- #
    ######################################################################

    def addBody(
        self,
        kind: ShapeKind | str,
        position: np.ndarray,
        baseExtent: np.ndarray | None = None,
        scale: float = 1.0,
        rotationDeg: tuple[float, float, float] = (0.0, 0.0, 0.0),
        density: float = const.bodyDensity,
    ) -> RigidBody:
        '''
        Create a body at a given position and add it to the scene.

        Parameters:
        -----------
        kind : ShapeKind | str
            Shape kind or its tag
        position : np.ndarray
            Initial world position
        baseExtent : np.ndarray | None
            Unscaled extent (defaults to the kind's drop size)
        scale : float
            Uniform scale factor
        rotationDeg : tuple[float, float, float]
            Base rotation about x, y, z [deg]
        density : float
            Material density [kg/m^3]

        Returns:
        --------
        RigidBody : The new body
        '''
        body = RigidBody(
            kind,
            position,
            baseExtent=baseExtent,
            scale=scale,
            rotationDeg=rotationDeg,
            density=density,
            bodyId=self._nextBodyId,
        )
        self._nextBodyId += 1
        self._bodies.append(body)

        logger.info('Added %s #%d', body.kind.value, body.bodyId)
        return body

    def dropBody(
        self,
        kind: ShapeKind | str,
        scale: float = 1.0,
        rotationDeg: tuple[float, float, float] = (0.0, 0.0, 0.0),
        density: float = const.bodyDensity,
    ) -> RigidBody:
        '''
        Drop a body from above the fluid at a random horizontal position.

        x and z are uniform in +-dropSpread/2 and y is dropHeight,
        drawn from the simulation's own generator.
        '''
        x, z = (self._rng.random(2) - 0.5) * const.dropSpread
        position = np.array([x, const.dropHeight, z])
        return self.addBody(kind, position, scale=scale, rotationDeg=rotationDeg, density=density)

    def removeBody(self, bodyId: int) -> RigidBody:
        '''
        Remove a body by id.

        Returns:
        --------
        RigidBody : The removed body

        Raises:
        -------
        KeyError : If no live body has this id
        '''
        body = self.getBody(bodyId)
        self._bodies.remove(body)
        logger.info('Removed %s #%d', body.kind.value, bodyId)
        return body

    def clearBodies(self) -> None:
        '''Remove every body.'''
        if self._bodies:
            logger.info('Cleared %d bodies', len(self._bodies))
        self._bodies.clear()

    def applyToBodies(
        self,
        bodyId: int | None = None,
        scale: float | None = None,
        rotationDeg: tuple[float, float, float] | None = None,
        density: float | None = None,
    ) -> int:
        '''
        Change scale, rotation or density of one body or all of them.

        Parameters:
        -----------
        bodyId : int | None
            Target body, or None for every body
        scale : float | None
            New uniform scale (unchanged if None)
        rotationDeg : tuple[float, float, float] | None
            New base rotation [deg] (unchanged if None)
        density : float | None
            New material density (unchanged if None)

        Returns:
        --------
        int : Number of bodies changed
        '''
        targets: Iterable[RigidBody] = (
            self._bodies if bodyId is None else [self.getBody(bodyId)]
        )

        count = 0
        for body in targets:
            if scale is not None:
                body.setScale(scale)
            if rotationDeg is not None:
                body.setRotation(*rotationDeg)
            if density is not None:
                body.density = float(density)
            count += 1
        return count

    ######################################################################
    # -- Reset -- #
    ######################################################################

    def reset(self, nParticles: int | None = None) -> None:
        '''
        Rebuild the fluid from its initial layout and remove all bodies.

        The same particle count and seed reproduce the same initial
        state. Body ids and the drop generator restart as well.

        Parameters:
        -----------
        nParticles : int | None
            New particle count (keeps the current count if None)
        '''
        if nParticles is None or nParticles == self._particles.nParticles:
            self._particles.reset()
        else:
            self._particles = self._createField(nParticles)

        self._bodies.clear()
        self._rng = np.random.default_rng(self._seed)
        self._nextBodyId = 0
        self._time = 0.0
        self._step = 0

        logger.info('Reset sandbox with %d particles', self._particles.nParticles)

    ######################################################################
    # -- Step -- #
    ######################################################################

    def step(self, params: SimulationParameters) -> StepResult:
        '''
        Advance the fluid and all bodies by one time step.

        Parameters:
        -----------
        params : SimulationParameters
            Configuration for this step

        Returns:
        --------
        StepResult : Diagnostics and read-only state after the step
        '''
        wallClockStart = timeModule.perf_counter()
        dt = params.effectiveTimeStep

        # 1. Fluid
        self._particles.step(params, self._bodies, dt)

        # 2. Bodies, each independently
        boundary = BoundaryEnforcer(params.boundMin, params.boundMax, params.damping)
        for body in self._bodies:
            body.update(dt, params.bodyGravity, params.restDensity, boundary)

        # 3. Body-body contacts
        if len(self._bodies) > 1:
            for _ in range(params.rigidCollisionPasses):
                resolveBodyCollisions(self._bodies)

        # 4. Collision passes may push centres past the walls
        for body in self._bodies:
            boundary.clampBodyPosition(body)

        self._time += dt
        self._step += 1

        computeTimeMs = (timeModule.perf_counter() - wallClockStart) * 1000.0
        positions, velocities = self._particles.snapshot()

        return StepResult(
            time=self._time,
            step=self._step,
            dt=dt,
            computeTimeMs=computeTimeMs,
            kineticEnergy=self._particles.kineticEnergy(params.particleMass),
            maxSpeed=self._particles.maxSpeed(),
            degenerateCount=self._particles.degenerateCount,
            positions=positions,
            velocities=velocities,
            bodies=[body.transform() for body in self._bodies],
        )

    def run(self, params: SimulationParameters, nSteps: int) -> StepResult | None:
        '''
        Advance nSteps steps with the same configuration.

        Returns:
        --------
        StepResult | None : Result of the last step (None if nSteps is 0)
        '''
        result = None
        for _ in range(nSteps):
            result = self.step(params)
        return result
