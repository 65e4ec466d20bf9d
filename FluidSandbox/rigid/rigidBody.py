# -- Interactive Rigid Body -- #

'''
A single interactive solid dropped into the fluid.

The body owns its transform, linear and angular velocity, shape and
material density, and advances its own dynamics once per frame:

    1. Buoyancy: gravity scaled by (1 - 0.8 * rho_fluid / rho_body)
    2. Drag proportional to the fluid density, normalised around water
    3. Position drift, angular velocity decay and rotation drift
    4. Boundary contact, landing tumble and resting-pose snap

Coupling with the fluid is one-way: the ambient fluid density is
the only fluid quantity the body reads, and the body never pushes
momentum back into the particles.
'''

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from FluidSandbox import constants as const
from FluidSandbox.rigid.shapes import ShapeFamily, ShapeKind, orientedHalfExtents
from FluidSandbox.sph.protocols import BodyTransform

if TYPE_CHECKING:
    from FluidSandbox.sph.boundaryHandling import BoundaryEnforcer

logger = logging.getLogger(__name__)


class RigidBody:
    '''
    Rigid body with a closed shape kind and uniform scale.

    Parameters:
    -----------
    kind : ShapeKind | str
        Shape kind or its tag (e.g. 'cube', 'hollow-sphere')
    position : np.ndarray
        Initial world position, shape (3,)
    baseExtent : np.ndarray | None
        Unscaled extent (defaults to the kind's drop size)
    scale : float
        Uniform scale factor
    rotationDeg : tuple[float, float, float]
        User-set base rotation about x, y, z [deg]
    density : float
        Material density [kg/m^3]
    bodyId : int
        Identifier assigned by the owning simulation
    '''

    def __init__(
        self,
        kind: ShapeKind | str,
        position: np.ndarray,
        baseExtent: np.ndarray | None = None,
        scale: float = 1.0,
        rotationDeg: tuple[float, float, float] = (0.0, 0.0, 0.0),
        density: float = const.bodyDensity,
        bodyId: int = 0,
    ) -> None:
        self.kind = ShapeKind.fromTag(kind)
        self.bodyId = bodyId
        self.position = np.array(position, dtype=float)
        self.velocity = np.zeros(3)
        self.angularVelocity = np.zeros(3)
        self.physicalRotation = np.zeros(3)
        self.baseExtent = (
            self.kind.defaultExtent if baseExtent is None
            else np.array(baseExtent, dtype=float)
        )
        self.scale = float(scale)
        self.rotationDeg = np.array(rotationDeg, dtype=float)
        self.density = float(density)

        logger.debug(
            'Created %s #%d at %s (scale=%.2f, rotation=%s deg, density=%.0f)',
            self.kind.value, bodyId, self.position, self.scale,
            self.rotationDeg, self.density,
        )

    ######################################################################
    # -- Geometry -- #
    ######################################################################

    @property
    def family(self) -> ShapeFamily:
        '''Shape family of this body.'''
        return self.kind.family

    @property
    def size(self) -> np.ndarray:
        '''Scaled extent.'''
        return self.baseExtent * self.scale

    @property
    def radius(self) -> float:
        '''Scalar radius used by round shapes.'''
        return float(self.size[0])

    @property
    def halfExtents(self) -> np.ndarray:
        '''Unrotated half extents of the bounding box.'''
        return 0.5 * self.size

    @property
    def collisionRadius(self) -> float:
        '''
        Effective radius for body-body collisions.

        Exact for round shapes; box-like shapes use 0.6 * |size| as
        an approximation of the half diagonal.
        '''
        if self.kind.isRound:
            return self.radius
        return const.boxRadiusScale * float(np.linalg.norm(self.size))

    @property
    def totalRotation(self) -> np.ndarray:
        '''User base rotation plus accumulated physics rotation [rad].'''
        return np.radians(self.rotationDeg) + self.physicalRotation

    def boundaryExtents(self) -> np.ndarray:
        '''
        Distance from the centre to the domain walls along each axis.

        Round shapes use their radius on every axis; boxes use the
        world extents of their rotated corners.
        '''
        if self.kind.isRound:
            return np.full(3, self.radius)
        return orientedHalfExtents(self.halfExtents, self.totalRotation)

    def setScale(self, scale: float) -> None:
        '''Set the uniform scale factor.'''
        self.scale = float(scale)

    def setRotation(self, xDeg: float, yDeg: float, zDeg: float) -> None:
        '''Set the user base rotation in degrees.'''
        self.rotationDeg = np.array([xDeg, yDeg, zDeg], dtype=float)

    ######################################################################
    # -- Dynamics -- #
    ######################################################################

    def update(
        self,
        dt: float,
        gravity: float,
        fluidDensity: float,
        boundary: BoundaryEnforcer,
    ) -> None:
        '''
        Advance this body by one time step.

        Independent of every other body; body-body contacts are
        resolved afterwards by the collision passes.

        Parameters:
        -----------
        dt : float
            Time step [s]
        gravity : float
            Gravitational acceleration along y for bodies
        fluidDensity : float
            Ambient fluid density [kg/m^3]
        boundary : BoundaryEnforcer
            Domain walls for this step
        '''
        # Buoyancy reduces gravity by the density ratio
        buoyancyFactor = fluidDensity / self.density
        effectiveGravity = gravity * (1.0 - const.buoyancyScale * buoyancyFactor)
        self.velocity[1] += effectiveGravity * dt

        # Drag normalised around water, capped for very dense fluids
        dragFactor = min(fluidDensity / const.dragReferenceDensity, const.maxDragFactor)
        self.velocity *= 1.0 - const.dragCoefficient * dragFactor * dt * const.dragFrameRate

        self.position += self.velocity * dt

        self.angularVelocity *= const.angularDamping
        self.physicalRotation += self.angularVelocity * dt

        boundary.enforceRigidBody(self)

    def alignToRestingPose(self) -> None:
        '''
        Ease the rotation toward the nearest multiple of 90 degrees.

        Boxes align all three axes so a face lies flat; cylinder-like
        shapes align x and z so they stand upright or lie on their
        side. Spherical shapes have no preferred pose.
        '''
        if self.family is ShapeFamily.SPHERICAL:
            return

        total = self.totalRotation
        target = np.round(total / const.snapAngle) * const.snapAngle
        correction = (target - total) * const.alignSpeed

        if self.family is ShapeFamily.CYLINDRICAL:
            correction[1] = 0.0

        self.physicalRotation += correction
        self.angularVelocity *= const.settleAngularDamping

    def isSettling(self) -> bool:
        '''True when slow enough in both speed and spin to snap into a pose.'''
        return (
            float(np.linalg.norm(self.velocity)) < const.settleLinearSpeed
            and float(np.linalg.norm(self.angularVelocity)) < const.settleAngularSpeed
        )

    ######################################################################
    # -- Snapshots -- #
    ######################################################################

    def transform(self) -> BodyTransform:
        '''Read-only snapshot of the body's transform.'''
        return BodyTransform(
            bodyId=self.bodyId,
            kind=self.kind.value,
            position=self.position.copy(),
            rotation=self.totalRotation,
            scale=self.scale,
        )

    def __repr__(self) -> str:
        return (
            f'RigidBody({self.kind.value!r}, id={self.bodyId}, '
            f'position={self.position.tolist()}, density={self.density})'
        )
