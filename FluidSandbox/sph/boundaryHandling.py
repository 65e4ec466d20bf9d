# -- Domain Boundary Enforcement -- #

'''
Axis-aligned domain walls for fluid particles and rigid bodies.

Each of the six faces is handled independently. A point that has
crossed a face is clamped back onto it and its velocity along that
axis is set to point into the domain, scaled by a restitution
factor. Velocity is never simply zeroed, so a particle resting on
the floor keeps a small upward kick that gravity cancels each step.

Particles use the configured damping on every face plus horizontal
friction on the floor. Rigid bodies use a much weaker restitution,
lateral friction and an angular kick so they settle inelastically
instead of bouncing.
'''

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from FluidSandbox import constants as const
from FluidSandbox.rigid.shapes import ShapeFamily

if TYPE_CHECKING:
    from FluidSandbox.rigid.rigidBody import RigidBody


# Axis handling order: floor and ceiling first, then the side walls
_AXIS_ORDER = (1, 0, 2)


class BoundaryEnforcer:
    '''
    Keeps particles and bodies inside [boundMin, boundMax].

    Built from the parameters of the current step and discarded
    afterwards; it holds no state between steps.

    Parameters:
    -----------
    boundMin : np.ndarray
        Lower domain corner, shape (3,)
    boundMax : np.ndarray
        Upper domain corner, shape (3,)
    damping : float
        Particle restitution on wall contact
    '''

    def __init__(
        self,
        boundMin: np.ndarray,
        boundMax: np.ndarray,
        damping: float,
    ) -> None:
        self._boundMin = np.asarray(boundMin, dtype=float)
        self._boundMax = np.asarray(boundMax, dtype=float)
        self._damping = damping

    @property
    def boundMin(self) -> np.ndarray:
        '''Lower domain corner.'''
        return self._boundMin

    @property
    def boundMax(self) -> np.ndarray:
        '''Upper domain corner.'''
        return self._boundMax

    @property
    def damping(self) -> float:
        '''Particle restitution on wall contact.'''
        return self._damping

    ######################################################################
    # -- Particles -- #
    ######################################################################

    def enforceParticles(self, positions: np.ndarray, velocities: np.ndarray) -> None:
        '''
        Clamp particles to the domain and reflect their velocities.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3), modified in place
        velocities : np.ndarray
            Particle velocities, shape (N, 3), modified in place
        '''
        damping = self._damping

        for d in _AXIS_ORDER:
            below = positions[:, d] < self._boundMin[d]
            positions[below, d] = self._boundMin[d]
            velocities[below, d] = np.abs(velocities[below, d]) * damping

            if d == 1:
                # Floor friction
                velocities[below, 0] *= const.floorFriction
                velocities[below, 2] *= const.floorFriction

            above = positions[:, d] > self._boundMax[d]
            positions[above, d] = self._boundMax[d]
            velocities[above, d] = -np.abs(velocities[above, d]) * damping

    def clampPositions(self, positions: np.ndarray) -> None:
        '''Clip positions into the domain without touching velocities.'''
        np.clip(positions, self._boundMin, self._boundMax, out=positions)

    ######################################################################
    # -- Rigid Bodies -- #
    ######################################################################

    def enforceRigidBody(self, body: RigidBody) -> None:
        '''
        Resolve wall, floor and ceiling contact for one body.

        On floor contact a fast landing converts horizontal velocity
        into spin, and a slow grounded body eases toward a resting
        pose (see RigidBody.alignToRestingPose).

        Parameters:
        -----------
        body : RigidBody
            Body to constrain, modified in place
        '''
        lo = self._boundMin
        hi = self._boundMax
        pos = body.position
        vel = body.velocity
        omega = body.angularVelocity

        isBox = body.family is ShapeFamily.BOX
        tumbleGain = 0.5 if isBox else 0.3
        floorSpinDamping = 0.7 if isBox else 0.85
        wallSpinGain = 0.3 if isBox else 0.2

        extents = body.boundaryExtents()

        # --- Floor --- #
        if pos[1] - extents[1] < lo[1]:
            pos[1] = lo[1] + extents[1]

            if abs(vel[1]) > const.impactThreshold:
                omega[0] += vel[2] * tumbleGain
                omega[2] -= vel[0] * tumbleGain

            vel[1] = abs(vel[1]) * const.bodyVerticalRestitution
            vel[0] *= const.bodyFloorFriction
            vel[2] *= const.bodyFloorFriction
            omega *= floorSpinDamping

            if body.isSettling():
                body.alignToRestingPose()
                if isBox:
                    # Re-seat the box on its new lowest corner
                    extents = body.boundaryExtents()
                    if pos[1] - extents[1] < lo[1]:
                        pos[1] = lo[1] + extents[1]

        # --- Ceiling --- #
        if pos[1] + extents[1] > hi[1]:
            pos[1] = hi[1] - extents[1]
            vel[1] = -abs(vel[1]) * const.bodyVerticalRestitution

        # --- Side walls (x) --- #
        if pos[0] - extents[0] < lo[0]:
            pos[0] = lo[0] + extents[0]
            omega[2] += vel[1] * wallSpinGain
            vel[0] = abs(vel[0]) * const.bodyWallRestitution
        if pos[0] + extents[0] > hi[0]:
            pos[0] = hi[0] - extents[0]
            omega[2] -= vel[1] * wallSpinGain
            vel[0] = -abs(vel[0]) * const.bodyWallRestitution

        # --- Side walls (z) --- #
        if pos[2] - extents[2] < lo[2]:
            pos[2] = lo[2] + extents[2]
            omega[0] -= vel[1] * wallSpinGain
            vel[2] = abs(vel[2]) * const.bodyWallRestitution
        if pos[2] + extents[2] > hi[2]:
            pos[2] = hi[2] - extents[2]
            omega[0] += vel[1] * wallSpinGain
            vel[2] = -abs(vel[2]) * const.bodyWallRestitution

    def clampBodyPosition(self, body: RigidBody) -> None:
        '''Clip a body's centre into the domain.'''
        np.clip(body.position, self._boundMin, self._boundMax, out=body.position)
