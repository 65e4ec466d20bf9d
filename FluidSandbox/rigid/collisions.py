# -- Rigid Body Collisions -- #

'''
Collision response between rigid bodies, and between fluid
particles and rigid bodies.

Body-body contacts use a bounding-sphere approximation: exact for
round shapes and 0.6 * |size| for boxes. Overlapping pairs are
separated along the centre line, receive an equal and opposite
restitution impulse plus tangential friction, lose some spin and
gain a small torque from the contact.

Particle-body contacts are strictly one-way: particles are pushed
out of the solid and their velocity reflected, while the body is
neither moved nor slowed.
'''

from __future__ import annotations

import numpy as np

from FluidSandbox import constants as const
from FluidSandbox.rigid.rigidBody import RigidBody


######################################################################
# -- Body vs Body -- #
######################################################################

def resolveBodyPair(a: RigidBody, b: RigidBody) -> bool:
    '''
    Resolve contact between two distinct bodies, in place.

    Separation is split by relative speed so that the faster body
    yields less; both bodies share the impulse equally.

    Parameters:
    -----------
    a : RigidBody
        First body
    b : RigidBody
        Second body

    Returns:
    --------
    bool : True if the bodies were overlapping
    '''
    if a is b:
        return False

    diff = a.position - b.position
    distance = float(np.linalg.norm(diff))
    if distance < const.minSeparation:
        return False

    minDistance = a.collisionRadius + b.collisionRadius
    if distance >= minDistance:
        return False

    normal = diff / distance
    overlap = minDistance - distance

    # --- Positional separation --- #
    speedA = float(np.linalg.norm(a.velocity))
    speedB = float(np.linalg.norm(b.velocity))
    totalSpeed = speedA + speedB
    shareA = speedB / totalSpeed if totalSpeed > 0.0 else 0.5
    shareB = 1.0 - shareA

    a.position += normal * (overlap * shareA)
    b.position -= normal * (overlap * shareB)

    # --- Impulse --- #
    relativeVelocity = a.velocity - b.velocity
    normalSpeed = float(np.dot(relativeVelocity, normal))

    if normalSpeed < 0.0:
        j = -(1.0 + const.bodyRestitution) * normalSpeed
        impulse = normal * (0.5 * j)
        a.velocity += impulse
        b.velocity -= impulse

        # Friction opposing the tangential slip
        tangent = relativeVelocity - normal * normalSpeed
        tangentSpeed = float(np.linalg.norm(tangent))
        frictionMagnitude = tangentSpeed * const.bodyFriction
        if frictionMagnitude > const.minSeparation:
            friction = tangent / tangentSpeed * (-0.5 * frictionMagnitude)
            a.velocity += friction
            b.velocity -= friction

        # n x v_rel is the same seen from either body
        torque = np.cross(normal, relativeVelocity) * const.collisionTorqueScale
        a.angularVelocity *= const.collisionAngularDamping
        b.angularVelocity *= const.collisionAngularDamping
        a.angularVelocity += torque
        b.angularVelocity += torque

    return True


def resolveBodyCollisions(bodies: list[RigidBody]) -> int:
    '''
    One sequential pass over every unordered pair (i < j).

    Parameters:
    -----------
    bodies : list[RigidBody]
        All live bodies

    Returns:
    --------
    int : Number of overlapping pairs found
    '''
    contacts = 0
    nBodies = len(bodies)
    for i in range(nBodies):
        for j in range(i + 1, nBodies):
            if resolveBodyPair(bodies[i], bodies[j]):
                contacts += 1
    return contacts


######################################################################
# -- Particle vs Body -- #
######################################################################

def collideParticlesWithBody(
    positions: np.ndarray,
    velocities: np.ndarray,
    body: RigidBody,
    damping: float,
) -> int:
    '''
    Push particles out of one body and reflect their velocities.

    Round bodies are treated as spheres of radius size.x: particles
    inside move to the surface along the radial normal, and those
    moving inward have their velocity mirrored about the normal and
    damped. Box bodies use an axis-aligned interior test: particles
    leave along the axis of least penetration, and only that
    velocity component is reflected.

    Parameters:
    -----------
    positions : np.ndarray
        Particle positions, shape (N, 3), modified in place
    velocities : np.ndarray
        Particle velocities, shape (N, 3), modified in place
    body : RigidBody
        Solid to test against (not modified)
    damping : float
        Velocity damping on contact

    Returns:
    --------
    int : Number of particles pushed out
    '''
    centre = body.position
    offsets = positions - centre

    if body.kind.isRound:
        radius = body.radius
        dist = np.linalg.norm(offsets, axis=1)
        inside = (dist < radius) & (dist > 0.0)
        if not np.any(inside):
            return 0

        normals = offsets[inside] / dist[inside, np.newaxis]
        positions[inside] = centre + normals * (radius + const.surfaceOffset)

        vel = velocities[inside]
        vDotN = np.sum(vel * normals, axis=1)
        inward = vDotN < 0.0
        vel[inward] -= 2.0 * vDotN[inward, np.newaxis] * normals[inward]
        vel[inward] *= damping
        velocities[inside] = vel

        return int(np.count_nonzero(inside))

    half = body.halfExtents
    inside = np.all(np.abs(offsets) < half, axis=1)
    if not np.any(inside):
        return 0

    local = offsets[inside]
    penetration = half - np.abs(local)
    axis = np.argmin(penetration, axis=1)
    rows = np.arange(len(local))
    sign = np.where(local[rows, axis] > 0.0, 1.0, -1.0)

    pos = positions[inside]
    vel = velocities[inside]
    pos[rows, axis] = centre[axis] + sign * (half[axis] + const.surfaceOffset)
    vel[rows, axis] = np.abs(vel[rows, axis]) * sign * damping
    positions[inside] = pos
    velocities[inside] = vel

    return int(np.count_nonzero(inside))


def collideParticlesWithBodies(
    positions: np.ndarray,
    velocities: np.ndarray,
    bodies: list[RigidBody],
    damping: float,
) -> int:
    '''
    Apply particle push-out against every body, in list order.

    Returns:
    --------
    int : Total particle-body contacts resolved
    '''
    contacts = 0
    for body in bodies:
        contacts += collideParticlesWithBody(positions, velocities, body, damping)
    return contacts
