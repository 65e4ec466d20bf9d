# -- Boundary Enforcement Tests -- #

'''
Domain walls keep particles and bodies inside and reflect them inward.
'''

import numpy as np

from FluidSandbox.rigid.rigidBody import RigidBody


def testParticlesNeverEscape(boundary, rng):
    positions = (rng.random((500, 3)) - 0.5) * 60.0
    velocities = (rng.random((500, 3)) - 0.5) * 20.0

    boundary.enforceParticles(positions, velocities)

    assert np.all(positions >= boundary.boundMin)
    assert np.all(positions <= boundary.boundMax)


def testParticleVelocityReflectedInward(boundary):
    positions = np.array([
        [0.0, -6.0, 0.0],   # below floor
        [0.0, 13.0, 0.0],   # above ceiling
        [-9.0, 0.0, 0.0],   # past -x wall
        [0.0, 0.0, 9.0],    # past +z wall
    ])
    velocities = np.array([
        [1.0, -2.0, 1.0],
        [0.0, 2.0, 0.0],
        [-2.0, 0.0, 0.0],
        [0.0, 0.0, 2.0],
    ])

    boundary.enforceParticles(positions, velocities)

    damping = boundary.damping
    assert positions[0, 1] == boundary.boundMin[1]
    assert velocities[0, 1] == 2.0 * damping
    # Floor friction on the horizontal components
    assert np.isclose(velocities[0, 0], 0.95)
    assert np.isclose(velocities[0, 2], 0.95)

    assert velocities[1, 1] == -2.0 * damping
    assert velocities[2, 0] == 2.0 * damping
    assert velocities[3, 2] == -2.0 * damping


def testInteriorParticlesUntouched(boundary, clusterPositions):
    positions = clusterPositions.copy()
    velocities = np.ones_like(positions)

    boundary.enforceParticles(positions, velocities)

    assert np.array_equal(positions, clusterPositions)
    assert np.all(velocities == 1.0)


def testSphereRestsOnFloor(boundary):
    body = RigidBody('sphere', [0.0, -4.5, 0.0])
    body.velocity[:] = [0.0, -3.0, 0.0]

    boundary.enforceRigidBody(body)

    assert body.position[1] == boundary.boundMin[1] + body.radius
    assert body.velocity[1] == 3.0 * 0.2


def testLandingConvertsSlideIntoSpin(boundary):
    body = RigidBody('cube', [0.0, -4.9, 0.0])
    body.velocity[:] = [1.0, -2.0, 0.0]

    boundary.enforceRigidBody(body)

    # omega_z -= v_x * 0.5, then floor spin friction 0.7
    assert np.isclose(body.angularVelocity[2], -0.5 * 0.7)
    assert np.isclose(body.velocity[0], 0.8)


def testBodyWallBounce(boundary):
    body = RigidBody('sphere', [7.9, 0.0, 0.0])
    body.velocity[:] = [2.0, 0.0, 0.0]

    boundary.enforceRigidBody(body)

    assert body.position[0] == boundary.boundMax[0] - body.radius
    assert np.isclose(body.velocity[0], -0.6)


def testSideWallTurnsFallIntoSpin(boundary):
    sphere = RigidBody('sphere', [7.9, 0.0, 0.0])
    sphere.velocity[:] = [2.0, -1.0, 0.0]
    cube = RigidBody('cube', [-7.9, 0.0, 0.0])
    cube.velocity[:] = [-2.0, -1.0, 0.0]

    boundary.enforceRigidBody(sphere)
    boundary.enforceRigidBody(cube)

    # omega_z -= v_y * 0.2 on the +x wall, += v_y * 0.3 for a box on -x
    assert np.isclose(sphere.angularVelocity[2], 0.2)
    assert np.isclose(cube.angularVelocity[2], -0.3)
    assert np.isclose(cube.velocity[0], 0.6)
    # Vertical motion is left to gravity
    assert sphere.velocity[1] == -1.0


def testBodyHitsCeiling(boundary):
    body = RigidBody('sphere', [0.0, 11.9, 0.0])
    body.velocity[:] = [0.0, 3.0, 0.0]

    boundary.enforceRigidBody(body)

    assert body.position[1] == boundary.boundMax[1] - body.radius
    assert np.isclose(body.velocity[1], -3.0 * 0.2)


def testBodyCentreClamp(boundary):
    body = RigidBody('sphere', [20.0, -20.0, 0.0])
    boundary.clampBodyPosition(body)
    assert np.all(body.position >= boundary.boundMin)
    assert np.all(body.position <= boundary.boundMax)
