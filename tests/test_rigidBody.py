# -- Rigid Body Tests -- #

'''
Shape kinds, buoyancy, oriented extents and resting-pose settling.
'''

import math

import numpy as np
import pytest

from FluidSandbox import constants as const
from FluidSandbox.rigid.rigidBody import RigidBody
from FluidSandbox.rigid.shapes import ShapeFamily, ShapeKind, orientedHalfExtents


######################################################################
# -- Shapes -- #
######################################################################

def testShapeFamilies():
    assert ShapeKind.fromTag('torus').family is ShapeFamily.SPHERICAL
    assert ShapeKind.fromTag('boat').family is ShapeFamily.CYLINDRICAL
    assert ShapeKind.fromTag('hollow-cube').family is ShapeFamily.BOX
    assert ShapeKind.HOLLOW_CYLINDER.isHollow
    assert not ShapeKind.CUBE.isRound


def testUnknownShapeRejected():
    with pytest.raises(ValueError):
        ShapeKind.fromTag('pyramid')
    with pytest.raises(ValueError):
        RigidBody('pyramid', [0.0, 0.0, 0.0])


def testScaleAppliesToSize():
    body = RigidBody('cylinder', [0.0, 0.0, 0.0], scale=2.0)
    assert np.allclose(body.size, [1.2, 3.0, 1.2])
    assert body.radius == pytest.approx(1.2)
    assert body.collisionRadius == pytest.approx(1.2)

    cube = RigidBody('cube', [0.0, 0.0, 0.0])
    assert cube.collisionRadius == pytest.approx(0.6 * 1.5 * math.sqrt(3.0))


def testRotatedCubeExtent():
    '''A cube turned 45 degrees about z stands on an edge.'''
    extents = orientedHalfExtents(np.full(3, 0.75), np.array([0.0, 0.0, math.pi / 4.0]))
    assert extents[0] == pytest.approx(0.75 * math.sqrt(2.0))
    assert extents[1] == pytest.approx(0.75 * math.sqrt(2.0))
    assert extents[2] == pytest.approx(0.75)

    body = RigidBody('cube', [0.0, 0.0, 0.0], rotationDeg=(0.0, 0.0, 45.0))
    assert body.boundaryExtents()[1] == pytest.approx(0.75 * math.sqrt(2.0))


def testRoundShapesUseRadiusForWalls():
    body = RigidBody('boat', [0.0, 0.0, 0.0], rotationDeg=(30.0, 0.0, 0.0))
    assert np.allclose(body.boundaryExtents(), np.full(3, 2.5))


######################################################################
# -- Dynamics -- #
######################################################################

@pytest.mark.parametrize('fluid, rises', [
    ('mercury', True),
    ('water', False),
    ('air', False),
])
def testBuoyancyDirection(boundary, fluid, rises):
    fluidDensity = const.fluidPresets[fluid]['restDensity']
    body = RigidBody('sphere', [0.0, 2.0, 0.0], density=const.bodyMaterials['aluminium'])

    body.update(0.003, const.gravity, fluidDensity, boundary)

    if rises:
        assert body.velocity[1] > 0.0
        assert body.position[1] > 2.0
    else:
        assert body.velocity[1] < 0.0
        assert body.position[1] < 2.0


def testSinksFasterInAirThanWater(boundary):
    inWater = RigidBody('sphere', [0.0, 2.0, 0.0])
    inAir = RigidBody('sphere', [0.0, 2.0, 0.0])

    for _ in range(50):
        inWater.update(0.003, const.gravity, 1000.0, boundary)
        inAir.update(0.003, const.gravity, 1.2, boundary)

    assert inAir.velocity[1] < inWater.velocity[1] < 0.0


def testAngularVelocityDecays(boundary):
    body = RigidBody('sphere', [0.0, 2.0, 0.0])
    body.angularVelocity[:] = [1.0, 2.0, 3.0]
    body.update(0.003, 0.0, 1000.0, boundary)

    assert np.allclose(body.angularVelocity, [0.98, 1.96, 2.94])
    assert np.allclose(body.physicalRotation, body.angularVelocity * 0.003)


@pytest.mark.parametrize('fluidDensity, dragFactor', [
    (1000.0, 1.0),
    (2000.0, 2.0),
    (13546.0, 2.0),
])
def testDragCappedForDenseFluids(boundary, fluidDensity, dragFactor):
    body = RigidBody('sphere', [0.0, 2.0, 0.0])
    body.velocity[:] = [1.0, 0.0, 0.0]

    body.update(0.003, 0.0, fluidDensity, boundary)

    expected = 1.0 - const.dragCoefficient * dragFactor * 0.003 * const.dragFrameRate
    assert body.velocity[0] == pytest.approx(expected)


######################################################################
# -- Resting Pose -- #
######################################################################

def testAlignMovesTowardNearestRightAngle():
    box = RigidBody('cube', [0.0, 0.0, 0.0])
    box.physicalRotation[:] = [0.1, math.pi / 2.0 - 0.2, 0.0]
    box.angularVelocity[:] = [0.4, 0.4, 0.4]

    box.alignToRestingPose()

    assert np.allclose(box.physicalRotation, [0.09, math.pi / 2.0 - 0.18, 0.0])
    assert np.allclose(box.angularVelocity, [0.2, 0.2, 0.2])


def testCylinderKeepsYaw():
    cylinder = RigidBody('cylinder', [0.0, 0.0, 0.0])
    cylinder.physicalRotation[:] = [0.1, 0.3, -0.1]

    cylinder.alignToRestingPose()

    assert np.allclose(cylinder.physicalRotation, [0.09, 0.3, -0.09])


def testSphereHasNoPreferredPose():
    sphere = RigidBody('sphere', [0.0, 0.0, 0.0])
    sphere.physicalRotation[:] = [0.3, 0.3, 0.3]
    sphere.angularVelocity[:] = [0.2, 0.0, 0.0]

    sphere.alignToRestingPose()

    assert np.allclose(sphere.physicalRotation, [0.3, 0.3, 0.3])
    assert np.allclose(sphere.angularVelocity, [0.2, 0.0, 0.0])


def testTiltedBoxSettlesFlatOnFloor(boundary):
    tilt = math.radians(10.0)
    start = np.array([0.0, boundary.boundMin[1] + 0.75 * (math.cos(tilt) + math.sin(tilt)) + 0.01, 0.0])
    box = RigidBody('cube', start, rotationDeg=(0.0, 0.0, 10.0))

    for _ in range(400):
        box.update(0.003, const.gravity, 1000.0, boundary)

    assert abs(box.totalRotation[2]) < 1e-3
    # Resting flat, the lowest face lies on the floor
    assert box.position[1] == pytest.approx(boundary.boundMin[1] + 0.75, abs=1e-2)


def testTransformSnapshot():
    body = RigidBody('hollow-sphere', [1.0, 2.0, 3.0], scale=1.5, rotationDeg=(90.0, 0.0, 0.0), bodyId=4)
    transform = body.transform()

    assert transform.bodyId == 4
    assert transform.kind == 'hollow-sphere'
    assert transform.scale == 1.5
    assert np.allclose(transform.rotation, [math.pi / 2.0, 0.0, 0.0])

    transform.position[0] = 99.0
    assert body.position[0] == 1.0
