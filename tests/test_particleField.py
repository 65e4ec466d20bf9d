# -- Particle Field Tests -- #

'''
Density, force and integration passes of the SPH particle field,
plus reproducibility and the settling cube.
'''

import numpy as np
import pytest

from FluidSandbox.rigid.rigidBody import RigidBody
from FluidSandbox.sph.kernels import poly6
from FluidSandbox.sph.particleField import ParticleField
from FluidSandbox.sph.protocols import SimulationParameters
from FluidSandbox.sph.timeIntegration import SymplecticEuler


######################################################################
# -- Density and Forces -- #
######################################################################

def testIsolatedParticle(params):
    '''A lone particle sees only its own density and gravity.'''
    field = ParticleField(np.array([[0.0, 2.0, 0.0]]))
    pairs = field.findPairs(params)
    assert len(pairs[0]) == 0

    field.computeDensity(params, pairs)
    selfDensity = params.particleMass * poly6(0.0, params.smoothingRadius)
    assert field.densities[0] == pytest.approx(selfDensity)
    assert field.pressures[0] == pytest.approx(params.stiffness * (selfDensity - params.restDensity))

    field.computeForces(params, pairs)
    assert field.forces[0, 0] == 0.0
    assert field.forces[0, 2] == 0.0
    assert field.forces[0, 1] == pytest.approx(params.gravity * selfDensity)


def testDensityIncludesNeighbors(params):
    field = ParticleField(np.array([[0.0, 0.0, 0.0], [0.2, 0.0, 0.0], [3.0, 0.0, 0.0]]))
    pairs = field.findPairs(params)
    field.computeDensity(params, pairs)

    h = params.smoothingRadius
    expected = params.particleMass * (poly6(0.0, h) + poly6(0.2, h))
    assert field.densities[0] == pytest.approx(expected)
    assert field.densities[1] == pytest.approx(expected)
    assert field.densities[2] == pytest.approx(params.particleMass * poly6(0.0, h))


def testPressureForceObeysThirdLaw(params, clusterPositions):
    field = ParticleField(clusterPositions)
    pairs = field.findPairs(params)
    field.computeDensity(params, pairs)

    onI, onJ = field.pressureForcePairs(params, pairs)
    assert len(onI) > 0
    assert np.array_equal(onI, -onJ)


def testNetInternalForceVanishes(clusterPositions):
    '''With no gravity and the fluid at rest, pair forces cancel overall.'''
    params = SimulationParameters(gravity=0.0)
    field = ParticleField(clusterPositions)
    pairs = field.findPairs(params)
    field.computeDensity(params, pairs)
    field.computeForces(params, pairs)

    scale = np.max(np.abs(field.forces))
    assert scale > 0.0
    assert np.allclose(field.forces.sum(axis=0), 0.0, atol=1e-9 * scale * len(field.forces))


def testViscosityOpposesRelativeMotion():
    params = SimulationParameters(gravity=0.0, stiffness=0.0)
    field = ParticleField(
        np.array([[0.0, 0.0, 0.0], [0.2, 0.0, 0.0]]),
        np.array([[0.0, 0.0, 1.0], [0.0, 0.0, -1.0]]),
    )
    pairs = field.findPairs(params)
    field.computeDensity(params, pairs)
    field.computeForces(params, pairs)

    assert field.forces[0, 2] < 0.0
    assert field.forces[1, 2] > 0.0


######################################################################
# -- Integration -- #
######################################################################

def testIntegratorSkipsLowDensity():
    positions = np.zeros((2, 3))
    velocities = np.ones((2, 3))
    forces = np.full((2, 3), 10.0)
    densities = np.array([0.5, 10.0])

    skipped = SymplecticEuler(densityFloor=1.0).integrate(positions, velocities, forces, densities, 0.1)

    assert skipped == 1
    assert np.array_equal(positions[0], np.zeros(3))
    assert np.array_equal(velocities[0], np.ones(3))
    # Kick then drift with the new velocity
    assert np.allclose(velocities[1], 1.0 + 10.0 / 10.0 * 0.1)
    assert np.allclose(positions[1], velocities[1] * 0.1)


def testFreeFallMatchesGravity(params):
    field = ParticleField(np.array([[0.0, 5.0, 0.0]]))
    field.step(params)

    dt = params.effectiveTimeStep
    assert field.velocities[0, 1] == pytest.approx(params.gravity * dt)
    assert field.positions[0, 1] == pytest.approx(5.0 + params.gravity * dt * dt)


######################################################################
# -- Initialization and Reproducibility -- #
######################################################################

def testCubeLayout():
    field = ParticleField.createCube(27, positionJitter=0.0, velocityJitter=0.0)
    assert field.nParticles == 27

    # 3 x 3 x 3 with spacing 0.3, centred horizontally, from y = 5
    assert np.allclose(np.unique(np.round(field.positions[:, 0], 9)), [-0.45, -0.15, 0.15])
    assert np.allclose(np.unique(np.round(field.positions[:, 1], 9)), [5.0, 5.3, 5.6])
    assert np.all(field.velocities == 0.0)


def testCubeJitterStaysBounded():
    field = ParticleField.createCube(64, seed=7)
    clean = ParticleField.createCube(64, positionJitter=0.0, velocityJitter=0.0)

    assert np.all(np.abs(field.positions - clean.positions) <= 0.05)
    assert np.all(np.abs(field.velocities[:, [0, 2]]) <= 0.25)
    assert np.all(field.velocities[:, 1] == 0.0)


def testResetReproducesInitialState(params):
    field = ParticleField.createCube(27, seed=3)
    initialPositions = field.positions.copy()
    initialVelocities = field.velocities.copy()

    for _ in range(5):
        field.step(params)
    assert not np.array_equal(field.positions, initialPositions)

    field.reset()
    assert np.array_equal(field.positions, initialPositions)
    assert np.array_equal(field.velocities, initialVelocities)


def testSameSnapshotStepsIdentically(params):
    field = ParticleField.createCube(64, seed=11)
    for _ in range(3):
        field.step(params)

    first = field.copy()
    second = field.copy()
    first.step(params)
    second.step(params)

    assert np.array_equal(first.positions, second.positions)
    assert np.array_equal(first.velocities, second.velocities)
    assert np.array_equal(first.densities, second.densities)


def testSpatialHashGivesSameStep(params):
    hashParams = SimulationParameters(neighborSearch='spatialHash')
    a = ParticleField.createCube(64, seed=5)
    b = a.copy()

    a.step(params)
    b.step(hashParams)

    assert np.allclose(a.densities, b.densities)
    assert np.allclose(a.positions, b.positions)


def testViewsAreReadOnly():
    field = ParticleField.createCube(8)
    with pytest.raises(ValueError):
        field.positionsView[0, 0] = 1.0
    with pytest.raises(ValueError):
        field.velocitiesView[0, 0] = 1.0


def testPushOutKeepsParticleInsideDomain(params):
    '''
    A particle trapped between a grounded sphere and the floor stays on
    the floor: walls have the last word over push-out.
    '''
    sphere = RigidBody('sphere', [0.0, -4.2, 0.0])
    field = ParticleField(np.array([[0.0, -4.6, 0.0]]))

    field.step(params, bodies=[sphere])

    assert field.positions[0, 1] == params.boundMin[1]
    assert np.all(field.positions >= params.boundMin)
    # The body is not moved by the contact
    assert np.array_equal(sphere.position, [0.0, -4.2, 0.0])


######################################################################
# -- Settling -- #
######################################################################

@pytest.mark.slow
def testSmallCubeSettlesOnFloor(params):
    '''
    A 2 x 2 x 2 block dropped from y = 5 comes to rest on the floor.

    The isolated block is under tension and bursts on impact, so some
    particles are thrown high and need several thousand steps to come
    back down and stop bouncing.
    '''
    field = ParticleField.createCube(8, positionJitter=0.0, velocityJitter=0.0)

    for _ in range(6000):
        field.step(params)

    assert field.isFinite()
    assert np.all(field.positions[:, 1] < params.boundMin[1] + 1.0)
    assert np.max(np.abs(field.velocities[:, 1])) < 0.1
