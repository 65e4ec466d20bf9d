# -- Rigid Body Package -- #

'''
Interactive rigid bodies: shape kinds, per-body dynamics, and
body-body and particle-body collision response.
'''

from FluidSandbox.rigid.shapes import ShapeFamily, ShapeKind
from FluidSandbox.rigid.rigidBody import RigidBody
from FluidSandbox.rigid.collisions import (
    collideParticlesWithBodies,
    resolveBodyCollisions,
)
