# -- SPH Engine Package -- #

'''
Core Smoothed Particle Hydrodynamics (SPH) engine.

Provides kernel functions, neighbor search, time integration,
boundary enforcement, and the particle field that runs the
per-step pipeline.
'''

from FluidSandbox.sph.protocols import (
    BodyTransform,
    SimulationDivergedError,
    SimulationParameters,
    StepResult,
)
from FluidSandbox.sph.kernels import poly6, spikyGradient, viscosityLaplacian
from FluidSandbox.sph.neighborSearch import AllPairsSearch, SpatialHashGrid, createNeighborSearch
from FluidSandbox.sph.timeIntegration import SymplecticEuler
