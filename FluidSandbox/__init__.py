# -- FluidSandbox Package -- #

'''
Interactive SPH fluid sandbox with one-way coupled rigid bodies.

A block of fluid particles falls into a closed box while solids of
various shapes and materials are dropped in to float, sink, tumble
and collide with one another.
'''

__version__ = '0.1.0'

from FluidSandbox.sph.protocols import SimulationParameters, StepResult, SimulationDivergedError
from FluidSandbox.simulation import SandboxSimulation
from FluidSandbox.scenarios.dropTank import DropTankConfig, createDropTank
from FluidSandbox.export.frameExporter import FrameExporter
