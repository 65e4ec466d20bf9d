# -- SPH Simulation Protocols -- #

'''
Configuration and result dataclasses for the fluid sandbox.

SimulationParameters is passed explicitly into every step; nothing
in the core caches it between steps, so a settings collaborator may
edit or replace it freely while the simulation is paused between
frames. StepResult is what a step hands back to the caller.
'''

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace

import numpy as np

from FluidSandbox import constants as const


class SimulationDivergedError(FloatingPointError):
    '''Raised when non-finite particle or body state reaches a consumer.'''


######################################################################
# -- Simulation Parameters -- #
######################################################################

@dataclass
class SimulationParameters:
    '''
    Configuration for one simulation step.

    All fields are plain numbers (or 3-vectors for the domain). The
    core does not validate them; the supplier is responsible for
    physically sane values.

    Parameters:
    -----------
    particleMass : float
        Mass of every fluid particle
    restDensity : float
        Fluid rest density rho_0, also the ambient density for buoyancy
    smoothingRadius : float
        Kernel support radius h
    stiffness : float
        Equation of state constant k in p = k * (rho - rho_0)
    viscosity : float
        Viscosity coefficient mu
    gravity : float
        Fluid gravitational acceleration along y
    bodyGravity : float
        Gravitational acceleration along y applied to rigid bodies
    timeStep : float
        Base time step
    simulationSpeed : float
        Multiplier on the time step
    damping : float
        Velocity damping on boundary and solid contact
    boundMin : np.ndarray
        Lower domain corner, shape (3,)
    boundMax : np.ndarray
        Upper domain corner, shape (3,)
    rigidCollisionPasses : int
        Body-body resolution passes per frame
    neighborSearch : str
        'allPairs' or 'spatialHash'
    '''

    particleMass: float = const.particleMass
    restDensity: float = const.restDensity
    smoothingRadius: float = const.smoothingRadius
    stiffness: float = const.stiffness
    viscosity: float = const.viscosity
    gravity: float = const.gravity
    bodyGravity: float = const.gravity
    timeStep: float = const.timeStep
    simulationSpeed: float = 1.0
    damping: float = const.damping
    boundMin: np.ndarray = field(default_factory=lambda: np.array(const.boundMin))
    boundMax: np.ndarray = field(default_factory=lambda: np.array(const.boundMax))
    rigidCollisionPasses: int = const.rigidCollisionPasses
    neighborSearch: str = 'allPairs'

    def __post_init__(self) -> None:
        self.boundMin = np.asarray(self.boundMin, dtype=float)
        self.boundMax = np.asarray(self.boundMax, dtype=float)

    @property
    def effectiveTimeStep(self) -> float:
        '''Time step after the speed multiplier.'''
        return self.timeStep * self.simulationSpeed

    @property
    def domainSize(self) -> np.ndarray:
        '''Domain extent in each dimension.'''
        return self.boundMax - self.boundMin

    def withFluidPreset(self, presetName: str) -> SimulationParameters:
        '''
        Return a copy with a built-in fluid material applied.

        Parameters:
        -----------
        presetName : str
            One of 'water', 'honey', 'oil', 'mercury', 'air', 'gel'

        Returns:
        --------
        SimulationParameters : New parameters with rest density,
            stiffness and viscosity replaced

        Raises:
        -------
        ValueError : If the preset name is unknown
        '''
        preset = const.fluidPresets.get(presetName)
        if preset is None:
            raise ValueError(f'Unknown fluid preset: {presetName}')

        return replace(
            self,
            restDensity=preset['restDensity'],
            stiffness=preset['stiffness'],
            viscosity=preset['viscosity'],
            boundMin=self.boundMin.copy(),
            boundMax=self.boundMax.copy(),
        )

    @classmethod
    def fromJson(cls, configPath: str) -> SimulationParameters:
        '''
        Load parameters from a JSON file.

        Reads the 'fluid', 'sph', 'domain' and 'objects' sections.
        A 'fluid.preset' entry applies a built-in material before the
        explicit fluid values, so explicit values win.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        SimulationParameters : Loaded parameters
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        fluidSection = data.get('fluid', {})
        sphSection = data.get('sph', {})
        domainSection = data.get('domain', {})
        objectSection = data.get('objects', {})

        params = cls()
        if 'preset' in fluidSection:
            params = params.withFluidPreset(fluidSection['preset'])

        return cls(
            particleMass=fluidSection.get('particleMass', params.particleMass),
            restDensity=fluidSection.get('restDensity', params.restDensity),
            stiffness=fluidSection.get('stiffness', params.stiffness),
            viscosity=fluidSection.get('viscosity', params.viscosity),
            gravity=fluidSection.get('gravity', params.gravity),
            smoothingRadius=sphSection.get('smoothingRadius', params.smoothingRadius),
            timeStep=sphSection.get('timeStep', params.timeStep),
            simulationSpeed=sphSection.get('simulationSpeed', params.simulationSpeed),
            neighborSearch=sphSection.get('neighborSearch', params.neighborSearch),
            damping=domainSection.get('damping', params.damping),
            boundMin=np.array(domainSection.get('min', const.boundMin), dtype=float),
            boundMax=np.array(domainSection.get('max', const.boundMax), dtype=float),
            bodyGravity=objectSection.get('gravity', params.bodyGravity),
            rigidCollisionPasses=objectSection.get(
                'collisionPasses', params.rigidCollisionPasses
            ),
        )


######################################################################
# -- Step Results -- #
######################################################################

@dataclass
class BodyTransform:
    '''
    Read-only snapshot of one rigid body for rendering.

    Parameters:
    -----------
    bodyId : int
        Unique body identifier
    kind : str
        Shape kind tag (e.g. 'sphere', 'hollow-cube')
    position : np.ndarray
        World position, shape (3,)
    rotation : np.ndarray
        Total Euler XYZ rotation [rad], shape (3,)
    scale : float
        Uniform scale factor
    '''

    bodyId: int
    kind: str
    position: np.ndarray
    rotation: np.ndarray
    scale: float


@dataclass
class StepResult:
    '''
    Outcome of one simulation step.

    Parameters:
    -----------
    time : float
        Simulation time after the step [s]
    step : int
        Number of completed steps
    dt : float
        Effective time step used [s]
    computeTimeMs : float
        Wall-clock time spent in the step [ms], informational only
    kineticEnergy : float
        Total kinetic energy of the fluid particles
    maxSpeed : float
        Largest particle speed
    degenerateCount : int
        Particles skipped by integration (density below the floor)
    positions : np.ndarray
        Read-only copy of particle positions, shape (N, 3)
    velocities : np.ndarray
        Read-only copy of particle velocities, shape (N, 3)
    bodies : list[BodyTransform]
        Transforms of all live rigid bodies
    '''

    time: float
    step: int
    dt: float
    computeTimeMs: float
    kineticEnergy: float
    maxSpeed: float
    degenerateCount: int
    positions: np.ndarray
    velocities: np.ndarray
    bodies: list[BodyTransform] = field(default_factory=list)
