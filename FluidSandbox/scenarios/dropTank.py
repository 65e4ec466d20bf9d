# -- Drop Tank Scenario -- #

'''
Block of fluid falling into a closed box, with solids dropped in.

The scenario stacks the particles in a cube above the floor, lets
them fall under gravity, and drops a list of rigid bodies from above
the fluid at random horizontal positions. With a fluid preset, the
same bodies float, sink or tumble depending on the density ratio.

The scenario creates:
1. A SimulationParameters with the chosen fluid material
2. A SandboxSimulation with the fluid cube and dropped bodies
'''

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace

from FluidSandbox import constants as const
from FluidSandbox.simulation import SandboxSimulation
from FluidSandbox.sph.protocols import SimulationParameters


######################################################################
# -- Drop Tank Configuration -- #
######################################################################

@dataclass
class DropTankConfig:
    '''
    Configuration for a drop tank scenario.

    Parameters:
    -----------
    nParticles : int
        Number of fluid particles
    fluidPreset : str
        Built-in fluid material name
    bodyKinds : list[str]
        Shape tags of the bodies to drop, in order
    bodyMaterial : str
        Named material for every dropped body
    bodyScale : float
        Uniform scale of every dropped body
    nSteps : int
        Number of steps to run
    outputInterval : int
        Steps between exported frames
    seed : int
        Seed for the initial jitter and drop positions
    neighborSearch : str
        'allPairs' or 'spatialHash'
    simulationSpeed : float
        Multiplier on the time step
    '''

    nParticles: int = 512
    fluidPreset: str = 'water'
    bodyKinds: list[str] = field(default_factory=lambda: ['sphere', 'cube'])
    bodyMaterial: str = 'aluminium'
    bodyScale: float = 1.0
    nSteps: int = 600
    outputInterval: int = 10
    seed: int = 0
    neighborSearch: str = 'allPairs'
    simulationSpeed: float = 1.0

    @classmethod
    def settlingCube(cls) -> DropTankConfig:
        '''
        Eight particles and no bodies.

        A 2x2x2 cube of water that falls from y = 5 and settles on
        the floor, useful as a smoke test.
        '''
        return cls(
            nParticles=8,
            bodyKinds=[],
            nSteps=3000,
            outputInterval=50,
        )

    @classmethod
    def small(cls) -> DropTankConfig:
        '''
        Small tank for quick testing.

        216 particles with one sphere and one cube, runs in seconds.
        '''
        return cls(
            nParticles=216,
            bodyKinds=['sphere', 'cube'],
            nSteps=400,
            outputInterval=10,
        )

    @classmethod
    def standard(cls) -> DropTankConfig:
        '''
        Standard tank.

        1000 particles and one body of each family, using the
        spatial hash to keep the step time reasonable.
        '''
        return cls(
            nParticles=1000,
            bodyKinds=['sphere', 'cube', 'cylinder', 'boat'],
            nSteps=1500,
            outputInterval=10,
            neighborSearch='spatialHash',
        )

    @classmethod
    def fromJson(cls, configPath: str) -> DropTankConfig:
        '''
        Load a drop tank configuration from the 'scenario' section of
        a JSON file. Missing entries keep their defaults.
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        section = data.get('scenario', {})
        defaults = cls()

        return cls(
            nParticles=section.get('particles', defaults.nParticles),
            fluidPreset=data.get('fluid', {}).get('preset', defaults.fluidPreset),
            bodyKinds=list(section.get('bodies', defaults.bodyKinds)),
            bodyMaterial=section.get('bodyMaterial', defaults.bodyMaterial),
            bodyScale=section.get('bodyScale', defaults.bodyScale),
            nSteps=section.get('steps', defaults.nSteps),
            outputInterval=section.get('outputInterval', defaults.outputInterval),
            seed=section.get('seed', defaults.seed),
            neighborSearch=data.get('sph', {}).get('neighborSearch', defaults.neighborSearch),
            simulationSpeed=data.get('sph', {}).get('simulationSpeed', defaults.simulationSpeed),
        )


######################################################################
# -- Scenario Creation -- #
######################################################################

def createDropTank(
    tankConfig: DropTankConfig,
    params: SimulationParameters | None = None,
) -> tuple[SimulationParameters, SandboxSimulation]:
    '''
    Create a drop tank simulation from configuration.

    Parameters:
    -----------
    tankConfig : DropTankConfig
        Scenario configuration
    params : SimulationParameters | None
        Fully loaded parameters (e.g. from SimulationParameters.fromJson),
        used as given apart from neighbor search and speed. When None,
        the defaults with tankConfig.fluidPreset applied are used

    Returns:
    --------
    tuple[SimulationParameters, SandboxSimulation] :
        Ready-to-run parameters and simulation

    Raises:
    -------
    ValueError : If the fluid preset, body material or a body kind is unknown
    '''
    if tankConfig.bodyMaterial not in const.bodyMaterials:
        raise ValueError(f'Unknown body material: {tankConfig.bodyMaterial}')

    if params is None:
        simParams = SimulationParameters().withFluidPreset(tankConfig.fluidPreset)
    else:
        simParams = replace(params)
    simParams.neighborSearch = tankConfig.neighborSearch
    simParams.simulationSpeed = tankConfig.simulationSpeed

    simulation = SandboxSimulation(tankConfig.nParticles, seed=tankConfig.seed)

    bodyDensity = const.bodyMaterials[tankConfig.bodyMaterial]
    for kind in tankConfig.bodyKinds:
        simulation.dropBody(kind, scale=tankConfig.bodyScale, density=bodyDensity)

    return (simParams, simulation)
