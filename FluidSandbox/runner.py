# -- Fluid Sandbox Runner -- #

'''
Command-line entry point for running the fluid sandbox headless.

Sets up a drop tank scenario, runs the simulation for a fixed number
of steps, displays progress, and optionally exports frame data for
an external renderer.

Usage:
    python -m FluidSandbox                                # Small tank, water
    python -m FluidSandbox --preset standard --fluid honey
    python -m FluidSandbox --drop sphere cube boat --steps 1000
    python -m FluidSandbox --config configs/dropTank.json
    python -m FluidSandbox --no-export                    # Skip frame export
    python -m FluidSandbox --plot                         # Also write an HTML diagnostics report
'''

from __future__ import annotations

import argparse
import logging
import time as timeModule

from FluidSandbox import constants as const
from FluidSandbox.export.frameExporter import FrameExporter
from FluidSandbox.logSetup import setupLogging
from FluidSandbox.rigid.shapes import ShapeKind
from FluidSandbox.scenarios.dropTank import DropTankConfig, createDropTank
from FluidSandbox.sph.protocols import SimulationDivergedError, SimulationParameters, StepResult
from FluidSandbox.visualization.diagnosticsPlots import writeDiagnosticsReport

logger = logging.getLogger(__name__)

scenarioPresets = {
    'settlingCube': DropTankConfig.settlingCube,
    'small': DropTankConfig.small,
    'standard': DropTankConfig.standard,
}


#--------------------------------------------------------------------#
# -- CLI Argument Parser -- #
#--------------------------------------------------------------------#

def buildParser() -> argparse.ArgumentParser:
    '''Build the CLI argument parser.'''
    parser = argparse.ArgumentParser(
        description='FluidSandbox -- SPH fluid with interactive rigid bodies',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config', type=str, default=None,
        help='Path to JSON configuration file',
    )
    parser.add_argument(
        '--preset', type=str, default='small',
        choices=sorted(scenarioPresets),
        help='Scenario preset (default: small)',
    )
    parser.add_argument(
        '--fluid', type=str, default=None,
        choices=sorted(const.fluidPresets),
        help='Fluid material (default: the preset\'s)',
    )
    parser.add_argument(
        '--particles', type=int, default=None,
        help='Number of fluid particles (default: the preset\'s)',
    )
    parser.add_argument(
        '--steps', type=int, default=None,
        help='Number of steps to run (default: the preset\'s)',
    )
    parser.add_argument(
        '--drop', type=str, nargs='*', default=None,
        choices=[kind.value for kind in ShapeKind],
        help='Shape kinds to drop into the tank (default: the preset\'s)',
    )
    parser.add_argument(
        '--material', type=str, default=None,
        choices=sorted(const.bodyMaterials),
        help='Material of the dropped bodies (default: aluminium)',
    )
    parser.add_argument(
        '--neighbor-search', type=str, default=None,
        choices=['allPairs', 'spatialHash'],
        help='Neighbor search strategy (default: the preset\'s)',
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for particle jitter and drop positions',
    )
    parser.add_argument(
        '--no-export', action='store_true',
        help='Skip frame data export',
    )
    parser.add_argument(
        '--plot', action='store_true',
        help='Write an HTML diagnostics report (energy and body heights)',
    )
    parser.add_argument(
        '--output-dir', type=str, default='FluidSandbox/output',
        help='Output directory for exported frames (default: FluidSandbox/output)',
    )
    parser.add_argument(
        '--log-level', type=str, default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: WARNING)',
    )

    return parser


def applyOverrides(tankConfig: DropTankConfig, args: argparse.Namespace) -> DropTankConfig:
    '''Apply command-line overrides to a scenario configuration.'''
    if args.fluid is not None:
        tankConfig.fluidPreset = args.fluid
    if args.particles is not None:
        tankConfig.nParticles = args.particles
    if args.steps is not None:
        tankConfig.nSteps = args.steps
    if args.drop is not None:
        tankConfig.bodyKinds = list(args.drop)
    if args.material is not None:
        tankConfig.bodyMaterial = args.material
    if args.neighbor_search is not None:
        tankConfig.neighborSearch = args.neighbor_search
    if args.seed is not None:
        tankConfig.seed = args.seed
    return tankConfig


#--------------------------------------------------------------------#
# -- Runner Class -- #
#--------------------------------------------------------------------#

class SandboxRunner:
    '''
    Runs a fluid sandbox scenario and stores results.

    Handles the full pipeline: scenario setup, simulation loop with
    progress reporting, and optional frame export. A run that
    diverges is paused at the offending step; frames recorded up to
    that point are still exported.
    '''

    def __init__(self) -> None:
        self._exporter: FrameExporter = FrameExporter()

    @property
    def exporter(self) -> FrameExporter:
        '''Frame exporter holding the recorded frames.'''
        return self._exporter

    def _recordFrame(self, result: StepResult) -> bool:
        '''Record a frame; False if the state has diverged.'''
        try:
            self._exporter.addFrame(result)
        except SimulationDivergedError as error:
            logger.error('Simulation diverged, pausing: %s', error)
            return False
        return True

    def runFromConfig(
        self,
        configPath: str,
        doExport: bool = True,
        exportDir: str = 'FluidSandbox/output',
        doPlot: bool = False,
        overrides: argparse.Namespace | None = None,
    ) -> dict:
        '''
        Run a drop tank from a JSON configuration file.

        Command-line overrides win over the file. A --fluid override
        replaces the fluid properties loaded from the file with the preset.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file
        doExport : bool
            Whether to export frame data
        exportDir : str
            Output directory for frame export
        doPlot : bool
            Whether to write the diagnostics report
        overrides : argparse.Namespace | None
            Parsed command-line arguments to apply on top of the file

        Returns:
        --------
        dict : Simulation results summary
        '''
        tankConfig = DropTankConfig.fromJson(configPath)
        params = SimulationParameters.fromJson(configPath)
        if overrides is not None:
            tankConfig = applyOverrides(tankConfig, overrides)
            if overrides.fluid is not None:
                params = params.withFluidPreset(overrides.fluid)
            logger.info('Loaded %s with command-line overrides', configPath)
        return self.runDropTank(
            tankConfig, params=params, doExport=doExport, exportDir=exportDir, doPlot=doPlot,
        )

    def runDropTank(
        self,
        tankConfig: DropTankConfig,
        params: SimulationParameters | None = None,
        doExport: bool = True,
        exportDir: str = 'FluidSandbox/output',
        doPlot: bool = False,
    ) -> dict:
        '''
        Run a drop tank simulation.

        Parameters:
        -----------
        tankConfig : DropTankConfig
            Drop tank configuration
        params : SimulationParameters | None
            Fully loaded parameters (defaults to the fluid preset)
        doExport : bool
            Whether to export frame data
        exportDir : str
            Output directory for frame export
        doPlot : bool
            Whether to write the diagnostics report

        Returns:
        --------
        dict : Simulation results summary
        '''
        print()
        print('=' * 62)
        print('  FLUIDSANDBOX -- SPH DROP TANK SIMULATION')
        print('=' * 62)
        print()

        #--------------------------------------------------------------------#
        # Scenario Setup
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  SCENARIO SETUP')
        print('-' * 62)

        simParams, simulation = createDropTank(tankConfig, params)

        print(f'  Fluid:             {tankConfig.fluidPreset:>8s}')
        print(f'  Rest Density:      {simParams.restDensity:8.1f} kg/m^3')
        print(f'  Stiffness:         {simParams.stiffness:8.1f}')
        print(f'  Viscosity:         {simParams.viscosity:8.3f}')
        print(f'  Smoothing Radius:  {simParams.smoothingRadius:8.3f}')
        print(f'  Time Step:         {simParams.effectiveTimeStep:8.4f} s')
        print(f'  Neighbor Search:   {simParams.neighborSearch:>8s}')
        print(f'  Fluid Particles:   {simulation.particles.nParticles:8d}')
        print(f'  Rigid Bodies:      {len(simulation.bodies):8d}')
        for body in simulation.bodies:
            print(
                f'    #{body.bodyId:<3d} {body.kind.value:16s} '
                f'rho={body.density:8.1f}  y={body.position[1]:6.2f}'
            )
        print(f'  Steps:             {tankConfig.nSteps:8d}')
        print()

        #--------------------------------------------------------------------#
        # Simulation Loop
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  RUNNING SIMULATION')
        print('-' * 62)
        print()
        print(f'  {"Time":>8}  {"Step":>8}  {"MaxVel":>8}  {"Energy":>12}  {"Skipped":>8}  {"ms":>8}')
        print(f'  {"(s)":>8}  {"":>8}  {"(m/s)":>8}  {"(J)":>12}  {"":>8}  {"":>8}')
        print('  ' + '-' * 58)

        wallClockStart = timeModule.time()
        printInterval = max(1, tankConfig.nSteps // 20)
        outputInterval = max(1, tankConfig.outputInterval)

        paused = False
        finalResult = None
        for _ in range(tankConfig.nSteps):
            result = simulation.step(simParams)
            finalResult = result

            if result.step % outputInterval == 0 and not self._recordFrame(result):
                paused = True
                break

            if result.step % printInterval == 0:
                print(
                    f'  {result.time:8.4f}  {result.step:8d}  {result.maxSpeed:8.4f}  '
                    f'{result.kineticEnergy:12.4f}  {result.degenerateCount:8d}  '
                    f'{result.computeTimeMs:8.2f}'
                )

        wallClockSeconds = timeModule.time() - wallClockStart

        # Final frame
        if not paused and finalResult is not None and finalResult.step % outputInterval != 0:
            paused = not self._recordFrame(finalResult)

        print()
        if paused:
            print('  Simulation PAUSED: non-finite state detected.')
        else:
            print('  Simulation complete.')
        print(f'  Total steps:       {simulation.stepCount:8d}')
        print(f'  Wall-clock time:   {wallClockSeconds:8.1f} s')
        print(f'  Frames recorded:   {self._exporter.nFrames:8d}')
        print()

        #--------------------------------------------------------------------#
        # Export
        #--------------------------------------------------------------------#
        exportPath = None
        if doExport and self._exporter.nFrames > 0:
            print('-' * 62)
            print('  EXPORTING FRAME DATA')
            print('-' * 62)

            exportPath = self._exporter.export(
                params=simParams,
                outputDir=exportDir,
                scenarioName='dropTank',
            )
            print(f'  Exported to: {exportPath}')
            print()

        reportPath = None
        if doPlot and self._exporter.nFrames > 0:
            reportPath = writeDiagnosticsReport(
                self._exporter, simParams, outputDir=exportDir, scenarioName='dropTank',
            )
            print(f'  Diagnostics report: {reportPath}')
            print()

        #--------------------------------------------------------------------#
        # Summary
        #--------------------------------------------------------------------#
        print('=' * 62)
        print('  SIMULATION SUMMARY')
        print('=' * 62)
        if finalResult is not None and not paused:
            print(f'  Final KE:          {finalResult.kineticEnergy:12.4f} J')
            print(f'  Max Velocity:      {finalResult.maxSpeed:8.4f} m/s')
            print(f'  Max Density Error: {simulation.particles.maxDensityError(simParams.restDensity) * 100:8.1f} %')
            for transform in finalResult.bodies:
                x, y, z = transform.position
                print(f'  Body #{transform.bodyId:<3d} {transform.kind:16s} ({x:6.2f}, {y:6.2f}, {z:6.2f})')
        print('=' * 62)
        print()

        return {
            'finalResult': finalResult,
            'paused': paused,
            'wallClockSeconds': wallClockSeconds,
            'nFrames': self._exporter.nFrames,
            'exportPath': exportPath,
            'reportPath': reportPath,
        }


#--------------------------------------------------------------------#
# -- CLI Entry Point -- #
#--------------------------------------------------------------------#

def main(argv: list[str] | None = None) -> None:
    '''CLI entry point.'''
    parser = buildParser()
    args = parser.parse_args(argv)

    setupLogging(args.log_level)

    runner = SandboxRunner()

    if args.config:
        runner.runFromConfig(
            args.config,
            doExport=not args.no_export,
            exportDir=args.output_dir,
            doPlot=args.plot,
            overrides=args,
        )
    else:
        tankConfig = applyOverrides(scenarioPresets[args.preset](), args)
        runner.runDropTank(
            tankConfig,
            doExport=not args.no_export,
            exportDir=args.output_dir,
            doPlot=args.plot,
        )


if __name__ == '__main__':
    main()
