# -- Frame Export and Runner Tests -- #

'''
JSON frame export, divergence detection at the export boundary, and
the command-line runner end to end on tiny scenarios.
'''

import json
import logging
import os

import numpy as np
import pytest

from FluidSandbox import constants as const
from FluidSandbox.export.frameExporter import FrameExporter
from FluidSandbox.runner import SandboxRunner, main
from FluidSandbox.scenarios.dropTank import DropTankConfig
from FluidSandbox.simulation import SandboxSimulation
from FluidSandbox.sph.protocols import SimulationDivergedError, SimulationParameters


######################################################################
# -- Frame Exporter -- #
######################################################################

def testExportWritesFrames(params, tempOutputDir):
    simulation = SandboxSimulation(8)
    simulation.dropBody('cube')
    exporter = FrameExporter()
    for _ in range(3):
        exporter.addFrame(simulation.step(params))

    path = exporter.export(params, outputDir=str(tempOutputDir), scenarioName='unit')

    assert os.path.exists(path)
    with open(path, 'r') as f:
        data = json.load(f)
    assert data['meta']['type'] == 'fluidSandbox'
    assert data['meta']['nFrames'] == 3
    assert data['meta']['nParticles'] == 8
    assert len(data['frames'][0]['speeds']) == 8
    assert data['frames'][2]['bodies'][0]['kind'] == 'cube'
    assert len(data['energy']['kinetic']) == 3


def testNonFiniteFrameRaises(params):
    simulation = SandboxSimulation(8)
    result = simulation.step(params)
    result.positions = np.array(result.positions)
    result.positions[3, 1] = np.nan

    exporter = FrameExporter()
    with pytest.raises(SimulationDivergedError):
        exporter.addFrame(result)
    assert exporter.nFrames == 0


######################################################################
# -- Runner -- #
######################################################################

def testRunnerCompletes(tempOutputDir):
    tankConfig = DropTankConfig(nParticles=8, bodyKinds=['sphere'], nSteps=20, outputInterval=5)

    summary = SandboxRunner().runDropTank(tankConfig, exportDir=str(tempOutputDir))

    assert not summary['paused']
    assert summary['finalResult'].step == 20
    assert summary['nFrames'] == 4
    assert os.path.exists(summary['exportPath'])


def testRunnerPausesOnDivergence(tempOutputDir, caplog):
    params = SimulationParameters(timeStep=float('nan'))
    tankConfig = DropTankConfig(nParticles=8, bodyKinds=[], nSteps=10, outputInterval=1)

    with caplog.at_level(logging.ERROR, logger='FluidSandbox'):
        summary = SandboxRunner().runDropTank(tankConfig, params=params, exportDir=str(tempOutputDir))

    assert summary['paused']
    assert summary['finalResult'].step == 1
    assert summary['exportPath'] is None
    assert any('diverged' in record.message for record in caplog.records)


def testMainRunsPreset(tempOutputDir, capsys):
    main([
        '--preset', 'settlingCube',
        '--steps', '5',
        '--drop', 'sphere',
        '--fluid', 'honey',
        '--output-dir', str(tempOutputDir),
        '--plot',
    ])

    out = capsys.readouterr().out
    assert 'SIMULATION SUMMARY' in out
    assert 'honey' in out
    # Frame JSON plus diagnostics report
    assert len(os.listdir(tempOutputDir)) == 2


def testCommandLineOverridesConfigFile(tmp_path, tempOutputDir):
    configPath = tmp_path / 'tank.json'
    configPath.write_text(json.dumps({
        'fluid': {'preset': 'oil'},
        'scenario': {'particles': 27, 'bodies': ['sphere'], 'steps': 10},
    }))

    main([
        '--config', str(configPath),
        '--particles', '8',
        '--steps', '3',
        '--drop', 'cube',
        '--fluid', 'honey',
        '--output-dir', str(tempOutputDir),
    ])

    (exported,) = os.listdir(tempOutputDir)
    with open(os.path.join(tempOutputDir, exported), 'r') as f:
        data = json.load(f)
    assert data['meta']['nParticles'] == 8
    assert data['frames'][-1]['step'] == 3
    assert [b['kind'] for b in data['frames'][-1]['bodies']] == ['cube']
    assert data['config']['restDensity'] == const.fluidPresets['honey']['restDensity']
