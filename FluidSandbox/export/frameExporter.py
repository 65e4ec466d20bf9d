# -- Sandbox Frame Exporter -- #

'''
Exports fluid sandbox frames as JSON for an external renderer.

Collects particle and rigid body snapshots during a run and writes
them to a single JSON file. This is the boundary where simulation
state leaves the core, so every frame is checked for non-finite
values on the way in.

The output stores particle positions, speed magnitudes for color
mapping, body transforms, and an energy history for each frame,
along with run metadata.
'''

from __future__ import annotations

import json
import logging
import os
from datetime import datetime

import numpy as np

from FluidSandbox.sph.protocols import (
    BodyTransform,
    SimulationDivergedError,
    SimulationParameters,
    StepResult,
)

logger = logging.getLogger(__name__)


def _bodyToDict(transform: BodyTransform) -> dict:
    return {
        'id': transform.bodyId,
        'kind': transform.kind,
        'position': np.round(transform.position, 6).tolist(),
        'rotation': np.round(transform.rotation, 6).tolist(),
        'scale': round(transform.scale, 6),
    }


class FrameExporter:
    '''
    Collects and exports sandbox frame data as JSON.

    Usage:
        exporter = FrameExporter()
        # During simulation loop:
        exporter.addFrame(result)
        # After simulation:
        exporter.export(params, outputDir='output')

    Output JSON format:
    {
        "meta": { "type": "fluidSandbox", "nFrames": 120, "created": "...", ... },
        "config": { "restDensity": 1000.0, "boundMin": [...], ... },
        "frames": [
            {
                "time": 0.0,
                "step": 0,
                "positions": [[x0, y0, z0], ...],
                "speeds": [s0, s1, ...],
                "bodies": [{"id": 0, "kind": "sphere", "position": [...], ...}]
            },
            ...
        ],
        "energy": { "times": [...], "kinetic": [...] }
    }
    '''

    def __init__(self) -> None:
        self._frames: list[dict] = []
        self._energyHistory: dict[str, list[float]] = {
            'times': [],
            'kinetic': [],
        }

    @property
    def nFrames(self) -> int:
        '''Number of collected frames.'''
        return len(self._frames)

    @property
    def frames(self) -> list[dict]:
        '''Collected frame dictionaries.'''
        return self._frames

    @property
    def energyHistory(self) -> dict[str, list[float]]:
        '''Kinetic energy per recorded frame, with its times.'''
        return self._energyHistory

    def addFrame(self, result: StepResult) -> None:
        '''
        Record a simulation frame.

        Parameters:
        -----------
        result : StepResult
            Step result to snapshot

        Raises:
        -------
        SimulationDivergedError : If particle or body state contains
            NaN or inf
        '''
        finite = (
            np.all(np.isfinite(result.positions))
            and np.all(np.isfinite(result.velocities))
            and all(
                np.all(np.isfinite(b.position)) and np.all(np.isfinite(b.rotation))
                for b in result.bodies
            )
        )
        if not finite:
            raise SimulationDivergedError(
                f'Non-finite state at step {result.step} (t={result.time:.4f} s)'
            )

        speeds = np.linalg.norm(result.velocities, axis=1)

        frame = {
            'time': round(result.time, 6),
            'step': result.step,
            'positions': np.round(result.positions, 6).tolist(),
            'speeds': np.round(speeds, 6).tolist(),
            'bodies': [_bodyToDict(b) for b in result.bodies],
        }
        self._frames.append(frame)

        self._energyHistory['times'].append(round(result.time, 6))
        self._energyHistory['kinetic'].append(round(result.kineticEnergy, 6))

    def export(
        self,
        params: SimulationParameters,
        outputDir: str = 'output',
        scenarioName: str = 'dropTank',
    ) -> str:
        '''
        Write all collected frames to a JSON file.

        Parameters:
        -----------
        params : SimulationParameters
            Configuration for metadata
        outputDir : str
            Output directory path
        scenarioName : str
            Scenario name for the filename

        Returns:
        --------
        str : Path to the exported JSON file
        '''
        os.makedirs(outputDir, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'fluidSandbox_{scenarioName}_{timestamp}.json'
        filepath = os.path.join(outputDir, filename)

        output = {
            'meta': {
                'type': 'fluidSandbox',
                'nFrames': len(self._frames),
                'nParticles': len(self._frames[0]['positions']) if self._frames else 0,
                'created': datetime.now().isoformat(),
            },
            'config': {
                'boundMin': params.boundMin.tolist(),
                'boundMax': params.boundMax.tolist(),
                'particleMass': params.particleMass,
                'restDensity': params.restDensity,
                'smoothingRadius': params.smoothingRadius,
                'stiffness': params.stiffness,
                'viscosity': params.viscosity,
                'timeStep': params.effectiveTimeStep,
            },
            'frames': self._frames,
            'energy': self._energyHistory,
        }

        with open(filepath, 'w') as f:
            json.dump(output, f, indent=None, separators=(',', ':'))

        logger.info('Wrote %d frames to %s', len(self._frames), filepath)
        return filepath
