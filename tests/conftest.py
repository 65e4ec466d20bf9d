# -- Shared Test Fixtures -- #

'''
Pytest configuration and shared fixtures for the fluid sandbox tests.
'''

import numpy as np
import pytest

from FluidSandbox.sph.boundaryHandling import BoundaryEnforcer
from FluidSandbox.sph.protocols import SimulationParameters


@pytest.fixture
def params():
    '''Default water parameters.'''
    return SimulationParameters()


@pytest.fixture
def boundary(params):
    '''Domain walls for the default parameters.'''
    return BoundaryEnforcer(params.boundMin, params.boundMax, params.damping)


@pytest.fixture
def rng():
    '''Seeded generator for random test data.'''
    return np.random.default_rng(1234)


@pytest.fixture
def clusterPositions(rng):
    '''Sixty particles scattered in a 1.5-unit box, dense enough to interact.'''
    return rng.random((60, 3)) * 1.5


@pytest.fixture
def tempOutputDir(tmp_path):
    '''Temporary directory for exported frames.'''
    return tmp_path / 'output'
