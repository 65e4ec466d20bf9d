# -- Simulation Scenarios Package -- #

'''
Pre-configured sandbox scenarios.

Each scenario provides the initial fluid layout, the bodies to drop,
and the parameters for a specific setup.
'''

from FluidSandbox.scenarios.dropTank import DropTankConfig, createDropTank
