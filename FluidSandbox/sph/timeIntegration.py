# -- SPH Time Integration -- #

'''
Symplectic (semi-implicit) Euler integration of the particle field.

The kick uses a = F / rho and the drift uses the updated velocity.
Particles whose density has fallen below the floor are left alone
for the step: dividing by a near-zero density would blow up, and
such particles regain neighbors and rejoin on a later step.

References:
-----------
Monaghan (2005) -- Smoothed Particle Hydrodynamics
Hairer et al. (2003) -- Geometric Numerical Integration
'''

from __future__ import annotations

import numpy as np

from FluidSandbox import constants as const


class SymplecticEuler:
    '''
    Kick-drift integrator with a density floor.

        v(t+dt) = v(t) + F / rho * dt
        x(t+dt) = x(t) + v(t+dt) * dt

    Parameters:
    -----------
    densityFloor : float
        Particles with density below this value are skipped
    '''

    def __init__(self, densityFloor: float = const.densityFloor) -> None:
        self._densityFloor = densityFloor

    @property
    def densityFloor(self) -> float:
        '''Density below which particles are not integrated.'''
        return self._densityFloor

    def integrate(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        forces: np.ndarray,
        densities: np.ndarray,
        dt: float,
    ) -> int:
        '''
        Advance tracked particles by one time step, in place.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 3)
        velocities : np.ndarray
            Particle velocities, shape (N, 3)
        forces : np.ndarray
            Force accumulators, shape (N, 3)
        densities : np.ndarray
            Particle densities, shape (N,)
        dt : float
            Time step size [s]

        Returns:
        --------
        int : Number of particles skipped for low density
        '''
        tracked = densities >= self._densityFloor

        # Kick
        accelerations = forces[tracked] / densities[tracked, np.newaxis]
        velocities[tracked] += accelerations * dt

        # Drift
        positions[tracked] += velocities[tracked] * dt

        return int(len(densities) - np.count_nonzero(tracked))
