# -- SPH Smoothing Kernels -- #

'''
Smoothing kernel functions for SPH interpolation in 3D.

Implements the three kernels of Mueller et al. (2003), each with
compact support on [0, h]:

    poly6               W(r, h)         -- density summation
    spiky gradient      nabla_W(r, h)   -- pressure force
    viscosity Laplacian nabla^2_W(r, h) -- viscous force

All three vanish at r = h, so a neighbor crossing the support
radius enters or leaves the sums continuously. The functions know
nothing about particle indices; callers enumerate the pairs.

References:
-----------
Mueller, Charypar & Gross (2003) -- Particle-based fluid simulation
    for interactive applications
'''

from __future__ import annotations

import math

import numpy as np


######################################################################
# -- Normalization Constants -- #
######################################################################

def poly6Coefficient(h: float) -> float:
    '''Normalization 315 / (64 * pi * h^9) of the poly6 kernel.'''
    return 315.0 / (64.0 * math.pi * h ** 9)


def spikyCoefficient(h: float) -> float:
    '''Normalization 45 / (pi * h^6) shared by spiky and viscosity kernels.'''
    return 45.0 / (math.pi * h ** 6)


######################################################################
# -- Scalar Kernels -- #
######################################################################

def poly6(r: float, h: float) -> float:
    '''
    Evaluate the poly6 density kernel W(r, h).

    W(r, h) = 315 / (64 * pi * h^9) * (h^2 - r^2)^3    for 0 <= r <= h

    Parameters:
    -----------
    r : float
        Distance between particles
    h : float
        Smoothing radius

    Returns:
    --------
    float : Kernel value
    '''
    if r < 0.0 or r > h:
        return 0.0
    term = h * h - r * r
    return poly6Coefficient(h) * term * term * term


def spikyGradient(rVec: np.ndarray, h: float) -> np.ndarray:
    '''
    Evaluate the spiky kernel gradient nabla_W(rVec, h).

    nabla_W = -45 / (pi * h^6) * (h - r)^2 * rVec / r    for 0 < r <= h

    The direction is undefined at r = 0, where the contribution is
    taken as zero.

    Parameters:
    -----------
    rVec : np.ndarray
        Displacement x_i - x_j, shape (3,)
    h : float
        Smoothing radius

    Returns:
    --------
    np.ndarray : Gradient vector, shape (3,)
    '''
    r = float(np.linalg.norm(rVec))
    if r <= 0.0 or r > h:
        return np.zeros_like(rVec, dtype=float)
    return -spikyCoefficient(h) * (h - r) * (h - r) * rVec / r


def viscosityLaplacian(r: float, h: float) -> float:
    '''
    Evaluate the viscosity kernel Laplacian nabla^2_W(r, h).

    nabla^2_W = 45 / (pi * h^6) * (h - r)    for 0 <= r <= h

    Parameters:
    -----------
    r : float
        Distance between particles
    h : float
        Smoothing radius

    Returns:
    --------
    float : Laplacian value
    '''
    if r < 0.0 or r > h:
        return 0.0
    return spikyCoefficient(h) * (h - r)


######################################################################
# -- Vectorized (Batch) Operations -- #
######################################################################

def poly6Batch(distances: np.ndarray, h: float) -> np.ndarray:
    '''
    Evaluate W(r, h) for an array of distances.

    Parameters:
    -----------
    distances : np.ndarray
        Pair distances, shape (M,)
    h : float
        Smoothing radius

    Returns:
    --------
    np.ndarray : Kernel values, shape (M,)
    '''
    inside = (distances >= 0.0) & (distances <= h)
    term = np.where(inside, h * h - distances * distances, 0.0)
    return poly6Coefficient(h) * term * term * term


def spikyGradientBatch(
    drVecs: np.ndarray, distances: np.ndarray, h: float
) -> np.ndarray:
    '''
    Evaluate the spiky gradient for an array of particle pairs.

    Parameters:
    -----------
    drVecs : np.ndarray
        Displacements x_i - x_j, shape (M, 3)
    distances : np.ndarray
        Distances |drVecs|, shape (M,)
    h : float
        Smoothing radius

    Returns:
    --------
    np.ndarray : Gradient vectors, shape (M, 3)
    '''
    active = (distances > 0.0) & (distances <= h)
    safeDistances = np.where(active, distances, 1.0)
    hMinusR = np.where(active, h - distances, 0.0)
    scale = -spikyCoefficient(h) * hMinusR * hMinusR / safeDistances
    return scale[:, np.newaxis] * drVecs


def viscosityLaplacianBatch(distances: np.ndarray, h: float) -> np.ndarray:
    '''
    Evaluate nabla^2_W(r, h) for an array of distances.

    Parameters:
    -----------
    distances : np.ndarray
        Pair distances, shape (M,)
    h : float
        Smoothing radius

    Returns:
    --------
    np.ndarray : Laplacian values, shape (M,)
    '''
    inside = (distances >= 0.0) & (distances <= h)
    return np.where(inside, spikyCoefficient(h) * (h - distances), 0.0)
