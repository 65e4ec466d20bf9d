# -- Rigid Body Shapes -- #

'''
Closed set of rigid body shape kinds and their geometric helpers.

Every kind belongs to one of three families that decide how it
collides and settles:

    SPHERICAL    sphere, torus, hollow sphere
                 radius = extent.x, never needs a resting pose
    CYLINDRICAL  cylinder, cone, boat, hollow cylinder
                 radius = extent.x, snaps upright or on its side
    BOX          cube, hollow cube
                 oriented box with half extents = extent / 2,
                 snaps onto its nearest face

Extents follow the (x, y, z) convention of the scene: for round
kinds x is the radius and y the height or tube radius.
'''

from __future__ import annotations

from enum import Enum

import numpy as np
from scipy.spatial.transform import Rotation


class ShapeFamily(Enum):
    '''Collision and settling behaviour shared by several shape kinds.'''

    SPHERICAL = 'spherical'
    CYLINDRICAL = 'cylindrical'
    BOX = 'box'


class ShapeKind(Enum):
    '''Shape tag of a rigid body.'''

    SPHERE = 'sphere'
    CUBE = 'cube'
    CYLINDER = 'cylinder'
    TORUS = 'torus'
    CONE = 'cone'
    BOAT = 'boat'
    HOLLOW_SPHERE = 'hollow-sphere'
    HOLLOW_CUBE = 'hollow-cube'
    HOLLOW_CYLINDER = 'hollow-cylinder'

    @property
    def family(self) -> ShapeFamily:
        '''Family deciding collision and settling rules.'''
        return _FAMILIES[self]

    @property
    def isRound(self) -> bool:
        '''True for kinds approximated by a scalar radius.'''
        return self.family is not ShapeFamily.BOX

    @property
    def isHollow(self) -> bool:
        '''True for the hollow variants.'''
        return self.value.startswith('hollow-')

    @property
    def defaultExtent(self) -> np.ndarray:
        '''Base (unscaled) extent used when a body is dropped.'''
        return np.array(_DEFAULT_EXTENTS[self], dtype=float)

    @classmethod
    def fromTag(cls, tag: str | ShapeKind) -> ShapeKind:
        '''
        Resolve a shape tag such as 'hollow-cube'.

        Raises:
        -------
        ValueError : If the tag is not a known shape kind
        '''
        if isinstance(tag, ShapeKind):
            return tag
        try:
            return cls(tag)
        except ValueError:
            raise ValueError(f'Unknown shape kind: {tag}') from None


_FAMILIES: dict[ShapeKind, ShapeFamily] = {
    ShapeKind.SPHERE: ShapeFamily.SPHERICAL,
    ShapeKind.TORUS: ShapeFamily.SPHERICAL,
    ShapeKind.HOLLOW_SPHERE: ShapeFamily.SPHERICAL,
    ShapeKind.CYLINDER: ShapeFamily.CYLINDRICAL,
    ShapeKind.CONE: ShapeFamily.CYLINDRICAL,
    ShapeKind.BOAT: ShapeFamily.CYLINDRICAL,
    ShapeKind.HOLLOW_CYLINDER: ShapeFamily.CYLINDRICAL,
    ShapeKind.CUBE: ShapeFamily.BOX,
    ShapeKind.HOLLOW_CUBE: ShapeFamily.BOX,
}

_DEFAULT_EXTENTS: dict[ShapeKind, tuple[float, float, float]] = {
    ShapeKind.SPHERE: (0.8, 0.8, 0.8),
    ShapeKind.CUBE: (1.5, 1.5, 1.5),
    ShapeKind.CYLINDER: (0.6, 1.5, 0.6),
    ShapeKind.TORUS: (0.8, 0.3, 0.3),
    ShapeKind.CONE: (0.8, 1.5, 0.8),
    ShapeKind.BOAT: (2.5, 0.6, 1.2),
    ShapeKind.HOLLOW_SPHERE: (1.0, 1.0, 1.0),
    ShapeKind.HOLLOW_CUBE: (1.5, 1.5, 1.5),
    ShapeKind.HOLLOW_CYLINDER: (0.7, 1.5, 0.7),
}


######################################################################
# -- Oriented Box Geometry -- #
######################################################################

# Unit corner signs of a box, shape (8, 3)
_CORNER_SIGNS = np.array(
    [[sx, sy, sz] for sz in (-1.0, 1.0) for sy in (-1.0, 1.0) for sx in (-1.0, 1.0)]
)


def boxCorners(halfExtents: np.ndarray) -> np.ndarray:
    '''Eight corners of an axis-aligned box centred at the origin.'''
    return _CORNER_SIGNS * halfExtents


def orientedHalfExtents(halfExtents: np.ndarray, eulerXyz: np.ndarray) -> np.ndarray:
    '''
    Per-axis world half extents of a rotated box.

    Rotates the eight corners by the intrinsic XYZ Euler angles and
    takes the largest absolute coordinate along each axis. A box
    turned 45 degrees about z stands taller than its static half
    height, and this is what its floor contact has to use.

    Parameters:
    -----------
    halfExtents : np.ndarray
        Unrotated half extents, shape (3,)
    eulerXyz : np.ndarray
        Rotation angles about x, y, z [rad], shape (3,)

    Returns:
    --------
    np.ndarray : World-axis half extents, shape (3,)
    '''
    rotated = Rotation.from_euler('XYZ', eulerXyz).apply(boxCorners(halfExtents))
    return np.max(np.abs(rotated), axis=0)
