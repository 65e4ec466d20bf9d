# -- Physical Constants for the Fluid Sandbox -- #

'''
Physical and numerical constants for the SPH fluid sandbox and its
interactive rigid bodies. Values are in simulation units (roughly SI,
with the domain measured in scene units of about a metre).

References:
-----------
Mueller, Charypar & Gross (2003) -- Particle-based fluid simulation
    for interactive applications
'''

import math

#--------------------------------------------------------------------#
# -- Fluid Defaults -- #
#--------------------------------------------------------------------#

# Mass carried by every fluid particle
particleMass: float = 1.0

# Rest density rho_0 of the fluid (water) [kg/m^3]
restDensity: float = 1000.0

# Smoothing radius h (kernel support)
smoothingRadius: float = 0.5

# Equation of state constant: p = k * (rho - rho_0)
stiffness: float = 2000.0

# Viscosity coefficient mu
viscosity: float = 0.3

# Gravitational acceleration along y for fluid and bodies [m/s^2]
gravity: float = -9.8

# Base time step [s]
timeStep: float = 0.003

# Velocity damping on boundary and solid contact
damping: float = 0.6

# Domain corners
boundMin: tuple[float, float, float] = (-8.0, -5.0, -8.0)
boundMax: tuple[float, float, float] = (8.0, 12.0, 8.0)

#--------------------------------------------------------------------#
# -- Particle Numerics -- #
#--------------------------------------------------------------------#

# Particles with density below this floor skip integration for a step
densityFloor: float = 1.0

# Horizontal friction applied to particles touching the floor
floorFriction: float = 0.95

# Extra offset past a solid's surface when pushing particles out
surfaceOffset: float = 1e-4

# Initial cube formation
initialSpacing: float = 0.3
initialHeight: float = 5.0
initialPositionJitter: float = 0.1
initialVelocityJitter: float = 0.5

#--------------------------------------------------------------------#
# -- Rigid Body Dynamics -- #
#--------------------------------------------------------------------#

# Fraction of gravity cancelled per unit of (fluid / body) density ratio
buoyancyScale: float = 0.8

# Drag: v *= 1 - dragCoefficient * min(rho_f / dragReferenceDensity, maxDragFactor) * dt * dragFrameRate
dragCoefficient: float = 0.01
dragReferenceDensity: float = 1000.0
maxDragFactor: float = 2.0
dragFrameRate: float = 60.0

# Geometric decay of angular velocity per step
angularDamping: float = 0.98

# Floor and ceiling restitution for bodies
bodyVerticalRestitution: float = 0.2

# Side wall restitution for bodies
bodyWallRestitution: float = 0.3

# Lateral velocity kept on floor contact
bodyFloorFriction: float = 0.8

# Vertical speed above which a landing converts horizontal motion into spin
impactThreshold: float = 0.1

# Settling: below these speeds a grounded body snaps toward a resting pose
settleLinearSpeed: float = 0.5
settleAngularSpeed: float = 1.0
alignSpeed: float = 0.1
snapAngle: float = math.pi / 2.0
settleAngularDamping: float = 0.5

#--------------------------------------------------------------------#
# -- Rigid Body Collisions -- #
#--------------------------------------------------------------------#

# Restitution for body-body impacts
bodyRestitution: float = 0.4

# Tangential friction factor for body-body impacts
bodyFriction: float = 0.3

# Angular velocity kept by both bodies after an impact
collisionAngularDamping: float = 0.7

# Torque injected from (normal x relative velocity)
collisionTorqueScale: float = 0.01

# Box-like collision radius = boxRadiusScale * |size|
boxRadiusScale: float = 0.6

# Pairs closer than this are skipped (no usable normal)
minSeparation: float = 1e-3

# Body-body resolution passes per frame (one primary plus anti-tunneling)
rigidCollisionPasses: int = 4

#--------------------------------------------------------------------#
# -- Object Defaults -- #
#--------------------------------------------------------------------#

# Default body material density (aluminium) [kg/m^3]
bodyDensity: float = 2700.0

# Drop position: x, z uniform in +-dropSpread/2, y = dropHeight
dropHeight: float = 10.0
dropSpread: float = 4.0

# Named body materials [kg/m^3]
bodyMaterials: dict[str, float] = {
    'wood': 600.0,
    'ice': 917.0,
    'plastic': 1200.0,
    'aluminium': 2700.0,
    'steel': 7850.0,
    'lead': 11340.0,
    'gold': 19300.0,
}

#--------------------------------------------------------------------#
# -- Built-in Fluid Materials -- #
#--------------------------------------------------------------------#

fluidPresets: dict[str, dict[str, float]] = {
    'water': {'restDensity': 1000.0, 'stiffness': 2000.0, 'viscosity': 0.3},
    'honey': {'restDensity': 1400.0, 'stiffness': 3000.0, 'viscosity': 0.85},
    'oil': {'restDensity': 900.0, 'stiffness': 1800.0, 'viscosity': 0.5},
    'mercury': {'restDensity': 13600.0, 'stiffness': 5000.0, 'viscosity': 0.15},
    'air': {'restDensity': 1.2, 'stiffness': 100.0, 'viscosity': 0.01},
    'gel': {'restDensity': 1100.0, 'stiffness': 2500.0, 'viscosity': 0.95},
}
