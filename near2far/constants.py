"""Defines importable constants.

Attributes:
    inf (float): near2far representation of infinity.
    C_0 (float): Speed of light in vacuum [um/s]
    EPSILON_0 (float): Vacuum permittivity [F/um]
    MU_0 (float): Vacuum permeability [H/um]
    ETA_0 (float): Vacuum impedance
"""

import numpy as np

# fundamental constants (https://physics.nist.gov)
C_0 = 2.99792458e14
"""
Speed of light in vacuum [um/s]
"""

MU_0 = 1.25663706212e-12
"""
Vacuum permeability [H/um]
"""

EPSILON_0 = 1 / (MU_0 * C_0**2)
"""
Vacuum permittivity [F/um]
"""

#: Free space impedance
ETA_0 = np.sqrt(MU_0 / EPSILON_0)
"""
Vacuum impedance in Ohms
"""

# floating point precisions
fp_eps = np.finfo(np.float32).eps
"""
Floating point precision.
"""

inf = np.inf
"""
Representation of infinity used within near2far.
"""

# relative tolerance used when matching query frequencies against a registered set
FREQ_RTOL = 1e-9

# unit labels
HERTZ = "Hz"
"""
One cycle per second.
"""

SECOND = "sec"
"""
SI unit of time.
"""

MICROMETER = "um"
"""
One millionth (10^-6) of a meter.
"""

RADIAN = "rad"
"""
SI unit of angle.
"""

PERMITTIVITY = "None (relative permittivity)"
"""
Relative permittivity.
"""

PERMEABILITY = "None (relative permeability)"
"""
Relative permeability.
"""

RADPERMICRON = "rad/um"
"""
One radian per micrometer.
"""

PERMICRON = "1/um"
"""
Samples per micrometer.
"""

WATT = "W"
"""
SI unit of power.
"""
