"""near2far package imports"""

# geometry and medium
from .components.geometry import Box
from .components.medium import Medium

# frequencies and surfaces
from .components.frequencies import FrequencySet
from .components.surface import NearFieldPatch, NearFieldRegion, PatchGrid

# running transforms
from .components.dft import AccumulationState, register, absorb, finalize, merge

# time stepping
from .components.run import TimeSteppingEngine, sample_fields, run
from .components.run import StopAfterTime, StopAfterSources, StopWhenFieldsDecayed

# green's functions
from .components.green import scalar_green, fields_from_currents, dipole_fields

# projection
from .components.projector import FarFieldProjector, FarFieldCartesianQuery, FarFieldAngleQuery

# flux
from .components.flux import far_field_flux_plane, far_field_flux_box
from .components.flux import far_field_flux_circle, far_field_flux_sphere, near_field_flux

# data
from .components.data.data_array import SurfaceFieldDataArray, FluxDataArray
from .components.data.data_array import FarFieldCartesianDataArray, FarFieldAngleDataArray
from .components.data.spectrum import PatchSpectrum, FrozenSpectrum
from .components.data.far_field import FarFieldCartesianData, FarFieldAngleData

# functional interface
from .api import add_near_field_region, get_far_field, get_far_field_grid, get_flux
from .api import output_far_fields

# constants imported as `C_0 = n2f.C_0` or `n2f.constants.C_0`
from .constants import C_0, EPSILON_0, ETA_0, MU_0, inf

# exceptions
from .exceptions import Near2FarError, InvalidConfiguration, UnsupportedFrequency
from .exceptions import AccumulationError, SetupError, DataError, FileError

# logging and config
from .log import log, set_logging_console, set_logging_file
from .config import config

# version
from .version import __version__

__all__ = [
    "Box",
    "Medium",
    "FrequencySet",
    "NearFieldPatch",
    "NearFieldRegion",
    "PatchGrid",
    "AccumulationState",
    "register",
    "absorb",
    "finalize",
    "merge",
    "TimeSteppingEngine",
    "sample_fields",
    "run",
    "StopAfterTime",
    "StopAfterSources",
    "StopWhenFieldsDecayed",
    "scalar_green",
    "fields_from_currents",
    "dipole_fields",
    "FarFieldProjector",
    "FarFieldCartesianQuery",
    "FarFieldAngleQuery",
    "far_field_flux_plane",
    "far_field_flux_box",
    "far_field_flux_circle",
    "far_field_flux_sphere",
    "near_field_flux",
    "SurfaceFieldDataArray",
    "FluxDataArray",
    "FarFieldCartesianDataArray",
    "FarFieldAngleDataArray",
    "PatchSpectrum",
    "FrozenSpectrum",
    "FarFieldCartesianData",
    "FarFieldAngleData",
    "add_near_field_region",
    "get_far_field",
    "get_far_field_grid",
    "get_flux",
    "output_far_fields",
    "C_0",
    "EPSILON_0",
    "ETA_0",
    "MU_0",
    "inf",
    "Near2FarError",
    "InvalidConfiguration",
    "UnsupportedFrequency",
    "AccumulationError",
    "SetupError",
    "DataError",
    "FileError",
    "log",
    "set_logging_console",
    "set_logging_file",
    "config",
    "__version__",
]

log.debug(f"Using near2far version: {__version__}")
