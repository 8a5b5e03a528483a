""" Imports all near2far components """

# geometry
from .geometry import Box

# medium
from .medium import Medium

# frequencies
from .frequencies import FrequencySet

# surface
from .surface import NearFieldPatch, NearFieldRegion, PatchGrid

# running transforms
from .dft import AccumulationState, register, absorb, finalize, merge

# time stepping
from .run import TimeSteppingEngine, sample_fields, run
from .run import StopAfterTime, StopAfterSources, StopWhenFieldsDecayed

# green's functions
from .green import scalar_green, fields_from_currents, dipole_fields

# projection
from .projector import FarFieldProjector, FarFieldCartesianQuery, FarFieldAngleQuery

# flux
from .flux import far_field_flux_plane, far_field_flux_box
from .flux import far_field_flux_circle, far_field_flux_sphere, near_field_flux

# data
from .data.data_array import SurfaceFieldDataArray, FluxDataArray
from .data.data_array import FarFieldCartesianDataArray, FarFieldAngleDataArray
from .data.spectrum import PatchSpectrum, FrozenSpectrum
from .data.far_field import FarFieldCartesianData, FarFieldAngleData
