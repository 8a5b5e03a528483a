"""Custom near2far exceptions"""

from .log import log


class Near2FarError(ValueError):
    """Any error in near2far"""

    def __init__(self, message: str = None):
        """Log just the error message and then raise the Exception."""
        super().__init__(message)
        log.error(message)


class ValidationError(Near2FarError):
    """Error when constructing near2far components."""


class SetupError(Near2FarError):
    """Error regarding the setup of the components (mismatched surfaces, queries, etc)."""


class InvalidConfiguration(SetupError):
    """Degenerate surface, empty or invalid frequency set, or mismatched dimensionality."""


class UnsupportedFrequency(Near2FarError):
    """A queried frequency is not part of the frequencies the near fields were recorded at."""


class AccumulationError(Near2FarError):
    """Error while streaming time-domain fields into a running discrete Fourier transform."""


class FileError(Near2FarError):
    """Error reading or writing to file."""


class DataError(Near2FarError):
    """Error accessing data."""
