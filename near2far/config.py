"""Sets the configuration of the script, can be changed with `n2f.config.config_name = new_val`."""

import pydantic.v1 as pd

from .log import DEFAULT_LEVEL, LogLevel, set_log_suppression, set_logging_level


class Near2FarConfig(pd.BaseModel):
    """configuration of near2far"""

    class Config:
        """Config of the config."""

        arbitrary_types_allowed = False
        validate_all = True
        extra = "forbid"
        validate_assignment = True
        allow_population_by_field_name = True
        frozen = False

    logging_level: LogLevel = pd.Field(
        DEFAULT_LEVEL,
        title="Logging Level",
        description="The lowest level of logging output that will be displayed. "
        'Can be "DEBUG", "INFO", "WARNING", "ERROR", or "CRITICAL".',
    )

    log_suppression: bool = pd.Field(
        True,
        title="Log suppression",
        description="Enable or disable suppression of certain log messages when they are repeated "
        "for several elements.",
    )

    progress_bars: bool = pd.Field(
        True,
        title="Progress bars",
        description="Display a progress bar when a far field evaluation is split into more "
        "than one block of observation points.",
    )

    max_points_per_chunk: pd.PositiveInt = pd.Field(
        2_000_000,
        title="Maximum points per chunk",
        description="Upper bound on the number of (observation point, surface sample) pairs "
        "evaluated together in one vectorized block. Lower values use less memory.",
    )

    @pd.validator("logging_level", pre=True, always=True)
    def _set_logging_level(cls, val):
        """Set the logging level if logging_level is changed."""
        set_logging_level(val)
        return val

    @pd.validator("log_suppression", pre=True, always=True)
    def _set_log_suppression(cls, val):
        """Control log suppression when log_suppression is changed."""
        set_log_suppression(val)
        return val


# instance of the config that can be modified.
config = Near2FarConfig()
