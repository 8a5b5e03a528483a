"""Version of the near2far package."""

__version__ = "0.3.0"
