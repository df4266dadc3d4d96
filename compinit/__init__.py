"""Bootstrap a directory into a devfile-based component."""

__version__ = "0.1.0"
