"""
errors.py — Run configuration errors
====================================
Raised while a run is being (re)initialised, never from inside step().
"""


class ConfigurationError(ValueError):
    """A run cannot start: unknown algorithm, missing start/target node, bad input."""
