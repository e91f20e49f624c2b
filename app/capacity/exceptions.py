"""Exceptions raised by the capacity engine."""


class CapacityError(Exception):
    """Base class for capacity engine errors."""


class InvalidConfigurationError(CapacityError, ValueError):
    """A load configuration violates its invariants.

    Raised instead of silently clamping, so a misconfigured installation
    is noticed.
    """
