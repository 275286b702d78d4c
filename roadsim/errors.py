"""
roadsim/errors.py
=================
Exception hierarchy raised by the simulation core.

Out-of-range speeds and positions are never errors (speeds clamp,
positions are stored as-is), and a missing front vehicle is an
infinite gap.  These exceptions only signal configuration or
programming mistakes.
"""


class RoadSimError(Exception):
    """Base class for every roadsim error."""


class InvalidParameter(RoadSimError, ValueError):
    """A constructor or setter received a value it cannot accept."""


class InvalidState(RoadSimError, RuntimeError):
    """An operation was called in a state that does not allow it."""


class ProfileError(InvalidParameter):
    """A vehicle profile resource is missing or malformed."""
