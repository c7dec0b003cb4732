"""
Error kinds raised by the curvecloud engine.

Both kinds derive from ValueError so callers that only care about
"bad value" can keep catching the builtin.
"""


class CurveCloudError(Exception):
    """Base class for all curvecloud errors."""


class InvalidArgumentError(CurveCloudError, ValueError):
    """Bad curve id, particle count, interval, sensitivity or rate."""


class InvalidInputError(CurveCloudError, ValueError):
    """Malformed hand-landmark frame."""
