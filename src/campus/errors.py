"""
Error taxonomy for the Campus backend.

Lookups that find nothing are not errors: they resolve to ``None``.
"""


class CampusError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(CampusError):
    """An argument is malformed (for example an id that is not an integer)."""


class ReferentialError(CampusError):
    """A write references a related row that does not exist."""


class GatewayError(CampusError):
    """Any other failure of the backing store."""
