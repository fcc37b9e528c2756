"""
Domain exceptions raised by repositories and services.

Routers translate these into HTTP responses; anything else reaching the
application boundary becomes a generic 500.
"""


class InvestTrackerError(Exception):
    """Base class for all investment tracker errors."""


class NotFoundError(InvestTrackerError):
    """The requested investment (by id or name) does not exist for the owner."""


class ConflictError(InvestTrackerError):
    """The operation would create a duplicate holding."""


class StorageError(InvestTrackerError):
    """The backing store could not be read or written."""
