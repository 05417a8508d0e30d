"""Error kinds raised by the check-in core."""


class WellbeingError(Exception):
    """Base class for check-in core errors."""


class RecordValidationError(WellbeingError, ValueError):
    """Input rejected before it reaches the aggregation pipeline."""


class AuthorizationError(WellbeingError):
    """A remote call was attempted without an authenticated user."""


class RemoteUnavailableError(WellbeingError):
    """The remote record store could not be reached or failed."""


class RecordNotFoundError(WellbeingError):
    """The remote store has no record with the requested id."""
