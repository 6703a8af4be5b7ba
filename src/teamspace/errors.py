"""Error taxonomy for TeamSpace operations.

Every error a handler raises on purpose derives from ``TeamSpaceError`` and
carries a ``kind`` the HTTP layer maps to a status code. Anything else that
escapes a handler is an unexpected failure.
"""


class TeamSpaceError(Exception):
    """Base exception for all caller-recoverable TeamSpace errors."""

    kind = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFoundError(TeamSpaceError):
    """A team, member or invite token does not resolve."""

    kind = "not_found"


class UnauthorizedError(TeamSpaceError):
    """The acting user lacks admin rights for a privileged operation."""

    kind = "forbidden"


class InvalidStateError(TeamSpaceError):
    """The request conflicts with the current team state (expired token, duplicate join)."""

    kind = "invalid_state"


class ConcurrencyConflictError(TeamSpaceError):
    """The team was modified by another request since it was loaded."""

    kind = "conflict"
