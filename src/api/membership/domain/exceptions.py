"""Domain exceptions raised by membership aggregates.

These signal caller logic errors. They are never retried automatically.
"""


class InvalidTransitionError(ValueError):
    """Raised when a membership is asked to move to an unreachable state."""

    pass


class UnknownRoleError(ValueError):
    """Raised when a role name is not defined for the group's type."""

    pass
