"""Exceptions for the membership bounded context.

These exceptions represent errors that can occur during repository and
action operations. They should be caught and handled by the presentation
layer.
"""


class ConflictError(Exception):
    """Raised when a membership for the same (user, group) already exists.

    The store guarantees at most one membership per pair, including under
    concurrent creation attempts. Not retried: it indicates a caller error.
    """

    pass


class NotFoundError(Exception):
    """Raised when an operation targets a membership or group type that does not exist.

    The delete action treats this as a no-op success; role and state
    mutations surface it.
    """

    pass


class UnknownActionError(Exception):
    """Raised when no membership action is registered under a plugin id."""

    pass


class ActionConfigurationError(ValueError):
    """Raised when an action is created with missing or invalid configuration."""

    pass
