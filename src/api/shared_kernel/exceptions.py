"""Exceptions shared across bounded contexts."""


class StorageError(Exception):
    """Raised by adapters when the underlying storage or transport fails.

    This indicates an infrastructure problem (database unreachable, remote
    service error), not a caller mistake. Callers retry it on their own
    cadence rather than surfacing it as a validation error.
    """

    pass
