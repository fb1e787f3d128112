"""Ports (interfaces) for the membership bounded context.

Ports define the contracts for repositories without specifying
implementation details. This allows for dependency inversion and makes the
domain layer independent of infrastructure.
"""

from membership.ports.exceptions import (
    ActionConfigurationError,
    ConflictError,
    NotFoundError,
    UnknownActionError,
)
from membership.ports.repositories import IGroupTypeRepository, IMembershipRepository

__all__ = [
    "ActionConfigurationError",
    "ConflictError",
    "IGroupTypeRepository",
    "IMembershipRepository",
    "NotFoundError",
    "UnknownActionError",
]
