"""Domain aggregates for the membership context.

Aggregates are the core business objects containing state and business logic.
They enforce invariants and business rules without depending on infrastructure.
"""

from membership.domain.aggregates.group_type import GroupType
from membership.domain.aggregates.membership import Membership

__all__ = [
    "GroupType",
    "Membership",
]
